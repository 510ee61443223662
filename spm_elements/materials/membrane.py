# 文件: spm_elements/materials/membrane.py
"""
钢筋混凝土膜 (面板积分点)

组合 BiaxialConcrete 和 WebReinforcement，
应力与刚度按混凝土/钢筋分开保存，供非线性面板的 Pc/Ps 矩阵使用。
"""

from typing import Optional, Tuple
import numpy as np

from .concrete import BiaxialConcrete, ConcreteParameters
from .interfaces import MembraneResult
from .reinforcement import WebReinforcement
from .state import MembraneState


class Membrane:
    """
    钢筋混凝土膜积分点

    Example:
        membrane = Membrane(ConcreteParameters(30), reinforcement)
        result = membrane.calculate(np.array([1e-4, -2e-4, 5e-4]))
        result.stress, result.tangent
    """

    def __init__(self, concrete_parameters: ConcreteParameters,
                 reinforcement: Optional[WebReinforcement] = None):
        self.concrete = BiaxialConcrete(concrete_parameters)
        self.reinforcement = reinforcement

        Dc, Ds = self.initial_stiffness
        self._state = MembraneState(concrete_stiffness=Dc, reinforcement_stiffness=Ds)

    @property
    def initial_stiffness(self) -> Tuple[np.ndarray, np.ndarray]:
        """初始刚度 (Dc, Ds)"""
        Ds = (
            self.reinforcement.initial_stiffness if self.reinforcement is not None
            else np.zeros((3, 3))
        )
        return self.concrete.initial_stiffness, Ds

    @property
    def state(self) -> MembraneState:
        return self._state

    def calculate(self, strain: np.ndarray) -> MembraneResult:
        """
        由应变计算应力和割线刚度

        Args:
            strain: [εx, εy, γxy]

        Returns:
            MembraneResult: 总应力、总刚度和新状态
        """
        strain = np.asarray(strain, dtype=float)

        sig_c, Dc = self.concrete.calculate(strain)
        if self.reinforcement is not None:
            sig_s, Ds = self.reinforcement.calculate(strain)
        else:
            sig_s, Ds = np.zeros(3), np.zeros((3, 3))

        self._state = MembraneState(
            strain=strain.copy(),
            concrete_stress=sig_c,
            reinforcement_stress=sig_s,
            concrete_stiffness=Dc,
            reinforcement_stiffness=Ds,
            cracked=self.concrete.cracked,
        )

        return MembraneResult(
            stress=self._state.stress,
            tangent=self._state.stiffness,
            state=self._state,
            is_cracked=self._state.cracked,
        )

    def restore(self, state: MembraneState):
        """恢复到给定状态 (含混凝土开裂标记)，用于放弃未收敛的试探步"""
        self._state = state.copy()
        self.concrete.cracked = state.cracked

    def __repr__(self) -> str:
        return f"Membrane({self.concrete!r}, {self.reinforcement!r})"
