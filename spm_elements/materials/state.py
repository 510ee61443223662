# 文件: spm_elements/materials/state.py
"""
材料状态管理

MembraneState: 面板积分点的状态容器
"""

from dataclasses import dataclass, field
import numpy as np


@dataclass
class MembraneState:
    """
    膜积分点状态容器

    Attributes:
        strain: 应变 [εx, εy, γxy]
        concrete_stress: 混凝土应力 [σx, σy, τxy]
        reinforcement_stress: 钢筋 (弥散) 应力 [σx, σy, τxy]
        concrete_stiffness: 混凝土割线刚度 (3,3)
        reinforcement_stiffness: 钢筋割线刚度 (3,3)
        cracked: 混凝土是否已开裂 (单调，不可恢复)

    Example:
        state = membrane.state
        committed = state.copy()  # 收敛后保存
    """

    strain: np.ndarray = field(default_factory=lambda: np.zeros(3))
    concrete_stress: np.ndarray = field(default_factory=lambda: np.zeros(3))
    reinforcement_stress: np.ndarray = field(default_factory=lambda: np.zeros(3))
    concrete_stiffness: np.ndarray = field(default_factory=lambda: np.zeros((3, 3)))
    reinforcement_stiffness: np.ndarray = field(default_factory=lambda: np.zeros((3, 3)))
    cracked: bool = False

    @property
    def stress(self) -> np.ndarray:
        """总应力"""
        return self.concrete_stress + self.reinforcement_stress

    @property
    def stiffness(self) -> np.ndarray:
        return self.concrete_stiffness + self.reinforcement_stiffness

    def copy(self) -> 'MembraneState':
        """
        深拷贝

        Returns:
            MembraneState: 独立的状态副本
        """
        return MembraneState(
            strain=self.strain.copy(),
            concrete_stress=self.concrete_stress.copy(),
            reinforcement_stress=self.reinforcement_stress.copy(),
            concrete_stiffness=self.concrete_stiffness.copy(),
            reinforcement_stiffness=self.reinforcement_stiffness.copy(),
            cracked=self.cracked,
        )

    def clone(self) -> 'MembraneState':
        """深拷贝 (copy 的别名)"""
        return self.copy()

    def __repr__(self) -> str:
        return (
            f"MembraneState(cracked={self.cracked}, "
            f"stress_max={np.max(np.abs(self.stress)):.2e})"
        )
