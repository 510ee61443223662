# 文件: spm_elements/stringer_nonlinear.py
"""
非线性纵筋单元

增量-迭代过程:
1. 由局部位移求当前广义应变 e1 = u2 - u1, e3 = u3 - u2
2. 相对上次提交状态的应变增量分为 num_strain_steps 个子步
3. 每个子步在四个积分点取样轴力 N1, (2N1+N3)/3, (N1+2N3)/3, N3，
   由应力-应变关系求 (e, de)，组装 2x2 柔度矩阵 F 并求力增量
4. 子步结束后将 N1, N3 限制在 [Nt, Nyr] 内 (塑性截断)
5. 结果保存为试探状态，commit_state() 后才成为提交状态
"""

import logging
from typing import List, Optional, Sequence, Tuple

import numpy as np

from .element import coerce_zero
from .exceptions import SingularStiffness
from .integration_point import IntegrationPoint
from .materials.concrete import ConcreteParameters
from .materials.reinforcement import UniaxialReinforcement
from .relations import StressStrainRelations, get_relations
from .stringer import Stringer, crack_opening

logger = logging.getLogger(__name__)


DEFAULT_CONFIG = {
    "num_strain_steps": 5,
    "root_tolerance": 1e-10,   # 应变求根精度
    "max_iterations": 1000,
    "zero_tolerance": 1e-6,
}

# 广义应变 → 局部位移
B_MATRIX = np.array([
    [-1.0, 1.0, 0.0],
    [0.0, -1.0, 1.0],
])


class NonlinearStringer(Stringer):
    """
    非线性纵筋单元

    职责：
    1. 管理四个积分点的开裂/屈服状态
    2. 由柔度法迭代求广义应力 (N1, N3)
    3. 区分试探状态 (每次迭代) 与提交状态 (收敛后)
    """

    def __init__(self, number: int, grips: Sequence, width: float, height: float,
                 concrete_parameters: ConcreteParameters,
                 reinforcement: Optional[UniaxialReinforcement] = None,
                 config: Optional[dict] = None):
        """
        Args:
            number: 单元编号
            grips: 3个夹持点
            width, height: 截面尺寸
            concrete_parameters: 混凝土参数 (含本构模型)
            reinforcement: 纵向钢筋
            config: 分析配置，覆盖 DEFAULT_CONFIG
        """
        self.config = {**DEFAULT_CONFIG, **(config or {})}
        self.zero_tolerance = self.config["zero_tolerance"]

        super().__init__(number, grips, width, height, concrete_parameters, reinforcement)

        self.relations: StressStrainRelations = get_relations(
            self.concrete, reinforcement, concrete_parameters.model,
            root_tolerance=self.config["root_tolerance"],
            max_iterations=self.config["max_iterations"],
            zero_tolerance=self.zero_tolerance,
        )

        initial = (0.0, 1 / self.relations.stiffness)
        ey = reinforcement.yield_strain if reinforcement else 0.0
        self.integration_points: List[IntegrationPoint] = [
            IntegrationPoint(self.concrete.ecr, ey, initial, index=i) for i in range(4)
        ]

        # 提交状态 (上一收敛步) 与试探状态 (当前迭代)
        self.generalized_stresses = (0.0, 0.0)
        self.generalized_strains = (0.0, 0.0)
        self.iteration_generalized_stresses = (0.0, 0.0)
        self.iteration_generalized_strains = (0.0, 0.0)

    # ------------------------------------------------------------------
    # 刚度
    # ------------------------------------------------------------------
    def invalidate(self):
        self.flexibility = self.initial_flexibility()
        super().invalidate()
        self.initial_local_stiffness = self.local_stiffness.copy()

    def initial_flexibility(self) -> np.ndarray:
        """
        初始柔度矩阵

        F11 = F22 = L / (3·EA), F12 = F11 / 2
        """
        EA = self.concrete.stiffness + (self.reinforcement.stiffness if self.reinforcement else 0.0)
        f11 = self.geometry.length / (3 * EA)
        return np.array([
            [f11, 0.5 * f11],
            [0.5 * f11, f11],
        ])

    def _calc_local_stiffness(self):
        """Kl = Bᵀ · F⁻¹ · B"""
        return B_MATRIX.T @ self._invert_flexibility(self.flexibility) @ B_MATRIX

    def _invert_flexibility(self, F: np.ndarray) -> np.ndarray:
        det = self._flexibility_determinant(F)
        return np.array([
            [F[1, 1], -F[0, 1]],
            [-F[1, 0], F[0, 0]],
        ]) / det

    def _flexibility_determinant(self, F: np.ndarray) -> float:
        det = F[0, 0] * F[1, 1] - F[0, 1] * F[1, 0]
        scale = abs(F[0, 0] * F[1, 1]) + abs(F[0, 1] * F[1, 0])
        if not np.isfinite(det) or abs(det) <= 1e-12 * scale:
            raise SingularStiffness(
                f"Stringer {self.number}: flexibility matrix is singular (det = {det:.3g})"
            )
        return det

    def update_stiffness(self):
        self.local_stiffness = self._calc_local_stiffness()

    # ------------------------------------------------------------------
    # 内力
    # ------------------------------------------------------------------
    def calculate_forces(self):
        """
        增量求解广义应力，结果保存为试探状态
        """
        steps = self.config["num_strain_steps"]

        N1, N3 = self.generalized_stresses
        e1i, e3i = self.generalized_strains

        ul = self.local_displacements
        e1 = ul[1] - ul[0]
        e3 = ul[2] - ul[1]

        de1 = (e1 - e1i) / steps
        de3 = (e3 - e3i) / steps

        (e1, e3), F = self.generalized_strains_from_forces((N1, N3))

        for _ in range(steps):
            det = self._flexibility_determinant(F)

            dN1 = (F[1, 1] * de1 - F[0, 1] * de3) / det
            dN3 = (-F[0, 1] * de1 + F[0, 0] * de3) / det

            N1 += dN1
            N3 += dN3

            (e1, e3), F = self.generalized_strains_from_forces((N1, N3))

        N1 = self.plastic_force(N1)
        N3 = self.plastic_force(N3)

        logger.debug(
            "Stringer %d: trial N1 = %.6g, N3 = %.6g, e1 = %.6g, e3 = %.6g",
            self.number, N1, N3, e1, e3,
        )

        self.flexibility = F
        self.iteration_generalized_stresses = (N1, N3)
        self.iteration_generalized_strains = (e1, e3)
        self.local_forces = coerce_zero(self._local_forces_from(N1, N3), self.zero_tolerance)

    def generalized_strains_from_forces(
        self, generalized_stresses: Tuple[float, float]
    ) -> Tuple[Tuple[float, float], np.ndarray]:
        """
        由 (N1, N3) 求广义应变和柔度矩阵

        Returns:
            ((e1, e3), F)
        """
        N1, N3 = generalized_stresses
        forces = [N1, (2 * N1 + N3) / 3, (N1 + 2 * N3) / 3, N3]

        e = np.zeros(4)
        de = np.zeros(4)
        for i, (N, point) in enumerate(zip(forces, self.integration_points)):
            e[i], de[i] = self.relations.stringer_strain(N, point)

        L = self.geometry.length
        e1 = L * (3 * e[0] + 6 * e[1] + 3 * e[2]) / 24
        e3 = L * (3 * e[1] + 6 * e[2] + 3 * e[3]) / 24

        f11 = L * (3 * de[0] + 4 * de[1] + de[2]) / 24
        f12 = L * (de[1] + de[2]) / 12
        f22 = L * (de[1] + 4 * de[2] + 3 * de[3]) / 24

        return (e1, e3), np.array([[f11, f12], [f12, f22]])

    def plastic_force(self, N: float) -> float:
        """限制在 [Nt, Nyr] 内"""
        return float(np.clip(N, self.relations.max_compressive_force, self.relations.yield_force))

    @staticmethod
    def _local_forces_from(N1: float, N3: float) -> np.ndarray:
        return np.array([-N1, N1 - N3, N3])

    def commit_state(self):
        """
        提交当前迭代状态

        在外部迭代收敛后调用，试探状态成为下一步的起点。
        """
        self.generalized_stresses = self.iteration_generalized_stresses
        self.generalized_strains = self.iteration_generalized_strains

    @property
    def committed_local_forces(self) -> np.ndarray:
        return self._local_forces_from(*self.generalized_stresses)

    @property
    def committed_forces(self) -> np.ndarray:
        return self.transformation_matrix.T @ self.committed_local_forces

    # ------------------------------------------------------------------
    # 结果
    # ------------------------------------------------------------------
    @property
    def fallback_count(self) -> int:
        """材料关系求逆回退的总次数"""
        return sum(p.fallback_count for p in self.integration_points)

    @property
    def strains(self) -> np.ndarray:
        """起点、中点、终点的应变 (二次位移插值)"""
        L = self.geometry.length
        B = np.array([
            [-3, 4, -1],
            [-1, 0, 1],
            [1, -4, 3],
        ]) / L
        return B @ self.local_displacements

    @property
    def crack_openings(self) -> np.ndarray:
        spacing = self.crack_spacing
        return np.array([crack_opening(e, spacing) for e in self.strains])

    def _plastic_strain(self, strain: float) -> float:
        ey = self.reinforcement.yield_strain if self.reinforcement else 0.0
        ec = self.concrete.ec
        L = self.geometry.length

        if strain > ey:
            return L / 8 * (strain - ey)
        if strain < ec:
            return L / 8 * (strain - ec)
        return 0.0

    @property
    def plastic_generalized_strains(self) -> Tuple[float, float]:
        e1, e3 = self.generalized_strains
        return self._plastic_strain(e1), self._plastic_strain(e3)

    @property
    def max_plastic_strain(self) -> Tuple[float, float]:
        """最大塑性应变 (受拉, 受压)"""
        ec = self.concrete.ec
        ecu = self.concrete.ecu
        ey = self.reinforcement.yield_strain if self.reinforcement else ec
        esu = self.reinforcement.steel.ultimate_strain if self.reinforcement else 0.01

        eput = 0.3 * esu * self.geometry.length
        et = max(ec, -ey)
        epuc = (ecu - et) * min(self.geometry.width, self.geometry.height)
        return eput, epuc
