# 文件: spm_elements/panel_nonlinear.py
"""
非线性面板单元

关键步骤:
1. 应变向量 ε = BA · u (12 分量: 4 个积分点 × [εx, εy, γxy])
2. 各积分点的膜材料计算混凝土/钢筋应力和割线刚度
3. 由应力计算 8 个夹持点力，并修正刚体分量
4. K = Q·Pc·Dc·BA + Q·Ps·Ds·BA

夹持点位移直接采用全局分量 (转换矩阵为单位阵)。
"""

import logging
from typing import List, Optional, Sequence

import numpy as np

from .element import coerce_zero
from .exceptions import DegenerateGeometry
from .geometry import PanelGeometry
from .materials.concrete import ConcreteParameters
from .materials.interfaces import MembraneMaterial, principal_strains, principal_stresses
from .materials.membrane import Membrane
from .materials.reinforcement import WebReinforcement
from .materials.state import MembraneState
from .panel import Panel
from .stringer import crack_opening

logger = logging.getLogger(__name__)


DEFAULT_CONFIG = {
    "zero_tolerance": 1e-6,
}


def block_diagonal(blocks: Sequence[np.ndarray]) -> np.ndarray:
    """将 4 个 3x3 矩阵组装为 12x12 块对角矩阵"""
    D = np.zeros((12, 12))
    for i, block in enumerate(blocks):
        D[3 * i:3 * i + 3, 3 * i:3 * i + 3] = block
    return D


class NonlinearPanel(Panel):
    """
    非线性面板单元

    职责：
    1. 预计算 BA、Q、Pc、Ps 矩阵 (只依赖几何)
    2. 管理 4 个膜积分点及其提交状态
    3. 计算夹持点力和割线刚度
    """

    def __init__(self, number: int, grips: Sequence, geometry: PanelGeometry,
                 concrete_parameters: ConcreteParameters,
                 reinforcement: Optional[WebReinforcement] = None,
                 config: Optional[dict] = None,
                 integration_points: Optional[Sequence[MembraneMaterial]] = None):
        """
        Args:
            number: 单元编号
            grips: 4个夹持点 (各边中点)
            geometry: 面板几何
            concrete_parameters: 混凝土参数
            reinforcement: 分布钢筋
            config: 分析配置，覆盖 DEFAULT_CONFIG
            integration_points: 自定义膜积分点 (默认由混凝土和钢筋创建)
        """
        self.config = {**DEFAULT_CONFIG, **(config or {})}
        self.zero_tolerance = self.config["zero_tolerance"]

        if integration_points is None:
            integration_points = [Membrane(concrete_parameters, reinforcement) for _ in range(4)]
        else:
            integration_points = list(integration_points)
            if len(integration_points) != 4:
                raise ValueError(f"Expected 4 integration points, got {len(integration_points)}")
            for point in integration_points:
                if not isinstance(point, MembraneMaterial):
                    raise TypeError(f"{point!r} does not implement the membrane interface")
        self.integration_points: List[MembraneMaterial] = integration_points

        super().__init__(number, grips, geometry, concrete_parameters, reinforcement)

        self.committed_states: List[MembraneState] = [p.state.clone() for p in self.integration_points]
        self.committed_local_forces = np.zeros(8)
        self.concrete_stresses = np.zeros(12)
        self.reinforcement_stresses = np.zeros(12)

    def _num_local_dofs(self):
        return 8

    # ------------------------------------------------------------------
    # 几何矩阵
    # ------------------------------------------------------------------
    def invalidate(self):
        self.BA = self._calc_BA()
        self.Q = self._calc_Q()
        self.Pc, self.Ps = self._calc_P()
        super().invalidate()
        self.initial_stiffness = self.local_stiffness.copy()

    def _calc_transformation_matrix(self):
        return np.eye(8)

    def _calc_BA(self) -> np.ndarray:
        """
        运动矩阵 BA = B · A (12x8)

        t1 = ab - cd
        t2 = (a² - c²)/2 + b² - d²
        t3 = (b² - d²)/2 + a² - c²
        """
        a, b, c, d = self.geometry.dimensions

        t1 = a * b - c * d
        t2 = 0.5 * (a * a - c * c) + b * b - d * d
        t3 = 0.5 * (b * b - d * d) + a * a - c * c

        if any(np.isclose(v, 0, atol=1e-9) for v in (a, b, t1, t2, t3)):
            raise DegenerateGeometry(
                f"Panel {self.number}: degenerate shape parameters "
                f"a={a:.4g}, b={b:.4g}, c={c:.4g}, d={d:.4g}"
            )

        A = np.array([
            [d / t1, 0, b / t1, 0, -d / t1, 0, -b / t1, 0],
            [0, -a / t1, 0, -c / t1, 0, a / t1, 0, c / t1],
            [-a, d, -c, b, a, -d, c, -b],
            [-a / t2, 0, a / t2, 0, -a / t2, 0, a / t2, 0],
            [0, b / t3, 0, -b / t3, 0, b / t3, 0, -b / t3],
        ], dtype=float)
        A[2] /= 2 * t1

        c_a, d_b = c / a, d / b
        B = np.array([
            [1, 0, 0, -c_a, 0],
            [0, 1, 0, 0, -1],
            [0, 0, 2, 0, 0],
            [1, 0, 0, 1, 0],
            [0, 1, 0, 0, d_b],
            [0, 0, 2, 0, 0],
            [1, 0, 0, c_a, 0],
            [0, 1, 0, 0, 1],
            [0, 0, 2, 0, 0],
            [1, 0, 0, -1, 0],
            [0, 1, 0, 0, -d_b],
            [0, 0, 2, 0, 0],
        ], dtype=float)

        return B @ A

    def _calc_Q(self) -> np.ndarray:
        """刚体修正矩阵 Q (8x8)"""
        a, b, c, d = self.geometry.dimensions
        t4 = a * a + b * b
        a2, b2, ab = a * a, b * b, a * b
        bc, ad, bd, ac = b * c, a * d, b * d, a * c

        Q = np.array([
            [a2, bc, bd - t4, -ab, -a2, -bc, -bd - t4, ab],
            [0, 2 * t4, 0, 0, 0, 0, 0, 0],
            [0, 0, 2 * t4, 0, 0, 0, 0, 0],
            [-ab, ac - t4, ad, b2, ab, -ac - t4, -ad, -b2],
            [-a2, -bc, -bd - t4, ab, a2, bc, bd - t4, -ab],
            [0, 0, 0, 0, 0, 2 * t4, 0, 0],
            [0, 0, 0, 0, 0, 0, 2 * t4, 0],
            [ab, -ac - t4, -ad, -b2, -ab, ac - t4, ad, b2],
        ], dtype=float)
        return Q / (2 * t4)

    def _calc_P(self):
        """
        平衡矩阵 Pc (混凝土) 和 Ps (钢筋)，均为 8x12

        混凝土的法向分量扣除相邻纵筋尺寸 s。
        """
        x = self.geometry.vertices.x_coordinates
        y = self.geometry.vertices.y_coordinates
        s = self.geometry.stringer_dimensions
        t = self.width

        Pc = np.zeros((8, 12))
        Ps = np.zeros((8, 12))

        Pc[0, 0] = Pc[1, 2] = t * (y[1] - y[0])
        Pc[0, 2] = t * (x[0] - x[1])
        Pc[1, 1] = t * (x[0] - x[1] + s[1] + s[3])

        Pc[2, 3] = t * (y[2] - y[1] - s[2] - s[0])
        Pc[2, 5] = Pc[3, 4] = t * (x[1] - x[2])
        Pc[3, 5] = t * (y[2] - y[1])

        Pc[4, 6] = Pc[5, 8] = t * (y[3] - y[2])
        Pc[4, 8] = t * (x[2] - x[3])
        Pc[5, 7] = t * (x[2] - x[3] - s[1] - s[3])

        Pc[6, 9] = t * (y[0] - y[3] + s[0] + s[2])
        Pc[6, 11] = Pc[7, 10] = t * (x[3] - x[0])
        Pc[7, 11] = t * (y[0] - y[3])

        Ps[0, 0] = Pc[0, 0]
        Ps[1, 1] = t * (x[0] - x[1])
        Ps[2, 3] = t * (y[2] - y[1])
        Ps[3, 4] = Pc[3, 4]
        Ps[4, 6] = Pc[4, 6]
        Ps[5, 7] = t * (x[2] - x[3])
        Ps[6, 9] = t * (y[0] - y[3])
        Ps[7, 10] = Pc[7, 10]

        return Pc, Ps

    def set_edge_stringer_dimensions(self, stringer_heights: Sequence[float]):
        """设置相邻纵筋高度并重新计算 P 矩阵"""
        self.geometry.set_edge_stringer_dimensions(stringer_heights)
        self.invalidate()

    # ------------------------------------------------------------------
    # 刚度
    # ------------------------------------------------------------------
    def _calc_local_stiffness(self):
        Dc_blocks, Ds_blocks = zip(*(p.initial_stiffness for p in self.integration_points))
        return self._assemble_stiffness(block_diagonal(Dc_blocks), block_diagonal(Ds_blocks))

    def _assemble_stiffness(self, Dc: np.ndarray, Ds: np.ndarray) -> np.ndarray:
        """K = Q·Pc·Dc·BA + Q·Ps·Ds·BA"""
        kc = self.Q @ self.Pc @ Dc @ self.BA
        ks = self.Q @ self.Ps @ Ds @ self.BA
        return kc + ks

    def update_stiffness(self):
        """由各积分点当前割线刚度重新组装"""
        states = [p.state for p in self.integration_points]
        Dc = block_diagonal([s.concrete_stiffness for s in states])
        Ds = block_diagonal([s.reinforcement_stiffness for s in states])
        self.local_stiffness = self._assemble_stiffness(Dc, Ds)

    # ------------------------------------------------------------------
    # 应力与内力
    # ------------------------------------------------------------------
    @property
    def strain_vector(self) -> np.ndarray:
        return self.BA @ self.displacements

    @property
    def stresses(self) -> np.ndarray:
        return self.concrete_stresses + self.reinforcement_stresses

    def calculate_stresses(self):
        """逐个积分点计算应力"""
        strains = self.strain_vector

        for i, point in enumerate(self.integration_points):
            point.calculate(strains[3 * i:3 * i + 3])

        self.concrete_stresses = np.concatenate(
            [p.state.concrete_stress for p in self.integration_points]
        )
        self.reinforcement_stresses = np.concatenate(
            [p.state.reinforcement_stress for p in self.integration_points]
        )

    def calculate_forces(self):
        """
        由积分点应力计算夹持点力

        f1..f8 按边计算，混凝土法向分量的有效长度扣除纵筋尺寸 (不小于零)，
        再修正 f1, f4, f5, f8 以消除刚体分量。
        """
        self.calculate_stresses()

        x = self.geometry.vertices.x_coordinates
        y = self.geometry.vertices.y_coordinates
        a, b, c, d = self.geometry.dimensions
        s = self.geometry.stringer_dimensions
        t = self.width

        sig = self.stresses.reshape(4, 3)
        sigC = self.concrete_stresses.reshape(4, 3)
        sigS = self.reinforcement_stresses.reshape(4, 3)

        def bearing(value):
            return max(value, 0.0)

        # 边 1
        t1, t2 = y[1] - y[0], x[1] - x[0]
        t3 = bearing(t2 - s[1] - s[3])
        f1 = (sig[0, 0] * t1 - sig[0, 2] * t2) * t
        f2 = (-sigC[0, 1] * t3 - sigS[0, 1] * t2 + sig[0, 2] * t1) * t

        # 边 2
        t1, t2 = y[2] - y[1], x[2] - x[1]
        t3 = bearing(t1 - s[2] - s[0])
        f3 = (sigC[1, 0] * t3 + sigS[1, 0] * t1 - sig[1, 2] * t2) * t
        f4 = (-sig[1, 1] * t2 + sig[1, 2] * t1) * t

        # 边 3
        t1, t2 = y[2] - y[3], x[2] - x[3]
        t3 = bearing(t2 - s[1] - s[3])
        f5 = (-sig[2, 0] * t1 + sig[2, 2] * t2) * t
        f6 = (sigC[2, 1] * t3 + sigS[2, 1] * t2 - sig[2, 2] * t1) * t

        # 边 4
        t1, t2 = y[3] - y[0], x[3] - x[0]
        t3 = bearing(t1 - s[0] - s[2])
        f7 = (-sigC[3, 0] * t3 - sigS[3, 0] * t1 - sig[3, 2] * t2) * t
        f8 = (sig[3, 1] * t2 - sig[3, 2] * t1) * t

        # 刚体修正
        t0 = 2 * (a * a + b * b)
        T1 = (a * (f1 - f5) - b * (f4 - f8)) / t0
        T2 = (c * (f2 - f6) + d * (f3 - f7)) / t0
        T3 = 0.5 * (f3 + f7)
        T4 = 0.5 * (f2 + f6)

        f1 = a * T1 + b * T2 - T3
        f4 = -b * T1 + a * T2 - T4
        f5 = -a * T1 - b * T2 - T3
        f8 = b * T1 - a * T2 - T4

        forces = np.array([f1, f2, f3, f4, f5, f6, f7, f8])
        self.local_forces = coerce_zero(forces, self.zero_tolerance)

    def commit_state(self):
        """保存各积分点状态"""
        self.committed_states = [p.state.clone() for p in self.integration_points]
        self.committed_local_forces = self.local_forces.copy()

    def restore_state(self):
        """
        放弃试探状态，恢复到上一次提交

        积分点状态、应力、夹持点力和割线刚度一并恢复。
        """
        for point, state in zip(self.integration_points, self.committed_states):
            point.restore(state)

        self.concrete_stresses = np.concatenate([s.concrete_stress for s in self.committed_states])
        self.reinforcement_stresses = np.concatenate(
            [s.reinforcement_stress for s in self.committed_states]
        )
        self.local_forces = self.committed_local_forces.copy()
        self.update_stiffness()
        logger.debug("Panel %d: restored committed state", self.number)

    # ------------------------------------------------------------------
    # 结果
    # ------------------------------------------------------------------
    @property
    def average_stresses(self) -> np.ndarray:
        """四个积分点的平均应力 [σx, σy, τxy]"""
        return self.stresses.reshape(4, 3).mean(axis=0)

    @property
    def concrete_principal_strains(self):
        """混凝土平均主应变 (ε1, ε2, θ1)"""
        eps = np.mean([p.state.strain for p in self.integration_points], axis=0)
        return principal_strains(eps)

    @property
    def concrete_principal_stresses(self):
        """混凝土平均主应力 (σ1, σ2, θ1)"""
        sig = self.concrete_stresses.reshape(4, 3).mean(axis=0)
        return principal_stresses(sig)

    @property
    def principal_stresses(self):
        """平均总应力的主应力 (σ1, σ2, θ1)"""
        return principal_stresses(self.average_stresses)

    @property
    def crack_spacing(self) -> float:
        """主拉应变方向上的平均裂缝间距"""
        _, _, theta1 = self.concrete_principal_strains
        if self.reinforcement is None:
            return 21.0
        return self.reinforcement.crack_spacing(theta1)

    @property
    def crack_opening(self) -> float:
        """平均裂缝宽度 w = ε1·smθ (ε1 不为正时为 0)"""
        e1, _, _ = self.concrete_principal_strains
        return crack_opening(e1, self.crack_spacing)

    @property
    def cracked(self) -> bool:
        return any(p.state.cracked for p in self.integration_points)
