# 文件: spm_elements/panel.py
"""
面板单元 (Panel)

四夹持点剪切膜单元，夹持点位于四条边的中点。
局部自由度为各边方向的位移，转换矩阵由四个边的方向余弦块组成 (4x8)。

线弹性刚度两种闭式解:
- 矩形: K = Gc·w · | a/b  -1   a/b  -1  |
                   | -1   b/a  -1   b/a |
                   | a/b  -1   a/b  -1  |
                   | -1   b/a  -1   b/a |
- 非矩形: 基于平衡的秩一刚度 K = D · B ⊗ B
"""

import logging
from typing import Optional, Sequence, Tuple

import numpy as np

from .element import BaseElement, ElementModel
from .exceptions import SingularStiffness
from .geometry import PanelGeometry
from .materials.concrete import ConcreteParameters
from .materials.reinforcement import WebReinforcement

logger = logging.getLogger(__name__)

# kf·ku 相对其各项量级的奇异判定容差
SINGULAR_TOLERANCE = 1e-9


class Panel(BaseElement):
    """
    线弹性面板单元

    Attributes:
        geometry: PanelGeometry
        concrete_parameters: ConcreteParameters
        reinforcement: WebReinforcement 或 None
    """

    def __init__(self, number: int, grips: Sequence, geometry: PanelGeometry,
                 concrete_parameters: ConcreteParameters,
                 reinforcement: Optional[WebReinforcement] = None):
        if len(grips) != 4:
            raise ValueError(f"A panel needs 4 grips, got {len(grips)}")
        super().__init__(number, grips)

        self.geometry = geometry
        self.concrete_parameters = concrete_parameters
        self.reinforcement = reinforcement

        self.invalidate()

    @staticmethod
    def create(grips: Sequence, geometry: PanelGeometry,
               concrete_parameters: ConcreteParameters,
               model: ElementModel = ElementModel.ELASTIC,
               reinforcement: Optional[WebReinforcement] = None,
               number: int = 0, config: Optional[dict] = None) -> 'Panel':
        """
        根据分析模型创建面板单元

        Returns:
            Panel 或 NonlinearPanel
        """
        if model == ElementModel.NONLINEAR:
            from .panel_nonlinear import NonlinearPanel
            return NonlinearPanel(
                number, grips, geometry, concrete_parameters,
                reinforcement=reinforcement, config=config,
            )
        return Panel(number, grips, geometry, concrete_parameters, reinforcement)

    @property
    def width(self) -> float:
        return self.geometry.width

    def _num_local_dofs(self):
        return 4

    def _calc_transformation_matrix(self):
        T = np.zeros((4, 8))
        for i, edge in enumerate(self.geometry.edges):
            m, n = edge.direction_cosines
            T[i, 2 * i] = m
            T[i, 2 * i + 1] = n
        return T

    def _calc_local_stiffness(self):
        if self.geometry.is_rectangular:
            logger.debug("Panel %d: rectangular stiffness", self.number)
            return self.rectangular_stiffness()

        logger.debug("Panel %d: non-rectangular stiffness", self.number)
        return self.non_rectangular_stiffness()

    def rectangular_stiffness(self) -> np.ndarray:
        """矩形面板闭式刚度 (a, b 为底边和右边长度)"""
        a, b = self.geometry.edge1.length, self.geometry.edge2.length
        a_b, b_a = a / b, b / a

        Gc = self.concrete_parameters.shear_modulus
        return Gc * self.width * np.array([
            [a_b, -1, a_b, -1],
            [-1, b_a, -1, b_a],
            [a_b, -1, a_b, -1],
            [-1, b_a, -1, b_a],
        ])

    def non_rectangular_stiffness(self) -> np.ndarray:
        """
        一般四边形面板刚度

        平衡参数:
            ci = x(i+1) - xi,  si = y(i+1) - yi,  ri = xi·y(i+1) - x(i+1)·yi
        运动参数:
            t1 = -b·c1 - c·s1,  t2 = a·s2 + d·c2,
            t3 = b·c3 + c·s3,   t4 = -a·s4 - d·c4
        ki 为去掉第 i 列后 [c; s; r] 3x3 子矩阵的行列式:
            kf = Σki,  ku = -t1·k1 + t2·k2 - t3·k3 + t4·k4
            D = 16·Gc·w / (kf·ku)
            B = [-k1·l1, k2·l2, -k3·l3, k4·l4]
            K = D · B ⊗ B

        Raises:
            SingularStiffness: kf·ku 相对其量级趋于零
        """
        x = self.geometry.vertices.x_coordinates
        y = self.geometry.vertices.y_coordinates
        a, b, c, d = self.geometry.dimensions
        lengths = self.geometry.edge_lengths

        nxt = np.roll(np.arange(4), -1)
        cs = x[nxt] - x
        ss = y[nxt] - y
        rs = x * y[nxt] - x[nxt] * y

        t = np.array([
            -b * cs[0] - c * ss[0],
            a * ss[1] + d * cs[1],
            b * cs[2] + c * ss[2],
            -a * ss[3] - d * cs[3],
        ])

        M = np.vstack([cs, ss, rs])
        k = np.array([np.linalg.det(np.delete(M, i, axis=1)) for i in range(4)])

        kf = np.sum(k)
        ku = -t[0] * k[0] + t[1] * k[1] - t[2] * k[2] + t[3] * k[3]

        denominator = kf * ku
        scale = np.sum(np.abs(k)) * np.sum(np.abs(t * k))
        if scale == 0 or abs(denominator) <= SINGULAR_TOLERANCE * scale:
            raise SingularStiffness(
                f"Panel {self.number}: kf·ku = {denominator:.3g} vanishes "
                f"for vertices {self.geometry.vertices}"
            )

        Gc = self.concrete_parameters.shear_modulus
        D = 16 * Gc * self.width / denominator

        B = np.array([-1, 1, -1, 1]) * k * lengths
        return D * np.outer(B, B)

    def set_vertices(self, vertices):
        """修改顶点后重新计算转换矩阵和刚度"""
        self.geometry.set_vertices(vertices)
        self.invalidate()

    # ------------------------------------------------------------------
    # 结果
    # ------------------------------------------------------------------
    @property
    def average_stresses(self) -> np.ndarray:
        """
        平均应力 [0, 0, τavg]

        τi = fi / (li·w),  τavg = (-τ1 + τ2 - τ3 + τ4) / 4
        """
        tau = self.local_forces / (self.geometry.edge_lengths * self.width)
        tau_avg = (-tau[0] + tau[1] - tau[2] + tau[3]) / 4
        return np.array([0.0, 0.0, tau_avg])

    @property
    def max_force(self) -> float:
        """夹持点内力绝对值最大值"""
        return float(np.max(np.abs(self.forces)))

    @property
    def crack_opening(self) -> float:
        """平均裂缝宽度 (线弹性单元不开裂)"""
        return 0.0

    @property
    def principal_stresses(self) -> Tuple[float, float, float]:
        """
        主应力 (平衡桁架模型)

        Returns:
            (σ1, σ2, θ1): σ1 = 0，θ1 为 σ1 方向角 (与 σ2 方向正交)
        """
        tau = self.average_stresses[2]

        fyx, fyy = (
            self.reinforcement.yield_stresses if self.reinforcement is not None
            else (0.0, 0.0)
        )

        if fyx == fyy or fyx <= 0 or fyy <= 0:
            sig2 = -2 * abs(tau)
        else:
            r = np.sqrt(fyx / fyy)
            sig2 = -abs(tau) * (r + 1 / r)

        theta1 = -np.pi / 4 if tau <= 0 else np.pi / 4
        return 0.0, float(sig2), theta1
