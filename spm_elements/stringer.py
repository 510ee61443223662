# 文件: spm_elements/stringer.py
"""
纵筋单元 (Stringer)

三夹持点轴向单元: 起点、中点、终点。
线弹性刚度 (三次插值):

    Kl = EA / (3L) · | 7  -8   1 |
                     |-8  16  -8 |
                     | 1  -8   7 |

局部坐标沿纵筋轴线，转换矩阵由方向余弦 (l, m) 组成。
"""

import logging
from enum import Enum
from typing import Optional, Sequence, Tuple

import numpy as np

from .element import BaseElement, ElementModel
from .exceptions import DegenerateGeometry
from .geometry import GEOMETRY_TOLERANCE, StringerGeometry
from .materials.concrete import ConcreteParameters, UniaxialConcrete
from .materials.reinforcement import UniaxialReinforcement

logger = logging.getLogger(__name__)


class ForceState(Enum):
    """纵筋受力状态"""
    UNLOADED = 'unloaded'
    PURE_TENSION = 'pure_tension'
    PURE_COMPRESSION = 'pure_compression'
    COMBINED = 'combined'


def crack_spacing(reinforcement: Optional[UniaxialReinforcement],
                  concrete_area: float) -> float:
    """
    平均裂缝间距 (mm)

    sm = 21 + 0.155·φ/ρ，无钢筋时为 21
    """
    if reinforcement is None:
        return 21.0

    ratio = reinforcement.calculate_ratio(concrete_area)
    if np.isclose(reinforcement.bar_diameter, 0) or np.isclose(ratio, 0):
        return 21.0
    return 21 + 0.155 * reinforcement.bar_diameter / ratio


def crack_opening(strain: float, spacing: float) -> float:
    """裂缝宽度 w = ε·sm (受压或近零应变时为 0)"""
    if strain < 0 or np.isclose(strain, 0, atol=1e-9):
        return 0.0
    return strain * spacing


class Stringer(BaseElement):
    """
    线弹性纵筋单元

    Attributes:
        geometry: StringerGeometry
        concrete: UniaxialConcrete (净截面)
        reinforcement: UniaxialReinforcement 或 None
    """

    def __init__(self, number: int, grips: Sequence, width: float, height: float,
                 concrete_parameters: ConcreteParameters,
                 reinforcement: Optional[UniaxialReinforcement] = None):
        if len(grips) != 3:
            raise ValueError(f"A stringer needs 3 grips, got {len(grips)}")
        super().__init__(number, grips)

        positions = [node.position for node in self.grips]
        for i in range(3):
            for j in range(i + 1, 3):
                if np.linalg.norm(positions[i] - positions[j]) <= GEOMETRY_TOLERANCE:
                    raise DegenerateGeometry(
                        f"Stringer {number}: grips {self.grips[i].number} and "
                        f"{self.grips[j].number} are coincident."
                    )

        self.geometry = StringerGeometry(positions[0], positions[2], width, height)
        self.concrete_parameters = concrete_parameters
        self.reinforcement = reinforcement

        concrete_area = self.geometry.area - (reinforcement.area if reinforcement else 0.0)
        if concrete_area <= 0:
            raise DegenerateGeometry(
                f"Stringer {number}: reinforcement area exceeds the cross-section area."
            )
        self.concrete = UniaxialConcrete(concrete_parameters, concrete_area)

        self.invalidate()
        logger.debug(
            "Stringer %d: L = %.3f, angle = %.4f rad, EA = %.4g",
            number, self.geometry.length, self.geometry.angle, self.concrete.stiffness,
        )

    @staticmethod
    def create(grips: Sequence, width: float, height: float,
               concrete_parameters: ConcreteParameters,
               model: ElementModel = ElementModel.ELASTIC,
               reinforcement: Optional[UniaxialReinforcement] = None,
               number: int = 0, config: Optional[dict] = None) -> 'Stringer':
        """
        根据分析模型创建纵筋单元

        Returns:
            Stringer 或 NonlinearStringer
        """
        if model == ElementModel.NONLINEAR:
            from .stringer_nonlinear import NonlinearStringer
            return NonlinearStringer(
                number, grips, width, height, concrete_parameters,
                reinforcement=reinforcement, config=config,
            )
        return Stringer(number, grips, width, height, concrete_parameters, reinforcement)

    def _num_local_dofs(self):
        return 3

    def _calc_transformation_matrix(self):
        l, m = self.geometry.direction_cosines
        return np.array([
            [l, m, 0, 0, 0, 0],
            [0, 0, l, m, 0, 0],
            [0, 0, 0, 0, l, m],
        ])

    def _calc_local_stiffness(self):
        EA = self.concrete.stiffness
        L = self.geometry.length
        return EA / (3 * L) * np.array([
            [7, -8, 1],
            [-8, 16, -8],
            [1, -8, 7],
        ], dtype=float)

    def set_geometry(self, initial_point, end_point):
        """修改端点后重新计算转换矩阵和刚度"""
        self.geometry.set_end_points(initial_point, end_point)
        self.invalidate()

    @property
    def normal_forces(self) -> Tuple[float, float]:
        """端部轴力 (N1, N3)，受拉为正"""
        return -self.local_forces[0], self.local_forces[2]

    @property
    def force_state(self) -> ForceState:
        N1, N3 = self.normal_forces
        if N1 == 0 and N3 == 0:
            return ForceState.UNLOADED
        if N1 > 0 and N3 > 0:
            return ForceState.PURE_TENSION
        if N1 < 0 and N3 < 0:
            return ForceState.PURE_COMPRESSION
        return ForceState.COMBINED

    @property
    def max_force(self) -> float:
        """局部内力绝对值最大值"""
        return float(np.max(np.abs(self.local_forces)))

    @property
    def crack_spacing(self) -> float:
        return crack_spacing(self.reinforcement, self.concrete.area)

    @property
    def crack_openings(self) -> np.ndarray:
        """起点、中点、终点的裂缝宽度 (线弹性单元不开裂)"""
        return np.zeros(3)
