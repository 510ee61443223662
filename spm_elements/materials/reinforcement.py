# 文件: spm_elements/materials/reinforcement.py
"""
钢筋模型

提供:
- Steel: 理想弹塑性钢材
- UniaxialReinforcement: 纵筋中的钢筋
- WebReinforcementDirection / WebReinforcement: 面板正交分布钢筋 (弥散)
"""

from typing import Optional, Tuple
import numpy as np


class Steel:
    """
    理想弹塑性钢材

    Attributes:
        yield_stress: 屈服强度 fy
        elastic_module: 弹性模量 Es
        ultimate_strain: 极限应变 εsu
        yield_strain: 屈服应变 εy = fy/Es
    """

    def __init__(self, yield_stress: float, elastic_module: float = 210000.0,
                 ultimate_strain: float = 0.01):
        if yield_stress <= 0 or elastic_module <= 0:
            raise ValueError(
                f"Steel properties must be positive, got fy={yield_stress}, Es={elastic_module}"
            )
        if ultimate_strain <= 0:
            raise ValueError(f"Ultimate strain must be positive, got {ultimate_strain}")

        self.yield_stress = float(yield_stress)
        self.elastic_module = float(elastic_module)
        self.ultimate_strain = float(ultimate_strain)

    @property
    def yield_strain(self) -> float:
        return self.yield_stress / self.elastic_module

    def calculate_stress(self, strain: float) -> float:
        return float(np.clip(self.elastic_module * strain, -self.yield_stress, self.yield_stress))

    def secant_module(self, strain: float) -> float:
        if abs(strain) < 1e-12:
            return self.elastic_module
        return self.calculate_stress(strain) / strain

    def __repr__(self) -> str:
        return f"Steel(fy={self.yield_stress:.1f}, Es={self.elastic_module:.0f})"


def bar_area(bar_diameter: float) -> float:
    return 0.25 * np.pi * bar_diameter ** 2


class UniaxialReinforcement:
    """
    纵筋中的钢筋

    Attributes:
        number_of_bars: 钢筋根数
        bar_diameter: 钢筋直径 φ
        steel: Steel
        area: 钢筋面积 As
        stiffness: Es·As
        yield_force: 屈服力 Nyr = fy·As
    """

    def __init__(self, number_of_bars: int, bar_diameter: float, steel: Steel):
        if number_of_bars < 0 or bar_diameter < 0:
            raise ValueError(
                f"Invalid reinforcement: {number_of_bars} bars of diameter {bar_diameter}"
            )
        self.number_of_bars = int(number_of_bars)
        self.bar_diameter = float(bar_diameter)
        self.steel = steel

    @property
    def area(self) -> float:
        return self.number_of_bars * bar_area(self.bar_diameter)

    @property
    def stiffness(self) -> float:
        return self.steel.elastic_module * self.area

    @property
    def yield_force(self) -> float:
        return self.steel.yield_stress * self.area

    @property
    def yield_strain(self) -> float:
        return self.steel.yield_strain

    def calculate_ratio(self, concrete_area: float) -> float:
        """配筋率 ρ = As/Ac"""
        return self.area / concrete_area if concrete_area > 0 else 0.0

    def calculate_force(self, strain: float) -> float:
        return self.steel.calculate_stress(strain) * self.area

    def __repr__(self) -> str:
        return (
            f"UniaxialReinforcement({self.number_of_bars} x φ{self.bar_diameter:g}, "
            f"{self.steel!r})"
        )


class WebReinforcementDirection:
    """
    单方向分布钢筋 (双层)

    配筋率 ρ = 2·(πφ²/4) / (s·t)，s 为钢筋间距，t 为面板厚度。
    """

    def __init__(self, bar_diameter: float, bar_spacing: float, steel: Steel,
                 panel_width: float):
        if bar_diameter <= 0 or bar_spacing <= 0 or panel_width <= 0:
            raise ValueError(
                f"Invalid web reinforcement: φ={bar_diameter}, s={bar_spacing}, "
                f"t={panel_width}"
            )
        self.bar_diameter = float(bar_diameter)
        self.bar_spacing = float(bar_spacing)
        self.steel = steel
        self.panel_width = float(panel_width)

    @property
    def ratio(self) -> float:
        return 2 * bar_area(self.bar_diameter) / (self.bar_spacing * self.panel_width)

    def calculate_stress(self, strain: float) -> float:
        """弥散应力 ρ·fs(ε)"""
        return self.ratio * self.steel.calculate_stress(strain)

    def secant_stiffness(self, strain: float) -> float:
        return self.ratio * self.steel.secant_module(strain)

    @property
    def crack_spacing(self) -> float:
        """垂直于该方向钢筋的平均裂缝间距 sm = 21 + 0.155·φ/ρ (mm)"""
        return 21 + 0.155 * self.bar_diameter / self.ratio

    def __repr__(self) -> str:
        return (
            f"WebReinforcementDirection(φ{self.bar_diameter:g} @ {self.bar_spacing:g}, "
            f"ρ={self.ratio:.4f})"
        )


class WebReinforcement:
    """
    面板正交分布钢筋 (x, y 两个方向，任一方向可为空)
    """

    def __init__(self, direction_x: Optional[WebReinforcementDirection] = None,
                 direction_y: Optional[WebReinforcementDirection] = None):
        self.direction_x = direction_x
        self.direction_y = direction_y

    @property
    def ratios(self) -> Tuple[float, float]:
        rx = self.direction_x.ratio if self.direction_x else 0.0
        ry = self.direction_y.ratio if self.direction_y else 0.0
        return rx, ry

    @property
    def yield_stresses(self) -> Tuple[float, float]:
        fx = self.direction_x.steel.yield_stress if self.direction_x else 0.0
        fy = self.direction_y.steel.yield_stress if self.direction_y else 0.0
        return fx, fy

    def crack_spacing(self, theta: float) -> float:
        """
        与 x 轴成 theta 的主拉应变方向上的平均裂缝间距

        smθ = 1 / (|cosθ|/smx + |sinθ|/smy)，无钢筋的方向取 21 mm
        """
        smx = self.direction_x.crack_spacing if self.direction_x else 21.0
        smy = self.direction_y.crack_spacing if self.direction_y else 21.0
        return 1 / (abs(np.cos(theta)) / smx + abs(np.sin(theta)) / smy)

    @property
    def initial_stiffness(self) -> np.ndarray:
        return self._stiffness(0.0, 0.0)

    def _stiffness(self, ex: float, ey: float) -> np.ndarray:
        kx = self.direction_x.secant_stiffness(ex) if self.direction_x else 0.0
        ky = self.direction_y.secant_stiffness(ey) if self.direction_y else 0.0
        return np.diag([kx, ky, 0.0])

    def calculate(self, strain: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        """
        计算钢筋弥散应力和割线刚度

        Args:
            strain: [εx, εy, γxy]

        Returns:
            (stress, stiffness): [σsx, σsy, 0] 和 diag(ρx·Esx, ρy·Esy, 0)
        """
        ex, ey = strain[0], strain[1]
        sx = self.direction_x.calculate_stress(ex) if self.direction_x else 0.0
        sy = self.direction_y.calculate_stress(ey) if self.direction_y else 0.0
        return np.array([sx, sy, 0.0]), self._stiffness(ex, ey)

    def __repr__(self) -> str:
        return f"WebReinforcement(x={self.direction_x!r}, y={self.direction_y!r})"
