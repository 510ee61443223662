# 文件: spm_elements/materials/concrete.py
"""
混凝土模型

提供:
- ConstitutiveModel: 本构模型标签 (MCFT / DSFM)
- ConcreteParameters: 混凝土参数 (MPa, 压应变为负)
- UniaxialConcrete: 纵筋用单轴混凝土
- BiaxialConcrete: 面板用双轴混凝土 (主方向割线模型)
"""

from enum import Enum
from typing import Optional, Tuple
import numpy as np

from .interfaces import principal_strains, strain_transformation_matrix


class ConstitutiveModel(Enum):
    """混凝土本构模型"""
    MCFT = 'mcft'
    DSFM = 'dsfm'


class ConcreteParameters:
    """
    混凝土参数

    Attributes:
        strength: 抗压强度 fc (正值)
        plastic_strain: 峰值压应变 εc (负值)
        ultimate_strain: 极限压应变 εcu (负值)
        tensile_strength: 抗拉强度 ft，默认 0.33·√fc
        elastic_module: 初始弹性模量 Ec = -2·fc/εc
        cracking_strain: 开裂应变 εcr = ft/Ec
        shear_modulus: 剪切模量 Gc = Ec/2.4
    """

    def __init__(self, strength: float, plastic_strain: float = -0.002,
                 ultimate_strain: float = -0.0035,
                 tensile_strength: Optional[float] = None,
                 model: ConstitutiveModel = ConstitutiveModel.MCFT):
        """
        Raises:
            ValueError: 强度非正或应变符号/大小关系错误
        """
        if strength <= 0:
            raise ValueError(f"Concrete strength must be positive, got {strength}")
        if not (ultimate_strain < plastic_strain < 0):
            raise ValueError(
                f"Expected ultimate_strain < plastic_strain < 0, "
                f"got {ultimate_strain}, {plastic_strain}"
            )
        if tensile_strength is not None and tensile_strength <= 0:
            raise ValueError(f"Tensile strength must be positive, got {tensile_strength}")

        self.strength = float(strength)
        self.plastic_strain = float(plastic_strain)
        self.ultimate_strain = float(ultimate_strain)
        self.tensile_strength = (
            float(tensile_strength) if tensile_strength is not None
            else 0.33 * np.sqrt(self.strength)
        )
        self.model = model

    @property
    def elastic_module(self) -> float:
        return -2 * self.strength / self.plastic_strain

    @property
    def cracking_strain(self) -> float:
        return self.tensile_strength / self.elastic_module

    @property
    def shear_modulus(self) -> float:
        return self.elastic_module / 2.4

    def tension_stress(self, strain: float) -> float:
        """受拉应力: 开裂前线弹性，开裂后为拉伸硬化曲线 ft/(1+√(500ε))"""
        if strain <= self.cracking_strain:
            return self.elastic_module * strain
        return self.tensile_strength / (1 + np.sqrt(500 * strain))

    def compression_stress(self, strain: float, softening: float = 1.0) -> float:
        """
        受压应力 (Hognestad 抛物线 + 下降段)

        Args:
            strain: 压应变 (负值)
            softening: 压软化系数 β ≤ 1
        """
        fc = softening * self.strength
        ec, ecu = self.plastic_strain, self.ultimate_strain

        if strain >= ec:
            eta = strain / ec
            return -fc * (2 * eta - eta * eta)

        if strain > ecu:
            r = (strain - ec) / (ecu - ec)
            return -fc * (1 - r * r)

        return 0.0

    def __repr__(self) -> str:
        return (
            f"ConcreteParameters(fc={self.strength:.1f}, ft={self.tensile_strength:.2f}, "
            f"Ec={self.elastic_module:.0f}, model={self.model.name})"
        )


class UniaxialConcrete:
    """
    单轴混凝土 (纵筋)

    Attributes:
        parameters: ConcreteParameters
        area: 混凝土净截面面积
        stiffness: 轴向刚度 Ec·Ac
        max_force: 最大压力 Nc = -fc·Ac (负值)
    """

    def __init__(self, parameters: ConcreteParameters, area: float):
        if area <= 0:
            raise ValueError(f"Concrete area must be positive, got {area}")
        self.parameters = parameters
        self._area = float(area)

    @property
    def area(self) -> float:
        return self._area

    @property
    def stiffness(self) -> float:
        return self.parameters.elastic_module * self._area

    @property
    def max_force(self) -> float:
        return -self.parameters.strength * self._area

    @property
    def ecr(self) -> float:
        return self.parameters.cracking_strain

    @property
    def ec(self) -> float:
        return self.parameters.plastic_strain

    @property
    def ecu(self) -> float:
        return self.parameters.ultimate_strain

    @property
    def ft(self) -> float:
        return self.parameters.tensile_strength

    def calculate_stress(self, strain: float) -> float:
        if strain >= 0:
            return self.parameters.tension_stress(strain)
        return self.parameters.compression_stress(strain)

    def calculate_force(self, strain: float) -> float:
        return self.calculate_stress(strain) * self._area

    def __repr__(self) -> str:
        return f"UniaxialConcrete(area={self._area:.1f}, {self.parameters!r})"


class BiaxialConcrete:
    """
    双轴混凝土 (面板积分点)

    在主应变方向上分别计算主应力，割线模量:
        E1 = σ1/ε1, E2 = σ2/ε2, G = E1·E2/(E1+E2)
    再通过应变转换矩阵转回 x-y 坐标:
        D = Tᵀ · diag(E1, E2, G) · T,  σ = Tᵀ · [σ1, σ2, 0]

    零应变时 D = diag(Ec, Ec, Ec/2)，与初始刚度一致。
    开裂状态单调: 一旦 ε1 ≥ εcr 即保持开裂。
    """

    def __init__(self, parameters: ConcreteParameters):
        self.parameters = parameters
        self.cracked = False

    @property
    def initial_stiffness(self) -> np.ndarray:
        Ec = self.parameters.elastic_module
        return np.diag([Ec, Ec, 0.5 * Ec])

    def _principal_stress(self, strain: float, softening: float) -> float:
        if strain >= 0:
            return self.parameters.tension_stress(strain)
        return self.parameters.compression_stress(strain, softening)

    def _secant(self, stress: float, strain: float) -> float:
        if abs(strain) < 1e-12:
            return self.parameters.elastic_module
        return stress / strain

    def calculate(self, strain: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        """
        计算混凝土应力和割线刚度

        Args:
            strain: [εx, εy, γxy]

        Returns:
            (stress, stiffness): 应力 (3,) 和割线刚度 (3,3)
        """
        e1, e2, theta = principal_strains(strain)

        if e1 >= self.parameters.cracking_strain:
            self.cracked = True

        # 横向拉应变引起的压软化 (Vecchio & Collins)
        softening = 1.0
        if e1 > 0:
            softening = min(1.0, 1 / (0.8 + 170 * e1))

        f1 = self._principal_stress(e1, softening)
        f2 = self._principal_stress(e2, softening)

        E1 = self._secant(f1, e1)
        E2 = self._secant(f2, e2)
        G = E1 * E2 / (E1 + E2) if E1 + E2 > 0 else 0.0

        T = strain_transformation_matrix(theta)
        stiffness = T.T @ np.diag([E1, E2, G]) @ T
        stress = T.T @ np.array([f1, f2, 0.0])

        return stress, stiffness

    def __repr__(self) -> str:
        return f"BiaxialConcrete(cracked={self.cracked}, {self.parameters!r})"
