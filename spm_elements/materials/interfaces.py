# 文件: spm_elements/materials/interfaces.py
"""
材料协作接口定义

设计原则:
1. MembraneResult: 标准化的膜单元应力计算返回值
2. Protocol: 单元只依赖接口 (鸭子类型)，不依赖具体本构
3. 平面应变/应力分量采用工程剪应变 [εx, εy, γxy]
"""

from dataclasses import dataclass
from typing import Optional, Protocol, Tuple, runtime_checkable
import numpy as np


@dataclass
class MembraneResult:
    """
    膜单元应力计算结果

    Attributes:
        stress: 总应力 [σx, σy, τxy]
        tangent: 割线刚度矩阵 (3,3)，混凝土与钢筋之和
        state: 更新后的积分点状态 (MembraneState)
        is_cracked: 混凝土是否已开裂
    """
    stress: np.ndarray
    tangent: np.ndarray
    state: Optional[object] = None
    is_cracked: bool = False


# =============================================================================
# 组件协议 (Protocol for duck typing)
# =============================================================================

@runtime_checkable
class UniaxialMaterial(Protocol):
    """
    单轴材料协议 (纵筋积分点)

    - stiffness: 轴向刚度 EA
    - area: 截面面积
    - calculate_force(): 由应变计算轴力
    """

    @property
    def stiffness(self) -> float:
        ...

    @property
    def area(self) -> float:
        ...

    def calculate_force(self, strain: float) -> float:
        ...


@runtime_checkable
class MembraneMaterial(Protocol):
    """
    双轴膜材料协议 (面板积分点)

    任何实现了以下成员的类都可作为非线性面板的积分点:
    - calculate(): 由应变计算应力和割线刚度
    - initial_stiffness: 初始刚度 (混凝土, 钢筋)
    - state: 最近一次计算的状态
    - restore(): 恢复到给定的 (已提交) 状态
    """

    @property
    def initial_stiffness(self) -> Tuple[np.ndarray, np.ndarray]:
        ...

    @property
    def state(self) -> object:
        ...

    def calculate(self, strain: np.ndarray) -> MembraneResult:
        ...

    def restore(self, state) -> None:
        ...


# =============================================================================
# 辅助函数
# =============================================================================

def strain_transformation_matrix(theta: float) -> np.ndarray:
    """
    应变转换矩阵 T，ε' = T · ε

    将 [εx, εy, γxy] 转换到与 x 轴夹角 θ 的坐标系。
    应力转换满足 σ = Tᵀ · σ' (功共轭)。
    """
    c, s = np.cos(theta), np.sin(theta)
    return np.array([
        [c * c,      s * s,      s * c],
        [s * s,      c * c,     -s * c],
        [-2 * s * c, 2 * s * c, c * c - s * s],
    ])


def principal_strains(strain: np.ndarray) -> Tuple[float, float, float]:
    """
    主应变

    Returns:
        (ε1, ε2, θ1): 最大、最小主应变和 ε1 方向角
    """
    ex, ey, gxy = strain
    center = 0.5 * (ex + ey)
    radius = np.hypot(0.5 * (ex - ey), 0.5 * gxy)
    theta = 0.5 * np.arctan2(gxy, ex - ey)
    return center + radius, center - radius, theta


def principal_stresses(stress: np.ndarray) -> Tuple[float, float, float]:
    """
    主应力

    Returns:
        (σ1, σ2, θ1): 最大、最小主应力和 σ1 方向角
    """
    sx, sy, txy = stress
    center = 0.5 * (sx + sy)
    radius = np.hypot(0.5 * (sx - sy), txy)
    theta = 0.5 * np.arctan2(2 * txy, sx - sy)
    return center + radius, center - radius, theta
