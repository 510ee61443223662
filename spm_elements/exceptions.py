# 文件: spm_elements/exceptions.py
"""
单元异常定义

- DegenerateGeometry: 几何退化 (构造时抛出)
- SingularStiffness: 刚度分母趋零 (抛给外部驱动器)
- NonConvergentMaterialInversion: 材料关系求逆失败 (局部回退)
"""


class SPMError(Exception):
    """所有 SPM 单元异常的基类"""


class DegenerateGeometry(SPMError, ValueError):
    """
    几何退化

    长度为零的纵筋单元、重合的夹持点、零面积或顺时针排列的面板。
    """


class SingularStiffness(SPMError, ArithmeticError):
    """
    刚度矩阵奇异

    非矩形面板的 kf·ku 相对其各项量级趋于零，
    或非线性纵筋单元的柔度矩阵不可逆。
    """


class NonConvergentMaterialInversion(SPMError, RuntimeError):
    """
    材料关系求逆不收敛

    由给定轴力求应变时 Brent 求根失败或结果为 NaN。
    调用方回退到积分点缓存的广义应变。
    """

    def __init__(self, normal_force, message=None):
        self.normal_force = normal_force
        super().__init__(
            message or f"Strain inversion failed for N = {normal_force:.6g}"
        )
