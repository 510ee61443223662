# 文件: spm_elements/element.py
import numpy as np
from abc import ABC, abstractmethod
from enum import Enum


class ElementModel(Enum):
    """单元分析模型"""
    ELASTIC = 'elastic'
    NONLINEAR = 'nonlinear'


def coerce_zero(values, tolerance=1e-6):
    """将绝对值小于容差的分量置为零"""
    values = np.asarray(values, dtype=float)
    return np.where(np.abs(values) < tolerance, 0.0, values)


class BaseElement(ABC):
    """
    SPM 单元抽象基类。
    管理夹持点 (grips)、全局自由度索引、局部⇄全局转换以及每次迭代的生命周期:

        update_displacements_from_grips() → calculate_forces() → update_stiffness()

    之后外部驱动器读取 forces 和 stiffness 进行组装。
    转换矩阵与局部刚度在构造时计算，几何改变后调用 invalidate() 重新计算。
    """
    dofs_per_node = 2
    zero_tolerance = 1e-6

    def __init__(self, number, grips):
        """
        Args:
            number (int): 单元编号
            grips (list): 夹持点 Node 列表
        """
        self.number = int(number)
        self.grips = list(grips)
        self._displacements = np.zeros(self.dofs_per_node * len(self.grips))
        self.local_forces = np.zeros(self._num_local_dofs())

    def _num_local_dofs(self):
        return len(self.grips)

    def get_dof_indices(self):
        """
        根据夹持点编号生成全局自由度索引 (2n-2, 2n-1)。
        """
        dofs = []
        for node in self.grips:
            start = (node.number - 1) * self.dofs_per_node
            dofs.extend(range(start, start + self.dofs_per_node))
        return np.array(dofs, dtype=int)

    @property
    def dof_indices(self):
        return self.get_dof_indices()

    def invalidate(self):
        """重新计算转换矩阵和局部刚度"""
        self.transformation_matrix = self._calc_transformation_matrix()
        self.local_stiffness = self._calc_local_stiffness()

    @abstractmethod
    def _calc_transformation_matrix(self):
        """抽象方法：计算全局→局部转换矩阵 T。"""
        pass

    @abstractmethod
    def _calc_local_stiffness(self):
        """抽象方法：计算局部刚度矩阵。"""
        pass

    # ------------------------------------------------------------------
    # 位移
    # ------------------------------------------------------------------
    @property
    def displacements(self):
        """夹持点全局位移向量"""
        return self._displacements

    @property
    def local_displacements(self):
        return self.transformation_matrix @ self._displacements

    def update_displacements_from_grips(self):
        """从共享节点读取夹持点位移"""
        self._displacements = np.concatenate([node.displacement for node in self.grips])

    def set_displacements(self, global_displacements):
        """从全局位移向量中提取本单元的位移 (不修改节点)"""
        u = np.asarray(global_displacements, dtype=float)
        self._displacements = u[self.get_dof_indices()].copy()

    # ------------------------------------------------------------------
    # 刚度与内力
    # ------------------------------------------------------------------
    @property
    def stiffness(self):
        """全局刚度矩阵 K = Tᵀ · Kl · T"""
        T = self.transformation_matrix
        return T.T @ self.local_stiffness @ T

    @property
    def forces(self):
        """全局内力向量 F = Tᵀ · fl"""
        return self.transformation_matrix.T @ self.local_forces

    def calculate_forces(self):
        """局部内力 fl = Kl · ul (小于容差的分量置零)"""
        fl = self.local_stiffness @ self.local_displacements
        self.local_forces = coerce_zero(fl, self.zero_tolerance)

    def update_stiffness(self):
        """线弹性单元刚度不变"""
        pass

    def commit_state(self):
        """外部迭代收敛后调用；线弹性单元无历史变量"""
        pass

    def analyze(self, global_displacements=None):
        """
        执行一次迭代

        Args:
            global_displacements: 全局位移向量；为 None 时从夹持点读取
        """
        if global_displacements is None:
            self.update_displacements_from_grips()
        else:
            self.set_displacements(global_displacements)

        self.calculate_forces()
        self.update_stiffness()

    def __repr__(self):
        grips = ', '.join(str(n.number) for n in self.grips)
        return f"{type(self).__name__}({self.number}, grips=[{grips}])"
