# 文件: spm_elements/node.py
from enum import Enum

import numpy as np


class Constraint(Enum):
    """节点约束类型"""
    FREE = 'free'
    X = 'x'
    Y = 'y'
    XY = 'xy'


class NodeType(Enum):
    """节点类型 (内部节点位于纵筋中点，外部节点位于纵筋端点)"""
    INTERNAL = 'internal'
    EXTERNAL = 'external'
    DISPLACED = 'displaced'


class Node:
    """
    平面节点类。

    存储节点编号、二维坐标、约束、外加力和位移。
    位移由外部求解器写入，单元只读取。
    编号从 1 开始，全局自由度索引为 (2n-2, 2n-1)。
    """
    def __init__(self, number, x, y, node_type=NodeType.EXTERNAL,
                 constraint=Constraint.FREE):
        self.number = int(number)
        if self.number < 1:
            raise ValueError(f"Node number must be >= 1, got {number}")

        self.position = np.array([float(x), float(y)])
        self.node_type = node_type
        self.constraint = constraint
        self.applied_force = np.zeros(2)
        self.displacement = np.zeros(2)

    @property
    def x(self):
        return self.position[0]

    @property
    def y(self):
        return self.position[1]

    @property
    def dof_indices(self):
        """全局自由度索引 (2n-2, 2n-1)"""
        start = 2 * self.number - 2
        return np.array([start, start + 1], dtype=int)

    @property
    def constrained_dofs(self):
        """被约束的全局自由度索引"""
        ix, iy = self.dof_indices
        return {
            Constraint.FREE: [],
            Constraint.X: [ix],
            Constraint.Y: [iy],
            Constraint.XY: [ix, iy],
        }[self.constraint]

    def set_displacements(self, global_displacements):
        """从全局位移向量读取本节点的位移"""
        u = np.asarray(global_displacements, dtype=float)
        self.displacement = u[self.dof_indices].copy()

    def set_applied_force(self, fx, fy):
        self.applied_force = np.array([float(fx), float(fy)])

    def __repr__(self):
        return f"Node({self.number}, {self.position}, {self.constraint.name})"
