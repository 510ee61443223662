# 文件: spm_elements/geometry.py
"""
几何模块

纵筋 (Stringer) 与面板 (Panel) 的几何描述:
1. Edge: 面板边 (长度、角度、中点、纵筋尺寸修正)
2. Vertices: 面板四个顶点 (逆时针排列)
3. StringerGeometry: 纵筋端点、截面尺寸、长度和角度
4. PanelGeometry: 面板顶点、厚度、边和形状参数 (a, b, c, d)

所有派生量在构造时计算，修改几何时显式重新计算。
"""

import numpy as np
from typing import List, Sequence, Tuple

from .exceptions import DegenerateGeometry

# 长度/面积的退化判定容差
GEOMETRY_TOLERANCE = 1e-6

# 矩形判定的角度容差 (rad)
ANGLE_TOLERANCE = 1e-3


def as_point(point) -> np.ndarray:
    """转换为二维坐标数组 (2,)"""
    p = np.asarray(point, dtype=float).reshape(-1)
    if p.size != 2:
        raise ValueError(f"Expected a 2D point, got {point!r}")
    return p


def midpoint(p1, p2) -> np.ndarray:
    return 0.5 * (as_point(p1) + as_point(p2))


def cross(o, a, b) -> float:
    """(a - o) × (b - o)，b 在 oa 左侧为正"""
    return float((a[0] - o[0]) * (b[1] - o[1]) - (a[1] - o[1]) * (b[0] - o[0]))


def segments_cross(p1, p2, p3, p4) -> bool:
    """线段 p1p2 与 p3p4 是否严格相交 (端点接触或共线不算)"""
    return (
        cross(p1, p2, p3) * cross(p1, p2, p4) < 0
        and cross(p3, p4, p1) * cross(p3, p4, p2) < 0
    )


class Edge:
    """
    面板边

    从起点指向终点，角度为 atan2(dy, dx)。
    stringer_dimension 为相邻纵筋高度的一半，用于非线性面板的力修正。
    """

    def __init__(self, initial_vertex, final_vertex):
        self.initial_vertex = as_point(initial_vertex)
        self.final_vertex = as_point(final_vertex)

        delta = self.final_vertex - self.initial_vertex
        self.length = float(np.hypot(delta[0], delta[1]))
        if self.length <= GEOMETRY_TOLERANCE:
            raise DegenerateGeometry(
                f"Edge from {self.initial_vertex} to {self.final_vertex} has zero length."
            )

        self.angle = float(np.arctan2(delta[1], delta[0]))
        self.center_point = midpoint(self.initial_vertex, self.final_vertex)
        self.stringer_dimension = 0.0

    @property
    def direction_cosines(self) -> Tuple[float, float]:
        return np.cos(self.angle), np.sin(self.angle)

    def __repr__(self):
        return (
            f"Edge({self.initial_vertex} -> {self.final_vertex}, "
            f"L={self.length:.3f}, angle={self.angle:.4f})"
        )


class Vertices:
    """面板顶点 (逆时针: 左下、右下、右上、左上)"""

    def __init__(self, vertex1, vertex2, vertex3, vertex4):
        self.points = np.array([as_point(v) for v in (vertex1, vertex2, vertex3, vertex4)])

    @classmethod
    def from_list(cls, points: Sequence) -> 'Vertices':
        if len(points) != 4:
            raise ValueError(f"A panel needs 4 vertices, got {len(points)}")
        return cls(*points)

    @property
    def x_coordinates(self) -> np.ndarray:
        return self.points[:, 0]

    @property
    def y_coordinates(self) -> np.ndarray:
        return self.points[:, 1]

    @property
    def center_point(self) -> np.ndarray:
        """两条对角线中点的中点"""
        p = self.points
        return midpoint(midpoint(p[0], p[2]), midpoint(p[1], p[3]))

    @property
    def area(self) -> float:
        """有向面积 (鞋带公式)，逆时针为正"""
        x, y = self.x_coordinates, self.y_coordinates
        return 0.5 * float(np.dot(x, np.roll(y, -1)) - np.dot(np.roll(x, -1), y))

    @property
    def self_intersecting(self) -> bool:
        """对边 (v1v2 与 v3v4，v2v3 与 v4v1) 是否严格相交"""
        p = self.points
        return (
            segments_cross(p[0], p[1], p[2], p[3])
            or segments_cross(p[1], p[2], p[3], p[0])
        )

    def __iter__(self):
        return iter(self.points)

    def __repr__(self):
        return f"Vertices({self.points.tolist()})"


class StringerGeometry:
    """
    纵筋几何

    三个夹持点: 起点、中点、终点。
    截面为 width × height 的矩形。
    """

    def __init__(self, initial_point, end_point, width: float, height: float):
        if width <= 0 or height <= 0:
            raise DegenerateGeometry(
                f"Stringer cross-section must be positive, got {width} x {height}"
            )
        self.width = float(width)
        self.height = float(height)
        self.set_end_points(initial_point, end_point)

    def set_end_points(self, initial_point, end_point):
        """修改端点并重新计算长度、角度和中点"""
        initial_point = as_point(initial_point)
        end_point = as_point(end_point)

        delta = end_point - initial_point
        length = float(np.hypot(delta[0], delta[1]))
        if length <= GEOMETRY_TOLERANCE:
            raise DegenerateGeometry(
                f"Stringer from {initial_point} to {end_point} has zero length."
            )

        self.initial_point = initial_point
        self.end_point = end_point
        self.length = length
        self.angle = float(np.arctan2(delta[1], delta[0]))
        self.center_point = midpoint(initial_point, end_point)

    @property
    def area(self) -> float:
        return self.width * self.height

    @property
    def direction_cosines(self) -> Tuple[float, float]:
        return np.cos(self.angle), np.sin(self.angle)

    @property
    def grip_positions(self) -> List[np.ndarray]:
        return [self.initial_point, self.center_point, self.end_point]

    def divide(self, number: int) -> List['StringerGeometry']:
        """将纵筋等分为 number 段"""
        if number < 1:
            raise ValueError(f"Number of divisions must be >= 1, got {number}")

        points = [
            self.initial_point + (self.end_point - self.initial_point) * i / number
            for i in range(number + 1)
        ]
        return [
            StringerGeometry(points[i], points[i + 1], self.width, self.height)
            for i in range(number)
        ]

    def __repr__(self):
        return (
            f"StringerGeometry({self.initial_point} -> {self.end_point}, "
            f"{self.width} x {self.height})"
        )


class PanelGeometry:
    """
    面板几何

    边的编号: edge1 = 底边 (v1→v2), edge2 = 右边 (v2→v3),
    edge3 = 顶边 (v3→v4), edge4 = 左边 (v4→v1)。

    形状参数:
        a = (x2 + x3 - x1 - x4) / 2
        b = (y3 + y4 - y1 - y2) / 2
        c = (x3 + x4 - x1 - x2) / 2
        d = (y2 + y3 - y1 - y4) / 2
    """

    def __init__(self, vertices, width: float):
        if width <= 0:
            raise DegenerateGeometry(f"Panel width must be positive, got {width}")
        self.width = float(width)
        self._stringer_dimensions = np.zeros(4)
        self.set_vertices(vertices)

    def set_vertices(self, vertices):
        """修改顶点，重新计算边和形状参数"""
        if not isinstance(vertices, Vertices):
            vertices = Vertices.from_list(list(vertices))

        area = vertices.area
        if area <= GEOMETRY_TOLERANCE:
            raise DegenerateGeometry(
                f"Panel {vertices} has non-positive area ({area:.3g}); "
                "vertices must be counter-clockwise and not self-intersecting."
            )
        # 蝶形四边形两瓣面积不等时有向面积仍为正
        if vertices.self_intersecting:
            raise DegenerateGeometry(f"Panel {vertices} is self-intersecting.")

        self.vertices = vertices
        self.invalidate()

    def invalidate(self):
        """根据当前顶点重新计算缓存的边和形状参数"""
        p = self.vertices.points
        self.edges = [Edge(p[i], p[(i + 1) % 4]) for i in range(4)]
        for edge, s in zip(self.edges, self._stringer_dimensions):
            edge.stringer_dimension = float(s)
        self.dimensions = self._calc_dimensions()

    def _calc_dimensions(self) -> Tuple[float, float, float, float]:
        x = self.vertices.x_coordinates
        y = self.vertices.y_coordinates

        a = 0.5 * (x[1] + x[2] - x[0] - x[3])
        b = 0.5 * (y[2] + y[3] - y[0] - y[1])
        c = 0.5 * (x[2] + x[3] - x[0] - x[1])
        d = 0.5 * (y[1] + y[2] - y[0] - y[3])
        return float(a), float(b), float(c), float(d)

    @property
    def edge1(self) -> Edge:
        return self.edges[0]

    @property
    def edge2(self) -> Edge:
        return self.edges[1]

    @property
    def edge3(self) -> Edge:
        return self.edges[2]

    @property
    def edge4(self) -> Edge:
        return self.edges[3]

    @property
    def is_rectangular(self) -> bool:
        """四个角处相邻边夹角均为 π/2 或 3π/2"""
        two_pi = 2 * np.pi
        angles = [
            (self.edges[(i + 1) % 4].angle - self.edges[i].angle) % two_pi
            for i in range(4)
        ]
        return all(
            np.isclose(angle, 0.5 * np.pi, rtol=0, atol=ANGLE_TOLERANCE)
            or np.isclose(angle, 1.5 * np.pi, rtol=0, atol=ANGLE_TOLERANCE)
            for angle in angles
        )

    @property
    def edge_lengths(self) -> np.ndarray:
        return np.array([e.length for e in self.edges])

    @property
    def grip_positions(self) -> List[np.ndarray]:
        return [e.center_point for e in self.edges]

    @property
    def stringer_dimensions(self) -> np.ndarray:
        return np.array([e.stringer_dimension for e in self.edges])

    def set_edge_stringer_dimensions(self, stringer_heights: Sequence[float]):
        """
        设置各边的纵筋尺寸修正

        Args:
            stringer_heights: 与 edge1..edge4 相邻的纵筋截面高度，
                每条边取其一半
        """
        if len(stringer_heights) != 4:
            raise ValueError(f"Expected 4 stringer heights, got {len(stringer_heights)}")

        self._stringer_dimensions = 0.5 * np.asarray(stringer_heights, dtype=float)
        for edge, s in zip(self.edges, self._stringer_dimensions):
            edge.stringer_dimension = float(s)

    def __repr__(self):
        return f"PanelGeometry({self.vertices}, width={self.width})"
