# 文件: tests/test_panel_nonlinear.py
"""
非线性面板单元单元测试
"""

import numpy as np
import pytest

from spm_elements import (
    ConcreteParameters,
    Membrane,
    Node,
    NonlinearPanel,
    PanelGeometry,
    Steel,
    WebReinforcement,
    WebReinforcementDirection,
)
from spm_elements.materials import principal_stresses


SQUARE = [(0, 0), (400, 0), (400, 400), (0, 400)]


def make_panel(vertices=SQUARE, reinforced=True, **kwargs):
    geometry = PanelGeometry(vertices, 100)
    grips = [Node(i + 1, *p) for i, p in enumerate(geometry.grip_positions)]
    reinforcement = None
    if reinforced:
        direction = WebReinforcementDirection(8, 100, Steel(500), 100)
        reinforcement = WebReinforcement(direction, direction)
    return NonlinearPanel(1, grips, geometry, ConcreteParameters(30), reinforcement, **kwargs)


def shear(delta):
    """顶边夹持点沿 x 方向位移"""
    u = np.zeros(8)
    u[4] = delta
    return u


class TestNonlinearPanelSetup:
    """测试矩阵预计算"""

    def setup_method(self):
        self.panel = make_panel()

    def test_shapes(self):
        """测试 BA、Q、Pc、Ps 维度"""
        assert self.panel.BA.shape == (12, 8)
        assert self.panel.Q.shape == (8, 8)
        assert self.panel.Pc.shape == (8, 12)
        assert self.panel.Ps.shape == (8, 12)
        assert self.panel.local_stiffness.shape == (8, 8)
        assert np.allclose(self.panel.transformation_matrix, np.eye(8))

    def test_rigid_translation_strain(self):
        """测试刚体平移不产生应变"""
        assert np.allclose(self.panel.BA @ np.tile([1.0, 0.0], 4), 0)
        assert np.allclose(self.panel.BA @ np.tile([0.0, 1.0], 4), 0)

    def test_shear_strain(self):
        """测试剪切位移产生剪应变 γ = δ/b"""
        self.panel.set_displacements(shear(0.4))
        gamma = self.panel.strain_vector[2::3]
        assert np.allclose(gamma, 0.4 / 400)

    def test_stringer_dimensions(self):
        """测试纵筋尺寸只修改混凝土平衡矩阵"""
        Pc0 = self.panel.Pc.copy()
        Ps0 = self.panel.Ps.copy()
        self.panel.set_edge_stringer_dimensions([100, 100, 100, 100])
        assert not np.allclose(self.panel.Pc, Pc0)
        assert np.allclose(self.panel.Ps, Ps0)
        assert np.isclose(self.panel.Pc[1, 1], 100 * (0 - 400 + 50 + 50))

    def test_custom_integration_points(self):
        """测试自定义积分点"""
        points = [Membrane(ConcreteParameters(40)) for _ in range(4)]
        panel = make_panel(reinforced=False, integration_points=points)
        assert panel.integration_points[0] is points[0]

        with pytest.raises(TypeError):
            make_panel(integration_points=[object()] * 4)
        with pytest.raises(ValueError):
            make_panel(integration_points=points[:3])


class TestNonlinearPanelAnalysis:
    """测试非线性面板分析"""

    def setup_method(self):
        self.panel = make_panel()

    def test_zero_load(self):
        """测试零位移: 内力为零，刚度等于初始刚度"""
        self.panel.analyze(np.zeros(8))
        assert np.all(self.panel.forces == 0)
        assert np.allclose(self.panel.local_stiffness, self.panel.initial_stiffness)
        assert not self.panel.cracked

    def test_translation(self):
        """测试刚体平移不产生内力"""
        self.panel.analyze(np.tile([0.3, -0.2], 4))
        assert np.allclose(self.panel.forces, 0)

    def test_force_equilibrium(self):
        """测试夹持点力自平衡"""
        self.panel.analyze(shear(0.05))
        f = self.panel.forces
        scale = np.abs(f).max()
        assert scale > 0
        assert np.isclose(np.sum(f[0::2]), 0, atol=1e-9 * scale)
        assert np.isclose(np.sum(f[1::2]), 0, atol=1e-9 * scale)

    def test_small_shear_is_linear(self):
        """测试开裂前内力与位移成正比"""
        self.panel.analyze(shear(1e-4))
        f1 = self.panel.forces.copy()
        self.panel.analyze(shear(2e-4))
        assert np.allclose(self.panel.forces, 2 * f1, rtol=1e-3, atol=1e-3 * np.abs(f1).max())
        assert not self.panel.cracked

    def test_cracking_is_permanent(self):
        """测试开裂后卸载仍保持开裂"""
        self.panel.analyze(shear(1.0))
        assert self.panel.cracked
        ex, ey_, _ = self.panel.concrete_principal_strains
        assert ex > ey_

        self.panel.analyze(np.zeros(8))
        assert self.panel.cracked

    def test_softening_after_cracking(self):
        """测试开裂后割线刚度降低"""
        self.panel.analyze(shear(1.0))
        K0 = self.panel.initial_stiffness
        K = self.panel.local_stiffness
        assert np.linalg.norm(K) < np.linalg.norm(K0)

    def test_commit_state(self):
        """测试提交状态为独立副本"""
        self.panel.analyze(shear(0.05))
        self.panel.commit_state()
        committed = self.panel.committed_states
        assert len(committed) == 4
        assert np.allclose(committed[0].strain, self.panel.integration_points[0].state.strain)

        self.panel.analyze(np.zeros(8))
        assert not np.allclose(committed[0].strain, 0)

    def test_stress_results(self):
        """测试平均应力和主应力"""
        self.panel.analyze(shear(0.05))
        sx, sy, txy = self.panel.average_stresses
        assert txy != 0
        assert np.allclose(
            self.panel.stresses, self.panel.concrete_stresses + self.panel.reinforcement_stresses
        )
        s1, s2, theta1 = self.panel.principal_stresses
        assert s1 >= s2
        assert np.allclose(
            [s1, s2, theta1], principal_stresses(self.panel.average_stresses)
        )
        c1, c2, _ = self.panel.concrete_principal_stresses
        assert c1 >= c2

    def test_max_force(self):
        """测试最大夹持点力"""
        self.panel.analyze(np.zeros(8))
        assert self.panel.max_force == 0
        self.panel.analyze(shear(0.05))
        assert np.isclose(self.panel.max_force, np.abs(self.panel.forces).max())
        assert self.panel.max_force > 0

    def test_crack_opening(self):
        """测试裂缝宽度 w = ε1·smθ，未开裂时为零"""
        self.panel.analyze(np.zeros(8))
        assert self.panel.crack_opening == 0

        self.panel.analyze(shear(1.0))
        e1, _, theta1 = self.panel.concrete_principal_strains
        spacing = self.panel.reinforcement.crack_spacing(theta1)
        assert e1 > 0
        assert np.isclose(self.panel.crack_spacing, spacing)
        assert np.isclose(self.panel.crack_opening, e1 * spacing)

    def test_crack_opening_plain(self):
        """测试无分布钢筋时裂缝间距取 21 mm"""
        panel = make_panel(reinforced=False)
        panel.analyze(shear(1.0))
        e1, _, _ = panel.concrete_principal_strains
        assert panel.crack_spacing == 21.0
        assert np.isclose(panel.crack_opening, 21.0 * e1)


class TestNonlinearPanelRestore:
    """测试放弃试探状态"""

    def setup_method(self):
        self.panel = make_panel()

    def test_restore_discards_cracking(self):
        """测试未提交的开裂在恢复后被撤销"""
        self.panel.analyze(shear(0.01))
        assert not self.panel.cracked
        self.panel.commit_state()
        forces = self.panel.forces.copy()
        stiffness = self.panel.local_stiffness.copy()

        self.panel.analyze(shear(1.0))
        assert self.panel.cracked

        self.panel.restore_state()
        assert not self.panel.cracked
        assert all(not p.concrete.cracked for p in self.panel.integration_points)
        assert np.allclose(self.panel.forces, forces)
        assert np.allclose(self.panel.local_stiffness, stiffness)

        self.panel.analyze(shear(0.01))
        assert np.allclose(self.panel.forces, forces)
        assert not self.panel.cracked

    def test_restore_keeps_committed_cracking(self):
        """测试已提交的开裂在恢复后保留"""
        self.panel.analyze(shear(1.0))
        self.panel.commit_state()
        forces = self.panel.forces.copy()

        self.panel.analyze(np.zeros(8))
        self.panel.restore_state()
        assert self.panel.cracked
        assert np.allclose(self.panel.forces, forces)
        assert np.allclose(
            self.panel.integration_points[0].state.strain, self.panel.committed_states[0].strain
        )

    def test_restore_initial(self):
        """测试未提交过时恢复到初始刚度"""
        self.panel.analyze(shear(1.0))
        self.panel.restore_state()
        assert np.allclose(self.panel.local_stiffness, self.panel.initial_stiffness)
        assert np.all(self.panel.forces == 0)


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
