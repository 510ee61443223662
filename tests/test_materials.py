# 文件: tests/test_materials.py
"""
材料协作对象单元测试
"""

import numpy as np
import pytest

from spm_elements.materials import (
    ConstitutiveModel,
    ConcreteParameters,
    UniaxialConcrete,
    BiaxialConcrete,
    Steel,
    UniaxialReinforcement,
    WebReinforcementDirection,
    WebReinforcement,
    Membrane,
    MembraneMaterial,
    MembraneState,
    UniaxialMaterial,
    MaterialFactory,
    principal_strains,
    principal_stresses,
)


class TestConcreteParameters:
    """测试混凝土参数"""

    def test_derived_values(self):
        """测试弹性模量、抗拉强度、开裂应变和剪切模量"""
        params = ConcreteParameters(30)
        assert np.isclose(params.elastic_module, 30000)
        assert np.isclose(params.tensile_strength, 0.33 * np.sqrt(30))
        assert np.isclose(params.cracking_strain, 0.33 * np.sqrt(30) / 30000)
        assert np.isclose(params.shear_modulus, 12500)
        assert params.model == ConstitutiveModel.MCFT

    def test_compression_curve(self):
        """测试受压曲线: 峰值、极限后为零"""
        params = ConcreteParameters(30)
        assert np.isclose(params.compression_stress(-0.002), -30)
        assert np.isclose(params.compression_stress(-0.001), -30 * 0.75)
        assert -30 < params.compression_stress(-0.003) < 0
        assert params.compression_stress(-0.004) == 0.0

    def test_softening(self):
        """测试压软化降低峰值"""
        params = ConcreteParameters(30)
        assert np.isclose(params.compression_stress(-0.002, softening=0.5), -15)

    def test_tension_stiffening(self):
        """测试开裂后拉应力随应变下降"""
        params = ConcreteParameters(30)
        ecr = params.cracking_strain
        assert np.isclose(params.tension_stress(0.5 * ecr), 0.5 * params.tensile_strength)
        assert params.tension_stress(1e-3) > params.tension_stress(2e-3) > 0

    def test_invalid(self):
        """测试非法参数"""
        with pytest.raises(ValueError):
            ConcreteParameters(-1)
        with pytest.raises(ValueError):
            ConcreteParameters(30, plastic_strain=-0.004)
        with pytest.raises(ValueError):
            ConcreteParameters(30, tensile_strength=0)


class TestUniaxialMaterials:
    """测试单轴混凝土和纵筋钢筋"""

    def test_uniaxial_concrete(self):
        """测试刚度和最大压力"""
        concrete = UniaxialConcrete(ConcreteParameters(30), 10000)
        assert np.isclose(concrete.stiffness, 3e8)
        assert np.isclose(concrete.max_force, -3e5)
        assert np.isclose(concrete.calculate_force(-0.002), -3e5)

    def test_steel(self):
        """测试理想弹塑性钢材"""
        steel = Steel(500)
        assert np.isclose(steel.yield_strain, 500 / 210000)
        assert np.isclose(steel.calculate_stress(1e-3), 210)
        assert steel.calculate_stress(0.01) == 500
        assert steel.calculate_stress(-0.01) == -500
        assert np.isclose(steel.secant_module(0.0), 210000)

    def test_uniaxial_reinforcement(self):
        """测试面积、屈服力和配筋率"""
        bars = UniaxialReinforcement(4, 10, Steel(500))
        area = 4 * np.pi * 25
        assert np.isclose(bars.area, area)
        assert np.isclose(bars.yield_force, 500 * area)
        assert np.isclose(bars.stiffness, 210000 * area)
        assert np.isclose(bars.calculate_ratio(10000), area / 10000)
        assert bars.calculate_ratio(0) == 0.0

    def test_protocol(self):
        """测试单轴材料协议"""
        assert isinstance(UniaxialConcrete(ConcreteParameters(30), 100), UniaxialMaterial)
        assert isinstance(UniaxialReinforcement(2, 8, Steel(400)), UniaxialMaterial)


class TestWebReinforcement:
    """测试面板分布钢筋"""

    def setup_method(self):
        self.direction = WebReinforcementDirection(8, 100, Steel(500), 100)

    def test_ratio(self):
        """测试双层配筋率"""
        assert np.isclose(self.direction.ratio, 2 * np.pi * 16 / (100 * 100))

    def test_initial_stiffness(self):
        """测试初始刚度 diag(ρx·Es, ρy·Es, 0)"""
        web = WebReinforcement(direction_x=self.direction)
        rho = self.direction.ratio
        assert np.allclose(web.initial_stiffness, np.diag([rho * 210000, 0, 0]))
        assert web.ratios == (rho, 0.0)
        assert web.yield_stresses == (500.0, 0.0)

    def test_yielding(self):
        """测试屈服后弥散应力不再增加"""
        web = WebReinforcement(self.direction, self.direction)
        stress, stiffness = web.calculate(np.array([0.01, -0.01, 0.0]))
        rho = self.direction.ratio
        assert np.allclose(stress, [rho * 500, -rho * 500, 0])
        assert np.isclose(stiffness[0, 0], rho * 500 / 0.01)

    def test_crack_spacing(self):
        """测试裂缝间距: 沿钢筋方向取该方向间距，缺失方向取 21 mm"""
        smx = 21 + 0.155 * 8 / self.direction.ratio
        assert np.isclose(self.direction.crack_spacing, smx)

        web = WebReinforcement(direction_x=self.direction)
        assert np.isclose(web.crack_spacing(0.0), smx)
        assert np.isclose(web.crack_spacing(np.pi / 2), 21.0)
        c = np.cos(np.pi / 4)
        assert np.isclose(web.crack_spacing(-np.pi / 4), 1 / (c / smx + c / 21.0))


class TestMembrane:
    """测试钢筋混凝土膜"""

    def setup_method(self):
        self.params = ConcreteParameters(30)
        direction = WebReinforcementDirection(8, 100, Steel(500), 100)
        self.reinforcement = WebReinforcement(direction, direction)
        self.membrane = Membrane(self.params, self.reinforcement)

    def test_protocol(self):
        """测试膜材料协议"""
        assert isinstance(self.membrane, MembraneMaterial)

    def test_initial_stiffness(self):
        """测试初始刚度: 混凝土 diag(Ec, Ec, Ec/2)"""
        Dc, Ds = self.membrane.initial_stiffness
        assert np.allclose(Dc, np.diag([30000, 30000, 15000]))
        assert np.allclose(Ds, self.reinforcement.initial_stiffness)

    def test_zero_strain(self):
        """测试零应变时割线刚度等于初始刚度"""
        result = self.membrane.calculate(np.zeros(3))
        Dc, Ds = self.membrane.initial_stiffness
        assert np.allclose(result.stress, 0)
        assert np.allclose(result.tangent, Dc + Ds)
        assert not result.is_cracked

    def test_uniaxial_compression(self):
        """测试小压应变近似线弹性"""
        result = self.membrane.calculate(np.array([-1e-5, 0.0, 0.0]))
        assert result.stress[0] < 0
        assert np.isclose(self.membrane.state.concrete_stress[0], -0.3, rtol=1e-2)

    def test_cracking_is_permanent(self):
        """测试开裂状态不可恢复"""
        self.membrane.calculate(np.array([1e-3, 0.0, 0.0]))
        assert self.membrane.state.cracked

        result = self.membrane.calculate(np.zeros(3))
        assert result.is_cracked
        assert self.membrane.concrete.cracked

    def test_symmetric_tangent(self):
        """测试割线刚度对称"""
        result = self.membrane.calculate(np.array([2e-4, -5e-4, 8e-4]))
        assert np.allclose(result.tangent, result.tangent.T)

    def test_state_clone(self):
        """测试状态深拷贝独立"""
        self.membrane.calculate(np.array([1e-4, 0.0, 0.0]))
        saved = self.membrane.state.clone()
        saved.strain[0] = 1.0
        assert self.membrane.state.strain[0] != 1.0
        assert isinstance(saved, MembraneState)

    def test_restore(self):
        """测试恢复到提交状态时撤销开裂"""
        self.membrane.calculate(np.array([1e-5, 0.0, 0.0]))
        committed = self.membrane.state.clone()

        self.membrane.calculate(np.array([1e-3, 0.0, 0.0]))
        assert self.membrane.concrete.cracked

        self.membrane.restore(committed)
        assert not self.membrane.state.cracked
        assert not self.membrane.concrete.cracked
        assert np.allclose(self.membrane.state.strain, [1e-5, 0.0, 0.0])
        assert self.membrane.state is not committed


class TestPrincipalValues:
    """测试主应变和主应力"""

    def test_principal_strains(self):
        """测试纯剪应变的主方向为 45°"""
        e1, e2, theta = principal_strains(np.array([0.0, 0.0, 2e-3]))
        assert np.isclose(e1, 1e-3)
        assert np.isclose(e2, -1e-3)
        assert np.isclose(theta, np.pi / 4)

    def test_principal_stresses(self):
        """测试单轴应力"""
        s1, s2, theta = principal_stresses(np.array([5.0, 0.0, 0.0]))
        assert np.isclose(s1, 5.0)
        assert np.isclose(s2, 0.0)
        assert np.isclose(theta, 0.0)


class TestMaterialFactory:
    """测试材料工厂"""

    def test_create_concrete(self):
        """测试创建混凝土"""
        params = MaterialFactory.create_concrete({'fc': 40, 'model': 'DSFM'})
        assert params.strength == 40
        assert params.model == ConstitutiveModel.DSFM

    def test_missing_parameter(self):
        """测试缺少必需参数"""
        with pytest.raises(ValueError, match="fc"):
            MaterialFactory.create_concrete({'ec': -0.002})
        with pytest.raises(ValueError, match="bar_diameter"):
            MaterialFactory.create_uniaxial_reinforcement({'number_of_bars': 2, 'fy': 500})
        with pytest.raises(ValueError, match="bar_spacing"):
            MaterialFactory.create_web_reinforcement(
                {'x': {'bar_diameter': 8, 'fy': 500}}, panel_width=100
            )

    def test_invalid_model(self):
        """测试无效的本构模型名称"""
        with pytest.raises(ValueError):
            MaterialFactory.create_concrete({'fc': 30, 'model': 'unknown'})

    def test_create_uniaxial_reinforcement(self):
        """测试创建纵筋钢筋"""
        bars = MaterialFactory.create_uniaxial_reinforcement({
            'number_of_bars': 2, 'bar_diameter': 12, 'fy': 400, 'Es': 200000,
        })
        assert bars.number_of_bars == 2
        assert bars.steel.elastic_module == 200000

    def test_create_membrane(self):
        """测试创建单方向配筋的膜"""
        membrane = MaterialFactory.create_membrane(
            {'fc': 30},
            {'x': {'bar_diameter': 8, 'bar_spacing': 100, 'fy': 500}},
            panel_width=100,
        )
        assert isinstance(membrane, Membrane)
        rx, ry = membrane.reinforcement.ratios
        assert rx > 0
        assert ry == 0.0

    def test_create_plain_membrane(self):
        """测试无配筋的膜"""
        membrane = MaterialFactory.create_membrane({'fc': 30})
        assert membrane.reinforcement is None
        assert np.allclose(membrane.initial_stiffness[1], 0)

    def test_biaxial_concrete_initial(self):
        """测试双轴混凝土初始刚度"""
        concrete = BiaxialConcrete(MaterialFactory.create_concrete({'fc': 30}))
        _, D = concrete.calculate(np.zeros(3))
        assert np.allclose(D, concrete.initial_stiffness)


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
