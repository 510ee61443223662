# 文件: tests/test_relations.py
"""
积分点状态与纵筋应力-应变关系单元测试
"""

import logging

import numpy as np
import pytest

from spm_elements import (
    ConcreteParameters,
    ConstitutiveModel,
    CrackState,
    DSFMRelations,
    IntegrationPoint,
    MCFTRelations,
    NonConvergentMaterialInversion,
    Steel,
    UniaxialConcrete,
    UniaxialReinforcement,
    get_relations,
)


def make_relations(model=ConstitutiveModel.MCFT, with_bars=True):
    bars = UniaxialReinforcement(4, 10, Steel(500)) if with_bars else None
    area = 10000 - (bars.area if bars else 0.0)
    concrete = UniaxialConcrete(ConcreteParameters(30, model=model), area)
    return get_relations(concrete, bars, model)


def make_point(relations, index=0):
    ey = relations.reinforcement.yield_strain if relations.reinforcement else 0.0
    return IntegrationPoint(
        relations.concrete.ecr, ey, (0.0, 1 / relations.stiffness), index=index
    )


class TestIntegrationPoint:
    """测试积分点状态转移"""

    def test_forward_only(self):
        """测试状态只进不退"""
        point = IntegrationPoint(1e-4, 2e-3)
        assert point.uncracked

        point.advance_to(CrackState.YIELDING)
        assert point.yielding
        assert point.cracked

        point.advance_to(CrackState.CRACKED)
        point.advance_to(CrackState.UNCRACKED)
        assert point.state == CrackState.YIELDING

    def test_verify(self):
        """测试开裂和屈服判定"""
        point = IntegrationPoint(1e-4, 2e-3)
        assert not point.verify_cracked(5e-5)
        assert point.verify_cracked(1e-4)
        assert point.cracked_not_yielding
        assert not point.verify_yielding(1e-3)
        assert point.verify_yielding(-2.5e-3)


class TestSectionProperties:
    """测试截面特征值"""

    def test_stiffness(self):
        """测试 t1 = EcAc + EsAs 和 ξ"""
        relations = make_relations()
        EcAc = relations.concrete.stiffness
        EsAs = relations.reinforcement.stiffness
        assert np.isclose(relations.stiffness, EcAc + EsAs)
        assert np.isclose(relations.stiffness_ratio, EsAs / EcAc)

    def test_max_compressive_force(self):
        """测试最大压力 Nt"""
        relations = make_relations()
        Nc = relations.concrete.max_force
        xi = relations.stiffness_ratio
        Nyr = relations.yield_force
        assert np.isclose(relations.max_compressive_force, max(Nc * (1 + xi) ** 2, Nc - Nyr))

        plain = make_relations(with_bars=False)
        assert np.isclose(plain.max_compressive_force, plain.concrete.max_force)
        assert plain.yield_force == 0.0

    def test_cracking_force(self):
        """测试开裂力 Nr = ft·Ac·√(1+ξ)"""
        relations = make_relations()
        xi = relations.stiffness_ratio
        expected = relations.concrete.ft * relations.concrete.area * np.sqrt(1 + xi)
        assert np.isclose(relations.cracking_force, expected)

    def test_get_relations(self):
        """测试按模型选择关系"""
        assert isinstance(make_relations(ConstitutiveModel.MCFT), MCFTRelations)
        assert isinstance(make_relations(ConstitutiveModel.DSFM), DSFMRelations)
        with pytest.raises(ValueError):
            get_relations(make_relations().concrete, None, 'unknown')


class TestTensionBranches:
    """测试受拉分支"""

    def setup_method(self):
        self.relations = make_relations()
        self.point = make_point(self.relations)
        self.t1 = self.relations.stiffness

    def test_zero_force(self):
        """测试零轴力返回初始柔度且不改变状态"""
        e, de = self.relations.stringer_strain(0.0, self.point)
        assert e == 0.0
        assert np.isclose(de, 1 / self.t1)
        assert self.point.uncracked

    def test_uncracked(self):
        """测试未开裂: e = N / t1"""
        e, de = self.relations.stringer_strain(1000.0, self.point)
        assert np.isclose(e, 1000 / self.t1)
        assert np.isclose(de, 1 / self.t1)
        assert self.point.state == CrackState.UNCRACKED

    def test_cracked(self):
        """测试开裂未屈服: F(e) = N"""
        N = 40000.0
        e, de = self.relations.stringer_strain(N, self.point)
        assert self.point.state == CrackState.CRACKED
        assert self.relations.concrete.ecr <= e <= self.relations.yield_strain
        assert np.isclose(self.relations.force(e), N, rtol=1e-6)
        assert de > 1 / self.t1

    def test_yielding(self):
        """测试屈服: e = εy + (N - Nyr) / t1"""
        Nyr = self.relations.yield_force
        e, de = self.relations.stringer_strain(2 * Nyr, self.point)
        assert self.point.state == CrackState.YIELDING
        assert np.isclose(e, self.relations.yield_strain + Nyr / self.t1)
        assert np.isclose(de, 1 / self.t1)

    def test_cracked_unloading_stays_cracked(self):
        """测试开裂后小拉力 (N < F(εcr)) 仍为开裂状态，不误判屈服"""
        Nr = self.relations.cracking_force
        self.relations.stringer_strain(2 * Nr, self.point)
        assert self.point.state == CrackState.CRACKED

        N = 0.3 * Nr
        e, de = self.relations.stringer_strain(N, self.point)
        assert self.point.state == CrackState.CRACKED
        assert 0 < e < self.relations.concrete.ecr
        assert np.isclose(e, N / self.t1, rtol=1e-6)
        assert np.isclose(de, 1 / self.t1, rtol=1e-4)
        assert self.point.fallback_count == 0

    def test_cracked_below_yield_force(self):
        """测试开裂后 N < Nyr 时不进入屈服分支"""
        Nyr = self.relations.yield_force
        self.relations.stringer_strain(40000.0, self.point)

        e, _ = self.relations.stringer_strain(0.9 * Nyr, self.point)
        assert self.point.state == CrackState.CRACKED
        assert e < self.relations.yield_strain
        assert np.isclose(self.relations.force(e), 0.9 * Nyr, rtol=1e-6)

    def test_yielded_point_stays_yielding(self):
        """测试屈服后小拉力仍按屈服分支计算"""
        Nyr = self.relations.yield_force
        self.relations.stringer_strain(2 * Nyr, self.point)

        e, _ = self.relations.stringer_strain(1000.0, self.point)
        assert self.point.yielding
        assert np.isclose(e, self.relations.yield_strain + (1000 - Nyr) / self.t1)


class TestCompressionBranches:
    """测试受压分支"""

    def test_mcft_not_crushed(self):
        """测试 MCFT 未压碎"""
        relations = make_relations(ConstitutiveModel.MCFT)
        point = make_point(relations)
        e, de = relations.stringer_strain(-1e5, point)
        assert relations.concrete.ec < e < 0
        assert de > 0
        assert point.uncracked

    def test_mcft_crushing(self):
        """测试 MCFT 压碎后线性延伸"""
        relations = make_relations(ConstitutiveModel.MCFT, with_bars=False)
        point = make_point(relations)
        Nt = relations.max_compressive_force
        e_peak, _ = relations.stringer_strain(Nt + 1.0, point)
        e, de = relations.stringer_strain(Nt - 1e4, point)
        assert e < e_peak
        assert np.isclose(de, 1 / relations.stiffness)

    def test_dsfm_root(self):
        """测试 DSFM 受压求根"""
        relations = make_relations(ConstitutiveModel.DSFM)
        point = make_point(relations)
        e, de = relations.stringer_strain(-1000.0, point)
        assert relations.concrete.ecu < e < 0
        assert np.isclose(relations.force(e), -1000.0, rtol=1e-3)
        assert point.last_generalized_strain == (e, de)

    def test_solve_raises(self):
        """测试区间内无根时求解器抛出异常"""
        relations = make_relations(ConstitutiveModel.DSFM)
        with pytest.raises(NonConvergentMaterialInversion) as info:
            relations.solve(-1e7, relations.concrete.ecu, 0.0)
        assert info.value.normal_force == -1e7


class TestFallback:
    """测试求逆失败时的回退"""

    def test_nan_force(self, caplog):
        """测试 NaN 轴力返回缓存值并记录警告"""
        relations = make_relations()
        point = make_point(relations, index=2)
        cached = relations.stringer_strain(1000.0, point)

        with caplog.at_level(logging.WARNING, logger='spm_elements.relations'):
            result = relations.stringer_strain(float('nan'), point)

        assert result == cached
        assert point.fallback_count == 1
        assert 'integration point 2' in caplog.text

    def test_dsfm_beyond_capacity(self, caplog):
        """测试 DSFM 超出承载力时回退，结果不含 NaN"""
        relations = make_relations(ConstitutiveModel.DSFM)
        point = make_point(relations)
        cached = relations.stringer_strain(-1000.0, point)

        with caplog.at_level(logging.WARNING, logger='spm_elements.relations'):
            e, de = relations.stringer_strain(-1e7, point)

        assert (e, de) == cached
        assert np.isfinite(e) and np.isfinite(de)
        assert point.fallback_count == 1
        assert len(caplog.records) == 1
        assert caplog.records[0].levelno == logging.WARNING


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
