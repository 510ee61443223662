# 文件: spm_elements/relations.py
"""
纵筋应力-应变关系 (由轴力反求应变)

给定积分点轴力 N，求广义应变 e 及柔度 de = dε/dN:

受拉:
    1. 未开裂:     e = N / (EcAc + EsAs)
    2. 开裂未屈服: Brent 求根 N - F(e) = 0, e ∈ [εcr, εy] (N < F(εcr) 时 e ∈ [0, εcr])
    3. 钢筋屈服:   e = εy + (N - Nyr) / (EcAc + EsAs)
受压 (MCFT):
    4. 未压碎: 抛物线闭式解
    5. 压碎:   超过最大压力 Nt 后线性延伸
受压 (DSFM):
    Brent 求根 e ∈ [εcu, 0]

求逆失败或结果为 NaN 时回退到积分点缓存的广义应变，并计数、记录日志。
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional, Tuple

import numpy as np
from scipy.optimize import brentq

from .exceptions import NonConvergentMaterialInversion
from .integration_point import CrackState, IntegrationPoint
from .materials.concrete import ConstitutiveModel, UniaxialConcrete
from .materials.reinforcement import UniaxialReinforcement

logger = logging.getLogger(__name__)

GeneralizedStrain = Tuple[float, float]


def numerical_derivative(func, x: float, step: Optional[float] = None) -> float:
    """中心差分求一阶导数"""
    h = step if step is not None else 1e-6 * max(abs(x), 1e-3)
    return (func(x + h) - func(x - h)) / (2 * h)


class StressStrainRelations(ABC):
    """
    纵筋应力-应变关系基类

    Attributes:
        concrete: UniaxialConcrete
        reinforcement: UniaxialReinforcement 或 None
        stiffness: EcAc + EsAs
        stiffness_ratio: ξ = EsAs / EcAc
        max_compressive_force: Nt (负值)
        cracking_force: Nr
        yield_force: Nyr (无钢筋时为 0)
    """

    def __init__(self, concrete: UniaxialConcrete,
                 reinforcement: Optional[UniaxialReinforcement] = None,
                 root_tolerance: float = 1e-10, max_iterations: int = 1000,
                 zero_tolerance: float = 1e-6):
        self.concrete = concrete
        self.reinforcement = reinforcement
        self.root_tolerance = root_tolerance
        self.max_iterations = max_iterations
        self.zero_tolerance = zero_tolerance

        self.stiffness = concrete.stiffness + (reinforcement.stiffness if reinforcement else 0.0)
        self.stiffness_ratio = (reinforcement.stiffness if reinforcement else 0.0) / concrete.stiffness
        self.yield_force = reinforcement.yield_force if reinforcement else 0.0
        self.yield_strain = reinforcement.yield_strain if reinforcement else 0.0
        self.max_compressive_force = self._calc_max_compressive_force()
        self.cracking_force = self._calc_cracking_force()

    def _calc_max_compressive_force(self) -> float:
        Nc = self.concrete.max_force
        if self.reinforcement is None:
            return Nc

        xi = self.stiffness_ratio
        return max(Nc * (1 + xi) ** 2, Nc - self.yield_force)

    def _calc_cracking_force(self) -> float:
        xi = self.stiffness_ratio
        return self.concrete.ft * self.concrete.area * (1 + xi) / np.sqrt(1 + xi)

    def force(self, strain: float) -> float:
        """截面轴力 F(ε) = Fc(ε) + Fs(ε)"""
        steel = self.reinforcement.calculate_force(strain) if self.reinforcement else 0.0
        return self.concrete.calculate_force(strain) + steel

    def stringer_strain(self, normal_force: float,
                        point: IntegrationPoint) -> GeneralizedStrain:
        """
        由轴力求广义应变

        Args:
            normal_force: 积分点轴力 N
            point: 积分点 (状态会被更新)

        Returns:
            (e, de): 应变和柔度
        """
        if np.isnan(normal_force):
            return self._fallback(normal_force, point)

        if abs(normal_force) < self.zero_tolerance:
            return 0.0, 1 / self.stiffness

        try:
            if normal_force > 0:
                result = self.tensioned_case(normal_force, point)
            else:
                result = self.compressed_case(normal_force, point)
        except NonConvergentMaterialInversion:
            return self._fallback(normal_force, point)

        if np.isnan(result[0]) or np.isnan(result[1]):
            return self._fallback(normal_force, point)

        point.last_generalized_strain = result
        return result

    def _fallback(self, normal_force: float, point: IntegrationPoint) -> GeneralizedStrain:
        point.fallback_count += 1
        logger.warning(
            "Strain inversion failed at integration point %d (N = %.6g); "
            "using last generalized strain %s (fallback #%d)",
            point.index, normal_force, point.last_generalized_strain, point.fallback_count,
        )
        return point.last_generalized_strain

    def solve(self, normal_force: float, lower_bound: float,
              upper_bound: float) -> GeneralizedStrain:
        """
        Brent 求根 N - F(e) = 0

        Raises:
            NonConvergentMaterialInversion: 区间不包含根、未收敛或结果为 NaN
        """
        def residual(e):
            return normal_force - self.force(e)

        try:
            e, info = brentq(
                residual, lower_bound, upper_bound,
                xtol=self.root_tolerance, maxiter=self.max_iterations,
                full_output=True, disp=False,
            )
        except ValueError as exc:
            raise NonConvergentMaterialInversion(normal_force, str(exc)) from exc

        if not info.converged or np.isnan(e):
            raise NonConvergentMaterialInversion(normal_force)

        dN = numerical_derivative(self.force, e)
        if dN == 0 or np.isnan(dN):
            raise NonConvergentMaterialInversion(
                normal_force, f"Zero section stiffness at e = {e:.6g}"
            )
        return e, 1 / dN

    # ------------------------------------------------------------------
    # 受拉
    # ------------------------------------------------------------------
    def tensioned_case(self, N: float, point: IntegrationPoint) -> GeneralizedStrain:
        if point.uncracked:
            uncracked = self._uncracked_state(N)
            if not point.verify_cracked(uncracked[0]):
                return uncracked

        if point.cracked_not_yielding:
            if self.reinforcement is None or N >= self.force(self.yield_strain):
                # 无钢筋或轴力超过 F(εy): 按屈服分支
                point.advance_to(CrackState.YIELDING)
            else:
                cracked = self._cracked_state(N)
                if not point.verify_yielding(cracked[0]):
                    return cracked

        return self._yielding_steel_state(N)

    def _uncracked_state(self, N: float) -> GeneralizedStrain:
        t1 = self.stiffness
        return N / t1, 1 / t1

    def _cracked_state(self, N: float) -> GeneralizedStrain:
        """
        开裂未屈服 (0 < N < F(εy))

        N < F(εcr) 时 (卸载或积分点内插轴力) 根位于 [0, εcr]，
        否则位于 [εcr, εy]。
        """
        ecr = self.concrete.ecr
        if N < self.force(ecr):
            return self.solve(N, 0.0, ecr)
        return self.solve(N, ecr, self.yield_strain)

    def _yielding_steel_state(self, N: float) -> GeneralizedStrain:
        t1 = self.stiffness
        return self.yield_strain + (N - self.yield_force) / t1, 1 / t1

    # ------------------------------------------------------------------
    # 受压
    # ------------------------------------------------------------------
    @abstractmethod
    def compressed_case(self, N: float, point: IntegrationPoint) -> GeneralizedStrain:
        """受压分支 (N < 0)"""
        pass


class MCFTRelations(StressStrainRelations):
    """MCFT 关系: 受压采用闭式解"""

    def compressed_case(self, N: float, point: IntegrationPoint) -> GeneralizedStrain:
        if N > self.max_compressive_force:
            return self._concrete_not_crushed_state(N)
        return self._concrete_crushing_state(N)

    def _concrete_not_crushed_state(self, N: float) -> GeneralizedStrain:
        ec = self.concrete.ec
        Nc = self.concrete.max_force
        xi = self.stiffness_ratio

        with np.errstate(invalid='ignore'):
            t2 = np.sqrt((1 + xi) ** 2 - N / Nc)
            e = ec * (1 + xi - t2)

            # 钢筋受压屈服
            if self.reinforcement is not None and e < -self.yield_strain:
                t2 = np.sqrt(1 - (N + self.yield_force) / Nc)
                e = ec * (1 - t2)

        return float(e), float(1 / (self.concrete.stiffness * t2))

    def _concrete_crushing_state(self, N: float) -> GeneralizedStrain:
        ec = self.concrete.ec
        Nc = self.concrete.max_force
        Nt = self.max_compressive_force
        xi = self.stiffness_ratio
        t1 = self.stiffness

        with np.errstate(invalid='ignore'):
            # Nt = Nc·(1+ξ)² 时根号内为零，舍入误差可能使其略小于零
            t2 = np.sqrt(max((1 + xi) ** 2 - Nt / Nc, 0.0))
            e = ec * (1 + xi - t2) + (N - Nt) / t1

            if self.reinforcement is not None and e < -self.yield_strain:
                e = ec * (1 - np.sqrt(max(1 - (self.yield_force + Nt) / Nc, 0.0))) + (N - Nt) / t1

        return float(e), 1 / t1


class DSFMRelations(StressStrainRelations):
    """DSFM 关系: 受压在 [εcu, 0] 上求根，失败时回退"""

    def compressed_case(self, N: float, point: IntegrationPoint) -> GeneralizedStrain:
        return self.solve(N, self.concrete.ecu, 0.0)


def get_relations(concrete: UniaxialConcrete,
                  reinforcement: Optional[UniaxialReinforcement] = None,
                  model: ConstitutiveModel = ConstitutiveModel.MCFT,
                  **options) -> StressStrainRelations:
    """根据本构模型创建应力-应变关系"""
    if model == ConstitutiveModel.MCFT:
        return MCFTRelations(concrete, reinforcement, **options)
    if model == ConstitutiveModel.DSFM:
        return DSFMRelations(concrete, reinforcement, **options)
    raise ValueError(f"Unknown constitutive model: {model!r}")
