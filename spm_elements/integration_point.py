# 文件: spm_elements/integration_point.py
"""
纵筋积分点状态

状态只能单向推进: UNCRACKED → CRACKED → YIELDING。
同时缓存最近一次成功求得的广义应变 (e, de)，作为材料关系求逆失败时的回退值。
"""

from enum import IntEnum
from typing import Tuple


class CrackState(IntEnum):
    """积分点开裂/屈服状态"""
    UNCRACKED = 0
    CRACKED = 1
    YIELDING = 2


class IntegrationPoint:
    """
    纵筋积分点

    Attributes:
        cracking_strain: 开裂应变 εcr
        yield_strain: 钢筋屈服应变 εy (无钢筋时为 0)
        state: CrackState
        last_generalized_strain: 回退缓存 (e, de)
        fallback_count: 回退次数
    """

    def __init__(self, cracking_strain: float, yield_strain: float,
                 initial_generalized_strain: Tuple[float, float] = (0.0, 0.0),
                 index: int = 0):
        self.cracking_strain = float(cracking_strain)
        self.yield_strain = float(yield_strain)
        self.index = index
        self._state = CrackState.UNCRACKED
        self.last_generalized_strain = tuple(initial_generalized_strain)
        self.fallback_count = 0

    @property
    def state(self) -> CrackState:
        return self._state

    @property
    def uncracked(self) -> bool:
        return self._state == CrackState.UNCRACKED

    @property
    def cracked(self) -> bool:
        return self._state >= CrackState.CRACKED

    @property
    def yielding(self) -> bool:
        return self._state == CrackState.YIELDING

    @property
    def cracked_not_yielding(self) -> bool:
        return self._state == CrackState.CRACKED

    def advance_to(self, state: CrackState) -> CrackState:
        """
        状态转移 (只进不退)

        Returns:
            CrackState: 转移后的状态
        """
        if state > self._state:
            self._state = CrackState(state)
        return self._state

    def verify_cracked(self, strain: float) -> bool:
        """应变达到 εcr 时标记开裂"""
        if strain >= self.cracking_strain:
            self.advance_to(CrackState.CRACKED)
        return self.cracked

    def verify_yielding(self, strain: float) -> bool:
        """应变绝对值达到 εy 时标记屈服"""
        if abs(strain) >= self.yield_strain:
            self.advance_to(CrackState.YIELDING)
        return self.yielding

    def __repr__(self) -> str:
        return (
            f"IntegrationPoint({self.index}, {self._state.name}, "
            f"fallbacks={self.fallback_count})"
        )
