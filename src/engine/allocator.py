"""
DepositAllocator — распределение нового collateral между mint и ликвидностью

Алгоритм:
1. want_to_vault = want_balance // 2 резервируется под mint пар long/short
2. expected_minted = want_to_vault // collateral_per_unit
3. Прогноз: holding стратегии + holding пула + expected_minted для long и short.
   Если любой < min_bind_balance → явный no-op (ни mint, ни bind, ни rebind)
4. mint через vault, объединённые балансы стратегии и пула → WeightEngine
5. Первичный bind_all (+ public swap) либо RebindScheduler.apply

Порог min_bind_balance = 10**6 base units — минимальный баланс, который пул
принимает при bind; эмпирическая константа.
"""

from dataclasses import dataclass
from typing import Final, Optional

from loguru import logger

from src.core.domain.pool_state import TokenTriple
from src.core.math.fixed_point import validate_non_negative_int, validate_positive_int
from src.engine.context import StrategyContext
from src.engine.rebind import RebindScheduler
from src.engine.weights import WeightEngine

MIN_BIND_BALANCE: Final[int] = 10**6


@dataclass(frozen=True)
class DepositConfig:
    """Параметры DepositAllocator."""

    min_bind_balance: int = MIN_BIND_BALANCE
    mint_divisor: int = 2

    def __post_init__(self):
        validate_non_negative_int(self.min_bind_balance, "min_bind_balance")
        validate_positive_int(self.mint_divisor, "mint_divisor")


@dataclass(frozen=True)
class DepositOutcome:
    """Результат deposit."""

    skipped: bool
    reason: str
    want_to_vault: int
    minted: int
    first_bind: bool
    weights: Optional[TokenTriple]
    balances: Optional[TokenTriple]


class DepositAllocator:
    """Mint половины collateral и пересчёт весов пула."""

    def __init__(
        self,
        engine: WeightEngine,
        scheduler: RebindScheduler,
        config: Optional[DepositConfig] = None,
    ):
        self.engine = engine
        self.scheduler = scheduler
        self.config = config or DepositConfig()

    def allocate(self, ctx: StrategyContext) -> DepositOutcome:
        corridor = ctx.corridor()
        own = ctx.strategy_balances()
        pool_state = ctx.pool_state()

        want_to_vault = own.collateral // self.config.mint_divisor
        expected_minted = want_to_vault // corridor.collateral_per_unit

        projected_long = own.long + pool_state.long.balance + expected_minted
        projected_short = own.short + pool_state.short.balance + expected_minted
        threshold = self.config.min_bind_balance
        if projected_long < threshold or projected_short < threshold:
            logger.warning(
                "DepositAllocator: skip deposit, projected long={} short={} below {}",
                projected_long,
                projected_short,
                threshold,
            )
            return DepositOutcome(
                skipped=True,
                reason="below_min_bind_balance",
                want_to_vault=want_to_vault,
                minted=0,
                first_bind=False,
                weights=None,
                balances=None,
            )

        minted = 0
        if expected_minted > 0:
            minted = ctx.vault.mint_from_collateral_amount(want_to_vault, sender=ctx.strategy)

        # Балансы после mint: стратегия + пул
        combined = ctx.strategy_balances().combined_with(pool_state)
        new_weights = self.engine.compute_weights(combined, corridor)

        first_bind = not pool_state.any_bound
        if first_bind:
            self.scheduler.bind_all(ctx.pool, combined, new_weights, ctx.tokens)
            if not ctx.pool.is_public_swap():
                ctx.pool.set_public_swap(True, sender=ctx.strategy)
        else:
            self.scheduler.apply(
                ctx.pool, pool_state.weights, new_weights, combined, ctx.tokens
            )

        logger.info(
            "DepositAllocator: minted={} first_bind={} weights={}",
            minted,
            first_bind,
            tuple(new_weights),
        )
        return DepositOutcome(
            skipped=False,
            reason="",
            want_to_vault=want_to_vault,
            minted=minted,
            first_bind=first_bind,
            weights=new_weights,
            balances=combined,
        )
