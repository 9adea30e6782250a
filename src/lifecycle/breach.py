"""Breach handling — разбор пула и погашение позиций.

handle_breach:
1. latch is_breach_handled (до внешних вызовов)
2. unbind всех привязанных токенов
3. redeem min(long, short) через vault; больший остаток остаётся dust

liquidate (без latch) используется withdraw в ACTIVE и withdraw_all.
"""

from dataclasses import dataclass
from typing import List

from loguru import logger

from src.engine.context import StrategyContext
from src.lifecycle.state_machine import LifecycleStateMachine


@dataclass(frozen=True)
class BreachOutcome:
    """Результат разбора пула."""

    unbound_tokens: List[str]
    redeemed_pairs: int
    redeemed_collateral: int
    residual_long: int
    residual_short: int


class BreachHandler:
    def __init__(self, state_machine: LifecycleStateMachine):
        self.state_machine = state_machine

    def handle_breach(self, ctx: StrategyContext) -> BreachOutcome:
        """One-shot обработка breach (StateError при повторе)."""
        self.state_machine.latch_breach(ctx.vault.is_settled())
        outcome = self.liquidate(ctx)
        logger.info(
            "BreachHandler: breach handled, redeemed={} pairs, residual long={} short={}",
            outcome.redeemed_pairs,
            outcome.residual_long,
            outcome.residual_short,
        )
        return outcome

    def liquidate(self, ctx: StrategyContext) -> BreachOutcome:
        unbound = self.unbind_all(ctx)
        pairs, collateral = self.redeem_pairs(ctx)
        own = ctx.strategy_balances()
        return BreachOutcome(
            unbound_tokens=unbound,
            redeemed_pairs=pairs,
            redeemed_collateral=collateral,
            residual_long=own.long,
            residual_short=own.short,
        )

    def unbind_all(self, ctx: StrategyContext) -> List[str]:
        """Unbind всех токенов тройки, привязанных к пулу."""
        unbound = []
        for token in ctx.tokens:
            if ctx.pool.is_bound(token):
                ctx.pool.unbind(token, sender=ctx.strategy)
                unbound.append(token)
        if unbound:
            logger.info("BreachHandler: unbound {}", unbound)
        return unbound

    def redeem_pairs(self, ctx: StrategyContext) -> tuple[int, int]:
        """Redeem совпадающих пар long/short. Returns (pairs, collateral)."""
        pairs = ctx.strategy_balances().matched_pairs
        if pairs == 0:
            return 0, 0
        collateral = ctx.vault.redeem_positions(pairs, sender=ctx.strategy)
        logger.info("BreachHandler: redeemed {} pairs for {} collateral", pairs, collateral)
        return pairs, collateral
