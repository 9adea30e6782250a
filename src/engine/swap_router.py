"""
SwapRouter — проброс свопов в пул и view-хелперы котировок

После любого свопа, который двигает collateral в пул или из пула, веса
пересчитываются по новым балансам пула и применяются через RebindScheduler.
"""

from dataclasses import dataclass

from loguru import logger

from src.core.errors import InvariantViolation, SlippageError
from src.engine.context import StrategyContext
from src.engine.rebind import RebindScheduler
from src.engine.weights import WeightEngine


@dataclass(frozen=True)
class SwapResult:
    """Результат свопа."""

    amount_out: int
    spot_price_after: int
    rebalanced: bool


class SwapRouter:
    def __init__(self, engine: WeightEngine, scheduler: RebindScheduler):
        self.engine = engine
        self.scheduler = scheduler

    def swap_exact_amount_in(
        self,
        ctx: StrategyContext,
        sender: str,
        token_in: str,
        amount_in: int,
        token_out: str,
        min_amount_out: int,
        max_price: int,
    ) -> SwapResult:
        """
        Своп точного amount_in от имени sender через стратегию.

        Raises:
            InvariantViolation: токен не привязан к пулу
            SlippageError: котировка ниже min_amount_out
        """
        pool = ctx.pool
        for token in (token_in, token_out):
            if not pool.is_bound(token):
                raise InvariantViolation(f"Token {token} is not bound to the pool")

        expected_out = self.get_expected_out_amount(ctx, token_in, token_out, amount_in)
        if expected_out < min_amount_out:
            raise SlippageError(
                f"Expected output {expected_out} below minimum {min_amount_out}"
            )

        ctx.ledger.transfer(token_in, sender, ctx.strategy, amount_in)
        amount_out, spot_after = pool.swap_exact_amount_in(
            token_in, amount_in, token_out, min_amount_out, max_price, sender=ctx.strategy
        )
        if amount_out < min_amount_out:
            raise SlippageError(f"Swap output {amount_out} below minimum {min_amount_out}")
        ctx.ledger.transfer(token_out, ctx.strategy, sender, amount_out)

        rebalanced = False
        if ctx.want in (token_in, token_out):
            self._rebalance(ctx)
            rebalanced = True

        logger.info(
            "SwapRouter: {} {} → {} {} (spot_after={}, rebalanced={})",
            amount_in,
            token_in,
            amount_out,
            token_out,
            spot_after,
            rebalanced,
        )
        return SwapResult(amount_out=amount_out, spot_price_after=spot_after, rebalanced=rebalanced)

    def _rebalance(self, ctx: StrategyContext) -> None:
        """Пересчёт весов по текущим балансам пула."""
        pool_state = ctx.pool_state()
        new_weights = self.engine.compute_weights(pool_state.balances, ctx.corridor())
        self.scheduler.apply(
            ctx.pool, pool_state.weights, new_weights, pool_state.balances, ctx.tokens
        )

    # -------------------------------------------------------------------------
    # View helpers
    # -------------------------------------------------------------------------

    def get_expected_out_amount(
        self, ctx: StrategyContext, token_in: str, token_out: str, amount_in: int
    ) -> int:
        pool = ctx.pool
        return pool.calc_out_given_in(
            pool.get_balance(token_in),
            pool.get_denormalized_weight(token_in),
            pool.get_balance(token_out),
            pool.get_denormalized_weight(token_out),
            amount_in,
            pool.get_swap_fee(),
        )

    def get_expected_in_amount(
        self, ctx: StrategyContext, token_in: str, token_out: str, amount_out: int
    ) -> int:
        pool = ctx.pool
        return pool.calc_in_given_out(
            pool.get_balance(token_in),
            pool.get_denormalized_weight(token_in),
            pool.get_balance(token_out),
            pool.get_denormalized_weight(token_out),
            amount_out,
            pool.get_swap_fee(),
        )

    def get_spot_price(self, ctx: StrategyContext, token_in: str, token_out: str) -> int:
        return ctx.pool.get_spot_price(token_in, token_out)
