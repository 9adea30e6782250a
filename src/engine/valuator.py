"""
Valuator — полная стоимость стратегии в единицах collateral

Два режима цен позиционных токенов, выбор по pool.is_bound(want):

BOUND:   живые spot-цены пула (want, short) и (want, long)
UNBOUND: линейная интерполяция по коридору
    p_short = C · (spot - floor) / range
    p_long  = C · (cap - spot) / range

Все цены fixed-point (ONE = одна единица collateral за единицу позиции).

    total = own_want + own_short·p_short + own_long·p_long + pool_value
    pool_value = pool_want + pool_short·p*_short + pool_long·p*_long   (BOUND)
               = 0                                                  (UNBOUND)

p* — fee-free spot цена пула.
"""

from dataclasses import dataclass
from enum import Enum

from src.core.math.fixed_point import bmul, mul_div, to_fixed
from src.engine.context import StrategyContext


class PricingRegime(str, Enum):
    """Режим оценки позиционных токенов."""

    BOUND = "BOUND"
    UNBOUND = "UNBOUND"


@dataclass(frozen=True)
class UnitPrices:
    """Цены short/long в collateral (fixed-point)."""

    short: int
    long: int
    regime: PricingRegime


@dataclass(frozen=True)
class Valuation:
    """Разложение полной стоимости."""

    own_collateral: int
    own_short_value: int
    own_long_value: int
    pool_value: int
    prices: UnitPrices

    @property
    def total(self) -> int:
        return self.own_collateral + self.own_short_value + self.own_long_value + self.pool_value


class Valuator:
    def regime(self, ctx: StrategyContext) -> PricingRegime:
        if ctx.pool.is_bound(ctx.want):
            return PricingRegime.BOUND
        return PricingRegime.UNBOUND

    def unit_prices(self, ctx: StrategyContext) -> UnitPrices:
        """Цены short/long для текущего режима."""
        if self.regime(ctx) == PricingRegime.BOUND:
            return UnitPrices(
                short=ctx.pool.get_spot_price(ctx.want, ctx.tokens.short),
                long=ctx.pool.get_spot_price(ctx.want, ctx.tokens.long),
                regime=PricingRegime.BOUND,
            )

        corridor = ctx.corridor()
        unit_value = to_fixed(corridor.collateral_per_unit)
        return UnitPrices(
            short=mul_div(unit_value, corridor.spot - corridor.floor, corridor.price_range),
            long=mul_div(unit_value, corridor.cap - corridor.spot, corridor.price_range),
            regime=PricingRegime.UNBOUND,
        )

    def pool_value(self, ctx: StrategyContext) -> int:
        """Стоимость холдингов пула; 0 если collateral не привязан."""
        pool = ctx.pool
        want = ctx.want
        if not pool.is_bound(want):
            return 0

        value = pool.get_balance(want)
        for token in (ctx.tokens.short, ctx.tokens.long):
            if pool.is_bound(token):
                value += bmul(pool.get_balance(token), pool.get_spot_price_sans_fee(want, token))
        return value

    def valuation(self, ctx: StrategyContext) -> Valuation:
        prices = self.unit_prices(ctx)
        own = ctx.strategy_balances()
        return Valuation(
            own_collateral=own.collateral,
            own_short_value=bmul(own.short, prices.short),
            own_long_value=bmul(own.long, prices.long),
            pool_value=self.pool_value(ctx),
            prices=prices,
        )

    def balance_of(self, ctx: StrategyContext) -> int:
        """Полная стоимость стратегии в collateral."""
        return self.valuation(ctx).total
