"""
WeightEngine — балансы + ценовой коридор → денормализованные веса пула

Чистая функция без side effects.

ФОРМУЛЫ (x_s, x_l, x_c — балансы short/long/collateral, C — collateral_per_unit):
    v  = (spot - floor) / range                  позиция spot в коридоре
    dc = x_c·x_s·v + x_c·x_l·(1 - v)             доля collateral
    dl = C·x_l·x_s·v                             доля long
    ds = C·x_l·x_s·(1 - v)                       доля short
    d  = dc + dl + ds
    wt_i = d_i / d                               сырая доля (fixed-point)

Boundary dampening:
    band = range / 100
    floor + band >= spot  или  cap - band <= spot  →  wt·47 + ONE
    иначе                                          →  wt·50

У границ коридора цена одного из позиционных токенов стремится к нулю и
сырые доли численно нестабильны; плоская взвешенная схема с полом ONE
держит веса внутри min/max границ пула.

Константы 47/50, полоса 1% и ONE подобраны эмпирически и вынесены в
WeightEngineConfig.
"""

from dataclasses import dataclass
from typing import Final

from loguru import logger

from src.core.domain.corridor import PriceCorridor
from src.core.domain.pool_state import TokenTriple
from src.core.errors import AmountError
from src.core.math.fixed_point import ONE, validate_non_negative_int, validate_positive_int

# Множители по умолчанию
DAMPENED_MULTIPLIER: Final[int] = 47
STANDARD_MULTIPLIER: Final[int] = 50
BOUNDARY_BAND_DIVISOR: Final[int] = 100


@dataclass(frozen=True)
class WeightEngineConfig:
    """Параметры WeightEngine (эмпирические константы)."""

    weight_unit: int = ONE
    boundary_band_divisor: int = BOUNDARY_BAND_DIVISOR
    dampened_multiplier: int = DAMPENED_MULTIPLIER
    dampened_floor: int = ONE
    standard_multiplier: int = STANDARD_MULTIPLIER

    def __post_init__(self):
        validate_positive_int(self.weight_unit, "weight_unit")
        validate_positive_int(self.boundary_band_divisor, "boundary_band_divisor")
        validate_positive_int(self.dampened_multiplier, "dampened_multiplier")
        validate_non_negative_int(self.dampened_floor, "dampened_floor")
        validate_positive_int(self.standard_multiplier, "standard_multiplier")


class WeightEngine:
    """Вычисление трёх денормализованных весов (short, long, collateral)."""

    def __init__(self, config: WeightEngineConfig | None = None):
        self.config = config or WeightEngineConfig()

    def is_near_boundary(self, corridor: PriceCorridor) -> bool:
        """True если spot в пределах полосы band от floor или cap."""
        band = corridor.price_range // self.config.boundary_band_divisor
        return corridor.floor + band >= corridor.spot or corridor.cap - band <= corridor.spot

    def raw_shares(self, balances: TokenTriple, corridor: PriceCorridor) -> TokenTriple:
        """
        Сырые доли стоимости (short, long, collateral), каждая в [0, weight_unit].

        Raises:
            AmountError: если все доли нулевые (d == 0)
        """
        unit = self.config.weight_unit
        x_s, x_l, x_c = balances
        for name, value in zip(("short", "long", "collateral"), balances):
            validate_non_negative_int(value, name)
        c = corridor.collateral_per_unit

        v = (corridor.spot - corridor.floor) * unit // corridor.price_range
        one_minus_v = unit - v

        dc = x_c * x_s * v + x_c * x_l * one_minus_v
        dl = c * x_l * x_s * v
        ds = c * x_l * x_s * one_minus_v
        d = dc + dl + ds

        if d == 0:
            raise AmountError(
                f"Cannot compute weights: degenerate balances short={x_s}, long={x_l}, collateral={x_c}"
            )

        return TokenTriple(
            short=ds * unit // d,
            long=dl * unit // d,
            collateral=dc * unit // d,
        )

    def compute_weights(self, balances: TokenTriple, corridor: PriceCorridor) -> TokenTriple:
        """
        Денормализованные веса пула.

        Args:
            balances: (short, long, collateral) — объединённые балансы пула и стратегии
            corridor: текущий коридор цен

        Returns:
            TokenTriple весов (short, long, collateral)
        """
        shares = self.raw_shares(balances, corridor)

        if self.is_near_boundary(corridor):
            multiplier = self.config.dampened_multiplier
            additive = self.config.dampened_floor
            branch = "dampened"
        else:
            multiplier = self.config.standard_multiplier
            additive = 0
            branch = "standard"

        weights = TokenTriple(*(share * multiplier + additive for share in shares))
        logger.debug(
            "WeightEngine: branch={} spot={} shares={} weights={}",
            branch,
            corridor.spot,
            tuple(shares),
            tuple(weights),
        )
        return weights
