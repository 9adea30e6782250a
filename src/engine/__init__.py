"""
Engine — алгоритмическое ядро ребалансировки.

- WeightEngine: балансы + коридор → веса
- RebindScheduler: упорядоченное применение весов к пулу
- DepositAllocator: mint vs ликвидность, порог min bind balance
- Valuator: стоимость стратегии в двух режимах цен
- SwapRouter: проброс свопов и котировок
"""

from .allocator import DepositAllocator, DepositConfig, DepositOutcome, MIN_BIND_BALANCE
from .context import StrategyContext
from .rebind import RebindScheduler, RebindStep, sort_steps
from .swap_router import SwapResult, SwapRouter
from .valuator import PricingRegime, UnitPrices, Valuation, Valuator
from .weights import WeightEngine, WeightEngineConfig

__all__ = [
    "WeightEngine",
    "WeightEngineConfig",
    "RebindScheduler",
    "RebindStep",
    "sort_steps",
    "DepositAllocator",
    "DepositConfig",
    "DepositOutcome",
    "MIN_BIND_BALANCE",
    "Valuator",
    "Valuation",
    "UnitPrices",
    "PricingRegime",
    "SwapRouter",
    "SwapResult",
    "StrategyContext",
]
