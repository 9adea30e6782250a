"""
Contract Validation Module

Валидация JSON контрактов: price_corridor, strategy_snapshot.
"""

from .validators import (
    ContractValidator,
    PriceCorridorValidator,
    SchemaLoader,
    StrategySnapshotValidator,
    validate_price_corridor,
    validate_strategy_snapshot,
)

__all__ = [
    # Classes
    "SchemaLoader",
    "ContractValidator",
    "PriceCorridorValidator",
    "StrategySnapshotValidator",
    # Functions
    "validate_price_corridor",
    "validate_strategy_snapshot",
]
