"""
Domain models and value objects.

PriceCorridor, PoolState, StrategyBalances, LifecycleFlags, Identities.
"""

from src.core.domain.corridor import PriceCorridor
from src.core.domain.identities import ZERO_ADDRESS, Identities, is_zero_address
from src.core.domain.lifecycle import LifecycleFlags, LifecycleState, Operation
from src.core.domain.pool_state import (
    CANONICAL_ORDER,
    PoolState,
    StrategyBalances,
    TokenRole,
    TokenSlot,
    TokenTriple,
)

__all__ = [
    # Corridor
    "PriceCorridor",
    # Pool / strategy holdings
    "TokenRole",
    "TokenTriple",
    "CANONICAL_ORDER",
    "TokenSlot",
    "PoolState",
    "StrategyBalances",
    # Lifecycle
    "LifecycleState",
    "LifecycleFlags",
    "Operation",
    # Identities
    "Identities",
    "ZERO_ADDRESS",
    "is_zero_address",
]
