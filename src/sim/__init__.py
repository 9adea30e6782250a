"""
In-memory коллабораторы: ledger токенов, weighted pool, position vault, controller.

Реализуют порты из src.ports и позволяют исполнять ядро без живой системы.
Это не production AMM и не оракул.
"""

from .controller import StaticController
from .ledger import Ledger, LedgerError
from .pool import PoolError, WeightedPool
from .vault import PositionVault, VaultError

__all__ = [
    "Ledger",
    "LedgerError",
    "WeightedPool",
    "PoolError",
    "PositionVault",
    "VaultError",
    "StaticController",
]
