"""Ports — интерфейсы внешних коллабораторов (pool, vault, controller, ledger)."""

from .ports import ControllerPort, PoolPort, TokenLedgerPort, VaultPort

__all__ = [
    "PoolPort",
    "VaultPort",
    "ControllerPort",
    "TokenLedgerPort",
]
