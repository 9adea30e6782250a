"""
StrategyContext — набор коллабораторов одного вызова

Стратегия пересобирает контекст на каждом публичном вызове: после миграции
коммодити vault и токены long/short меняются.
"""

from dataclasses import dataclass

from src.core.domain.corridor import PriceCorridor
from src.core.domain.pool_state import PoolState, StrategyBalances, TokenTriple
from src.ports.ports import PoolPort, TokenLedgerPort, VaultPort


@dataclass(frozen=True)
class StrategyContext:
    """Коллабораторы и идентичности для одного вызова."""

    strategy: str
    ledger: TokenLedgerPort
    pool: PoolPort
    vault: VaultPort
    tokens: TokenTriple

    @property
    def want(self) -> str:
        return self.tokens.collateral

    def corridor(self) -> PriceCorridor:
        return PriceCorridor.from_vault(self.vault)

    def pool_state(self) -> PoolState:
        return PoolState.read(self.pool, self.tokens)

    def strategy_balances(self) -> StrategyBalances:
        return StrategyBalances.read(self.ledger, self.strategy, self.tokens)
