"""
PoolState / StrategyBalances — балансы пула и стратегии

TokenTriple — упорядоченная тройка (short, long, collateral), канонический
порядок для балансов, весов и идентичностей токенов.

PoolState читается из пула на каждом вызове ребалансировки и не хранится.
StrategyBalances — собственные холдинги стратегии (отдельно от пула);
при mint/bind используется их объединение.
"""

from enum import Enum
from typing import Any, NamedTuple

from pydantic import BaseModel, Field


# =============================================================================
# ENUMS
# =============================================================================


class TokenRole(str, Enum):
    """Роль токена в тройке."""

    SHORT = "short"
    LONG = "long"
    COLLATERAL = "collateral"


# =============================================================================
# TOKEN TRIPLE
# =============================================================================


class TokenTriple(NamedTuple):
    """Значения по ролям в каноническом порядке short, long, collateral."""

    short: Any
    long: Any
    collateral: Any

    def by_role(self, role: TokenRole) -> Any:
        return getattr(self, role.value)


CANONICAL_ORDER: tuple[TokenRole, ...] = (
    TokenRole.SHORT,
    TokenRole.LONG,
    TokenRole.COLLATERAL,
)


# =============================================================================
# MODELS
# =============================================================================


class TokenSlot(BaseModel):
    """Один токен пула: идентичность, баланс, денормализованный вес."""

    token: str = Field(..., min_length=1, description="Идентичность токена")
    bound: bool = Field(..., description="Токен привязан к пулу")
    balance: int = Field(..., ge=0, description="Баланс токена в пуле")
    weight: int = Field(..., ge=0, description="Денормализованный вес")

    model_config = {"frozen": True}


class PoolState(BaseModel):
    """
    Снапшот холдингов пула по трём ролям.

    Непривязанный токен имеет balance=0 и weight=0.
    """

    short: TokenSlot
    long: TokenSlot
    collateral: TokenSlot

    model_config = {"frozen": True}

    @classmethod
    def read(cls, pool: Any, tokens: TokenTriple) -> "PoolState":
        """Чтение состояния из пула (PoolPort)."""
        slots = []
        for token in tokens:
            if pool.is_bound(token):
                slots.append(
                    TokenSlot(
                        token=token,
                        bound=True,
                        balance=pool.get_balance(token),
                        weight=pool.get_denormalized_weight(token),
                    )
                )
            else:
                slots.append(TokenSlot(token=token, bound=False, balance=0, weight=0))
        return cls(short=slots[0], long=slots[1], collateral=slots[2])

    @property
    def balances(self) -> TokenTriple:
        return TokenTriple(self.short.balance, self.long.balance, self.collateral.balance)

    @property
    def weights(self) -> TokenTriple:
        return TokenTriple(self.short.weight, self.long.weight, self.collateral.weight)

    @property
    def total_weight(self) -> int:
        return sum(self.weights)

    @property
    def any_bound(self) -> bool:
        return self.short.bound or self.long.bound or self.collateral.bound

    @property
    def all_bound(self) -> bool:
        return self.short.bound and self.long.bound and self.collateral.bound


class StrategyBalances(BaseModel):
    """Собственные холдинги стратегии."""

    short: int = Field(..., ge=0)
    long: int = Field(..., ge=0)
    collateral: int = Field(..., ge=0)

    model_config = {"frozen": True}

    @classmethod
    def read(cls, ledger: Any, holder: str, tokens: TokenTriple) -> "StrategyBalances":
        return cls(
            short=ledger.balance_of(tokens.short, holder),
            long=ledger.balance_of(tokens.long, holder),
            collateral=ledger.balance_of(tokens.collateral, holder),
        )

    @property
    def as_triple(self) -> TokenTriple:
        return TokenTriple(self.short, self.long, self.collateral)

    @property
    def matched_pairs(self) -> int:
        """Количество пар long/short, доступных для redeem."""
        return min(self.long, self.short)

    def combined_with(self, pool_state: PoolState) -> TokenTriple:
        """Объединение холдингов стратегии и пула."""
        return TokenTriple(
            self.short + pool_state.short.balance,
            self.long + pool_state.long.balance,
            self.collateral + pool_state.collateral.balance,
        )
