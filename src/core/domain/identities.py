"""
Identities — адреса/идентичности конфигурации стратегии

Меняются только через governance-gated сеттеры. ZERO_ADDRESS и пустая
строка недопустимы для обязательных полей.
"""

from typing import Final, Optional

from pydantic import BaseModel, Field, field_validator

from src.core.errors import InvariantViolation
from src.core.domain.pool_state import TokenTriple

ZERO_ADDRESS: Final[str] = "0x0000000000000000000000000000000000000000"


def is_zero_address(address: Optional[str]) -> bool:
    return not address or address == ZERO_ADDRESS


class Identities(BaseModel):
    """Конфигурация идентичностей стратегии."""

    strategy: str = Field(..., description="Адрес самой стратегии")
    want: str = Field(..., description="Collateral token")
    long_token: str = Field(..., description="Long position token")
    short_token: str = Field(..., description="Short position token")
    pool: str = Field(..., description="Адрес пула")
    vault: str = Field(..., description="Адрес position vault")
    controller: str = Field(..., description="Fund controller")
    governance: str = Field(..., description="Governance")
    new_strategy: Optional[str] = Field(None, description="Successor strategy")

    model_config = {"frozen": True}

    @field_validator(
        "strategy",
        "want",
        "long_token",
        "short_token",
        "pool",
        "vault",
        "controller",
        "governance",
    )
    @classmethod
    def validate_not_zero(cls, v: str) -> str:
        if is_zero_address(v):
            raise InvariantViolation("Zero address is not allowed")
        return v

    @property
    def tokens(self) -> TokenTriple:
        return TokenTriple(self.short_token, self.long_token, self.want)

    @property
    def protected_tokens(self) -> frozenset[str]:
        return frozenset((self.want, self.long_token, self.short_token))
