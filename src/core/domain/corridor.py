"""
PriceCorridor — ценовой коридор оракула

Immutable Pydantic модель: floor/cap/spot/collateral_per_unit, которые
vault отдаёт как valuation oracle. Перечитывается на каждом вызове
ребалансировки и нигде не хранится.

Инварианты:
- floor < cap (range > 0), иначе ConfigurationError
- floor <= spot <= cap, иначе InvariantViolation (spot может стоять на границе)
- collateral_per_unit > 0
"""

from typing import Any, Dict

from pydantic import BaseModel, Field, model_validator

from src.core.errors import ConfigurationError, InvariantViolation
from src.core.math.fixed_point import ONE, bdiv


class PriceCorridor(BaseModel):
    """
    Коридор цен [floor, cap] с текущим spot.

    Все величины в одной шкале единиц; collateral_per_unit — количество
    collateral base units на одну пару long/short.
    """

    floor: int = Field(..., ge=0, description="Нижняя граница коридора")
    cap: int = Field(..., ge=0, description="Верхняя граница коридора")
    spot: int = Field(..., ge=0, description="Текущая цена оракула")
    collateral_per_unit: int = Field(
        ..., gt=0, description="Collateral на одну пару позиций"
    )

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def validate_bounds(self) -> "PriceCorridor":
        if self.cap <= self.floor:
            raise ConfigurationError(
                f"Price range must be positive: floor={self.floor}, cap={self.cap}"
            )
        if self.spot < self.floor or self.spot > self.cap:
            raise InvariantViolation(
                f"Spot {self.spot} outside corridor [{self.floor}, {self.cap}]"
            )
        return self

    @property
    def price_range(self) -> int:
        """range = cap - floor (> 0)."""
        return self.cap - self.floor

    @property
    def position(self) -> int:
        """
        Дробная позиция spot в коридоре, fixed-point.

        0 на floor, ONE на cap. Округление вниз.
        """
        return bdiv(self.spot - self.floor, self.price_range)

    @property
    def midpoint(self) -> int:
        return (self.floor + self.cap) // 2

    @classmethod
    def from_vault(cls, vault: Any) -> "PriceCorridor":
        """Снапшот коридора из vault (VaultPort)."""
        return cls(
            floor=vault.price_floor(),
            cap=vault.price_cap(),
            spot=vault.price_spot(),
            collateral_per_unit=vault.collateral_per_unit(),
        )

    def to_contract(self) -> Dict[str, int]:
        """Представление для контракта price_corridor (JSON Schema)."""
        return {
            "floor": self.floor,
            "cap": self.cap,
            "spot": self.spot,
            "collateral_per_unit": self.collateral_per_unit,
            "position": self.position,
        }
