"""
PositionVault — in-memory position vault и valuation oracle

- Коридор цен floor/cap/spot и collateral_per_unit
- mint: collateral → пары long/short (qty = amount // collateral_per_unit)
- redeem: пары long/short → qty * collateral_per_unit collateral
- breach: spot достиг floor или cap → vault переходит в settled
- settle_positions: погашение одиночных long/short по цене settlement
"""

import copy
from typing import Any

from loguru import logger

from src.core.math.fixed_point import mul_div
from src.sim.ledger import Ledger


class VaultError(Exception):
    """Vault отклонил вызов."""
    pass


class PositionVault:
    """Vault одной коммодити (одна пара long/short)."""

    def __init__(
        self,
        ledger: Ledger,
        address: str,
        collateral_token: str,
        long_token: str,
        short_token: str,
        floor: int,
        cap: int,
        spot: int,
        collateral_per_unit: int,
        oracle: str,
    ):
        if cap <= floor:
            raise VaultError("cap must be above floor")
        if collateral_per_unit <= 0:
            raise VaultError("collateral_per_unit must be positive")
        self._ledger = ledger
        self._address = address
        self._collateral_token = collateral_token
        self._long_token = long_token
        self._short_token = short_token
        self._floor = floor
        self._cap = cap
        self._spot = spot
        self._collateral_per_unit = collateral_per_unit
        self._oracle = oracle
        self._settled = False
        self._settlement_price = 0
        ledger.register(self)

    # -------------------------------------------------------------------------
    # Oracle views
    # -------------------------------------------------------------------------

    @property
    def address(self) -> str:
        return self._address

    @property
    def collateral_token(self) -> str:
        return self._collateral_token

    @property
    def long_token(self) -> str:
        return self._long_token

    @property
    def short_token(self) -> str:
        return self._short_token

    def price_floor(self) -> int:
        return self._floor

    def price_cap(self) -> int:
        return self._cap

    def price_spot(self) -> int:
        return self._spot

    def collateral_per_unit(self) -> int:
        return self._collateral_per_unit

    def is_settled(self) -> bool:
        return self._settled

    # -------------------------------------------------------------------------
    # Oracle updates
    # -------------------------------------------------------------------------

    def update_spot(self, spot: int, *, sender: str) -> None:
        """
        Новая цена оракула. Выход цены на границу коридора = breach → settled.
        """
        if sender != self._oracle:
            raise VaultError("Only oracle can update spot")
        if self._settled:
            raise VaultError("Vault already settled")

        if spot <= self._floor or spot >= self._cap:
            self._spot = min(max(spot, self._floor), self._cap)
            self._settle(self._spot)
        else:
            self._spot = spot

    def settle(self, *, sender: str) -> None:
        """Принудительный settlement по текущему spot."""
        if sender != self._oracle:
            raise VaultError("Only oracle can settle")
        if self._settled:
            raise VaultError("Vault already settled")
        self._settle(self._spot)

    def _settle(self, price: int) -> None:
        self._settled = True
        self._settlement_price = price
        logger.info("PositionVault {}: settled at {}", self._address, price)

    # -------------------------------------------------------------------------
    # Mint / redeem
    # -------------------------------------------------------------------------

    def mint_from_collateral_amount(self, amount: int, *, sender: str) -> int:
        if self._settled:
            raise VaultError("Vault settled: minting disabled")
        quantity = amount // self._collateral_per_unit
        if quantity == 0:
            raise VaultError("Collateral amount below one position unit")

        self._ledger.transfer(
            self._collateral_token, sender, self._address, quantity * self._collateral_per_unit
        )
        self._ledger.mint(self._long_token, sender, quantity)
        self._ledger.mint(self._short_token, sender, quantity)
        return quantity

    def redeem_positions(self, amount: int, *, sender: str) -> int:
        if amount == 0:
            return 0
        self._ledger.burn(self._long_token, sender, amount)
        self._ledger.burn(self._short_token, sender, amount)
        collateral = amount * self._collateral_per_unit
        self._ledger.transfer(self._collateral_token, self._address, sender, collateral)
        return collateral

    def settle_positions(self, *, sender: str) -> int:
        """Погашение всех одиночных long/short sender по цене settlement."""
        if not self._settled:
            raise VaultError("Vault not settled")

        long_qty = self._ledger.balance_of(self._long_token, sender)
        short_qty = self._ledger.balance_of(self._short_token, sender)
        price_range = self._cap - self._floor
        long_payout = mul_div(
            long_qty * self._collateral_per_unit, self._settlement_price - self._floor, price_range
        )
        short_payout = mul_div(
            short_qty * self._collateral_per_unit, self._cap - self._settlement_price, price_range
        )

        self._ledger.burn(self._long_token, sender, long_qty)
        self._ledger.burn(self._short_token, sender, short_qty)
        payout = long_payout + short_payout
        self._ledger.transfer(self._collateral_token, self._address, sender, payout)
        return payout

    def snapshot_state(self) -> Any:
        return copy.deepcopy((self._spot, self._settled, self._settlement_price))

    def restore_state(self, state: Any) -> None:
        self._spot, self._settled, self._settlement_price = copy.deepcopy(state)
