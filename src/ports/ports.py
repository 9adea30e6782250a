"""Port Protocol определения.

Ядро общается с пулом, vault и controller только через эти интерфейсы.
structural subtyping: in-memory реализации из src.sim удовлетворяют им
автоматически, как и любой адаптер к живой системе.

Вызовы, двигающие средства, принимают keyword-only ``sender`` —
идентичность вызывающего (аналог msg.sender).
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class TokenLedgerPort(Protocol):
    """Балансы и переводы токенов."""

    def balance_of(self, token: str, holder: str) -> int:
        ...

    def transfer(self, token: str, sender: str, recipient: str, amount: int) -> None:
        ...


@runtime_checkable
class PoolPort(Protocol):
    """Weighted pool с управляемыми весами."""

    @property
    def address(self) -> str:
        ...

    def bind(self, token: str, balance: int, denorm: int, *, sender: str) -> None:
        ...

    def rebind(self, token: str, balance: int, denorm: int, *, sender: str) -> None:
        ...

    def unbind(self, token: str, *, sender: str) -> None:
        ...

    def swap_exact_amount_in(
        self,
        token_in: str,
        amount_in: int,
        token_out: str,
        min_amount_out: int,
        max_price: int,
        *,
        sender: str,
    ) -> tuple[int, int]:
        """Returns (amount_out, spot_price_after)."""
        ...

    def get_spot_price(self, token_in: str, token_out: str) -> int:
        ...

    def get_spot_price_sans_fee(self, token_in: str, token_out: str) -> int:
        ...

    def get_denormalized_weight(self, token: str) -> int:
        ...

    def get_balance(self, token: str) -> int:
        ...

    def get_swap_fee(self) -> int:
        ...

    def is_bound(self, token: str) -> bool:
        ...

    def is_public_swap(self) -> bool:
        ...

    def set_swap_fee(self, swap_fee: int, *, sender: str) -> None:
        ...

    def set_controller(self, controller: str, *, sender: str) -> None:
        ...

    def set_public_swap(self, public: bool, *, sender: str) -> None:
        ...

    def calc_out_given_in(
        self,
        balance_in: int,
        weight_in: int,
        balance_out: int,
        weight_out: int,
        amount_in: int,
        swap_fee: int,
    ) -> int:
        ...

    def calc_in_given_out(
        self,
        balance_in: int,
        weight_in: int,
        balance_out: int,
        weight_out: int,
        amount_out: int,
        swap_fee: int,
    ) -> int:
        ...


@runtime_checkable
class VaultPort(Protocol):
    """Position vault: valuation oracle + mint/redeem позиций."""

    @property
    def address(self) -> str:
        ...

    @property
    def long_token(self) -> str:
        ...

    @property
    def short_token(self) -> str:
        ...

    def price_floor(self) -> int:
        ...

    def price_cap(self) -> int:
        ...

    def price_spot(self) -> int:
        ...

    def collateral_per_unit(self) -> int:
        ...

    def is_settled(self) -> bool:
        ...

    def mint_from_collateral_amount(self, amount: int, *, sender: str) -> int:
        """Returns количество заминченных пар."""
        ...

    def redeem_positions(self, amount: int, *, sender: str) -> int:
        """Returns количество возвращённого collateral."""
        ...

    def settle_positions(self, *, sender: str) -> int:
        ...


@runtime_checkable
class ControllerPort(Protocol):
    """Fund controller: маршрутизация выплат."""

    @property
    def address(self) -> str:
        ...

    def vaults(self, token: str) -> str:
        """Адрес получателя выплат для token."""
        ...
