"""
WeightedPool — in-memory weighted pool с управляемыми весами

Поведение bind/rebind/unbind и свопов повторяет контроллер-управляемый
weighted pool (Balancer-style). Пул проверяет границы весов на КАЖДОМ вызове:

- MIN_WEIGHT <= denorm <= MAX_WEIGHT
- сумма весов привязанных токенов <= MAX_TOTAL_WEIGHT после каждого rebind
- balance >= MIN_BALANCE

Именно поэтому стратегия применяет уменьшения весов раньше увеличений.
"""

import copy
from dataclasses import dataclass
from typing import Any, Dict, Final, List

from src.core.math.fixed_point import ONE, bdiv, bmul
from src.core.math import weighted_math
from src.sim.ledger import Ledger

# =============================================================================
# ПАРАМЕТРЫ ПУЛА
# =============================================================================

MIN_WEIGHT: Final[int] = ONE
MAX_WEIGHT: Final[int] = 50 * ONE
MAX_TOTAL_WEIGHT: Final[int] = 50 * ONE
MIN_BALANCE: Final[int] = ONE // 10**12
MAX_BOUND_TOKENS: Final[int] = 8

MIN_FEE: Final[int] = ONE // 10**6
MAX_FEE: Final[int] = ONE // 10

MAX_IN_RATIO: Final[int] = ONE // 2


class PoolError(Exception):
    """Пул отклонил вызов (код ошибки в сообщении)."""
    pass


@dataclass
class _Record:
    bound: bool
    index: int
    denorm: int
    balance: int


class WeightedPool:
    """Weighted pool, управляемый единственным controller."""

    def __init__(self, ledger: Ledger, address: str, controller: str):
        self._ledger = ledger
        self._address = address
        self._controller = controller
        self._public_swap = False
        self._swap_fee = MIN_FEE
        self._tokens: List[str] = []
        self._records: Dict[str, _Record] = {}
        self._total_weight = 0
        ledger.register(self)

    # -------------------------------------------------------------------------
    # Views
    # -------------------------------------------------------------------------

    @property
    def address(self) -> str:
        return self._address

    @property
    def controller(self) -> str:
        return self._controller

    def get_current_tokens(self) -> List[str]:
        return list(self._tokens)

    def is_bound(self, token: str) -> bool:
        record = self._records.get(token)
        return record is not None and record.bound

    def is_public_swap(self) -> bool:
        return self._public_swap

    def get_swap_fee(self) -> int:
        return self._swap_fee

    def get_total_denormalized_weight(self) -> int:
        return self._total_weight

    def get_denormalized_weight(self, token: str) -> int:
        return self._bound_record(token).denorm

    def get_normalized_weight(self, token: str) -> int:
        return bdiv(self._bound_record(token).denorm, self._total_weight)

    def get_balance(self, token: str) -> int:
        return self._bound_record(token).balance

    def get_spot_price(self, token_in: str, token_out: str) -> int:
        rin = self._bound_record(token_in)
        rout = self._bound_record(token_out)
        return weighted_math.calc_spot_price(
            rin.balance, rin.denorm, rout.balance, rout.denorm, self._swap_fee
        )

    def get_spot_price_sans_fee(self, token_in: str, token_out: str) -> int:
        rin = self._bound_record(token_in)
        rout = self._bound_record(token_out)
        return weighted_math.calc_spot_price(
            rin.balance, rin.denorm, rout.balance, rout.denorm, 0
        )

    def calc_out_given_in(self, balance_in, weight_in, balance_out, weight_out, amount_in, swap_fee) -> int:
        return weighted_math.calc_out_given_in(
            balance_in, weight_in, balance_out, weight_out, amount_in, swap_fee
        )

    def calc_in_given_out(self, balance_in, weight_in, balance_out, weight_out, amount_out, swap_fee) -> int:
        return weighted_math.calc_in_given_out(
            balance_in, weight_in, balance_out, weight_out, amount_out, swap_fee
        )

    # -------------------------------------------------------------------------
    # Controller operations
    # -------------------------------------------------------------------------

    def set_swap_fee(self, swap_fee: int, *, sender: str) -> None:
        self._require_controller(sender)
        if swap_fee < MIN_FEE:
            raise PoolError("ERR_MIN_FEE")
        if swap_fee > MAX_FEE:
            raise PoolError("ERR_MAX_FEE")
        self._swap_fee = swap_fee

    def set_controller(self, controller: str, *, sender: str) -> None:
        self._require_controller(sender)
        self._controller = controller

    def set_public_swap(self, public: bool, *, sender: str) -> None:
        self._require_controller(sender)
        self._public_swap = public

    def bind(self, token: str, balance: int, denorm: int, *, sender: str) -> None:
        self._require_controller(sender)
        if self.is_bound(token):
            raise PoolError("ERR_IS_BOUND")
        if len(self._tokens) >= MAX_BOUND_TOKENS:
            raise PoolError("ERR_MAX_TOKENS")

        self._records[token] = _Record(bound=True, index=len(self._tokens), denorm=0, balance=0)
        self._tokens.append(token)
        self.rebind(token, balance, denorm, sender=sender)

    def rebind(self, token: str, balance: int, denorm: int, *, sender: str) -> None:
        self._require_controller(sender)
        record = self._bound_record(token)

        if denorm < MIN_WEIGHT:
            raise PoolError("ERR_MIN_WEIGHT")
        if denorm > MAX_WEIGHT:
            raise PoolError("ERR_MAX_WEIGHT")
        if balance < MIN_BALANCE:
            raise PoolError("ERR_MIN_BALANCE")

        # Вес: проверка суммы на границе каждого вызова
        old_weight = record.denorm
        if denorm > old_weight:
            new_total = self._total_weight + (denorm - old_weight)
            if new_total > MAX_TOTAL_WEIGHT:
                raise PoolError("ERR_MAX_TOTAL_WEIGHT")
            self._total_weight = new_total
        elif denorm < old_weight:
            self._total_weight -= old_weight - denorm
        record.denorm = denorm

        # Баланс: разница забирается у / возвращается вызывающему
        old_balance = record.balance
        record.balance = balance
        if balance > old_balance:
            self._ledger.transfer(token, sender, self._address, balance - old_balance)
        elif balance < old_balance:
            self._ledger.transfer(token, self._address, sender, old_balance - balance)

    def unbind(self, token: str, *, sender: str) -> None:
        self._require_controller(sender)
        record = self._bound_record(token)
        token_balance = record.balance

        self._total_weight -= record.denorm

        # swap-and-pop, как в индексированном массиве токенов
        index = record.index
        last = len(self._tokens) - 1
        self._tokens[index] = self._tokens[last]
        self._records[self._tokens[index]].index = index
        self._tokens.pop()
        del self._records[token]

        self._ledger.transfer(token, self._address, sender, token_balance)

    # -------------------------------------------------------------------------
    # Swaps
    # -------------------------------------------------------------------------

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
        if not self._public_swap:
            raise PoolError("ERR_SWAP_NOT_PUBLIC")
        rin = self._bound_record(token_in)
        rout = self._bound_record(token_out)

        if amount_in > bmul(rin.balance, MAX_IN_RATIO):
            raise PoolError("ERR_MAX_IN_RATIO")

        spot_before = weighted_math.calc_spot_price(
            rin.balance, rin.denorm, rout.balance, rout.denorm, self._swap_fee
        )
        if spot_before > max_price:
            raise PoolError("ERR_BAD_LIMIT_PRICE")

        amount_out = weighted_math.calc_out_given_in(
            rin.balance, rin.denorm, rout.balance, rout.denorm, amount_in, self._swap_fee
        )
        if amount_out < min_amount_out:
            raise PoolError("ERR_LIMIT_OUT")

        rin.balance += amount_in
        rout.balance -= amount_out

        spot_after = weighted_math.calc_spot_price(
            rin.balance, rin.denorm, rout.balance, rout.denorm, self._swap_fee
        )
        if spot_after < spot_before:
            raise PoolError("ERR_MATH_APPROX")
        if spot_after > max_price:
            raise PoolError("ERR_LIMIT_PRICE")

        self._ledger.transfer(token_in, sender, self._address, amount_in)
        self._ledger.transfer(token_out, self._address, sender, amount_out)
        return amount_out, spot_after

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _require_controller(self, sender: str) -> None:
        if sender != self._controller:
            raise PoolError("ERR_NOT_CONTROLLER")

    def _bound_record(self, token: str) -> _Record:
        record = self._records.get(token)
        if record is None or not record.bound:
            raise PoolError("ERR_NOT_BOUND")
        return record

    def snapshot_state(self) -> Any:
        return copy.deepcopy(
            (
                self._controller,
                self._public_swap,
                self._swap_fee,
                self._tokens,
                self._records,
                self._total_weight,
            )
        )

    def restore_state(self, state: Any) -> None:
        (
            self._controller,
            self._public_swap,
            self._swap_fee,
            self._tokens,
            self._records,
            self._total_weight,
        ) = copy.deepcopy(state)
