"""
Ledger — балансы токенов и атомарность вызовов

Ledger хранит балансы всех токенов и играет роль хоста: каждая публичная
операция стратегии исполняется внутри ``Ledger.atomic()``. При исключении
состояние всех зарегистрированных компонентов (ledger, pool, vault,
стратегия) восстанавливается из снапшота, исключение пробрасывается дальше.

Компонент участвует в rollback, реализуя snapshot_state()/restore_state().
"""

import copy
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Protocol, Tuple

from loguru import logger


class LedgerError(Exception):
    """Ошибка перевода: недостаточный баланс, отрицательная сумма."""
    pass


class Stateful(Protocol):
    def snapshot_state(self) -> Any:
        ...

    def restore_state(self, state: Any) -> None:
        ...


class Ledger:
    """Балансы token → holder → amount с атомарными транзакциями."""

    def __init__(self):
        self._balances: Dict[Tuple[str, str], int] = {}
        self._supply: Dict[str, int] = {}
        self._participants: List[Stateful] = [self]
        self._depth = 0

    # -------------------------------------------------------------------------
    # Балансы
    # -------------------------------------------------------------------------

    def balance_of(self, token: str, holder: str) -> int:
        return self._balances.get((token, holder), 0)

    def total_supply(self, token: str) -> int:
        return self._supply.get(token, 0)

    def transfer(self, token: str, sender: str, recipient: str, amount: int) -> None:
        if amount < 0:
            raise LedgerError(f"Negative transfer amount: {amount}")
        balance = self.balance_of(token, sender)
        if balance < amount:
            raise LedgerError(
                f"Insufficient {token} balance for {sender}: {balance} < {amount}"
            )
        self._balances[(token, sender)] = balance - amount
        self._balances[(token, recipient)] = self.balance_of(token, recipient) + amount

    def mint(self, token: str, recipient: str, amount: int) -> None:
        if amount < 0:
            raise LedgerError(f"Negative mint amount: {amount}")
        self._balances[(token, recipient)] = self.balance_of(token, recipient) + amount
        self._supply[token] = self.total_supply(token) + amount

    def burn(self, token: str, holder: str, amount: int) -> None:
        balance = self.balance_of(token, holder)
        if amount < 0 or balance < amount:
            raise LedgerError(
                f"Cannot burn {amount} {token} from {holder} (balance {balance})"
            )
        self._balances[(token, holder)] = balance - amount
        self._supply[token] = self.total_supply(token) - amount

    # -------------------------------------------------------------------------
    # Атомарность
    # -------------------------------------------------------------------------

    def register(self, component: Stateful) -> None:
        """Подключение компонента к snapshot/rollback."""
        if component not in self._participants:
            self._participants.append(component)

    @property
    def in_transaction(self) -> bool:
        return self._depth > 0

    @contextmanager
    def atomic(self) -> Iterator[None]:
        """
        All-or-nothing исполнение.

        Вложенные atomic() сливаются с внешним: снапшот берётся только на
        самом внешнем уровне.
        """
        if self._depth > 0:
            self._depth += 1
            try:
                yield
            finally:
                self._depth -= 1
            return

        snapshots = [(p, p.snapshot_state()) for p in self._participants]
        self._depth = 1
        try:
            yield
        except BaseException as e:
            for participant, state in snapshots:
                participant.restore_state(state)
            logger.debug("Ledger: rolled back call ({}: {})", type(e).__name__, e)
            raise
        finally:
            self._depth = 0

    def snapshot_state(self) -> Any:
        return copy.deepcopy((self._balances, self._supply))

    def restore_state(self, state: Any) -> None:
        balances, supply = copy.deepcopy(state)
        self._balances = balances
        self._supply = supply
