"""Lifecycle State Machine — состояния коммодити и допуск операций.

Состояния:
- ACTIVE: vault не settled; deposit/withdraw/swap разрешены
- SETTLED_UNHANDLED: vault settled; разрешён handle_breach, withdraw
  автоматически обрабатывает breach
- SETTLED_HANDLED: breach обработан; повторный handle_breach запрещён

Переходы:
- ACTIVE → SETTLED_UNHANDLED: внешний (vault settled)
- SETTLED_UNHANDLED → SETTLED_HANDLED: latch_breach
- SETTLED_* → ACTIVE: reset_for_new_commodity (миграция коммодити)

breaker блокирует deposit/withdraw/swap/handle_breach в любом состоянии.

Latch is_breach_handled выставляется ДО любых внешних вызовов
(checks-effects-interactions): re-entrant повтор handle_breach видит
SETTLED_HANDLED и отклоняется.
"""

from dataclasses import dataclass
from typing import Any, Optional

from loguru import logger

from src.core.domain.lifecycle import LifecycleFlags, LifecycleState, Operation
from src.core.errors import StateError

# Операции, которые блокирует breaker
BREAKER_BLOCKED: frozenset[Operation] = frozenset(
    {Operation.DEPOSIT, Operation.WITHDRAW, Operation.SWAP, Operation.HANDLE_BREACH}
)


@dataclass(frozen=True)
class LifecycleTransitionResult:
    """Результат оценки операции."""

    operation: Operation
    allowed: bool
    previous_state: LifecycleState
    new_state: LifecycleState
    block_reason: str

    # Для отладки
    details: str


class LifecycleStateMachine:
    """State machine с единственным durable-состоянием LifecycleFlags."""

    def __init__(self, flags: Optional[LifecycleFlags] = None):
        self._flags = flags or LifecycleFlags()

    @property
    def flags(self) -> LifecycleFlags:
        return self._flags

    @property
    def breaker(self) -> bool:
        return self._flags.breaker

    @property
    def is_breach_handled(self) -> bool:
        return self._flags.is_breach_handled

    def resolve_state(self, is_settled: bool) -> LifecycleState:
        if not is_settled:
            return LifecycleState.ACTIVE
        if self._flags.is_breach_handled:
            return LifecycleState.SETTLED_HANDLED
        return LifecycleState.SETTLED_UNHANDLED

    def evaluate(self, operation: Operation, is_settled: bool) -> LifecycleTransitionResult:
        """Оценка допуска операции без изменения состояния.

        Args:
            operation: публичная операция
            is_settled: статус vault

        Returns:
            LifecycleTransitionResult с решением и целевым состоянием
        """
        state = self.resolve_state(is_settled)

        # 1. Breaker overlay (высший приоритет)
        if self._flags.breaker and operation in BREAKER_BLOCKED:
            return self._blocked(operation, state, "breaker_engaged", "Manual breaker is on")

        # 2. Операции, требующие ACTIVE
        if operation in (Operation.DEPOSIT, Operation.SWAP):
            if state != LifecycleState.ACTIVE:
                return self._blocked(
                    operation, state, "vault_settled", f"{operation.value} requires ACTIVE, got {state.value}"
                )
            return self._allowed(operation, state, state)

        # 3. Breach handling: только SETTLED_UNHANDLED
        if operation == Operation.HANDLE_BREACH:
            if state == LifecycleState.ACTIVE:
                return self._blocked(operation, state, "vault_not_settled", "Vault is not settled")
            if state == LifecycleState.SETTLED_HANDLED:
                return self._blocked(
                    operation, state, "breach_already_handled", "Breach already handled in this commodity epoch"
                )
            return self._allowed(operation, state, LifecycleState.SETTLED_HANDLED)

        # 4. Withdraw: в settled автоматически обрабатывает breach
        if operation == Operation.WITHDRAW:
            new_state = (
                LifecycleState.SETTLED_HANDLED if state == LifecycleState.SETTLED_UNHANDLED else state
            )
            return self._allowed(operation, state, new_state)

        # 5. Миграция коммодити: только из settled
        if operation == Operation.UPDATE_COMMODITY:
            if state == LifecycleState.ACTIVE:
                return self._blocked(operation, state, "vault_not_settled", "Vault is not settled")
            return self._allowed(operation, state, LifecycleState.ACTIVE)

        # 6. SWEEP / WITHDRAW_ALL: в любом состоянии
        return self._allowed(operation, state, state)

    def require(self, operation: Operation, is_settled: bool) -> LifecycleTransitionResult:
        """evaluate + StateError при отказе."""
        result = self.evaluate(operation, is_settled)
        if not result.allowed:
            logger.warning(
                "Lifecycle: {} blocked in {} ({})",
                operation.value,
                result.previous_state.value,
                result.block_reason,
            )
            raise StateError(f"{operation.value} not allowed: {result.block_reason}")
        return result

    # -------------------------------------------------------------------------
    # Мутации флагов
    # -------------------------------------------------------------------------

    def latch_breach(self, is_settled: bool) -> LifecycleTransitionResult:
        """SETTLED_UNHANDLED → SETTLED_HANDLED. Вызывается до внешних вызовов."""
        result = self.require(Operation.HANDLE_BREACH, is_settled)
        self._flags = self._flags.model_copy(update={"is_breach_handled": True})
        logger.info("Lifecycle: breach latched ({} → {})", result.previous_state.value, result.new_state.value)
        return result

    def reset_for_new_commodity(self, is_settled: bool) -> LifecycleTransitionResult:
        """Сброс latch после миграции коммодити."""
        result = self.require(Operation.UPDATE_COMMODITY, is_settled)
        self._flags = self._flags.model_copy(update={"is_breach_handled": False})
        logger.info("Lifecycle: breach latch cleared for new commodity")
        return result

    def set_breaker(self, breaker: bool) -> None:
        self._flags = self._flags.model_copy(update={"breaker": breaker})
        logger.warning("Lifecycle: breaker set to {}", breaker)

    def snapshot_state(self) -> Any:
        return self._flags

    def restore_state(self, state: Any) -> None:
        self._flags = state

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _allowed(
        self, operation: Operation, state: LifecycleState, new_state: LifecycleState
    ) -> LifecycleTransitionResult:
        return LifecycleTransitionResult(
            operation=operation,
            allowed=True,
            previous_state=state,
            new_state=new_state,
            block_reason="",
            details=f"PASS: {operation.value} in {state.value} → {new_state.value}",
        )

    def _blocked(
        self, operation: Operation, state: LifecycleState, reason: str, details: str
    ) -> LifecycleTransitionResult:
        return LifecycleTransitionResult(
            operation=operation,
            allowed=False,
            previous_state=state,
            new_state=state,
            block_reason=reason,
            details=details,
        )
