"""GATE 1: Lifecycle / Breaker

- Использует LifecycleStateMachine для допуска операции
- Breaker (ручной kill-switch) блокирует deposit/withdraw/swap/handle_breach
- Не выполняет переходов: мутации флагов делают BreachHandler и миграция
"""

from dataclasses import dataclass

from src.core.domain.lifecycle import LifecycleState, Operation
from src.lifecycle.state_machine import LifecycleStateMachine, LifecycleTransitionResult


@dataclass(frozen=True)
class Gate01Result:
    """Результат GATE 1."""

    entry_allowed: bool
    block_reason: str
    operation: Operation
    state: LifecycleState
    breaker: bool
    transition: LifecycleTransitionResult
    details: str


class Gate01Lifecycle:
    """GATE 1: допуск по состоянию коммодити."""

    def __init__(self, state_machine: LifecycleStateMachine):
        self.state_machine = state_machine

    def evaluate(self, operation: Operation, is_settled: bool) -> Gate01Result:
        transition = self.state_machine.evaluate(operation, is_settled)
        return Gate01Result(
            entry_allowed=transition.allowed,
            block_reason=transition.block_reason,
            operation=operation,
            state=transition.previous_state,
            breaker=self.state_machine.breaker,
            transition=transition,
            details=transition.details,
        )
