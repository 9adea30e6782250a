"""Lifecycle — state machine коммодити (ACTIVE / SETTLED_UNHANDLED / SETTLED_HANDLED).

- Арбитраж операций deposit/withdraw/swap/handle_breach/update_commodity
- One-shot latch is_breach_handled
- Breaker overlay (ручной kill-switch)
"""

from .breach import BreachHandler, BreachOutcome
from .state_machine import LifecycleStateMachine, LifecycleTransitionResult

__all__ = [
    "LifecycleStateMachine",
    "LifecycleTransitionResult",
    "BreachHandler",
    "BreachOutcome",
]
