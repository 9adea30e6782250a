"""
Lifecycle — состояния и флаги жизненного цикла коммодити

Состояния:
- ACTIVE: vault не settled
- SETTLED_UNHANDLED: vault settled, breach ещё не обработан
- SETTLED_HANDLED: vault settled, breach обработан (позиции погашены)

breaker — ортогональный ручной kill-switch поверх любого состояния.
"""

from enum import Enum

from pydantic import BaseModel, Field


class LifecycleState(str, Enum):
    """Состояние коммодити с точки зрения стратегии."""

    ACTIVE = "ACTIVE"
    SETTLED_UNHANDLED = "SETTLED_UNHANDLED"
    SETTLED_HANDLED = "SETTLED_HANDLED"


class Operation(str, Enum):
    """Публичные операции, которые арбитрирует state machine."""

    DEPOSIT = "deposit"
    WITHDRAW = "withdraw"
    SWAP = "swap"
    HANDLE_BREACH = "handle_breach"
    UPDATE_COMMODITY = "update_commodity"
    SWEEP = "sweep"
    WITHDRAW_ALL = "withdraw_all"


class LifecycleFlags(BaseModel):
    """
    Единственное durable-состояние ядра.

    is_breach_handled — one-shot latch: ставится handle_breach,
    сбрасывается только успешной миграцией коммодити.
    """

    is_breach_handled: bool = Field(default=False, description="Breach уже обработан")
    breaker: bool = Field(default=False, description="Ручной kill-switch")

    model_config = {"frozen": True}
