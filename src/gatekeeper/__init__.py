"""Gatekeeper — допуск публичных операций стратегии.

- GATE 0: роль вызывающего
- GATE 1: состояние коммодити и breaker
- GATE 2: доступ к swap
"""

from .gatekeeper import Gatekeeper
from .gates import CallerRole, SwapGateConfig

__all__ = [
    "Gatekeeper",
    "CallerRole",
    "SwapGateConfig",
]
