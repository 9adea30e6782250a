"""Gates — индивидуальные проверки допуска публичных операций стратегии.

- GATE 0: Authorization (controller / governance)
- GATE 1: Lifecycle (состояние коммодити + breaker)
- GATE 2: Swap access (минимальный баланс gate-токена)
"""

from .gate_00_authorization import CallerRole, Gate00Authorization, Gate00Result
from .gate_01_lifecycle import Gate01Lifecycle, Gate01Result
from .gate_02_swap_access import Gate02Result, Gate02SwapAccess, SwapGateConfig

__all__ = [
    "CallerRole",
    "Gate00Authorization",
    "Gate00Result",
    "Gate01Lifecycle",
    "Gate01Result",
    "Gate02SwapAccess",
    "Gate02Result",
    "SwapGateConfig",
]
