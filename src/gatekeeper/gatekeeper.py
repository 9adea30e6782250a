"""Gatekeeper — цепочка GATE 0..2 с переводом отказов в ошибки.

Порядок:
1. GATE 0 Authorization → AuthorizationError
2. GATE 1 Lifecycle     → StateError
3. GATE 2 Swap access   → AuthorizationError (только для swap)
"""

from typing import Optional

from loguru import logger

from src.core.domain.identities import Identities
from src.core.domain.lifecycle import Operation
from src.core.errors import AuthorizationError, StateError
from src.gatekeeper.gates.gate_00_authorization import CallerRole, Gate00Authorization
from src.gatekeeper.gates.gate_01_lifecycle import Gate01Lifecycle, Gate01Result
from src.gatekeeper.gates.gate_02_swap_access import Gate02SwapAccess, SwapGateConfig
from src.lifecycle.state_machine import LifecycleStateMachine
from src.ports.ports import TokenLedgerPort


class Gatekeeper:
    def __init__(self, state_machine: LifecycleStateMachine):
        self.gate00 = Gate00Authorization()
        self.gate01 = Gate01Lifecycle(state_machine)
        self.gate02 = Gate02SwapAccess()

    def check(
        self,
        operation: Operation,
        sender: str,
        required_role: CallerRole,
        identities: Identities,
        is_settled: bool,
        ledger: Optional[TokenLedgerPort] = None,
        swap_gate: Optional[SwapGateConfig] = None,
    ) -> Gate01Result:
        """Прогон цепочки; первый отказ прерывает вызов."""
        r0 = self.gate00.evaluate(sender, required_role, identities)
        if not r0.entry_allowed:
            logger.warning("Gatekeeper: {} blocked at GATE 0 ({})", operation.value, r0.block_reason)
            raise AuthorizationError(r0.details)

        r1 = self.gate01.evaluate(operation, is_settled)
        if not r1.entry_allowed:
            logger.warning("Gatekeeper: {} blocked at GATE 1 ({})", operation.value, r1.block_reason)
            raise StateError(f"{operation.value} not allowed: {r1.block_reason}")

        if operation == Operation.SWAP and ledger is not None and swap_gate is not None:
            r2 = self.gate02.evaluate(sender, ledger, swap_gate)
            if not r2.entry_allowed:
                logger.warning("Gatekeeper: swap blocked at GATE 2 ({})", r2.block_reason)
                raise AuthorizationError(r2.details)

        return r1
