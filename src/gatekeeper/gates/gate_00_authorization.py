"""GATE 0: Authorization

Первый gate в цепочке:
- CONTROLLER: deposit / withdraw / withdraw_all / sweep
- GOVERNANCE: update_commodity_after_breach и admin сеттеры
- ANY: handle_breach, swap (доступ к swap проверяет GATE 2)
"""

from dataclasses import dataclass
from enum import Enum

from src.core.domain.identities import Identities


class CallerRole(str, Enum):
    """Требуемая роль вызывающего."""

    ANY = "ANY"
    CONTROLLER = "CONTROLLER"
    GOVERNANCE = "GOVERNANCE"


@dataclass(frozen=True)
class Gate00Result:
    """Результат GATE 0."""

    entry_allowed: bool
    block_reason: str
    sender: str
    required_role: CallerRole
    details: str


class Gate00Authorization:
    """GATE 0: проверка роли вызывающего (stateless)."""

    def evaluate(
        self,
        sender: str,
        required_role: CallerRole,
        identities: Identities,
    ) -> Gate00Result:
        if required_role == CallerRole.CONTROLLER and sender != identities.controller:
            return Gate00Result(
                entry_allowed=False,
                block_reason="not_controller",
                sender=sender,
                required_role=required_role,
                details=f"{sender} is not the controller",
            )

        if required_role == CallerRole.GOVERNANCE and sender != identities.governance:
            return Gate00Result(
                entry_allowed=False,
                block_reason="not_governance",
                sender=sender,
                required_role=required_role,
                details=f"{sender} is not governance",
            )

        return Gate00Result(
            entry_allowed=True,
            block_reason="",
            sender=sender,
            required_role=required_role,
            details=f"PASS: role={required_role.value}",
        )
