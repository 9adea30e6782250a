"""GATE 2: Swap access

Вызывающий swap должен держать не меньше min_balance gate-токена.
Если gate-токен не настроен, проверка пропускается.
"""

from dataclasses import dataclass
from typing import Optional

from src.ports.ports import TokenLedgerPort


@dataclass(frozen=True)
class SwapGateConfig:
    """Токен доступа и минимальный баланс."""

    gate_token: Optional[str] = None
    min_balance: int = 0


@dataclass(frozen=True)
class Gate02Result:
    """Результат GATE 2."""

    entry_allowed: bool
    block_reason: str
    sender_balance: int
    min_balance: int
    details: str


class Gate02SwapAccess:
    """GATE 2: минимальный баланс gate-токена."""

    def evaluate(
        self,
        sender: str,
        ledger: TokenLedgerPort,
        config: SwapGateConfig,
    ) -> Gate02Result:
        if config.gate_token is None:
            return Gate02Result(
                entry_allowed=True,
                block_reason="",
                sender_balance=0,
                min_balance=0,
                details="PASS: swap gate disabled",
            )

        balance = ledger.balance_of(config.gate_token, sender)
        if balance < config.min_balance:
            return Gate02Result(
                entry_allowed=False,
                block_reason="insufficient_gate_balance",
                sender_balance=balance,
                min_balance=config.min_balance,
                details=f"{sender} holds {balance} of {config.gate_token}, needs {config.min_balance}",
            )

        return Gate02Result(
            entry_allowed=True,
            block_reason="",
            sender_balance=balance,
            min_balance=config.min_balance,
            details=f"PASS: gate balance {balance} >= {config.min_balance}",
        )
