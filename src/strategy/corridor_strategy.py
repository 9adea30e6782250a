"""CorridorStrategy — стратегия ликвидности трёхтокенного пула коридора.

Публичные операции (каждая атомарна и non-reentrant):
- deposit / withdraw(amount) / withdraw_token(token) / withdraw_all — controller
- handle_breach — любой вызывающий, только SETTLED_UNHANDLED
- update_commodity_after_breach — governance, только settled
- swap_exact_amount_in — любой держатель gate-токена, только ACTIVE
- admin сеттеры — governance

Атомарность: Ledger.atomic() откатывает ledger, pool, vault и саму
стратегию при любом исключении. Флаг is_breach_handled пишется до внешних
вызовов.
"""

from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional

from loguru import logger

from src.core.contracts.validators import validate_strategy_snapshot
from src.core.domain.identities import Identities, is_zero_address
from src.core.domain.lifecycle import LifecycleState, Operation
from src.core.errors import (
    AmountError,
    AuthorizationError,
    ConfigurationError,
    InvariantViolation,
    StateError,
)
from src.engine.allocator import DepositAllocator, DepositConfig, DepositOutcome
from src.engine.context import StrategyContext
from src.engine.rebind import RebindScheduler
from src.engine.swap_router import SwapResult, SwapRouter
from src.engine.valuator import UnitPrices, Valuation, Valuator
from src.engine.weights import WeightEngine, WeightEngineConfig
from src.gatekeeper.gatekeeper import Gatekeeper
from src.gatekeeper.gates.gate_00_authorization import CallerRole
from src.gatekeeper.gates.gate_02_swap_access import SwapGateConfig
from src.lifecycle.breach import BreachHandler, BreachOutcome
from src.lifecycle.state_machine import LifecycleStateMachine
from src.ports.ports import ControllerPort, PoolPort, VaultPort
from src.sim.ledger import Ledger


class CorridorStrategy:
    """Стратегия: rebalancing + lifecycle одной коммодити за раз."""

    def __init__(
        self,
        ledger: Ledger,
        pool: PoolPort,
        vault: VaultPort,
        controller: ControllerPort,
        identities: Identities,
        weight_config: Optional[WeightEngineConfig] = None,
        deposit_config: Optional[DepositConfig] = None,
        swap_gate: Optional[SwapGateConfig] = None,
    ):
        if identities.pool != pool.address:
            raise ConfigurationError(f"Pool address mismatch: {identities.pool} != {pool.address}")
        if identities.controller != controller.address:
            raise ConfigurationError("Controller address mismatch")
        self._check_vault_tokens(vault, identities.long_token, identities.short_token)
        if identities.vault != vault.address:
            raise ConfigurationError(f"Vault address mismatch: {identities.vault} != {vault.address}")

        self._ledger = ledger
        self._pool = pool
        self._vault = vault
        self._controller = controller
        self._identities = identities
        self._swap_gate = swap_gate or SwapGateConfig()

        self._lifecycle = LifecycleStateMachine()
        self._gatekeeper = Gatekeeper(self._lifecycle)
        self._engine = WeightEngine(weight_config)
        self._scheduler = RebindScheduler(identities.strategy)
        self._allocator = DepositAllocator(self._engine, self._scheduler, deposit_config)
        self._valuator = Valuator()
        self._router = SwapRouter(self._engine, self._scheduler)
        self._breach = BreachHandler(self._lifecycle)

        self._entered = False
        ledger.register(self)

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def address(self) -> str:
        return self._identities.strategy

    @property
    def identities(self) -> Identities:
        return self._identities

    @property
    def vault(self) -> VaultPort:
        return self._vault

    @property
    def lifecycle(self) -> LifecycleStateMachine:
        return self._lifecycle

    @property
    def lifecycle_state(self) -> LifecycleState:
        return self._lifecycle.resolve_state(self._vault.is_settled())

    @property
    def swap_gate(self) -> SwapGateConfig:
        return self._swap_gate

    # -------------------------------------------------------------------------
    # Controller operations
    # -------------------------------------------------------------------------

    def deposit(self, sender: str) -> DepositOutcome:
        """Mint половины свободного collateral и пересчёт весов пула."""
        with self._call():
            self._check(Operation.DEPOSIT, sender, CallerRole.CONTROLLER)
            return self._allocator.allocate(self._context())

    def withdraw(self, sender: str, amount: int) -> int:
        """
        Выплата amount collateral получателю controller.vaults(want).

        ACTIVE: unbind → redeem пар → выплата → повторный deposit.
        settled: handle_breach (если не обработан) → выплата.
        """
        with self._call():
            self._check(Operation.WITHDRAW, sender, CallerRole.CONTROLLER)
            if amount <= 0:
                raise AmountError("Withdraw amount must be positive")

            ctx = self._context()
            receiver = self._controller.vaults(ctx.want)

            if ctx.vault.is_settled():
                if not self._lifecycle.is_breach_handled:
                    self._breach.handle_breach(ctx)
                self._ledger.transfer(ctx.want, self.address, receiver, amount)
            else:
                self._breach.liquidate(ctx)
                self._ledger.transfer(ctx.want, self.address, receiver, amount)
                self._allocator.allocate(ctx)

            logger.info("CorridorStrategy: withdrew {} {} to {}", amount, ctx.want, receiver)
            return amount

    def withdraw_token(self, sender: str, token: str) -> int:
        """Sweep dust-токена на controller. Защищённые активы запрещены."""
        with self._call():
            self._check(Operation.SWEEP, sender, CallerRole.CONTROLLER)
            if token in self._identities.protected_tokens:
                raise InvariantViolation(f"Cannot sweep protected asset {token}")

            balance = self._ledger.balance_of(token, self.address)
            self._ledger.transfer(token, self.address, self._controller.address, balance)
            logger.info("CorridorStrategy: swept {} {}", balance, token)
            return balance

    def withdraw_all(self, sender: str) -> int:
        """Полный разбор пула и перевод всех активов successor-стратегии."""
        with self._call():
            self._check(Operation.WITHDRAW_ALL, sender, CallerRole.CONTROLLER)
            successor = self._identities.new_strategy
            if is_zero_address(successor):
                raise ConfigurationError("No successor strategy configured")

            ctx = self._context()
            self._breach.liquidate(ctx)

            own = ctx.strategy_balances()
            for token, amount in zip(ctx.tokens, own.as_triple):
                if amount > 0:
                    self._ledger.transfer(token, self.address, successor, amount)

            logger.info(
                "CorridorStrategy: withdraw_all to {} (want={}, long={}, short={})",
                successor,
                own.collateral,
                own.long,
                own.short,
            )
            return own.collateral

    # -------------------------------------------------------------------------
    # Lifecycle operations
    # -------------------------------------------------------------------------

    def handle_breach(self, sender: str) -> BreachOutcome:
        """Unbind + redeem после settlement. One-shot в пределах коммодити."""
        with self._call():
            self._check(Operation.HANDLE_BREACH, sender, CallerRole.ANY)
            return self._breach.handle_breach(self._context())

    def update_commodity_after_breach(
        self,
        sender: str,
        new_vault: VaultPort,
        new_long: str,
        new_short: str,
    ) -> DepositOutcome:
        """Миграция на новую коммодити: новые vault/long/short и deposit в пул."""
        with self._call():
            self._check(Operation.UPDATE_COMMODITY, sender, CallerRole.GOVERNANCE)
            for address in (new_vault.address, new_long, new_short):
                if is_zero_address(address):
                    raise InvariantViolation("Zero address is not allowed")
            self._check_vault_tokens(new_vault, new_long, new_short)
            if new_vault.is_settled():
                raise StateError("New vault is already settled")

            ctx = self._context()
            if not self._lifecycle.is_breach_handled:
                own = ctx.strategy_balances()
                if own.long > 0 or own.short > 0 or ctx.pool_state().any_bound:
                    self._breach.handle_breach(ctx)

            self._lifecycle.reset_for_new_commodity(ctx.vault.is_settled())
            self._identities = self._identities.model_copy(
                update={
                    "vault": new_vault.address,
                    "long_token": new_long,
                    "short_token": new_short,
                }
            )
            self._vault = new_vault
            logger.info(
                "CorridorStrategy: migrated to vault {} (long={}, short={})",
                new_vault.address,
                new_long,
                new_short,
            )
            return self._allocator.allocate(self._context())

    # -------------------------------------------------------------------------
    # Swaps
    # -------------------------------------------------------------------------

    def swap_exact_amount_in(
        self,
        sender: str,
        token_in: str,
        amount_in: int,
        token_out: str,
        min_amount_out: int,
        max_price: int,
    ) -> SwapResult:
        with self._call():
            self._check(Operation.SWAP, sender, CallerRole.ANY)
            if amount_in <= 0:
                raise AmountError("Swap amount must be positive")
            return self._router.swap_exact_amount_in(
                self._context(), sender, token_in, amount_in, token_out, min_amount_out, max_price
            )

    def get_expected_out_amount(self, token_in: str, token_out: str, amount_in: int) -> int:
        return self._router.get_expected_out_amount(self._context(), token_in, token_out, amount_in)

    def get_expected_in_amount(self, token_in: str, token_out: str, amount_out: int) -> int:
        return self._router.get_expected_in_amount(self._context(), token_in, token_out, amount_out)

    def get_spot_price(self, token_in: str, token_out: str) -> int:
        return self._router.get_spot_price(self._context(), token_in, token_out)

    # -------------------------------------------------------------------------
    # Valuation
    # -------------------------------------------------------------------------

    def balance_of(self) -> int:
        """Полная стоимость стратегии в collateral."""
        return self._valuator.balance_of(self._context())

    def valuation(self) -> Valuation:
        return self._valuator.valuation(self._context())

    def unit_prices(self) -> UnitPrices:
        return self._valuator.unit_prices(self._context())

    def snapshot(self) -> Dict[str, Any]:
        """Наблюдаемое состояние, валидированное по strategy_snapshot контракту."""
        ctx = self._context()
        pool_state = ctx.pool_state()
        valuation = self._valuator.valuation(ctx)
        data = {
            "strategy": self.address,
            "want": self._identities.want,
            "long_token": self._identities.long_token,
            "short_token": self._identities.short_token,
            "lifecycle_state": self.lifecycle_state.value,
            "is_breach_handled": self._lifecycle.is_breach_handled,
            "breaker": self._lifecycle.breaker,
            "pricing_regime": valuation.prices.regime.value,
            "balance_of": valuation.total,
            "pool": {
                "short": pool_state.short.model_dump(),
                "long": pool_state.long.model_dump(),
                "collateral": pool_state.collateral.model_dump(),
                "total_weight": pool_state.total_weight,
            },
            "corridor": ctx.corridor().to_contract(),
        }
        validate_strategy_snapshot(data)
        return data

    # -------------------------------------------------------------------------
    # Governance setters
    # -------------------------------------------------------------------------

    def set_governance(self, sender: str, governance: str) -> None:
        with self._call():
            self._require_governance(sender)
            self._update_identity("governance", governance)

    def set_controller(self, sender: str, controller: ControllerPort) -> None:
        with self._call():
            self._require_governance(sender)
            self._update_identity("controller", controller.address)
            self._controller = controller

    def set_new_strategy(self, sender: str, new_strategy: str) -> None:
        with self._call():
            self._require_governance(sender)
            self._update_identity("new_strategy", new_strategy)

    def set_min_balance_gate(self, sender: str, gate_token: str, min_balance: int) -> None:
        with self._call():
            self._require_governance(sender)
            if is_zero_address(gate_token):
                raise InvariantViolation("Zero address is not allowed")
            if min_balance < 0:
                raise AmountError("min_balance must be non-negative")
            self._swap_gate = SwapGateConfig(gate_token=gate_token, min_balance=min_balance)
            logger.info("CorridorStrategy: swap gate {} >= {}", gate_token, min_balance)

    def set_swap_fee(self, sender: str, swap_fee: int) -> None:
        with self._call():
            self._require_governance(sender)
            self._pool.set_swap_fee(swap_fee, sender=self.address)

    def set_breaker(self, sender: str, breaker: bool) -> None:
        with self._call():
            self._require_governance(sender)
            self._lifecycle.set_breaker(breaker)

    def set_pool_controller(self, sender: str, controller: str) -> None:
        with self._call():
            self._require_governance(sender)
            if is_zero_address(controller):
                raise InvariantViolation("Zero address is not allowed")
            self._pool.set_controller(controller, sender=self.address)

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    @contextmanager
    def _call(self) -> Iterator[None]:
        """Non-reentrant атомарный вызов."""
        if self._entered:
            raise StateError("Reentrant call rejected")
        self._entered = True
        try:
            with self._ledger.atomic():
                yield
        finally:
            self._entered = False

    def _context(self) -> StrategyContext:
        return StrategyContext(
            strategy=self.address,
            ledger=self._ledger,
            pool=self._pool,
            vault=self._vault,
            tokens=self._identities.tokens,
        )

    def _check(self, operation: Operation, sender: str, role: CallerRole) -> None:
        self._gatekeeper.check(
            operation,
            sender,
            role,
            self._identities,
            self._vault.is_settled(),
            ledger=self._ledger,
            swap_gate=self._swap_gate,
        )

    def _require_governance(self, sender: str) -> None:
        r0 = self._gatekeeper.gate00.evaluate(sender, CallerRole.GOVERNANCE, self._identities)
        if not r0.entry_allowed:
            raise AuthorizationError(r0.details)

    def _update_identity(self, field: str, value: str) -> None:
        if is_zero_address(value):
            raise InvariantViolation("Zero address is not allowed")
        self._identities = self._identities.model_copy(update={field: value})
        logger.info("CorridorStrategy: {} updated to {}", field, value)

    @staticmethod
    def _check_vault_tokens(vault: VaultPort, long_token: str, short_token: str) -> None:
        if vault.long_token != long_token or vault.short_token != short_token:
            raise ConfigurationError("Vault position tokens do not match configured tokens")

    def snapshot_state(self) -> Any:
        return (
            self._identities,
            self._vault,
            self._controller,
            self._swap_gate,
            self._lifecycle.snapshot_state(),
        )

    def restore_state(self, state: Any) -> None:
        (
            self._identities,
            self._vault,
            self._controller,
            self._swap_gate,
            flags,
        ) = state
        self._lifecycle.restore_state(flags)
