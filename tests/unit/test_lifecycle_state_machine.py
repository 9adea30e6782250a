"""
Тесты для LifecycleStateMachine

Coverage:
- resolve_state по статусу vault и latch
- Допуск операций в ACTIVE / SETTLED_UNHANDLED / SETTLED_HANDLED
- Breaker overlay
- latch_breach one-shot и reset_for_new_commodity
- snapshot/restore флагов
"""

import pytest

from src.core.domain.lifecycle import LifecycleFlags, LifecycleState, Operation
from src.core.errors import StateError
from src.lifecycle.state_machine import BREAKER_BLOCKED, LifecycleStateMachine


class TestResolveState:
    def test_active(self) -> None:
        assert LifecycleStateMachine().resolve_state(False) == LifecycleState.ACTIVE

    def test_settled_unhandled(self) -> None:
        assert LifecycleStateMachine().resolve_state(True) == LifecycleState.SETTLED_UNHANDLED

    def test_settled_handled(self) -> None:
        sm = LifecycleStateMachine(LifecycleFlags(is_breach_handled=True))
        assert sm.resolve_state(True) == LifecycleState.SETTLED_HANDLED

    def test_latch_ignored_while_active(self) -> None:
        sm = LifecycleStateMachine(LifecycleFlags(is_breach_handled=True))
        assert sm.resolve_state(False) == LifecycleState.ACTIVE


class TestActive:
    @pytest.mark.parametrize(
        "operation",
        [Operation.DEPOSIT, Operation.WITHDRAW, Operation.SWAP, Operation.SWEEP, Operation.WITHDRAW_ALL],
    )
    def test_allowed(self, operation: Operation) -> None:
        result = LifecycleStateMachine().evaluate(operation, is_settled=False)
        assert result.allowed
        assert result.new_state == LifecycleState.ACTIVE

    def test_handle_breach_blocked(self) -> None:
        result = LifecycleStateMachine().evaluate(Operation.HANDLE_BREACH, is_settled=False)
        assert not result.allowed
        assert result.block_reason == "vault_not_settled"

    def test_update_commodity_blocked(self) -> None:
        result = LifecycleStateMachine().evaluate(Operation.UPDATE_COMMODITY, is_settled=False)
        assert not result.allowed
        assert result.block_reason == "vault_not_settled"


class TestSettledUnhandled:
    @pytest.mark.parametrize("operation", [Operation.DEPOSIT, Operation.SWAP])
    def test_active_only_operations_blocked(self, operation: Operation) -> None:
        result = LifecycleStateMachine().evaluate(operation, is_settled=True)
        assert not result.allowed
        assert result.block_reason == "vault_settled"

    def test_handle_breach_transitions_to_handled(self) -> None:
        result = LifecycleStateMachine().evaluate(Operation.HANDLE_BREACH, is_settled=True)
        assert result.allowed
        assert result.previous_state == LifecycleState.SETTLED_UNHANDLED
        assert result.new_state == LifecycleState.SETTLED_HANDLED

    def test_withdraw_handles_breach(self) -> None:
        result = LifecycleStateMachine().evaluate(Operation.WITHDRAW, is_settled=True)
        assert result.allowed
        assert result.new_state == LifecycleState.SETTLED_HANDLED

    def test_update_commodity_allowed(self) -> None:
        result = LifecycleStateMachine().evaluate(Operation.UPDATE_COMMODITY, is_settled=True)
        assert result.allowed
        assert result.new_state == LifecycleState.ACTIVE


class TestSettledHandled:
    def test_second_handle_breach_blocked(self) -> None:
        sm = LifecycleStateMachine(LifecycleFlags(is_breach_handled=True))
        result = sm.evaluate(Operation.HANDLE_BREACH, is_settled=True)
        assert not result.allowed
        assert result.block_reason == "breach_already_handled"

    def test_withdraw_stays_handled(self) -> None:
        sm = LifecycleStateMachine(LifecycleFlags(is_breach_handled=True))
        result = sm.evaluate(Operation.WITHDRAW, is_settled=True)
        assert result.allowed
        assert result.new_state == LifecycleState.SETTLED_HANDLED


class TestBreaker:
    @pytest.mark.parametrize("operation", sorted(BREAKER_BLOCKED, key=lambda op: op.value))
    def test_blocks_in_active(self, operation: Operation) -> None:
        sm = LifecycleStateMachine(LifecycleFlags(breaker=True))
        result = sm.evaluate(operation, is_settled=False)
        assert not result.allowed
        assert result.block_reason == "breaker_engaged"

    def test_blocks_handle_breach_when_settled(self) -> None:
        sm = LifecycleStateMachine(LifecycleFlags(breaker=True))
        result = sm.evaluate(Operation.HANDLE_BREACH, is_settled=True)
        assert result.block_reason == "breaker_engaged"

    @pytest.mark.parametrize(
        "operation", [Operation.SWEEP, Operation.WITHDRAW_ALL, Operation.UPDATE_COMMODITY]
    )
    def test_does_not_block_other_operations(self, operation: Operation) -> None:
        sm = LifecycleStateMachine(LifecycleFlags(breaker=True))
        assert sm.evaluate(operation, is_settled=True).allowed

    def test_set_breaker(self) -> None:
        sm = LifecycleStateMachine()
        sm.set_breaker(True)
        assert sm.breaker
        sm.set_breaker(False)
        assert not sm.evaluate(Operation.DEPOSIT, is_settled=False).block_reason


class TestMutations:
    def test_latch_is_one_shot(self) -> None:
        sm = LifecycleStateMachine()
        sm.latch_breach(is_settled=True)
        assert sm.is_breach_handled
        with pytest.raises(StateError, match="breach_already_handled"):
            sm.latch_breach(is_settled=True)

    def test_latch_requires_settled(self) -> None:
        sm = LifecycleStateMachine()
        with pytest.raises(StateError, match="vault_not_settled"):
            sm.latch_breach(is_settled=False)
        assert not sm.is_breach_handled

    def test_reset_clears_latch(self) -> None:
        sm = LifecycleStateMachine()
        sm.latch_breach(is_settled=True)
        sm.reset_for_new_commodity(is_settled=True)
        assert not sm.is_breach_handled
        assert sm.resolve_state(False) == LifecycleState.ACTIVE

    def test_reset_keeps_breaker(self) -> None:
        sm = LifecycleStateMachine(LifecycleFlags(breaker=True))
        sm.reset_for_new_commodity(is_settled=True)
        assert sm.breaker

    def test_require_raises_state_error(self) -> None:
        with pytest.raises(StateError, match="deposit not allowed: vault_settled"):
            LifecycleStateMachine().require(Operation.DEPOSIT, is_settled=True)

    def test_snapshot_restore(self) -> None:
        sm = LifecycleStateMachine()
        saved = sm.snapshot_state()
        sm.latch_breach(is_settled=True)
        sm.restore_state(saved)
        assert not sm.is_breach_handled

    def test_evaluate_does_not_mutate(self) -> None:
        sm = LifecycleStateMachine()
        sm.evaluate(Operation.HANDLE_BREACH, is_settled=True)
        assert sm.flags == LifecycleFlags()
