"""
Тесты для DepositAllocator

Coverage:
- Первичный deposit: mint половины, bind трёх токенов, public swap
- Повторный deposit после движения spot: rebind в порядке возрастания delta
- No-op ниже min_bind_balance с предупреждением в лог
- Остаток collateral после mint
"""

from typing import List

import pytest
from loguru import logger

from conftest import CONTROLLER, LONG, ORACLE, SHORT, STRATEGY, WANT, World
from src.core.domain.pool_state import TokenTriple
from src.core.math.fixed_point import ONE
from src.engine.allocator import MIN_BIND_BALANCE, DepositAllocator, DepositConfig
from src.engine.context import StrategyContext
from src.engine.rebind import RebindScheduler
from src.engine.weights import WeightEngine


@pytest.fixture
def log_messages():
    messages: List[str] = []
    sink_id = logger.add(lambda message: messages.append(str(message)), level="DEBUG")
    yield messages
    logger.remove(sink_id)


def context(world: World) -> StrategyContext:
    return StrategyContext(
        strategy=STRATEGY,
        ledger=world.ledger,
        pool=world.pool,
        vault=world.vault,
        tokens=TokenTriple(SHORT, LONG, WANT),
    )


class RecordingScheduler(RebindScheduler):
    def __init__(self, sender: str):
        super().__init__(sender)
        self.applied: List[List[str]] = []

    def apply(self, pool, current_weights, new_weights, balances, tokens):
        steps = super().apply(pool, current_weights, new_weights, balances, tokens)
        self.applied.append([step.token for step in steps])
        return steps


class TestFirstDeposit:
    def test_mints_half_and_binds(self, world: World) -> None:
        world.fund_strategy(2_000_000_000)
        outcome = world.strategy.deposit(CONTROLLER)

        assert not outcome.skipped
        assert outcome.first_bind
        assert outcome.want_to_vault == 1_000_000_000
        assert outcome.minted == 100_000_000

        pool = world.pool
        assert pool.get_balance(WANT) == 1_000_000_000
        assert pool.get_balance(LONG) == 100_000_000
        assert pool.get_balance(SHORT) == 100_000_000
        assert pool.get_denormalized_weight(WANT) == 25 * ONE
        assert pool.get_denormalized_weight(LONG) == 12 * ONE + ONE // 2
        assert pool.get_denormalized_weight(SHORT) == 12 * ONE + ONE // 2
        assert pool.is_public_swap()

    def test_strategy_holds_nothing_after_bind(self, deposited_world: World) -> None:
        for token in (WANT, LONG, SHORT):
            assert deposited_world.balance(token, STRATEGY) == 0

    def test_vault_holds_minted_collateral(self, deposited_world: World) -> None:
        assert deposited_world.balance(WANT, deposited_world.vault.address) == 1_000_000_000

    def test_odd_collateral_remainder_goes_to_pool(self, world: World) -> None:
        # 2e9 + 15: want_to_vault = 1e9 + 7, mint 1e8 пар, остаток в пул
        world.fund_strategy(2_000_000_015)
        outcome = world.strategy.deposit(CONTROLLER)
        assert outcome.minted == 100_000_000
        assert world.pool.get_balance(WANT) == 1_000_000_015


class TestRebalanceDeposit:
    def test_rebind_after_spot_move(self, deposited_world: World) -> None:
        world = deposited_world
        scheduler = RecordingScheduler(STRATEGY)
        allocator = DepositAllocator(WeightEngine(), scheduler)

        world.vault.update_spot(120, sender=ORACLE)
        world.fund_strategy(2_000_000_000)
        with world.ledger.atomic():
            outcome = allocator.allocate(context(world))

        assert not outcome.first_bind
        assert outcome.balances == TokenTriple(200_000_000, 200_000_000, 2_000_000_000)
        assert outcome.weights == TokenTriple(20 * ONE, 5 * ONE, 25 * ONE)
        # delta: short +7.5, long -7.5, collateral 0
        assert scheduler.applied == [[LONG, WANT, SHORT]]

        pool = world.pool
        assert pool.get_balance(WANT) == 2_000_000_000
        assert pool.get_balance(LONG) == 200_000_000
        assert pool.get_total_denormalized_weight() == 50 * ONE

    def test_second_deposit_through_strategy(self, deposited_world: World) -> None:
        world = deposited_world
        world.vault.update_spot(120, sender=ORACLE)
        world.fund_strategy(2_000_000_000)
        world.strategy.deposit(CONTROLLER)

        assert world.pool.get_denormalized_weight(SHORT) == 20 * ONE
        assert world.pool.get_denormalized_weight(LONG) == 5 * ONE
        assert world.balance(WANT, STRATEGY) == 0


class TestThreshold:
    def test_below_threshold_is_noop(self, world: World, log_messages: List[str]) -> None:
        # 19_999_980 // 2 // 10 = 999_999 < 10**6
        world.fund_strategy(19_999_980)
        outcome = world.strategy.deposit(CONTROLLER)

        assert outcome.skipped
        assert outcome.reason == "below_min_bind_balance"
        assert outcome.minted == 0
        assert world.balance(WANT, STRATEGY) == 19_999_980
        assert world.balance(LONG, STRATEGY) == 0
        assert not world.pool.is_bound(WANT)
        assert any("skip deposit" in m for m in log_messages)

    def test_exact_threshold_binds(self, world: World) -> None:
        world.fund_strategy(20_000_000)
        outcome = world.strategy.deposit(CONTROLLER)
        assert not outcome.skipped
        assert world.pool.get_balance(LONG) == MIN_BIND_BALANCE

    def test_existing_pool_holdings_count_toward_threshold(self, deposited_world: World) -> None:
        world = deposited_world
        world.fund_strategy(20)
        outcome = world.strategy.deposit(CONTROLLER)
        assert not outcome.skipped
        assert outcome.minted == 1

    def test_no_new_collateral_still_rebalances(self, deposited_world: World) -> None:
        outcome = deposited_world.strategy.deposit(CONTROLLER)
        assert not outcome.skipped
        assert outcome.minted == 0
        assert outcome.weights == TokenTriple(12 * ONE + ONE // 2, 12 * ONE + ONE // 2, 25 * ONE)

    def test_custom_threshold(self, world: World) -> None:
        allocator = DepositAllocator(
            WeightEngine(), RebindScheduler(STRATEGY), DepositConfig(min_bind_balance=10**9)
        )
        world.fund_strategy(2_000_000_000)
        outcome = allocator.allocate(context(world))
        assert outcome.skipped

    def test_config_validation(self) -> None:
        with pytest.raises(ValueError, match="mint_divisor must be positive"):
            DepositConfig(mint_divisor=0)
