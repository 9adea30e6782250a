"""
Тесты для in-memory коллабораторов (src.sim)

Coverage:
- Ledger: переводы, mint/burn, atomic rollback, вложенные транзакции
- WeightedPool: bind/rebind/unbind, границы весов, свопы
- PositionVault: mint/redeem, breach, settle_positions
- StaticController: маршрутизация выплат
"""

import pytest

from conftest import ORACLE, POOL, STRATEGY, TRADER, VAULT
from src.core.math.fixed_point import ONE
from src.ports import ControllerPort, PoolPort, TokenLedgerPort, VaultPort
from src.sim import (
    Ledger,
    LedgerError,
    PoolError,
    PositionVault,
    StaticController,
    VaultError,
    WeightedPool,
)


def make_vault(ledger: Ledger, spot: int = 150) -> PositionVault:
    return PositionVault(
        ledger,
        VAULT,
        collateral_token="USDC",
        long_token="LTK",
        short_token="STK",
        floor=100,
        cap=200,
        spot=spot,
        collateral_per_unit=10,
        oracle=ORACLE,
    )


# =============================================================================
# LEDGER
# =============================================================================


class TestLedger:
    def test_transfer(self) -> None:
        ledger = Ledger()
        ledger.mint("A", "x", 10)
        ledger.transfer("A", "x", "y", 4)
        assert ledger.balance_of("A", "x") == 6
        assert ledger.balance_of("A", "y") == 4
        assert ledger.total_supply("A") == 10

    def test_insufficient_balance(self) -> None:
        ledger = Ledger()
        with pytest.raises(LedgerError, match="Insufficient"):
            ledger.transfer("A", "x", "y", 1)

    def test_negative_amount(self) -> None:
        with pytest.raises(LedgerError):
            Ledger().transfer("A", "x", "y", -1)

    def test_burn(self) -> None:
        ledger = Ledger()
        ledger.mint("A", "x", 3)
        ledger.burn("A", "x", 2)
        assert ledger.total_supply("A") == 1
        with pytest.raises(LedgerError):
            ledger.burn("A", "x", 2)

    def test_atomic_rollback(self) -> None:
        ledger = Ledger()
        ledger.mint("A", "x", 10)
        with pytest.raises(RuntimeError):
            with ledger.atomic():
                ledger.transfer("A", "x", "y", 5)
                raise RuntimeError("boom")
        assert ledger.balance_of("A", "x") == 10
        assert not ledger.in_transaction

    def test_nested_atomic_merges(self) -> None:
        ledger = Ledger()
        ledger.mint("A", "x", 10)
        with pytest.raises(RuntimeError):
            with ledger.atomic():
                with ledger.atomic():
                    ledger.transfer("A", "x", "y", 5)
                assert ledger.in_transaction
                raise RuntimeError("outer")
        assert ledger.balance_of("A", "y") == 0

    def test_rollback_restores_registered_components(self) -> None:
        ledger = Ledger()
        vault = make_vault(ledger)
        with pytest.raises(RuntimeError):
            with ledger.atomic():
                vault.update_spot(200, sender=ORACLE)
                raise RuntimeError("boom")
        assert not vault.is_settled()
        assert vault.price_spot() == 150

    def test_satisfies_port(self) -> None:
        assert isinstance(Ledger(), TokenLedgerPort)


# =============================================================================
# POOL
# =============================================================================


class TestWeightedPool:
    @pytest.fixture
    def ledger(self) -> Ledger:
        ledger = Ledger()
        for token in ("A", "B", "C"):
            ledger.mint(token, STRATEGY, 10**9)
        return ledger

    @pytest.fixture
    def pool(self, ledger: Ledger) -> WeightedPool:
        return WeightedPool(ledger, POOL, controller=STRATEGY)

    def test_bind_pulls_balance(self, ledger: Ledger, pool: WeightedPool) -> None:
        pool.bind("A", 10**8, 10 * ONE, sender=STRATEGY)
        assert pool.is_bound("A")
        assert pool.get_balance("A") == 10**8
        assert ledger.balance_of("A", POOL) == 10**8
        assert pool.get_current_tokens() == ["A"]

    def test_only_controller(self, pool: WeightedPool) -> None:
        with pytest.raises(PoolError, match="ERR_NOT_CONTROLLER"):
            pool.bind("A", 10**8, 10 * ONE, sender=TRADER)

    def test_double_bind(self, pool: WeightedPool) -> None:
        pool.bind("A", 10**8, 10 * ONE, sender=STRATEGY)
        with pytest.raises(PoolError, match="ERR_IS_BOUND"):
            pool.bind("A", 10**8, 10 * ONE, sender=STRATEGY)

    @pytest.mark.parametrize(
        "balance, weight, code",
        [
            (10**8, ONE - 1, "ERR_MIN_WEIGHT"),
            (10**8, 50 * ONE + 1, "ERR_MAX_WEIGHT"),
            (10**6 - 1, 10 * ONE, "ERR_MIN_BALANCE"),
        ],
    )
    def test_bounds(self, pool: WeightedPool, balance: int, weight: int, code: str) -> None:
        with pytest.raises(PoolError, match=code):
            pool.bind("A", balance, weight, sender=STRATEGY)

    def test_total_weight_bound(self, pool: WeightedPool) -> None:
        pool.bind("A", 10**8, 30 * ONE, sender=STRATEGY)
        with pytest.raises(PoolError, match="ERR_MAX_TOTAL_WEIGHT"):
            pool.bind("B", 10**8, 21 * ONE, sender=STRATEGY)

    def test_rebind_returns_excess(self, ledger: Ledger, pool: WeightedPool) -> None:
        pool.bind("A", 10**8, 10 * ONE, sender=STRATEGY)
        pool.rebind("A", 4 * 10**7, 5 * ONE, sender=STRATEGY)
        assert ledger.balance_of("A", STRATEGY) == 10**9 - 4 * 10**7
        assert pool.get_total_denormalized_weight() == 5 * ONE

    def test_unbind_swaps_last_token(self, ledger: Ledger, pool: WeightedPool) -> None:
        for token in ("A", "B", "C"):
            pool.bind(token, 10**8, 10 * ONE, sender=STRATEGY)
        pool.unbind("A", sender=STRATEGY)
        assert pool.get_current_tokens() == ["C", "B"]
        assert ledger.balance_of("A", STRATEGY) == 10**9
        assert pool.get_total_denormalized_weight() == 20 * ONE
        pool.unbind("C", sender=STRATEGY)
        assert pool.get_current_tokens() == ["B"]

    def test_normalized_weight(self, pool: WeightedPool) -> None:
        pool.bind("A", 10**8, 10 * ONE, sender=STRATEGY)
        pool.bind("B", 10**8, 30 * ONE, sender=STRATEGY)
        assert pool.get_normalized_weight("A") == ONE // 4

    def test_swap_requires_public(self, pool: WeightedPool) -> None:
        pool.bind("A", 10**8, 10 * ONE, sender=STRATEGY)
        pool.bind("B", 10**8, 10 * ONE, sender=STRATEGY)
        with pytest.raises(PoolError, match="ERR_SWAP_NOT_PUBLIC"):
            pool.swap_exact_amount_in("A", 10, "B", 0, 2**255, sender=STRATEGY)

    def test_swap(self, ledger: Ledger, pool: WeightedPool) -> None:
        pool.bind("A", 10**8, 10 * ONE, sender=STRATEGY)
        pool.bind("B", 10**8, 10 * ONE, sender=STRATEGY)
        pool.set_public_swap(True, sender=STRATEGY)
        out, spot_after = pool.swap_exact_amount_in("A", 10**6, "B", 0, 2**255, sender=STRATEGY)
        assert out > 0
        assert pool.get_balance("A") == 10**8 + 10**6
        assert pool.get_balance("B") == 10**8 - out
        assert spot_after > ONE

    def test_max_in_ratio(self, pool: WeightedPool) -> None:
        pool.bind("A", 10**8, 10 * ONE, sender=STRATEGY)
        pool.bind("B", 10**8, 10 * ONE, sender=STRATEGY)
        pool.set_public_swap(True, sender=STRATEGY)
        with pytest.raises(PoolError, match="ERR_MAX_IN_RATIO"):
            pool.swap_exact_amount_in("A", 10**8 // 2 + 1, "B", 0, 2**255, sender=STRATEGY)

    def test_unbound_views(self, pool: WeightedPool) -> None:
        with pytest.raises(PoolError, match="ERR_NOT_BOUND"):
            pool.get_balance("A")

    def test_swap_fee_bounds(self, pool: WeightedPool) -> None:
        with pytest.raises(PoolError, match="ERR_MIN_FEE"):
            pool.set_swap_fee(0, sender=STRATEGY)

    def test_satisfies_port(self, pool: WeightedPool) -> None:
        assert isinstance(pool, PoolPort)


# =============================================================================
# VAULT
# =============================================================================


class TestPositionVault:
    def test_mint(self) -> None:
        ledger = Ledger()
        vault = make_vault(ledger)
        ledger.mint("USDC", STRATEGY, 105)
        assert vault.mint_from_collateral_amount(105, sender=STRATEGY) == 10
        assert ledger.balance_of("USDC", STRATEGY) == 5
        assert ledger.balance_of("LTK", STRATEGY) == 10
        assert ledger.balance_of("STK", STRATEGY) == 10

    def test_mint_below_unit(self) -> None:
        with pytest.raises(VaultError):
            make_vault(Ledger()).mint_from_collateral_amount(9, sender=STRATEGY)

    def test_redeem(self) -> None:
        ledger = Ledger()
        vault = make_vault(ledger)
        ledger.mint("USDC", STRATEGY, 100)
        vault.mint_from_collateral_amount(100, sender=STRATEGY)
        assert vault.redeem_positions(4, sender=STRATEGY) == 40
        assert ledger.balance_of("USDC", STRATEGY) == 40
        assert ledger.total_supply("LTK") == 6

    def test_breach_at_cap(self) -> None:
        vault = make_vault(Ledger())
        vault.update_spot(250, sender=ORACLE)
        assert vault.is_settled()
        assert vault.price_spot() == 200

    def test_inner_update_does_not_settle(self) -> None:
        vault = make_vault(Ledger())
        vault.update_spot(199, sender=ORACLE)
        assert not vault.is_settled()

    def test_only_oracle(self) -> None:
        with pytest.raises(VaultError):
            make_vault(Ledger()).update_spot(160, sender=TRADER)

    def test_mint_after_settlement(self) -> None:
        vault = make_vault(Ledger())
        vault.settle(sender=ORACLE)
        with pytest.raises(VaultError, match="settled"):
            vault.mint_from_collateral_amount(100, sender=STRATEGY)

    def test_settle_positions(self) -> None:
        ledger = Ledger()
        vault = make_vault(ledger)
        ledger.mint("USDC", STRATEGY, 100)
        vault.mint_from_collateral_amount(100, sender=STRATEGY)
        ledger.transfer("STK", STRATEGY, TRADER, 10)
        vault.update_spot(200, sender=ORACLE)
        # long по cap: полная стоимость C за единицу
        assert vault.settle_positions(sender=STRATEGY) == 100
        assert ledger.balance_of("LTK", STRATEGY) == 0
        assert vault.settle_positions(sender=TRADER) == 0

    def test_settle_positions_requires_settlement(self) -> None:
        with pytest.raises(VaultError, match="not settled"):
            make_vault(Ledger()).settle_positions(sender=STRATEGY)

    def test_invalid_corridor(self) -> None:
        with pytest.raises(VaultError):
            PositionVault(Ledger(), VAULT, "USDC", "LTK", "STK", 100, 100, 100, 10, ORACLE)

    def test_satisfies_port(self) -> None:
        assert isinstance(make_vault(Ledger()), VaultPort)


class TestStaticController:
    def test_routes(self) -> None:
        controller = StaticController("0xc", {"USDC": "0xr"})
        assert controller.vaults("USDC") == "0xr"
        controller.set_vault("DAI", "0xd")
        assert controller.vaults("DAI") == "0xd"

    def test_missing_route(self) -> None:
        with pytest.raises(KeyError):
            StaticController("0xc").vaults("USDC")

    def test_satisfies_port(self) -> None:
        assert isinstance(StaticController("0xc"), ControllerPort)
