"""Общие фикстуры: in-memory ledger, pool, vault, controller и стратегия."""

from dataclasses import dataclass

import pytest

from src.core.domain.identities import Identities
from src.sim.controller import StaticController
from src.sim.ledger import Ledger
from src.sim.pool import WeightedPool
from src.sim.vault import PositionVault
from src.strategy.corridor_strategy import CorridorStrategy

# Идентичности
STRATEGY = "0xstrategy"
CONTROLLER = "0xcontroller"
GOVERNANCE = "0xgovernance"
ORACLE = "0xoracle"
VAULT_RECEIVER = "0xreceiver"
SUCCESSOR = "0xsuccessor"
TRADER = "0xtrader"
POOL = "0xpool"
VAULT = "0xvault"

# Токены
WANT = "USDC"
LONG = "LTK"
SHORT = "STK"


@dataclass
class World:
    ledger: Ledger
    pool: WeightedPool
    vault: PositionVault
    controller: StaticController
    strategy: CorridorStrategy

    def fund_strategy(self, amount: int) -> None:
        self.ledger.mint(WANT, STRATEGY, amount)

    def balance(self, token: str, holder: str) -> int:
        return self.ledger.balance_of(token, holder)


def make_world(
    floor: int = 100,
    cap: int = 200,
    spot: int = 150,
    collateral_per_unit: int = 10,
    vault_cls=PositionVault,
) -> World:
    ledger = Ledger()
    pool = WeightedPool(ledger, POOL, controller=STRATEGY)
    vault = vault_cls(
        ledger,
        VAULT,
        collateral_token=WANT,
        long_token=LONG,
        short_token=SHORT,
        floor=floor,
        cap=cap,
        spot=spot,
        collateral_per_unit=collateral_per_unit,
        oracle=ORACLE,
    )
    controller = StaticController(CONTROLLER, {WANT: VAULT_RECEIVER})
    identities = Identities(
        strategy=STRATEGY,
        want=WANT,
        long_token=LONG,
        short_token=SHORT,
        pool=POOL,
        vault=VAULT,
        controller=CONTROLLER,
        governance=GOVERNANCE,
    )
    strategy = CorridorStrategy(ledger, pool, vault, controller, identities)
    return World(ledger=ledger, pool=pool, vault=vault, controller=controller, strategy=strategy)


@pytest.fixture
def world() -> World:
    """Пустой мир: коридор [100, 200], spot 150, collateral_per_unit 10."""
    return make_world()


@pytest.fixture
def deposited_world(world: World) -> World:
    """
    Мир после первого deposit 2e9 collateral.

    Пул: collateral 1e9 (25e18), long 1e8 (12.5e18), short 1e8 (12.5e18).
    """
    world.fund_strategy(2_000_000_000)
    world.strategy.deposit(CONTROLLER)
    return world
