"""
RebindScheduler — упорядоченное применение новых весов к живому пулу

Пул проверяет верхнюю границу суммы весов на границе КАЖДОГО вызова.
Поэтому шаги сортируются по delta = new - current по возрастанию: токены,
чей вес уменьшается, обновляются раньше тех, чей вес растёт, и промежуточная
сумма не превышает границу.

Сортировка — сеть из трёх compare-and-swap шагов (0,1), (1,2), (0,1).
Swap только при строгом ">", поэтому равные delta сохраняют канонический
порядок short, long, collateral.

Retry нет: отказ пула прерывает весь вызов.
"""

from dataclasses import dataclass
from typing import Any, List

from loguru import logger

from src.core.domain.pool_state import TokenTriple

# Сеть сортировки для трёх элементов
SORTING_NETWORK: tuple[tuple[int, int], ...] = ((0, 1), (1, 2), (0, 1))


@dataclass(frozen=True)
class RebindStep:
    """Один вызов rebind(token, balance, weight)."""

    delta: int
    balance: int
    weight: int
    token: str


def sort_steps(steps: List[RebindStep]) -> List[RebindStep]:
    """Стабильная сортировка трёх шагов по delta (sorting network)."""
    if len(steps) != 3:
        raise ValueError(f"Expected exactly 3 rebind steps, got {len(steps)}")
    ordered = list(steps)
    for i, j in SORTING_NETWORK:
        if ordered[i].delta > ordered[j].delta:
            ordered[i], ordered[j] = ordered[j], ordered[i]
    return ordered


class RebindScheduler:
    """Issue rebind/bind вызовов к пулу от имени стратегии."""

    def __init__(self, sender: str):
        self.sender = sender

    def plan(
        self,
        current_weights: TokenTriple,
        new_weights: TokenTriple,
        balances: TokenTriple,
        tokens: TokenTriple,
    ) -> List[RebindStep]:
        """Порядок применения без обращения к пулу."""
        steps = [
            RebindStep(delta=new - current, balance=balance, weight=new, token=token)
            for current, new, balance, token in zip(current_weights, new_weights, balances, tokens)
        ]
        return sort_steps(steps)

    def apply(
        self,
        pool: Any,
        current_weights: TokenTriple,
        new_weights: TokenTriple,
        balances: TokenTriple,
        tokens: TokenTriple,
    ) -> List[RebindStep]:
        """Rebind всех трёх токенов в порядке возрастания delta."""
        steps = self.plan(current_weights, new_weights, balances, tokens)
        for step in steps:
            logger.debug(
                "RebindScheduler: rebind {} balance={} weight={} delta={}",
                step.token,
                step.balance,
                step.weight,
                step.delta,
            )
            pool.rebind(step.token, step.balance, step.weight, sender=self.sender)
        logger.info(
            "RebindScheduler: rebound {} tokens, order={}",
            len(steps),
            [step.token for step in steps],
        )
        return steps

    def bind_all(
        self,
        pool: Any,
        balances: TokenTriple,
        weights: TokenTriple,
        tokens: TokenTriple,
    ) -> None:
        """Первичная привязка в каноническом порядке short, long, collateral."""
        for token, balance, weight in zip(tokens, balances, weights):
            logger.debug("RebindScheduler: bind {} balance={} weight={}", token, balance, weight)
            pool.bind(token, balance, weight, sender=self.sender)
        logger.info("RebindScheduler: bound {} tokens", len(tokens))
