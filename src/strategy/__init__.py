"""Strategy — публичная поверхность стратегии corridor pool."""

from .corridor_strategy import CorridorStrategy

__all__ = ["CorridorStrategy"]
