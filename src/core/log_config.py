"""
Logging setup (loguru)

Модули пишут в общий ``loguru.logger``; setup_logging заменяет sink по
умолчанию одним stderr sink с заданным уровнем.
"""

import sys
from typing import Literal

from loguru import logger

LogLevel = Literal["TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"]

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
)


def setup_logging(level: LogLevel = "INFO", json_logs: bool = False) -> int:
    """
    Переконфигурация loguru.

    Args:
        level: минимальный уровень
        json_logs: JSON-сериализация записей вместо форматированного текста

    Returns:
        id добавленного sink
    """
    logger.remove()
    if json_logs:
        return logger.add(sys.stderr, level=level, serialize=True)
    return logger.add(sys.stderr, level=level, format=LOG_FORMAT)
