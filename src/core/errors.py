"""
Errors — таксономия ошибок стратегии

Все ошибки обнаруживаются precondition-проверками и прерывают весь вызов
целиком (атомарный rollback). Внутренних retry нет: восстановление — задача
вызывающей стороны.

Классы НЕ наследуют ValueError: pydantic-валидаторы пробрасывают их без
обёртки в ValidationError.
"""


class StrategyError(Exception):
    """Базовая ошибка стратегии."""
    pass


class AuthorizationError(StrategyError):
    """Вызывающий не является controller/governance или не прошёл gate-проверку."""
    pass


class StateError(StrategyError):
    """
    Операция вызвана в неверном состоянии lifecycle.

    Примеры: повторный handle_breach, deposit при settled vault,
    re-entrant вызов.
    """
    pass


class InvariantViolation(StrategyError):
    """Нарушение инварианта: sweep защищённого актива, zero address, spot вне коридора."""
    pass


class SlippageError(StrategyError):
    """Выход свопа ниже минимума, заданного вызывающим."""
    pass


class AmountError(StrategyError):
    """Нулевая или вырожденная сумма на входе."""
    pass


class ConfigurationError(StrategyError):
    """Фатальная ошибка конфигурации: нет successor strategy, нулевой range коридора."""
    pass
