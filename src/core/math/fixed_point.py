"""
Fixed-Point Arithmetic — целочисленная арифметика с фиксированной точкой

Все величины стратегии (балансы, веса, цены) — Python int.
ONE = 10**18 соответствует "одной полной единице" веса/цены.

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Деление всегда округляет вниз (truncating division)
2. Накопленная ошибка округления систематически в пользу пула/протокола,
   а не депозитора. Это смещение сохраняется намеренно.
3. Деление на ноль никогда не маскируется: ValueError
4. Отрицательные промежуточные значения (underflow) — ValueError
"""

from typing import Final

# =============================================================================
# КОНСТАНТЫ
# =============================================================================

# Одна полная единица fixed-point (вес, цена, доля)
ONE: Final[int] = 10**18

# Половина единицы (середина коридора в терминах v)
HALF: Final[int] = ONE // 2


# =============================================================================
# БАЗОВЫЕ ОПЕРАЦИИ
# =============================================================================


def bmul(a: int, b: int) -> int:
    """
    Умножение двух fixed-point величин с округлением вниз.

    Examples:
        >>> bmul(2 * ONE, 3 * ONE) == 6 * ONE
        True
        >>> bmul(1, 1)
        0
    """
    return (a * b) // ONE


def bdiv(a: int, b: int) -> int:
    """
    Деление fixed-point величин с округлением вниз.

    Raises:
        ValueError: если b == 0

    Examples:
        >>> bdiv(ONE, 3 * ONE)
        333333333333333333
    """
    if b == 0:
        raise ValueError("Division by zero")
    return (a * ONE) // b


def mul_div(a: int, b: int, denominator: int) -> int:
    """a * b / denominator с округлением вниз, без промежуточной потери точности."""
    if denominator == 0:
        raise ValueError("Division by zero")
    return (a * b) // denominator


def bsub(a: int, b: int) -> int:
    """Вычитание без underflow."""
    if b > a:
        raise ValueError(f"Subtraction underflow: {a} - {b}")
    return a - b


def bsub_sign(a: int, b: int) -> tuple[int, bool]:
    """
    Вычитание с отдельным знаком.

    Returns:
        (abs(a - b), negative)
    """
    if a >= b:
        return a - b, False
    return b - a, True


def to_fixed(value: int) -> int:
    """Перевод целого числа единиц в fixed-point (value * ONE)."""
    return value * ONE


# =============================================================================
# ВАЛИДАЦИЯ
# =============================================================================


def validate_non_negative_int(value: int, name: str = "value") -> None:
    """
    Проверка, что значение — неотрицательный int (bool не допускается).

    Raises:
        ValueError: если value не int или отрицательное
    """
    if not isinstance(value, int) or isinstance(value, bool):
        raise ValueError(f"{name} must be an int, got {type(value).__name__}")
    if value < 0:
        raise ValueError(f"{name} must be non-negative, got {value}")


def validate_positive_int(value: int, name: str = "value") -> None:
    """
    Проверка, что значение — строго положительный int.

    Raises:
        ValueError: если value не int или <= 0
    """
    validate_non_negative_int(value, name)
    if value == 0:
        raise ValueError(f"{name} must be positive, got {value}")
