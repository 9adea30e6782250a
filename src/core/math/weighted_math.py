"""
Weighted Math — формулы weighted-пула (Balancer-style)

Используются in-memory пулом и view-хелперами стратегии:
- calc_spot_price: цена tokenOut в единицах tokenIn
- calc_out_given_in / calc_in_given_out: котировки свопа
- bpow: fixed-point степень с дробным показателем

ФОРМУЛЫ:
    spot = (b_in / w_in) / (b_out / w_out) * 1 / (1 - fee)
    out  = b_out * (1 - (b_in / (b_in + a_in * (1 - fee))) ^ (w_in / w_out))
    in   = b_in * ((b_out / (b_out - a_out)) ^ (w_out / w_in) - 1) / (1 - fee)

Все операции на int, деление округляет вниз (см. fixed_point).
"""

from typing import Final

from src.core.math.fixed_point import ONE, bdiv, bmul, bsub, bsub_sign

# =============================================================================
# КОНСТАНТЫ bpow
# =============================================================================

# Допустимый диапазон основания для bpow_approx (ряд сходится только здесь)
MIN_BPOW_BASE: Final[int] = 1
MAX_BPOW_BASE: Final[int] = 2 * ONE - 1

# Точность остановки ряда
BPOW_PRECISION: Final[int] = ONE // 10**10


# =============================================================================
# СТЕПЕНИ
# =============================================================================


def bpowi(a: int, n: int) -> int:
    """Целая степень fixed-point основания (square-and-multiply)."""
    z = a if n % 2 != 0 else ONE
    n //= 2
    while n != 0:
        a = bmul(a, a)
        if n % 2 != 0:
            z = bmul(z, a)
        n //= 2
    return z


def bpow_approx(base: int, exp: int, precision: int = BPOW_PRECISION) -> int:
    """
    Приближение base^exp биномиальным рядом для exp < ONE.

    (1 + x)^a = 1 + a*x + a(a-1)/2! * x^2 + ...
    """
    a = exp
    x, xneg = bsub_sign(base, ONE)
    term = ONE
    total = ONE
    negative = False

    i = 1
    while term >= precision:
        big_k = i * ONE
        c, cneg = bsub_sign(a, big_k - ONE)
        term = bmul(term, bmul(c, x))
        term = bdiv(term, big_k)
        if term == 0:
            break

        if xneg:
            negative = not negative
        if cneg:
            negative = not negative
        if negative:
            total = total - term
        else:
            total = total + term
        i += 1

    return total


def bpow(base: int, exp: int) -> int:
    """
    Fixed-point степень base^exp.

    Raises:
        ValueError: если base вне [MIN_BPOW_BASE, MAX_BPOW_BASE]
    """
    if base < MIN_BPOW_BASE:
        raise ValueError(f"bpow base too low: {base}")
    if base > MAX_BPOW_BASE:
        raise ValueError(f"bpow base too high: {base}")

    whole = (exp // ONE) * ONE
    remain = exp - whole

    whole_pow = bpowi(base, whole // ONE)
    if remain == 0:
        return whole_pow

    partial = bpow_approx(base, remain)
    return bmul(whole_pow, partial)


# =============================================================================
# ЦЕНЫ И КОТИРОВКИ
# =============================================================================


def calc_spot_price(
    balance_in: int,
    weight_in: int,
    balance_out: int,
    weight_out: int,
    swap_fee: int,
) -> int:
    """
    Spot price: сколько tokenIn стоит одна единица tokenOut (fixed-point).

    swap_fee = 0 даёт fee-free цену (getSpotPriceSansFee).
    """
    numer = bdiv(balance_in, weight_in)
    denom = bdiv(balance_out, weight_out)
    ratio = bdiv(numer, denom)
    scale = bdiv(ONE, bsub(ONE, swap_fee))
    return bmul(ratio, scale)


def calc_out_given_in(
    balance_in: int,
    weight_in: int,
    balance_out: int,
    weight_out: int,
    amount_in: int,
    swap_fee: int,
) -> int:
    """Количество tokenOut за точный amount_in tokenIn."""
    weight_ratio = bdiv(weight_in, weight_out)
    adjusted_in = bmul(amount_in, bsub(ONE, swap_fee))
    y = bdiv(balance_in, balance_in + adjusted_in)
    foo = bpow(y, weight_ratio)
    bar = bsub(ONE, foo)
    return bmul(balance_out, bar)


def calc_in_given_out(
    balance_in: int,
    weight_in: int,
    balance_out: int,
    weight_out: int,
    amount_out: int,
    swap_fee: int,
) -> int:
    """Количество tokenIn, необходимое для получения точного amount_out tokenOut."""
    weight_ratio = bdiv(weight_out, weight_in)
    diff = bsub(balance_out, amount_out)
    y = bdiv(balance_out, diff)
    foo = bpow(y, weight_ratio)
    foo = bsub(foo, ONE)
    amount_in = bmul(balance_in, foo)
    return bdiv(amount_in, bsub(ONE, swap_fee))
