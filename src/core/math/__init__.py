"""
Core math modules

Целочисленная fixed-point арифметика и формулы weighted-пула.
"""

# Fixed-point
from src.core.math.fixed_point import (
    HALF,
    ONE,
    bdiv,
    bmul,
    bsub,
    bsub_sign,
    mul_div,
    to_fixed,
    validate_non_negative_int,
    validate_positive_int,
)

# Weighted pool math
from src.core.math.weighted_math import (
    BPOW_PRECISION,
    MAX_BPOW_BASE,
    MIN_BPOW_BASE,
    bpow,
    bpow_approx,
    bpowi,
    calc_in_given_out,
    calc_out_given_in,
    calc_spot_price,
)

__all__ = [
    # Fixed-point: Constants
    "ONE",
    "HALF",
    # Fixed-point: Operations
    "bmul",
    "bdiv",
    "bsub",
    "bsub_sign",
    "mul_div",
    "to_fixed",
    # Fixed-point: Validation
    "validate_non_negative_int",
    "validate_positive_int",
    # Weighted math: Constants
    "BPOW_PRECISION",
    "MIN_BPOW_BASE",
    "MAX_BPOW_BASE",
    # Weighted math: Functions
    "bpow",
    "bpow_approx",
    "bpowi",
    "calc_spot_price",
    "calc_out_given_in",
    "calc_in_given_out",
]
