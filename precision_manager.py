"""
Working precision management.

STRATEGY: the user asks for a number of significant decimal digits in the
displayed results. Arithmetic runs with a few guard digits on top of that,
and independent verification runs at twice the working precision.

Precision is carried by an explicit mpmath context rather than the global
mpmath.mp, so that independent searches never step on each other.
"""

import math
import mpmath
from dataclasses import dataclass

from errors import InvalidBoundsValue


# log2(10): bits per decimal digit
BITS_PER_DIGIT = math.log2(10)


@dataclass(frozen=True)
class PrecisionPlan:
    """Precision plan for a search."""
    display_digits: int         # significant digits shown to the user
    working_digits: int         # decimal digits carried through arithmetic
    working_bits: int           # binary precision of the mpmath context
    verification_digits: int    # digits for independent verification


def compute_precision_plan(digits: int, guard_digits: int = 10) -> PrecisionPlan:
    """
    Compute the precision plan for a requested number of decimal digits.

    Args:
        digits: significant decimal digits wanted in the output
        guard_digits: extra digits absorbing rounding in long expressions

    Returns:
        PrecisionPlan with all derived precisions
    """
    if digits < 1:
        raise InvalidBoundsValue(f"digit count must be an integer > 0, got {digits}")
    if guard_digits < 0:
        raise InvalidBoundsValue(f"guard digit count must be >= 0, got {guard_digits}")

    working_digits = digits + guard_digits
    working_bits = math.ceil(working_digits * BITS_PER_DIGIT)

    return PrecisionPlan(
        display_digits=digits,
        working_digits=working_digits,
        working_bits=working_bits,
        verification_digits=2 * working_digits,
    )


def make_context(plan: PrecisionPlan) -> mpmath.MPContext:
    """Fresh mpmath context running at the plan's working precision."""
    ctx = mpmath.MPContext()
    ctx.prec = plan.working_bits
    return ctx
