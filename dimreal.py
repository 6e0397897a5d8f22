"""
Arbitrary-precision real numbers carrying a physical dimension.

The magnitude is an mpmath mpf (its precision is the one of the context
that created it) normalised to SI base units; the dimension is a
Dimension exponent vector. Operators check dimensional consistency:

  a + b, a - b   → dimensions must be equal
  a * b, a / b   → dimensions multiply / divide
  a ** b         → b dimensionless; non-integer b only on a dimensionless base
"""

import re
import mpmath
from dataclasses import dataclass, field

from dimensions import Dimension, DIMENSIONLESS, parse_unit
from errors import (
    DimensionMismatch,
    NonDimensionlessExponent,
    FractionalExponentOnDimensionedBase,
    FractionalExponentOnNegativeBase,
    UnitParseError,
)


# Leading decimal numeral; whatever follows is the unit text
_NUMERAL_RE = re.compile(
    r"^\s*([-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?)\s*(.*?)\s*$"
)


@dataclass(frozen=True)
class DimensionedValue:
    """A magnitude together with its physical dimension."""

    magnitude: mpmath.mpf
    dimension: Dimension = field(default=DIMENSIONLESS)

    # === ARITHMETIC ===

    def add(self, other: "DimensionedValue") -> "DimensionedValue":
        if self.dimension != other.dimension:
            raise DimensionMismatch(
                f"attempted to add with different dimension: {self.format()} + {other.format()}"
            )
        return DimensionedValue(self.magnitude + other.magnitude, self.dimension)

    def sub(self, other: "DimensionedValue") -> "DimensionedValue":
        if self.dimension != other.dimension:
            raise DimensionMismatch(
                f"attempted to subtract with different dimension: {self.format()} - {other.format()}"
            )
        return DimensionedValue(self.magnitude - other.magnitude, self.dimension)

    def mul(self, other: "DimensionedValue") -> "DimensionedValue":
        return DimensionedValue(self.magnitude * other.magnitude, self.dimension * other.dimension)

    def div(self, other: "DimensionedValue") -> "DimensionedValue":
        return DimensionedValue(self.magnitude / other.magnitude, self.dimension / other.dimension)

    def neg(self) -> "DimensionedValue":
        return DimensionedValue(-self.magnitude, self.dimension)

    def pow(self, exponent: "DimensionedValue") -> "DimensionedValue":
        """
        Raise to a dimensionless power.

        A dimensioned base only accepts an integer exponent, and its
        dimension is raised to that integer. A negative base only accepts
        an integer exponent (no real result otherwise).
        """
        if not exponent.dimension.is_dimensionless():
            raise NonDimensionlessExponent(
                f"attempted to exponentiate with non-dimensionless exponent: "
                f"{self.format()} ^ {exponent.format()}"
            )
        integral = mpmath.isint(exponent.magnitude)
        if not integral and not self.dimension.is_dimensionless():
            raise FractionalExponentOnDimensionedBase(
                f"attempted to exponentiate with non-integer exponent and non-dimensionless base: "
                f"{self.format()} ^ {exponent.format()}"
            )
        if self.dimension.is_dimensionless():
            if self.magnitude < 0 and not integral:
                raise FractionalExponentOnNegativeBase(
                    f"attempted to exponentiate with a non-integer exponent and a negative base: "
                    f"{self.format()} ^ {exponent.format()}"
                )
            return DimensionedValue(self.magnitude ** exponent.magnitude, DIMENSIONLESS)
        return DimensionedValue(
            self.magnitude ** exponent.magnitude,
            self.dimension ** int(exponent.magnitude),
        )

    __add__ = add
    __sub__ = sub
    __mul__ = mul
    __truediv__ = div
    __neg__ = neg
    __pow__ = pow

    def equals(self, other: "DimensionedValue") -> bool:
        return self == other

    def is_integer(self) -> bool:
        return bool(mpmath.isint(self.magnitude))

    def same_dimension(self, other: "DimensionedValue") -> bool:
        return self.dimension == other.dimension

    # === TEXT ===

    def format(self, precision: int = 15) -> str:
        """Magnitude with `precision` significant digits, plus the unit suffix."""
        text = format_magnitude(self.magnitude, precision)
        suffix = self.dimension.unit_suffix()
        return f"{text} {suffix}" if suffix else text

    def __str__(self) -> str:
        return self.format()

    @classmethod
    def parse(cls, text: str, ctx=None) -> "DimensionedValue":
        """
        Parse "<numeral> [unit]", e.g. "9.8 m/s^2" or "6.2832".

        The numeral is read at the precision of `ctx` (an mpmath context,
        mpmath.mp when omitted); the unit defaults to dimensionless.
        """
        ctx = ctx or mpmath.mp
        match = _NUMERAL_RE.match(text)
        if match is None:
            raise UnitParseError(f"expected a numeral optionally followed by a unit, got '{text}'")
        numeral, unit_text = match.groups()

        scale, dimension = parse_unit(unit_text)
        magnitude = ctx.mpf(numeral)
        if scale != 1:
            # repr keeps the shortest decimal form of a float scale
            magnitude *= ctx.mpf(repr(scale)) if isinstance(scale, float) else ctx.mpf(scale)
        return cls(magnitude, dimension)


def format_magnitude(x, precision: int) -> str:
    """nstr without the trailing '.0' of integral values."""
    text = mpmath.nstr(x, precision)
    if text.endswith(".0"):
        text = text[:-2]
    return text


def cost(value: DimensionedValue, target: DimensionedValue):
    """Absolute magnitude difference; only meaningful for equal dimensions."""
    return abs(value.magnitude - target.magnitude)
