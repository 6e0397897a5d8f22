"""
Physical dimensions as integer exponent vectors over the SI base quantities.

Unit text ("m/s^2", "km", "eV") is resolved with pint: the unit is reduced
to SI base units, which yields a scale factor and the exponent vector.
Magnitudes are kept normalised to base units, so two values that differ
only in unit scale are dimensionally equal.
"""

from dataclasses import dataclass
from functools import lru_cache
from typing import Tuple

import pint

from errors import UnitParseError


_BASE_FIELDS: Tuple[str, ...] = (
    "mass", "length", "time", "current",
    "temperature", "amount", "luminosity",
)

# SI base unit symbols, in _BASE_FIELDS order
_BASE_SYMBOLS: Tuple[str, ...] = ("kg", "m", "s", "A", "K", "mol", "cd")

# pint dimensionality keys → field names
_PINT_DIMENSIONS = {
    "[mass]": "mass",
    "[length]": "length",
    "[time]": "time",
    "[current]": "current",
    "[temperature]": "temperature",
    "[substance]": "amount",
    "[luminosity]": "luminosity",
}


@dataclass(frozen=True)
class Dimension:
    """Exponents of (M, L, T, I, Θ, N, J)."""

    mass: int = 0
    length: int = 0
    time: int = 0
    current: int = 0
    temperature: int = 0
    amount: int = 0
    luminosity: int = 0

    def as_tuple(self) -> Tuple[int, ...]:
        return tuple(getattr(self, name) for name in _BASE_FIELDS)

    def __mul__(self, other: "Dimension") -> "Dimension":
        if not isinstance(other, Dimension):
            return NotImplemented
        return Dimension(*[a + b for a, b in zip(self.as_tuple(), other.as_tuple())])

    def __truediv__(self, other: "Dimension") -> "Dimension":
        if not isinstance(other, Dimension):
            return NotImplemented
        return Dimension(*[a - b for a, b in zip(self.as_tuple(), other.as_tuple())])

    def __pow__(self, exponent: int) -> "Dimension":
        if not isinstance(exponent, int):
            raise TypeError(f"Dimension exponent must be an integer, got {type(exponent)}")
        return Dimension(*[value * exponent for value in self.as_tuple()])

    def is_dimensionless(self) -> bool:
        return not any(self.as_tuple())

    def unit_suffix(self) -> str:
        """
        SI base-unit text for this dimension, e.g. "kg*m/s^2".
        Empty for dimensionless. The text parses back with parse_unit().
        """
        numerator = []
        denominator = []
        for symbol, power in zip(_BASE_SYMBOLS, self.as_tuple()):
            if power == 0:
                continue
            part = symbol if abs(power) == 1 else f"{symbol}^{abs(power)}"
            (numerator if power > 0 else denominator).append(part)

        if not numerator and not denominator:
            return ""
        text = "*".join(numerator) if numerator else "1"
        for part in denominator:
            text += "/" + part
        return text

    def __str__(self) -> str:
        return self.unit_suffix() or "dimensionless"


DIMENSIONLESS = Dimension()


@lru_cache(maxsize=None)
def unit_registry() -> pint.UnitRegistry:
    """Shared pint registry (building one is slow)."""
    return pint.UnitRegistry()


def parse_unit(text: str):
    """
    Resolve unit text to (scale, Dimension).

    scale is the factor converting one of the given unit to SI base
    units, as pint reports it (int or float).
    """
    text = text.strip()
    if not text:
        return 1, DIMENSIONLESS

    ureg = unit_registry()
    try:
        unit = ureg.parse_units(text)
        quantity = ureg.Quantity(1, unit).to_base_units()
        origin = ureg.Quantity(0, unit).to_base_units().magnitude
    except (pint.errors.PintError, AttributeError, SyntaxError, TypeError, ValueError) as exc:
        raise UnitParseError(f"cannot parse unit '{text}': {exc}") from exc
    # offset units (degC, degF) are not a scale of their base unit
    if origin != 0:
        raise UnitParseError(
            f"offset unit '{text}' is not supported, give the value in K or as a delta unit"
        )

    exponents = {}
    for key, power in quantity.dimensionality.items():
        if key not in _PINT_DIMENSIONS:
            raise UnitParseError(f"unit '{text}' has unsupported base dimension {key}")
        if power != int(power):
            raise UnitParseError(f"unit '{text}' has non-integer exponent {power} on {key}")
        exponents[_PINT_DIMENSIONS[key]] = int(power)

    return quantity.magnitude, Dimension(**exponents)
