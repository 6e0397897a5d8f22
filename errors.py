"""
Error categories of the expression search.

Every error carries the process exit code reported by the command line
front end. Arithmetic errors are raised by DimensionedValue operations;
configuration errors are raised once, before generation starts.
"""


class ExactonatorError(Exception):
    """Base class for every reportable failure."""
    exit_code = 1


# === ARITHMETIC ===

class DimensionMismatch(ExactonatorError, ArithmeticError):
    """Addition or subtraction across incompatible dimensions."""
    exit_code = 1


class NonDimensionlessExponent(ExactonatorError, ArithmeticError):
    """Exponent of a power carries a physical dimension."""
    exit_code = 2


class FractionalExponentOnDimensionedBase(ExactonatorError, ArithmeticError):
    """Non-integer exponent applied to a dimensioned base."""
    exit_code = 3


class FractionalExponentOnNegativeBase(ExactonatorError, ArithmeticError):
    """Non-integer exponent applied to a negative base (no real result)."""
    exit_code = 4


# === CONFIGURATION ===

class SaveDirError(ExactonatorError, OSError):
    """The run store directory cannot be created."""
    exit_code = 5


class DuplicateConstantName(ExactonatorError, ValueError):
    """Two constants share a name, or a builtin is redefined."""
    exit_code = 6


class InvalidBoundsValue(ExactonatorError, ValueError):
    """A size, count or precision bound is out of range."""
    exit_code = 9


class UnitParseError(ExactonatorError, ValueError):
    """Numeral or unit text cannot be parsed."""
    exit_code = 10


class UnknownConstant(ExactonatorError, KeyError):
    """A builtin constant name that does not exist."""
    exit_code = 11


class SelfTestFailed(ExactonatorError, RuntimeError):
    """A builtin constant disagrees with its independent formula."""
    exit_code = 8
