"""
INDEPENDENT validation of ranked results.

PRINCIPLE: validation must use a computation path completely different
from the search. Winning expressions are rebuilt as sympy expressions
(builtin constants as exact sympy constants, everything else as
high-precision Floats), evaluated with evalf at the verification
precision, and the error against the target is recomputed.

A result "agrees" when both errors match to the displayed precision.
"""

from dataclasses import dataclass
from typing import List, Optional

import mpmath
import sympy

from dimreal import DimensionedValue, format_magnitude
from expressions import Expr, ExprKind
from precision_manager import PrecisionPlan
from selector import SearchResult


@dataclass
class ValidationResult:
    """Outcome of the validation of one result."""
    display: str
    error_working: object                   # mpf, from the search
    error_verification: Optional[object]    # sympy Float, None if not computable
    agrees: bool
    notes: str


# Builtin constants with an exact sympy counterpart
_SYMPY_CONSTANTS = {
    "pi": sympy.pi,
    "e": sympy.E,
    "euler": sympy.EulerGamma,
    "ln2": sympy.log(2),
    "catalan": sympy.Catalan,
    "phi": sympy.GoldenRatio,
}

_SYMPY_OPERATIONS = {
    ExprKind.ADD: lambda a, b: a + b,
    ExprKind.SUB: lambda a, b: a - b,
    ExprKind.MUL: lambda a, b: a * b,
    ExprKind.DIV: lambda a, b: a / b,
    ExprKind.POW: lambda a, b: sympy.Pow(a, b),
}


def magnitude_to_sympy(value: DimensionedValue, dps: int):
    """Integral magnitudes become exact Integers, others Floats at dps digits."""
    if value.is_integer():
        return sympy.Integer(int(value.magnitude))
    return sympy.Float(mpmath.nstr(value.magnitude, dps), dps)


def to_sympy(expr: Expr, dps: int, builtin_names=None):
    """
    Rebuild an expression tree as a sympy expression.

    Constants listed in builtin_names (all known builtins by default) use
    their exact sympy form; user constants and literals use their value.
    """
    builtin_names = set(_SYMPY_CONSTANTS) if builtin_names is None else set(builtin_names)

    if expr.kind is ExprKind.CONSTANT:
        if expr.name in builtin_names and expr.name in _SYMPY_CONSTANTS:
            return _SYMPY_CONSTANTS[expr.name]
        return magnitude_to_sympy(expr.value, dps)
    if expr.kind is ExprKind.LITERAL:
        return magnitude_to_sympy(expr.value, dps)

    left, right = expr.children
    return _SYMPY_OPERATIONS[expr.kind](
        to_sympy(left, dps, builtin_names),
        to_sympy(right, dps, builtin_names),
    )


class ResultValidator:
    """Independent validator of search results."""

    def __init__(self, plan: PrecisionPlan, builtin_names=None):
        self.plan = plan
        self.builtin_names = builtin_names

    def validate(self, result: SearchResult, target: DimensionedValue) -> ValidationResult:
        dps = self.plan.verification_digits
        display = result.expression.display(self.plan.display_digits)
        notes = []

        try:
            value = to_sympy(result.expression, dps, self.builtin_names).evalf(dps)
        except (TypeError, ValueError, ZeroDivisionError) as exc:
            return ValidationResult(display, result.error, None, False, f"sympy rebuild failed: {exc}")

        if not value.is_real:
            return ValidationResult(display, result.error, None, False, f"non-real value {value}")

        target_sym = magnitude_to_sympy(target, dps)
        error_verification = abs(value - target_sym).evalf(dps)
        error_working = sympy.Float(mpmath.nstr(result.error, dps), dps)

        # errors agree to the displayed digits, relative to the target scale
        scale = max(sympy.Integer(1), abs(target_sym))
        tolerance = sympy.Float(10) ** (-self.plan.display_digits) * scale
        difference = abs(error_verification - error_working)
        agrees = bool(difference <= tolerance)

        notes.append(f"error@{self.plan.working_digits}: {format_magnitude(result.error, 5)}")
        notes.append(f"error@{dps} (sympy): {sympy.N(error_verification, 5)}")
        if not agrees:
            notes.append(f"MISMATCH: |Δ| = {sympy.N(difference, 5)} > {sympy.N(tolerance, 3)}")

        return ValidationResult(
            display=display,
            error_working=result.error,
            error_verification=error_verification,
            agrees=agrees,
            notes="\n".join(notes),
        )

    def validate_all(self, results: List[SearchResult], target: DimensionedValue) -> List[ValidationResult]:
        return [self.validate(result, target) for result in results]
