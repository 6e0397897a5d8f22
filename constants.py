"""
Named constants available to the expression search.

Builtin constants are computed by mpmath at the working precision; user
constants come from a small text file, one per line:

    pi                      # a builtin, by name
    g = 9.80665 m/s^2       # a user constant with a unit
    electron_mass = 9.1093837015e-31 kg

RIGOR PRINCIPLE: before a search, builtins are checked against known
identities. If even one fails, every result would be meaningless.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Optional

from dimreal import DimensionedValue, format_magnitude
from errors import DuplicateConstantName, UnknownConstant


@dataclass(frozen=True)
class NamedConstant:
    """A constant leaf available to the generator."""
    name: str
    value: DimensionedValue
    is_builtin: bool = False


# Builtin names, in the order they are offered when no file is given
BUILTIN_NAMES = ["pi", "e", "euler", "ln2", "catalan", "phi", "fine-structure"]


class ConstantsComputer:
    """Computes the builtin constants in a given mpmath context."""

    def __init__(self, ctx):
        self.ctx = ctx
        self._cache: Dict[str, NamedConstant] = {}

    def builtin(self, name: str) -> NamedConstant:
        if name not in self._cache:
            value = DimensionedValue(self._compute_constant(name))
            self._cache[name] = NamedConstant(name, value, is_builtin=True)
        return self._cache[name]

    def builtins(self, names: Optional[List[str]] = None) -> List[NamedConstant]:
        return [self.builtin(name) for name in (names or BUILTIN_NAMES)]

    def _compute_constant(self, name: str):
        """
        Compute the constant with mpmath.

        NOTE: mpmath computes these with algorithms of proven convergence,
        at the precision of self.ctx.
        """
        ctx = self.ctx
        CONSTANTS = {
            "pi":             lambda: +ctx.pi,
            "e":              lambda: +ctx.e,
            "euler":          lambda: +ctx.euler,
            "ln2":            lambda: +ctx.ln2,
            "catalan":        lambda: +ctx.catalan,
            "phi":            lambda: (1 + ctx.sqrt(5)) / 2,
            # CODATA 2018, known to 11 significant digits only
            "fine-structure": lambda: ctx.mpf("0.0072973525693"),
        }

        if name not in CONSTANTS:
            raise UnknownConstant(f"Unknown constant: {name}")

        return CONSTANTS[name]()

    def verify_known_relations(self, log: Callable[[str], None] = print) -> bool:
        """
        CRITICAL SELF-TEST: check builtins against independent formulas.

        Each identity is evaluated through a different mpmath routine than
        the one producing the constant.
        """
        ctx = self.ctx
        tolerance = ctx.mpf(10) ** (-(ctx.dps - 5))
        phi = self.builtin("phi").value.magnitude

        checks = [
            ("φ² - φ - 1", phi ** 2 - phi - 1),
            ("sin(π)", ctx.sin(self.builtin("pi").value.magnitude)),
            ("e - exp(1)", self.builtin("e").value.magnitude - ctx.exp(1)),
            ("exp(ln2) - 2", ctx.exp(self.builtin("ln2").value.magnitude) - 2),
            ("γ + ψ(1)", self.builtin("euler").value.magnitude + ctx.digamma(1)),
            ("G - (ζ(2,¼) - ζ(2,¾))/16",
             self.builtin("catalan").value.magnitude
             - (ctx.zeta(2, ctx.mpf(1) / 4) - ctx.zeta(2, ctx.mpf(3) / 4)) / 16),
        ]

        tests_passed = True
        for label, residual in checks:
            ok = abs(residual) < tolerance
            log(f"  {label} = {format_magnitude(abs(residual), 5)}  {'✓' if ok else '✗ ERROR!'}")
            tests_passed &= ok

        return tests_passed


def validate_constants(constants: List[NamedConstant]):
    """Raise DuplicateConstantName when two constants share a name."""
    seen = set()
    for constant in constants:
        if constant.name in seen:
            raise DuplicateConstantName(f"constant \"{constant.name}\" is defined more than once")
        seen.add(constant.name)


def load_constants_file(
    path: Path,
    ctx,
    log: Callable[[str], None] = print,
) -> List[NamedConstant]:
    """
    Read constants from `path`.

    A missing file yields every builtin. Malformed lines are reported and
    skipped; redefinitions abort with DuplicateConstantName.
    """
    computer = ConstantsComputer(ctx)
    path = Path(path)
    if not path.exists():
        log(f"  {path} not found, using builtin constants: {', '.join(BUILTIN_NAMES)}")
        return computer.builtins()

    constants: List[NamedConstant] = []
    for lineno, raw in enumerate(path.read_text().splitlines(), start=1):
        line = raw.split("#", 1)[0].strip()
        if not line:
            continue
        opts = [token.strip() for token in line.split("=")]

        if len(opts) == 1:
            name = opts[0]
            if name not in BUILTIN_NAMES:
                log(f"warning: {path} line {lineno}: expecting a builtin constant name, "
                    f"but \"{name}\" is not one of {BUILTIN_NAMES}. "
                    f"Specifying a value looks like \"{name} = 1.0 s\" ... skipping")
                continue
            _check_redefinition(constants, name, path, lineno)
            constants.append(computer.builtin(name))
            continue

        if len(opts) > 2:
            log(f"warning: {path} line {lineno}: {len(opts)} tokens ... using first two")

        name, value = opts[0], opts[1]
        if not name or not value:
            log(f"warning: {path} line {lineno}: empty name or value ... skipping")
            continue
        if name in BUILTIN_NAMES:
            raise DuplicateConstantName(
                f"{path} line {lineno}: redefines builtin constant {name} = {value}"
            )
        _check_redefinition(constants, name, path, lineno)
        constants.append(NamedConstant(name, DimensionedValue.parse(value, ctx)))

    return constants


def _check_redefinition(constants: List[NamedConstant], name: str, path: Path, lineno: int):
    for index, existing in enumerate(constants):
        if existing.name == name:
            raise DuplicateConstantName(
                f"{path} line {lineno}: {name} redefined over entry #{index + 1} "
                f"{existing.name} = {existing.value.format()}"
            )
