"""
Search configuration.
All search parameters are centralized here.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from errors import InvalidBoundsValue
from precision_manager import PrecisionPlan, compute_precision_plan, make_context


@dataclass
class SearchConfig:
    """Expression search parameters."""

    # === PRECISION ===
    # Significant decimal digits of displayed values and errors.
    digits: int = 15
    # Extra digits carried through arithmetic to absorb rounding.
    guard_digits: int = 10

    # === SEARCH BOUNDS ===
    # Number of wrapping steps applied to a seed. Each step adds an operator
    # and a leaf, so emitted expressions have size <= 2 * max_expr_size + 1.
    # RULE: cost grows roughly as (#constants + max_int_constants)^max_expr_size.
    max_expr_size: int = 1
    # Integer literals 1..max_int_constants take part in the search.
    max_int_constants: int = 0

    # === OUTPUT ===
    top_k: int = 30
    simplify_output: bool = True
    # Skip candidates like (x * 1) whose root a simplifier rule would rewrite.
    prune_trivial: bool = False
    # Recompute the winners with sympy at double precision.
    verify: bool = False

    # === EXECUTION ===
    # Top-level seeds are explored by this many worker threads.
    thread_count: int = 1

    # === PATHS ===
    constants_file: Path = field(default_factory=lambda: Path("constants.conf"))
    # None disables the run store and the log file.
    save_dir: Optional[Path] = field(default_factory=lambda: Path("save"))
    reuse_saved: bool = True

    def __post_init__(self):
        self.validate()

    def validate(self):
        """Reject out-of-range bounds before any work starts."""
        if self.digits < 1:
            raise InvalidBoundsValue(f"digit count must be an integer > 0, got {self.digits}")
        if self.guard_digits < 0:
            raise InvalidBoundsValue(f"guard digit count must be >= 0, got {self.guard_digits}")
        if self.max_expr_size < 1:
            raise InvalidBoundsValue(f"max expression size must be an integer > 0, got {self.max_expr_size}")
        if self.max_int_constants < 0:
            raise InvalidBoundsValue(
                f"integer constant bound must be an integer >= 0, got {self.max_int_constants}"
            )
        if self.top_k < 1:
            raise InvalidBoundsValue(f"result count must be an integer > 0, got {self.top_k}")
        if self.thread_count < 1:
            raise InvalidBoundsValue(f"bad thread count, must be an integer > 0, got {self.thread_count}")

    def precision_plan(self) -> PrecisionPlan:
        return compute_precision_plan(self.digits, self.guard_digits)

    def make_context(self):
        """A fresh mpmath context at this configuration's working precision."""
        return make_context(self.precision_plan())
