"""
Search engine: from constants and a target to a ranked list of expressions.

PIPELINE FOR A TARGET:
1. Self-test the builtin constants (abort on failure)
2. Validate the constant set (no duplicate names)
3. Look up the run store: a completed run with the same seed string
   is returned as is (not when verifying)
4. Enumerate candidates (CandidateGenerator), collecting every result
   whose dimension matches the target
5. Deduplicate by error and rank (selector)
6. Simplify the winners for display, optionally validate them with sympy
7. Save the ranked results
"""

import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple

from config import SearchConfig
from constants import ConstantsComputer, NamedConstant, load_constants_file, validate_constants
from dimreal import DimensionedValue, format_magnitude
from errors import SelfTestFailed
from generator import CandidateGenerator
from run_store import RunStore, make_seed_string
from selector import ranked_output, select
from validator import ResultValidator, ValidationResult


@dataclass
class SearchReport:
    """Outcome of one search."""
    seed: str
    ranked: List[Tuple[str, str]]       # (expression, error text), best first
    n_results: int                      # results before deduplication
    elapsed_seconds: float
    from_cache: bool = False
    validations: List[ValidationResult] = field(default_factory=list)


class SearchEngine:
    """Runs expression searches for one configuration."""

    def __init__(self, config: SearchConfig, constants: Optional[List[NamedConstant]] = None, ctx=None):
        self.config = config
        self.constants = list(constants or [])
        self.plan = config.precision_plan()
        self.ctx = ctx or config.make_context()

        self.store: Optional[RunStore] = None
        self.log_file: Optional[Path] = None
        if config.save_dir is not None:
            self.store = RunStore(config.save_dir)
            log_dir = Path(config.save_dir) / "logs"
            log_dir.mkdir(parents=True, exist_ok=True)
            self.log_file = log_dir / f"search_{time.strftime('%Y%m%d_%H%M%S')}.log"

    def log(self, msg: str):
        """Log to file and console."""
        timestamp = time.strftime("%H:%M:%S")
        line = f"[{timestamp}] {msg}"
        print(line, flush=True)
        if self.log_file is not None:
            with open(self.log_file, "a") as f:
                f.write(line + "\n")

    def load_constants(self, path: Optional[Path] = None) -> List[NamedConstant]:
        """Read the constants file (config.constants_file by default), logging its warnings."""
        path = path if path is not None else self.config.constants_file
        self.log(f"[CONSTANTS] Loading {path}")
        self.constants = load_constants_file(path, self.ctx, log=self.log)
        return self.constants

    def run(self, target: DimensionedValue) -> SearchReport:
        """Main execution of a search."""
        t_start = time.time()

        # === SELF-TEST ===
        self.log("[SELF-TEST] Verifying builtin constants...")
        if not ConstantsComputer(self.ctx).verify_known_relations(log=self.log):
            raise SelfTestFailed("builtin constant self-test failed, results would be invalid")

        validate_constants(self.constants)

        seed = make_seed_string(self.constants, target, self.config)
        self.log(f"[PLANNING] seed: {seed}")
        self.log(f"  {self.plan.working_digits} working digits ({self.plan.working_bits} bits), "
                 f"{len(self.constants)} constants, {self.config.thread_count} thread(s)")

        # === RUN STORE ===
        # saved runs hold display strings only, so verification needs a fresh search
        if self.store is not None and self.config.reuse_saved and not self.config.verify:
            cached = self.store.load_results(seed)
            if cached is not None:
                self.log(f"  Reusing saved run {self.store.key(seed)}")
                return SearchReport(seed, cached, len(cached), time.time() - t_start, from_cache=True)
        if self.store is not None:
            self.store.mark_started(seed)

        # === ENUMERATION ===
        self.log(f"[SEARCH] target {target.format(self.config.digits)}, "
                 f"max expr size {self.config.max_expr_size}, "
                 f"integers up to {self.config.max_int_constants}")
        generator = CandidateGenerator(self.constants, target, self.config, self.ctx)
        results = generator.run().results()
        self.log(f"  {len(results)} dimensionally matching expressions")

        # === SELECTION ===
        selected = select(results, self.config.top_k)
        ranked = [
            (display, format_magnitude(error, self.config.digits))
            for display, error in ranked_output(selected, self.config.digits, self.config.simplify_output)
        ]

        validations = []
        if self.config.verify:
            self.log(f"[VERIFY] Recomputing {len(selected)} results at {self.plan.verification_digits} digits...")
            builtin_names = [c.name for c in self.constants if c.is_builtin]
            validations = ResultValidator(self.plan, builtin_names).validate_all(selected, target)
            for v in validations:
                if not v.agrees:
                    self.log(f"  ⚠ {v.display}: {v.notes}")
            self.log(f"  {sum(v.agrees for v in validations)}/{len(validations)} results confirmed")

        elapsed = time.time() - t_start
        if self.store is not None:
            self.store.mark_completed(seed, ranked, elapsed)
            self.log(f"  → Saved to {self.store.path_for(seed)}")

        self.log(f"  Search completed in {elapsed:.1f}s")
        return SearchReport(seed, ranked, len(results), elapsed, validations=validations)
