"""
On-disk record of search runs.

Each run is identified by its seed string (bounds, precision, output
settings, target and constants). The string is hashed to a file name; the
file holds the seed string and, once the run completes, its ranked
results. A later run with the same seed string can reuse them instead of
searching again.
"""

import hashlib
import json
import time
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from mpmath.libmp import repr_dps

from config import SearchConfig
from constants import NamedConstant
from dimreal import DimensionedValue
from errors import SaveDirError


def make_seed_string(
    constants: List[NamedConstant],
    target: DimensionedValue,
    config: SearchConfig,
) -> str:
    """
    Canonical description of a run.

    Every setting that changes the ranked output takes part. Values are
    written with enough digits to round-trip at the working precision, so
    two targets that only agree to the displayed digits get distinct seeds.
    Builtins appear by name; user constants as "%<index>=<value>".
    """
    exact_digits = repr_dps(config.precision_plan().working_bits)
    parts = []
    for index, constant in enumerate(constants):
        if constant.is_builtin:
            parts.append(constant.name)
        else:
            parts.append(f"%{index}={constant.value.format(exact_digits)}")
    return (
        f"max_expr={config.max_expr_size},max_int={config.max_int_constants},"
        f"digits={config.digits},guard={config.guard_digits},top={config.top_k},"
        f"simplify={int(config.simplify_output)},prune={int(config.prune_trivial)};"
        f"target={target.format(exact_digits)};"
        + ",".join(parts)
    )


class RunStore:
    """Stores seed strings and finished results under a directory."""

    def __init__(self, save_dir: Path):
        self.save_dir = Path(save_dir)
        try:
            self.save_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise SaveDirError(
                f"run save directory \"{self.save_dir}\" does not exist, failed to create: {exc}"
            ) from exc

    @staticmethod
    def key(seed: str) -> str:
        return hashlib.sha256(seed.encode("utf-8")).hexdigest()[:16]

    def path_for(self, seed: str) -> Path:
        return self.save_dir / f"{self.key(seed)}.json"

    def _load_state(self, seed: str) -> Optional[Dict[str, Any]]:
        path = self.path_for(seed)
        if not path.exists():
            return None
        try:
            state = json.loads(path.read_text())
        except (json.JSONDecodeError, OSError):
            return None
        # hash collision or foreign file
        if state.get("seed") != seed:
            return None
        return state

    def _save_state(self, seed: str, state: Dict[str, Any]):
        path = self.path_for(seed)
        tmp = path.with_suffix(".tmp")
        tmp.write_text(json.dumps(state, indent=2))
        tmp.replace(path)

    def mark_started(self, seed: str):
        """Record the seed string before the search begins."""
        self._save_state(seed, {
            "seed": seed,
            "started_at": time.strftime("%Y-%m-%dT%H:%M:%S"),
            "completed": False,
            "results": [],
        })

    def mark_completed(self, seed: str, ranked: List[Tuple[str, str]], elapsed_seconds: float):
        """Record the ranked (display, error text) pairs of a finished run."""
        state = self._load_state(seed) or {"seed": seed}
        state.update({
            "completed": True,
            "completed_at": time.strftime("%Y-%m-%dT%H:%M:%S"),
            "elapsed_s": round(elapsed_seconds, 3),
            "results": [{"expression": display, "error": error} for display, error in ranked],
        })
        self._save_state(seed, state)

    def is_completed(self, seed: str) -> bool:
        state = self._load_state(seed)
        return bool(state and state.get("completed"))

    def load_results(self, seed: str) -> Optional[List[Tuple[str, str]]]:
        """Ranked results of a completed run, or None."""
        state = self._load_state(seed)
        if not state or not state.get("completed"):
            return None
        return [(r["expression"], r["error"]) for r in state["results"]]
