"""
Collection, deduplication and ranking of search results.

Structurally different expressions often land on exactly the same value
(pi + pi and pi * 2). Among results with an identical error only the
smallest expression is kept; survivors are ranked by ascending error.
"""

from dataclasses import dataclass
from threading import Lock
from typing import Dict, Iterable, List, Tuple

from expressions import Expr
from simplifier import simplify


@dataclass
class SearchResult:
    """A candidate whose dimension matches the target."""
    error: object           # non-negative mpf
    expression: Expr


class ResultCollector:
    """
    Append-only sink for search results.

    Thread-safe. Results are grouped by the index of the top-level seed
    that produced them and merged in seed order, so the merged list does
    not depend on the order workers finish in.
    """

    def __init__(self):
        self._groups: Dict[int, List[SearchResult]] = {}
        self._lock = Lock()

    def extend(self, seed_index: int, results: Iterable[SearchResult]):
        results = list(results)
        with self._lock:
            self._groups.setdefault(seed_index, []).extend(results)

    def results(self) -> List[SearchResult]:
        with self._lock:
            return [r for index in sorted(self._groups) for r in self._groups[index]]

    def __len__(self) -> int:
        with self._lock:
            return sum(len(group) for group in self._groups.values())


def select(results: Iterable[SearchResult], top_k: int = 30) -> List[SearchResult]:
    """
    Keep the smallest expression per distinct error, rank ascending by error.

    On an equal error and equal size the result seen first stays.
    """
    selected: Dict[object, SearchResult] = {}
    for result in results:
        kept = selected.get(result.error)
        if kept is None:
            selected[result.error] = result
        elif kept.expression.size() > result.expression.size():
            selected[result.error] = result

    ranked = sorted(selected.values(), key=lambda r: r.error)
    return ranked[:top_k]


def ranked_output(
    selected: List[SearchResult],
    digits: int,
    simplify_output: bool = True,
) -> List[Tuple[str, object]]:
    """
    (display string, error) pairs for the selected results.

    Simplification runs on a copy: generated trees share their seeds.
    """
    output = []
    for result in selected:
        expression = result.expression
        if simplify_output:
            expression = simplify(expression.copy())
        output.append((expression.display(digits), result.error))
    return output
