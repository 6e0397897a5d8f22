"""
Combinatorial generator of candidate expressions.

ALGORITHM:
1. Seeds (size 1): every named constant, and every integer literal
   1..max_int_constants expressed in the target's dimension.
2. Each seed is tested, then expanded at cursize = 1.
3. Expanding b at cursize builds every one-step parent of b:
   - with each constant c:  b*c, b/c, c/b, c^b, b^c, b+c, b-c, c-b
   - with each integer i:   b*i, b/i, b^i, i^b  (i >= 2), i/b, b+i, b-i, i-b
   - the negation 0 - b
   Literal units are chosen so that the result can land in the target's
   dimension (b * i gets the unit target/b).
4. Every candidate is evaluated; if its dimension equals the target's the
   pair (|value - target|, candidate) is recorded. The candidate is then
   expanded at cursize + 1, until cursize exceeds max_expr_size.

CAUTIONS:
- Divisions by zero and powers with no real result are skipped before
  evaluation. Any evaluation error that still occurs comes from bad input
  and aborts the run.
- Candidates reference their seed as a shared child: nothing may mutate a
  generated tree (simplify a copy).
- Cost grows combinatorially with max_expr_size; the caller bounds it.
"""

import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Iterator, List, Optional

from config import SearchConfig
from constants import NamedConstant
from dimreal import DimensionedValue, cost
from dimensions import DIMENSIONLESS
from expressions import Expr, ExprKind
from selector import ResultCollector, SearchResult
from simplifier import is_trivial


def pow_is_legal(base: DimensionedValue, exponent: DimensionedValue) -> bool:
    """
    True when base ^ exponent has a real, finite value under the
    DimensionedValue rules.
    """
    if not exponent.dimension.is_dimensionless():
        return False
    if exponent.is_integer():
        return not (base.magnitude == 0 and exponent.magnitude < 0)
    if not base.dimension.is_dimensionless():
        return False
    return base.magnitude > 0 or (base.magnitude == 0 and exponent.magnitude > 0)


class CandidateGenerator:
    """Depth-first enumeration of expressions approximating a target."""

    def __init__(
        self,
        constants: List[NamedConstant],
        target: DimensionedValue,
        config: SearchConfig,
        ctx=None,
    ):
        self.constants = list(constants)
        self.target = target
        self.config = config
        self.ctx = ctx or config.make_context()
        self.max_expr_size = config.max_expr_size
        self.max_int_constants = config.max_int_constants
        self.prune_trivial = config.prune_trivial
        self._stop = threading.Event()

    # === SEEDS ===

    def seeds(self) -> List[Expr]:
        seeds = [Expr.constant(c.name, c.value) for c in self.constants]
        for i in range(1, self.max_int_constants + 1):
            seeds.append(self._literal(i, self.target.dimension))
        return seeds

    def run(self, collector: Optional[ResultCollector] = None) -> ResultCollector:
        """
        Explore every seed. With thread_count > 1 the seeds are spread over
        a thread pool; each worker owns its seed's subtree.
        """
        collector = collector if collector is not None else ResultCollector()
        seeds = self.seeds()

        if self.config.thread_count > 1 and len(seeds) > 1:
            pool = ThreadPoolExecutor(max_workers=min(self.config.thread_count, len(seeds)))
            try:
                futures = [
                    pool.submit(self._explore_into, index, seed, collector)
                    for index, seed in enumerate(seeds)
                ]
                for future in as_completed(futures):
                    # re-raises a worker's evaluation error
                    future.result()
            except BaseException:
                # the first failure stops queued seeds and running subtrees
                self._stop.set()
                raise
            finally:
                pool.shutdown(wait=True, cancel_futures=True)
        else:
            for index, seed in enumerate(seeds):
                self._explore_into(index, seed, collector)

        return collector

    def _explore_into(self, index: int, seed: Expr, collector: ResultCollector):
        collector.extend(index, self.explore(seed))

    def explore(self, seed: Expr) -> List[SearchResult]:
        """All results of one seed's subtree, the seed itself included."""
        sink: List[SearchResult] = []
        self._test_expr(seed, 0, sink)
        return sink

    # === RECURSION ===

    def _test_expr(self, expr: Expr, cursize: int, sink: List[SearchResult]):
        res = expr.evaluate()
        if res.dimension == self.target.dimension:
            sink.append(SearchResult(cost(res, self.target), expr))
        self._recurse(expr, cursize + 1, sink)

    def _recurse(self, b: Expr, cursize: int, sink: List[SearchResult]):
        if cursize > self.max_expr_size:
            return
        for candidate in self.candidates(b):
            if self._stop.is_set():
                return
            if self.prune_trivial and is_trivial(candidate):
                continue
            self._test_expr(candidate, cursize, sink)

    # === CANDIDATES ===

    def candidates(self, b: Expr) -> Iterator[Expr]:
        """
        Every legal one-step parent of b, multiplicative forms first so
        that (pi * 2) is met before (pi + pi).
        """
        bv = b.evaluate()
        target_dim = self.target.dimension

        for constant in self.constants:
            cv = constant.value
            yield self._binary(ExprKind.MUL, b, self._constant(constant))
            if cv.magnitude != 0:
                yield self._binary(ExprKind.DIV, b, self._constant(constant))
            if bv.magnitude != 0:
                yield self._binary(ExprKind.DIV, self._constant(constant), b)
            if pow_is_legal(cv, bv):
                yield self._binary(ExprKind.POW, self._constant(constant), b)
            if pow_is_legal(bv, cv):
                yield self._binary(ExprKind.POW, b, self._constant(constant))

        for i in range(2, self.max_int_constants + 1):
            yield self._binary(ExprKind.MUL, b, self._literal(i, target_dim / bv.dimension))
            yield self._binary(ExprKind.DIV, b, self._literal(i, bv.dimension / target_dim))
            exponent = self._literal(i, DIMENSIONLESS)
            if pow_is_legal(bv, exponent.value):
                yield self._binary(ExprKind.POW, b, exponent)
            base = self._literal(i, DIMENSIONLESS)
            if pow_is_legal(base.value, bv):
                yield self._binary(ExprKind.POW, base, b)

        for i in range(1, self.max_int_constants + 1):
            if bv.magnitude != 0:
                yield self._binary(ExprKind.DIV, self._literal(i, bv.dimension * target_dim), b)

        for constant in self.constants:
            if constant.value.dimension == bv.dimension:
                yield self._binary(ExprKind.ADD, b, self._constant(constant))
                yield self._binary(ExprKind.SUB, b, self._constant(constant))
                yield self._binary(ExprKind.SUB, self._constant(constant), b)

        for i in range(1, self.max_int_constants + 1):
            yield self._binary(ExprKind.ADD, b, self._literal(i, bv.dimension))
            yield self._binary(ExprKind.SUB, b, self._literal(i, bv.dimension))
            yield self._binary(ExprKind.SUB, self._literal(i, bv.dimension), b)

        yield self._binary(ExprKind.SUB, self._literal(0, bv.dimension), b)

    def _literal(self, i: int, dimension) -> Expr:
        return Expr.literal(DimensionedValue(self.ctx.mpf(i), dimension))

    @staticmethod
    def _constant(constant: NamedConstant) -> Expr:
        return Expr.constant(constant.name, constant.value)

    @staticmethod
    def _binary(kind: ExprKind, left: Expr, right: Expr) -> Expr:
        return Expr.binary(kind, left, right)


def search(
    constants: List[NamedConstant],
    target: DimensionedValue,
    config: SearchConfig,
    ctx=None,
) -> List[SearchResult]:
    """Run a complete enumeration and return every recorded result."""
    return CandidateGenerator(constants, target, config, ctx).run().results()
