"""
Algebraic simplification of expression trees.

Rules, in priority order (0 and 1 are dimensionless values, compared
against the evaluated operand):

  1. 0 + x → x,  x + 0 → x
  2. x - 0 → x
  3. 1 * x → x,  x * 1 → x
  4. x / 1 → x
  5. 1 / (a / b) → b / a

A rewrite can expose a new match at the same position, so after every
rewrite the replacement is examined again before descending into children.
"""

import mpmath
from typing import Optional

from dimreal import DimensionedValue
from expressions import Expr, ExprKind


_ZERO = DimensionedValue(mpmath.mpf(0))
_ONE = DimensionedValue(mpmath.mpf(1))


def _rewrite(node: Expr) -> Optional[Expr]:
    """Apply the first matching rule at `node`; None when nothing matches."""
    if node.size() <= 1:
        return None

    left, right = node.children

    if node.kind is ExprKind.ADD:
        if left.evaluate() == _ZERO:
            return right
        if right.evaluate() == _ZERO:
            return left

    elif node.kind is ExprKind.SUB:
        if right.evaluate() == _ZERO:
            return left

    elif node.kind is ExprKind.MUL:
        if left.evaluate() == _ONE:
            return right
        if right.evaluate() == _ONE:
            return left

    elif node.kind is ExprKind.DIV:
        if right.evaluate() == _ONE:
            return left
        if left.evaluate() == _ONE and right.kind is ExprKind.DIV:
            # invert the inner quotient in place
            a, b = right.children
            right.children[0], right.children[1] = b, a
            right.mark_dirty()
            return right

    return None


def is_trivial(expr: Expr) -> bool:
    """True when a rule matches at the root (checked on a copy)."""
    return _rewrite(expr.copy()) is not None


def simplify(expr: Expr) -> Expr:
    """
    Simplify `expr` in place and return the new root.

    The result has the same value and a size no larger than the input.
    Trees whose nodes are shared with other trees should be copied first.
    """
    node = expr
    while True:
        replacement = _rewrite(node)
        if replacement is not None:
            node = replacement
            continue

        changed = False
        for index, child in enumerate(node.children):
            simplified = simplify(child)
            if simplified is not child:
                node.set_child(index, simplified)
                changed = True
        # a replaced child may open a new match here (rule 5 looks at its kind)
        if not changed:
            return node
