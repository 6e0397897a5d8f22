"""
Expression trees over dimensioned values.

A node is one of a closed set of kinds: a literal, a reference to a named
constant, or a binary operator applied to two children. Each node caches
its last evaluated value behind a dirty flag. Parents are recorded as weak
references, so invalidation can travel upwards without a parent ever
being kept alive by its child.
"""

import weakref
from enum import Enum
from typing import List, Optional

from dimreal import DimensionedValue


class ExprKind(Enum):
    LITERAL = "literal"
    CONSTANT = "constant"
    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"
    POW = "^"

    @property
    def is_leaf(self) -> bool:
        return self in (ExprKind.LITERAL, ExprKind.CONSTANT)


_OPERATIONS = {
    ExprKind.ADD: DimensionedValue.add,
    ExprKind.SUB: DimensionedValue.sub,
    ExprKind.MUL: DimensionedValue.mul,
    ExprKind.DIV: DimensionedValue.div,
    ExprKind.POW: DimensionedValue.pow,
}

# Significant digits for literal leaves when the caller does not ask
DEFAULT_DISPLAY_DIGITS = 15


class Expr:
    """One expression node. Build with literal(), constant() or binary()."""

    __slots__ = ("kind", "value", "name", "children", "_parents", "_cache", "_dirty", "__weakref__")

    def __init__(
        self,
        kind: ExprKind,
        value: Optional[DimensionedValue] = None,
        name: Optional[str] = None,
        children: Optional[List["Expr"]] = None,
    ):
        self.kind = kind
        self.value = value
        self.name = name
        self.children: List[Expr] = list(children or [])
        self._parents: List[weakref.ref] = []
        self._cache: Optional[DimensionedValue] = None
        self._dirty = True
        for child in self.children:
            child._add_parent(self)

    # === CONSTRUCTION ===

    @classmethod
    def literal(cls, value: DimensionedValue) -> "Expr":
        return cls(ExprKind.LITERAL, value=value)

    @classmethod
    def constant(cls, name: str, value: DimensionedValue) -> "Expr":
        return cls(ExprKind.CONSTANT, value=value, name=name)

    @classmethod
    def binary(cls, kind: ExprKind, left: "Expr", right: "Expr") -> "Expr":
        if kind.is_leaf:
            raise ValueError(f"{kind} is not a binary operator")
        return cls(kind, children=[left, right])

    def copy(self) -> "Expr":
        """Deep copy with empty caches; leaf values are immutable and shared."""
        if self.kind.is_leaf:
            return Expr(self.kind, value=self.value, name=self.name)
        return Expr(self.kind, children=[child.copy() for child in self.children])

    # === PARENT LINKS ===

    def _add_parent(self, parent: "Expr"):
        self._parents.append(weakref.ref(parent))

    def _remove_parent(self, parent: "Expr"):
        self._parents = [ref for ref in self._parents if ref() is not None and ref() is not parent]

    def parents(self) -> List["Expr"]:
        """Parents that are still alive."""
        return [p for p in (ref() for ref in self._parents) if p is not None]

    def set_child(self, index: int, node: "Expr"):
        """Replace a child. The node's definition changes, so it becomes dirty."""
        old = self.children[index]
        if old is node:
            return
        old._remove_parent(self)
        self.children[index] = node
        node._add_parent(self)
        self.mark_dirty()

    def mark_dirty(self):
        """Invalidate this node and everything above it. Safe on cycles."""
        seen = set()
        stack = [self]
        while stack:
            node = stack.pop()
            if id(node) in seen:
                continue
            seen.add(id(node))
            node._dirty = True
            stack.extend(node.parents())

    @property
    def is_dirty(self) -> bool:
        return self._dirty

    # === EVALUATION ===

    def evaluate(self) -> DimensionedValue:
        if self._dirty:
            self._cache = self._compute()
            self._dirty = False
        return self._cache

    def _compute(self) -> DimensionedValue:
        if self.kind.is_leaf:
            return self.value
        left, right = self.children
        return _OPERATIONS[self.kind](left.evaluate(), right.evaluate())

    def node_kind(self) -> ExprKind:
        return self.kind

    def size(self) -> int:
        return 1 + sum(child.size() for child in self.children)

    def display(self, digits: int = DEFAULT_DISPLAY_DIGITS) -> str:
        if self.kind is ExprKind.LITERAL:
            return self.value.format(digits)
        if self.kind is ExprKind.CONSTANT:
            return self.name
        left, right = self.children
        return f"({left.display(digits)} {self.kind.value} {right.display(digits)})"

    def __str__(self) -> str:
        return self.display()

    def __repr__(self) -> str:
        return f"Expr({self.display()})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Expr):
            return NotImplemented
        if self.kind is not other.kind:
            return False
        if self.kind.is_leaf:
            return self.name == other.name and self.value == other.value
        return all(a == b for a, b in zip(self.children, other.children))

    __hash__ = None
