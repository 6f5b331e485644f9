"""Operators, conditions and boolean groups.

Bracketing is deterministic:

* a :class:`Condition` always renders as ``( left op right )``;
* a :class:`Group` wraps *every* child in ``( ... )`` and joins the children
  with its keyword, at every nesting depth, whatever the child type.

So ``AndWhere([WhereOne("a", EQ, 1), WhereOne("b", EQ, 2)])`` renders
``( ( `a` = 1 ) ) AND ( ( `b` = 2 ) )``.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from sqlweave.compile.base import Node
from sqlweave.compile.fields import to_field
from sqlweave.compile.values import to_value

# ---------------------------------------------------------------------------
# Operator vocabulary
# ---------------------------------------------------------------------------


class Operator(str, Enum):
    """Comparison, membership, pattern, range, null and existence operators."""

    EQ = "EQ"
    NEQ = "NEQ"
    GT = "GT"
    LT = "LT"
    GTE = "GTE"
    LTE = "LTE"
    IN = "IN"
    NOT_IN = "NOT_IN"
    LIKE = "LIKE"
    NOT_LIKE = "NOT_LIKE"
    BETWEEN = "BETWEEN"
    NOT_BETWEEN = "NOT_BETWEEN"
    IS_NULL = "IS_NULL"
    IS_NOT_NULL = "IS_NOT_NULL"
    EXISTS = "EXISTS"

    @property
    def token(self) -> str:
        """The SQL text of this operator."""
        return OPERATOR_TOKENS[self]


#: Operator → SQL token.
OPERATOR_TOKENS: dict[Operator, str] = {
    Operator.EQ: "=",
    Operator.NEQ: "!=",
    Operator.GT: ">",
    Operator.LT: "<",
    Operator.GTE: ">=",
    Operator.LTE: "<=",
    Operator.IN: "IN",
    Operator.NOT_IN: "NOT IN",
    Operator.LIKE: "LIKE",
    Operator.NOT_LIKE: "NOT LIKE",
    Operator.BETWEEN: "BETWEEN",
    Operator.NOT_BETWEEN: "NOT BETWEEN",
    Operator.IS_NULL: "IS NULL",
    Operator.IS_NOT_NULL: "IS NOT NULL",
    Operator.EXISTS: "EXISTS",
}

#: Operators that take no right-hand operand.
UNARY_OPS: frozenset[Operator] = frozenset({Operator.IS_NULL, Operator.IS_NOT_NULL})

#: Operators that take no left-hand operand.
PREFIX_OPS: frozenset[Operator] = frozenset({Operator.EXISTS})


class GroupKind(str, Enum):
    """Logical connective of a :class:`Group`."""

    AND = "AND"
    OR = "OR"


# ---------------------------------------------------------------------------
# Condition
# ---------------------------------------------------------------------------


@dataclass(frozen=True, init=False)
class Condition(Node):
    """A single ``( left op right )`` expression.

    A plain string on the left is taken as a field name; any non-node value
    on the right is taken as a literal.  ``left`` may be ``None`` for EXISTS
    and ``right`` may be ``None`` for IS NULL / IS NOT NULL.

    Args:
        left: Left operand.
        operator: The operator.
        right: Right operand.
    """

    left: Node | None
    operator: Operator
    right: Node | None

    def __init__(self, left: Any, operator: Operator, right: Any = None) -> None:
        operator = Operator(operator)
        if left is not None:
            left = to_field(left)
        if right is not None or operator not in UNARY_OPS:
            right = to_value(right)
        object.__setattr__(self, "left", left)
        object.__setattr__(self, "operator", operator)
        object.__setattr__(self, "right", right)

    def render(self) -> str:
        parts: list[str] = []
        if self.left is not None:
            parts.append(self.left.render())
        parts.append(self.operator.token)
        if self.right is not None:
            parts.append(self.right.render())
        return f"( {' '.join(parts)} )"


# ---------------------------------------------------------------------------
# Boolean groups
# ---------------------------------------------------------------------------


@dataclass(frozen=True, init=False)
class Group(Node):
    """An AND / OR collection of renderable children.

    Args:
        children: Conditions, groups or any other node.
        kind: The logical connective.
    """

    children: tuple[Node, ...]
    kind: GroupKind

    def __init__(
        self,
        children: Iterable[Node] = (),
        kind: GroupKind = GroupKind.AND,
    ) -> None:
        object.__setattr__(self, "children", tuple(children))
        object.__setattr__(self, "kind", GroupKind(kind))

    def render(self) -> str:
        keyword = f" {self.kind.value} "
        return keyword.join(f"( {child.render()} )" for child in self.children)

    def __bool__(self) -> bool:
        return bool(self.children)


class AndWhere(Group):
    """Children joined with ``AND``."""

    def __init__(self, children: Iterable[Node] = ()) -> None:
        super().__init__(children, GroupKind.AND)


class OrWhere(Group):
    """Children joined with ``OR``."""

    def __init__(self, children: Iterable[Node] = ()) -> None:
        super().__init__(children, GroupKind.OR)


class On(AndWhere):
    """The condition list of a JOIN."""


class Having(AndWhere):
    """A HAVING clause entry."""


class WhereOne(Group):
    """A group holding exactly one condition, rendered without extra brackets.

    ``WhereOne("field", Operator.EQ, 123)`` renders ``( `field` = 123 )``.
    """

    def __init__(self, left: Any, operator: Operator, right: Any = None) -> None:
        super().__init__([Condition(left, operator, right)], GroupKind.AND)

    @property
    def condition(self) -> Condition:
        return self.children[0]  # type: ignore[return-value]

    def render(self) -> str:
        return self.condition.render()
