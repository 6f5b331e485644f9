"""Clause-level nodes.

Classes
-------
Join / LeftJoin / RightJoin — ``[LEFT|RIGHT] JOIN <table> ON <conditions>``
SelectAll                   — ``*``
Computed                    — raw or computed expression with an alias
Aggregate                   — ``COUNT / SUM / AVG / MIN / MAX``
Case / When                 — ``CASE WHEN … THEN … ELSE … END``
SubQuery                    — ``(<nested query>) AS alias``
OrderBy                     — ``<field> ASC|DESC``
Limit                       — ``LIMIT n [OFFSET m]``

A plain select item is just a :class:`~sqlweave.compile.fields.Field`.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Literal, Protocol

from pydantic import BaseModel, ConfigDict, Field as ModelField

from sqlweave.compile.base import Node
from sqlweave.compile.expressions import Condition, On
from sqlweave.compile.fields import Field, to_field
from sqlweave.compile.mysql import MYSQL
from sqlweave.compile.values import Raw, to_value

if TYPE_CHECKING:
    from sqlweave.compile.builder import QueryBuilder


class Renderable(Protocol):
    def render(self) -> str: ...


def _with_alias(sql: str, alias: str) -> str:
    if alias:
        return f"{sql} AS {MYSQL.quote_identifier(alias)}"
    return sql


# ---------------------------------------------------------------------------
# Joins
# ---------------------------------------------------------------------------


class JoinKind(str, Enum):
    """Supported join types."""

    INNER = "INNER"
    LEFT = "LEFT"
    RIGHT = "RIGHT"


_JOIN_KEYWORDS: dict[JoinKind, str] = {
    JoinKind.INNER: "JOIN",
    JoinKind.LEFT: "LEFT JOIN",
    JoinKind.RIGHT: "RIGHT JOIN",
}


@dataclass(frozen=True, init=False)
class Join(Node):
    """A single JOIN.

    Args:
        table: Joined table name (may be qualified) or a field node.
        on: An :class:`On` group, a list of conditions, or a single node
            (wrapped as the only ON entry).  An empty list emits the JOIN
            without an ON clause.
        kind: Join type.
    """

    table: Node
    on: On
    kind: JoinKind

    def __init__(
        self,
        table: str | Node,
        on: On | Node | Iterable[Condition] = (),
        kind: JoinKind = JoinKind.INNER,
    ) -> None:
        if not isinstance(on, On):
            on = On([on]) if isinstance(on, Node) else On(on)
        object.__setattr__(self, "table", to_field(table))
        object.__setattr__(self, "on", on)
        object.__setattr__(self, "kind", JoinKind(kind))

    def render(self) -> str:
        sql = f"{_JOIN_KEYWORDS[self.kind]} {self.table.render()}"
        if self.on.children:
            sql = f"{sql} ON {self.on.render()}"
        return sql


class LeftJoin(Join):
    def __init__(self, table: str | Node, on: On | Node | Iterable[Condition] = ()) -> None:
        super().__init__(table, on, JoinKind.LEFT)


class RightJoin(Join):
    def __init__(self, table: str | Node, on: On | Node | Iterable[Condition] = ()) -> None:
        super().__init__(table, on, JoinKind.RIGHT)


# ---------------------------------------------------------------------------
# Select items
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SelectAll(Node):
    """The ``*`` wildcard."""

    def render(self) -> str:
        return "*"


@dataclass(frozen=True, init=False)
class Computed(Node):
    """A raw or computed expression, optionally aliased.

    A string is emitted verbatim: ``Computed("YEAR(CURDATE())", alias="y")``.
    """

    expr: Node
    alias: str

    def __init__(self, expr: str | Node, alias: str = "") -> None:
        object.__setattr__(self, "expr", Raw(expr) if isinstance(expr, str) else expr)
        object.__setattr__(self, "alias", alias)

    def render(self) -> str:
        return _with_alias(self.expr.render(), self.alias)


@dataclass(frozen=True, init=False)
class Aggregate(Node):
    """An aggregate call over one field.

    ``Aggregate.count("id", alias="n", distinct=True)`` renders
    ``COUNT(DISTINCT `id`) AS `n```.
    """

    func: str
    field: Field
    alias: str

    def __init__(
        self,
        func: str,
        field: str | Field,
        alias: str = "",
        distinct: bool = False,
    ) -> None:
        if isinstance(field, str):
            field = Field(field, distinct=distinct)
        elif distinct:
            field = Field(field.name, distinct=True)
        object.__setattr__(self, "func", func.upper())
        object.__setattr__(self, "field", field.without_alias())
        object.__setattr__(self, "alias", alias or field.alias)

    @classmethod
    def count(cls, field: str | Field = "*", alias: str = "", distinct: bool = False) -> Aggregate:
        return cls("COUNT", field, alias, distinct)

    @classmethod
    def sum(cls, field: str | Field, alias: str = "", distinct: bool = False) -> Aggregate:
        return cls("SUM", field, alias, distinct)

    @classmethod
    def avg(cls, field: str | Field, alias: str = "", distinct: bool = False) -> Aggregate:
        return cls("AVG", field, alias, distinct)

    @classmethod
    def min(cls, field: str | Field, alias: str = "") -> Aggregate:
        return cls("MIN", field, alias)

    @classmethod
    def max(cls, field: str | Field, alias: str = "") -> Aggregate:
        return cls("MAX", field, alias)

    def render(self) -> str:
        return _with_alias(f"{self.func}({self.field.render()})", self.alias)


@dataclass(frozen=True, init=False)
class When(Node):
    """One ``WHEN <condition> THEN <result>`` branch of a :class:`Case`."""

    condition: Node
    then: Node

    def __init__(self, condition: Node, then: Any) -> None:
        object.__setattr__(self, "condition", condition)
        object.__setattr__(self, "then", to_value(then))

    def render(self) -> str:
        return f"WHEN {self.condition.render()} THEN {self.then.render()}"


@dataclass(frozen=True, init=False)
class Case(Node):
    """A ``CASE`` expression.

    Args:
        conditions: The WHEN branches, in order.
        else_: Optional ELSE result.
        alias: Optional alias.
    """

    conditions: tuple[When, ...]
    else_: Node | None
    alias: str

    def __init__(
        self,
        conditions: Iterable[When],
        else_: Any = None,
        alias: str = "",
    ) -> None:
        object.__setattr__(self, "conditions", tuple(conditions))
        object.__setattr__(self, "else_", None if else_ is None else to_value(else_))
        object.__setattr__(self, "alias", alias)

    def render(self) -> str:
        parts = ["CASE"]
        parts.extend(when.render() for when in self.conditions)
        if self.else_ is not None:
            parts.append(f"ELSE {self.else_.render()}")
        parts.append("END")
        return _with_alias(" ".join(parts), self.alias)


@dataclass(frozen=True, eq=False)
class SubQuery(Node):
    """A nested query, rendered in parentheses.

    The nested builder is held by reference and re-rendered on every call,
    so later changes to it show up in the outer statement.  Usable as a
    select item, a condition operand, or a FROM source.
    """

    query: QueryBuilder | Renderable
    alias: str = ""

    def render(self) -> str:
        return _with_alias(f"({self.query.render()})", self.alias)


# ---------------------------------------------------------------------------
# ORDER BY / LIMIT
# ---------------------------------------------------------------------------


class OrderBy(BaseModel):
    """A single ORDER BY entry.

    Attributes:
        field: Field name (may be qualified).
        direction: Sort direction.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    field: str
    direction: Literal["ASC", "DESC"] = "ASC"

    @classmethod
    def of(cls, field: str, desc: bool = False) -> OrderBy:
        return cls(field=field, direction="DESC" if desc else "ASC")

    def render(self) -> str:
        return f"{Field(self.field).render()} {self.direction}"


class Limit(BaseModel):
    """LIMIT clause.

    Attributes:
        count: Maximum number of rows.
        offset: Rows to skip.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    count: int = ModelField(ge=0)
    offset: int | None = ModelField(None, ge=0)

    def render(self) -> str:
        if self.offset is None:
            return f"LIMIT {self.count}"
        return f"LIMIT {self.count} OFFSET {self.offset}"
