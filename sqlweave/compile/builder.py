"""Top-level statement assembly.

``QueryBuilder`` accumulates clause nodes through a fluent interface and
renders them in a fixed order.  Exactly one operation mode is active at
render time:

1. **insert**: any insert rows present; every other clause is ignored.
2. **update**: any SET assignments present.
3. **delete**: the delete flag is set.
4. **select**: otherwise.

Clause order for update / delete / select
-----------------------------------------
JOIN → SET (update only) → WHERE → GROUP BY → HAVING → ORDER BY → LIMIT

Parameter substitution
----------------------
``{name}`` markers (see :class:`~sqlweave.compile.values.Param`) are
replaced in a single pass over the fully rendered text.  Substituted values
are never scanned again, and markers without a registered parameter stay
in the output verbatim.

A builder rendered inside another one (through
:class:`~sqlweave.compile.clauses.SubQuery`) leaves its markers in place and
hands its parameters to the outermost builder, whose own bindings win on a
name clash.  The outermost builder then substitutes the whole statement
once.

Usage::

    sql = (
        QueryBuilder()
        .select("users.name", "profiles.bio")
        .from_("users")
        .join(LeftJoin("profiles", [Condition(Field("users.id"), Operator.EQ, Field("profiles.user_id"))]))
        .where(WhereOne("users.active", Operator.EQ, True))
        .order_by("users.name")
        .limit(10)
        .render()
    )
"""

from __future__ import annotations

import logging
import re
from contextvars import ContextVar
from collections.abc import Iterable, Mapping
from enum import Enum
from typing import Any

from sqlweave.compile.base import Node
from sqlweave.compile.clauses import Join, Limit, OrderBy, SubQuery
from sqlweave.compile.expressions import Operator, WhereOne
from sqlweave.compile.fields import Field, to_field
from sqlweave.compile.values import to_value
from sqlweave.errors import BuildError

logger = logging.getLogger(__name__)

#: Loose marker shape used by :meth:`QueryBuilder.unresolved_markers`.
_MARKER_RE = re.compile(r"\{([^{}\s]+)\}")

#: Parameters collected by the outermost builder while it renders.
_PENDING_PARAMS: ContextVar[dict[str, Node] | None] = ContextVar(
    "sqlweave_pending_params", default=None
)


class BuilderMode(str, Enum):
    """The operation a :class:`QueryBuilder` renders as."""

    EMPTY = "empty"
    SELECT = "select"
    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"


# copy_with keyword → accumulator attribute
_COPYABLE: dict[str, str] = {
    "select": "_select",
    "delete": "_delete",
    "from_": "_from",
    "where": "_where",
    "params": "_params",
    "group_by": "_group_by",
    "having": "_having",
    "order_by": "_order_by",
    "limit": "_limit",
    "joins": "_joins",
    "insert": "_insert",
    "update": "_update",
}


def _coerce_change(name: str, value: Any) -> Any:
    if name in ("select", "from_", "group_by"):
        return [to_field(item) for item in value]
    if name in ("params", "update"):
        return {key: to_value(v) for key, v in value.items()}
    if name == "insert":
        return [{column: to_value(v) for column, v in row.items()} for row in value]
    if name == "order_by":
        return [item if isinstance(item, OrderBy) else OrderBy.of(item) for item in value]
    if name == "limit" and isinstance(value, int):
        return Limit(count=value)
    if name == "delete":
        return bool(value)
    return list(value) if name in ("where", "having", "joins") else value


def _copy_accumulator(value: Any) -> Any:
    if isinstance(value, list):
        return [dict(v) if isinstance(v, dict) else v for v in value]
    if isinstance(value, dict):
        return dict(value)
    return value


def _remove_rendered(items: list[Any], target: Any) -> list[Any]:
    sql = target.render()
    return [item for item in items if item.render() != sql]


class QueryBuilder:
    """Mutable, fluent SQL statement builder.

    Every mutating method returns ``self``.  Nested builders used through
    :class:`~sqlweave.compile.clauses.SubQuery` are held by reference and
    re-rendered on each :meth:`render` call.  Instances are not
    synchronised; use :meth:`copy_with` to hand an independent copy to
    another task.
    """

    def __init__(self) -> None:
        self._select: list[Node] = []
        self._delete: bool = False
        self._from: list[Node] = []
        self._where: list[Node] = []
        self._params: dict[str, Node] = {}
        self._group_by: list[Node] = []
        self._having: list[Node] = []
        self._order_by: list[OrderBy] = []
        self._limit: Limit | None = None
        self._joins: list[Join] = []
        self._insert: list[dict[str, Node]] = []
        self._update: dict[str, Node] = {}

    # ------------------------------------------------------------------
    # Accumulators
    # ------------------------------------------------------------------

    def select(self, *items: str | Node) -> QueryBuilder:
        """Add select items; strings are taken as field names."""
        self._select.extend(to_field(item) for item in items)
        return self

    def selects(self, items: Iterable[str | Node]) -> QueryBuilder:
        return self.select(*items)

    def from_(self, table: str | Node) -> QueryBuilder:
        """Add a FROM source (table name, field, or :class:`SubQuery`)."""
        self._from.append(to_field(table))
        return self

    def update(self, table: str | Node) -> QueryBuilder:
        """Make ``table`` the single target of an UPDATE."""
        self._from = [to_field(table)]
        return self

    def set(self, field: str, value: Any) -> QueryBuilder:
        """Add a ``field = value`` assignment to the UPDATE."""
        self._update[field] = to_value(value)
        return self

    def delete(self) -> QueryBuilder:
        self._delete = True
        return self

    def insert(
        self,
        table: str | Node,
        rows: Iterable[Mapping[str, Any]],
    ) -> QueryBuilder:
        """Make ``table`` the INSERT target and queue ``rows``.

        The column list is taken from the first queued row.
        """
        self._from = [to_field(table)]
        self._insert.extend(
            {column: to_value(value) for column, value in row.items()} for row in rows
        )
        return self

    def where(
        self,
        condition: Any,
        operator: Operator | None = None,
        right: Any = None,
    ) -> QueryBuilder:
        """Add a WHERE item.

        Pass either a ready node (``WhereOne``, ``AndWhere``, ...) or the
        three parts of a single condition: ``where("age", Operator.GT, 18)``.
        """
        if operator is not None:
            condition = WhereOne(condition, operator, right)
        self._where.append(condition)
        return self

    def join(self, join: Join) -> QueryBuilder:
        self._joins.append(join)
        return self

    def group_by(self, *fields: str | Node) -> QueryBuilder:
        self._group_by.extend(to_field(f) for f in fields)
        return self

    def having(self, having: Node) -> QueryBuilder:
        self._having.append(having)
        return self

    def order_by(self, field: str | OrderBy, desc: bool = False) -> QueryBuilder:
        if not isinstance(field, OrderBy):
            field = OrderBy.of(field, desc=desc)
        self._order_by.append(field)
        return self

    def limit(self, count: int, offset: int | None = None) -> QueryBuilder:
        self._limit = Limit(count=count, offset=offset)
        return self

    def add_param(self, key: str, value: Any) -> QueryBuilder:
        """Bind the ``{key}`` marker to ``value``."""
        self._params[key] = to_value(value)
        return self

    def add_params(self, params: Mapping[str, Any]) -> QueryBuilder:
        for key, value in params.items():
            self.add_param(key, value)
        return self

    # ------------------------------------------------------------------
    # Clearing and removal
    # ------------------------------------------------------------------

    def clear_select(self) -> QueryBuilder:
        self._select = []
        return self

    def clear_from(self) -> QueryBuilder:
        self._from = []
        return self

    def clear_where(self) -> QueryBuilder:
        self._where = []
        return self

    def clear_params(self) -> QueryBuilder:
        self._params = {}
        return self

    def clear_group_by(self) -> QueryBuilder:
        self._group_by = []
        return self

    def clear_having(self) -> QueryBuilder:
        self._having = []
        return self

    def clear_order_by(self) -> QueryBuilder:
        self._order_by = []
        return self

    def clear_limit(self) -> QueryBuilder:
        self._limit = None
        return self

    def clear_joins(self) -> QueryBuilder:
        self._joins = []
        return self

    def clear_insert(self) -> QueryBuilder:
        self._insert = []
        return self

    def clear_update(self) -> QueryBuilder:
        self._update = {}
        return self

    def clear_delete(self) -> QueryBuilder:
        self._delete = False
        return self

    # Removal compares rendered SQL, so an equal-looking node built
    # separately removes the stored one.

    def remove_select(self, item: str | Node) -> QueryBuilder:
        self._select = _remove_rendered(self._select, to_field(item))
        return self

    def remove_from(self, table: str | Node) -> QueryBuilder:
        self._from = _remove_rendered(self._from, to_field(table))
        return self

    def remove_where(self, condition: Node) -> QueryBuilder:
        self._where = _remove_rendered(self._where, condition)
        return self

    def remove_param(self, key: str) -> QueryBuilder:
        self._params.pop(key, None)
        return self

    def remove_group_by(self, field: str | Node) -> QueryBuilder:
        self._group_by = _remove_rendered(self._group_by, to_field(field))
        return self

    def remove_having(self, having: Node) -> QueryBuilder:
        self._having = _remove_rendered(self._having, having)
        return self

    def remove_order_by(self, order: OrderBy) -> QueryBuilder:
        self._order_by = _remove_rendered(self._order_by, order)
        return self

    def remove_join(self, join: Join) -> QueryBuilder:
        self._joins = _remove_rendered(self._joins, join)
        return self

    def remove_insert(self, row: Mapping[str, Any]) -> QueryBuilder:
        target = {column: to_value(value) for column, value in row.items()}
        self._insert = [r for r in self._insert if r != target]
        return self

    def remove_update(self, field: str) -> QueryBuilder:
        self._update.pop(field, None)
        return self

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------

    def has_select(self) -> bool:
        return bool(self._select)

    def has_from(self) -> bool:
        return bool(self._from)

    def has_where(self) -> bool:
        return bool(self._where)

    def has_joins(self) -> bool:
        return bool(self._joins)

    def has_group_by(self) -> bool:
        return bool(self._group_by)

    def has_having(self) -> bool:
        return bool(self._having)

    def has_order_by(self) -> bool:
        return bool(self._order_by)

    def has_limit(self) -> bool:
        return self._limit is not None

    def has_insert(self) -> bool:
        return bool(self._insert)

    def has_update(self) -> bool:
        return bool(self._update)

    def is_delete(self) -> bool:
        return self._delete

    @property
    def params(self) -> dict[str, Node]:
        """A copy of the registered parameters."""
        return dict(self._params)

    @property
    def mode(self) -> BuilderMode:
        """The operation this builder currently renders as."""
        if self._insert:
            return BuilderMode.INSERT
        if self._update:
            return BuilderMode.UPDATE
        if self._delete:
            return BuilderMode.DELETE
        if self._select or self._from:
            return BuilderMode.SELECT
        return BuilderMode.EMPTY

    def copy_with(self, **changes: Any) -> QueryBuilder:
        """Return an independent copy, optionally replacing accumulators.

        Keyword names: ``select``, ``delete``, ``from_``, ``where``,
        ``params``, ``group_by``, ``having``, ``order_by``, ``limit``,
        ``joins``, ``insert``, ``update``.  Nodes are immutable and shared;
        the containers holding them are copied.

        Replacements are coerced the way the fluent methods coerce their
        arguments: strings become fields, plain values become
        :class:`~sqlweave.compile.values.Value` nodes and an int ``limit``
        becomes a :class:`~sqlweave.compile.clauses.Limit`.

        Raises:
            TypeError: On an unknown keyword.
        """
        unknown = set(changes) - set(_COPYABLE)
        if unknown:
            raise TypeError(f"Unknown QueryBuilder fields: {sorted(unknown)}")
        clone = QueryBuilder()
        for name, attr in _COPYABLE.items():
            if name in changes:
                value = _coerce_change(name, changes[name])
            else:
                value = getattr(self, attr)
            setattr(clone, attr, _copy_accumulator(value))
        return clone

    def as_subquery(self, alias: str = "") -> SubQuery:
        """Wrap this builder for use as a nested query."""
        return SubQuery(self, alias)

    def unresolved_markers(self) -> list[str]:
        """Return the ``{name}`` markers still present after rendering.

        This is a textual scan: braces inside string literals are reported
        too.
        """
        return _MARKER_RE.findall(self.render())

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def render(self) -> str:
        """Render the statement.

        Raises:
            BuildError: If an UPDATE or DELETE does not have exactly one
                target table, or an INSERT has no target table.
        """
        mode = self.mode
        if mode is BuilderMode.INSERT:
            sql = self._render_insert()
        else:
            sql = self._render_bound(mode)
        logger.debug("Rendered %s statement (%d chars)", mode.value, len(sql))
        return sql

    def _render_bound(self, mode: BuilderMode) -> str:
        pending = _PENDING_PARAMS.get()
        if pending is not None:
            # Nested: the outermost builder substitutes.
            for key, value in self._params.items():
                pending.setdefault(key, value)
            return self._render_statement(mode)
        params = dict(self._params)
        token = _PENDING_PARAMS.set(params)
        try:
            sql = self._render_statement(mode)
        finally:
            _PENDING_PARAMS.reset(token)
        return _substitute_params(sql, params)

    def _render_insert(self) -> str:
        if not self._from:
            raise BuildError("Insert operation requires a target table.", clause="INSERT", mode="insert")
        columns = list(self._insert[0])
        column_sql = ", ".join(Field(column).render() for column in columns)
        rows_sql = ", ".join(
            self._render_row(index, row, columns) for index, row in enumerate(self._insert)
        )
        return f"INSERT INTO {self._from[0].render()} ({column_sql}) VALUES {rows_sql}"

    @staticmethod
    def _render_row(index: int, row: dict[str, Node], columns: list[str]) -> str:
        extra = set(row) - set(columns)
        if extra:
            logger.warning(
                "Insert row %d: dropping columns absent from the first row: %s",
                index,
                sorted(extra),
            )
        values = [row[column].render() if column in row else "DEFAULT" for column in columns]
        return f"({', '.join(values)})"

    def _render_statement(self, mode: BuilderMode) -> str:
        parts: list[str] = [self._render_head(mode)]

        parts.extend(join.render() for join in self._joins)

        if mode is BuilderMode.UPDATE:
            assignments = ", ".join(
                f"{Field(field).render()} = {value.render()}"
                for field, value in self._update.items()
            )
            parts.append(f"SET {assignments}")

        if self._where:
            parts.append(f"WHERE {' AND '.join(w.render() for w in self._where)}")

        if self._group_by:
            parts.append(f"GROUP BY {', '.join(g.render() for g in self._group_by)}")

        if self._having:
            parts.append(f"HAVING {' AND '.join(h.render() for h in self._having)}")

        if self._order_by:
            parts.append(f"ORDER BY {', '.join(o.render() for o in self._order_by)}")

        if self._limit is not None:
            parts.append(self._limit.render())

        return " ".join(parts)

    def _render_head(self, mode: BuilderMode) -> str:
        if mode is BuilderMode.UPDATE:
            return f"UPDATE {self._single_table(mode)}"
        if mode is BuilderMode.DELETE:
            return f"DELETE FROM {self._single_table(mode)}"
        items = ", ".join(item.render() for item in self._select) or "*"
        if not self._from:
            return f"SELECT {items}"
        return f"SELECT {items} FROM {', '.join(t.render() for t in self._from)}"

    def _single_table(self, mode: BuilderMode) -> str:
        if len(self._from) != 1:
            raise BuildError(
                f"{mode.value.capitalize()} operation requires exactly one table, "
                f"got {len(self._from)}.",
                clause="FROM",
                mode=mode.value,
            )
        return self._from[0].render()


def _substitute_params(sql: str, params: Mapping[str, Node]) -> str:
    if not params:
        return sql
    replacements = {f"{{{key}}}": value.render() for key, value in params.items()}
    pattern = re.compile(
        "|".join(re.escape(marker) for marker in sorted(replacements, key=len, reverse=True))
    )
    return pattern.sub(lambda m: replacements[m.group(0)], sql)


class Union:
    """Combines builders with ``UNION`` / ``UNION ALL``.

    The combinator's ORDER BY applies to the whole result and is independent
    of any ORDER BY on the member builders.

    Args:
        queries: Member builders, held by reference.
        union_all: Emit ``UNION ALL`` between every pair of members.
    """

    def __init__(self, queries: Iterable[QueryBuilder], union_all: bool = False) -> None:
        self.queries = list(queries)
        self.union_all = union_all
        self._order_by: list[OrderBy] = []

    def add(self, query: QueryBuilder) -> Union:
        self.queries.append(query)
        return self

    def order_by(self, field: str | OrderBy, desc: bool = False) -> Union:
        if not isinstance(field, OrderBy):
            field = OrderBy.of(field, desc=desc)
        self._order_by.append(field)
        return self

    def render(self) -> str:
        keyword = " UNION ALL " if self.union_all else " UNION "
        sql = keyword.join(query.render() for query in self.queries)
        if self._order_by:
            sql += f" ORDER BY {', '.join(o.render() for o in self._order_by)}"
        return sql
