"""Field (identifier) rendering.

A field name may carry one qualifier: ``"users.name"`` renders as
``users.`name```.  The qualifier is emitted verbatim so that table aliases
and database prefixes keep working; only the local name is quoted.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlweave.compile.base import Node
from sqlweave.compile.mysql import MYSQL

#: Separator between a qualifier and the local name.
QUALIFIER_SEPARATOR = "."

WILDCARD = "*"


@dataclass(frozen=True)
class FieldReference:
    """A parsed ``qualifier.name`` or bare ``name`` reference.

    Only the first separator splits: ``"a.b.c"`` parses as qualifier ``a``
    and local name ``b.c``.

    Attributes:
        qualifier: Table / alias prefix, or ``None`` for bare names.
        name: Local name.
    """

    qualifier: str | None
    name: str

    @classmethod
    def parse(cls, ref: str) -> FieldReference:
        """Parse a ``"qualifier.name"`` or bare ``"name"`` string."""
        if QUALIFIER_SEPARATOR in ref:
            qualifier, name = ref.split(QUALIFIER_SEPARATOR, 1)
            return cls(qualifier=qualifier, name=name)
        return cls(qualifier=None, name=ref)

    @property
    def qualified(self) -> bool:
        """True when the reference includes a qualifier."""
        return self.qualifier is not None

    def render(self) -> str:
        local = self.name if self.name == WILDCARD else MYSQL.quote_identifier(self.name)
        if self.qualifier is not None:
            return f"{self.qualifier}{QUALIFIER_SEPARATOR}{local}"
        return local

    def __str__(self) -> str:
        if self.qualifier is not None:
            return f"{self.qualifier}{QUALIFIER_SEPARATOR}{self.name}"
        return self.name


@dataclass(frozen=True)
class Field(Node):
    """A quoted column or table reference.

    Attributes:
        name: Bare or qualified name.
        alias: Optional alias, rendered as ``AS `alias```.
        distinct: Prefix the reference with ``DISTINCT``.
    """

    name: str
    alias: str = ""
    distinct: bool = False

    @property
    def reference(self) -> FieldReference:
        return FieldReference.parse(self.name)

    def render(self) -> str:
        sql = self.reference.render()
        if self.distinct:
            sql = f"DISTINCT {sql}"
        if self.alias:
            sql = f"{sql} AS {MYSQL.quote_identifier(self.alias)}"
        return sql

    def without_alias(self) -> Field:
        """Return a copy of this field with the alias dropped."""
        return Field(self.name, distinct=self.distinct)


def to_field(v: str | Node) -> Node:
    """Return ``v`` unchanged when it is a node, else wrap it in :class:`Field`."""
    if isinstance(v, Node):
        return v
    return Field(v)
