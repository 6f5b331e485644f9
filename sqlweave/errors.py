"""Custom exception hierarchy for sqlweave.

All public errors inherit from SQLWeaveError so callers can catch the base
class for any sqlweave-specific failure.

Validation *failures* are not exceptions: ``TableDef.validate`` reports them
as per-field message lists.  The classes here cover structural problems that
make a statement or a table definition impossible to render.
"""
from __future__ import annotations


class SQLWeaveError(Exception):
    """Base exception for all sqlweave errors."""


class BuildError(SQLWeaveError):
    """Raised when a query builder cannot be rendered.

    The canonical case is an UPDATE or DELETE that does not have exactly one
    target table.

    Args:
        message: Human-readable description.
        clause: The clause being rendered when the error occurred.
        mode: The builder mode (``'update'``, ``'delete'``, ...).
    """

    def __init__(
        self,
        message: str,
        clause: str | None = None,
        mode: str | None = None,
    ) -> None:
        super().__init__(message)
        self.clause = clause
        self.mode = mode


class SchemaDefinitionError(SQLWeaveError):
    """Raised when a table definition is internally inconsistent.

    Args:
        message: Human-readable description.
        table: Name of the offending table.
        field: Name of the offending field, if any.
    """

    def __init__(
        self,
        message: str,
        table: str | None = None,
        field: str | None = None,
    ) -> None:
        super().__init__(message)
        self.table = table
        self.field = field
