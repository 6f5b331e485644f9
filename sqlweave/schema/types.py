"""Column types for CREATE TABLE.

One :class:`SqlType` enum plus a :class:`TypeOptions` model covers every
type; the suffix rules live in a single function instead of a class per
type::

    render_type(SqlType.VARCHAR)                                  # VARCHAR(255)
    render_type(SqlType.DECIMAL, TypeOptions(precision=8, scale=3))  # DECIMAL(8,3)
    render_type(SqlType.ENUM, TypeOptions(values=["a", "b"]))     # ENUM('a', 'b')
"""
from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from sqlweave.compile.mysql import MYSQL


class SqlType(str, Enum):
    """MySQL column types."""

    INT = "INT"
    BIGINT = "BIGINT"
    MEDIUMINT = "MEDIUMINT"
    SMALLINT = "SMALLINT"
    TINYINT = "TINYINT"
    CHAR = "CHAR"
    VARCHAR = "VARCHAR"
    FLOAT = "FLOAT"
    DECIMAL = "DECIMAL"
    BOOLEAN = "BOOLEAN"
    TEXT = "TEXT"
    TINYTEXT = "TINYTEXT"
    MEDIUMTEXT = "MEDIUMTEXT"
    LONGTEXT = "LONGTEXT"
    DATE = "DATE"
    DATETIME = "DATETIME"
    TIMESTAMP = "TIMESTAMP"
    TIME = "TIME"
    YEAR = "YEAR"
    BIT = "BIT"
    BINARY = "BINARY"
    VARBINARY = "VARBINARY"
    BLOB = "BLOB"
    MEDIUMBLOB = "MEDIUMBLOB"
    LONGBLOB = "LONGBLOB"
    TINYBLOB = "TINYBLOB"
    ENUM = "ENUM"
    SET = "SET"
    JSON = "JSON"
    POINT = "POINT"
    POLYGON = "POLYGON"


#: Types rendered with a ``(length)`` suffix, and their default length.
LENGTH_DEFAULTS: dict[SqlType, int] = {
    SqlType.CHAR: 255,
    SqlType.VARCHAR: 255,
    SqlType.BINARY: 255,
    SqlType.VARBINARY: 255,
    SqlType.BIT: 8,
    SqlType.YEAR: 4,
}

#: Types taking an optional ``SRID n`` attribute.
SPATIAL_TYPES: frozenset[SqlType] = frozenset({SqlType.POINT, SqlType.POLYGON})

#: Types whose suffix is the list of allowed values.
VALUE_LIST_TYPES: frozenset[SqlType] = frozenset({SqlType.ENUM, SqlType.SET})


class TypeOptions(BaseModel):
    """Size and shape parameters of a column type.

    Only the options meaningful for the chosen :class:`SqlType` are used;
    the rest are ignored.

    Attributes:
        length: Character / byte / bit length, or TINYINT display width.
        precision: Total digits for FLOAT and DECIMAL.
        scale: Digits after the decimal point for FLOAT and DECIMAL.
        values: Allowed values for ENUM and SET.
        srid: Spatial reference id for POINT and POLYGON.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    length: int | None = Field(None, ge=1)
    precision: int | None = Field(None, ge=1)
    scale: int | None = Field(None, ge=0)
    values: list[str] = Field(default_factory=list)
    srid: int | None = Field(None, ge=0)


def type_suffix(sql_type: SqlType, options: TypeOptions) -> str:
    """Return the text that follows the type name (may be empty)."""
    if sql_type in LENGTH_DEFAULTS:
        return f"({options.length or LENGTH_DEFAULTS[sql_type]})"
    if sql_type is SqlType.TINYINT:
        return f"({options.length})" if options.length else ""
    if sql_type is SqlType.FLOAT:
        if options.precision is None:
            return ""
        if options.scale is None:
            return f"({options.precision})"
        return f"({options.precision}, {options.scale})"
    if sql_type is SqlType.DECIMAL:
        precision = options.precision if options.precision is not None else 10
        scale = options.scale if options.scale is not None else 2
        return f"({precision},{scale})"
    if sql_type in VALUE_LIST_TYPES:
        return f"({', '.join(MYSQL.string_literal(v) for v in options.values)})"
    if sql_type in SPATIAL_TYPES and options.srid is not None:
        return f" SRID {options.srid}"
    return ""


def render_type(sql_type: SqlType, options: TypeOptions | None = None) -> str:
    """Render a full column type, e.g. ``VARCHAR(100)``."""
    sql_type = SqlType(sql_type)
    return f"{sql_type.value}{type_suffix(sql_type, options or TypeOptions())}"
