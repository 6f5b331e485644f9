"""Utilities for building TableDefs from external sources.

SQLAlchemy converter
--------------------
:func:`table_from_sqlalchemy` converts one :class:`sqlalchemy.Table` into a
:class:`~sqlweave.schema.table.TableDef`; :func:`tables_from_sqlalchemy`
reflects a live engine and converts every table it finds.

Install the optional dependency before using this module::

    pip install "sqlweave[sqlalchemy]"

Example::

    from sqlalchemy import create_engine
    from sqlweave.schema.converters import tables_from_sqlalchemy

    engine = create_engine("sqlite:///mydb.db")
    for table in tables_from_sqlalchemy(engine):
        print(table.render())
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from sqlweave.errors import SchemaDefinitionError
from sqlweave.schema.table import FieldDef, ForeignKey, TableDef
from sqlweave.schema.types import SqlType

if TYPE_CHECKING:
    from sqlalchemy import Column, Engine, Table

logger = logging.getLogger(__name__)


def tables_from_sqlalchemy(
    engine: Engine,
    *,
    include_tables: list[str] | None = None,
    schema: str | None = None,
) -> list[TableDef]:
    """Reflect ``engine`` and convert every table, in dependency order.

    Args:
        engine: A connected :class:`sqlalchemy.engine.Engine` instance.
        include_tables: Optional allowlist of table names to reflect.
            When ``None`` all tables in the schema are reflected.
        schema: Optional database schema name, passed directly to
            :meth:`sqlalchemy.schema.MetaData.reflect`.

    Returns:
        One :class:`TableDef` per reflected table.

    Raises:
        ImportError: If ``sqlalchemy`` is not installed.
        SchemaDefinitionError: If a column type has no MySQL counterpart.
    """
    try:
        from sqlalchemy import MetaData as _MetaData
    except ImportError as exc:
        raise ImportError(
            "SQLAlchemy is required for tables_from_sqlalchemy(). "
            'Install it with: pip install "sqlweave[sqlalchemy]"'
        ) from exc

    metadata = _MetaData()
    with engine.connect() as conn:
        metadata.reflect(bind=conn, only=include_tables, schema=schema)
    return [table_from_sqlalchemy(table) for table in metadata.sorted_tables]


def table_from_sqlalchemy(table: Table) -> TableDef:
    """Convert a SQLAlchemy :class:`~sqlalchemy.schema.Table` into a TableDef.

    Column types are mapped onto :class:`SqlType` by their SQLAlchemy type
    class; lengths, numeric precision and enum values carry over.  Server
    defaults and comments are kept, foreign keys become
    :class:`ForeignKey` entries and the ``mysql_engine`` /
    ``mysql_charset`` / ``mysql_collate`` table options are honoured.

    Raises:
        ImportError: If ``sqlalchemy`` is not installed.
        SchemaDefinitionError: If a column type has no MySQL counterpart.
    """
    try:
        from sqlalchemy import types as sa_types
    except ImportError as exc:
        raise ImportError(
            "SQLAlchemy is required for table_from_sqlalchemy(). "
            'Install it with: pip install "sqlweave[sqlalchemy]"'
        ) from exc

    # Subclasses come before their bases (Enum/Text before String, Float before Numeric).
    type_map: list[tuple[type, SqlType]] = [
        (sa_types.BigInteger, SqlType.BIGINT),
        (sa_types.SmallInteger, SqlType.SMALLINT),
        (sa_types.Integer, SqlType.INT),
        (sa_types.Boolean, SqlType.BOOLEAN),
        (sa_types.Float, SqlType.FLOAT),
        (sa_types.Numeric, SqlType.DECIMAL),
        (sa_types.DateTime, SqlType.DATETIME),
        (sa_types.Date, SqlType.DATE),
        (sa_types.Time, SqlType.TIME),
        (sa_types.Enum, SqlType.ENUM),
        (sa_types.Text, SqlType.TEXT),
        (sa_types.String, SqlType.VARCHAR),
        (sa_types.LargeBinary, SqlType.BLOB),
        (sa_types.JSON, SqlType.JSON),
    ]

    auto_column = table.autoincrement_column
    fields: list[FieldDef] = []
    foreign_keys: list[ForeignKey] = []
    for col in table.columns:
        sql_type = _map_type(col, type_map, table.name)
        fields.append(
            FieldDef(
                name=col.name,
                type=sql_type,
                options=_type_options(col, sql_type),
                primary_key=bool(col.primary_key),
                auto_increment=col is auto_column,
                # Reflected columns report True/False; treat unset as nullable.
                nullable=col.nullable is not False,
                default=_server_default(col),
                comment=col.comment,
            )
        )
        for fk in col.foreign_keys:
            ref_table, _, ref_column = fk.target_fullname.rpartition(".")
            foreign_keys.append(
                ForeignKey(
                    name=col.name,
                    ref_table=ref_table,
                    ref_column=ref_column,
                    on_delete=(fk.ondelete or "NO ACTION").upper(),
                    on_update=(fk.onupdate or "NO ACTION").upper(),
                )
            )

    options: dict[str, Any] = {}
    for key, attr in (("mysql_engine", "engine"), ("mysql_charset", "charset"), ("mysql_collate", "collation")):
        if table.kwargs.get(key):
            options[attr] = table.kwargs[key]

    logger.debug("Converted SQLAlchemy table %r with %d fields", table.name, len(fields))
    return TableDef(name=table.name, fields=fields, foreign_keys=foreign_keys, **options)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _map_type(col: Column, type_map: list[tuple[type, SqlType]], table_name: str) -> SqlType:
    col_type = _base_type(col)
    for sa_type, sql_type in type_map:
        if isinstance(col_type, sa_type):
            return sql_type
    raise SchemaDefinitionError(
        f"Column {col.name!r} has unsupported type {col.type!r}.",
        table=table_name,
        field=col.name,
    )


def _base_type(col: Column) -> Any:
    from sqlalchemy.types import TypeDecorator

    if isinstance(col.type, TypeDecorator):
        return col.type.impl
    return col.type


def _type_options(col: Column, sql_type: SqlType) -> dict[str, Any]:
    sa_type = _base_type(col)
    if sql_type is SqlType.ENUM:
        return {"values": list(sa_type.enums)}
    if sql_type is SqlType.VARCHAR and getattr(sa_type, "length", None):
        return {"length": sa_type.length}
    if sql_type in (SqlType.DECIMAL, SqlType.FLOAT):
        options: dict[str, Any] = {}
        if getattr(sa_type, "precision", None) is not None:
            options["precision"] = sa_type.precision
        if sql_type is SqlType.DECIMAL and getattr(sa_type, "scale", None) is not None:
            options["scale"] = sa_type.scale
        return options
    return {}


def _server_default(col: Column) -> str:
    if col.server_default is None:
        return ""
    arg = getattr(col.server_default, "arg", None)
    if arg is None:
        return ""
    # TextClause defaults expose the SQL through .text
    default = str(getattr(arg, "text", arg))
    if len(default) >= 2 and default[0] == default[-1] == "'":
        return default[1:-1]
    return default
