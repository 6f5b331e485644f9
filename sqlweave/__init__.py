"""sqlweave – composable, safely escaped MySQL query and DDL building.

Weave Queries. Don't Concatenate Them.

Public API
----------
``QueryBuilder``
    Fluent SELECT / INSERT / UPDATE / DELETE assembler with ``{name}``
    parameter substitution.

``Union``
    ``UNION`` / ``UNION ALL`` over several builders.

``TableDef``
    CREATE TABLE rendering plus the async per-field validation pipeline.

Re-exported types
-----------------
Every expression node (``Field``, ``Value``, ``Condition``, ``AndWhere``,
``Join``, ``Case``, ...), the schema models, the stock validators, and all
error classes.

Example::

    from sqlweave import Operator, Param, QueryBuilder, WhereOne

    sql = (
        QueryBuilder()
        .select("id", "title")
        .from_("books")
        .where(WhereOne("author_id", Operator.EQ, Param("author")))
        .add_param("author", 7)
        .render()
    )
    # SELECT `id`, `title` FROM `books` WHERE ( `author_id` = 7 )

Nothing here executes SQL; hand the rendered text to your database driver.
"""

from __future__ import annotations

from sqlweave.compile import (
    MYSQL,
    Aggregate,
    AndWhere,
    BuilderMode,
    Case,
    Computed,
    Condition,
    Field,
    FieldReference,
    Group,
    GroupKind,
    HashAlgorithm,
    HashedSecret,
    Having,
    Join,
    JoinKind,
    LeftJoin,
    Like,
    Limit,
    MySQLDialect,
    Node,
    Null,
    On,
    Operator,
    OrderBy,
    OrWhere,
    Param,
    QueryBuilder,
    Range,
    Raw,
    RightJoin,
    SelectAll,
    SQLDialect,
    SubQuery,
    Union,
    Value,
    ValueKind,
    When,
    WhereOne,
)
from sqlweave.errors import BuildError, SchemaDefinitionError, SQLWeaveError
from sqlweave.schema import FieldDef, ForeignKey, SqlType, TableDef, TypeOptions
from sqlweave.validate import (
    Validator,
    is_type,
    matches,
    max_length,
    min_length,
    one_of,
    required,
)

__all__ = [
    # Builders
    "QueryBuilder",
    "BuilderMode",
    "Union",
    # Values
    "Value",
    "ValueKind",
    "HashAlgorithm",
    "HashedSecret",
    "Param",
    "Null",
    "Raw",
    "Like",
    "Range",
    # Fields and select items
    "Field",
    "FieldReference",
    "SelectAll",
    "Computed",
    "Aggregate",
    "Case",
    "When",
    "SubQuery",
    # Conditions
    "Operator",
    "Condition",
    "Group",
    "GroupKind",
    "AndWhere",
    "OrWhere",
    "WhereOne",
    "On",
    "Having",
    # Clauses
    "Join",
    "JoinKind",
    "LeftJoin",
    "RightJoin",
    "OrderBy",
    "Limit",
    # Dialect
    "Node",
    "SQLDialect",
    "MySQLDialect",
    "MYSQL",
    # Schema
    "TableDef",
    "FieldDef",
    "ForeignKey",
    "SqlType",
    "TypeOptions",
    # Validation
    "Validator",
    "required",
    "max_length",
    "min_length",
    "matches",
    "one_of",
    "is_type",
    # Errors
    "SQLWeaveError",
    "BuildError",
    "SchemaDefinitionError",
]
