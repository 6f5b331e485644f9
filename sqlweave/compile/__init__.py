"""sqlweave rendering layer: expression nodes → MySQL SQL text."""
from sqlweave.compile.base import Node, SQLDialect
from sqlweave.compile.builder import BuilderMode, QueryBuilder, Union
from sqlweave.compile.clauses import (
    Aggregate,
    Case,
    Computed,
    Join,
    JoinKind,
    LeftJoin,
    Limit,
    OrderBy,
    RightJoin,
    SelectAll,
    SubQuery,
    When,
)
from sqlweave.compile.expressions import (
    AndWhere,
    Condition,
    Group,
    GroupKind,
    Having,
    On,
    Operator,
    OrWhere,
    WhereOne,
)
from sqlweave.compile.fields import Field, FieldReference
from sqlweave.compile.mysql import MYSQL, MySQLDialect
from sqlweave.compile.values import (
    HashAlgorithm,
    HashedSecret,
    Like,
    Null,
    Param,
    Range,
    Raw,
    Value,
    ValueKind,
)

__all__ = [
    "Node",
    "SQLDialect",
    "MySQLDialect",
    "MYSQL",
    "BuilderMode",
    "QueryBuilder",
    "Union",
    "Aggregate",
    "Case",
    "Computed",
    "Join",
    "JoinKind",
    "LeftJoin",
    "RightJoin",
    "Limit",
    "OrderBy",
    "SelectAll",
    "SubQuery",
    "When",
    "AndWhere",
    "OrWhere",
    "Condition",
    "Group",
    "GroupKind",
    "Having",
    "On",
    "Operator",
    "WhereOne",
    "Field",
    "FieldReference",
    "HashAlgorithm",
    "HashedSecret",
    "Like",
    "Null",
    "Param",
    "Range",
    "Raw",
    "Value",
    "ValueKind",
]
