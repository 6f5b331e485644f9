"""sqlweave schema models: TableDef, FieldDef, ForeignKey, column types."""
from sqlweave.schema.table import FieldDef, ForeignKey, ReferentialAction, TableDef
from sqlweave.schema.types import SqlType, TypeOptions, render_type

__all__ = [
    "FieldDef",
    "ForeignKey",
    "ReferentialAction",
    "TableDef",
    "SqlType",
    "TypeOptions",
    "render_type",
]
