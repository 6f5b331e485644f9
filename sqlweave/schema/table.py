"""Table, field and foreign-key definitions.

Definitions are pydantic models, so they can be built in code or loaded
from JSON with ``TableDef.model_validate``::

    books = TableDef(
        name="books",
        fields=[
            FieldDef(name="id", type=SqlType.INT, primary_key=True, auto_increment=True),
            FieldDef(name="title", type=SqlType.VARCHAR, length=100),
            FieldDef(name="author_id", type=SqlType.INT),
        ],
        foreign_keys=[ForeignKey(name="author_id", ref_table="authors", on_delete="CASCADE")],
    )
    books.render()
    # CREATE TABLE `books` (`id` INT PRIMARY KEY AUTO_INCREMENT NOT NULL, ...
    #   FOREIGN KEY (`author_id`) REFERENCES `authors`(`id`) ON DELETE CASCADE ...)
    #   ENGINE=InnoDB DEFAULT CHARSET=utf8mb4 COLLATE=utf8mb4_unicode_ci;

Validators are runtime callables; they are excluded from serialisation and
must be attached in code.
"""
from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from sqlweave.compile.fields import Field as FieldNode
from sqlweave.compile.mysql import MYSQL
from sqlweave.errors import SchemaDefinitionError
from sqlweave.schema.types import SqlType, TypeOptions, render_type
from sqlweave.validate.pipeline import Validator, run_validators, validate_fields

logger = logging.getLogger(__name__)

#: Defaults emitted without quotes.
RESERVED_DEFAULTS: frozenset[str] = frozenset(
    {"CURRENT_TIMESTAMP", "NULL", "TRUE", "FALSE", "NOW"}
)

#: Referential actions accepted by FOREIGN KEY clauses.
ReferentialAction = Literal["RESTRICT", "CASCADE", "SET NULL", "NO ACTION", "SET DEFAULT"]

_TYPE_OPTION_KEYS: frozenset[str] = frozenset(TypeOptions.model_fields)

_DOUBLE_QUOTE = '"'


class FieldDef(BaseModel):
    """A single column definition.

    Type options may be given either as ``options=TypeOptions(...)`` or as
    top-level keywords (``length=100``, ``values=[...]``); the latter are
    folded into :attr:`options`.

    Attributes:
        name: Column name.
        type: Column type.
        options: Length / precision / value-list parameters of the type.
        primary_key: Emit ``PRIMARY KEY``.
        auto_increment: Emit ``AUTO_INCREMENT``.
        nullable: Omit ``NOT NULL`` when true.
        default: Default value; empty means no DEFAULT clause.
        comment: Optional column comment.
        validators: Async validators run by :meth:`validate`, in order.
    """

    model_config = ConfigDict(extra="forbid")

    name: str
    type: SqlType
    options: TypeOptions = Field(default_factory=TypeOptions)
    primary_key: bool = False
    auto_increment: bool = False
    nullable: bool = False
    default: str = ""
    comment: str | None = None
    validators: list[Validator] = Field(default_factory=list, exclude=True, repr=False)

    @model_validator(mode="before")
    @classmethod
    def _fold_type_options(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        lifted = {k: data[k] for k in _TYPE_OPTION_KEYS if k in data}
        if not lifted:
            return data
        data = {k: v for k, v in data.items() if k not in lifted}
        options = data.get("options") or {}
        if isinstance(options, TypeOptions):
            options = options.model_dump(exclude_unset=True)
        data["options"] = {**options, **lifted}
        return data

    def render(self) -> str:
        """Render the column definition used inside CREATE TABLE."""
        sql = f"{MYSQL.quote_identifier(self.name)} {render_type(self.type, self.options)}"
        if self.primary_key:
            sql += " PRIMARY KEY"
        if self.auto_increment:
            sql += " AUTO_INCREMENT"
        if not self.nullable:
            sql += " NOT NULL"
        if self.default:
            if self.default.upper() in RESERVED_DEFAULTS:
                sql += f" DEFAULT {self.default}"
            else:
                sql += f" DEFAULT {MYSQL.string_literal(self.default, quote=_DOUBLE_QUOTE)}"
        if self.comment is not None:
            sql += f" COMMENT {MYSQL.string_literal(self.comment, quote=_DOUBLE_QUOTE)}"
        return sql

    async def validate(self, value: Any) -> list[str]:
        """Run this field's validators against ``value``."""
        return await run_validators(self.validators, value)


class ForeignKey(BaseModel):
    """A FOREIGN KEY constraint on one column.

    Attributes:
        name: Referencing column in this table.
        ref_table: Referenced table.
        ref_column: Referenced column.
        on_delete: Action on delete of the referenced row.
        on_update: Action on update of the referenced row.
    """

    model_config = ConfigDict(extra="forbid")

    name: str
    ref_table: str
    ref_column: str = "id"
    on_delete: ReferentialAction = "NO ACTION"
    on_update: ReferentialAction = "NO ACTION"

    def render(self) -> str:
        q = MYSQL.quote_identifier
        return (
            f"FOREIGN KEY ({q(self.name)}) REFERENCES {q(self.ref_table)}({q(self.ref_column)}) "
            f"ON DELETE {self.on_delete} ON UPDATE {self.on_update}"
        )


class TableDef(BaseModel):
    """A table definition: CREATE TABLE rendering and input validation.

    Attributes:
        name: Table name.
        fields: Column definitions, in declaration order.
        foreign_keys: FOREIGN KEY constraints.
        charset: Default character set.
        collation: Default collation.
        engine: Storage engine.

    Raises:
        SchemaDefinitionError: On duplicate field names, or a foreign key
            on an undeclared field.
    """

    model_config = ConfigDict(extra="forbid")

    name: str
    fields: list[FieldDef]
    foreign_keys: list[ForeignKey] = Field(default_factory=list)
    charset: str = "utf8mb4"
    collation: str = "utf8mb4_unicode_ci"
    engine: str = "InnoDB"

    @model_validator(mode="after")
    def _check_fields(self) -> TableDef:
        seen: set[str] = set()
        for field in self.fields:
            if field.name in seen:
                raise SchemaDefinitionError(
                    f"Duplicate field {field.name!r} in table {self.name!r}.",
                    table=self.name,
                    field=field.name,
                )
            seen.add(field.name)
        for fk in self.foreign_keys:
            if fk.name not in seen:
                raise SchemaDefinitionError(
                    f"Foreign key on undeclared field {fk.name!r} in table {self.name!r}.",
                    table=self.name,
                    field=fk.name,
                )
        return self

    @property
    def field_names(self) -> list[str]:
        """Returns all field names, in declaration order."""
        return [f.name for f in self.fields]

    def get_field(self, name: str) -> FieldDef | None:
        """Returns the FieldDef with the given name, or ``None``."""
        for field in self.fields:
            if field.name == name:
                return field
        return None

    def select_fields(self, source: str = "", alias: str = "") -> list[FieldNode]:
        """Build one aliased select item per field.

        ``select_fields("u", "user")`` yields ``u.`id` AS `user.id```, ...
        Either prefix may be empty, in which case the bare field name is
        used on that side.
        """
        return [
            FieldNode(
                f"{source}.{f.name}" if source else f.name,
                alias=f"{alias}.{f.name}" if alias else f.name,
            )
            for f in self.fields
        ]

    def render(self) -> str:
        """Render the CREATE TABLE statement."""
        parts = [f.render() for f in self.fields]
        parts.extend(fk.render() for fk in self.foreign_keys)
        return (
            f"CREATE TABLE {MYSQL.quote_identifier(self.name)} ({', '.join(parts)}) "
            f"ENGINE={self.engine} DEFAULT CHARSET={self.charset} COLLATE={self.collation};"
        )

    async def validate(self, data: Mapping[str, Any]) -> dict[str, list[str]]:
        """Validate ``data`` against every declared field.

        Fields run strictly one after another, in declaration order.

        Returns:
            A mapping of every field name to its (possibly empty) message
            list.  Undeclared keys in ``data`` are ignored.
        """
        results = await validate_fields(
            {f.name: f.validators for f in self.fields}, dict(data)
        )
        failed = sum(1 for messages in results.values() if messages)
        logger.debug("Validated %r: %d of %d fields failed", self.name, failed, len(results))
        return results
