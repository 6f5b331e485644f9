"""Unit tests for column types and CREATE TABLE rendering."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from sqlweave.errors import SchemaDefinitionError
from sqlweave.schema.table import FieldDef, ForeignKey, TableDef
from sqlweave.schema.types import SqlType, TypeOptions, render_type


# ---------------------------------------------------------------------------
# Types
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    ("sql_type", "options", "expected"),
    [
        (SqlType.INT, None, "INT"),
        (SqlType.VARCHAR, None, "VARCHAR(255)"),
        (SqlType.VARCHAR, TypeOptions(length=100), "VARCHAR(100)"),
        (SqlType.CHAR, TypeOptions(length=2), "CHAR(2)"),
        (SqlType.VARBINARY, None, "VARBINARY(255)"),
        (SqlType.TINYINT, None, "TINYINT"),
        (SqlType.TINYINT, TypeOptions(length=1), "TINYINT(1)"),
        (SqlType.FLOAT, None, "FLOAT"),
        (SqlType.FLOAT, TypeOptions(precision=7), "FLOAT(7)"),
        (SqlType.FLOAT, TypeOptions(precision=7, scale=3), "FLOAT(7, 3)"),
        (SqlType.DECIMAL, None, "DECIMAL(10,2)"),
        (SqlType.DECIMAL, TypeOptions(precision=8, scale=0), "DECIMAL(8,0)"),
        (SqlType.BIT, None, "BIT(8)"),
        (SqlType.YEAR, None, "YEAR(4)"),
        (SqlType.ENUM, TypeOptions(values=["a", "b"]), "ENUM('a', 'b')"),
        (SqlType.SET, TypeOptions(values=["it's"]), r"SET('it\'s')"),
        (SqlType.POINT, None, "POINT"),
        (SqlType.POINT, TypeOptions(srid=4326), "POINT SRID 4326"),
        (SqlType.POLYGON, TypeOptions(srid=0), "POLYGON SRID 0"),
        (SqlType.JSON, TypeOptions(length=10), "JSON"),
    ],
)
def test_render_type(sql_type, options, expected):
    assert render_type(sql_type, options) == expected


def test_invalid_type_options_rejected():
    with pytest.raises(ValidationError):
        TypeOptions(length=0)


# ---------------------------------------------------------------------------
# Fields
# ---------------------------------------------------------------------------


class TestFieldDef:
    def test_primary_key(self) -> None:
        f = FieldDef(name="id", type=SqlType.INT, primary_key=True, auto_increment=True)
        assert f.render() == "`id` INT PRIMARY KEY AUTO_INCREMENT NOT NULL"

    def test_nullable_omits_not_null(self) -> None:
        assert FieldDef(name="bio", type=SqlType.TEXT, nullable=True).render() == "`bio` TEXT"

    @pytest.mark.parametrize("keyword", ["CURRENT_TIMESTAMP", "NULL", "TRUE", "false", "NOW"])
    def test_reserved_defaults_unquoted(self, keyword: str) -> None:
        f = FieldDef(name="x", type=SqlType.TIMESTAMP, nullable=True, default=keyword)
        assert f.render() == f"`x` TIMESTAMP DEFAULT {keyword}"

    def test_literal_default_and_comment_quoted(self) -> None:
        f = FieldDef(name="status", type=SqlType.VARCHAR, length=20, default="draft", comment='Say "hi"')
        assert f.render() == r'`status` VARCHAR(20) NOT NULL DEFAULT "draft" COMMENT "Say \"hi\""'

    def test_top_level_options_are_folded(self) -> None:
        f = FieldDef(name="kind", type="ENUM", values=["a", "b"])
        assert f.options.values == ["a", "b"]
        assert f.render() == "`kind` ENUM('a', 'b') NOT NULL"

    def test_top_level_options_merge_with_options(self) -> None:
        f = FieldDef(name="p", type=SqlType.DECIMAL, options=TypeOptions(precision=6), scale=1)
        assert f.render() == "`p` DECIMAL(6,1) NOT NULL"

    def test_unknown_key_rejected(self) -> None:
        with pytest.raises(ValidationError):
            FieldDef(name="x", type=SqlType.INT, unique=True)

    def test_validators_excluded_from_dump(self) -> None:
        async def ok(value: object) -> str:
            return ""

        f = FieldDef(name="x", type=SqlType.INT, validators=[ok])
        assert "validators" not in f.model_dump()


# ---------------------------------------------------------------------------
# Foreign keys
# ---------------------------------------------------------------------------


class TestForeignKey:
    def test_defaults(self) -> None:
        fk = ForeignKey(name="author_id", ref_table="authors")
        assert fk.render() == (
            "FOREIGN KEY (`author_id`) REFERENCES `authors`(`id`) "
            "ON DELETE NO ACTION ON UPDATE NO ACTION"
        )

    def test_actions(self) -> None:
        fk = ForeignKey(name="a", ref_table="t", ref_column="uid", on_delete="SET NULL", on_update="CASCADE")
        assert fk.render().endswith("REFERENCES `t`(`uid`) ON DELETE SET NULL ON UPDATE CASCADE")

    def test_unknown_action_rejected(self) -> None:
        with pytest.raises(ValidationError):
            ForeignKey(name="a", ref_table="t", on_delete="DROP TABLE x")


# ---------------------------------------------------------------------------
# Tables
# ---------------------------------------------------------------------------


class TestTableDef:
    def test_create_table_from_json(self, books: TableDef) -> None:
        assert books.render() == (
            "CREATE TABLE `books` ("
            "`id` INT PRIMARY KEY AUTO_INCREMENT NOT NULL, "
            "`title` VARCHAR(255) NOT NULL, "
            "`author_id` INT NOT NULL, "
            "`published_date` DATE, "
            "`published` BOOLEAN NOT NULL DEFAULT FALSE, "
            '`pages` INT NOT NULL COMMENT "Page count", '
            "FOREIGN KEY (`author_id`) REFERENCES `authors`(`id`) ON DELETE CASCADE ON UPDATE NO ACTION"
            ") ENGINE=InnoDB DEFAULT CHARSET=utf8mb4 COLLATE=utf8mb4_unicode_ci;"
        )

    def test_table_options(self, authors: TableDef) -> None:
        sql = authors.render()
        assert "`country` CHAR(2)," in sql
        assert "`created_at` TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP" in sql
        assert sql.endswith(") ENGINE=MyISAM DEFAULT CHARSET=latin1 COLLATE=latin1_swedish_ci;")

    def test_without_foreign_keys(self) -> None:
        t = TableDef(name="t", fields=[FieldDef(name="a", type=SqlType.INT)])
        assert t.render() == (
            "CREATE TABLE `t` (`a` INT NOT NULL) "
            "ENGINE=InnoDB DEFAULT CHARSET=utf8mb4 COLLATE=utf8mb4_unicode_ci;"
        )

    def test_duplicate_field_rejected(self) -> None:
        with pytest.raises(SchemaDefinitionError) as exc_info:
            TableDef(
                name="t",
                fields=[FieldDef(name="a", type=SqlType.INT), FieldDef(name="a", type=SqlType.TEXT)],
            )
        assert exc_info.value.table == "t"
        assert exc_info.value.field == "a"

    def test_foreign_key_on_undeclared_field_rejected(self) -> None:
        with pytest.raises(SchemaDefinitionError):
            TableDef(
                name="t",
                fields=[FieldDef(name="a", type=SqlType.INT)],
                foreign_keys=[ForeignKey(name="b_id", ref_table="b")],
            )

    def test_get_field(self, books: TableDef) -> None:
        title = books.get_field("title")
        assert title is not None
        assert title.type is SqlType.VARCHAR
        assert books.get_field("missing") is None
        assert books.field_names[:2] == ["id", "title"]

    def test_select_fields(self, authors: TableDef) -> None:
        items = [f.render() for f in authors.select_fields("a", "author")]
        assert items[0] == "a.`id` AS `author.id`"
        assert len(items) == len(authors.fields)

    def test_select_fields_without_prefixes(self, authors: TableDef) -> None:
        assert authors.select_fields()[1].render() == "`name` AS `name`"

    def test_round_trips_through_json(self, books: TableDef) -> None:
        again = TableDef.model_validate_json(books.model_dump_json())
        assert again.render() == books.render()
