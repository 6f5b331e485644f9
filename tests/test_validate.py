"""Unit tests for the async field validation pipeline."""

from __future__ import annotations

import asyncio
from datetime import date
from typing import Any

import pytest

from sqlweave.schema.table import FieldDef, TableDef
from sqlweave.schema.types import SqlType
from sqlweave.validate.pipeline import run_validators, validate_fields
from sqlweave.validate.validators import (
    is_type,
    matches,
    max_length,
    min_length,
    one_of,
    required,
)

pytestmark = pytest.mark.asyncio


# ---------------------------------------------------------------------------
# Table validation
# ---------------------------------------------------------------------------


async def test_table_validation_collects_messages(validated_books: TableDef) -> None:
    result = await validated_books.validate(
        {
            "id": 1,
            "title": "Dart",
            "author_id": 3,
            "published_date": date(date.today().year + 1, 10, 1),
            "published": "true",
            "pages": 300,
            "aaaaa": "extra field",
        }
    )
    assert result == {
        "id": [],
        "title": ["Title must be at least 5 characters long"],
        "author_id": [],
        "published_date": ["Published date must be a date in the past"],
        "published": ["Published must be a boolean"],
        "pages": [],
    }


async def test_valid_input_has_only_empty_lists(validated_books: TableDef) -> None:
    result = await validated_books.validate(
        {
            "id": 7,
            "title": "Flutter in Action",
            "published_date": date(2020, 1, 1),
            "published": True,
        }
    )
    assert all(messages == [] for messages in result.values())
    assert list(result) == validated_books.field_names


async def test_missing_keys_validate_none(validated_books: TableDef) -> None:
    result = await validated_books.validate({})
    assert result["id"] == ["ID must be a positive integer"]
    assert result["published"] == ["Published must be a boolean"]


async def test_field_validators_run_in_order() -> None:
    calls: list[str] = []

    def make(tag: str, message: str):
        async def check(value: Any) -> str:
            calls.append(tag)
            await asyncio.sleep(0)
            return message

        return check

    field = FieldDef(name="x", type=SqlType.INT, validators=[make("a", "first"), make("b", ""), make("c", "third")])
    assert await field.validate(1) == ["first", "third"]
    assert calls == ["a", "b", "c"]


async def test_fields_run_sequentially() -> None:
    active = 0
    peak = 0

    async def slow(value: Any) -> str:
        nonlocal active, peak
        active += 1
        peak = max(peak, active)
        await asyncio.sleep(0.001)
        active -= 1
        return ""

    table = TableDef(
        name="t",
        fields=[FieldDef(name=n, type=SqlType.INT, validators=[slow]) for n in ("a", "b", "c")],
    )
    await table.validate({"a": 1, "b": 2, "c": 3})
    assert peak == 1


async def test_validator_exception_propagates() -> None:
    async def boom(value: Any) -> str:
        raise RuntimeError("validator failed")

    table = TableDef(name="t", fields=[FieldDef(name="a", type=SqlType.INT, validators=[boom])])
    with pytest.raises(RuntimeError, match="validator failed"):
        await table.validate({"a": 1})


async def test_validate_fields_ignores_undeclared_keys() -> None:
    result = await validate_fields({"a": [required()]}, {"a": None, "b": "x"})
    assert result == {"a": ["This field is required"]}


async def test_run_validators_with_none() -> None:
    assert await run_validators([], None) == []


# ---------------------------------------------------------------------------
# Stock validators
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    ("value", "expected"),
    [(None, "This field is required"), ("   ", "This field is required"), ("x", ""), (0, "")],
)
async def test_required(value: Any, expected: str) -> None:
    assert await required()(value) == expected


async def test_length_validators() -> None:
    assert await max_length(3)("abcd") == "Must be at most 3 characters long"
    assert await max_length(3)("abc") == ""
    assert await min_length(5, "Too short")("abc") == "Too short"
    assert await min_length(5)(None) == ""


async def test_matches() -> None:
    email = matches(r"[^@\s]+@[^@\s]+\.[a-z]+", "Invalid email")
    assert await email("a@b.io") == ""
    assert await email("a@b.io trailing") == "Invalid email"
    assert await email(None) == ""


async def test_one_of() -> None:
    status = one_of(["draft", "published"])
    assert await status("draft") == ""
    assert await status("archived") == "Must be one of: draft, published"


async def test_is_type() -> None:
    assert await is_type(int)(3) == ""
    assert await is_type(int)(True) == "Must be of type int"
    assert await is_type((int, bool))(True) == ""
    assert await is_type(str)(None) == "Must be of type str"
    assert await is_type((int, float), "Not a number")("1") == "Not a number"


async def test_stock_validators_on_a_table() -> None:
    table = TableDef(
        name="users",
        fields=[
            FieldDef(name="email", type=SqlType.VARCHAR, validators=[required(), matches(r".+@.+")]),
            FieldDef(name="role", type=SqlType.ENUM, values=["admin", "user"], validators=[one_of(["admin", "user"])]),
        ],
    )
    assert await table.validate({"email": "", "role": "root"}) == {
        "email": ["This field is required", "Invalid format"],
        "role": ["Must be one of: admin, user"],
    }
