"""Shared pytest fixtures for sqlweave unit tests."""
from __future__ import annotations

from datetime import date
from typing import Any

import pytest

from sqlweave.schema.table import TableDef
from tests.fixtures import load_table


@pytest.fixture()
def books() -> TableDef:
    """The sample ``books`` table, without validators."""
    return load_table("books")


@pytest.fixture()
def authors() -> TableDef:
    return load_table("authors")


@pytest.fixture()
def validated_books(books: TableDef) -> TableDef:
    """``books`` with a validator set mirroring a typical input form."""

    async def positive_id(value: Any) -> str:
        return "" if isinstance(value, int) and value > 0 else "ID must be a positive integer"

    async def long_title(value: Any) -> str:
        return "Title must be at least 5 characters long" if len(str(value)) < 5 else ""

    async def past_date(value: Any) -> str:
        if isinstance(value, date) and value < date.today():
            return ""
        return "Published date must be a date in the past"

    async def is_bool(value: Any) -> str:
        return "" if isinstance(value, bool) else "Published must be a boolean"

    books.get_field("id").validators.append(positive_id)
    books.get_field("title").validators.append(long_title)
    books.get_field("published_date").validators.append(past_date)
    books.get_field("published").validators.append(is_bool)
    return books
