"""Stock validator factories.

Each factory returns an async :data:`~sqlweave.validate.pipeline.Validator`.
Apart from :func:`required` and :func:`is_type`, the validators let
``None`` through so that optional fields only fail when a value is given::

    FieldDef(
        name="title",
        type=SqlType.VARCHAR,
        validators=[required(), min_length(5), max_length(255)],
    )
"""
from __future__ import annotations

import re
from collections.abc import Iterable
from typing import Any

from sqlweave.validate.pipeline import Validator


def required(message: str = "This field is required") -> Validator:
    """Fail on ``None`` and on blank strings."""

    async def check(value: Any) -> str:
        if value is None or (isinstance(value, str) and not value.strip()):
            return message
        return ""

    return check


def max_length(limit: int, message: str | None = None) -> Validator:
    """Fail when ``str(value)`` is longer than ``limit`` characters."""
    message = message or f"Must be at most {limit} characters long"

    async def check(value: Any) -> str:
        if value is not None and len(str(value)) > limit:
            return message
        return ""

    return check


def min_length(limit: int, message: str | None = None) -> Validator:
    """Fail when ``str(value)`` is shorter than ``limit`` characters."""
    message = message or f"Must be at least {limit} characters long"

    async def check(value: Any) -> str:
        if value is not None and len(str(value)) < limit:
            return message
        return ""

    return check


def matches(pattern: str | re.Pattern[str], message: str = "Invalid format") -> Validator:
    """Fail unless the whole of ``str(value)`` matches ``pattern``."""
    regex = re.compile(pattern)

    async def check(value: Any) -> str:
        if value is not None and regex.fullmatch(str(value)) is None:
            return message
        return ""

    return check


def one_of(choices: Iterable[Any], message: str | None = None) -> Validator:
    """Fail unless the value is one of ``choices``."""
    allowed = list(choices)
    message = message or f"Must be one of: {', '.join(str(c) for c in allowed)}"

    async def check(value: Any) -> str:
        if value is not None and value not in allowed:
            return message
        return ""

    return check


def is_type(
    types: type | tuple[type, ...],
    message: str | None = None,
) -> Validator:
    """Fail unless the value is an instance of ``types``.

    ``bool`` values are rejected for ``int`` / ``float`` unless ``bool`` is
    listed explicitly.
    """
    expected = types if isinstance(types, tuple) else (types,)
    message = message or f"Must be of type {' or '.join(t.__name__ for t in expected)}"

    async def check(value: Any) -> str:
        if isinstance(value, bool) and bool not in expected:
            return message
        if not isinstance(value, expected):
            return message
        return ""

    return check
