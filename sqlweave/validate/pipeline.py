"""Async validator pipeline.

A validator is an async callable ``(value) -> str`` returning an error
message, or ``""`` when the value is acceptable.  :func:`run_validators`
awaits each validator strictly in order and keeps the non-empty messages.

Validation failures are data, not exceptions.  A validator that raises
propagates its exception to the caller unchanged.
"""
from __future__ import annotations

import logging
from collections.abc import Awaitable, Iterable
from typing import Any, Callable

logger = logging.getLogger(__name__)

#: An async check returning an error message or ``""``.
Validator = Callable[[Any], Awaitable[str]]


async def run_validators(validators: Iterable[Validator], value: Any) -> list[str]:
    """Run ``validators`` against ``value`` one after another.

    Args:
        validators: Validators in the order they should run.
        value: The value under test.

    Returns:
        The non-empty messages, in validator order.
    """
    messages: list[str] = []
    for validator in validators:
        message = await validator(value)
        if message:
            messages.append(message)
    return messages


async def validate_fields(
    validators: dict[str, list[Validator]],
    data: dict[str, Any],
) -> dict[str, list[str]]:
    """Validate a mapping of named values.

    Every name in ``validators`` appears in the result, in declaration order.
    Names missing from ``data`` are validated as ``None``; keys of ``data``
    without validators are ignored.
    """
    results: dict[str, list[str]] = {}
    for name, field_validators in validators.items():
        results[name] = await run_validators(field_validators, data.get(name))
    ignored = set(data) - set(validators)
    if ignored:
        logger.debug("Ignoring undeclared keys during validation: %s", sorted(ignored))
    return results
