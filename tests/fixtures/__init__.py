"""Test fixtures: sample table definitions loaded from JSON."""

from __future__ import annotations

import json
from pathlib import Path

from sqlweave.schema.table import TableDef

_FIXTURES_DIR = Path(__file__).parent


def load_table(name: str = "books") -> TableDef:
    """Load a sample TableDef from ``<name>.json``.

    Args:
        name: Fixture file stem, ``'books'`` (default) or ``'authors'``.
    """
    data = json.loads((_FIXTURES_DIR / f"{name}.json").read_text())
    return TableDef.model_validate(data)
