"""Renderer abstractions: the ``Node`` protocol and the ``SQLDialect`` ABC.

Every expression node exposes a pure ``render()`` returning SQL text.  The
only dialect-specific steps (identifier quoting and string escaping) live on
``SQLDialect``; swapping the dialect instance is the single extension point
for targeting another database.
"""
from __future__ import annotations

from abc import ABC, abstractmethod


class Node(ABC):
    """Anything that renders to a SQL fragment."""

    @abstractmethod
    def render(self) -> str:
        """Return the SQL text for this node."""

    def __str__(self) -> str:
        return self.render()


class SQLDialect(ABC):
    """Abstract base for dialect-specific quoting and escaping."""

    @property
    @abstractmethod
    def dialect_name(self) -> str:
        """Return the canonical dialect name (e.g. ``'mysql'``)."""

    @abstractmethod
    def quote_identifier(self, name: str) -> str:
        """Return a properly-quoted SQL identifier.

        Args:
            name: Unquoted identifier (table, column or alias name).

        Returns:
            Quoted identifier.
        """

    @abstractmethod
    def escape_string(self, text: str) -> str:
        """Escape ``text`` for inclusion inside a string literal.

        Args:
            text: Raw string content.

        Returns:
            The escaped content, without surrounding quotes.
        """

    def string_literal(self, text: str, quote: str = "'") -> str:
        """Return ``text`` escaped and wrapped in ``quote``."""
        return f"{quote}{self.escape_string(text)}{quote}"
