"""MySQL dialect renderer."""

from __future__ import annotations

from sqlweave.compile.base import SQLDialect

# Order matters: the backslash must be escaped before the characters that
# introduce new backslashes.
_STRING_ESCAPES: tuple[tuple[str, str], ...] = (
    ("\\", "\\\\"),
    ("\x00", "\\0"),
    ('"', '\\"'),
    ("'", "\\'"),
)


class MySQLDialect(SQLDialect):
    """Quotes and escapes text the way MySQL expects.

    Identifiers are quoted with backticks (`` ` ``); an embedded backtick is
    doubled.  String content is backslash-escaped, which is MySQL's default
    (``NO_BACKSLASH_ESCAPES`` disabled).
    """

    @property
    def dialect_name(self) -> str:
        return "mysql"

    def quote_identifier(self, name: str) -> str:
        escaped = name.replace("`", "``")
        return f"`{escaped}`"

    def escape_string(self, text: str) -> str:
        for raw, escaped in _STRING_ESCAPES:
            text = text.replace(raw, escaped)
        return text


#: Dialect instance shared by every renderer in the package.
MYSQL = MySQLDialect()
