"""Literal value nodes.

``Value`` is a tagged union: the tag (:class:`ValueKind`) is fixed when the
node is constructed and rendering dispatches on it through a lookup table,
with a stringify fallback for types the renderer does not know.

Every string that reaches the output goes through
:meth:`~sqlweave.compile.mysql.MySQLDialect.escape_string` first.

Usage::

    Value("O'Reilly").render()        # "'O\\'Reilly'"
    Value([1, "a"]).render()          # "(1, 'a')"
    Value(b"\\x00\\xff").render()  # "X'00ff'"
    Value.secret("pw").render()       # MD5 hex digest, quoted
"""

from __future__ import annotations

import hashlib
import hmac
import math
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Callable

from pydantic import BaseModel, ConfigDict, Field, model_validator

from sqlweave.compile.base import Node
from sqlweave.compile.mysql import MYSQL

# ---------------------------------------------------------------------------
# Hashed secrets
# ---------------------------------------------------------------------------


class HashAlgorithm(str, Enum):
    """Digest used by :class:`HashedSecret`."""

    MD5 = "md5"
    SHA1 = "sha1"
    SHA256 = "sha256"
    SHA512 = "sha512"
    HMAC_SHA256 = "hmac_sha256"


_DIGESTS: dict[HashAlgorithm, Callable[..., Any]] = {
    HashAlgorithm.MD5: hashlib.md5,
    HashAlgorithm.SHA1: hashlib.sha1,
    HashAlgorithm.SHA256: hashlib.sha256,
    HashAlgorithm.SHA512: hashlib.sha512,
}


class HashedSecret(BaseModel):
    """A plaintext that renders as its hex digest.

    Attributes:
        plaintext: The secret to hash.  Hidden from ``repr``.
        algorithm: Digest algorithm; MD5 unless stated otherwise.
        hmac_key: Key for :attr:`HashAlgorithm.HMAC_SHA256`; required for
            that algorithm and ignored by the others.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    plaintext: str = Field(repr=False)
    algorithm: HashAlgorithm = HashAlgorithm.MD5
    hmac_key: str | None = Field(None, repr=False)

    @model_validator(mode="after")
    def _require_hmac_key(self) -> HashedSecret:
        if self.algorithm is HashAlgorithm.HMAC_SHA256 and self.hmac_key is None:
            raise ValueError("hmac_key is required for the HMAC_SHA256 algorithm")
        return self

    def hexdigest(self) -> str:
        """Return the deterministic hex digest of :attr:`plaintext`."""
        data = self.plaintext.encode("utf-8")
        if self.algorithm is HashAlgorithm.HMAC_SHA256:
            key = (self.hmac_key or "").encode("utf-8")
            return hmac.new(key, data, hashlib.sha256).hexdigest()
        return _DIGESTS[self.algorithm](data).hexdigest()


# ---------------------------------------------------------------------------
# Value
# ---------------------------------------------------------------------------


class ValueKind(str, Enum):
    """The tag of a :class:`Value`."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    NULL = "null"
    DATETIME = "datetime"
    DATE = "date"
    BYTES = "bytes"
    LIST = "list"
    SECRET = "secret"
    OTHER = "other"


def classify(data: Any) -> ValueKind:
    """Return the :class:`ValueKind` tag for a Python object."""
    if data is None:
        return ValueKind.NULL
    # bool is a subclass of int; it must be tested first.
    if isinstance(data, bool):
        return ValueKind.BOOLEAN
    if isinstance(data, (int, float, Decimal)):
        return ValueKind.NUMBER
    if isinstance(data, str):
        return ValueKind.STRING
    if isinstance(data, (bytes, bytearray)):
        return ValueKind.BYTES
    # datetime is a subclass of date.
    if isinstance(data, datetime):
        return ValueKind.DATETIME
    if isinstance(data, date):
        return ValueKind.DATE
    if isinstance(data, (list, tuple)):
        return ValueKind.LIST
    if isinstance(data, HashedSecret):
        return ValueKind.SECRET
    return ValueKind.OTHER


@dataclass(frozen=True, init=False)
class Value(Node):
    """An escaped SQL literal.

    Args:
        data: The Python value to render.  Lists and tuples become nested
            values; nodes inside a list (e.g. :class:`Param`) are kept as-is.
        kind: Explicit tag; inferred with :func:`classify` when omitted.

    Raises:
        ValueError: For a NaN or infinite number, which MySQL cannot store.
    """

    data: Any
    kind: ValueKind

    def __init__(self, data: Any = None, kind: ValueKind | None = None) -> None:
        kind = kind or classify(data)
        if kind is ValueKind.NUMBER and not _is_finite(data):
            raise ValueError(f"Cannot render non-finite number {data!r} as SQL.")
        if kind is ValueKind.LIST:
            data = tuple(to_value(item) for item in data)
        object.__setattr__(self, "data", data)
        object.__setattr__(self, "kind", kind)

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------

    @classmethod
    def date(cls, value: date) -> Value:
        """A date-only literal rendered as ``'yyyy-MM-dd'``."""
        if isinstance(value, datetime):
            value = value.date()
        return cls(value, ValueKind.DATE)

    @classmethod
    def datetime(cls, value: datetime) -> Value:
        """A timestamp literal rendered in ISO-8601."""
        return cls(value, ValueKind.DATETIME)

    @classmethod
    def now(cls) -> Value:
        return cls(datetime.now(), ValueKind.DATETIME)

    @classmethod
    def today(cls) -> Value:
        return cls(date.today(), ValueKind.DATE)

    @classmethod
    def secret(
        cls,
        plaintext: str,
        algorithm: HashAlgorithm = HashAlgorithm.MD5,
        hmac_key: str | None = None,
    ) -> Value:
        """A hashed secret rendered as its quoted hex digest."""
        secret = HashedSecret(plaintext=plaintext, algorithm=algorithm, hmac_key=hmac_key)
        return cls(secret, ValueKind.SECRET)

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def render(self) -> str:
        renderer = _RENDERERS.get(self.kind, _render_other)
        return renderer(self.data)


def _render_string(data: str) -> str:
    return MYSQL.string_literal(data)


def _render_number(data: int | float | Decimal) -> str:
    return str(data)


def _is_finite(data: Any) -> bool:
    if isinstance(data, Decimal):
        return data.is_finite()
    if isinstance(data, float):
        return math.isfinite(data)
    return True


def _render_boolean(data: bool) -> str:
    return "true" if data else "false"


def _render_null(data: None) -> str:
    return "NULL"


def _render_datetime(data: datetime) -> str:
    return MYSQL.string_literal(data.isoformat())


def _render_date(data: date) -> str:
    return MYSQL.string_literal(data.strftime("%Y-%m-%d"))


def _render_bytes(data: bytes | bytearray) -> str:
    return f"X'{bytes(data).hex()}'"


def _render_list(data: tuple[Node, ...]) -> str:
    return f"({', '.join(item.render() for item in data)})"


def _render_secret(data: HashedSecret) -> str:
    return MYSQL.string_literal(data.hexdigest())


def _render_other(data: Any) -> str:
    return str(data)


_RENDERERS: dict[ValueKind, Callable[[Any], str]] = {
    ValueKind.STRING: _render_string,
    ValueKind.NUMBER: _render_number,
    ValueKind.BOOLEAN: _render_boolean,
    ValueKind.NULL: _render_null,
    ValueKind.DATETIME: _render_datetime,
    ValueKind.DATE: _render_date,
    ValueKind.BYTES: _render_bytes,
    ValueKind.LIST: _render_list,
    ValueKind.SECRET: _render_secret,
    ValueKind.OTHER: _render_other,
}


# ---------------------------------------------------------------------------
# Value-like nodes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Param(Node):
    """A ``{name}`` marker resolved by :meth:`QueryBuilder.add_param`."""

    name: str

    def render(self) -> str:
        return f"{{{self.name}}}"


@dataclass(frozen=True)
class Null(Node):
    """The ``NULL`` keyword."""

    def render(self) -> str:
        return "NULL"


@dataclass(frozen=True)
class Raw(Node):
    """SQL text emitted verbatim.  Never pass user input here."""

    sql: str

    def render(self) -> str:
        return self.sql


@dataclass(frozen=True)
class Like(Node):
    """A LIKE pattern built from literal text.

    The text is escaped as a string, its ``%`` and ``_`` wildcards are
    escaped, and ``%`` is added on the requested sides.
    """

    text: str
    left: bool = True
    right: bool = True

    def render(self) -> str:
        body = MYSQL.escape_string(self.text).replace("%", "\\%").replace("_", "\\_")
        if self.left:
            body = f"%{body}"
        if self.right:
            body = f"{body}%"
        return f"'{body}'"


@dataclass(frozen=True, init=False)
class Range(Node):
    """The ``low AND high`` operand of BETWEEN / NOT BETWEEN."""

    low: Node
    high: Node

    def __init__(self, low: Any, high: Any) -> None:
        object.__setattr__(self, "low", to_value(low))
        object.__setattr__(self, "high", to_value(high))

    def render(self) -> str:
        return f"{self.low.render()} AND {self.high.render()}"


def to_value(v: Any) -> Node:
    """Return ``v`` unchanged when it is a node, else wrap it in :class:`Value`."""
    if isinstance(v, Node):
        return v
    return Value(v)
