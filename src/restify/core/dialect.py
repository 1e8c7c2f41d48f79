"""SQL dialect abstraction - escaping primitives and SQL fragments.

The statement builder never interpolates raw text: identifiers go through
``escape_identifier`` and literal values through ``escape_value``. Record
values travel as bound parameters using the dialect's placeholder style.

Architecture::

    StatementBuilder(dialect)
        │  escape_identifier("users")   → `users`
        │  escape_value("shop")         → 'shop'
        │  placeholders(2)              → %s, %s
        │  column_type("string")        → VARCHAR(255)
        ▼
    SQL text + params  →  Connection.execute()

Examples:
    >>> from restify.core.dialect import get_dialect
    >>> d = get_dialect("mysql")
    >>> d.escape_identifier("my`table")
    '`my``table`'
    >>> d.escape_value("it's")
    "'it\\\\'s'"
    >>> d.escape_value(None)
    'NULL'

Guardrails:
    ❌ DON'T: f"DROP TABLE {name};"
    ✅ DO:    f"DROP TABLE {dialect.escape_identifier(name)};"
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Protocol, runtime_checkable

from restify.core.errors import ConfigError, SchemaError


@runtime_checkable
class Dialect(Protocol):
    """SQL dialect contract used by the statement builder."""

    @property
    def name(self) -> str:
        """Human-readable dialect name (e.g. ``'mysql'``)."""
        ...

    def escape_identifier(self, name: str) -> str:
        """Quote a table or column name for safe interpolation."""
        ...

    def escape_value(self, value: Any) -> str:
        """Render a Python value as a SQL literal."""
        ...

    def placeholder(self, index: int) -> str:
        """Single positional placeholder (0-based index)."""
        ...

    def placeholders(self, count: int) -> str:
        """Comma-separated placeholder list."""
        ...

    def column_type(self, type_tag: str) -> str:
        """DDL column type for a schema data-type tag."""
        ...


# Backslash escapes understood by MySQL string literals
_MYSQL_CHAR_ESCAPES = {
    "\0": "\\0",
    "\b": "\\b",
    "\t": "\\t",
    "\n": "\\n",
    "\r": "\\r",
    "\x1a": "\\Z",
    '"': '\\"',
    "'": "\\'",
    "\\": "\\\\",
}

_MYSQL_COLUMN_TYPES = {
    "int": "INTEGER",
    "integer": "INTEGER",
    "bigint": "BIGINT",
    "float": "DOUBLE",
    "double": "DOUBLE",
    "number": "DOUBLE",
    "decimal": "DECIMAL(65, 30)",
    "bool": "BOOLEAN",
    "boolean": "BOOLEAN",
    "string": "VARCHAR(255)",
    "text": "TEXT",
    "date": "DATE",
    "datetime": "DATETIME",
    "timestamp": "TIMESTAMP",
    "json": "JSON",
    "blob": "BLOB",
}


class MySQLDialect:
    """MySQL / MariaDB dialect - backtick identifiers, ``%s`` placeholders.

    Compatible with ``mysql.connector`` (format paramstyle).
    """

    @property
    def name(self) -> str:
        return "mysql"

    def escape_identifier(self, name: str) -> str:
        """Backtick-quote ``name``; dotted names are quoted per part."""
        if not isinstance(name, str) or not name:
            raise SchemaError(f"Invalid identifier: {name!r}")
        return ".".join(f"`{part.replace('`', '``')}`" for part in name.split("."))

    def escape_value(self, value: Any) -> str:
        if value is None:
            return "NULL"
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, float) and not math.isfinite(value):
            raise SchemaError(f"Cannot render non-finite number {value!r} as SQL")
        if isinstance(value, Decimal) and not value.is_finite():
            raise SchemaError(f"Cannot render non-finite number {value!r} as SQL")
        if isinstance(value, int | float | Decimal):
            return str(value)
        if isinstance(value, datetime):
            return self._quote(value.strftime("%Y-%m-%d %H:%M:%S.%f"))
        if isinstance(value, date):
            return self._quote(value.isoformat())
        if isinstance(value, bytes | bytearray):
            return f"X'{bytes(value).hex()}'"
        if isinstance(value, str):
            return self._quote(value)
        if isinstance(value, Mapping):
            raise SchemaError("Cannot render a mapping as a SQL value")
        if isinstance(value, Iterable):
            return ", ".join(self.escape_value(item) for item in value)
        return self._quote(str(value))

    def _quote(self, text: str) -> str:
        return "'" + "".join(_MYSQL_CHAR_ESCAPES.get(ch, ch) for ch in text) + "'"

    def placeholder(self, index: int) -> str:  # noqa: ARG002
        return "%s"

    def placeholders(self, count: int) -> str:
        return ", ".join("%s" for _ in range(count))

    def column_type(self, type_tag: str) -> str:
        try:
            return _MYSQL_COLUMN_TYPES[type_tag.lower()]
        except (KeyError, AttributeError):
            raise SchemaError(
                f"Unknown data type {type_tag!r}. Supported: {sorted(_MYSQL_COLUMN_TYPES)}"
            ) from None


# =========================================================================
# Registry / Factory
# =========================================================================

# Dialects are stateless
_DIALECTS: dict[str, Dialect] = {
    "mysql": MySQLDialect(),
    "mariadb": MySQLDialect(),  # alias
}


def get_dialect(db_type: str) -> Dialect:
    """Get a dialect by database type name.

    Raises:
        ConfigError: If ``db_type`` is not recognised.
    """
    key = db_type.lower() if isinstance(db_type, str) else db_type.value
    if key not in _DIALECTS:
        raise ConfigError(
            f"Unknown dialect '{db_type}'. Supported: {sorted(_DIALECTS)}"
        )
    return _DIALECTS[key]


def register_dialect(name: str, dialect: Dialect) -> None:
    """Register a custom dialect implementation (third-party drivers, test doubles)."""
    _DIALECTS[name.lower()] = dialect


__all__ = [
    "Dialect",
    "MySQLDialect",
    "get_dialect",
    "register_dialect",
]
