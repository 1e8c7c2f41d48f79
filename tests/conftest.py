"""
Shared pytest fixtures for restify tests.

This module provides:
- Sample schema documents
- A recording DB-API driver double (cursor + connection)
- A database adapter that hands out the recording driver
- A pass-through dialect that leaves bare identifiers unchanged
"""

from __future__ import annotations

import os
from collections.abc import Callable
from typing import Any

import pytest

from restify.core.adapters import DatabaseAdapter, DatabaseConfig
from restify.core.dialect import MySQLDialect


# =============================================================================
# Schema documents
# =============================================================================


@pytest.fixture
def user_profile_document() -> dict[str, Any]:
    return {
        "User": {
            "name": {"type": "string"},
            "profile": {"type": "Profile", "relation": "OneToOne", "as": "owner"},
        },
        "Profile": {"bio": {"type": "string"}},
    }


@pytest.fixture
def shop_document() -> dict[str, Any]:
    """Every relation kind, with ``Order`` declared before the tables it references."""
    return {
        "Order": {
            "total": {"type": "decimal", "nullable": False},
            "customer": {"type": "Customer", "relation": "ManyToOne", "as": "orders"},
        },
        "Customer": {
            "email": {"type": "string", "nullable": False},
            "account": {"type": "Account", "relation": "OneToOne", "as": "holder"},
            "tags": {"type": "Tag", "relation": "ManyToMany", "as": "customers"},
        },
        "Account": {"balance": {"type": "decimal"}},
        "Tag": {"label": {"type": "string"}},
        "Warehouse": {
            "items": {"type": "Item", "relation": "OneToMany", "as": "warehouse"},
        },
        "Item": {"sku": {"type": "string"}},
    }


# =============================================================================
# Driver doubles
# =============================================================================


class FakeCursor:
    """DB-API cursor recording statements against its parent connection."""

    def __init__(self, conn: FakeDriverConnection):
        self._conn = conn
        self.description: Any = None
        self.rowcount = -1
        self._rows: list[tuple[Any, ...]] = []
        self.closed = False

    def execute(self, operation: str, params: Any = None) -> None:
        self._conn.executed.append((operation, params))
        if self._conn.fail_on is not None and self._conn.fail_on(operation):
            raise RuntimeError(f"boom: {operation}")
        columns, rows = self._conn.results.get(operation, (None, []))
        self.description = [(name,) for name in columns] if columns else None
        self._rows = list(rows)
        self.rowcount = self._conn.rowcount

    def fetchall(self) -> list[tuple[Any, ...]]:
        return self._rows

    def close(self) -> None:
        self.closed = True


class FakeDriverConnection:
    """DB-API connection double.

    ``results`` maps SQL text to ``(column_names, rows)``. ``fail_on`` is a
    predicate over SQL text that makes ``execute`` raise.
    """

    def __init__(self) -> None:
        self.executed: list[tuple[str, Any]] = []
        self.results: dict[str, tuple[list[str], list[tuple[Any, ...]]]] = {}
        self.fail_on: Callable[[str], bool] | None = None
        self.rowcount = 1
        self.commits = 0
        self.rollbacks = 0
        self.closed = False
        self.fail_close = False

    @property
    def statements(self) -> list[str]:
        return [sql for sql, _ in self.executed]

    def cursor(self) -> FakeCursor:
        return FakeCursor(self)

    def commit(self) -> None:
        self.commits += 1

    def rollback(self) -> None:
        self.rollbacks += 1

    def close(self) -> None:
        if self.fail_close:
            raise RuntimeError("close failed")
        self.closed = True


class FakeAdapter(DatabaseAdapter):
    """Adapter handing out :class:`FakeDriverConnection` instances."""

    def __init__(self, config: DatabaseConfig | None = None):
        super().__init__(config or DatabaseConfig(database="shop"))
        self.driver = FakeDriverConnection()
        self.opened = 0

    @classmethod
    def from_config(cls, config: DatabaseConfig) -> FakeAdapter:
        return cls(config)

    def open_connection(self) -> FakeDriverConnection:
        self.opened += 1
        return self.driver


@pytest.fixture
def driver() -> FakeDriverConnection:
    return FakeDriverConnection()


@pytest.fixture
def fake_adapter() -> FakeAdapter:
    return FakeAdapter()


# =============================================================================
# Dialects
# =============================================================================


class BareDialect(MySQLDialect):
    """MySQL dialect whose identifier escaping leaves bare words unchanged."""

    def escape_identifier(self, name: str) -> str:
        return name


@pytest.fixture
def bare_dialect() -> BareDialect:
    return BareDialect()


@pytest.fixture
def mysql_dialect() -> MySQLDialect:
    return MySQLDialect()


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    """Keep RESTIFY_* variables and a stray .env file out of every test."""
    for key in list(os.environ):
        if key.startswith("RESTIFY_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
