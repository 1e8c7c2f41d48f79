"""
Structural protocols shared across restify.core.

``DriverConnection`` and ``DriverCursor`` describe the subset of the DB-API
2.0 surface the :class:`~restify.core.connection.Connection` wrapper relies
on. ``mysql.connector`` connections satisfy them, and so does any test
double with the same shape.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class DriverCursor(Protocol):
    """DB-API cursor: execute one statement, then read its result set."""

    description: Any
    rowcount: int

    def execute(self, operation: str, params: Any = ...) -> Any:
        ...

    def fetchall(self) -> list[Any]:
        ...

    def close(self) -> Any:
        ...


@runtime_checkable
class DriverConnection(Protocol):
    """DB-API connection owned by exactly one :class:`Connection`."""

    def cursor(self) -> DriverCursor:
        ...

    def commit(self) -> None:
        ...

    def rollback(self) -> None:
        ...

    def close(self) -> None:
        ...


__all__ = [
    "DriverCursor",
    "DriverConnection",
]
