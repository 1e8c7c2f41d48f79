"""Database adapter base class.

An adapter knows how to open driver connections for one database vendor
and which :class:`~restify.core.dialect.Dialect` escapes SQL for it. It
holds no connection itself: every :meth:`DatabaseAdapter.connect` call
opens a fresh one that the caller owns until it closes it.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from restify.core.connection import Connection
from restify.core.dialect import Dialect, get_dialect
from restify.core.protocols import DriverConnection
from restify.core.schema import ResolvedSchema

from .types import DatabaseConfig, DatabaseType


class DatabaseAdapter(ABC):
    """
    Abstract base class for database adapters.

    Subclasses implement :meth:`open_connection`; everything else is shared.
    """

    def __init__(self, config: DatabaseConfig):
        self._config = config
        self._dialect: Dialect = get_dialect(config.db_type.value)

    @property
    def config(self) -> DatabaseConfig:
        return self._config

    @property
    def dialect(self) -> Dialect:
        """SQL dialect for this adapter's database type."""
        return self._dialect

    @property
    def db_type(self) -> DatabaseType:
        return self._config.db_type

    @property
    def database(self) -> str:
        """Name of the database (schema) connections are opened on."""
        return self._config.database

    @classmethod
    @abstractmethod
    def from_config(cls, config: DatabaseConfig) -> DatabaseAdapter:
        """Build the adapter from a :class:`DatabaseConfig`."""
        ...

    @abstractmethod
    def open_connection(self) -> DriverConnection:
        """Open a new driver connection."""
        ...

    def connect(self, schema: ResolvedSchema | None = None) -> Connection:
        """Open a new :class:`Connection`, bound to ``schema`` for record access."""
        return Connection(self.open_connection(), self._dialect, schema)


__all__ = [
    "DatabaseAdapter",
]
