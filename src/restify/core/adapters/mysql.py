"""MySQL database adapter.

Uses ``mysql.connector`` from the ``mysql-connector-python`` package.
MySQL uses **format** (``%s``) placeholder style.

Connections open with ``autocommit`` enabled so DDL and single statements
take effect immediately; :meth:`Connection.transaction` groups statements
explicitly with ``START TRANSACTION``.
"""

from __future__ import annotations

from typing import Any

import mysql.connector

from restify.core.errors import DatabaseConnectionError
from restify.core.logging import get_logger
from restify.core.protocols import DriverConnection

from .base import DatabaseAdapter
from .types import DatabaseConfig, DatabaseType

logger = get_logger(__name__)


class MySQLAdapter(DatabaseAdapter):
    """MySQL / MariaDB database adapter (one driver connection per ``connect()``)."""

    def __init__(
        self,
        host: str = "localhost",
        port: int = 3306,
        database: str = "",
        username: str | None = None,
        password: str | None = None,
        *,
        charset: str = "utf8mb4",
        connect_timeout: int = 10,
        db_type: DatabaseType = DatabaseType.MYSQL,
        **kwargs: Any,
    ):
        config = DatabaseConfig(
            db_type=db_type,
            host=host,
            port=port,
            database=database,
            username=username,
            password=password,
            charset=charset,
            connect_timeout=connect_timeout,
            options=kwargs,
        )
        super().__init__(config)

    @classmethod
    def from_config(cls, config: DatabaseConfig) -> MySQLAdapter:
        return cls(
            host=config.host,
            port=config.port,
            database=config.database,
            username=config.username,
            password=config.password,
            charset=config.charset,
            connect_timeout=config.connect_timeout,
            db_type=config.db_type,
            **config.options,
        )

    def open_connection(self) -> DriverConnection:
        """Connect to the MySQL server.

        Raises:
            DatabaseConnectionError: The server could not be reached or
                rejected the credentials.
        """
        try:
            conn = mysql.connector.connect(
                host=self._config.host,
                port=self._config.port,
                database=self._config.database or None,
                user=self._config.username,
                password=self._config.password or "",
                charset=self._config.charset,
                connect_timeout=self._config.connect_timeout,
                autocommit=True,
                **self._config.options,
            )
        except mysql.connector.Error as e:
            raise DatabaseConnectionError(
                f"Failed to connect to MySQL: {e}",
                cause=e,
            ) from e

        logger.debug("mysql.connected", url=self._config.to_connection_string())
        return conn


__all__ = [
    "MySQLAdapter",
]
