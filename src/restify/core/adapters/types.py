"""Database types and configuration."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class DatabaseType(str, Enum):
    """Supported database types."""

    MYSQL = "mysql"
    MARIADB = "mariadb"


@dataclass
class DatabaseConfig:
    """
    Configuration for database connection.

    ``database`` is also the schema whose tables ``Restify.reset()`` lists.
    """

    db_type: DatabaseType = DatabaseType.MYSQL

    host: str = "localhost"
    port: int = 3306
    database: str = ""
    username: str | None = None
    password: str | None = None

    charset: str = "utf8mb4"
    connect_timeout: int = 10

    # Extra options (driver-specific)
    options: dict[str, Any] = field(default_factory=dict)

    def to_connection_string(self) -> str:
        """Connection URL with the password masked, for logs and CLI output."""
        auth = f"{self.username}:***@" if self.username else ""
        return f"{self.db_type.value}://{auth}{self.host}:{self.port}/{self.database}"


__all__ = [
    "DatabaseType",
    "DatabaseConfig",
]
