"""
Validated settings for Restify.

``DatabaseSettings`` reads ``RESTIFY_DB_*`` environment variables and
``.env`` files; values given explicitly (from a config file) win over the
environment. ``RestifyConfig`` pairs the database settings with the raw
schema document.

Tags:
    restify, configuration, settings, pydantic, environment
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from restify.core.adapters.types import DatabaseConfig, DatabaseType
from restify.core.errors import ConfigError


class DatabaseSettings(BaseSettings):
    """Connection settings (``RESTIFY_DB_HOST``, ``RESTIFY_DB_PASSWORD``, ...)."""

    model_config = SettingsConfigDict(
        env_prefix="RESTIFY_DB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Server ───────────────────────────────────────────────────
    type: DatabaseType = Field(default=DatabaseType.MYSQL)
    host: str = "localhost"
    port: int = 3306

    # ── Credentials ──────────────────────────────────────────────
    user: str | None = None
    password: str | None = None

    # ── Database ─────────────────────────────────────────────────
    db: str = Field(default="", description="Database whose tables Restify manages")
    charset: str = "utf8mb4"
    connect_timeout: int = 10

    def to_database_config(self) -> DatabaseConfig:
        return DatabaseConfig(
            db_type=self.type,
            host=self.host,
            port=self.port,
            database=self.db,
            username=self.user,
            password=self.password,
            charset=self.charset,
            connect_timeout=self.connect_timeout,
        )


class RestifyConfig(BaseModel):
    """Database settings plus the declarative schema document."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    document: dict[str, Any] = Field(
        default_factory=dict,
        alias="schema",
    )

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> RestifyConfig:
        """Build from a ``{database: {...}, schema: {...}}`` mapping.

        ``pass`` is accepted as an alias of ``password``. Keys missing from
        the ``database`` section fall back to the environment.
        """
        section = dict(data.get("database") or {})
        if "pass" in section:
            section.setdefault("password", section.pop("pass"))
        try:
            return cls(
                database=DatabaseSettings(**section),
                document=data.get("schema") or {},
            )
        except PydanticValidationError as e:
            raise ConfigError(f"Invalid configuration: {e}", cause=e) from e


__all__ = [
    "DatabaseSettings",
    "RestifyConfig",
]
