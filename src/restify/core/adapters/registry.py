"""Database adapter registry and factory.

Consumers never hard-code adapter class names: ``get_adapter()`` looks the
database type up in the registry and builds a configured adapter.
"""

from __future__ import annotations

from restify.core.errors import ConfigError

from .base import DatabaseAdapter
from .mysql import MySQLAdapter
from .types import DatabaseConfig


class AdapterRegistry:
    """
    Registry for database adapter classes.

    Pre-registered adapters:
    - ``mysql`` / ``mariadb``: :class:`MySQLAdapter`
    """

    def __init__(self):
        self._factories: dict[str, type[DatabaseAdapter]] = {}
        self._register_defaults()

    def _register_defaults(self) -> None:
        self._factories["mysql"] = MySQLAdapter
        self._factories["mariadb"] = MySQLAdapter  # Alias

    def list_adapters(self) -> list[str]:
        return sorted(self._factories)

    def create(self, config: DatabaseConfig) -> DatabaseAdapter:
        """Create an adapter for ``config.db_type``.

        Raises:
            ConfigError: If no adapter is registered for the type.
        """
        key = config.db_type.value
        if key not in self._factories:
            raise ConfigError(
                f"Unknown database adapter: {key}. Available: {self.list_adapters()}"
            )
        return self._factories[key].from_config(config)


adapter_registry = AdapterRegistry()


def get_adapter(config: DatabaseConfig) -> DatabaseAdapter:
    """Create a database adapter from a :class:`DatabaseConfig`."""
    return adapter_registry.create(config)


__all__ = [
    "AdapterRegistry",
    "adapter_registry",
    "get_adapter",
]
