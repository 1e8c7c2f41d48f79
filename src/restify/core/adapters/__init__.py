"""Database adapters -- open driver connections for a database vendor.

Architecture::

    DatabaseAdapter (base.py)        Abstract base: dialect + connect()
        |-- MySQLAdapter             mysql.connector

    AdapterRegistry (registry.py)    DatabaseType -> adapter class
    DatabaseConfig (types.py)        Connection parameters
    DatabaseType (types.py)          Enum of supported backends

Guardrails:
    ❌ ``adapter = MySQLAdapter(...)`` in application code
    ✅ ``adapter = get_adapter(settings.to_database_config())``
"""

from .base import DatabaseAdapter
from .mysql import MySQLAdapter
from .registry import AdapterRegistry, adapter_registry, get_adapter
from .types import DatabaseConfig, DatabaseType

__all__ = [
    "DatabaseType",
    "DatabaseConfig",
    "DatabaseAdapter",
    "MySQLAdapter",
    "AdapterRegistry",
    "adapter_registry",
    "get_adapter",
]
