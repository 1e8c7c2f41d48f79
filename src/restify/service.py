"""Schema service - the ``Restify`` facade.

``Restify`` resolves the schema document once at construction and keeps
the resulting :class:`~restify.core.schema.ResolvedSchema` for its whole
lifetime. Introspection (:meth:`Restify.collections`,
:meth:`Restify.fields`) reads that schema; table lifecycle
(:meth:`Restify.reset`, :meth:`Restify.sync`) sequences statements from
the :class:`~restify.core.statements.StatementBuilder` through a
connection that each call opens for itself and always closes.

Example::

    from restify import Restify

    service = Restify.from_file("restify.yaml")
    service.collections()          # ['User', 'Profile']
    service.sync()                 # CREATE TABLE IF NOT EXISTS ...
    with service.connect() as conn:
        conn.post("Profile", {"_id": 1, "bio": "hi"})
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

from restify.core.adapters import DatabaseAdapter, get_adapter
from restify.core.config import RestifyConfig, load_config
from restify.core.connection import Connection
from restify.core.logging import LogContext, get_logger
from restify.core.schema import ResolvedSchema, resolve_schema
from restify.core.statements import StatementBuilder

logger = get_logger(__name__)


class Restify:
    """Resolved schema plus the workflows that provision its tables.

    Args:
        config: A :class:`RestifyConfig` or a raw
            ``{database: {...}, schema: {...}}`` mapping.
        adapter: Opens database connections; built from ``config.database``
            when omitted.

    Raises:
        SchemaError: The schema document does not resolve. No service is
            constructed.
    """

    def __init__(
        self,
        config: RestifyConfig | Mapping[str, Any],
        *,
        adapter: DatabaseAdapter | None = None,
    ):
        if not isinstance(config, RestifyConfig):
            config = RestifyConfig.from_mapping(config)
        self._config = config
        self._schema = resolve_schema(config.document)
        self._adapter = adapter or get_adapter(config.database.to_database_config())
        self._statements = StatementBuilder(self._adapter.dialect)

        logger.debug(
            "schema.resolved",
            collections=len(self._schema),
            fields=sum(len(c) for c in self._schema.values()),
        )

    @classmethod
    def from_file(cls, path: Path | str, **kwargs: Any) -> Restify:
        """Build the service from a YAML or JSON config file."""
        return cls(load_config(path), **kwargs)

    # -- Introspection -----------------------------------------------------

    @property
    def config(self) -> RestifyConfig:
        return self._config

    @property
    def schema(self) -> ResolvedSchema:
        return self._schema

    @property
    def statements(self) -> StatementBuilder:
        return self._statements

    @property
    def database(self) -> str:
        return self._adapter.database

    def collections(self) -> list[str]:
        """Collection names, in declaration order."""
        return self._schema.collections()

    def fields(self, collection: str) -> list[str]:
        """Field names of ``collection``.

        Raises:
            UnknownCollectionReference: If the collection does not exist.
        """
        return self._schema.fields(collection)

    # -- Connections -------------------------------------------------------

    def connect(self) -> Connection:
        """Open a new connection bound to this schema; the caller must close it."""
        return self._adapter.connect(self._schema)

    # -- Table lifecycle ---------------------------------------------------

    def statements_for_sync(self, with_columns: bool = False) -> list[str]:
        """DDL that :meth:`sync` executes, in order."""
        if not with_columns:
            return [self._statements.create_table(name) for name in self.collections()]

        return [
            self._statements.set_foreign_key_checks(False),
            *(
                self._statements.create_table(name, self._schema.columns(name))
                for name in self._schema.creation_order()
            ),
            self._statements.set_foreign_key_checks(True),
        ]

    def reset(self) -> list[str]:
        """Drop every table of the configured database.

        Foreign-key checks are suspended while dropping, so tables go in
        catalog order regardless of references between them.

        Returns:
            Names of the dropped tables.

        Raises:
            DatabaseError: A statement failed; the remaining statements are
                skipped and the connection is still closed.
        """
        with LogContext(operation="reset", database=self.database):
            with self.connect() as conn:
                rows = conn.execute(self._statements.list_tables(self.database))
                tables = [_first_value(row) for row in rows]

                conn.execute(self._statements.set_foreign_key_checks(False))
                for table in tables:
                    conn.execute(self._statements.drop_table(table))
                conn.execute(self._statements.set_foreign_key_checks(True))

            logger.info("service.reset", dropped=len(tables))
        return tables

    def sync(self, with_columns: bool = False) -> list[str]:
        """Create the table of every collection (idempotent).

        By default only the identity column is created. With
        ``with_columns`` every field column and foreign key is emitted,
        tables are created referenced-first and foreign-key checks are
        suspended around the whole sequence.

        Returns:
            Collection names in creation order.

        Raises:
            DatabaseError: A statement failed; the connection is still closed.
        """
        statements = self.statements_for_sync(with_columns)
        order = self._schema.creation_order() if with_columns else self.collections()

        with LogContext(operation="sync", database=self.database):
            with self.connect() as conn:
                for sql in statements:
                    conn.execute(sql)

            logger.info("service.sync", tables=len(order), with_columns=with_columns)
        return order


def _first_value(row: Mapping[str, Any]) -> str:
    # information_schema column labels differ in case across MySQL versions
    value = next(iter(row.values()))
    return value.decode() if isinstance(value, bytes | bytearray) else value


__all__ = [
    "Restify",
]
