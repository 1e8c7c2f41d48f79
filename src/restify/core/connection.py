"""Database connection - statement execution, transactions and record access.

A :class:`Connection` owns one driver connection for its whole lifetime.
It is created per logical operation (``Restify.connect()``) and must be
released with :meth:`Connection.close`, usually through the context-manager
protocol::

    with service.connect() as conn:
        conn.execute("SET FOREIGN_KEY_CHECKS=0;")
        ...
    # closed here, even if a statement failed

Every executed statement is logged at debug level (``sql.execute``).
Driver failures surface as :class:`~restify.core.errors.QueryError` with
the driver exception chained.

Record access maps field names of the resolved schema onto table columns:
``_id`` is stored in ``id`` and foreign-key relation fields in
``<field>_id``::

    with service.connect() as conn:
        with conn.transaction():
            conn.post("Profile", {"_id": 1, "bio": "hi"})
            conn.post("User", {"_id": 7, "name": "ada", "profile": 1})
        conn.get("User", 7)
        # [{'_id': 7, 'name': 'ada', 'profile': 1}]
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping, Sequence
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any

from restify.core.dialect import Dialect
from restify.core.errors import DatabaseError, QueryError, RestifyError, SchemaError
from restify.core.logging import get_logger
from restify.core.protocols import DriverConnection
from restify.core.schema import IDENTITY_COLUMN, IDENTITY_FIELD, ResolvedSchema
from restify.core.statements import Statement, StatementBuilder

logger = get_logger(__name__)


@dataclass
class QueryResult:
    """Outcome of one executed statement."""

    rows: list[dict[str, Any]] = field(default_factory=list)
    rowcount: int = -1


def _log_statement(sql: str) -> None:
    try:
        logger.debug("sql.execute", statement=sql)
    except Exception:  # noqa: BLE001
        pass


class Connection:
    """One open database connection bound to a dialect and, optionally, a schema."""

    def __init__(
        self,
        raw: DriverConnection,
        dialect: Dialect,
        schema: ResolvedSchema | None = None,
    ):
        self._raw: DriverConnection | None = raw
        self._dialect = dialect
        self._builder = StatementBuilder(dialect)
        self._schema = schema

    @property
    def closed(self) -> bool:
        return self._raw is None

    @property
    def statements(self) -> StatementBuilder:
        return self._builder

    # -- Escaping primitives ----------------------------------------------

    def escape_identifier(self, name: str) -> str:
        return self._dialect.escape_identifier(name)

    def escape_value(self, value: Any) -> str:
        return self._dialect.escape_value(value)

    # -- Execution ---------------------------------------------------------

    def execute(self, sql: str, params: Sequence[Any] = ()) -> list[dict[str, Any]]:
        """Execute one statement and return its rows (empty if it has no result set).

        Raises:
            QueryError: The driver rejected the statement.
            DatabaseError: The connection is already closed.
        """
        return self._run(sql, params).rows

    def _run(self, sql: str, params: Sequence[Any] = ()) -> QueryResult:
        raw = self._require_open()
        _log_statement(sql)

        cursor = None
        try:
            cursor = raw.cursor()
            if params:
                cursor.execute(sql, tuple(params))
            else:
                cursor.execute(sql)

            rows: list[dict[str, Any]] = []
            if cursor.description:
                columns = [desc[0] for desc in cursor.description]
                rows = [dict(zip(columns, row, strict=False)) for row in cursor.fetchall()]

            return QueryResult(
                rows=rows,
                rowcount=cursor.rowcount,
            )
        except Exception as e:
            raise QueryError(f"Statement failed: {e}", cause=e).with_context(
                statement=sql
            ) from e
        finally:
            if cursor is not None:
                cursor.close()

    def _run_statement(self, statement: Statement) -> QueryResult:
        return self._run(statement.sql, statement.params)

    def _require_open(self) -> DriverConnection:
        if self._raw is None:
            raise DatabaseError("Connection is closed")
        return self._raw

    # -- Lifecycle ---------------------------------------------------------

    def close(self) -> None:
        """Release the driver connection. Closing twice is a no-op.

        Raises:
            DatabaseError: The driver failed to close the connection.
        """
        raw, self._raw = self._raw, None
        if raw is None:
            return
        try:
            raw.close()
        except Exception as e:
            raise DatabaseError(f"Failed to close connection: {e}", cause=e) from e

    def __enter__(self) -> Connection:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        try:
            self.close()
        except DatabaseError as e:
            if exc_type is None:
                raise
            # The body's exception wins over the close failure
            logger.warning("connection.close_failed", error=str(e))

    # -- Transactions ------------------------------------------------------

    def begin(self) -> None:
        self.execute(self._builder.begin_transaction())

    def commit(self) -> None:
        raw = self._require_open()
        try:
            raw.commit()
        except Exception as e:
            raise QueryError(f"Commit failed: {e}", cause=e) from e

    def rollback(self) -> None:
        raw = self._require_open()
        try:
            raw.rollback()
        except Exception as e:
            raise QueryError(f"Rollback failed: {e}", cause=e) from e

    @contextmanager
    def transaction(self) -> Iterator[Connection]:
        """Commit on success; roll back and re-raise on failure."""
        self.begin()
        try:
            yield self
        except Exception:
            self.rollback()
            raise
        self.commit()

    # -- Records -----------------------------------------------------------

    def post(self, collection: str, item: Mapping[str, Any]) -> Any:
        """Insert a record and return its ``_id``.

        Tables carry no generated key, so the item must supply ``_id``.

        Raises:
            SchemaError: The item has no ``_id`` or names an unstored field.
        """
        values = self._to_columns(collection, item)
        if values.get(IDENTITY_COLUMN) is None:
            raise SchemaError(
                f"Record for {collection!r} requires an {IDENTITY_FIELD!r} value"
            ).with_context(collection=collection, field=IDENTITY_FIELD)
        self._run_statement(self._builder.insert(collection, values))
        return values[IDENTITY_COLUMN]

    def get(
        self,
        collection: str,
        record_id: Any = None,
        where: Mapping[str, Any] | None = None,
    ) -> list[dict[str, Any]]:
        """Records of ``collection``, optionally filtered by id and field equality."""
        filters = self._to_columns(collection, where or {})
        if record_id is not None:
            filters[IDENTITY_COLUMN] = record_id
        result = self._run_statement(self._builder.select(collection, filters))
        return [self._to_record(collection, row) for row in result.rows]

    def put(self, collection: str, record_id: Any, changes: Mapping[str, Any]) -> int:
        """Update fields of one record; returns the affected row count."""
        values = self._to_columns(collection, changes)
        result = self._run_statement(self._builder.update(collection, record_id, values))
        return result.rowcount

    def delete(self, collection: str, record_id: Any) -> int:
        """Delete one record; returns the affected row count."""
        self._require_schema().collection(collection)
        result = self._run_statement(self._builder.delete(collection, record_id))
        return result.rowcount

    def _require_schema(self) -> ResolvedSchema:
        if self._schema is None:
            raise RestifyError("Record access requires a resolved schema")
        return self._schema

    def _to_columns(self, collection: str, item: Mapping[str, Any]) -> dict[str, Any]:
        schema = self._require_schema()
        schema.collection(collection)
        return {schema.column_name(collection, name): value for name, value in item.items()}

    def _to_record(self, collection: str, row: Mapping[str, Any]) -> dict[str, Any]:
        fields = {column.name: column.field for column in self._require_schema().columns(collection)}
        fields[IDENTITY_COLUMN] = IDENTITY_FIELD
        return {fields.get(column, column): value for column, value in row.items()}


__all__ = [
    "Connection",
    "QueryResult",
]
