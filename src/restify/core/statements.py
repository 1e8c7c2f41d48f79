"""SQL statement generation for table lifecycle and record access.

Every function is pure: it takes already-resolved names and values and
returns SQL text. Table, column and database names are escaped with the
dialect's identifier primitive; literal values are escaped with its value
primitive; record values are passed as bound parameters.

DDL shapes::

    CREATE TABLE IF NOT EXISTS <t> (id INTEGER, PRIMARY KEY(id));
    SELECT table_name FROM information_schema.tables WHERE table_schema=<db>;
    SET FOREIGN_KEY_CHECKS=<0|1>;
    DROP TABLE <t>;

DML statements are returned as :class:`Statement` (SQL text plus params)::

    >>> builder = StatementBuilder(MySQLDialect())
    >>> builder.insert("users", {"id": 1, "name": "ada"})
    Statement(sql='INSERT INTO `users` (`id`, `name`) VALUES (%s, %s);', params=(1, 'ada'))
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from restify.core.dialect import Dialect
from restify.core.errors import SchemaError
from restify.core.schema import IDENTITY_COLUMN, Column


@dataclass(frozen=True)
class Statement:
    """SQL text with its bound parameters."""

    sql: str
    params: tuple[Any, ...] = ()


class StatementBuilder:
    """Builds escaped SQL for one dialect."""

    def __init__(self, dialect: Dialect):
        self._dialect = dialect

    @property
    def dialect(self) -> Dialect:
        return self._dialect

    def _id(self, name: str) -> str:
        return self._dialect.escape_identifier(name)

    # -- DDL ---------------------------------------------------------------

    def create_table(self, table: str, columns: Sequence[Column] | None = None) -> str:
        """Idempotent ``CREATE TABLE IF NOT EXISTS``.

        Without ``columns`` only the identity column is created. With
        ``columns`` every column is emitted after ``id``, followed by the
        primary key and one foreign key per referencing column.
        """
        parts = [f"{IDENTITY_COLUMN} INTEGER"]
        foreign_keys = []

        for column in columns or ():
            definition = f"{self._id(column.name)} {self._dialect.column_type(column.type)}"
            if not column.nullable:
                definition += " NOT NULL"
            parts.append(definition)
            if column.references is not None:
                foreign_keys.append(
                    f"FOREIGN KEY({self._id(column.name)}) "
                    f"REFERENCES {self._id(column.references)}({IDENTITY_COLUMN})"
                )

        parts.append(f"PRIMARY KEY({IDENTITY_COLUMN})")
        parts.extend(foreign_keys)
        return f"CREATE TABLE IF NOT EXISTS {self._id(table)} ({', '.join(parts)});"

    def list_tables(self, database: str) -> str:
        """Catalog query returning one ``table_name`` row per table of ``database``."""
        return (
            "SELECT table_name "
            "FROM information_schema.tables "
            f"WHERE table_schema={self._dialect.escape_value(database)};"
        )

    def set_foreign_key_checks(self, enabled: bool) -> str:
        """Session-scoped toggle of referential-integrity enforcement."""
        return f"SET FOREIGN_KEY_CHECKS={self._dialect.escape_value(1 if enabled else 0)};"

    def drop_table(self, table: str) -> str:
        """Unconditional ``DROP TABLE``; fails at execution if the table is missing."""
        return f"DROP TABLE {self._id(table)};"

    # -- Transactions ------------------------------------------------------

    def begin_transaction(self) -> str:
        return "START TRANSACTION;"

    # -- DML ---------------------------------------------------------------

    def insert(self, table: str, values: Mapping[str, Any]) -> Statement:
        """``INSERT`` one row; ``values`` maps column names to values."""
        if not values:
            return Statement(f"INSERT INTO {self._id(table)} () VALUES ();")
        columns = ", ".join(self._id(column) for column in values)
        placeholders = self._dialect.placeholders(len(values))
        return Statement(
            f"INSERT INTO {self._id(table)} ({columns}) VALUES ({placeholders});",
            tuple(values.values()),
        )

    def select(
        self,
        table: str,
        where: Mapping[str, Any] | None = None,
    ) -> Statement:
        """``SELECT *`` filtered by column equality, ordered by ``id``."""
        sql = f"SELECT * FROM {self._id(table)}"
        params: tuple[Any, ...] = ()
        if where:
            conditions = []
            for column, value in where.items():
                if value is None:
                    conditions.append(f"{self._id(column)} IS NULL")
                else:
                    conditions.append(
                        f"{self._id(column)} = {self._dialect.placeholder(len(params))}"
                    )
                    params += (value,)
            sql += f" WHERE {' AND '.join(conditions)}"
        return Statement(f"{sql} ORDER BY {IDENTITY_COLUMN};", params)

    def update(self, table: str, record_id: Any, values: Mapping[str, Any]) -> Statement:
        """``UPDATE`` the row with the given id."""
        if not values:
            raise SchemaError(f"Nothing to update in {table!r}").with_context(table=table)
        assignments = ", ".join(
            f"{self._id(column)} = {self._dialect.placeholder(i)}"
            for i, column in enumerate(values)
        )
        key = self._dialect.placeholder(len(values))
        return Statement(
            f"UPDATE {self._id(table)} SET {assignments} WHERE {IDENTITY_COLUMN} = {key};",
            (*values.values(), record_id),
        )

    def delete(self, table: str, record_id: Any) -> Statement:
        """``DELETE`` the row with the given id."""
        return Statement(
            f"DELETE FROM {self._id(table)} "
            f"WHERE {IDENTITY_COLUMN} = {self._dialect.placeholder(0)};",
            (record_id,),
        )


__all__ = [
    "Statement",
    "StatementBuilder",
]
