"""Tests for ``restify.core.adapters``: MySQL adapter and registry."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from restify.core.adapters import (
    DatabaseConfig,
    DatabaseType,
    MySQLAdapter,
    adapter_registry,
    get_adapter,
)
from restify.core.connection import Connection
from restify.core.dialect import MySQLDialect
from restify.core.errors import DatabaseConnectionError


class TestMySQLAdapterInit:
    def test_default_config(self):
        adapter = MySQLAdapter()
        assert adapter.db_type is DatabaseType.MYSQL
        assert adapter.database == ""
        assert isinstance(adapter.dialect, MySQLDialect)

    def test_custom_config(self):
        adapter = MySQLAdapter(
            host="db.example.com",
            port=3307,
            database="shop",
            username="admin",
            password="secret",
            ssl_disabled=True,
        )
        assert adapter.database == "shop"
        assert adapter.config.options == {"ssl_disabled": True}

    def test_from_config(self):
        config = DatabaseConfig(db_type=DatabaseType.MARIADB, database="shop", charset="utf8")
        adapter = MySQLAdapter.from_config(config)
        assert adapter.db_type is DatabaseType.MARIADB
        assert adapter.config.charset == "utf8"


class TestMySQLAdapterConnect:
    @patch("mysql.connector.connect")
    def test_open_connection(self, mock_connect):
        raw = MagicMock()
        mock_connect.return_value = raw

        adapter = MySQLAdapter(host="localhost", database="shop", username="u", password="p")
        assert adapter.open_connection() is raw

        kwargs = mock_connect.call_args.kwargs
        assert kwargs["host"] == "localhost"
        assert kwargs["database"] == "shop"
        assert kwargs["user"] == "u"
        assert kwargs["password"] == "p"
        assert kwargs["autocommit"] is True

    @patch("mysql.connector.connect")
    def test_empty_database_omitted(self, mock_connect):
        MySQLAdapter().open_connection()
        assert mock_connect.call_args.kwargs["database"] is None

    @patch("mysql.connector.connect")
    def test_connect_failure(self, mock_connect):
        import mysql.connector

        mock_connect.side_effect = mysql.connector.Error("Connection refused")

        adapter = MySQLAdapter(host="bad-host", database="shop")
        with pytest.raises(DatabaseConnectionError, match="Failed to connect") as exc_info:
            adapter.open_connection()
        assert exc_info.value.retryable is True

    @patch("mysql.connector.connect")
    def test_connect_wraps_in_connection(self, mock_connect):
        mock_connect.return_value = MagicMock()

        conn = MySQLAdapter(database="shop").connect()
        assert isinstance(conn, Connection)
        assert not conn.closed
        conn.close()
        mock_connect.return_value.close.assert_called_once()

    @patch("mysql.connector.connect")
    def test_each_connect_opens_new_connection(self, mock_connect):
        adapter = MySQLAdapter(database="shop")
        adapter.connect()
        adapter.connect()
        assert mock_connect.call_count == 2


class TestRegistry:
    def test_list_adapters(self):
        assert adapter_registry.list_adapters() == ["mariadb", "mysql"]

    @pytest.mark.parametrize("db_type", [DatabaseType.MYSQL, DatabaseType.MARIADB])
    def test_get_adapter(self, db_type):
        adapter = get_adapter(DatabaseConfig(db_type=db_type, database="shop"))
        assert isinstance(adapter, MySQLAdapter)
        assert adapter.database == "shop"
