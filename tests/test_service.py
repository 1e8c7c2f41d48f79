"""Tests for the ``Restify`` service facade."""

from __future__ import annotations

from pathlib import Path

import pytest

from restify import Restify
from restify.core.config import RestifyConfig
from restify.core.errors import (
    DatabaseError,
    QueryError,
    RelationNameConflict,
    UnknownCollectionReference,
)

LIST_TABLES = (
    "SELECT table_name FROM information_schema.tables WHERE table_schema='shop';"
)


@pytest.fixture
def service(user_profile_document, fake_adapter) -> Restify:
    return Restify({"schema": user_profile_document}, adapter=fake_adapter)


@pytest.fixture
def driver(fake_adapter):
    return fake_adapter.driver


class TestConstruction:
    def test_from_mapping(self, user_profile_document):
        service = Restify({"database": {"db": "shop"}, "schema": user_profile_document})
        assert isinstance(service.config, RestifyConfig)
        assert service.database == "shop"

    def test_default_adapter_is_mysql(self, user_profile_document):
        service = Restify({"schema": user_profile_document})
        assert service.statements.dialect.name == "mysql"

    def test_from_config_object(self, user_profile_document, fake_adapter):
        config = RestifyConfig.from_mapping({"schema": user_profile_document})
        assert Restify(config, adapter=fake_adapter).config is config

    def test_unresolvable_schema_aborts(self, fake_adapter):
        doc = {"User": {"team": {"type": "Team", "relation": "ManyToOne", "as": "members"}}}
        with pytest.raises(UnknownCollectionReference):
            Restify({"schema": doc}, adapter=fake_adapter)
        assert fake_adapter.opened == 0

    def test_name_conflict_aborts(self, fake_adapter):
        doc = {
            "User": {"profile": {"type": "Profile", "relation": "OneToOne", "as": "bio"}},
            "Profile": {"bio": {"type": "string"}},
        }
        with pytest.raises(RelationNameConflict):
            Restify({"schema": doc}, adapter=fake_adapter)

    def test_from_file(self, tmp_path: Path, fake_adapter):
        path = tmp_path / "restify.yaml"
        path.write_text("schema:\n  User:\n    name: {type: string}\n")
        service = Restify.from_file(path, adapter=fake_adapter)
        assert service.collections() == ["User"]


class TestIntrospection:
    def test_collections(self, service):
        assert service.collections() == ["User", "Profile"]

    def test_fields(self, service):
        assert service.fields("User") == ["_id", "name", "profile"]
        assert service.fields("Profile") == ["_id", "bio", "owner"]

    def test_fields_unknown(self, service):
        with pytest.raises(UnknownCollectionReference):
            service.fields("NoSuchCollection")

    def test_schema(self, service):
        assert service.schema["Profile"]["owner"].type == "User"


class TestSync:
    def test_identity_only(self, service, driver):
        assert service.sync() == ["User", "Profile"]
        assert driver.statements == [
            "CREATE TABLE IF NOT EXISTS `User` (id INTEGER, PRIMARY KEY(id));",
            "CREATE TABLE IF NOT EXISTS `Profile` (id INTEGER, PRIMARY KEY(id));",
        ]
        assert driver.closed

    def test_with_columns(self, service, driver):
        assert service.sync(with_columns=True) == ["Profile", "User"]
        assert driver.statements == [
            "SET FOREIGN_KEY_CHECKS=0;",
            "CREATE TABLE IF NOT EXISTS `Profile` "
            "(id INTEGER, `bio` VARCHAR(255), PRIMARY KEY(id));",
            "CREATE TABLE IF NOT EXISTS `User` "
            "(id INTEGER, `name` VARCHAR(255), `profile_id` INTEGER, PRIMARY KEY(id), "
            "FOREIGN KEY(`profile_id`) REFERENCES `Profile`(id));",
            "SET FOREIGN_KEY_CHECKS=1;",
        ]

    def test_statements_for_sync_match_execution(self, service, driver):
        expected = service.statements_for_sync(with_columns=True)
        service.sync(with_columns=True)
        assert driver.statements == expected

    def test_statements_for_sync_opens_no_connection(self, service, fake_adapter):
        service.statements_for_sync()
        assert fake_adapter.opened == 0

    def test_failure_closes_connection(self, service, driver):
        driver.fail_on = lambda sql: "`User`" in sql
        with pytest.raises(QueryError):
            service.sync()
        assert driver.statements == [
            "CREATE TABLE IF NOT EXISTS `User` (id INTEGER, PRIMARY KEY(id));"
        ]
        assert driver.closed

    def test_one_connection_per_call(self, service, fake_adapter):
        service.sync()
        service.sync()
        assert fake_adapter.opened == 2


class TestReset:
    def test_drops_listed_tables(self, service, driver):
        driver.results[LIST_TABLES] = (["TABLE_NAME"], [("User",), ("Profile",)])
        assert service.reset() == ["User", "Profile"]
        assert driver.statements == [
            LIST_TABLES,
            "SET FOREIGN_KEY_CHECKS=0;",
            "DROP TABLE `User`;",
            "DROP TABLE `Profile`;",
            "SET FOREIGN_KEY_CHECKS=1;",
        ]
        assert driver.closed

    def test_lowercase_column_label_and_bytes(self, service, driver):
        driver.results[LIST_TABLES] = (["table_name"], [(b"orders",)])
        assert service.reset() == ["orders"]
        assert "DROP TABLE `orders`;" in driver.statements

    def test_empty_database(self, service, driver):
        assert service.reset() == []
        assert driver.statements == [
            LIST_TABLES,
            "SET FOREIGN_KEY_CHECKS=0;",
            "SET FOREIGN_KEY_CHECKS=1;",
        ]

    def test_failure_aborts_remaining_and_closes(self, service, driver):
        driver.results[LIST_TABLES] = (["TABLE_NAME"], [("User",), ("Profile",)])
        driver.fail_on = lambda sql: sql == "DROP TABLE `User`;"
        with pytest.raises(DatabaseError):
            service.reset()
        assert driver.statements[-1] == "DROP TABLE `User`;"
        assert "DROP TABLE `Profile`;" not in driver.statements
        assert driver.closed


class TestConnect:
    def test_connection_bound_to_schema(self, service, driver):
        with service.connect() as conn:
            conn.post("User", {"_id": 1, "profile": 2})
        assert driver.executed == [
            ("INSERT INTO `User` (`id`, `profile_id`) VALUES (%s, %s);", (1, 2))
        ]
        assert driver.closed

