"""Restify Core -- schema resolution and SQL generation primitives.

Architecture::

    Layer 1 -- Types & Errors
        errors.py          Structured error hierarchy (RestifyError, SchemaError)
        relations.py       Relation kinds and their inverse algebra
        protocols.py       DB-API driver protocols
        logging.py         structlog configuration

    Layer 2 -- Schema
        schema.py          FieldDescriptor, ResolvedSchema, resolve_schema()

    Layer 3 -- SQL
        dialect.py         Escaping primitives and column types (MySQL)
        statements.py      StatementBuilder: DDL and parameterized DML

    Layer 4 -- Database
        connection.py      Connection: execute, transactions, CRUD
        adapters/          Driver adapters (MySQL)
        config/            Settings and config-file loading
"""

from restify.core.connection import Connection
from restify.core.dialect import Dialect, MySQLDialect, get_dialect
from restify.core.errors import (
    ConfigError,
    DatabaseError,
    RelationNameConflict,
    RestifyError,
    SchemaError,
    UnknownCollectionReference,
    UnknownRelationKind,
)
from restify.core.relations import Relation, inverse
from restify.core.schema import (
    Collection,
    Column,
    FieldDescriptor,
    ResolvedSchema,
    resolve_schema,
)
from restify.core.statements import Statement, StatementBuilder

__all__ = [
    # Errors
    "RestifyError",
    "SchemaError",
    "UnknownRelationKind",
    "UnknownCollectionReference",
    "RelationNameConflict",
    "ConfigError",
    "DatabaseError",
    # Relations
    "Relation",
    "inverse",
    # Schema
    "FieldDescriptor",
    "Column",
    "Collection",
    "ResolvedSchema",
    "resolve_schema",
    # SQL
    "Dialect",
    "MySQLDialect",
    "get_dialect",
    "Statement",
    "StatementBuilder",
    # Database
    "Connection",
]
