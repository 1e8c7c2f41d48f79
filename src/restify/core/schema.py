"""Schema resolution - from a one-sided declaration to a bidirectional graph.

A schema document maps collection names to field declarations::

    {
        "User": {
            "name": {"type": "string"},
            "profile": {"type": "Profile", "relation": "OneToOne", "as": "owner"},
        },
        "Profile": {"bio": {"type": "string"}},
    }

Only the declaring (*master*) side names a relation. :func:`resolve_schema`
adds the implicit ``_id`` identity field to every collection and
materializes the inverse of every master field on its target collection,
producing an immutable :class:`ResolvedSchema`::

    Profile.owner == FieldDescriptor(
        type="User", nullable=False, relation=Relation.ONE_TO_ONE, as_="profile"
    )

Resolution runs in two passes. The first pass normalizes every declared
field of every collection. The second pass computes all inverse fields into
a separate accumulator, which is merged into the final structure once the
whole document has been checked. A failing document raises before anything
is returned.

The resolved schema also knows which table columns back each collection
(:meth:`ResolvedSchema.columns`) and a table creation order that puts
referenced tables first (:meth:`ResolvedSchema.creation_order`).
"""

from __future__ import annotations

import copy
from collections import defaultdict, deque
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from restify.core.errors import (
    RelationNameConflict,
    SchemaError,
    UnknownCollectionReference,
)
from restify.core.relations import Relation, holds_foreign_key, inverse, parse_relation

IDENTITY_FIELD = "_id"
IDENTITY_COLUMN = "id"
IDENTITY_TYPE = "integer"


class FieldDescriptor(BaseModel):
    """A single field of a collection.

    Attributes:
        type: Primitive data-type tag (``"string"``), or the related
            collection name when ``relation`` is set.
        nullable: Whether the field may be NULL.
        relation: Relation kind, ``None`` for plain data fields.
        as_: Name of the field on the related collection (document key ``as``).
        master: True when the relation was declared on this side.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    type: str
    nullable: bool = True
    relation: Relation | None = None
    as_: str | None = Field(default=None, alias="as")
    master: bool = False

    @property
    def is_relation(self) -> bool:
        return self.relation is not None

    def to_dict(self) -> dict[str, Any]:
        """Declaration-shaped dict (``as`` key, relation as its tag)."""
        data = self.model_dump(by_alias=True, mode="json")
        if self.relation is None:
            data.pop("relation")
            data.pop("as")
        return data


IDENTITY = FieldDescriptor(type=IDENTITY_TYPE, nullable=False)


@dataclass(frozen=True)
class Column:
    """A table column backing one field of a collection."""

    name: str
    type: str
    nullable: bool
    field: str
    references: str | None = None


class Collection(Mapping[str, FieldDescriptor]):
    """Read-only, ordered mapping of field name to :class:`FieldDescriptor`."""

    def __init__(self, name: str, fields: Mapping[str, FieldDescriptor]):
        self._name = name
        self._fields = MappingProxyType(dict(fields))

    @property
    def name(self) -> str:
        return self._name

    def __getitem__(self, key: str) -> FieldDescriptor:
        return self._fields[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Collection):
            return self._name == other._name and dict(self._fields) == dict(other._fields)
        return NotImplemented

    def __repr__(self) -> str:
        return f"Collection({self._name!r}, fields={list(self._fields)})"

    def relations(self) -> dict[str, FieldDescriptor]:
        """Relation fields only, master and derived."""
        return {name: f for name, f in self._fields.items() if f.is_relation}


class ResolvedSchema(Mapping[str, Collection]):
    """Immutable, fully bidirectional schema graph."""

    def __init__(self, collections: Iterable[Collection]):
        self._collections = MappingProxyType({c.name: c for c in collections})

    def __getitem__(self, key: str) -> Collection:
        return self._collections[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._collections)

    def __len__(self) -> int:
        return len(self._collections)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ResolvedSchema):
            return list(self.items()) == list(other.items())
        return NotImplemented

    def __repr__(self) -> str:
        return f"ResolvedSchema({list(self._collections)})"

    # -- Introspection -----------------------------------------------------

    def collections(self) -> list[str]:
        """Collection names in declaration order."""
        return list(self._collections)

    def collection(self, name: str) -> Collection:
        """Look up a collection.

        Raises:
            UnknownCollectionReference: If ``name`` is not in the schema.
        """
        try:
            return self._collections[name]
        except KeyError:
            raise UnknownCollectionReference(name) from None

    def fields(self, name: str) -> list[str]:
        """Field names of a collection (``_id`` first)."""
        return list(self.collection(name))

    def to_dict(self) -> dict[str, dict[str, dict[str, Any]]]:
        return {
            name: {field: descriptor.to_dict() for field, descriptor in collection.items()}
            for name, collection in self._collections.items()
        }

    # -- Table mapping -----------------------------------------------------

    def columns(self, name: str) -> list[Column]:
        """Columns backing a collection, excluding the identity column.

        Plain fields map to a column of the same name. Fields holding a
        foreign key map to ``<field>_id`` referencing the related table.
        Other relation fields own no column.
        """
        result = []
        for field_name, descriptor in self.collection(name).items():
            if field_name == IDENTITY_FIELD:
                continue
            if descriptor.relation is None:
                result.append(
                    Column(
                        name=field_name,
                        type=descriptor.type,
                        nullable=descriptor.nullable,
                        field=field_name,
                    )
                )
            elif holds_foreign_key(descriptor.relation, descriptor.master):
                result.append(
                    Column(
                        name=f"{field_name}{IDENTITY_FIELD}",
                        type=IDENTITY_TYPE,
                        nullable=descriptor.nullable,
                        field=field_name,
                        references=descriptor.type,
                    )
                )
        return result

    def column_name(self, collection: str, field: str) -> str:
        """Column that stores ``field`` of ``collection``.

        Raises:
            UnknownCollectionReference: If the collection does not exist.
            SchemaError: If the field does not exist or owns no column.
        """
        if field == IDENTITY_FIELD:
            self.collection(collection)
            return IDENTITY_COLUMN
        for column in self.columns(collection):
            if column.field == field:
                return column.name
        if field in self.collection(collection):
            raise SchemaError(
                f"Field {field!r} of {collection!r} is not stored in {collection!r}'s table"
            ).with_context(collection=collection, field=field)
        raise SchemaError(f"Unknown field {field!r} on {collection!r}").with_context(
            collection=collection, field=field
        )

    def creation_order(self) -> list[str]:
        """Collections ordered so that referenced tables come first.

        Declaration order breaks ties. Collections caught in a reference
        cycle are appended in declaration order.
        """
        names = self.collections()
        in_degree: dict[str, int] = {name: 0 for name in names}
        dependents: dict[str, list[str]] = defaultdict(list)

        for name in names:
            targets = {
                column.references
                for column in self.columns(name)
                if column.references is not None and column.references != name
            }
            for target in sorted(targets, key=names.index):
                dependents[target].append(name)
                in_degree[name] += 1

        queue: deque[str] = deque(name for name in names if in_degree[name] == 0)
        result: list[str] = []

        while queue:
            node = queue.popleft()
            result.append(node)
            for dependent in dependents[node]:
                in_degree[dependent] -= 1
                if in_degree[dependent] == 0:
                    queue.append(dependent)

        result.extend(name for name in names if name not in result)
        return result


# =========================================================================
# Resolution
# =========================================================================


def _declare_field(collection: str, name: str, raw: Any) -> FieldDescriptor:
    """Normalize one declared field (first pass)."""
    if not isinstance(raw, Mapping):
        raise SchemaError(f"Field {name!r} must be a mapping").with_context(
            collection=collection, field=name
        )

    data = {key: value for key, value in raw.items() if key != "master"}
    if data.get("nullable") is None:
        data["nullable"] = True

    if data.get("relation") is not None:
        data["relation"] = _parse_relation_for(collection, name, data["relation"])
        if not data.get("as"):
            raise SchemaError(
                f"Relation field {name!r} requires an 'as' name"
            ).with_context(collection=collection, field=name)
        data["master"] = True
    else:
        data.pop("relation", None)

    try:
        return FieldDescriptor.model_validate(data)
    except PydanticValidationError as e:
        raise SchemaError(
            f"Invalid declaration for field {name!r} of {collection!r}: {e}",
            cause=e,
        ).with_context(collection=collection, field=name) from e


def _parse_relation_for(collection: str, name: str, tag: Any) -> Relation:
    try:
        return parse_relation(tag)
    except SchemaError as e:
        raise e.with_context(collection=collection, field=name)


def resolve_schema(document: Mapping[str, Mapping[str, Any]]) -> ResolvedSchema:
    """Resolve a schema document into a bidirectional :class:`ResolvedSchema`.

    The input is deep-copied and never mutated. Resolution is deterministic:
    the same document always yields an equal schema.

    Raises:
        SchemaError: Malformed collection or field declaration, or a
            declared ``_id`` field, or two fields stored in one column.
        UnknownRelationKind: A relation tag outside the four kinds.
        UnknownCollectionReference: A master field targets a missing collection.
        RelationNameConflict: An inverse field name is already taken on the
            target collection.
    """
    if not isinstance(document, Mapping):
        raise SchemaError("Schema document must be a mapping of collections")
    document = copy.deepcopy(document)

    # First pass: identity field, nullable default, master marking
    declared: dict[str, dict[str, FieldDescriptor]] = {}
    for collection_name, raw_fields in document.items():
        if not isinstance(raw_fields, Mapping):
            raise SchemaError(
                f"Collection {collection_name!r} must be a mapping of fields"
            ).with_context(collection=collection_name)

        fields: dict[str, FieldDescriptor] = {IDENTITY_FIELD: IDENTITY}
        for field_name, raw in raw_fields.items():
            if field_name == IDENTITY_FIELD:
                raise SchemaError(
                    f"{IDENTITY_FIELD!r} is reserved for the identity field"
                ).with_context(collection=collection_name, field=field_name)
            fields[field_name] = _declare_field(collection_name, field_name, raw)
        declared[collection_name] = fields

    # Second pass: inverse fields go to a separate accumulator
    derived: dict[str, dict[str, FieldDescriptor]] = {name: {} for name in declared}
    for collection_name, fields in declared.items():
        for field_name, descriptor in fields.items():
            if not descriptor.master:
                continue

            target = descriptor.type
            if target not in declared:
                raise UnknownCollectionReference(target).with_context(
                    collection=collection_name, field=field_name
                )

            remote = descriptor.as_
            if remote in declared[target] or remote in derived[target]:
                raise RelationNameConflict(target, remote).with_context(
                    source_collection=collection_name, source_field=field_name
                )

            derived[target][remote] = FieldDescriptor(
                type=collection_name,
                nullable=False,
                relation=inverse(descriptor.relation),
                as_=field_name,
            )

    schema = ResolvedSchema(
        Collection(name, {**declared[name], **derived[name]}) for name in declared
    )
    for name in schema:
        _check_columns(schema, name)
    return schema


def _check_columns(schema: ResolvedSchema, collection: str) -> None:
    """Reject two fields of one collection stored in the same column."""
    owners = {IDENTITY_COLUMN: IDENTITY_FIELD}
    for column in schema.columns(collection):
        if column.name in owners:
            raise SchemaError(
                f"Fields {owners[column.name]!r} and {column.field!r} of {collection!r} "
                f"both map to column {column.name!r}"
            ).with_context(collection=collection, field=column.field)
        owners[column.name] = column.field


__all__ = [
    "IDENTITY_FIELD",
    "IDENTITY_COLUMN",
    "FieldDescriptor",
    "Column",
    "Collection",
    "ResolvedSchema",
    "resolve_schema",
]
