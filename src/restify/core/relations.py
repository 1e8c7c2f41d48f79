"""Relation kinds and their inverse algebra.

A relation is declared on one side only (the *master* field). The resolver
materializes the opposite side using :func:`inverse`: the two symmetric
kinds map to themselves, the directional kinds flip.

    >>> inverse(Relation.ONE_TO_MANY)
    <Relation.MANY_TO_ONE: 'ManyToOne'>
    >>> inverse(inverse(Relation.MANY_TO_ONE))
    <Relation.MANY_TO_ONE: 'ManyToOne'>
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from restify.core.errors import UnknownRelationKind


class Relation(str, Enum):
    """The four relation kinds a field may declare."""

    ONE_TO_ONE = "OneToOne"
    ONE_TO_MANY = "OneToMany"
    MANY_TO_ONE = "ManyToOne"
    MANY_TO_MANY = "ManyToMany"


_INVERSES: dict[Relation, Relation] = {
    Relation.ONE_TO_ONE: Relation.ONE_TO_ONE,
    Relation.MANY_TO_MANY: Relation.MANY_TO_MANY,
    Relation.ONE_TO_MANY: Relation.MANY_TO_ONE,
    Relation.MANY_TO_ONE: Relation.ONE_TO_MANY,
}


def parse_relation(tag: Any) -> Relation:
    """Convert a declared relation tag (``"OneToMany"``) to a :class:`Relation`.

    Raises:
        UnknownRelationKind: If ``tag`` is not one of the four kinds.
    """
    if isinstance(tag, Relation):
        return tag
    try:
        return Relation(tag)
    except ValueError:
        raise UnknownRelationKind(tag) from None


def inverse(kind: Relation) -> Relation:
    """Return the relation kind as seen from the related collection.

    Raises:
        UnknownRelationKind: If ``kind`` is not a :class:`Relation`.
    """
    if not isinstance(kind, Relation):
        raise UnknownRelationKind(kind)
    return _INVERSES[kind]


def holds_foreign_key(kind: Relation, master: bool) -> bool:
    """Whether a field of this kind stores the related id in its own table.

    ``ManyToOne`` always does. ``OneToOne`` is stored on the declaring side
    only, so the pair owns exactly one column. ``OneToMany`` and
    ``ManyToMany`` never own a column.
    """
    if kind is Relation.MANY_TO_ONE:
        return True
    if kind is Relation.ONE_TO_ONE:
        return master
    return False


__all__ = [
    "Relation",
    "inverse",
    "parse_relation",
    "holds_foreign_key",
]
