"""Relation declarations and resolution for the query engine."""

from .inflector import pluralize, singularize
from .resolver import RelationResolver
from .specs import (
    BelongsTo,
    HasMany,
    HasManyThrough,
    HasOne,
    RelationSpec,
    RelationType,
)

__all__ = [
    # Specs
    "RelationType",
    "RelationSpec",
    "BelongsTo",
    "HasOne",
    "HasMany",
    "HasManyThrough",

    # Resolution
    "RelationResolver",

    # Inflection
    "pluralize",
    "singularize",
]
