"""Relation declarations between collections."""

from enum import Enum
from typing import Union

from pydantic import BaseModel, ConfigDict, Field


class RelationType(str, Enum):
    """Supported relation kinds."""

    BELONGS_TO = "belongs_to"
    HAS_ONE = "has_one"
    HAS_MANY = "has_many"
    HAS_MANY_THROUGH = "has_many_through"


class BelongsTo(BaseModel):
    """Owner holds a foreign key pointing at one target record."""

    type: RelationType = Field(default=RelationType.BELONGS_TO, frozen=True)
    foreign_key: str = Field(description="Field on the owner holding the target key")
    target_collection: str = Field(description="Collection the key points into")
    target_key: str = Field(default="id", description="Field on the target matched by the foreign key")

    model_config = ConfigDict(frozen=True)


class HasOne(BaseModel):
    """One target record holds a foreign key pointing back at the owner."""

    type: RelationType = Field(default=RelationType.HAS_ONE, frozen=True)
    owner_key: str = Field(default="id", description="Field on the owner matched by the foreign key")
    foreign_key: str = Field(description="Field on the target pointing at the owner")
    target_collection: str = Field(description="Collection holding the target")

    model_config = ConfigDict(frozen=True)


class HasMany(BaseModel):
    """Many target records hold a foreign key pointing back at the owner."""

    type: RelationType = Field(default=RelationType.HAS_MANY, frozen=True)
    owner_key: str = Field(default="id", description="Field on the owner matched by the foreign key")
    foreign_key: str = Field(description="Field on the targets pointing at the owner")
    target_collection: str = Field(description="Collection holding the targets")

    model_config = ConfigDict(frozen=True)


class HasManyThrough(BaseModel):
    """Targets reached through a direct has-many and a belongs-to on the join collection."""

    type: RelationType = Field(default=RelationType.HAS_MANY_THROUGH, frozen=True)
    through: str = Field(description="Direct has-many relation on the owner leading to the join collection")
    source: str = Field(description="Belongs-to relation on the join collection leading to the targets")

    model_config = ConfigDict(frozen=True)


RelationSpec = Union[BelongsTo, HasOne, HasMany, HasManyThrough]
