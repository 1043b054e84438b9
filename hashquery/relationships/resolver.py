"""Relation resolution across collections.

Relations are resolved by issuing fresh queries against the registry, so
every lookup is a linear scan of the target collection. Has-many relations
return live queries that the caller can keep chaining.
"""

import logging
from typing import TYPE_CHECKING, Any, List, Mapping, Optional, Union

from ..errors import RelationError
from .inflector import pluralize
from .specs import BelongsTo, HasMany, HasManyThrough, HasOne, RelationSpec

if TYPE_CHECKING:
    from ..query import Query
    from ..registry import Registry
    from ..view import RecordView

logger = logging.getLogger(__name__)


Resolved = Union["RecordView", "Query", None]


class RelationResolver:
    """Resolves declared relations for records of one registry."""

    def __init__(self, registry: "Registry"):
        self.registry = registry

    def resolve_named(self, record: Mapping[str, Any], collection: str, relation_name: str) -> Resolved:
        """Resolve a relation by name on the record's collection.

        Raises:
            RelationError: If the collection declares no such relation
        """
        relations = self.registry.relations_for(collection)
        spec = relations.get(relation_name)
        if spec is None:
            raise RelationError(
                f"Undefined relation '{relation_name}' called on collection '{collection}'",
                relation_name=relation_name,
                collection=collection,
            )
        return self.resolve(record, spec, collection, relation_name)

    def resolve(
        self,
        record: Mapping[str, Any],
        spec: RelationSpec,
        collection: str,
        relation_name: Optional[str] = None,
    ) -> Resolved:
        """Resolve one relation for an owner record.

        Args:
            record: The owner record
            spec: The relation declaration
            collection: Name of the owner's collection
            relation_name: Declared name, used in error messages

        Returns:
            A record view (belongs-to, has-one), None when nothing matches,
            or a Query over the target collection (has-many variants)
        """
        logger.debug("Resolving %s.%s (%s)", collection, relation_name, type(spec).__name__)

        if isinstance(spec, BelongsTo):
            return self._resolve_belongs_to(record, spec)
        if isinstance(spec, HasOne):
            return self._resolve_has_one(record, spec)
        if isinstance(spec, HasMany):
            return self._resolve_has_many(record, spec)
        if isinstance(spec, HasManyThrough):
            return self._resolve_has_many_through(record, spec, collection, relation_name)

        raise RelationError(
            f"Unknown relation type {type(spec).__name__} for '{relation_name}' on collection '{collection}'",
            relation_name=relation_name,
            collection=collection,
        )

    def _resolve_belongs_to(self, record: Mapping[str, Any], spec: BelongsTo) -> Optional["RecordView"]:
        foreign_key_value = record.get(spec.foreign_key)
        if foreign_key_value is None:
            return None
        return self.registry.query(spec.target_collection).find_by({spec.target_key: foreign_key_value})

    def _resolve_has_one(self, record: Mapping[str, Any], spec: HasOne) -> Optional["RecordView"]:
        owner_key_value = record.get(spec.owner_key)
        return self.registry.query(spec.target_collection).find_by({spec.foreign_key: owner_key_value})

    def _resolve_has_many(self, record: Mapping[str, Any], spec: HasMany) -> "Query":
        owner_key_value = record.get(spec.owner_key)
        return self.registry.query(spec.target_collection).where({spec.foreign_key: owner_key_value})

    def _resolve_has_many_through(
        self,
        record: Mapping[str, Any],
        spec: HasManyThrough,
        collection: str,
        relation_name: Optional[str],
    ) -> "Query":
        through = self.registry.relations_for(collection).get(spec.through)
        if not isinstance(through, HasMany):
            raise RelationError(
                f"Invalid 'through' relation '{spec.through}' on collection '{collection}'. "
                f"Must be a direct has_many.",
                relation_name=relation_name,
                collection=collection,
            )

        intermediate = through.target_collection
        source = self._find_source_relation(intermediate, spec, collection, relation_name)

        intermediate_records = (
            self.registry.query(intermediate)
            .where({through.foreign_key: record.get(through.owner_key)})
            .all()
        )

        target_keys: List[Any] = []
        for view in intermediate_records:
            value = view.record.get(source.foreign_key)
            if value is not None and value not in target_keys:
                target_keys.append(value)

        target = self.registry.query(source.target_collection)
        if not target_keys:
            sentinel = self.registry.config.empty_relation_sentinel
            logger.debug("No %s rows for %s.%s, returning empty query", intermediate, collection, relation_name)
            return target.where({source.target_key: sentinel})

        return target.where({source.target_key: {"in": target_keys}})

    def _find_source_relation(
        self,
        intermediate: str,
        spec: HasManyThrough,
        collection: str,
        relation_name: Optional[str],
    ) -> BelongsTo:
        intermediate_relations = self.registry.relations_for(intermediate)

        named = intermediate_relations.get(spec.source)
        if isinstance(named, BelongsTo):
            return named

        inferred = [
            relation for relation in intermediate_relations.values()
            if isinstance(relation, BelongsTo) and pluralize(relation.target_collection) == spec.source
        ]
        if len(inferred) == 1:
            return inferred[0]

        raise RelationError(
            f"Cannot find target belongs_to relation (expected a name like '{spec.source}', "
            f"found: {sorted(intermediate_relations)}) on intermediate collection '{intermediate}' "
            f"for through relation '{spec.through}' on collection '{collection}'. "
            f"Did you define the belongs_to on {intermediate}?",
            relation_name=relation_name,
            collection=collection,
        )
