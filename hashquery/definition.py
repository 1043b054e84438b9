"""Collection definition context.

A DefinitionContext is handed to the builder passed to ``define``. The
builder supplies records, scopes and relation declarations; the context
turns them into an immutable Collection.
"""

from pathlib import Path
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterable, Mapping, Optional, Sequence, Tuple

from .config import EngineConfig
from .errors import DefinitionError, ScopeError
from .loaders import JSONRecordLoader
from .models import Collection
from .query import QUERY_ATTRIBUTES
from .relationships import BelongsTo, HasMany, HasManyThrough, HasOne, RelationSpec, pluralize, singularize


def freeze_record(record: Mapping[str, Any]) -> Mapping[str, Any]:
    return MappingProxyType(dict(record))


class DefinitionContext:
    """Collects records, scopes and relations for one collection."""

    def __init__(self, name: str, data_path: Optional[str] = None, config: Optional[EngineConfig] = None):
        self.name = name
        self.config = config or EngineConfig()
        self.data_path = Path(data_path if data_path is not None else self.config.data_path)
        self._records: Tuple[Mapping[str, Any], ...] = ()
        self._scopes: Dict[str, Callable[..., Any]] = {}
        self._relations: Dict[str, RelationSpec] = {}

    @property
    def records(self) -> Tuple[Mapping[str, Any], ...]:
        return self._records

    @property
    def scopes(self) -> Mapping[str, Callable[..., Any]]:
        return dict(self._scopes)

    @property
    def relations(self) -> Mapping[str, RelationSpec]:
        return dict(self._relations)

    # Records

    def from_records(self, records: Sequence[Mapping[str, Any]]) -> Tuple[Mapping[str, Any], ...]:
        """Use the given mappings as the collection's records.

        Raises:
            DefinitionError: If ``records`` is not a list/tuple or an item is
                not a mapping
        """
        if not isinstance(records, (list, tuple)):
            raise DefinitionError(
                f"from_records() expects a list of mappings, but got {type(records).__name__}"
            )

        frozen = []
        for index, item in enumerate(records, start=1):
            if not isinstance(item, Mapping):
                raise DefinitionError(
                    f"from_records() item {index} should be a mapping, but got {type(item).__name__}"
                )
            frozen.append(freeze_record(item))

        self._records = tuple(frozen)
        return self._records

    def load(self, pattern: str, date_fields: Optional[Iterable[str]] = None) -> Tuple[Mapping[str, Any], ...]:
        """Load records from JSON files under the data path matching ``pattern``."""
        loader = JSONRecordLoader(self.data_path, date_fields=date_fields)
        return self.from_records(loader.load(pattern))

    # Scopes

    def scope(self, scopes: Optional[Mapping[str, Callable[..., Any]]] = None, /, **named: Callable[..., Any]) -> None:
        """Register named Query transformations.

        Each scope receives the current Query first, followed by any
        arguments passed at call time, and returns a Query.

        Raises:
            ScopeError: If a scope is not callable or its name is unusable
        """
        combined: Dict[str, Any] = dict(scopes or {})
        combined.update(named)

        for scope_name, func in combined.items():
            if not callable(func):
                raise ScopeError(
                    f"Scope {scope_name} must be callable",
                    scope_name=scope_name,
                    collection=self.name,
                )
            if scope_name.startswith("_") or scope_name in QUERY_ATTRIBUTES:
                raise ScopeError(
                    f"Scope name '{scope_name}' for collection '{self.name}' "
                    f"collides with a built-in Query attribute",
                    scope_name=scope_name,
                    collection=self.name,
                )
            self._scopes[scope_name] = func

    # Relations

    def _check_options(self, relation: str, options: Mapping[str, Any]) -> None:
        if options:
            raise DefinitionError(
                f"Unknown options for {relation} on collection '{self.name}': {', '.join(sorted(options))}"
            )

    def belongs_to(
        self,
        name: str,
        target: Optional[str] = None,
        foreign_key: Optional[str] = None,
        target_key: str = "id",
        **options: Any,
    ) -> BelongsTo:
        self._check_options(f"belongs_to '{name}'", options)
        spec = BelongsTo(
            target_collection=target or pluralize(name),
            foreign_key=foreign_key or f"{name}_id",
            target_key=target_key,
        )
        self._relations[name] = spec
        return spec

    def has_many(
        self,
        name: str,
        target: Optional[str] = None,
        foreign_key: Optional[str] = None,
        owner_key: str = "id",
        through: Optional[str] = None,
        source: Optional[str] = None,
        **options: Any,
    ) -> RelationSpec:
        """Declare a has-many relation, direct or through a join collection.

        A direct relation defaults its target to ``name`` and its foreign key
        to ``<singular collection name>_id``. A through relation follows the
        has-many named by ``through`` and then the belongs-to named by
        ``source`` (default: ``name`` singularized) on the join collection.
        """
        self._check_options(f"has_many '{name}'", options)

        spec: RelationSpec
        if through is not None:
            if target is not None or foreign_key is not None:
                raise DefinitionError(
                    f"has_many '{name}' on collection '{self.name}' goes through '{through}' "
                    f"and cannot also set target or foreign_key"
                )
            spec = HasManyThrough(through=through, source=source or singularize(name))
        else:
            spec = HasMany(
                target_collection=target or name,
                foreign_key=foreign_key or f"{singularize(self.name)}_id",
                owner_key=owner_key,
            )
        self._relations[name] = spec
        return spec

    def has_one(
        self,
        name: str,
        target: Optional[str] = None,
        foreign_key: Optional[str] = None,
        owner_key: str = "id",
        **options: Any,
    ) -> HasOne:
        self._check_options(f"has_one '{name}'", options)
        spec = HasOne(
            target_collection=target or pluralize(name),
            foreign_key=foreign_key or f"{singularize(self.name)}_id",
            owner_key=owner_key,
        )
        self._relations[name] = spec
        return spec

    def build(self) -> Collection:
        return Collection(
            name=self.name,
            records=self._records,
            scopes=MappingProxyType(dict(self._scopes)),
            relations=MappingProxyType(dict(self._relations)),
        )
