"""Immutable, chainable queries over one collection."""

import functools
import logging
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Callable, Dict, Iterator, List, Mapping, Optional, Tuple, Union

from .errors import ArgumentError, ScopeError
from .filters import apply_entries
from .models import Collection, ConditionEntry, ConditionKind, Page
from .sorting import order_and_window, paginate

if TYPE_CHECKING:
    from .registry import Registry
    from .view import RecordView

logger = logging.getLogger(__name__)

Record = Mapping[str, Any]
ConditionSpec = Union[Mapping[str, Any], Callable[["Query"], "Query"], None]


class Query:
    """A pending computation over one collection's records.

    Every chaining method returns a new Query; the receiver is never
    altered. Results are computed on the first terminal call and cached
    on that instance.

    Scopes registered for the collection are available as methods::

        posts.featured().tagged("python").order("published_at", desc=True)
    """

    def __init__(
        self,
        collection: Collection,
        registry: "Registry",
        conditions: Tuple[ConditionEntry, ...] = (),
        order_field: Optional[str] = None,
        order_desc: bool = False,
        limit_count: Optional[int] = None,
        offset_count: Optional[int] = None,
    ):
        self._collection = collection
        self._registry = registry
        self._conditions = tuple(conditions)
        self._order_field = order_field
        self._order_desc = order_desc
        self._limit_count = limit_count
        self._offset_count = offset_count
        self._records: Optional[List[Record]] = None
        self._views: Optional[List["RecordView"]] = None

    @property
    def collection_name(self) -> str:
        return self._collection.name

    @property
    def registry(self) -> "Registry":
        return self._registry

    @property
    def conditions(self) -> Tuple[ConditionEntry, ...]:
        return self._conditions

    @property
    def order_field(self) -> Optional[str]:
        return self._order_field

    @property
    def order_desc(self) -> bool:
        return self._order_desc

    @property
    def limit_count(self) -> Optional[int]:
        return self._limit_count

    @property
    def offset_count(self) -> Optional[int]:
        return self._offset_count

    def _copy(self, **changes: Any) -> "Query":
        state: Dict[str, Any] = {
            "conditions": self._conditions,
            "order_field": self._order_field,
            "order_desc": self._order_desc,
            "limit_count": self._limit_count,
            "offset_count": self._offset_count,
        }
        state.update(changes)
        return Query(self._collection, self._registry, **state)

    # Chaining

    def _entry_for(
        self,
        method: str,
        kind: ConditionKind,
        group_kind: ConditionKind,
        spec: ConditionSpec,
        fields: Mapping[str, Any],
    ) -> Optional[ConditionEntry]:
        if callable(spec) and not isinstance(spec, Mapping):
            if fields:
                raise ArgumentError(f"{method}() takes either a block or field conditions, not both")
            sub_query = spec(Query(self._collection, self._registry))
            if not isinstance(sub_query, Query):
                raise ArgumentError(
                    f"{method}() block must return a Query, got {type(sub_query).__name__}"
                )
            return ConditionEntry(group_kind, sub_query.conditions)

        if spec is not None and not isinstance(spec, Mapping):
            raise ArgumentError(
                f"{method}() expects a mapping of field conditions or a callable, "
                f"got {type(spec).__name__}"
            )

        conditions = dict(spec or {})
        conditions.update(fields)
        # An explicit empty OR mapping matches every record; an empty AND is a no-op.
        if not conditions and (spec is None or kind is ConditionKind.AND):
            return None
        return ConditionEntry(kind, MappingProxyType(conditions))

    def where(self, spec: ConditionSpec = None, /, **fields: Any) -> "Query":
        """Narrow the results.

        Args:
            spec: Mapping of field -> condition, or a callable that receives a
                fresh Query and returns one whose conditions form a nested
                AND group
            **fields: Additional field conditions

        Returns:
            A new Query, or this one if no conditions were given
        """
        entry = self._entry_for("where", ConditionKind.AND, ConditionKind.AND_GROUP, spec, fields)
        if entry is None:
            return self
        return self._copy(conditions=self._conditions + (entry,))

    def or_where(self, spec: ConditionSpec = None, /, **fields: Any) -> "Query":
        """Widen the results with records matching these conditions.

        OR conditions are matched against the whole collection rather than
        against the preceding AND chain. ``or_where({})`` therefore widens
        to the whole collection, while ``or_where()`` returns this Query.
        """
        entry = self._entry_for("or_where", ConditionKind.OR, ConditionKind.OR_GROUP, spec, fields)
        if entry is None:
            return self
        return self._copy(conditions=self._conditions + (entry,))

    def order(self, field: str, desc: bool = False) -> "Query":
        return self._copy(order_field=field, order_desc=bool(desc))

    def limit(self, count: Optional[int]) -> "Query":
        return self._copy(limit_count=self._check_count("limit", count))

    def offset(self, count: Optional[int]) -> "Query":
        return self._copy(offset_count=self._check_count("offset", count))

    @staticmethod
    def _check_count(method: str, count: Any) -> Optional[int]:
        if count is None:
            return None
        if isinstance(count, bool) or not isinstance(count, int):
            raise ArgumentError(f"{method}() expects an integer, got {count!r}")
        return count

    # Scopes

    def scope(self, name: str, *args: Any) -> "Query":
        """Apply a registered scope by name.

        Raises:
            ScopeError: If the scope is not defined or raises
        """
        func = self._collection.scopes.get(name)
        if func is None:
            raise ScopeError(
                f"Undefined scope '{name}' for collection '{self.collection_name}'",
                scope_name=name,
                collection=self.collection_name,
            )
        try:
            return func(self, *args)
        except Exception as e:
            raise ScopeError.from_failure(name, self.collection_name, e) from e

    def __getattr__(self, name: str) -> Any:
        # Only reached for names that are not regular attributes.
        if name.startswith("_"):
            raise AttributeError(name)
        if name in self._collection.scopes:
            return functools.partial(self.scope, name)
        raise AttributeError(
            f"'Query' for collection '{self.collection_name}' has no attribute or scope '{name}'"
        )

    def __dir__(self) -> List[str]:
        return sorted(set(super().__dir__()) | set(self._collection.scopes))

    # Materialization

    def _materialize(self) -> List[Record]:
        if self._records is None:
            filtered = apply_entries(self._collection.records, self._conditions)
            self._records = order_and_window(
                filtered,
                order_field=self._order_field,
                order_desc=self._order_desc,
                offset=self._offset_count,
                limit=self._limit_count,
            )
            logger.debug(
                "Materialized %s: %d of %d records",
                self.collection_name, len(self._records), len(self._collection.records),
            )
        return self._records

    def _wrap(self, record: Record) -> "RecordView":
        return self._registry.wrap(record, self.collection_name, relations=self._collection.relations)

    def all(self) -> List["RecordView"]:
        """All matching records as views. Cached per Query instance."""
        if self._views is None:
            self._views = [self._wrap(record) for record in self._materialize()]
        return list(self._views)

    to_list = all

    def first(self) -> Optional["RecordView"]:
        records = self._materialize()
        return self._wrap(records[0]) if records else None

    def last(self) -> Optional["RecordView"]:
        records = self._materialize()
        return self._wrap(records[-1]) if records else None

    def find_by(self, spec: Optional[Mapping[str, Any]] = None, /, **fields: Any) -> Optional["RecordView"]:
        """First record matching the given field conditions, or None."""
        return self.where(spec, **fields).first()

    def count(self) -> int:
        return len(self._materialize())

    def paginate(self, per_page: int) -> List[Page]:
        return paginate(self, per_page)

    def __len__(self) -> int:
        return self.count()

    def __iter__(self) -> Iterator["RecordView"]:
        return iter(self.all())

    def __getitem__(self, index: Union[int, slice]) -> Any:
        return self.all()[index]

    def __repr__(self) -> str:
        parts = [f"conditions={len(self._conditions)}"]
        if self._order_field is not None:
            parts.append(f"order={self._order_field}{' desc' if self._order_desc else ''}")
        if self._limit_count is not None:
            parts.append(f"limit={self._limit_count}")
        if self._offset_count is not None:
            parts.append(f"offset={self._offset_count}")
        return f"<Query {self.collection_name} {' '.join(parts)}>"


QUERY_ATTRIBUTES = frozenset(name for name in dir(Query) if not name.startswith("_"))
