"""Read-only views over single records.

A RecordView exposes a record's fields, its collection's declared relations
and the presenter capabilities registered for that collection as plain
attributes. Relations and capability results are computed on first access
and memoized for the lifetime of the view.
"""

from typing import TYPE_CHECKING, Any, Callable, Dict, Hashable, List, Mapping, Optional, Tuple

from .errors import ImmutabilityError, InstanceError, RelationError
from .relationships.specs import RelationSpec

if TYPE_CHECKING:
    from .registry import Registry


RESERVED_NAMES = frozenset({
    "record",
    "collection_name",
    "to_dict",
    "get",
    "keys",
    "fields",
    "relation_names",
    "capability_names",
    "responds_to",
    "relation",
    "capability",
})

FIELD = "field"
RELATION = "relation"
CAPABILITY = "capability"

_MISSING = object()


def freeze(value: Any) -> Hashable:
    """Turn a value into a hashable memo key.

    Every level is tagged with its type, so values that compare equal
    across types (``1`` and ``True``, a dict and its item list) stay apart.
    """
    kind = type(value).__name__
    if isinstance(value, Mapping):
        return (kind, frozenset((freeze(k), freeze(v)) for k, v in value.items()))
    if isinstance(value, (list, tuple)):
        return (kind, tuple(freeze(item) for item in value))
    if isinstance(value, (set, frozenset)):
        return (kind, frozenset(freeze(item) for item in value))
    try:
        hash(value)
    except TypeError:
        return ("repr", type(value), repr(value))
    return (type(value), value)


def is_exposable(name: str) -> bool:
    return isinstance(name, str) and not name.startswith("_") and name not in RESERVED_NAMES


class RecordView:
    """Immutable handle over one record of a collection."""

    __slots__ = (
        "_record",
        "_collection_name",
        "_registry",
        "_relations",
        "_capabilities",
        "_lookup",
        "_relation_cache",
        "_capability_cache",
    )

    def __init__(
        self,
        record: Mapping[str, Any],
        collection_name: str,
        registry: "Registry",
        relations: Optional[Mapping[str, RelationSpec]] = None,
        capabilities: Optional[Mapping[str, Callable[..., Any]]] = None,
    ):
        set_ = object.__setattr__
        set_(self, "_record", record)
        set_(self, "_collection_name", collection_name)
        set_(self, "_registry", registry)
        set_(self, "_relations", dict(relations or {}))
        set_(self, "_capabilities", dict(capabilities or {}))
        set_(self, "_relation_cache", {})
        set_(self, "_capability_cache", {})
        set_(self, "_lookup", self._build_lookup())

    def _build_lookup(self) -> Dict[str, str]:
        # Fields win over relations, relations over capabilities.
        lookup: Dict[str, str] = {}
        for name in self._capabilities:
            if is_exposable(name):
                lookup[name] = CAPABILITY
        for name in self._relations:
            if is_exposable(name):
                lookup[name] = RELATION
        for name in self._record:
            if is_exposable(name):
                lookup[name] = FIELD
        return lookup

    # Read surface

    @property
    def record(self) -> Mapping[str, Any]:
        return self._record

    @property
    def collection_name(self) -> str:
        return self._collection_name

    def to_dict(self) -> Dict[str, Any]:
        """Plain, mutable copy of the record's fields."""
        return dict(self._record)

    def get(self, key: str, default: Any = None) -> Any:
        return self._record.get(key, default)

    def keys(self) -> List[str]:
        return list(self._record.keys())

    fields = keys

    def relation_names(self) -> List[str]:
        return list(self._relations)

    def capability_names(self) -> List[str]:
        return list(self._capabilities)

    def responds_to(self, name: str) -> bool:
        """True when ``name`` resolves to a field, relation or capability."""
        return name in self._lookup

    def relation(self, name: str) -> Any:
        """Resolve a declared relation by name, memoized per view.

        Raises:
            RelationError: If the collection declares no relation by that name
        """
        cached = self._relation_cache.get(name, _MISSING)
        if cached is not _MISSING:
            return cached

        spec = self._relations.get(name)
        if spec is None:
            raise RelationError(
                f"Undefined relation '{name}' called on collection '{self._collection_name}'",
                relation_name=name,
                collection=self._collection_name,
            )

        value = self._registry.resolver.resolve(self._record, spec, self._collection_name, name)
        self._relation_cache[name] = value
        return value

    def capability(self, name: str, *args: Any, **kwargs: Any) -> Any:
        """Compute a capability, memoized per (name, args, kwargs).

        Raises:
            AttributeError: If no capability by that name is registered
            InstanceError: If the capability raises
        """
        func = self._capabilities.get(name)
        if func is None:
            raise AttributeError(
                f"No capability '{name}' registered for collection '{self._collection_name}'"
            )

        key: Tuple[Hashable, ...] = (name, freeze(args), freeze(kwargs))
        cached = self._capability_cache.get(key, _MISSING)
        if cached is not _MISSING:
            return cached

        try:
            value = func(self, *args, **kwargs)
        except Exception as e:
            raise InstanceError.from_failure(name, self._collection_name, self._record, e) from e

        self._capability_cache[key] = value
        return value

    def __getattr__(self, name: str) -> Any:
        # Only reached when normal attribute lookup fails.
        if name.startswith("_"):
            raise AttributeError(name)

        kind = self._lookup.get(name)
        if kind == FIELD:
            return self._record[name]
        if kind == RELATION:
            return self.relation(name)
        if kind == CAPABILITY:
            return lambda *args, **kwargs: self.capability(name, *args, **kwargs)

        raise AttributeError(
            f"'{self._collection_name}' record has no field, relation or capability '{name}'"
        )

    def __getitem__(self, key: str) -> Any:
        return self._record.get(key)

    def __contains__(self, key: object) -> bool:
        return key in self._record

    def __dir__(self) -> List[str]:
        return sorted(set(super().__dir__()) | set(self._lookup))

    def __repr__(self) -> str:
        return f"<RecordView {self._collection_name} {dict(self._record)!r}>"

    # Write surface: always refused

    def _refuse(self, action: str, name: Any) -> None:
        raise ImmutabilityError(
            f"Cannot {action} '{name}' on {self._collection_name} record: records are read-only"
        )

    def __setattr__(self, name: str, value: Any) -> None:
        self._refuse("set attribute", name)

    def __delattr__(self, name: str) -> None:
        self._refuse("delete attribute", name)

    def __setitem__(self, key: str, value: Any) -> None:
        self._refuse("set field", key)

    def __delitem__(self, key: str) -> None:
        self._refuse("delete field", key)
