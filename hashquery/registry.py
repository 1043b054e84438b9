"""Registry of collections and presenters.

The registry is the entry point of the engine: collections are defined on
it, queries are started from it, and every Query and RecordView keeps a
reference to the registry it came from so relations resolve against the
same set of collections.

A module-level ``default_registry`` backs the ``define``, ``present``,
``query`` and ``rs`` shortcuts for applications that only need one. It is
configured from the ``HASHQUERY_*`` environment variables at import time.
"""

import runpy
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

import structlog

from .config import ConfigManager, EngineConfig
from .definition import DefinitionContext
from .errors import CollectionNotDefinedError, DefinitionError
from .models import Collection
from .query import Query
from .relationships import RelationResolver, RelationSpec
from .view import RecordView

logger = structlog.get_logger(__name__)

Builder = Callable[[DefinitionContext], Any]
Capability = Callable[..., Any]


class Registry:
    """Holds defined collections and their presenter capabilities."""

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or EngineConfig()
        self.resolver = RelationResolver(self)
        self._collections: Dict[str, Collection] = {}
        self._presenters: Dict[str, Dict[str, Capability]] = {}

    @classmethod
    def from_environment(cls, config_path: Optional[str] = None) -> "Registry":
        """Build a registry configured from an optional JSON file and ``HASHQUERY_*`` variables."""
        return cls(ConfigManager(config_path).load())

    def configure(self, **changes: Any) -> EngineConfig:
        """Replace configuration values, e.g. ``configure(data_path="fixtures")``.

        Only affects collections defined afterwards.
        """
        self.config = EngineConfig(**{**self.config.model_dump(), **changes})
        return self.config

    # Definition

    def define(self, name: str, builder: Optional[Builder] = None) -> Any:
        """Define (or redefine) a collection.

        Usable directly, ``registry.define("posts", build_posts)``, or as a
        decorator, ``@registry.define("posts")``. Either way the built
        Collection is returned.
        """
        if builder is None:
            def decorator(func: Builder) -> Collection:
                return self.define(name, func)
            return decorator

        context = DefinitionContext(name, config=self.config)
        builder(context)
        collection = context.build()

        replaced = name in self._collections
        self._collections[name] = collection
        logger.info(
            "collection_defined",
            collection=name,
            records=len(collection.records),
            scopes=len(collection.scopes),
            relations=len(collection.relations),
            replaced=replaced,
        )
        return collection

    def present(
        self,
        name: str,
        capabilities: Optional[Mapping[str, Capability]] = None,
        **named: Capability,
    ) -> Dict[str, Capability]:
        """Register the capability table for a collection, replacing any previous one.

        Each capability is called as ``func(view, *args, **kwargs)``.

        Raises:
            DefinitionError: If a capability is not callable
        """
        table: Dict[str, Capability] = dict(capabilities or {})
        table.update(named)
        for capability_name, func in table.items():
            if not callable(func):
                raise DefinitionError(
                    f"Capability '{capability_name}' for collection '{name}' must be callable"
                )

        self._presenters[name] = table
        logger.info("presenter_registered", collection=name, capabilities=sorted(table))
        return dict(table)

    def capability(self, name: str, capability_name: Optional[str] = None) -> Callable[[Capability], Capability]:
        """Decorator adding one capability to a collection's table.

        Example::

            @registry.capability("posts")
            def summary(post, length=40):
                return post.title[:length]
        """
        def decorator(func: Capability) -> Capability:
            table = dict(self._presenters.get(name, {}))
            table[capability_name or func.__name__] = func
            self.present(name, table)
            return func
        return decorator

    # Lookup

    def collection(self, name: str) -> Collection:
        collection = self._collections.get(name)
        if collection is None:
            raise CollectionNotDefinedError(name)
        return collection

    def query(self, name: str) -> Query:
        """Start a fresh Query over a collection.

        Raises:
            CollectionNotDefinedError: If no collection by that name is defined
        """
        return Query(self.collection(name), self)

    def relations_for(self, name: str) -> Mapping[str, RelationSpec]:
        collection = self._collections.get(name)
        return collection.relations if collection is not None else {}

    def capabilities_for(self, name: str) -> Dict[str, Capability]:
        return dict(self._presenters.get(name, {}))

    def defined_collections(self) -> List[str]:
        return list(self._collections)

    def wrap(
        self,
        record: Mapping[str, Any],
        name: str,
        relations: Optional[Mapping[str, RelationSpec]] = None,
    ) -> RecordView:
        """Build a view over a record using the collection's relations and capabilities."""
        return RecordView(
            record,
            name,
            self,
            relations=relations if relations is not None else self.relations_for(name),
            capabilities=self.capabilities_for(name),
        )

    # Lifecycle

    def reset(self) -> None:
        """Forget every collection and presenter."""
        self._collections = {}
        self._presenters = {}
        logger.info("registry_reset")

    def load_from(self, directory: Union[str, Path]) -> List[Path]:
        """Execute every definition script (``*.py``) under a directory, recursively.

        Scripts run with ``registry``, ``define``, ``present`` and
        ``capability`` bound to this registry.

        Returns:
            The scripts executed, in order

        Raises:
            DefinitionError: If the directory does not exist or a script fails
        """
        root = Path(directory).expanduser().resolve()
        if not root.is_dir():
            raise DefinitionError(f"Definition directory not found: {root}")

        scripts = sorted(root.rglob("*.py"))
        namespace = {
            "registry": self,
            "define": self.define,
            "present": self.present,
            "capability": self.capability,
        }
        for script in scripts:
            try:
                runpy.run_path(str(script), init_globals=namespace, run_name=script.stem)
            except Exception as e:
                raise DefinitionError(f"Definition script {script} failed: {e}", cause=e) from e

        logger.info("definitions_loaded", directory=str(root), scripts=len(scripts))
        return scripts

    def reload_from(self, directory: Union[str, Path]) -> List[Path]:
        self.reset()
        return self.load_from(directory)


default_registry = Registry.from_environment()


def define(name: str, builder: Optional[Builder] = None) -> Any:
    return default_registry.define(name, builder)


def present(name: str, capabilities: Optional[Mapping[str, Capability]] = None, **named: Capability) -> Dict[str, Capability]:
    return default_registry.present(name, capabilities, **named)


def capability(name: str, capability_name: Optional[str] = None) -> Callable[[Capability], Capability]:
    return default_registry.capability(name, capability_name)


def query(name: str) -> Query:
    return default_registry.query(name)


rs = query


def reset() -> None:
    default_registry.reset()


def configure(**changes: Any) -> EngineConfig:
    return default_registry.configure(**changes)
