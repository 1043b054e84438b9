"""In-memory query engine over immutable record collections.

Define collections of flat records, declare relations between them, and
build immutable, chainable queries that materialize into read-only record
views::

    from hashquery import define, query

    @define("posts")
    def posts(ctx):
        ctx.from_records([{"id": 1, "title": "Hello", "author_id": 7}])
        ctx.belongs_to("author")
        ctx.scope(titled=lambda q, title: q.where(title=title))

    query("posts").titled("Hello").first().author
"""

from .config import ConfigManager, EngineConfig
from .definition import DefinitionContext
from .errors import (
    ArgumentError,
    CollectionNotDefinedError,
    DataFileError,
    DefinitionError,
    ErrorContext,
    HashQueryError,
    ImmutabilityError,
    InstanceError,
    RelationError,
    ScopeError,
)
from .loaders import JSONRecordLoader
from .logging_config import setup_logging, setup_logging_from_config
from .models import Collection, ConditionEntry, ConditionKind, Page, ValueRange
from .query import Query
from .registry import (
    Registry,
    capability,
    configure,
    default_registry,
    define,
    present,
    query,
    reset,
    rs,
)
from .relationships import BelongsTo, HasMany, HasManyThrough, HasOne, RelationType
from .view import RESERVED_NAMES, RecordView

__version__ = "0.1.0"

__all__ = [
    # Registry
    "Registry",
    "default_registry",
    "define",
    "present",
    "capability",
    "query",
    "rs",
    "reset",
    "configure",

    # Core types
    "Collection",
    "ConditionEntry",
    "ConditionKind",
    "DefinitionContext",
    "Page",
    "Query",
    "RecordView",
    "RESERVED_NAMES",
    "ValueRange",

    # Relations
    "RelationType",
    "BelongsTo",
    "HasOne",
    "HasMany",
    "HasManyThrough",

    # Loading and configuration
    "JSONRecordLoader",
    "EngineConfig",
    "ConfigManager",
    "setup_logging",
    "setup_logging_from_config",

    # Errors
    "ErrorContext",
    "HashQueryError",
    "ArgumentError",
    "CollectionNotDefinedError",
    "DataFileError",
    "DefinitionError",
    "ImmutabilityError",
    "InstanceError",
    "RelationError",
    "ScopeError",
]
