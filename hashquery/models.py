"""Core models for the query engine."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field


class ConditionKind(str, Enum):
    """Kinds of entries a Query accumulates."""

    AND = "and"
    OR = "or"
    AND_GROUP = "and_group"
    OR_GROUP = "or_group"


@dataclass(frozen=True)
class ConditionEntry:
    """One entry in a Query's condition list.

    ``payload`` is a field mapping for AND/OR entries and a tuple of
    ConditionEntry for the group kinds.
    """

    kind: ConditionKind
    payload: Union[Mapping[str, Any], Tuple["ConditionEntry", ...]]


@dataclass(frozen=True)
class ValueRange:
    """A bounded range usable as a condition value.

    Works for any ordered values (numbers, strings, dates). ``end`` is
    inclusive unless ``exclusive`` is set.
    """

    start: Any
    end: Any
    exclusive: bool = False

    def __contains__(self, value: Any) -> bool:
        if value is None:
            return False
        try:
            if value < self.start:
                return False
            return value < self.end if self.exclusive else value <= self.end
        except TypeError:
            return False


class Page(BaseModel):
    """One page of a paginated query."""

    items: List[Any] = Field(default_factory=list, description="Record views on this page")
    current_page: int = Field(ge=1, description="Current page number (1-based)")
    total_pages: int = Field(ge=1, description="Total number of pages")
    total_items: int = Field(ge=0, description="Total number of paginated items")

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    @property
    def prev_page(self) -> Optional[int]:
        """Previous page number, if any."""
        return self.current_page - 1 if self.current_page > 1 else None

    @property
    def next_page(self) -> Optional[int]:
        """Next page number, if any."""
        return self.current_page + 1 if self.current_page < self.total_pages else None

    @property
    def is_first_page(self) -> bool:
        return self.current_page == 1

    @property
    def is_last_page(self) -> bool:
        return self.current_page == self.total_pages

    def __len__(self) -> int:
        return len(self.items)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "items": list(self.items),
            "current_page": self.current_page,
            "total_pages": self.total_pages,
            "total_items": self.total_items,
            "prev_page": self.prev_page,
            "next_page": self.next_page,
            "is_first_page": self.is_first_page,
            "is_last_page": self.is_last_page,
        }


@dataclass(frozen=True)
class Collection:
    """A named, immutable set of records with its scopes and relations."""

    name: str
    records: Tuple[Mapping[str, Any], ...] = ()
    scopes: Mapping[str, Any] = field(default_factory=dict)
    relations: Mapping[str, Any] = field(default_factory=dict)
