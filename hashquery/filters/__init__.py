"""Condition evaluation for the query engine."""

from .composition import apply_entries
from .condition_evaluator import (
    evaluate,
    filter_records,
    is_empty,
    matches_all,
    to_text,
    values_equal,
)

__all__ = [
    "apply_entries",
    "evaluate",
    "filter_records",
    "is_empty",
    "matches_all",
    "to_text",
    "values_equal",
]
