"""Ordering, windowing and pagination for the query engine."""

from .ordering import apply_ordering, apply_window, order_and_window, sort_key
from .pagination import paginate

__all__ = [
    "apply_ordering",
    "apply_window",
    "order_and_window",
    "paginate",
    "sort_key",
]
