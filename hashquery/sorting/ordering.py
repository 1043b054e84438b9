"""Ordering and offset/limit windowing for materialized records."""

import logging
from datetime import date, datetime, time, timezone
from numbers import Real
from typing import Any, List, Mapping, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)


Record = Mapping[str, Any]

RANK_NUMERIC = 0
RANK_STRING = 1
RANK_TEMPORAL = 2
RANK_OTHER = 3


def _naive_utc(value: datetime) -> datetime:
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def sort_key(value: Any) -> Tuple[int, Any]:
    """Build a (rank, value) key so heterogeneous values never compare across types.

    Ranks: numbers < strings < dates/datetimes < everything else (stringified).
    Booleans are not treated as numbers.
    """
    if isinstance(value, Real) and not isinstance(value, bool):
        return (RANK_NUMERIC, value)
    if isinstance(value, str):
        return (RANK_STRING, value)
    if isinstance(value, datetime):
        return (RANK_TEMPORAL, _naive_utc(value))
    if isinstance(value, date):
        return (RANK_TEMPORAL, datetime.combine(value, time.min))
    if isinstance(value, bool):
        return (RANK_OTHER, "true" if value else "false")
    return (RANK_OTHER, str(value))


def apply_ordering(records: Sequence[Record], field: str, desc: bool = False) -> List[Record]:
    """Sort records by one field, nulls always last.

    Args:
        records: Records to sort
        field: Field to sort by
        desc: Reverse the non-null portion

    Returns:
        New sorted list; records with a null (or missing) field keep their
        relative order at the end regardless of direction.
    """
    nulls = [record for record in records if record.get(field) is None]
    present = [record for record in records if record.get(field) is not None]

    ordered = sorted(present, key=lambda record: sort_key(record[field]))
    if desc:
        ordered.reverse()

    return ordered + nulls


def apply_window(records: Sequence[Record], offset: Optional[int] = None, limit: Optional[int] = None) -> List[Record]:
    """Apply offset then limit.

    A missing or negative offset means zero. A missing limit means unlimited;
    a zero or negative limit yields nothing.
    """
    result = list(records)

    if offset is not None and offset > 0:
        result = result[offset:]

    if limit is not None:
        result = result[:limit] if limit > 0 else []

    return result


def order_and_window(
    records: Sequence[Record],
    order_field: Optional[str] = None,
    order_desc: bool = False,
    offset: Optional[int] = None,
    limit: Optional[int] = None,
) -> List[Record]:
    """Ordering, then offset, then limit."""
    result = list(records)
    if order_field is not None:
        result = apply_ordering(result, order_field, order_desc)
    result = apply_window(result, offset, limit)
    logger.debug("Ordered and windowed %d records down to %d", len(records), len(result))
    return result
