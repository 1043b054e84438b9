"""AND/OR composition of a query's condition entries.

Plain AND entries narrow a running result. OR entries (and OR groups) are
evaluated against the full input and collected separately; they only ever
widen the final result, never the AND chain itself. AND groups narrow the
running result by recursing over it.
"""

import logging
from typing import Any, List, Mapping, Sequence

from ..models import ConditionEntry, ConditionKind
from .condition_evaluator import filter_records

logger = logging.getLogger(__name__)

Record = Mapping[str, Any]


def _dedupe(records: Sequence[Record]) -> List[Record]:
    # Records are not hashable in general, so compare by value.
    unique: List[Record] = []
    for record in records:
        if not any(record == seen for seen in unique):
            unique.append(record)
    return unique


def apply_entries(records: Sequence[Record], entries: Sequence[ConditionEntry]) -> List[Record]:
    """Filter records through a sequence of condition entries.

    Args:
        records: The input records; OR entries are evaluated against these
        entries: Condition entries in declaration order

    Returns:
        Matching records. Order is the AND result followed by any OR
        matches not already present.
    """
    dataset = list(records)
    if not entries:
        return dataset

    and_result = dataset
    or_results: List[Record] = []

    for entry in entries:
        if entry.kind is ConditionKind.AND:
            and_result = filter_records(and_result, entry.payload)
        elif entry.kind is ConditionKind.OR:
            or_results.extend(filter_records(dataset, entry.payload))
        elif entry.kind is ConditionKind.AND_GROUP:
            and_result = apply_entries(and_result, entry.payload)
        elif entry.kind is ConditionKind.OR_GROUP:
            or_results.extend(apply_entries(dataset, entry.payload))
        else:
            raise ValueError(f"Unknown condition kind: {entry.kind!r}")

    if not or_results:
        return and_result

    combined = _dedupe(and_result + or_results)
    logger.debug(
        "Combined %d AND matches with %d OR matches into %d records",
        len(and_result), len(or_results), len(combined),
    )
    return combined
