"""Condition evaluation for single records.

A condition pairs a field name with a spec. The spec is either a literal,
a list/tuple, a bounded range, or an operator dict such as
``{"greater_than": 3}``. Operator keys are checked in a fixed priority
order and the first key present decides the test.
"""

from typing import Any, Callable, List, Mapping, Sequence, Tuple

from ..models import ValueRange

Record = Mapping[str, Any]


def to_text(value: Any) -> str:
    """Coerce a field value to text for substring operators."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def is_empty(value: Any) -> bool:
    """True for None, the empty string, and empty sequences or mappings."""
    if value is None or value == "":
        return True
    if isinstance(value, (list, tuple, set, frozenset, dict, Mapping)):
        return len(value) == 0
    return False


def values_equal(left: Any, right: Any) -> bool:
    """Equality that keeps booleans apart from the numbers they compare equal to."""
    if isinstance(left, bool) or isinstance(right, bool):
        return type(left) is type(right) and left == right
    return left == right


def _includes(values: Sequence[Any], value: Any) -> bool:
    return any(values_equal(value, item) for item in values)


def _as_list(value: Any) -> List[Any]:
    if value is None:
        return []
    if isinstance(value, (list, tuple, set, frozenset)):
        return list(value)
    return [value]


def _ordered(compare: Callable[[Any, Any], bool]) -> Callable[[Any, Any], bool]:
    def check(field_value: Any, operand: Any) -> bool:
        if field_value is None:
            return False
        try:
            return bool(compare(field_value, operand))
        except TypeError:
            return False
    return check


def _contains(field_value: Any, spec: Mapping[str, Any]) -> bool:
    return to_text(spec["contains"]) in to_text(field_value)


def _starts_with(field_value: Any, spec: Mapping[str, Any]) -> bool:
    return to_text(field_value).startswith(to_text(spec["starts_with"]))


def _ends_with(field_value: Any, spec: Mapping[str, Any]) -> bool:
    return to_text(field_value).endswith(to_text(spec["ends_with"]))


_gt = _ordered(lambda a, b: a > b)
_lt = _ordered(lambda a, b: a < b)
_gte = _ordered(lambda a, b: a >= b)
_lte = _ordered(lambda a, b: a <= b)


def _greater_than(field_value: Any, spec: Mapping[str, Any]) -> bool:
    return _gt(field_value, spec["greater_than"])


def _less_than(field_value: Any, spec: Mapping[str, Any]) -> bool:
    return _lt(field_value, spec["less_than"])


def _greater_than_or_equal(field_value: Any, spec: Mapping[str, Any]) -> bool:
    return _gte(field_value, spec["greater_than_or_equal"])


def _less_than_or_equal(field_value: Any, spec: Mapping[str, Any]) -> bool:
    return _lte(field_value, spec["less_than_or_equal"])


def _between(field_value: Any, spec: Mapping[str, Any]) -> bool:
    # Either bound may be missing; present bounds are inclusive.
    if "from" in spec and not _gte(field_value, spec["from"]):
        return False
    if "to" in spec and not _lte(field_value, spec["to"]):
        return False
    return field_value is not None


def _in(field_value: Any, spec: Mapping[str, Any]) -> bool:
    return _includes(_as_list(spec["in"]), field_value)


def _not_in(field_value: Any, spec: Mapping[str, Any]) -> bool:
    return not _includes(_as_list(spec["not_in"]), field_value)


def _not(field_value: Any, spec: Mapping[str, Any]) -> bool:
    return not values_equal(field_value, spec["not"])


def _exists(field_value: Any, spec: Mapping[str, Any]) -> bool:
    present = field_value is not None
    return present if spec["exists"] else not present


def _empty(field_value: Any, spec: Mapping[str, Any]) -> bool:
    empty = is_empty(field_value)
    return empty if spec["empty"] else not empty


# Priority order matters: the first key found in the spec wins.
OPERATORS: Tuple[Tuple[Tuple[str, ...], Callable[[Any, Mapping[str, Any]], bool]], ...] = (
    (("contains",), _contains),
    (("starts_with",), _starts_with),
    (("ends_with",), _ends_with),
    (("greater_than",), _greater_than),
    (("less_than",), _less_than),
    (("greater_than_or_equal",), _greater_than_or_equal),
    (("less_than_or_equal",), _less_than_or_equal),
    (("from", "to"), _between),
    (("in",), _in),
    (("not_in",), _not_in),
    (("not",), _not),
    (("exists",), _exists),
    (("empty",), _empty),
)


def _evaluate_operator_spec(field_value: Any, spec: Mapping[str, Any]) -> bool:
    for keys, check in OPERATORS:
        if any(key in spec for key in keys):
            return check(field_value, spec)
    return field_value == spec


def evaluate(record: Record, field: str, spec: Any) -> bool:
    """Evaluate a single field condition against a record.

    Args:
        record: The record to test
        field: Field name to read; missing fields read as None
        spec: Literal, list/tuple, range, or operator dict

    Returns:
        True if the record satisfies the condition
    """
    field_value = record.get(field)

    if isinstance(spec, Mapping):
        return _evaluate_operator_spec(field_value, spec)

    if isinstance(spec, (list, tuple)):
        if isinstance(field_value, (list, tuple)):
            return len(field_value) == len(spec) and all(map(values_equal, field_value, spec))
        return _includes(spec, field_value)

    if isinstance(spec, (range, ValueRange)):
        if isinstance(field_value, bool):
            return False
        try:
            return field_value in spec
        except TypeError:
            return False

    return values_equal(field_value, spec)


def matches_all(record: Record, conditions: Mapping[str, Any]) -> bool:
    """True when the record satisfies every field condition in the mapping."""
    return all(evaluate(record, field, spec) for field, spec in conditions.items())


def filter_records(records: Sequence[Record], conditions: Mapping[str, Any]) -> List[Record]:
    """Records satisfying every field condition, in input order."""
    return [record for record in records if matches_all(record, conditions)]
