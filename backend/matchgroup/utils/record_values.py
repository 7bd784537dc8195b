"""
Value parsers for loosely-typed stored record fields.

Stored records come either from the database (already-structured values) or
from page-local JSON blobs (JSON-encoded strings), and scalar fields are
frequently empty strings or stringly-encoded booleans and numbers.
"""

import copy
import json
import math
from typing import Any, Callable, Optional, Union

from matchgroup.services.errors import MatchRecordDecodeError

_TRUE_VALUES = ("true", "1", "yes", "y", "t")
_FALSE_VALUES = ("false", "0", "no", "n", "f")


def nil_if_empty(value: Any) -> Any:
    """Canonicalize the empty string (and None) to None."""
    if value is None or value == "":
        return None
    return value


def read_bool_or_none(value: Any) -> Optional[bool]:
    """
    Parse 'true'/'false'/1/0/True/False to a bool. Anything absent or
    unrecognized is None.
    """
    if value is None or isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        if value == 1:
            return True
        if value == 0:
            return False
        return None
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_VALUES:
            return True
        if lowered in _FALSE_VALUES:
            return False
    return None


def read_bool(value: Any) -> bool:
    """Like read_bool_or_none, with absent values read as False."""
    return bool(read_bool_or_none(value))


def to_number(value: Any) -> Optional[Union[int, float]]:
    """Parse a number from a stored field. Returns None when it is not one."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else value
    if isinstance(value, str):
        raw = value.strip()
        if not raw:
            return None
        try:
            return int(raw)
        except ValueError:
            pass
        try:
            number = float(raw)
        except ValueError:
            return None
        if not math.isfinite(number):
            return None
        return int(number) if number.is_integer() else number
    return None


def parse_or_copy(
    value: Any,
    field: str,
    match_id: Optional[str] = None,
    group_id: Optional[str] = None,
    default: Callable[[], Any] = dict,
) -> Any:
    """
    Parse a field that is either a JSON string or an already-structured value.

    JSON strings are decoded, structured values are deep-copied, and absent or
    empty values become a fresh default container. An empty table is stored
    as "[]" whatever its shape, so an empty list or dict reads as the default
    container. The result can be mutated without altering the source record.

    Raises:
        MatchRecordDecodeError: If the JSON string is malformed, or the value
            is not of the default container's type
    """
    if value is None or value == "":
        return default()
    if isinstance(value, str):
        try:
            parsed = json.loads(value)
        except json.JSONDecodeError as exc:
            raise MatchRecordDecodeError(field, match_id=match_id, group_id=group_id, reason=str(exc)) from exc
    else:
        parsed = copy.deepcopy(value)

    empty = default()
    if parsed is None or (isinstance(parsed, (list, dict)) and not parsed):
        return empty
    if not isinstance(parsed, type(empty)):
        raise MatchRecordDecodeError(
            field,
            match_id=match_id,
            group_id=group_id,
            reason=f"expected {type(empty).__name__}, got {type(parsed).__name__}",
        )
    return parsed
