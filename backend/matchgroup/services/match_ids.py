"""
Match identifier encodings.

Two encodings are in use for the same match:
  record form: "R01-M003" (bracket), "0005" (matchlist)
  key form:    "R1M3"     (bracket), "M5"   (matchlist)

The special bracket matches "RxMBR" (bracket reset) and "RxMTP" (third place)
are the same in both encodings.
"""

import re
from typing import Any, Dict, Optional, Tuple, Union

BRACKET_RESET_TOKEN = "RxMBR"
THIRD_PLACE_TOKEN = "RxMTP"
SPECIAL_MATCH_TOKENS = (BRACKET_RESET_TOKEN, THIRD_PLACE_TOKEN)

_RECORD_MATCHLIST_ID = re.compile(r"^[0-9]+$")
_RECORD_BRACKET_ID = re.compile(r"^R([0-9]+)-M([0-9]+)$")
_KEY_BRACKET_ID = re.compile(r"^R([0-9]+)M([0-9]+)$")
_KEY_MATCHLIST_ID = re.compile(r"^M?([0-9]+)$")
_FULL_MATCH_ID = re.compile(r"^(.*)_([A-Za-z0-9-]+)$")


def match_id_to_key(match_id: Union[str, int]) -> Optional[str]:
    """Convert R01-M003 to R1M3 (bracket) and 0005 or 5 to M5 (matchlist)."""
    if isinstance(match_id, int) and not isinstance(match_id, bool):
        return f"M{match_id}"

    if _RECORD_MATCHLIST_ID.match(match_id):
        return f"M{int(match_id)}"

    if match_id in SPECIAL_MATCH_TOKENS:
        return match_id

    m = _RECORD_BRACKET_ID.match(match_id)
    if m:
        return f"R{int(m.group(1))}M{int(m.group(2))}"
    return None


def match_id_from_key(match_key: Union[str, int]) -> Optional[str]:
    """Convert R1M3 to R01-M003 (bracket) and M5, 5 or "5" to 0005 (matchlist)."""
    if isinstance(match_key, int):
        return f"{match_key:04d}"

    m = _KEY_MATCHLIST_ID.match(match_key)
    if m:
        return f"{int(m.group(1)):04d}"

    if match_key in SPECIAL_MATCH_TOKENS:
        return match_key

    m = _KEY_BRACKET_ID.match(match_key)
    if m:
        return f"R{int(m.group(1)):02d}-M{int(m.group(2)):03d}"
    return None


def split_match_id(match_id: str) -> Optional[Tuple[str, str]]:
    """
    Split a full match id like h5HXaqbSVP_R02-M002 into the group id
    (h5HXaqbSVP) and the base match id (R02-M002).

    The last underscore separates the two parts. Returns None if the id does
    not have that shape.
    """
    m = _FULL_MATCH_ID.match(match_id)
    if not m:
        return None
    return m.group(1), m.group(2)


def is_bracket_reset_match_id(match_id: str) -> bool:
    return match_id.endswith(BRACKET_RESET_TOKEN)


def _shift_indexes(table: Dict[str, Any], offset: int) -> Dict[str, Any]:
    # bool is an int subclass but never an index
    return {
        key: value + offset
        if "Index" in key and isinstance(value, int) and not isinstance(value, bool)
        else value
        for key, value in table.items()
    }


def index_table_from_record(record: Dict[str, Any]) -> Dict[str, Any]:
    """Convert the 0-based *Index fields of a stored table to 1-based."""
    return _shift_indexes(record, 1)


def index_table_to_record(table: Dict[str, Any]) -> Dict[str, Any]:
    """Convert 1-based *Index fields back to the 0-based stored form."""
    return _shift_indexes(table, -1)


def section_index_to_string(section_index: int, section_count: int) -> str:
    """Deprecated three-way section label still written to stored records."""
    if section_index == 1:
        return "upper"
    elif section_index == section_count:
        return "lower"
    else:
        return "mid"
