"""
Match group construction from stored match records.

Pure functions: records in, Matchlist or Bracket out. Fetching and caching
live in match_group_context.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional

from matchgroup.services.advance_spots import apply_default_advance_spot, populate_advance_spots
from matchgroup.services.bracket_coordinates import (
    backfill_coordinates,
    backfill_parent_match_ids,
    compute_root_match_ids,
    get_rounds_from_coordinates,
    get_sections_from_coordinates,
)
from matchgroup.services.match_group_checks import check_match_group, type_check_enabled
from matchgroup.services.match_group_types import (
    Bracket,
    BracketBracketData,
    Match,
    MatchGroup,
    Matchlist,
)
from matchgroup.services.record_normalizer import (
    coerce_match_records_to_type,
    match_from_record,
    read_bracket_type,
)

logger = logging.getLogger(__name__)

# (record, group_id) -> Match
MatchConverter = Callable[[Dict[str, Any], Optional[str]], Match]


def resolve_match_converter(converter: Optional[MatchConverter]) -> MatchConverter:
    return converter or match_from_record


def make_match_group(
    records: List[Dict[str, Any]],
    converter: Optional[MatchConverter] = None,
    group_id: Optional[str] = None,
) -> MatchGroup:
    """Build a Matchlist or Bracket depending on the first record's bracket type."""
    bracket_type = read_bracket_type(records[0], group_id) if records else "matchlist"
    if bracket_type == "bracket":
        return make_bracket_from_records(records, converter, group_id)
    return make_matchlist_from_records(records, converter, group_id)


def _index_matches(matches: List[Match], group_id: Optional[str]) -> Dict[str, Match]:
    matches_by_id: Dict[str, Match] = {}
    for match in matches:
        if match.match_id is None:
            logger.warning("Skipping match without id in group %s", group_id)
            continue
        if match.match_id in matches_by_id:
            logger.warning("Duplicate match id %s in group %s, keeping the last", match.match_id, group_id)
        matches_by_id[match.match_id] = match
    return matches_by_id


def make_matchlist_from_records(
    records: List[Dict[str, Any]],
    converter: Optional[MatchConverter] = None,
    group_id: Optional[str] = None,
) -> Matchlist:
    convert = resolve_match_converter(converter)
    records = coerce_match_records_to_type(records, "matchlist", group_id)
    matches = [convert(record, group_id) for record in records]

    matchlist = Matchlist(matches=matches, matches_by_id=_index_matches(matches, group_id))
    logger.debug("Built matchlist %s with %d matches", group_id, len(matches))

    if type_check_enabled():
        check_match_group(matchlist)
    return matchlist


def make_bracket_from_records(
    records: List[Dict[str, Any]],
    converter: Optional[MatchConverter] = None,
    group_id: Optional[str] = None,
) -> Bracket:
    convert = resolve_match_converter(converter)
    records = coerce_match_records_to_type(records, "bracket", group_id)
    matches = [convert(record, group_id) for record in records]

    matches_by_id = _index_matches(matches, group_id)
    bracket_datas_by_id: Dict[str, BracketBracketData] = {
        match_id: match.bracket_data
        for match_id, match in matches_by_id.items()
        if isinstance(match.bracket_data, BracketBracketData)
    }

    first_coordinates = (
        matches[0].bracket_data.coordinates
        if matches and isinstance(matches[0].bracket_data, BracketBracketData)
        else None
    )
    if not first_coordinates:
        for match_id in backfill_parent_match_ids(bracket_datas_by_id):
            apply_default_advance_spot(bracket_datas_by_id[match_id])

    bracket = Bracket(
        matches=matches,
        matches_by_id=matches_by_id,
        bracket_datas_by_id=bracket_datas_by_id,
        coordinates_by_match_id={
            match_id: bracket_data.coordinates
            for match_id, bracket_data in bracket_datas_by_id.items()
            if bracket_data.coordinates is not None
        },
        root_match_ids=compute_root_match_ids(bracket_datas_by_id),
    )

    if first_coordinates:
        bracket.rounds = get_rounds_from_coordinates(bracket)
        bracket.sections = get_sections_from_coordinates(bracket)
    else:
        backfill_coordinates(bracket)

    populate_advance_spots(bracket)

    logger.debug(
        "Built bracket %s: %d matches, %d roots, %d rounds, %d sections (%s coordinates)",
        group_id,
        len(matches),
        len(bracket.root_match_ids),
        len(bracket.rounds),
        len(bracket.sections),
        "stored" if first_coordinates else "computed",
    )

    if type_check_enabled():
        check_match_group(bracket)
    return bracket
