"""
Stored match record -> typed match conversion.

A match record is either built from page-local JSON (every nested field is a
JSON string) or fetched from the database (nested fields already
structured). Both shapes are accepted for every such field, and the returned
structures never share containers with the source record.

match_from_record is the default record-to-match strategy. Callers that need
a different conversion pass their own function to the match group builders.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from matchgroup.services.advance_spots import compute_advance_spots, sync_qualification_flags
from matchgroup.services.bracket_wiring import auto_assign_child_edges
from matchgroup.services.match_group_types import (
    ADVANCE_BGS,
    MAX_ADVANCE_SPOTS,
    AdvanceSpot,
    BracketBracketData,
    BracketData,
    ChildEdge,
    Game,
    Match,
    MatchCoordinates,
    MatchlistBracketData,
    Opponent,
    Player,
)
from matchgroup.services.match_ids import (
    index_table_from_record,
    index_table_to_record,
    section_index_to_string,
)
from matchgroup.utils.record_values import (
    nil_if_empty,
    parse_or_copy,
    read_bool,
    read_bool_or_none,
    to_number,
)

logger = logging.getLogger(__name__)

BRACKET_TYPES = ("bracket", "matchlist")
DEFAULT_MATCHLIST_HEADER = "Matches"

_COORDINATE_FIELDS = {
    "depth": "depth",
    "depthCount": "depth_count",
    "matchIndexInRound": "match_index_in_round",
    "rootIndex": "root_index",
    "roundCount": "round_count",
    "roundIndex": "round_index",
    "sectionCount": "section_count",
    "sectionIndex": "section_index",
    "semanticDepth": "semantic_depth",
    "semanticRoundIndex": "semantic_round_index",
}


# ── Bracket type coercion ────────────────────────────────────────────────


def read_bracket_type(record: Dict[str, Any], group_id: Optional[str] = None) -> str:
    """Bracket type of a stored record. Missing or unknown types read as matchlist."""
    data = parse_or_copy(
        record.get("match2bracketdata"),
        "match2bracketdata",
        match_id=record.get("match2id"),
        group_id=group_id,
    )
    bracket_type = data.get("type") if isinstance(data, dict) else None
    if bracket_type not in BRACKET_TYPES:
        if bracket_type is not None:
            logger.warning("Unknown bracket type %r on match %s, reading as matchlist", bracket_type, record.get("match2id"))
        return "matchlist"
    return bracket_type


def coerce_match_records_to_type(
    records: List[Dict[str, Any]],
    bracket_type: str,
    group_id: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """
    Convert bracket match records to matchlist match records or vice versa.

    The two kinds of records are basically identical, so this only sets the
    type and, for the first match of a group turned into a bracket, a header.
    Records already of the requested type are returned as they are.
    """
    coerced: List[Dict[str, Any]] = []
    for index, record in enumerate(records):
        data = parse_or_copy(
            record.get("match2bracketdata"),
            "match2bracketdata",
            match_id=record.get("match2id"),
            group_id=group_id,
        )
        if data.get("type") == bracket_type:
            coerced.append(record)
            continue

        data["type"] = bracket_type
        if index == 0 and bracket_type == "bracket":
            data["header"] = nil_if_empty(data.get("header")) or nil_if_empty(data.get("title")) or DEFAULT_MATCHLIST_HEADER
        coerced.append({**record, "match2bracketdata": data})
    return coerced


# ── Match ────────────────────────────────────────────────────────────────


def match_from_record(record: Dict[str, Any], group_id: Optional[str] = None) -> Match:
    """Convert a stored match record to a typed Match."""
    match_id = record.get("match2id")
    group_id = group_id or record.get("match2bracketid")

    extradata = parse_or_copy(record.get("extradata"), "extradata", match_id, group_id)
    opponent_records = parse_or_copy(record.get("match2opponents"), "match2opponents", match_id, group_id, default=list)
    opponents = [opponent_from_record(r, match_id, group_id) for r in opponent_records]

    bracket_data = bracket_data_from_record(
        parse_or_copy(record.get("match2bracketdata"), "match2bracketdata", match_id, group_id),
        match_id=match_id,
        opponent_count=len(opponents),
    )

    game_records = parse_or_copy(record.get("match2games"), "match2games", match_id, group_id, default=list)

    return Match(
        match_id=match_id,
        bracket_data=bracket_data,
        comment=nil_if_empty(extradata.pop("comment", None)),
        date=nil_if_empty(record.get("date")),
        date_is_exact=read_bool(record.get("dateexact")),
        extradata=extradata,
        finished=read_bool(record.get("finished")),
        games=[game_from_record(r, match_id, group_id) for r in game_records],
        links=parse_or_copy(record.get("links"), "links", match_id, group_id),
        mode=nil_if_empty(record.get("mode")),
        opponents=opponents,
        position_backgrounds=_extract_position_backgrounds(extradata),
        result_type=nil_if_empty(record.get("resulttype")),
        stream=parse_or_copy(record.get("stream"), "stream", match_id, group_id),
        type=nil_if_empty(record.get("type")) or "literal",
        vod=nil_if_empty(record.get("vod")),
        walkover=nil_if_empty(record.get("walkover")),
        winner=to_number(record.get("winner")),
    )


def _extract_position_backgrounds(extradata: Dict[str, Any]) -> List[str]:
    """Pop pbg1, pbg2, ... from extradata, stopping at the first missing one."""
    backgrounds: List[str] = []
    position = 1
    while True:
        bg = nil_if_empty(extradata.pop(f"pbg{position}", None))
        if bg is None:
            break
        backgrounds.append(bg)
        position += 1
    # Leave no stray pbgN keys behind a gap
    for key in [k for k in extradata if k.startswith("pbg") and k[3:].isdigit()]:
        del extradata[key]
    return backgrounds


# ── Bracket data ─────────────────────────────────────────────────────────


def bracket_data_from_record(
    data: Dict[str, Any],
    match_id: Optional[str] = None,
    opponent_count: int = 0,
) -> BracketData:
    """
    Convert a stored bracket data table. Index fields are 0-based in storage
    and 1-based in the returned structure.

    Child edges missing from the record are assigned from the child match
    count and opponent_count.
    """
    if data.get("type") != "bracket":
        return MatchlistBracketData(
            header=nil_if_empty(data.get("header")),
            title=nil_if_empty(data.get("title")),
        )

    if data.get("advanceSpots") is not None:
        advance_spots = _advance_spots_from_record(data["advanceSpots"], match_id)
    else:
        advance_spots = compute_advance_spots(data)

    stored_child_match_ids = data.get("childMatchIds")
    child_match_ids = (
        list(stored_child_match_ids)
        if stored_child_match_ids is not None
        else compute_child_match_ids_from_legacy(data)
    )
    stored_child_edges = data.get("childEdges")
    if stored_child_edges is not None:
        child_edges = [_child_edge_from_record(e) for e in stored_child_edges]
    else:
        child_edges = auto_assign_child_edges(len(child_match_ids), opponent_count)
    coordinates = data.get("coordinates")

    bracket_data = BracketBracketData(
        advance_spots=advance_spots,
        bracket_reset_match_id=nil_if_empty(data.get("bracketreset")),
        child_edges=child_edges,
        child_match_ids=child_match_ids,
        coordinates=coordinates_from_record(coordinates) if coordinates else None,
        header=nil_if_empty(data.get("header")),
        parent_match_id=nil_if_empty(data.get("parentMatchId")),
        qual_lose_literal=nil_if_empty(data.get("qualloseLiteral")),
        qual_skip=_read_skip_count(data.get("qualskip")),
        qual_win_literal=nil_if_empty(data.get("qualwinLiteral")),
        skip_round=_read_skip_count(data.get("skipround")),
        third_place_match_id=nil_if_empty(data.get("thirdplace")),
        title=nil_if_empty(data.get("title")),
    )
    sync_qualification_flags(bracket_data)
    return bracket_data


def bracket_data_to_record(bracket_data: BracketData) -> Dict[str, Any]:
    """
    Convert typed bracket data back to the stored shape, including the
    deprecated bracketsection/toupper/tolower fields.
    """
    if isinstance(bracket_data, MatchlistBracketData):
        return {
            "header": bracket_data.header,
            "title": bracket_data.title,
            "type": "matchlist",
        }

    coordinates = bracket_data.coordinates
    child_match_ids = bracket_data.child_match_ids
    return {
        "advanceSpots": [
            {"bg": s.bg, "type": s.type, "matchId": s.match_id} if s else None for s in bracket_data.advance_spots
        ],
        "bracketreset": bracket_data.bracket_reset_match_id,
        "childEdges": [
            index_table_to_record({"childMatchIndex": e.child_match_index, "opponentIndex": e.opponent_index})
            for e in bracket_data.child_edges
        ],
        "childMatchIds": list(child_match_ids),
        "coordinates": coordinates_to_record(coordinates) if coordinates else None,
        "header": bracket_data.header,
        "parentMatchId": bracket_data.parent_match_id,
        "quallose": "true" if bracket_data.qual_lose else None,
        "qualloseLiteral": bracket_data.qual_lose_literal,
        "qualskip": bracket_data.qual_skip if bracket_data.qual_skip != 0 else None,
        "qualwin": "true" if bracket_data.qual_win else None,
        "qualwinLiteral": bracket_data.qual_win_literal,
        "skipround": bracket_data.skip_round if bracket_data.skip_round != 0 else None,
        "thirdplace": bracket_data.third_place_match_id,
        "title": bracket_data.title,
        "type": "bracket",
        # Deprecated
        "bracketsection": section_index_to_string(coordinates.section_index, coordinates.section_count)
        if coordinates
        else None,
        "tolower": child_match_ids[-1] if child_match_ids else None,
        "toupper": child_match_ids[-2] if len(child_match_ids) >= 2 else None,
    }


def compute_child_match_ids_from_legacy(data: Dict[str, Any]) -> List[str]:
    child_match_ids: List[str] = []
    if nil_if_empty(data.get("toupper")):
        child_match_ids.append(data["toupper"])
    if nil_if_empty(data.get("tolower")):
        child_match_ids.append(data["tolower"])
    return child_match_ids


def coordinates_from_record(record: Dict[str, Any]) -> MatchCoordinates:
    table = index_table_from_record(record)
    values = {attr: int(table.get(key) or 0) for key, attr in _COORDINATE_FIELDS.items()}
    return MatchCoordinates(**values)


def coordinates_to_record(coordinates: MatchCoordinates) -> Dict[str, Any]:
    table = {key: getattr(coordinates, attr) for key, attr in _COORDINATE_FIELDS.items()}
    return index_table_to_record(table)


def _child_edge_from_record(record: Dict[str, Any]) -> ChildEdge:
    table = index_table_from_record(record)
    return ChildEdge(child_match_index=int(table["childMatchIndex"]), opponent_index=int(table["opponentIndex"]))


def _advance_spots_from_record(records: List[Any], match_id: Optional[str]) -> List[Optional[AdvanceSpot]]:
    spots: List[Optional[AdvanceSpot]] = []
    for record in records[:MAX_ADVANCE_SPOTS]:
        if not record:
            spots.append(None)
            continue
        bg = record.get("bg")
        if bg not in ADVANCE_BGS:
            logger.warning("Match %s: unknown advance background %r", match_id, bg)
        spots.append(
            AdvanceSpot(bg=bg, type=record.get("type") or "custom", match_id=nil_if_empty(record.get("matchId")))
        )
    while spots and spots[-1] is None:
        spots.pop()
    return spots


def _read_skip_count(value: Any) -> int:
    # 'true' means skip one round
    number = to_number(value)
    if number is not None:
        return int(number)
    return 1 if value == "true" else 0


# ── Opponents, players, games ────────────────────────────────────────────


def opponent_from_record(
    record: Dict[str, Any],
    match_id: Optional[str] = None,
    group_id: Optional[str] = None,
) -> Opponent:
    extradata = parse_or_copy(record.get("extradata"), "match2opponents.extradata", match_id, group_id)
    player_records = parse_or_copy(
        record.get("match2players"), "match2opponents.match2players", match_id, group_id, default=list
    )
    return Opponent(
        advance_bg=nil_if_empty(extradata.pop("bg", None)),
        advances=read_bool_or_none(extradata.pop("advances", None)),
        extradata=extradata,
        icon=nil_if_empty(record.get("icon")),
        name=nil_if_empty(record.get("name")),
        placement=to_number(record.get("placement")),
        players=[player_from_record(r, match_id, group_id) for r in player_records],
        score=to_number(record.get("score")),
        status=nil_if_empty(record.get("status")),
        template=nil_if_empty(record.get("template")),
        type=nil_if_empty(record.get("type")) or "literal",
    )


def create_opponent(
    type: Optional[str] = None,
    name: Optional[str] = None,
    template: Optional[str] = None,
    icon: Optional[str] = None,
    score: Optional[Any] = None,
    status: Optional[str] = None,
    placement: Optional[Any] = None,
    players: Optional[List[Player]] = None,
    extradata: Optional[Dict[str, Any]] = None,
) -> Opponent:
    """Build an opponent that did not come from a stored record."""
    return Opponent(
        extradata=extradata or {},
        icon=icon,
        name=name,
        placement=placement,
        players=players or [],
        score=score,
        status=status,
        template=template,
        type=type or "literal",
    )


def player_from_record(
    record: Dict[str, Any],
    match_id: Optional[str] = None,
    group_id: Optional[str] = None,
) -> Player:
    return Player(
        display_name=nil_if_empty(record.get("displayname")),
        extradata=parse_or_copy(record.get("extradata"), "match2players.extradata", match_id, group_id),
        flag=nil_if_empty(record.get("flag")),
        page_name=nil_if_empty(record.get("name")),
    )


def game_from_record(
    record: Dict[str, Any],
    match_id: Optional[str] = None,
    group_id: Optional[str] = None,
) -> Game:
    extradata = parse_or_copy(record.get("extradata"), "match2games.extradata", match_id, group_id)
    return Game(
        comment=nil_if_empty(extradata.pop("comment", None)),
        extradata=extradata,
        header=nil_if_empty(extradata.pop("header", None)),
        length=nil_if_empty(record.get("length")),
        map=nil_if_empty(record.get("map")),
        mode=nil_if_empty(record.get("mode")),
        participants=parse_or_copy(record.get("participants"), "match2games.participants", match_id, group_id),
        result_type=nil_if_empty(record.get("resulttype")),
        scores=parse_or_copy(record.get("scores"), "match2games.scores", match_id, group_id, default=list),
        subgroup=to_number(record.get("subgroup")),
        type=nil_if_empty(record.get("type")),
        vod=nil_if_empty(record.get("vod")),
        walkover=nil_if_empty(record.get("walkover")),
        winner=to_number(record.get("winner")),
    )
