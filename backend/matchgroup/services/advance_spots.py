"""
Advance spot resolution.

Slot 1 of a bracket match is where its winner goes, slot 2 where its loser
goes. Spots are resolved in layers, each later layer overriding only the
fields it sets:

1. parentMatchId        -> slot 1 {up, advance, parent}
2. winnerto / loserto   -> slot 1 {up, custom, target} / slot 2 {stayup, custom, target}
3. qualwin / quallose   -> type becomes 'qualify'
4. third place match    -> semifinals without slot 2 send their loser there
5. pbg1, pbg2           -> custom backgrounds by opponent position

Layers 1-3 only need the match's own bracket data (compute_advance_spots).
Layers 4-5 need the whole bracket (populate_advance_spots).
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Dict, List, Optional

from matchgroup.services.match_group_types import (
    MAX_ADVANCE_SPOTS,
    AdvanceSpot,
    Bracket,
    BracketBracketData,
)
from matchgroup.utils.record_values import nil_if_empty, read_bool

logger = logging.getLogger(__name__)


def _merge_spot(
    spot: Optional[AdvanceSpot],
    bg: str,
    spot_type: str,
    match_id: Optional[str] = None,
) -> AdvanceSpot:
    """Shallow merge: bg and type overwrite, match_id only when given."""
    if spot is None:
        return AdvanceSpot(bg=bg, type=spot_type, match_id=match_id)
    return replace(spot, bg=bg, type=spot_type, match_id=match_id if match_id is not None else spot.match_id)


def compute_advance_spots(data: Dict[str, Any]) -> List[Optional[AdvanceSpot]]:
    """
    Compute the advance spots that can be determined from a stored bracket
    data table alone. The rest are filled in by populate_advance_spots.
    """
    spots: List[Optional[AdvanceSpot]] = [None, None]

    parent_match_id = nil_if_empty(data.get("parentMatchId"))
    if parent_match_id:
        spots[0] = AdvanceSpot(bg="up", type="advance", match_id=parent_match_id)

    winner_to = nil_if_empty(data.get("winnerto"))
    if winner_to:
        spots[0] = _merge_spot(spots[0], "up", "custom", winner_to)
    loser_to = nil_if_empty(data.get("loserto"))
    if loser_to:
        spots[1] = _merge_spot(spots[1], "stayup", "custom", loser_to)

    if read_bool(data.get("qualwin")):
        spots[0] = _merge_spot(spots[0], spots[0].bg if spots[0] else "up", "qualify")
    if read_bool(data.get("quallose")):
        spots[1] = _merge_spot(spots[1], spots[1].bg if spots[1] else "stayup", "qualify")

    while spots and spots[-1] is None:
        spots.pop()
    return spots


def apply_default_advance_spot(bracket_data: BracketBracketData) -> None:
    """Give a match whose parent was back-filled the default winner spot."""
    if bracket_data.parent_match_id and bracket_data.advance_spot(1) is None:
        bracket_data.set_advance_spot(
            1, AdvanceSpot(bg="up", type="advance", match_id=bracket_data.parent_match_id)
        )


def populate_advance_spots(bracket: Bracket) -> None:
    """Fill in the advance spots that depend on other matches of the bracket."""
    if not bracket.matches:
        return

    # Loser of semifinals play in third place match
    first_bracket_data = bracket.bracket_datas_by_id.get(bracket.root_match_ids[0]) if bracket.root_match_ids else None
    third_place_match_id = first_bracket_data.third_place_match_id if first_bracket_data else None
    if third_place_match_id and third_place_match_id in bracket.matches_by_id:
        for child_match_id in first_bracket_data.child_match_ids:
            bracket_data = bracket.bracket_datas_by_id.get(child_match_id)
            if bracket_data is None:
                logger.warning("Child match %s of %s is missing", child_match_id, bracket.root_match_ids[0])
                continue
            if bracket_data.advance_spot(2) is None:
                bracket_data.set_advance_spot(
                    2, AdvanceSpot(bg="stayup", type="advance", match_id=third_place_match_id)
                )

    # Custom advance spots set via pbg params
    for match in bracket.matches:
        bracket_data = match.bracket_data
        if not isinstance(bracket_data, BracketBracketData):
            continue
        if len(match.position_backgrounds) > MAX_ADVANCE_SPOTS:
            logger.debug(
                "Match %s: ignoring %d position backgrounds past slot %d",
                match.match_id,
                len(match.position_backgrounds) - MAX_ADVANCE_SPOTS,
                MAX_ADVANCE_SPOTS,
            )
        for position, bg in enumerate(match.position_backgrounds[:MAX_ADVANCE_SPOTS], start=1):
            bracket_data.set_advance_spot(position, _merge_spot(bracket_data.advance_spot(position), bg, "custom"))


def sync_qualification_flags(bracket_data: BracketBracketData) -> None:
    win_spot = bracket_data.advance_spot(1)
    lose_spot = bracket_data.advance_spot(2)
    bracket_data.qual_win = bool(win_spot and win_spot.type == "qualify")
    bracket_data.qual_lose = bool(lose_spot and lose_spot.type == "qualify")
