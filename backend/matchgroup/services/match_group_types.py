"""
Typed structures for matchlists, brackets, matches, opponents and games.

These are built fresh from stored match records for every query (see
record_normalizer and match_group_builder) and discarded afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional, Union

AdvanceBg = Literal["up", "stayup", "stay", "staydown", "down"]
AdvanceSpotType = Literal["advance", "custom", "qualify"]

ADVANCE_BGS = ("up", "stayup", "stay", "staydown", "down")

# Winner's and loser's destinations
MAX_ADVANCE_SPOTS = 2


@dataclass
class ChildEdge:
    """Connector from the child match at child_match_index to an opponent slot (1-based)."""

    child_match_index: int
    opponent_index: int


@dataclass
class AdvanceSpot:
    bg: AdvanceBg
    type: AdvanceSpotType
    match_id: Optional[str] = None


@dataclass
class MatchCoordinates:
    depth: int
    depth_count: int
    match_index_in_round: int
    root_index: int
    round_count: int
    round_index: int
    section_count: int
    section_index: int
    semantic_depth: int
    semantic_round_index: int


@dataclass
class MatchlistBracketData:
    header: Optional[str] = None
    title: Optional[str] = None
    type: Literal["matchlist"] = "matchlist"


@dataclass
class BracketBracketData:
    # Slot 1 is the winner's destination, slot 2 the loser's. Either may be None.
    advance_spots: List[Optional[AdvanceSpot]] = field(default_factory=list)
    bracket_reset_match_id: Optional[str] = None
    child_edges: List[ChildEdge] = field(default_factory=list)
    child_match_ids: List[str] = field(default_factory=list)
    coordinates: Optional[MatchCoordinates] = None
    header: Optional[str] = None
    parent_match_id: Optional[str] = None
    qual_lose: bool = False
    qual_lose_literal: Optional[str] = None
    qual_skip: int = 0
    qual_win: bool = False
    qual_win_literal: Optional[str] = None
    skip_round: int = 0
    third_place_match_id: Optional[str] = None
    title: Optional[str] = None
    type: Literal["bracket"] = "bracket"

    def advance_spot(self, position: int) -> Optional[AdvanceSpot]:
        """Advance spot at a 1-based position, or None."""
        if 1 <= position <= len(self.advance_spots):
            return self.advance_spots[position - 1]
        return None

    def set_advance_spot(self, position: int, spot: Optional[AdvanceSpot]) -> None:
        if not 1 <= position <= MAX_ADVANCE_SPOTS:
            raise ValueError(f"advance spot position must be 1..{MAX_ADVANCE_SPOTS}, got {position}")
        while len(self.advance_spots) < position:
            self.advance_spots.append(None)
        self.advance_spots[position - 1] = spot
        while self.advance_spots and self.advance_spots[-1] is None:
            self.advance_spots.pop()


BracketData = Union[MatchlistBracketData, BracketBracketData]


@dataclass
class Player:
    display_name: Optional[str] = None
    flag: Optional[str] = None
    page_name: Optional[str] = None
    extradata: Dict[str, Any] = field(default_factory=dict)


@dataclass
class Opponent:
    type: str = "literal"
    players: List[Player] = field(default_factory=list)
    advance_bg: Optional[str] = None
    advances: Optional[bool] = None
    icon: Optional[str] = None
    name: Optional[str] = None
    placement: Optional[Union[int, float]] = None
    placement2: Optional[Union[int, float]] = None
    score: Optional[Union[int, float]] = None
    score2: Optional[Union[int, float]] = None
    status: Optional[str] = None
    status2: Optional[str] = None
    template: Optional[str] = None
    extradata: Dict[str, Any] = field(default_factory=dict)


@dataclass
class Game:
    comment: Optional[str] = None
    header: Optional[str] = None
    length: Optional[Any] = None
    map: Optional[str] = None
    mode: Optional[str] = None
    participants: Dict[str, Any] = field(default_factory=dict)
    result_type: Optional[str] = None
    scores: List[Any] = field(default_factory=list)
    subgroup: Optional[Union[int, float]] = None
    type: Optional[str] = None
    vod: Optional[str] = None
    walkover: Optional[str] = None
    winner: Optional[Union[int, float]] = None
    extradata: Dict[str, Any] = field(default_factory=dict)


@dataclass
class Match:
    match_id: Optional[str]
    bracket_data: BracketData
    date: Optional[str] = None
    date_is_exact: bool = False
    finished: bool = False
    opponents: List[Opponent] = field(default_factory=list)
    games: List[Game] = field(default_factory=list)
    comment: Optional[str] = None
    extradata: Dict[str, Any] = field(default_factory=dict)
    links: Dict[str, Any] = field(default_factory=dict)
    mode: Optional[str] = None
    # Custom advance backgrounds (pbg1, pbg2, ...) by opponent position
    position_backgrounds: List[str] = field(default_factory=list)
    result_type: Optional[str] = None
    stream: Dict[str, Any] = field(default_factory=dict)
    type: str = "literal"
    vod: Optional[str] = None
    walkover: Optional[str] = None
    winner: Optional[Union[int, float]] = None


@dataclass
class Team:
    bracket_name: Optional[str]
    display_name: Optional[str]
    page_name: Optional[str]
    short_name: Optional[str]


@dataclass
class Matchlist:
    matches: List[Match] = field(default_factory=list)
    matches_by_id: Dict[str, Match] = field(default_factory=dict)
    type: Literal["matchlist"] = "matchlist"


@dataclass
class Bracket:
    matches: List[Match] = field(default_factory=list)
    matches_by_id: Dict[str, Match] = field(default_factory=dict)
    bracket_datas_by_id: Dict[str, BracketBracketData] = field(default_factory=dict)
    coordinates_by_match_id: Dict[str, MatchCoordinates] = field(default_factory=dict)
    root_match_ids: List[str] = field(default_factory=list)
    rounds: List[List[str]] = field(default_factory=list)
    sections: List[List[str]] = field(default_factory=list)
    type: Literal["bracket"] = "bracket"


MatchGroup = Union[Matchlist, Bracket]
