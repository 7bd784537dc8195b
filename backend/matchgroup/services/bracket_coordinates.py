"""
Bracket topology: parent links, root matches, coordinates, rounds and sections.

Coordinates are stored on every bracket match by a recent purge of the
bracket template. When they are missing, parent links and coordinates are
derived from the child match ids instead:

- Each tree is walked from its root in root order, children in child order.
- semantic_depth is the distance from the root; depth additionally counts
  the skipped rounds (skip_round) along the path.
- round_index = round_count - depth, so roots sit in the last round.
- Each root starts a section. A root with a bracket reset match is a double
  elimination grand final, and each of its children after the first starts
  another section (the lower bracket).
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, List, Set, Tuple

from matchgroup.services.match_group_types import (
    Bracket,
    BracketBracketData,
    MatchCoordinates,
)
from matchgroup.services.match_ids import is_bracket_reset_match_id

logger = logging.getLogger(__name__)


@dataclass
class BracketCoordinates:
    coordinates_by_match_id: Dict[str, MatchCoordinates] = field(default_factory=dict)
    rounds: List[List[str]] = field(default_factory=list)
    sections: List[List[str]] = field(default_factory=list)


@dataclass
class _Visit:
    match_id: str
    root_index: int
    semantic_depth: int
    depth: int
    section_index: int


# ── Parent links and roots ───────────────────────────────────────────────


def compute_parent_match_ids(bracket_datas_by_id: Dict[str, BracketBracketData]) -> Dict[str, str]:
    """Map each child match id to the match listing it in child_match_ids."""
    parent_match_ids: Dict[str, str] = {}
    for match_id, bracket_data in bracket_datas_by_id.items():
        for child_match_id in bracket_data.child_match_ids:
            if child_match_id in parent_match_ids and parent_match_ids[child_match_id] != match_id:
                logger.warning(
                    "Match %s is a child of both %s and %s",
                    child_match_id,
                    parent_match_ids[child_match_id],
                    match_id,
                )
            parent_match_ids[child_match_id] = match_id
    return parent_match_ids


def backfill_parent_match_ids(bracket_datas_by_id: Dict[str, BracketBracketData]) -> Set[str]:
    """
    Populate parent_match_id from the child match ids. This can be needed if
    the bracket template is missing data.

    Returns the ids of matches that had no parent before and have one now.
    """
    parent_match_ids = compute_parent_match_ids(bracket_datas_by_id)
    gained_parent: Set[str] = set()
    for match_id, bracket_data in bracket_datas_by_id.items():
        parent_match_id = parent_match_ids.get(match_id)
        if parent_match_id and not bracket_data.parent_match_id:
            gained_parent.add(match_id)
        bracket_data.parent_match_id = parent_match_id
    return gained_parent


def compute_root_match_ids(bracket_datas_by_id: Dict[str, BracketBracketData]) -> List[str]:
    """
    Ids of the matches without a parent, in display order. Bracket reset
    matches are never roots.

    Matches with coordinates sort by root index. Matches without coordinates
    come first, ordered by plain string comparison of their ids.
    """
    root_match_ids = [
        match_id
        for match_id, bracket_data in bracket_datas_by_id.items()
        if not bracket_data.parent_match_id and not is_bracket_reset_match_id(match_id)
    ]

    def sort_key(match_id: str) -> Tuple:
        coordinates = bracket_datas_by_id[match_id].coordinates
        return (coordinates.root_index,) if coordinates else (-1, match_id)

    return sorted(root_match_ids, key=sort_key)


# ── Forward path: coordinates already stored ────────────────────────────


def _group_by_coordinate(bracket: Bracket, attr: str) -> List[List[str]]:
    groups: Dict[int, List[Tuple[int, int, str]]] = defaultdict(list)
    for match_id, bracket_data in bracket.bracket_datas_by_id.items():
        coordinates = bracket_data.coordinates
        if is_bracket_reset_match_id(match_id):
            continue
        if coordinates is None:
            logger.warning("Match %s has no coordinates, leaving it out of %s", match_id, attr)
            continue
        groups[getattr(coordinates, attr)].append(
            (coordinates.round_index, coordinates.match_index_in_round, match_id)
        )
    if not groups:
        return []
    return [[match_id for _, _, match_id in sorted(groups.get(index, []))] for index in range(1, max(groups) + 1)]


def get_rounds_from_coordinates(bracket: Bracket) -> List[List[str]]:
    return _group_by_coordinate(bracket, "round_index")


def get_sections_from_coordinates(bracket: Bracket) -> List[List[str]]:
    return _group_by_coordinate(bracket, "section_index")


# ── Back-fill path: coordinates derived from the match graph ────────────


def _walk(bracket: Bracket) -> Tuple[List[_Visit], int]:
    """Pre-order walk of every tree. Returns the visits and the section count."""
    datas = bracket.bracket_datas_by_id
    visits: List[_Visit] = []
    visited: Set[str] = set()
    section_count = 0

    for root_index, root_match_id in enumerate(bracket.root_match_ids, start=1):
        section_count += 1
        stack: List[Tuple[str, int, int, int]] = [(root_match_id, 0, 0, section_count)]
        while stack:
            match_id, semantic_depth, depth, section_index = stack.pop()
            if match_id in visited:
                logger.warning("Match %s is reachable more than once, skipping", match_id)
                continue
            visited.add(match_id)
            visits.append(_Visit(match_id, root_index, semantic_depth, depth, section_index))

            bracket_data = datas[match_id]
            children: List[Tuple[str, int, int, int]] = []
            for position, child_match_id in enumerate(bracket_data.child_match_ids):
                child_data = datas.get(child_match_id)
                if child_data is None:
                    logger.warning("Match %s lists missing child match %s", match_id, child_match_id)
                    continue
                child_section = section_index
                if position > 0 and semantic_depth == 0 and bracket_data.bracket_reset_match_id:
                    section_count += 1
                    child_section = section_count
                children.append(
                    (child_match_id, semantic_depth + 1, depth + 1 + child_data.skip_round, child_section)
                )
            stack.extend(reversed(children))

    unreachable = [
        match_id for match_id in datas if match_id not in visited and not is_bracket_reset_match_id(match_id)
    ]
    if unreachable:
        logger.warning("Matches not reachable from any root: %s", ", ".join(sorted(unreachable)))

    return visits, section_count


def compute_coordinates(bracket: Bracket) -> BracketCoordinates:
    """Derive coordinates, rounds and sections from parent/child links and root order."""
    visits, section_count = _walk(bracket)
    if not visits:
        return BracketCoordinates()

    round_count = max(v.depth for v in visits) + 1
    depth_counts: Dict[int, int] = defaultdict(int)
    semantic_depth_counts: Dict[int, int] = defaultdict(int)
    for v in visits:
        depth_counts[v.section_index] = max(depth_counts[v.section_index], v.depth + 1)
        semantic_depth_counts[v.section_index] = max(semantic_depth_counts[v.section_index], v.semantic_depth + 1)

    rounds: List[List[str]] = [[] for _ in range(round_count)]
    sections: List[List[str]] = [[] for _ in range(section_count)]
    coordinates_by_match_id: Dict[str, MatchCoordinates] = {}
    for v in visits:
        round_index = round_count - v.depth
        rounds[round_index - 1].append(v.match_id)
        sections[v.section_index - 1].append(v.match_id)
        coordinates_by_match_id[v.match_id] = MatchCoordinates(
            depth=v.depth,
            depth_count=depth_counts[v.section_index],
            match_index_in_round=len(rounds[round_index - 1]),
            root_index=v.root_index,
            round_count=round_count,
            round_index=round_index,
            section_count=section_count,
            section_index=v.section_index,
            semantic_depth=v.semantic_depth,
            semantic_round_index=semantic_depth_counts[v.section_index] - v.semantic_depth,
        )

    # Sections list matches round by round
    position = {match_id: (c.round_index, c.match_index_in_round) for match_id, c in coordinates_by_match_id.items()}
    sections = [sorted(section, key=position.__getitem__) for section in sections]

    return BracketCoordinates(
        coordinates_by_match_id=coordinates_by_match_id,
        rounds=rounds,
        sections=sections,
    )


def backfill_coordinates(bracket: Bracket) -> None:
    """
    Populate coordinates, rounds and sections of a bracket whose records have
    no coordinates. This can happen if the bracket template has not been
    recently purged.
    """
    bracket_coordinates = compute_coordinates(bracket)

    bracket.coordinates_by_match_id = bracket_coordinates.coordinates_by_match_id
    bracket.rounds = bracket_coordinates.rounds
    bracket.sections = bracket_coordinates.sections
    for match_id, bracket_data in bracket.bracket_datas_by_id.items():
        bracket_data.coordinates = bracket_coordinates.coordinates_by_match_id.get(match_id)
