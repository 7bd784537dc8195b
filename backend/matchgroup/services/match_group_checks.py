"""
Structural checks for constructed match groups.

Checks:
  A) matches_by_id, bracket_datas_by_id and coordinates_by_match_id only
     refer to existing matches
  B) Every match has at most two advance spots with known bg/type values
  C) Every child edge points at an existing opponent slot
  D) Rounds and sections each list every match at most once, only existing
     matches, and the same set of matches

For performance the builders only run these when MATCHGROUP_FORCE_TYPE_CHECK
is set. check_match_group can always be called directly.
"""

from __future__ import annotations

import os
from collections import Counter
from dataclasses import dataclass
from typing import List, Optional

from matchgroup.services.errors import MatchGroupValidationError
from matchgroup.services.match_group_types import (
    ADVANCE_BGS,
    MAX_ADVANCE_SPOTS,
    Bracket,
    BracketBracketData,
    MatchGroup,
)

_ADVANCE_SPOT_TYPES = ("advance", "custom", "qualify")


@dataclass
class Violation:
    code: str
    message: str
    match_id: Optional[str] = None

    def __str__(self) -> str:
        if self.match_id:
            return f"{self.code} [{self.match_id}]: {self.message}"
        return f"{self.code}: {self.message}"


def type_check_enabled() -> bool:
    return os.getenv("MATCHGROUP_FORCE_TYPE_CHECK", "false").lower() in ("true", "1", "yes")


def find_violations(match_group: MatchGroup) -> List[Violation]:
    violations: List[Violation] = []
    match_ids = {m.match_id for m in match_group.matches if m.match_id is not None}

    for match_id, match in match_group.matches_by_id.items():
        if match.match_id != match_id:
            violations.append(Violation("A_BY_ID", f"matches_by_id[{match_id!r}] holds match {match.match_id!r}", match_id))

    for match in match_group.matches:
        bracket_data = match.bracket_data
        if not isinstance(bracket_data, BracketBracketData):
            continue

        if len(bracket_data.advance_spots) > MAX_ADVANCE_SPOTS:
            violations.append(
                Violation("B_SPOT_COUNT", f"{len(bracket_data.advance_spots)} advance spots", match.match_id)
            )
        for spot in bracket_data.advance_spots:
            if spot is None:
                continue
            if spot.bg not in ADVANCE_BGS or spot.type not in _ADVANCE_SPOT_TYPES:
                violations.append(
                    Violation("B_SPOT_VALUE", f"advance spot bg={spot.bg!r} type={spot.type!r}", match.match_id)
                )

        opponent_count = len(match.opponents)
        if opponent_count:
            for edge in bracket_data.child_edges:
                if not 1 <= edge.opponent_index <= opponent_count:
                    violations.append(
                        Violation(
                            "C_CHILD_EDGE",
                            f"child edge to opponent {edge.opponent_index} of {opponent_count}",
                            match.match_id,
                        )
                    )

    if isinstance(match_group, Bracket):
        for label, keys in (
            ("bracket_datas_by_id", match_group.bracket_datas_by_id),
            ("coordinates_by_match_id", match_group.coordinates_by_match_id),
        ):
            for match_id in keys:
                if match_id not in match_ids:
                    violations.append(Violation("A_UNKNOWN_ID", f"{label} refers to unknown match", match_id))

        for match_id in match_group.root_match_ids:
            if match_id not in match_ids:
                violations.append(Violation("A_UNKNOWN_ID", "root_match_ids refers to unknown match", match_id))

        grouped = {}
        for label, groups in (("rounds", match_group.rounds), ("sections", match_group.sections)):
            counts = Counter(match_id for group in groups for match_id in group)
            for match_id, count in counts.items():
                if count > 1:
                    violations.append(Violation("D_OVERLAP", f"listed {count} times in {label}", match_id))
                if match_id not in match_ids:
                    violations.append(Violation("A_UNKNOWN_ID", f"{label} refers to unknown match", match_id))
            grouped[label] = set(counts)
        if grouped["rounds"] != grouped["sections"]:
            missing = sorted(grouped["rounds"] ^ grouped["sections"])
            violations.append(Violation("D_PARTITION", f"rounds and sections differ on {', '.join(missing)}"))

    return violations


def check_match_group(match_group: MatchGroup) -> None:
    """
    Raises:
        MatchGroupValidationError: Listing every violation found
    """
    violations = find_violations(match_group)
    if violations:
        raise MatchGroupValidationError([str(v) for v in violations])
