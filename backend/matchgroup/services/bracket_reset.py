"""
Bracket reset merging.

The bracket display and the match summary show a double elimination grand
final together with its bracket reset match: the reset's scores, statuses
and placements become the secondary fields of the grand final's opponents,
and the reset's games follow the grand final's games.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Optional

from matchgroup.services.errors import BracketResetShapeError
from matchgroup.services.match_group_types import Match


def merge_bracket_reset_match(match: Match, bracket_reset_match: Optional[Match]) -> Match:
    """
    Merge a grand final match with the results of its bracket reset match.

    Opponents are paired by position. Returns the match unchanged when there
    is no bracket reset match.

    Raises:
        BracketResetShapeError: If the two matches do not have the same
            opponents in the same order
    """
    if bracket_reset_match is None:
        return match

    if len(match.opponents) != len(bracket_reset_match.opponents):
        raise BracketResetShapeError(
            f"Bracket reset match {bracket_reset_match.match_id} has {len(bracket_reset_match.opponents)} "
            f"opponents, grand final {match.match_id} has {len(match.opponents)}"
        )

    merged_opponents = []
    for position, (opponent, reset_opponent) in enumerate(
        zip(match.opponents, bracket_reset_match.opponents), start=1
    ):
        if opponent.name and reset_opponent.name and opponent.name != reset_opponent.name:
            raise BracketResetShapeError(
                f"Opponent {position} of grand final {match.match_id} is {opponent.name!r} but "
                f"{reset_opponent.name!r} in bracket reset match {bracket_reset_match.match_id}"
            )
        merged_opponents.append(
            replace(
                opponent,
                score2=reset_opponent.score,
                status2=reset_opponent.status,
                placement2=reset_opponent.placement,
            )
        )

    return replace(
        match,
        opponents=merged_opponents,
        games=list(match.games) + list(bracket_reset_match.games),
    )
