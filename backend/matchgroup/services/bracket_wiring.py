"""
Bracket connector wiring.

Child edges encode the connector lines between a match's child matches and
the opponent slots of the match they feed into.
"""

from __future__ import annotations

import math
from typing import List

from matchgroup.services.match_group_types import ChildEdge


def auto_assign_child_edges(child_match_count: int, opponent_count: int) -> List[ChildEdge]:
    """
    Compute child edges for a match that has none stored.

    Fewer child matches than opponents: child matches connect to the opponents
    nearest the middle, i.e. child i -> opponent i + ceil((N - K) / 2).

    More child matches than opponents: child i -> opponent min(i, N), so the
    excess child matches all connect to the final opponent.
    """
    edges: List[ChildEdge] = []
    if child_match_count <= opponent_count:
        skip = math.ceil((opponent_count - child_match_count) / 2)
        for child_match_index in range(1, child_match_count + 1):
            edges.append(ChildEdge(child_match_index=child_match_index, opponent_index=child_match_index + skip))
    else:
        for child_match_index in range(1, child_match_count + 1):
            edges.append(
                ChildEdge(
                    child_match_index=child_match_index,
                    opponent_index=min(child_match_index, opponent_count),
                )
            )
    return edges
