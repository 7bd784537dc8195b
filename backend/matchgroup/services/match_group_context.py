"""
Per-query match group context.

A MatchGroupContext memoizes fetched records and constructed match groups by
group id. Create one per request or render; it must not be shared between
independent queries.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional, Union

from matchgroup.services.bracket_reset import merge_bracket_reset_match
from matchgroup.services.errors import MatchGroupError, MatchNotFoundError
from matchgroup.services.match_group_builder import (
    MatchConverter,
    make_bracket_from_records,
    make_matchlist_from_records,
    resolve_match_converter,
)
from matchgroup.services.match_group_types import (
    Bracket,
    BracketBracketData,
    Match,
    MatchGroup,
    Matchlist,
    Team,
)
from matchgroup.services.record_normalizer import read_bracket_type
from matchgroup.services.team_templates import TeamLookup, fetch_team
from matchgroup.utils.record_values import parse_or_copy

logger = logging.getLogger(__name__)

# group_id -> stored match records ordered by match id
RecordSource = Callable[[str], List[Dict[str, Any]]]


class MatchGroupContext:
    """
    Args:
        record_source: Fetches the stored records of a group
        page_records: Records already available for some groups, as a JSON
            string or a list per group id. Used before record_source.
        converter: Record-to-match conversion; defaults to match_from_record
        team_lookup: Raw team template lookup used by fetch_team
    """

    def __init__(
        self,
        record_source: Optional[RecordSource] = None,
        page_records: Optional[Dict[str, Union[str, List[Dict[str, Any]]]]] = None,
        converter: Optional[MatchConverter] = None,
        team_lookup: Optional[TeamLookup] = None,
    ):
        self._record_source = record_source
        self._page_records = dict(page_records or {})
        self._converter = resolve_match_converter(converter)
        self._team_lookup = team_lookup
        self._records: Dict[str, List[Dict[str, Any]]] = {}
        self._matchlists: Dict[str, Matchlist] = {}
        self._brackets: Dict[str, Bracket] = {}

    def fetch_match_records(self, group_id: str) -> List[Dict[str, Any]]:
        if group_id in self._records:
            return self._records[group_id]

        if group_id in self._page_records:
            records = parse_or_copy(self._page_records[group_id], f"match2bracket_{group_id}", group_id=group_id, default=list)
            logger.debug("Read %d page records for group %s", len(records), group_id)
        elif self._record_source is not None:
            records = self._record_source(group_id)
            logger.debug("Fetched %d records for group %s", len(records), group_id)
        else:
            raise MatchGroupError(f"No records available for group {group_id}")

        self._records[group_id] = records
        return records

    def fetch_match_group(self, group_id: str, bracket_type: Optional[str] = None) -> MatchGroup:
        """
        Fetch a matchlist or bracket. The type is bracket_type if given, else
        the bracket type of the group's first record, else matchlist.
        """
        if bracket_type is None:
            records = self.fetch_match_records(group_id)
            bracket_type = read_bracket_type(records[0], group_id) if records else "matchlist"

        if bracket_type == "bracket":
            return self.fetch_bracket(group_id)
        return self.fetch_matchlist(group_id)

    def fetch_matchlist(self, group_id: str) -> Matchlist:
        if group_id not in self._matchlists:
            records = self.fetch_match_records(group_id)
            self._matchlists[group_id] = make_matchlist_from_records(records, self._converter, group_id)
        return self._matchlists[group_id]

    def fetch_bracket(self, group_id: str) -> Bracket:
        if group_id not in self._brackets:
            records = self.fetch_match_records(group_id)
            self._brackets[group_id] = make_bracket_from_records(records, self._converter, group_id)
        return self._brackets[group_id]

    def fetch_match_for_bracket_display(self, group_id: str, match_id: str) -> Match:
        """
        Fetch a match for a bracket display or match summary popup. A grand
        final is returned merged with the results of its bracket reset match.

        match_id may be the full match id or the id within the group.

        Raises:
            MatchNotFoundError: If the group has no such match
            BracketResetShapeError: If the bracket reset match does not line up
        """
        match_group = self.fetch_match_group(group_id)
        match = _find_match(match_group, group_id, match_id)
        if match is None:
            raise MatchNotFoundError(f"Match {match_id} not found in group {group_id}")

        bracket_data = match.bracket_data
        bracket_reset_match = None
        if isinstance(bracket_data, BracketBracketData) and bracket_data.bracket_reset_match_id:
            bracket_reset_match = _find_match(match_group, group_id, bracket_data.bracket_reset_match_id)

        if bracket_reset_match is not None:
            logger.debug("Merging bracket reset %s into %s", bracket_reset_match.match_id, match.match_id)
            return merge_bracket_reset_match(match, bracket_reset_match)
        return match

    def fetch_team(self, template: str) -> Optional[Team]:
        return fetch_team(template, self._team_lookup or _no_team_lookup)


def _find_match(match_group: MatchGroup, group_id: str, match_id: str) -> Optional[Match]:
    match = match_group.matches_by_id.get(match_id)
    if match is None:
        match = match_group.matches_by_id.get(f"{group_id}_{match_id}")
    return match


def _no_team_lookup(template: str) -> None:
    return None
