"""
Stored match record access.

The database is the only place the match group services read from. Records
are returned in the flat stored shape, ordered by match id.
"""

import logging
import os
from typing import Any, Dict, List, Optional

from sqlmodel import Session, select

from matchgroup.models.match_record import MatchRecord
from matchgroup.models.team_template import TeamTemplate
from matchgroup.services.match_group_context import RecordSource
from matchgroup.services.team_templates import TeamLookup

logger = logging.getLogger(__name__)

DEFAULT_FETCH_LIMIT = 5000


def fetch_limit() -> int:
    return int(os.getenv("MATCH_RECORD_FETCH_LIMIT", str(DEFAULT_FETCH_LIMIT)))


def fetch_match_records(session: Session, bracket_id: str, limit: Optional[int] = None) -> List[Dict[str, Any]]:
    """
    Fetch all stored match records of a bracket or matchlist, ordered by
    match id ascending.
    """
    limit = limit or fetch_limit()
    rows = session.exec(
        select(MatchRecord)
        .where(MatchRecord.match2bracketid == bracket_id)
        .order_by(MatchRecord.match2id)
        .limit(limit)
    ).all()
    if len(rows) == limit:
        logger.warning("Group %s hit the fetch limit of %d records", bracket_id, limit)

    records = [row.to_record() for row in rows]
    for record in records:
        apply_player_workaround(record)
    return records


def apply_player_workaround(record: Dict[str, Any]) -> None:
    """Stored opponents may lack their player list; give them an empty one."""
    opponents = record.get("match2opponents")
    if not isinstance(opponents, list):
        return
    # New dicts, so loaded column values stay untouched
    record["match2opponents"] = [
        {**opponent, "match2players": []}
        if isinstance(opponent, dict) and opponent.get("match2players") is None
        else opponent
        for opponent in opponents
    ]


def session_record_source(session: Session) -> RecordSource:
    def source(bracket_id: str) -> List[Dict[str, Any]]:
        return fetch_match_records(session, bracket_id)

    return source


def session_team_lookup(session: Session) -> TeamLookup:
    def lookup(template: str) -> Optional[Dict[str, Any]]:
        row = session.exec(select(TeamTemplate).where(TeamTemplate.template == template.lower())).first()
        return row.to_raw() if row else None

    return lookup
