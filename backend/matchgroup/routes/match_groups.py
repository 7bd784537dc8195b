"""
Read-only match group endpoints.

Used by bracket/matchlist renderers and match summary popups. A new
MatchGroupContext is created per request, so constructed groups are reused
within a request and never across requests.
"""
import logging
from dataclasses import asdict
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel
from sqlmodel import Session

from matchgroup.database import get_session
from matchgroup.services.errors import (
    BracketResetShapeError,
    MatchGroupValidationError,
    MatchNotFoundError,
    MatchRecordDecodeError,
)
from matchgroup.services.match_group_context import MatchGroupContext
from matchgroup.services.match_group_types import Bracket
from matchgroup.services.match_record_store import session_record_source, session_team_lookup

logger = logging.getLogger(__name__)

router = APIRouter()


# ── Response models ──────────────────────────────────────────────────────

class MatchGroupResponse(BaseModel):
    group_id: str
    type: str  # bracket | matchlist
    matches: List[Dict[str, Any]]
    root_match_ids: List[str] = []
    rounds: List[List[str]] = []
    sections: List[List[str]] = []


class TeamResponse(BaseModel):
    bracket_name: Optional[str] = None
    display_name: Optional[str] = None
    page_name: Optional[str] = None
    short_name: Optional[str] = None


def get_match_group_context(session: Session = Depends(get_session)) -> MatchGroupContext:
    return MatchGroupContext(
        record_source=session_record_source(session),
        team_lookup=session_team_lookup(session),
    )


def _raise_http(exc: Exception):
    if isinstance(exc, MatchNotFoundError):
        raise HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, MatchRecordDecodeError):
        raise HTTPException(
            status_code=422,
            detail={"message": str(exc), "field": exc.field, "match_id": exc.match_id, "group_id": exc.group_id},
        )
    if isinstance(exc, MatchGroupValidationError):
        raise HTTPException(status_code=409, detail={"message": "Match group failed checks", "violations": exc.violations})
    raise HTTPException(status_code=409, detail=str(exc))


@router.get("/match-groups/{group_id}", response_model=MatchGroupResponse)
def get_match_group(
    group_id: str,
    type: Optional[str] = Query(None, pattern="^(bracket|matchlist)$"),
    context: MatchGroupContext = Depends(get_match_group_context),
):
    """Bracket or matchlist built from the group's stored match records."""
    try:
        match_group = context.fetch_match_group(group_id, type)
    except (MatchRecordDecodeError, MatchGroupValidationError) as exc:
        logger.error("Failed to build match group %s: %s", group_id, exc)
        _raise_http(exc)

    if not match_group.matches:
        raise HTTPException(status_code=404, detail="Match group not found")

    response = MatchGroupResponse(
        group_id=group_id,
        type=match_group.type,
        matches=[asdict(m) for m in match_group.matches],
    )
    if isinstance(match_group, Bracket):
        response.root_match_ids = match_group.root_match_ids
        response.rounds = match_group.rounds
        response.sections = match_group.sections
    return response


@router.get("/match-groups/{group_id}/matches/{match_id}", response_model=Dict[str, Any])
def get_match_for_display(
    group_id: str,
    match_id: str,
    context: MatchGroupContext = Depends(get_match_group_context),
):
    """A single match, with a grand final merged with its bracket reset match."""
    try:
        match = context.fetch_match_for_bracket_display(group_id, match_id)
    except (MatchNotFoundError, MatchRecordDecodeError, BracketResetShapeError, MatchGroupValidationError) as exc:
        logger.info("Match %s of group %s not displayable: %s", match_id, group_id, exc)
        _raise_http(exc)
    return asdict(match)


@router.get("/team-templates/{template}", response_model=TeamResponse)
def get_team_template(template: str, context: MatchGroupContext = Depends(get_match_group_context)):
    """Display names of a team template. 'tbd' is always available."""
    team = context.fetch_team(template)
    if not team:
        raise HTTPException(status_code=404, detail="Team template not found")
    return TeamResponse(**asdict(team))
