"""
Team template resolution.

Team templates are resolved through an injected lookup that returns the raw
template record (bracketname, name, page, shortname) or None.
"""

from typing import Any, Callable, Dict, Optional

from matchgroup.services.match_group_types import Team

TBD_DISPLAY = '<abbr title="To Be Decided">TBD</abbr>'

TeamLookup = Callable[[str], Optional[Dict[str, Any]]]


def tbd_team() -> Team:
    return Team(
        bracket_name=TBD_DISPLAY,
        display_name=TBD_DISPLAY,
        page_name="TBD",
        short_name=TBD_DISPLAY,
    )


def fetch_team(template: str, lookup: TeamLookup) -> Optional[Team]:
    """
    Fetch display information about a team.

    The template 'tbd' (any case) is a placeholder for an undecided opponent
    and never reaches the lookup. Returns None if the lookup has no record.
    """
    if template.lower() == "tbd":
        return tbd_team()

    raw_team = lookup(template)
    if not raw_team:
        return None

    return Team(
        bracket_name=raw_team.get("bracketname"),
        display_name=raw_team.get("name"),
        page_name=raw_team.get("page"),
        short_name=raw_team.get("shortname"),
    )
