from matchgroup.models.match_record import MatchRecord
from matchgroup.models.team_template import TeamTemplate

__all__ = [
    "MatchRecord",
    "TeamTemplate",
]
