# Force SQLModel table registration at test discovery time
# This ensures all models are registered before any test database creation
from matchgroup.models.match_record import MatchRecord  # noqa: F401
from matchgroup.models.team_template import TeamTemplate  # noqa: F401
