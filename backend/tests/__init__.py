# Force SQLModel table registration at test discovery time
# This ensures all models are registered before any test database creation
from court_scheduler.models.court import TournamentCourt  # noqa: F401
from court_scheduler.models.court_group import CourtGroup, CourtGroupCourt  # noqa: F401
from court_scheduler.models.division import Division  # noqa: F401
from court_scheduler.models.division_court_assignment import DivisionCourtAssignment  # noqa: F401
from court_scheduler.models.division_phase import DivisionPhase  # noqa: F401
from court_scheduler.models.encounter import Encounter  # noqa: F401
from court_scheduler.models.event import Event  # noqa: F401
from court_scheduler.models.player import Player  # noqa: F401
from court_scheduler.models.schedule_block import ScheduleBlock  # noqa: F401
from court_scheduler.models.unit import Unit, UnitMember  # noqa: F401
