from court_scheduler.models.court import TournamentCourt
from court_scheduler.models.court_group import CourtGroup, CourtGroupCourt
from court_scheduler.models.division import Division
from court_scheduler.models.division_court_assignment import DivisionCourtAssignment
from court_scheduler.models.division_phase import DivisionPhase
from court_scheduler.models.encounter import Encounter, EncounterStatus
from court_scheduler.models.event import Event
from court_scheduler.models.player import Player
from court_scheduler.models.schedule_block import ScheduleBlock
from court_scheduler.models.unit import Unit, UnitMember

__all__ = [
    "Event",
    "TournamentCourt",
    "CourtGroup",
    "CourtGroupCourt",
    "Division",
    "DivisionPhase",
    "DivisionCourtAssignment",
    "Encounter",
    "EncounterStatus",
    "ScheduleBlock",
    "Unit",
    "UnitMember",
    "Player",
]
