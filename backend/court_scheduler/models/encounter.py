from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import String
from sqlmodel import Column, Field, SQLModel


class EncounterStatus(str, Enum):
    pending = "pending"  # not yet playable (waiting on feeder results)
    ready = "ready"
    scheduled = "scheduled"
    in_progress = "in_progress"
    completed = "completed"
    bye = "bye"
    cancelled = "cancelled"


# Never placed on a court
UNSCHEDULABLE_STATUSES = (EncounterStatus.bye, EncounterStatus.cancelled)

# Scheduling outputs are frozen once play has started
LOCKED_STATUSES = (EncounterStatus.completed, EncounterStatus.in_progress)


class Encounter(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    event_id: int = Field(foreign_key="event.id", index=True)
    division_id: int = Field(foreign_key="division.id", index=True)
    phase_id: Optional[int] = Field(default=None, foreign_key="divisionphase.id", index=True)

    # Deterministic processing order: pool -> round -> encounter number
    pool_id: Optional[int] = Field(default=None)
    round_number: int = Field(default=1)
    encounter_number: int = Field(default=1)
    round_name: Optional[str] = Field(default=None)
    encounter_label: Optional[str] = Field(default=None)

    unit1_id: Optional[int] = Field(default=None, foreign_key="unit.id")
    unit2_id: Optional[int] = Field(default=None, foreign_key="unit.id")
    unit1_seed_label: Optional[str] = Field(default=None)
    unit2_seed_label: Optional[str] = Field(default=None)

    status: EncounterStatus = Field(default=EncounterStatus.pending, sa_column=Column(String, nullable=False))
    scheduled_time: Optional[datetime] = Field(default=None)  # manually pinned time, if any

    # Scheduling outputs (the only fields the engine writes)
    tournament_court_id: Optional[int] = Field(default=None, foreign_key="tournamentcourt.id")
    estimated_start_time: Optional[datetime] = Field(default=None)
    estimated_duration_minutes: Optional[int] = Field(default=None)
    estimated_end_time: Optional[datetime] = Field(default=None)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    def clear_schedule(self) -> bool:
        """Reset scheduling outputs. Returns True if anything was set."""
        had_schedule = (
            self.tournament_court_id is not None
            or self.estimated_start_time is not None
            or self.estimated_end_time is not None
            or self.scheduled_time is not None
        )
        self.tournament_court_id = None
        self.estimated_start_time = None
        self.estimated_duration_minutes = None
        self.estimated_end_time = None
        self.scheduled_time = None
        if had_schedule:
            self.updated_at = datetime.utcnow()
        return had_schedule
