"""
Master Schedule Request/Response Models

Pydantic models shared across:
- Schedule block manager
- Auto-scheduler
- Conflict validator and timeline builder
- Player schedule and encounter-level validation
- Route handlers (master_schedule.py)
"""

from datetime import date, datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, model_validator


class ConflictType(str, Enum):
    court_overlap = "CourtOverlap"
    dependency_violation = "DependencyViolation"


class ScheduleBlockConflict(BaseModel):
    """An advisory finding on the master schedule (never blocks a write)"""

    conflict_type: ConflictType
    court_id: Optional[int] = None
    court_label: Optional[str] = None
    block1_id: int
    block2_id: int
    block1_label: Optional[str] = None
    block2_label: Optional[str] = None
    message: str


# ============================================================================
# Schedule Blocks
# ============================================================================


class ScheduleBlockCreate(BaseModel):
    division_id: int
    phase_id: Optional[int] = None
    phase_type: Optional[str] = None
    block_label: Optional[str] = None
    court_ids: List[int] = Field(default_factory=list)
    start_time: datetime
    end_time: Optional[datetime] = None
    depends_on_block_id: Optional[int] = None
    dependency_buffer_minutes: int = 0
    sort_order: int = 0
    notes: Optional[str] = None
    estimated_match_duration_minutes: Optional[int] = None

    @model_validator(mode="after")
    def validate_block(self):
        if self.end_time is not None and self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        if self.dependency_buffer_minutes < 0:
            raise ValueError("dependency_buffer_minutes must be >= 0")
        return self


class ScheduleBlockUpdate(BaseModel):
    """Partial update: only fields present in the request are applied.

    Sending depends_on_block_id=null explicitly clears the dependency.
    """

    division_id: Optional[int] = None
    phase_id: Optional[int] = None
    phase_type: Optional[str] = None
    block_label: Optional[str] = None
    court_ids: Optional[List[int]] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    depends_on_block_id: Optional[int] = None
    dependency_buffer_minutes: Optional[int] = None
    sort_order: Optional[int] = None
    notes: Optional[str] = None
    is_active: Optional[bool] = None
    estimated_match_duration_minutes: Optional[int] = None


class CourtSummary(BaseModel):
    id: int
    court_label: str


class ScheduleBlockResponse(BaseModel):
    id: int
    event_id: int
    division_id: int
    division_name: Optional[str] = None
    division_color: str
    phase_id: Optional[int] = None
    phase_name: Optional[str] = None
    phase_type: Optional[str] = None
    block_label: Optional[str] = None
    court_ids: List[int]
    courts: List[CourtSummary]
    start_time: datetime
    end_time: datetime
    depends_on_block_id: Optional[int] = None
    depends_on_block_label: Optional[str] = None
    dependency_buffer_minutes: int
    dependency_state: str
    sort_order: int
    notes: Optional[str] = None
    is_active: bool
    estimated_match_duration_minutes: Optional[int] = None
    encounter_count: int
    scheduled_encounter_count: int
    last_scheduled_at: Optional[datetime] = None
    created_at: datetime


class ScheduleBlockResult(BaseModel):
    success: bool
    message: str
    block: Optional[ScheduleBlockResponse] = None


# ============================================================================
# Timeline
# ============================================================================


class CourtBlockTimeSlot(BaseModel):
    block_id: int
    division_id: int
    division_name: Optional[str] = None
    division_color: str
    phase_type: Optional[str] = None
    block_label: Optional[str] = None
    start_time: datetime
    end_time: datetime
    has_conflict: bool = False


class TimelineCourtBlocks(BaseModel):
    id: int
    court_label: str
    sort_order: int
    time_slots: List[CourtBlockTimeSlot]


class TimelineDivisionSummary(BaseModel):
    id: int
    name: str
    color: str
    block_count: int
    encounter_count: int
    first_block_start: Optional[datetime] = None
    last_block_end: Optional[datetime] = None


class MasterScheduleTimeline(BaseModel):
    event_id: int
    event_name: str
    event_start_date: date
    event_end_date: date
    is_schedule_published: bool
    schedule_published_at: Optional[datetime] = None
    blocks: List[ScheduleBlockResponse]
    courts: List[TimelineCourtBlocks]
    divisions: List[TimelineDivisionSummary]
    conflicts: List[ScheduleBlockConflict]


# ============================================================================
# Auto-Schedule
# ============================================================================


class AutoScheduleRequest(BaseModel):
    block_ids: Optional[List[int]] = None  # None/empty = every active block
    clear_existing: bool = True
    recalculate_dependencies: bool = True


class BlockScheduleResult(BaseModel):
    block_id: int
    block_label: Optional[str] = None
    success: bool = False
    message: Optional[str] = None
    encounters_scheduled: int = 0
    calculated_start_time: Optional[datetime] = None
    calculated_end_time: Optional[datetime] = None


class AutoScheduleResult(BaseModel):
    success: bool = True
    message: Optional[str] = None
    blocks_processed: int = 0
    encounters_scheduled: int = 0
    conflicts_found: int = 0
    block_results: List[BlockScheduleResult] = Field(default_factory=list)
    conflicts: List[ScheduleBlockConflict] = Field(default_factory=list)


# ============================================================================
# Player Schedule
# ============================================================================


class PlayerScheduleItem(BaseModel):
    encounter_id: int
    match_time: Optional[datetime] = None
    estimated_end_time: Optional[datetime] = None
    court_id: Optional[int] = None
    court_label: Optional[str] = None
    division_id: int
    division_name: str = ""
    phase_id: Optional[int] = None
    phase_name: Optional[str] = None
    phase_type: Optional[str] = None
    round_name: Optional[str] = None
    encounter_label: Optional[str] = None
    opponent_name: str = "TBD"
    opponent_unit_id: Optional[int] = None
    my_team_name: Optional[str] = None
    my_unit_id: Optional[int] = None
    status: str
    time_until_match: Optional[str] = None
    is_bye: bool = False


class PlayerSchedule(BaseModel):
    event_id: int
    event_name: str
    player_id: int
    player_name: str
    matches: List[PlayerScheduleItem] = Field(default_factory=list)
    next_match: Optional[PlayerScheduleItem] = None
    total_matches: int = 0
    completed_matches: int = 0
    remaining_matches: int = 0


# ============================================================================
# Encounter-level validation
# ============================================================================


class EncounterConflictType(str, Enum):
    court_double_book = "CourtDoubleBook"
    unit_overlap = "UnitOverlap"
    insufficient_rest = "InsufficientRest"


class ScheduleConflict(BaseModel):
    conflict_type: EncounterConflictType
    description: str
    encounter_id1: int
    encounter_id2: int
    court_id: Optional[int] = None
    unit_id: Optional[int] = None


class ScheduleValidationResult(BaseModel):
    is_valid: bool = True
    total_encounters: int = 0
    scheduled_encounters: int = 0
    unscheduled_encounters: int = 0
    conflicts: List[ScheduleConflict] = Field(default_factory=list)


class SchedulePublishRequest(BaseModel):
    validate_first: bool = True
