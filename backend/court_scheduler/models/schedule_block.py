from datetime import datetime
from typing import List, Optional

from sqlalchemy import JSON
from sqlmodel import Column, Field, SQLModel


class ScheduleBlock(SQLModel, table=True):
    """
    A master-schedule block: one division (optionally one phase) running on a
    fixed set of courts inside a time window. A block may start only after the
    block it depends on has ended (plus a buffer).
    """

    __tablename__ = "scheduleblock"

    id: Optional[int] = Field(default=None, primary_key=True)
    event_id: int = Field(foreign_key="event.id", index=True)
    division_id: int = Field(foreign_key="division.id")
    phase_id: Optional[int] = Field(default=None, foreign_key="divisionphase.id")  # None = whole division
    phase_type: Optional[str] = Field(default=None)  # display only: "RR", "QF", "SF", "Gold", ...
    block_label: Optional[str] = Field(default=None)

    court_ids: List[int] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))

    start_time: datetime
    end_time: datetime

    depends_on_block_id: Optional[int] = Field(default=None, foreign_key="scheduleblock.id")
    dependency_buffer_minutes: int = Field(default=0)

    sort_order: int = Field(default=0)
    notes: Optional[str] = Field(default=None)
    is_active: bool = Field(default=True)
    estimated_match_duration_minutes: Optional[int] = Field(default=None)  # overrides per-encounter duration

    # Snapshot taken at creation; reads recompute it
    encounter_count: Optional[int] = Field(default=None)
    last_scheduled_at: Optional[datetime] = Field(default=None)

    created_by_user_id: Optional[int] = Field(default=None)
    updated_by_user_id: Optional[int] = Field(default=None)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
