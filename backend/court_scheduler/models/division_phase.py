from datetime import datetime
from typing import Optional

from sqlmodel import Field, SQLModel


class DivisionPhase(SQLModel, table=True):
    __tablename__ = "divisionphase"

    id: Optional[int] = Field(default=None, primary_key=True)
    division_id: int = Field(foreign_key="division.id", index=True)
    name: str
    phase_type: Optional[str] = Field(default=None)  # "RoundRobin" | "Pools" | "Bracket" | ...
    sort_order: int = Field(default=0)

    # Overrides Division.estimated_match_duration_minutes when set
    estimated_match_duration_minutes: Optional[int] = Field(default=None)

    start_time: Optional[datetime] = Field(default=None)
    estimated_end_time: Optional[datetime] = Field(default=None)  # computed by calculate_phase_times
