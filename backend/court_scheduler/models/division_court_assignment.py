from datetime import datetime
from typing import Optional

from sqlmodel import Field, SQLModel


class DivisionCourtAssignment(SQLModel, table=True):
    """Binds a CourtGroup to a division, optionally scoped to one phase."""

    __tablename__ = "divisioncourtassignment"

    id: Optional[int] = Field(default=None, primary_key=True)
    division_id: int = Field(foreign_key="division.id", index=True)
    phase_id: Optional[int] = Field(default=None, foreign_key="divisionphase.id")  # None = whole division
    court_group_id: int = Field(foreign_key="courtgroup.id")
    priority: int = Field(default=0)  # lower = higher priority
    is_active: bool = Field(default=True)
    created_at: datetime = Field(default_factory=datetime.utcnow)
