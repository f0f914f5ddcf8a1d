from datetime import datetime
from typing import Optional

from sqlalchemy import UniqueConstraint as SAUniqueConstraint
from sqlmodel import Field, SQLModel


class CourtGroup(SQLModel, table=True):
    """Named set of courts (e.g. "Courts 1-4", "Championship Courts")."""

    __tablename__ = "courtgroup"

    id: Optional[int] = Field(default=None, primary_key=True)
    event_id: int = Field(foreign_key="event.id", index=True)
    group_name: str
    group_code: Optional[str] = Field(default=None)
    location_area: Optional[str] = Field(default=None)
    priority: int = Field(default=0)
    sort_order: int = Field(default=0)
    is_active: bool = Field(default=True)
    created_at: datetime = Field(default_factory=datetime.utcnow)


class CourtGroupCourt(SQLModel, table=True):
    __tablename__ = "courtgroupcourt"
    __table_args__ = (SAUniqueConstraint("court_group_id", "court_id", name="uq_courtgroup_court"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    court_group_id: int = Field(foreign_key="courtgroup.id", index=True)
    court_id: int = Field(foreign_key="tournamentcourt.id")
