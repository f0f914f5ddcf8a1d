from datetime import datetime
from typing import Optional

from sqlmodel import Field, SQLModel


class Division(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    event_id: int = Field(foreign_key="event.id", index=True)
    name: str
    estimated_match_duration_minutes: Optional[int] = Field(default=None)
    min_rest_time_minutes: Optional[int] = Field(default=None)
    sort_order: int = Field(default=0)
    is_active: bool = Field(default=True)
    schedule_published_at: Optional[datetime] = Field(default=None)
    schedule_published_by_user_id: Optional[int] = Field(default=None)
