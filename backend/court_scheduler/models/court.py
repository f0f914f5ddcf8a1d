from typing import Optional

from sqlmodel import Field, SQLModel


class TournamentCourt(SQLModel, table=True):
    __tablename__ = "tournamentcourt"

    id: Optional[int] = Field(default=None, primary_key=True)
    event_id: int = Field(foreign_key="event.id", index=True)
    court_label: str
    status: str = Field(default="Available")  # Available | InUse | Maintenance | Closed
    location_description: Optional[str] = Field(default=None)
    sort_order: int = Field(default=0)
    is_active: bool = Field(default=True)

    # Encounter currently being played on this court (runtime only; scheduler never sets it)
    current_encounter_id: Optional[int] = Field(default=None)
