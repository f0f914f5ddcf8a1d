from typing import Optional

from sqlmodel import Field, SQLModel


class Unit(SQLModel, table=True):
    """A competitive unit (single player, pair or team) entered in a division."""

    id: Optional[int] = Field(default=None, primary_key=True)
    event_id: int = Field(foreign_key="event.id", index=True)
    division_id: int = Field(foreign_key="division.id")
    name: str


class UnitMember(SQLModel, table=True):
    __tablename__ = "unitmember"

    id: Optional[int] = Field(default=None, primary_key=True)
    unit_id: int = Field(foreign_key="unit.id", index=True)
    user_id: int = Field(foreign_key="player.id", index=True)
    invite_status: str = Field(default="Accepted")  # Pending | Accepted | Declined
