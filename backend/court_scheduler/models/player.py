from typing import Optional

from sqlmodel import Field, SQLModel


class Player(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    first_name: str = Field(default="")
    last_name: str = Field(default="")

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()
