import os
from pathlib import Path
from typing import Generator

from dotenv import load_dotenv
from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./court_scheduler.db")

_is_sqlite = DATABASE_URL.startswith("sqlite")
_connect_args = {"check_same_thread": False} if _is_sqlite else {}
_echo = os.getenv("SQL_ECHO", "false").lower() in ("true", "1", "yes")

if _is_sqlite and ":memory:" not in DATABASE_URL:
    db_path = DATABASE_URL.replace("sqlite:///", "", 1)
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)

engine: Engine = create_engine(
    DATABASE_URL,
    echo=_echo,
    connect_args=_connect_args,
)


def get_session() -> Generator[Session, None, None]:
    """Get database session"""
    with Session(engine) as session:
        yield session


def init_db(bind: Engine = None) -> None:
    """Initialize database - create all tables"""
    # Import all models to ensure they're registered with SQLModel metadata
    from court_scheduler.models.court import TournamentCourt  # noqa: F401
    from court_scheduler.models.court_group import CourtGroup, CourtGroupCourt  # noqa: F401
    from court_scheduler.models.division import Division  # noqa: F401
    from court_scheduler.models.division_court_assignment import DivisionCourtAssignment  # noqa: F401
    from court_scheduler.models.division_phase import DivisionPhase  # noqa: F401
    from court_scheduler.models.encounter import Encounter  # noqa: F401
    from court_scheduler.models.event import Event  # noqa: F401
    from court_scheduler.models.player import Player  # noqa: F401
    from court_scheduler.models.schedule_block import ScheduleBlock  # noqa: F401
    from court_scheduler.models.unit import Unit, UnitMember  # noqa: F401

    SQLModel.metadata.create_all(bind or engine)
