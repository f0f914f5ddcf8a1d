"""Small builders for scheduling test data."""

from datetime import date, datetime
from typing import List, Optional

from sqlmodel import Session

from court_scheduler.models.court import TournamentCourt
from court_scheduler.models.court_group import CourtGroup, CourtGroupCourt
from court_scheduler.models.division import Division
from court_scheduler.models.division_court_assignment import DivisionCourtAssignment
from court_scheduler.models.division_phase import DivisionPhase
from court_scheduler.models.encounter import Encounter, EncounterStatus
from court_scheduler.models.event import Event
from court_scheduler.models.schedule_block import ScheduleBlock

T0 = datetime(2026, 5, 2, 9, 0)


def _save(session: Session, obj):
    session.add(obj)
    session.commit()
    session.refresh(obj)
    return obj


def create_event(session: Session, name: str = "Spring Open") -> Event:
    return _save(session, Event(name=name, start_date=date(2026, 5, 2), end_date=date(2026, 5, 3)))


def create_courts(session: Session, event: Event, count: int, sort_orders: Optional[List[int]] = None):
    courts = []
    for i in range(count):
        sort_order = sort_orders[i] if sort_orders else i + 1
        courts.append(
            _save(
                session,
                TournamentCourt(event_id=event.id, court_label=f"Court {i + 1}", sort_order=sort_order),
            )
        )
    return courts


def create_division(session: Session, event: Event, name: str = "Mixed 3.5", **kwargs) -> Division:
    return _save(session, Division(event_id=event.id, name=name, **kwargs))


def create_phase(session: Session, division: Division, name: str = "Pool Play", **kwargs) -> DivisionPhase:
    return _save(session, DivisionPhase(division_id=division.id, name=name, **kwargs))


def create_encounters(
    session: Session,
    division: Division,
    count: int,
    phase: Optional[DivisionPhase] = None,
    round_number: int = 1,
    status: EncounterStatus = EncounterStatus.scheduled,
    pool_id: Optional[int] = None,
) -> List[Encounter]:
    encounters = []
    for i in range(count):
        encounters.append(
            _save(
                session,
                Encounter(
                    event_id=division.event_id,
                    division_id=division.id,
                    phase_id=phase.id if phase else None,
                    pool_id=pool_id,
                    round_number=round_number,
                    encounter_number=i + 1,
                    status=status,
                ),
            )
        )
    return encounters


def create_court_group(session: Session, event_id: int, courts: List[TournamentCourt], code: str = "A") -> CourtGroup:
    group = _save(session, CourtGroup(event_id=event_id, group_name=f"Group {code}", group_code=code))
    for court in courts:
        _save(session, CourtGroupCourt(court_group_id=group.id, court_id=court.id))
    return group


def bind_court_group(
    session: Session,
    division: Division,
    courts: List[TournamentCourt],
    phase: Optional[DivisionPhase] = None,
    priority: int = 0,
    code: str = "A",
) -> CourtGroup:
    group = create_court_group(session, division.event_id, courts, code)
    _save(
        session,
        DivisionCourtAssignment(
            division_id=division.id,
            phase_id=phase.id if phase else None,
            court_group_id=group.id,
            priority=priority,
        ),
    )
    return group


def create_block(session: Session, event: Event, division: Division, **kwargs) -> ScheduleBlock:
    kwargs.setdefault("start_time", T0)
    kwargs.setdefault("end_time", T0.replace(hour=11))
    kwargs.setdefault("block_label", f"{division.name} block")
    return _save(session, ScheduleBlock(event_id=event.id, division_id=division.id, **kwargs))
