"""
Court pool resolution.

A division (or one of its phases) draws courts from the CourtGroups bound to it
through DivisionCourtAssignment. When nothing is bound, callers fall back to
every active court of the event.
"""
from typing import List, Optional

from sqlmodel import Session, select

from court_scheduler.models.court import TournamentCourt
from court_scheduler.models.court_group import CourtGroupCourt
from court_scheduler.models.division import Division
from court_scheduler.models.division_court_assignment import DivisionCourtAssignment


def get_court_sort_key(court: TournamentCourt) -> tuple:
    return (court.sort_order, court.id or 0)


def get_available_courts_for_division(
    session: Session, division_id: int, phase_id: Optional[int] = None
) -> List[TournamentCourt]:
    """
    Courts eligible for a division/phase from its court-group assignments.

    - phase_id given: assignments for that phase plus division-wide ones
    - phase_id omitted: every active assignment of the division
    - Expanded in priority order, inactive courts dropped, deduplicated,
      sorted by court sort_order

    Returns [] when no assignment exists.
    """
    query = select(DivisionCourtAssignment).where(
        DivisionCourtAssignment.division_id == division_id,
        DivisionCourtAssignment.is_active == True,  # noqa: E712
    )
    if phase_id is not None:
        query = query.where(
            (DivisionCourtAssignment.phase_id == phase_id) | (DivisionCourtAssignment.phase_id.is_(None))
        )
    assignments = session.exec(
        query.order_by(DivisionCourtAssignment.priority, DivisionCourtAssignment.id)
    ).all()

    if not assignments:
        return []

    courts: List[TournamentCourt] = []
    seen = set()
    for assignment in assignments:
        members = session.exec(
            select(TournamentCourt)
            .join(CourtGroupCourt, CourtGroupCourt.court_id == TournamentCourt.id)
            .where(CourtGroupCourt.court_group_id == assignment.court_group_id)
            .order_by(CourtGroupCourt.id)
        ).all()
        for court in members:
            if not court.is_active or court.id in seen:
                continue
            seen.add(court.id)
            courts.append(court)

    # Stable: equal sort_order keeps priority order
    return sorted(courts, key=lambda c: c.sort_order)


def get_active_event_courts(session: Session, event_id: int) -> List[TournamentCourt]:
    """All active courts of an event, ordered by sort_order."""
    return list(
        session.exec(
            select(TournamentCourt)
            .where(TournamentCourt.event_id == event_id, TournamentCourt.is_active == True)  # noqa: E712
            .order_by(TournamentCourt.sort_order, TournamentCourt.id)
        ).all()
    )


def resolve_court_pool(
    session: Session, division: Division, phase_id: Optional[int] = None
) -> List[TournamentCourt]:
    """Group-resolved pool, falling back to every active court of the event."""
    courts = get_available_courts_for_division(session, division.id, phase_id)
    if courts:
        return courts
    return get_active_event_courts(session, division.event_id)


def get_block_courts(session: Session, event_id: int, court_ids: List[int]) -> List[TournamentCourt]:
    """Active courts of the event among a block's stored court ids, by sort_order."""
    if not court_ids:
        return []
    return list(
        session.exec(
            select(TournamentCourt)
            .where(
                TournamentCourt.event_id == event_id,
                TournamentCourt.id.in_(court_ids),
                TournamentCourt.is_active == True,  # noqa: E712
            )
            .order_by(TournamentCourt.sort_order, TournamentCourt.id)
        ).all()
    )
