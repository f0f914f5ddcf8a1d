"""
Court Assignment Service

Division- and phase-level court/time assignment:
- auto_assign_division: time-aware greedy run over the whole division
- auto_assign_phase: round-robin court spreading, no times
- calculate_phase_times: per-court clocks from the phase start time
- clear_division_assignments: reset scheduling outputs
- assign_court_groups_to_division: replace the division-wide court pool

Every operation returns a structured result; missing records and empty
court pools are reported, never raised.
"""

import logging
from datetime import datetime, time, timedelta
from typing import Any, Dict, List, Optional

from sqlmodel import Session, select

from court_scheduler.models.court_group import CourtGroup
from court_scheduler.models.division import Division
from court_scheduler.models.division_court_assignment import DivisionCourtAssignment
from court_scheduler.models.division_phase import DivisionPhase
from court_scheduler.models.encounter import (
    LOCKED_STATUSES,
    UNSCHEDULABLE_STATUSES,
    Encounter,
)
from court_scheduler.models.event import Event
from court_scheduler.utils.court_pool import get_available_courts_for_division, resolve_court_pool
from court_scheduler.utils.durations import calculate_encounter_duration
from court_scheduler.utils.greedy_assign import (
    assign_round_robin,
    assign_time_aware,
    division_encounter_sort_key,
    phase_encounter_sort_key,
)
from court_scheduler.utils.scheduling_lock import scheduling_lock

logger = logging.getLogger(__name__)

DEFAULT_EVENT_START_HOUR = 8

_SKIPPED_STATUSES = [s.value for s in UNSCHEDULABLE_STATUSES + LOCKED_STATUSES]


class CourtAssignmentOptions:
    def __init__(
        self,
        start_time: Optional[datetime] = None,
        match_duration_minutes: Optional[int] = None,
        clear_existing: bool = True,
    ):
        self.start_time = start_time
        self.match_duration_minutes = match_duration_minutes
        self.clear_existing = clear_existing


class CourtAssignmentResult:
    """Structured result from a court assignment operation"""

    def __init__(self, success: bool = False, message: Optional[str] = None):
        self.success = success
        self.message = message
        self.assigned_count = 0
        self.courts_used = 0
        self.start_time: Optional[datetime] = None
        self.estimated_end_time: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "message": self.message,
            "assigned_count": self.assigned_count,
            "courts_used": self.courts_used,
            "start_time": self.start_time,
            "estimated_end_time": self.estimated_end_time,
        }


class CourtGroupAssignmentResult:
    """Structured result from binding court groups to a division"""

    def __init__(self, success: bool = False, message: Optional[str] = None):
        self.success = success
        self.message = message
        self.court_group_ids: List[int] = []
        self.skipped_group_ids: List[int] = []

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "message": self.message,
            "court_group_ids": self.court_group_ids,
            "skipped_group_ids": self.skipped_group_ids,
        }


class TimeCalculationResult:
    """Structured result from phase time calculation"""

    def __init__(self, success: bool = False, message: Optional[str] = None):
        self.success = success
        self.message = message
        self.updated_count = 0
        self.estimated_end_time: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "message": self.message,
            "updated_count": self.updated_count,
            "estimated_end_time": self.estimated_end_time,
        }


def _phases_by_id(session: Session, division_id: int) -> Dict[int, DivisionPhase]:
    phases = session.exec(select(DivisionPhase).where(DivisionPhase.division_id == division_id)).all()
    return {p.id: p for p in phases}


def _default_start_time(session: Session, division: Division) -> datetime:
    event = session.get(Event, division.event_id)
    base_date = event.start_date if event else datetime.now().date()
    return datetime.combine(base_date, time(DEFAULT_EVENT_START_HOUR, 0))


def _clear_encounters(encounters: List[Encounter]) -> int:
    cleared = 0
    for encounter in encounters:
        if encounter.status in LOCKED_STATUSES:
            continue
        if encounter.clear_schedule():
            cleared += 1
    return cleared


def clear_division_assignments(session: Session, division_id: int, phase_id: Optional[int] = None) -> int:
    """
    Clear court and time assignments for a division (optionally one phase).

    Completed and in-progress encounters keep their assignments.

    Returns:
        Number of encounters that had an assignment and were cleared
    """
    division = session.get(Division, division_id)
    if not division:
        return 0

    with scheduling_lock(division.event_id):
        query = select(Encounter).where(Encounter.division_id == division_id)
        if phase_id is not None:
            query = query.where(Encounter.phase_id == phase_id)
        cleared = _clear_encounters(list(session.exec(query).all()))
        session.commit()

    logger.info("Cleared %s court assignments for division %s, phase %s", cleared, division_id, phase_id)
    return cleared


def assign_court_groups_to_division(
    session: Session, division_id: int, court_group_ids: List[int]
) -> CourtGroupAssignmentResult:
    """
    Replace a division's division-wide court-group bindings.

    Phase-scoped bindings are left alone. Groups that do not belong to the
    division's event are skipped. Priorities run 0..n in request order, so the
    first group is drawn from first. An empty list unbinds everything and the
    division falls back to the event's courts.
    """
    division = session.get(Division, division_id)
    if not division:
        return CourtGroupAssignmentResult(success=False, message="Division not found")

    with scheduling_lock(division.event_id):
        existing = session.exec(
            select(DivisionCourtAssignment).where(
                DivisionCourtAssignment.division_id == division_id,
                DivisionCourtAssignment.phase_id.is_(None),
            )
        ).all()
        for assignment in existing:
            session.delete(assignment)

        valid_ids = set()
        if court_group_ids:
            valid_ids = set(
                session.exec(
                    select(CourtGroup.id).where(
                        CourtGroup.id.in_(sorted(set(court_group_ids))),
                        CourtGroup.event_id == division.event_id,
                    )
                ).all()
            )

        result = CourtGroupAssignmentResult(success=True, message="Court groups assigned to division")
        for group_id in court_group_ids:
            if group_id not in valid_ids:
                result.skipped_group_ids.append(group_id)
                continue
            if group_id in result.court_group_ids:
                continue
            session.add(
                DivisionCourtAssignment(
                    division_id=division_id,
                    court_group_id=group_id,
                    priority=len(result.court_group_ids),
                )
            )
            result.court_group_ids.append(group_id)
        session.commit()

    logger.info("Bound court groups %s to division %s", result.court_group_ids, division_id)
    return result


def auto_assign_division(
    session: Session, division_id: int, options: Optional[CourtAssignmentOptions] = None
) -> CourtAssignmentResult:
    """
    Assign every schedulable encounter of a division to a court and start time.

    Order: round_number -> encounter_number. Each encounter takes the court
    that frees up first (ties: lowest sort_order).

    Args:
        session: Database session
        division_id: Division ID
        options: start_time (default: event start date at 08:00),
            match_duration_minutes (default: per-encounter phase/division/20),
            clear_existing (True: reassign everything; False: only unassigned)

    Returns:
        CourtAssignmentResult
    """
    options = options or CourtAssignmentOptions()

    division = session.get(Division, division_id)
    if not division:
        return CourtAssignmentResult(success=False, message="Division not found")

    with scheduling_lock(division.event_id):
        courts = resolve_court_pool(session, division)
        if not courts:
            return CourtAssignmentResult(success=False, message="No courts available")

        encounters = list(
            session.exec(
                select(Encounter).where(
                    Encounter.division_id == division_id,
                    Encounter.status.not_in(_SKIPPED_STATUSES),
                )
            ).all()
        )
        if options.clear_existing:
            _clear_encounters(encounters)
        else:
            encounters = [e for e in encounters if e.tournament_court_id is None]

        if not encounters:
            return CourtAssignmentResult(success=False, message="No encounters to assign")

        encounters.sort(key=division_encounter_sort_key)

        start_time = options.start_time or _default_start_time(session, division)
        phases = _phases_by_id(session, division_id)

        def duration_for(encounter: Encounter) -> int:
            if options.match_duration_minutes:
                return options.match_duration_minutes
            return calculate_encounter_duration(division, phases.get(encounter.phase_id))

        run = assign_time_aware(encounters, courts, start_time, duration_for)

        for encounter in encounters:
            session.add(encounter)
        session.commit()

    logger.info("Auto-assigned %s encounters for division %s", run.assigned_count, division_id)

    result = CourtAssignmentResult(
        success=True,
        message=f"{run.assigned_count} encounters assigned to {len(courts)} courts",
    )
    result.assigned_count = run.assigned_count
    result.courts_used = len(courts)
    result.start_time = start_time
    result.estimated_end_time = run.estimated_end
    return result


def auto_assign_phase(session: Session, phase_id: int) -> CourtAssignmentResult:
    """
    Spread a phase's unassigned encounters round-robin across its court pool.

    Order: pool -> round -> encounter number. Start times are left untouched;
    run calculate_phase_times afterwards to fill them in.
    """
    phase = session.get(DivisionPhase, phase_id)
    if not phase:
        return CourtAssignmentResult(success=False, message="Phase not found")

    division = session.get(Division, phase.division_id)
    if not division:
        return CourtAssignmentResult(success=False, message="Division not found")

    with scheduling_lock(division.event_id):
        courts = get_available_courts_for_division(session, phase.division_id, phase_id)
        if not courts:
            return CourtAssignmentResult(success=False, message="No court groups assigned to this phase")

        encounters = list(
            session.exec(
                select(Encounter).where(
                    Encounter.phase_id == phase_id,
                    Encounter.tournament_court_id.is_(None),
                    Encounter.status.not_in([s.value for s in UNSCHEDULABLE_STATUSES]),
                )
            ).all()
        )
        if not encounters:
            return CourtAssignmentResult(success=True, message="No encounters to assign")

        encounters.sort(key=phase_encounter_sort_key)
        run = assign_round_robin(encounters, courts)

        for encounter in encounters:
            session.add(encounter)
        session.commit()

    logger.info("Auto-assigned %s encounters for phase %s", run.assigned_count, phase_id)

    result = CourtAssignmentResult(success=True, message=f"{run.assigned_count} encounters assigned")
    result.assigned_count = run.assigned_count
    result.courts_used = len(courts)
    return result


def calculate_phase_times(session: Session, phase_id: int) -> TimeCalculationResult:
    """
    Compute start/end times for a phase's court-assigned encounters.

    Each court runs its own clock from phase.start_time, processing its
    encounters by round then encounter number. phase.estimated_end_time is
    set to the latest clock.
    """
    phase = session.get(DivisionPhase, phase_id)
    if not phase:
        return TimeCalculationResult(success=False, message="Phase not found")

    if phase.start_time is None:
        return TimeCalculationResult(success=False, message="Phase start time not set")

    division = session.get(Division, phase.division_id)
    event_id = division.event_id if division else 0
    duration = calculate_encounter_duration(division, phase)

    with scheduling_lock(event_id):
        encounters = list(
            session.exec(
                select(Encounter).where(
                    Encounter.phase_id == phase_id,
                    Encounter.tournament_court_id.is_not(None),
                )
            ).all()
        )
        if not encounters:
            return TimeCalculationResult(success=False, message="No encounters with courts assigned")

        encounters.sort(key=lambda e: (e.tournament_court_id,) + division_encounter_sort_key(e))

        court_clocks: Dict[int, datetime] = {}
        for encounter in encounters:
            court_id = encounter.tournament_court_id
            clock = court_clocks.setdefault(court_id, phase.start_time)
            encounter.estimated_start_time = clock
            encounter.estimated_duration_minutes = duration
            encounter.estimated_end_time = clock + timedelta(minutes=duration)
            encounter.updated_at = datetime.utcnow()
            court_clocks[court_id] = encounter.estimated_end_time
            session.add(encounter)

        phase.estimated_end_time = max(court_clocks.values())
        session.add(phase)
        session.commit()

    logger.info("Calculated times for %s encounters in phase %s", len(encounters), phase_id)

    result = TimeCalculationResult(success=True, message=f"Calculated times for {len(encounters)} encounters")
    result.updated_count = len(encounters)
    result.estimated_end_time = phase.estimated_end_time
    return result
