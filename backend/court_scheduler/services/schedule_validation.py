"""
Encounter-level schedule validation.

Checks the scheduled encounters of an event (optionally one division):
- CourtDoubleBook: consecutive encounters on a court overlap
- UnitOverlap: a unit is in two overlapping encounters
- InsufficientRest: a unit's gap between encounters is under the division's
  minimum rest (warning only; does not make the schedule invalid)

Bye and cancelled encounters are ignored. Read-only.
"""

import logging
from collections import defaultdict
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Tuple

from sqlmodel import Session, select

from court_scheduler.models.court import TournamentCourt
from court_scheduler.models.division import Division
from court_scheduler.models.encounter import UNSCHEDULABLE_STATUSES, Encounter
from court_scheduler.utils.durations import calculate_encounter_duration
from court_scheduler.utils.master_schedule_models import (
    EncounterConflictType,
    ScheduleConflict,
    ScheduleValidationResult,
)

logger = logging.getLogger(__name__)

DEFAULT_REST_MINUTES = 15

TIME_FORMAT = "%H:%M"


def _encounter_end(encounter: Encounter, division: Optional[Division]) -> datetime:
    if encounter.estimated_end_time is not None:
        return encounter.estimated_end_time
    duration = encounter.estimated_duration_minutes or calculate_encounter_duration(division)
    return encounter.estimated_start_time + timedelta(minutes=duration)


def _match_name(encounter: Encounter, division: Optional[Division]) -> str:
    name = division.name if division else f"Division {encounter.division_id}"
    return f"{name} Match #{encounter.encounter_number}"


def validate_schedule(session: Session, event_id: int, division_id: Optional[int] = None) -> ScheduleValidationResult:
    """
    Validate court and unit timing for an event's encounters.

    Args:
        session: Database session (read-only)
        event_id: Event ID
        division_id: Optional division filter

    Returns:
        ScheduleValidationResult; is_valid is False on any double-book or unit overlap
    """
    query = select(Encounter).where(
        Encounter.event_id == event_id,
        Encounter.status.not_in([s.value for s in UNSCHEDULABLE_STATUSES]),
    )
    if division_id is not None:
        query = query.where(Encounter.division_id == division_id)
    encounters = list(session.exec(query).all())

    scheduled = [e for e in encounters if e.tournament_court_id is not None and e.estimated_start_time is not None]

    result = ScheduleValidationResult(
        total_encounters=len(encounters),
        scheduled_encounters=len(scheduled),
        unscheduled_encounters=len(encounters) - len(scheduled),
    )

    divisions: Dict[int, Division] = {
        d.id: d for d in session.exec(select(Division).where(Division.event_id == event_id)).all()
    }
    court_labels: Dict[int, str] = {
        c.id: c.court_label
        for c in session.exec(select(TournamentCourt).where(TournamentCourt.event_id == event_id)).all()
    }

    def start_key(e: Encounter) -> Tuple:
        return (e.estimated_start_time, e.id)

    # 1. Court double-booking
    by_court: Dict[int, List[Encounter]] = defaultdict(list)
    for encounter in scheduled:
        by_court[encounter.tournament_court_id].append(encounter)

    for court_id in sorted(by_court):
        ordered = sorted(by_court[court_id], key=start_key)
        for current, nxt in zip(ordered, ordered[1:]):
            current_end = _encounter_end(current, divisions.get(current.division_id))
            if current_end > nxt.estimated_start_time:
                result.is_valid = False
                result.conflicts.append(
                    ScheduleConflict(
                        conflict_type=EncounterConflictType.court_double_book,
                        description=(
                            f"Court {court_labels.get(court_id, court_id)}: "
                            f"{_match_name(current, divisions.get(current.division_id))} ends at "
                            f"{current_end.strftime(TIME_FORMAT)} but "
                            f"{_match_name(nxt, divisions.get(nxt.division_id))} starts at "
                            f"{nxt.estimated_start_time.strftime(TIME_FORMAT)}"
                        ),
                        encounter_id1=current.id,
                        encounter_id2=nxt.id,
                        court_id=court_id,
                    )
                )

    # 2. Unit overlap and 3. rest between a unit's encounters
    by_unit: Dict[int, List[Encounter]] = defaultdict(list)
    for encounter in scheduled:
        for unit_id in (encounter.unit1_id, encounter.unit2_id):
            if unit_id is not None:
                by_unit[unit_id].append(encounter)

    for unit_id in sorted(by_unit):
        ordered = sorted(by_unit[unit_id], key=start_key)
        for current, nxt in zip(ordered, ordered[1:]):
            division = divisions.get(current.division_id)
            current_end = _encounter_end(current, division)
            if current_end > nxt.estimated_start_time:
                result.is_valid = False
                result.conflicts.append(
                    ScheduleConflict(
                        conflict_type=EncounterConflictType.unit_overlap,
                        description=(
                            f"Unit playing overlapping matches: {_match_name(current, division)} and "
                            f"{_match_name(nxt, divisions.get(nxt.division_id))}"
                        ),
                        encounter_id1=current.id,
                        encounter_id2=nxt.id,
                        unit_id=unit_id,
                    )
                )
                continue

            rest_required = DEFAULT_REST_MINUTES
            if division is not None and division.min_rest_time_minutes is not None:
                rest_required = division.min_rest_time_minutes
            actual_rest = (nxt.estimated_start_time - current_end).total_seconds() / 60
            if actual_rest < rest_required:
                result.conflicts.append(
                    ScheduleConflict(
                        conflict_type=EncounterConflictType.insufficient_rest,
                        description=(
                            f"Only {actual_rest:.0f}min rest between matches (requires {rest_required}min): "
                            f"{_match_name(current, division)} -> {_match_name(nxt, divisions.get(nxt.division_id))}"
                        ),
                        encounter_id1=current.id,
                        encounter_id2=nxt.id,
                        unit_id=unit_id,
                    )
                )

    logger.info(
        "Validated schedule for event %s (division %s): %s scheduled, %s conflicts",
        event_id,
        division_id,
        result.scheduled_encounters,
        len(result.conflicts),
    )
    return result
