"""
Schedule Block Manager

CRUD for master-schedule blocks with referential validation:
- division must belong to the block's event
- phase (if any) must belong to that division
- dependency block (if any) must belong to the same event, and not be the block itself

Writes return ScheduleBlockResult; rejected writes and missing blocks are
reported as success=False, never raised.
"""

import logging
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from sqlalchemy import func
from sqlmodel import Session, select

from court_scheduler.models.court import TournamentCourt
from court_scheduler.models.division import Division
from court_scheduler.models.division_phase import DivisionPhase
from court_scheduler.models.encounter import UNSCHEDULABLE_STATUSES, Encounter
from court_scheduler.models.event import Event
from court_scheduler.models.schedule_block import ScheduleBlock
from court_scheduler.utils.block_dependencies import dependency_state, get_block_sort_key
from court_scheduler.utils.division_colors import division_color
from court_scheduler.utils.master_schedule_models import (
    CourtSummary,
    ScheduleBlockCreate,
    ScheduleBlockResponse,
    ScheduleBlockResult,
    ScheduleBlockUpdate,
)
from court_scheduler.utils.sql import scalar_int

logger = logging.getLogger(__name__)

DEFAULT_BLOCK_HOURS = 2

_NON_NULLABLE_FIELDS = (
    "division_id",
    "court_ids",
    "start_time",
    "end_time",
    "dependency_buffer_minutes",
    "sort_order",
    "is_active",
)


class ScheduleBlockValidationError(ValueError):
    """A block write references records outside its event/division"""

    pass


# ============================================================================
# Encounter scope
# ============================================================================


def block_encounter_filters(division_id: int, phase_id: Optional[int]) -> list:
    """WHERE clauses selecting the encounters a block covers."""
    filters = [Encounter.division_id == division_id]
    if phase_id is not None:
        filters.append(Encounter.phase_id == phase_id)
    return filters


def count_block_encounters(session: Session, division_id: int, phase_id: Optional[int]) -> int:
    """Non-bye, non-cancelled encounters in scope."""
    count = session.exec(
        select(func.count(Encounter.id)).where(
            *block_encounter_filters(division_id, phase_id),
            Encounter.status.not_in([s.value for s in UNSCHEDULABLE_STATUSES]),
        )
    ).one()
    return scalar_int(count)


def count_scheduled_block_encounters(session: Session, division_id: int, phase_id: Optional[int]) -> int:
    """Encounters in scope that have both a court and a start time."""
    count = session.exec(
        select(func.count(Encounter.id)).where(
            *block_encounter_filters(division_id, phase_id),
            Encounter.tournament_court_id.is_not(None),
            Encounter.estimated_start_time.is_not(None),
        )
    ).one()
    return scalar_int(count)


# ============================================================================
# Reads
# ============================================================================


def get_active_event_blocks(session: Session, event_id: int) -> List[ScheduleBlock]:
    blocks = session.exec(
        select(ScheduleBlock).where(ScheduleBlock.event_id == event_id, ScheduleBlock.is_active == True)  # noqa: E712
    ).all()
    return sorted(blocks, key=get_block_sort_key)


def get_court_labels(session: Session, event_id: int) -> Dict[int, str]:
    courts = session.exec(select(TournamentCourt).where(TournamentCourt.event_id == event_id)).all()
    return {c.id: c.court_label for c in courts}


def build_block_response(
    session: Session,
    block: ScheduleBlock,
    blocks_by_id: Optional[Dict[int, ScheduleBlock]] = None,
    court_labels: Optional[Dict[int, str]] = None,
) -> ScheduleBlockResponse:
    """
    Project a block into its response shape.

    blocks_by_id (active blocks of the event) and court_labels can be passed in
    when building many responses at once.
    """
    if blocks_by_id is None:
        blocks_by_id = {b.id: b for b in get_active_event_blocks(session, block.event_id)}
    if court_labels is None:
        court_labels = get_court_labels(session, block.event_id)

    division = session.get(Division, block.division_id)
    phase = session.get(DivisionPhase, block.phase_id) if block.phase_id else None

    dep_label = None
    if block.depends_on_block_id is not None:
        dep = blocks_by_id.get(block.depends_on_block_id) or session.get(ScheduleBlock, block.depends_on_block_id)
        dep_label = dep.block_label if dep else None

    return ScheduleBlockResponse(
        id=block.id,
        event_id=block.event_id,
        division_id=block.division_id,
        division_name=division.name if division else None,
        division_color=division_color(block.division_id),
        phase_id=block.phase_id,
        phase_name=phase.name if phase else None,
        phase_type=block.phase_type or (phase.phase_type if phase else None),
        block_label=block.block_label,
        court_ids=list(block.court_ids or []),
        courts=[
            CourtSummary(id=court_id, court_label=court_labels.get(court_id, f"Court {court_id}"))
            for court_id in block.court_ids or []
        ],
        start_time=block.start_time,
        end_time=block.end_time,
        depends_on_block_id=block.depends_on_block_id,
        depends_on_block_label=dep_label,
        dependency_buffer_minutes=block.dependency_buffer_minutes,
        dependency_state=dependency_state(block, blocks_by_id).value,
        sort_order=block.sort_order,
        notes=block.notes,
        is_active=block.is_active,
        estimated_match_duration_minutes=block.estimated_match_duration_minutes,
        encounter_count=count_block_encounters(session, block.division_id, block.phase_id),
        scheduled_encounter_count=count_scheduled_block_encounters(session, block.division_id, block.phase_id),
        last_scheduled_at=block.last_scheduled_at,
        created_at=block.created_at,
    )


def list_schedule_blocks(session: Session, event_id: int) -> List[ScheduleBlockResponse]:
    """Active blocks of the event in (sort_order, start_time, id) order."""
    blocks = get_active_event_blocks(session, event_id)
    blocks_by_id = {b.id: b for b in blocks}
    court_labels = get_court_labels(session, event_id)
    return [build_block_response(session, b, blocks_by_id, court_labels) for b in blocks]


def get_schedule_block(session: Session, block_id: int) -> Optional[ScheduleBlockResponse]:
    block = session.get(ScheduleBlock, block_id)
    if not block:
        return None
    return build_block_response(session, block)


# ============================================================================
# Writes
# ============================================================================


def _validate_references(
    session: Session,
    event_id: int,
    division_id: int,
    phase_id: Optional[int],
    depends_on_block_id: Optional[int],
    block_id: Optional[int] = None,
) -> Division:
    division = session.get(Division, division_id)
    if not division or division.event_id != event_id:
        raise ScheduleBlockValidationError("Division not found or doesn't belong to this event")

    if phase_id is not None:
        phase = session.get(DivisionPhase, phase_id)
        if not phase or phase.division_id != division_id:
            raise ScheduleBlockValidationError("Phase not found or doesn't belong to this division")

    if depends_on_block_id is not None:
        if block_id is not None and depends_on_block_id == block_id:
            raise ScheduleBlockValidationError("A block cannot depend on itself")
        dep = session.get(ScheduleBlock, depends_on_block_id)
        if not dep or dep.event_id != event_id:
            raise ScheduleBlockValidationError("Dependency block not found or doesn't belong to this event")

    return division


def _derive_label(session: Session, division: Division, phase_id: Optional[int], phase_type: Optional[str]) -> str:
    """'Division - Phase name', or 'Division - phase_type' when no phase is given."""
    label = division.name
    if phase_id is not None:
        phase = session.get(DivisionPhase, phase_id)
        if phase:
            label += f" - {phase.name}"
    elif phase_type:
        label += f" - {phase_type}"
    return label


def create_schedule_block(
    session: Session, event_id: int, request: ScheduleBlockCreate, user_id: Optional[int] = None
) -> ScheduleBlockResult:
    """
    Create a block for an event.

    - block_label defaults to a label derived from division + phase
    - end_time defaults to start_time + 2 hours
    - encounter_count is stored as a creation-time snapshot
    """
    event = session.get(Event, event_id)
    if not event:
        return ScheduleBlockResult(success=False, message="Event not found")

    try:
        division = _validate_references(
            session, event_id, request.division_id, request.phase_id, request.depends_on_block_id
        )
    except ScheduleBlockValidationError as e:
        return ScheduleBlockResult(success=False, message=str(e))

    block_label = request.block_label or _derive_label(session, division, request.phase_id, request.phase_type)
    end_time = request.end_time or request.start_time + timedelta(hours=DEFAULT_BLOCK_HOURS)

    block = ScheduleBlock(
        event_id=event_id,
        division_id=request.division_id,
        phase_id=request.phase_id,
        phase_type=request.phase_type,
        block_label=block_label,
        court_ids=list(request.court_ids),
        start_time=request.start_time,
        end_time=end_time,
        depends_on_block_id=request.depends_on_block_id,
        dependency_buffer_minutes=request.dependency_buffer_minutes,
        sort_order=request.sort_order,
        notes=request.notes,
        estimated_match_duration_minutes=request.estimated_match_duration_minutes,
        encounter_count=count_block_encounters(session, request.division_id, request.phase_id),
        created_by_user_id=user_id,
        updated_by_user_id=user_id,
    )
    session.add(block)
    session.commit()
    session.refresh(block)

    logger.info("Created schedule block %s for event %s", block.id, event_id)

    return ScheduleBlockResult(
        success=True, message="Schedule block created", block=build_block_response(session, block)
    )


def update_schedule_block(
    session: Session, block_id: int, request: ScheduleBlockUpdate, user_id: Optional[int] = None
) -> ScheduleBlockResult:
    """
    Partial update. Only fields present in the request are applied; an explicit
    null depends_on_block_id clears the dependency. The merged state is
    validated before anything is written.
    """
    block = session.get(ScheduleBlock, block_id)
    if not block:
        return ScheduleBlockResult(success=False, message="Schedule block not found")

    changes = request.model_dump(exclude_unset=True)

    # Non-nullable columns: a null in the request means "leave as is"
    for key in _NON_NULLABLE_FIELDS:
        if key in changes and changes[key] is None:
            del changes[key]

    division_id = changes.get("division_id", block.division_id)
    phase_id = changes.get("phase_id", block.phase_id)
    depends_on_block_id = changes.get("depends_on_block_id", block.depends_on_block_id)
    start_time = changes.get("start_time", block.start_time)
    end_time = changes.get("end_time", block.end_time)

    try:
        _validate_references(session, block.event_id, division_id, phase_id, depends_on_block_id, block_id=block.id)
        if end_time <= start_time:
            raise ScheduleBlockValidationError("end_time must be after start_time")
        if changes.get("dependency_buffer_minutes", 0) < 0:
            raise ScheduleBlockValidationError("dependency_buffer_minutes must be >= 0")
    except ScheduleBlockValidationError as e:
        return ScheduleBlockResult(success=False, message=str(e))

    for key, value in changes.items():
        setattr(block, key, list(value) if key == "court_ids" else value)
    block.updated_by_user_id = user_id
    block.updated_at = datetime.utcnow()

    session.add(block)
    session.commit()
    session.refresh(block)

    logger.info("Updated schedule block %s", block_id)

    return ScheduleBlockResult(
        success=True, message="Schedule block updated", block=build_block_response(session, block)
    )


def delete_schedule_block(session: Session, block_id: int) -> ScheduleBlockResult:
    """Delete a block. Blocks that depended on it lose the dependency (no cascade)."""
    block = session.get(ScheduleBlock, block_id)
    if not block:
        return ScheduleBlockResult(success=False, message="Schedule block not found")

    dependents = session.exec(select(ScheduleBlock).where(ScheduleBlock.depends_on_block_id == block_id)).all()
    for dependent in dependents:
        dependent.depends_on_block_id = None
        dependent.updated_at = datetime.utcnow()
        session.add(dependent)
    # Flush the cleared references before the row they point at disappears
    session.flush()

    session.delete(block)
    session.commit()

    logger.info("Deleted schedule block %s (%s dependents cleared)", block_id, len(dependents))

    return ScheduleBlockResult(success=True, message="Schedule block deleted")
