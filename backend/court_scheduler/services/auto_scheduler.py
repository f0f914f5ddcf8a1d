"""
Master Schedule Auto-Scheduler

Drives the greedy engine across an event's active blocks:

1. Load blocks (optionally filtered by id) in (sort_order, start_time, id) order
2. Optionally clear existing assignments for in-scope encounters
   (completed/in-progress encounters keep theirs)
3. Optionally apply a single dependency pass seeded with the stored end times
   of every active block of the event
4. Per block: fixed court set from block.court_ids, encounters in
   pool -> round -> encounter number order, time-aware greedy run from the
   effective start; record the resulting end for later blocks in this run
5. Commit, then run the conflict validator once

Best effort: a failing block is recorded and the run moves on.
"""

import logging
from datetime import datetime
from typing import Dict, List, Optional

from sqlmodel import Session, select

from court_scheduler.models.division import Division
from court_scheduler.models.division_phase import DivisionPhase
from court_scheduler.models.encounter import LOCKED_STATUSES, UNSCHEDULABLE_STATUSES, Encounter
from court_scheduler.models.event import Event
from court_scheduler.models.schedule_block import ScheduleBlock
from court_scheduler.services.block_conflicts import validate_schedule_blocks
from court_scheduler.services.schedule_blocks import block_encounter_filters, get_active_event_blocks
from court_scheduler.utils.block_dependencies import apply_dependency_pass, dependency_start
from court_scheduler.utils.court_pool import get_block_courts
from court_scheduler.utils.durations import calculate_encounter_duration
from court_scheduler.utils.greedy_assign import assign_time_aware, phase_encounter_sort_key
from court_scheduler.utils.master_schedule_models import (
    AutoScheduleRequest,
    AutoScheduleResult,
    BlockScheduleResult,
)
from court_scheduler.utils.scheduling_lock import scheduling_lock

logger = logging.getLogger(__name__)

_SKIPPED_STATUSES = [s.value for s in UNSCHEDULABLE_STATUSES + LOCKED_STATUSES]
_LOCKED_STATUSES = [s.value for s in LOCKED_STATUSES]


class BlockSchedulingError(Exception):
    """A block cannot be scheduled (reported per block, never aborts the run)"""

    pass


def _load_blocks(session: Session, event_id: int, block_ids: Optional[List[int]]) -> List[ScheduleBlock]:
    blocks = get_active_event_blocks(session, event_id)
    if block_ids:
        wanted = set(block_ids)
        blocks = [b for b in blocks if b.id in wanted]
    return blocks


def _clear_in_scope(session: Session, blocks: List[ScheduleBlock]) -> int:
    cleared = 0
    seen = set()
    for block in blocks:
        encounters = session.exec(
            select(Encounter).where(
                *block_encounter_filters(block.division_id, block.phase_id),
                Encounter.status.not_in(_LOCKED_STATUSES),
            )
        ).all()
        for encounter in encounters:
            if encounter.id in seen:
                continue
            seen.add(encounter.id)
            if encounter.clear_schedule():
                session.add(encounter)
                cleared += 1
    return cleared


def _block_encounters(session: Session, block: ScheduleBlock, include_assigned: bool) -> List[Encounter]:
    query = select(Encounter).where(
        *block_encounter_filters(block.division_id, block.phase_id),
        Encounter.status.not_in(_SKIPPED_STATUSES),
    )
    if not include_assigned:
        query = query.where(Encounter.tournament_court_id.is_(None))
    encounters = list(session.exec(query).all())
    encounters.sort(key=phase_encounter_sort_key)
    return encounters


def _schedule_block(
    session: Session,
    block: ScheduleBlock,
    request: AutoScheduleRequest,
    end_times: Dict[int, datetime],
    block_result: BlockScheduleResult,
) -> bool:
    """
    Schedule one block. Returns True when encounters were placed.

    Raises:
        BlockSchedulingError: If the block has no usable courts
    """
    if not block.court_ids:
        raise BlockSchedulingError("No courts assigned to this block")

    courts = get_block_courts(session, block.event_id, block.court_ids)
    if not courts:
        raise BlockSchedulingError("No valid courts found")

    encounters = _block_encounters(session, block, include_assigned=request.clear_existing)
    if not encounters:
        block_result.success = True
        block_result.message = "No encounters to schedule"
        return False

    effective_start = dependency_start(block, end_times) or block.start_time
    block.start_time = effective_start

    division = session.get(Division, block.division_id)
    phases: Dict[int, DivisionPhase] = {}

    def duration_for(encounter: Encounter) -> int:
        if block.estimated_match_duration_minutes and block.estimated_match_duration_minutes > 0:
            return block.estimated_match_duration_minutes
        phase = None
        if encounter.phase_id is not None:
            if encounter.phase_id not in phases:
                phases[encounter.phase_id] = session.get(DivisionPhase, encounter.phase_id)
            phase = phases[encounter.phase_id]
        return calculate_encounter_duration(division, phase)

    run = assign_time_aware(encounters, courts, effective_start, duration_for)
    for encounter in encounters:
        session.add(encounter)

    block.end_time = run.estimated_end
    block.last_scheduled_at = datetime.utcnow()
    block.updated_at = datetime.utcnow()
    session.add(block)
    end_times[block.id] = block.end_time

    block_result.success = True
    block_result.encounters_scheduled = run.assigned_count
    block_result.calculated_start_time = effective_start
    block_result.calculated_end_time = block.end_time
    block_result.message = f"Scheduled {run.assigned_count} encounters"
    return True


def auto_schedule_event(
    session: Session, event_id: int, request: Optional[AutoScheduleRequest] = None
) -> AutoScheduleResult:
    """
    Auto-schedule every active block of an event (or the requested subset).

    Args:
        session: Database session
        event_id: Event ID
        request: block_ids, clear_existing, recalculate_dependencies

    Returns:
        AutoScheduleResult with per-block outcomes and post-run conflicts
    """
    request = request or AutoScheduleRequest()

    event = session.get(Event, event_id)
    if not event:
        return AutoScheduleResult(success=False, message="Event not found")

    with scheduling_lock(event_id):
        blocks = _load_blocks(session, event_id, request.block_ids)
        if not blocks:
            return AutoScheduleResult(success=False, message="No schedule blocks found to process")

        if request.clear_existing:
            cleared = _clear_in_scope(session, blocks)
            logger.info("Cleared %s encounter assignments before auto-schedule of event %s", cleared, event_id)

        if request.recalculate_dependencies:
            stored_ends = {b.id: b.end_time for b in get_active_event_blocks(session, event_id)}
            shifted = apply_dependency_pass(blocks, stored_ends)
            for block in shifted:
                session.add(block)

        result = AutoScheduleResult(success=True)
        end_times: Dict[int, datetime] = {}
        processed = 0

        for block in blocks:
            block_result = BlockScheduleResult(block_id=block.id, block_label=block.block_label)
            try:
                if _schedule_block(session, block, request, end_times, block_result):
                    processed += 1
                    result.encounters_scheduled += block_result.encounters_scheduled
            except BlockSchedulingError as e:
                block_result.success = False
                block_result.message = str(e)
            except Exception as e:
                logger.exception("Error scheduling block %s", block.id)
                block_result.success = False
                block_result.message = str(e)
            result.block_results.append(block_result)

        session.commit()

        result.blocks_processed = processed
        result.message = f"Processed {processed} blocks, scheduled {result.encounters_scheduled} encounters"
        result.conflicts = validate_schedule_blocks(session, event_id)
        result.conflicts_found = len(result.conflicts)

    logger.info(
        "Auto-scheduled event %s: %s blocks, %s encounters, %s conflicts",
        event_id,
        result.blocks_processed,
        result.encounters_scheduled,
        result.conflicts_found,
    )
    return result
