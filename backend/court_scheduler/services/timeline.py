"""
Master Schedule Timeline Builder

Read-only presentation view of an event's master schedule:
- blocks (same shape as the block list)
- per-court ordered time slots, flagged when a court overlap touches them
- per-division summaries with a deterministic color
- the advisory conflict list
"""

from collections import defaultdict
from typing import Dict, List, Optional, Set

from sqlalchemy import func
from sqlmodel import Session, select

from court_scheduler.models.division import Division
from court_scheduler.models.encounter import Encounter
from court_scheduler.models.event import Event
from court_scheduler.services.block_conflicts import find_block_conflicts
from court_scheduler.services.schedule_blocks import build_block_response, get_active_event_blocks, get_court_labels
from court_scheduler.utils.court_pool import get_active_event_courts
from court_scheduler.utils.division_colors import division_color
from court_scheduler.utils.master_schedule_models import (
    ConflictType,
    CourtBlockTimeSlot,
    MasterScheduleTimeline,
    TimelineCourtBlocks,
    TimelineDivisionSummary,
)


def _division_encounter_counts(session: Session, event_id: int) -> Dict[int, int]:
    rows = session.exec(
        select(Encounter.division_id, func.count(Encounter.id))
        .where(Encounter.event_id == event_id)
        .group_by(Encounter.division_id)
    ).all()
    return {division_id: count for division_id, count in rows}


def get_timeline(session: Session, event_id: int) -> Optional[MasterScheduleTimeline]:
    """
    Build the timeline for an event.

    Returns:
        MasterScheduleTimeline, or None if the event does not exist
    """
    event = session.get(Event, event_id)
    if not event:
        return None

    blocks = get_active_event_blocks(session, event_id)
    blocks_by_id = {b.id: b for b in blocks}
    court_labels = get_court_labels(session, event_id)
    block_responses = [build_block_response(session, b, blocks_by_id, court_labels) for b in blocks]

    conflicts = find_block_conflicts(blocks, court_labels)

    # (court_id, block_id) pairs involved in a court overlap
    flagged: Set[tuple] = set()
    for conflict in conflicts:
        if conflict.conflict_type == ConflictType.court_overlap and conflict.court_id is not None:
            flagged.add((conflict.court_id, conflict.block1_id))
            flagged.add((conflict.court_id, conflict.block2_id))

    courts: List[TimelineCourtBlocks] = []
    for court in get_active_event_courts(session, event_id):
        slots = [
            CourtBlockTimeSlot(
                block_id=b.id,
                division_id=b.division_id,
                division_name=b.division_name,
                division_color=b.division_color,
                phase_type=b.phase_type,
                block_label=b.block_label,
                start_time=b.start_time,
                end_time=b.end_time,
                has_conflict=(court.id, b.id) in flagged,
            )
            for b in block_responses
            if court.id in b.court_ids
        ]
        slots.sort(key=lambda s: s.start_time)
        courts.append(
            TimelineCourtBlocks(id=court.id, court_label=court.court_label, sort_order=court.sort_order, time_slots=slots)
        )

    blocks_by_division: Dict[int, list] = defaultdict(list)
    for block in blocks:
        blocks_by_division[block.division_id].append(block)
    encounter_counts = _division_encounter_counts(session, event_id)

    divisions = session.exec(
        select(Division)
        .where(Division.event_id == event_id, Division.is_active == True)  # noqa: E712
        .order_by(Division.sort_order, Division.id)
    ).all()

    summaries: List[TimelineDivisionSummary] = []
    for division in divisions:
        div_blocks = blocks_by_division.get(division.id, [])
        summaries.append(
            TimelineDivisionSummary(
                id=division.id,
                name=division.name,
                color=division_color(division.id),
                block_count=len(div_blocks),
                encounter_count=encounter_counts.get(division.id, 0),
                first_block_start=min((b.start_time for b in div_blocks), default=None),
                last_block_end=max((b.end_time for b in div_blocks), default=None),
            )
        )

    return MasterScheduleTimeline(
        event_id=event.id,
        event_name=event.name,
        event_start_date=event.start_date,
        event_end_date=event.end_date,
        is_schedule_published=event.schedule_published_at is not None,
        schedule_published_at=event.schedule_published_at,
        blocks=block_responses,
        courts=courts,
        divisions=summaries,
        conflicts=conflicts,
    )
