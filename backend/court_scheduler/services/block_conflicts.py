"""
Block Conflict Validator

Read-only, advisory checks over an event's active blocks:
- CourtOverlap: two blocks share a court and their windows overlap
  (adjacent pairs after sorting each court's blocks by start time)
- DependencyViolation: a block starts before its dependency's end + buffer

Conflicts never block a write; callers decide how to surface them.
"""

from collections import defaultdict
from datetime import timedelta
from typing import Dict, List, Sequence

from sqlmodel import Session

from court_scheduler.models.schedule_block import ScheduleBlock
from court_scheduler.services.schedule_blocks import get_active_event_blocks, get_court_labels
from court_scheduler.utils.master_schedule_models import ConflictType, ScheduleBlockConflict

TIME_FORMAT = "%H:%M"


def find_block_conflicts(blocks: Sequence[ScheduleBlock], court_labels: Dict[int, str]) -> List[ScheduleBlockConflict]:
    """
    Pure conflict scan.

    Args:
        blocks: Active blocks of one event
        court_labels: court_id -> label (missing ids render as "Court {id}")

    Returns:
        Court overlaps (grouped by court id, ascending) followed by dependency violations
    """
    conflicts: List[ScheduleBlockConflict] = []

    court_blocks: Dict[int, List[ScheduleBlock]] = defaultdict(list)
    for block in blocks:
        for court_id in block.court_ids or []:
            court_blocks[court_id].append(block)

    for court_id in sorted(court_blocks):
        court_label = court_labels.get(court_id, f"Court {court_id}")
        ordered = sorted(court_blocks[court_id], key=lambda b: b.start_time)
        for current, nxt in zip(ordered, ordered[1:]):
            if current.end_time > nxt.start_time:
                conflicts.append(
                    ScheduleBlockConflict(
                        conflict_type=ConflictType.court_overlap,
                        court_id=court_id,
                        court_label=court_label,
                        block1_id=current.id,
                        block2_id=nxt.id,
                        block1_label=current.block_label,
                        block2_label=nxt.block_label,
                        message=(
                            f"Blocks overlap on {court_label}: '{current.block_label}' ends at "
                            f"{current.end_time.strftime(TIME_FORMAT)} but '{nxt.block_label}' starts at "
                            f"{nxt.start_time.strftime(TIME_FORMAT)}"
                        ),
                    )
                )

    blocks_by_id = {b.id: b for b in blocks}
    for block in blocks:
        if block.depends_on_block_id is None:
            continue
        dep = blocks_by_id.get(block.depends_on_block_id)
        if dep is None:
            continue
        expected_start = dep.end_time + timedelta(minutes=block.dependency_buffer_minutes or 0)
        if block.start_time < expected_start:
            conflicts.append(
                ScheduleBlockConflict(
                    conflict_type=ConflictType.dependency_violation,
                    block1_id=dep.id,
                    block2_id=block.id,
                    block1_label=dep.block_label,
                    block2_label=block.block_label,
                    message=(
                        f"'{block.block_label}' starts at {block.start_time.strftime(TIME_FORMAT)} "
                        f"but depends on '{dep.block_label}' which ends at {dep.end_time.strftime(TIME_FORMAT)}"
                    ),
                )
            )

    return conflicts


def validate_schedule_blocks(session: Session, event_id: int) -> List[ScheduleBlockConflict]:
    """Conflicts among the event's active blocks. Does not mutate the database."""
    blocks = get_active_event_blocks(session, event_id)
    return find_block_conflicts(blocks, get_court_labels(session, event_id))
