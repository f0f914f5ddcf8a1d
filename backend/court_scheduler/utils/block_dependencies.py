"""
Block dependency resolution.

A block that depends on another may start no earlier than
dependency.end_time + dependency_buffer_minutes.

Propagation is a single forward pass over blocks in (sort_order, start_time)
order. It is NOT a topological sort: if a block's dependency is shifted later
in the same pass, the dependent only sees the new end on the next run.
"""

from datetime import datetime, timedelta
from enum import Enum
from typing import Dict, List, Optional, Sequence

from court_scheduler.models.schedule_block import ScheduleBlock


class DependencyState(str, Enum):
    independent = "independent"  # no dependency
    satisfied = "satisfied"  # starts at or after dependency end + buffer
    violated = "violated"  # starts too early
    missing = "missing"  # dependency block is inactive or not in the event


def get_block_sort_key(block: ScheduleBlock) -> tuple:
    return (block.sort_order, block.start_time, block.id or 0)


def dependency_start(block: ScheduleBlock, end_times: Dict[int, datetime]) -> Optional[datetime]:
    """Earliest allowed start for a dependent block, or None if unknown."""
    if block.depends_on_block_id is None:
        return None
    dep_end = end_times.get(block.depends_on_block_id)
    if dep_end is None:
        return None
    return dep_end + timedelta(minutes=block.dependency_buffer_minutes or 0)


def apply_dependency_pass(
    blocks: Sequence[ScheduleBlock], end_times: Dict[int, datetime]
) -> List[ScheduleBlock]:
    """
    Move each dependent block to its dependency's end + buffer.

    The block keeps its duration, so end_time moves with start_time.
    Blocks are visited in the given order; end_times is read, never updated.
    Returns the blocks that moved.
    """
    shifted: List[ScheduleBlock] = []
    for block in blocks:
        new_start = dependency_start(block, end_times)
        if new_start is None or new_start == block.start_time:
            continue
        block.end_time = block.end_time + (new_start - block.start_time)
        block.start_time = new_start
        block.updated_at = datetime.utcnow()
        shifted.append(block)
    return shifted


def dependency_state(block: ScheduleBlock, blocks_by_id: Dict[int, ScheduleBlock]) -> DependencyState:
    if block.depends_on_block_id is None:
        return DependencyState.independent
    dep = blocks_by_id.get(block.depends_on_block_id)
    if dep is None:
        return DependencyState.missing
    expected = dep.end_time + timedelta(minutes=block.dependency_buffer_minutes or 0)
    if block.start_time < expected:
        return DependencyState.violated
    return DependencyState.satisfied
