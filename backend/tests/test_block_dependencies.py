"""Tests for block dependency resolution (single forward pass)"""

from datetime import datetime, timedelta

from court_scheduler.models.schedule_block import ScheduleBlock
from court_scheduler.services.block_conflicts import find_block_conflicts
from court_scheduler.utils.block_dependencies import (
    DependencyState,
    apply_dependency_pass,
    dependency_start,
    dependency_state,
)

T = datetime(2026, 5, 2, 9, 0)


def make_block(block_id, start, end, depends_on=None, buffer=0, sort_order=0, court_ids=None):
    return ScheduleBlock(
        id=block_id,
        event_id=1,
        division_id=1,
        block_label=f"Block {block_id}",
        court_ids=court_ids or [],
        start_time=start,
        end_time=end,
        depends_on_block_id=depends_on,
        dependency_buffer_minutes=buffer,
        sort_order=sort_order,
    )


def test_dependent_block_moves_to_dependency_end_plus_buffer():
    """A ends T+60, B buffer 15 stored at T+50: one pass moves B to T+75"""
    a = make_block(1, T, T + timedelta(minutes=60), sort_order=1)
    b = make_block(2, T + timedelta(minutes=50), T + timedelta(minutes=110), depends_on=1, buffer=15, sort_order=2)

    assert dependency_state(b, {1: a, 2: b}) == DependencyState.violated

    shifted = apply_dependency_pass([a, b], {a.id: a.end_time, b.id: b.end_time})

    assert shifted == [b]
    assert b.start_time == T + timedelta(minutes=75)
    assert b.end_time == T + timedelta(minutes=135)
    assert dependency_state(b, {1: a, 2: b}) == DependencyState.satisfied
    assert find_block_conflicts([a, b], {}) == []


def test_unknown_dependency_end_leaves_block_alone():
    b = make_block(2, T, T + timedelta(hours=1), depends_on=99, buffer=10)
    assert dependency_start(b, {}) is None
    assert apply_dependency_pass([b], {}) == []
    assert b.start_time == T


def test_pass_is_single_hop_not_topological():
    """C depends on B which depends on A; C only sees B's stored end"""
    a = make_block(1, T, T + timedelta(minutes=90), sort_order=1)
    b = make_block(2, T, T + timedelta(minutes=60), depends_on=1, sort_order=2)
    c = make_block(3, T + timedelta(minutes=60), T + timedelta(minutes=120), depends_on=2, sort_order=3)
    end_times = {blk.id: blk.end_time for blk in (a, b, c)}

    apply_dependency_pass([a, b, c], end_times)

    assert b.start_time == T + timedelta(minutes=90)
    assert c.start_time == T + timedelta(minutes=60)


def test_dependency_states():
    a = make_block(1, T, T + timedelta(hours=1))
    independent = make_block(2, T, T + timedelta(hours=1))
    missing = make_block(3, T, T + timedelta(hours=1), depends_on=42)
    ok = make_block(4, T + timedelta(hours=1), T + timedelta(hours=2), depends_on=1)
    blocks_by_id = {blk.id: blk for blk in (a, independent, missing, ok)}

    assert dependency_state(independent, blocks_by_id) == DependencyState.independent
    assert dependency_state(missing, blocks_by_id) == DependencyState.missing
    assert dependency_state(ok, blocks_by_id) == DependencyState.satisfied
