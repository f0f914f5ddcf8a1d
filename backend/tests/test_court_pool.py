"""Tests for court pool resolution from court-group assignments"""

from sqlmodel import Session

from court_scheduler.utils.court_pool import (
    get_active_event_courts,
    get_available_courts_for_division,
    get_block_courts,
    resolve_court_pool,
)
from tests.factories import bind_court_group, create_courts, create_division, create_event, create_phase


def test_no_assignments_returns_empty_and_resolver_falls_back(session: Session):
    event = create_event(session)
    courts = create_courts(session, event, 3, sort_orders=[3, 1, 2])
    division = create_division(session, event)

    assert get_available_courts_for_division(session, division.id) == []
    assert [c.id for c in resolve_court_pool(session, division)] == [courts[1].id, courts[2].id, courts[0].id]


def test_groups_expanded_deduplicated_and_sorted(session: Session):
    event = create_event(session)
    c1, c2, c3, c4 = create_courts(session, event, 4)
    division = create_division(session, event)

    bind_court_group(session, division, [c3, c1], priority=0, code="A")
    bind_court_group(session, division, [c1, c2], priority=1, code="B")

    courts = get_available_courts_for_division(session, division.id)
    assert [c.id for c in courts] == [c1.id, c2.id, c3.id]
    assert c4.id not in [c.id for c in courts]


def test_inactive_courts_dropped(session: Session):
    event = create_event(session)
    c1, c2 = create_courts(session, event, 2)
    c2.is_active = False
    session.add(c2)
    session.commit()
    division = create_division(session, event)
    bind_court_group(session, division, [c1, c2])

    assert [c.id for c in get_available_courts_for_division(session, division.id)] == [c1.id]
    assert [c.id for c in get_active_event_courts(session, event.id)] == [c1.id]


def test_phase_filter_keeps_phase_and_division_wide_assignments(session: Session):
    event = create_event(session)
    c1, c2, c3 = create_courts(session, event, 3)
    division = create_division(session, event)
    pools = create_phase(session, division, "Pools")
    bracket = create_phase(session, division, "Bracket")

    bind_court_group(session, division, [c1], phase=pools, code="P")
    bind_court_group(session, division, [c2], phase=bracket, code="B")
    bind_court_group(session, division, [c3], code="ALL")

    assert [c.id for c in get_available_courts_for_division(session, division.id, pools.id)] == [c1.id, c3.id]
    assert [c.id for c in get_available_courts_for_division(session, division.id, bracket.id)] == [c2.id, c3.id]
    # No phase: every active assignment of the division
    assert len(get_available_courts_for_division(session, division.id)) == 3


def test_block_courts_limited_to_event_and_active(session: Session):
    event = create_event(session)
    other = create_event(session, "Other Open")
    c1, c2 = create_courts(session, event, 2)
    (foreign,) = create_courts(session, other, 1)
    c2.is_active = False
    session.add(c2)
    session.commit()

    courts = get_block_courts(session, event.id, [c1.id, c2.id, foreign.id])
    assert [c.id for c in courts] == [c1.id]
    assert get_block_courts(session, event.id, []) == []
