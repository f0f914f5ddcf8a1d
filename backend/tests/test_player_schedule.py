"""Tests for the player schedule view"""

from datetime import timedelta

from sqlmodel import Session

from court_scheduler.models.encounter import Encounter, EncounterStatus
from court_scheduler.models.player import Player
from court_scheduler.models.unit import Unit, UnitMember
from court_scheduler.services.player_schedule import format_time_until, get_player_schedule
from tests.factories import T0, create_courts, create_division, create_event


def test_format_time_until_buckets():
    assert format_time_until(timedelta(minutes=5)) == "in 5 min"
    assert format_time_until(timedelta(minutes=59, seconds=50)) == "in 59 min"
    assert format_time_until(timedelta(hours=2, minutes=15)) == "in 2h 15m"
    assert format_time_until(timedelta(days=1, hours=3, minutes=20)) == "in 1d 3h"


def _add(session: Session, obj):
    session.add(obj)
    session.commit()
    session.refresh(obj)
    return obj


def test_missing_event_or_player(session: Session):
    event = create_event(session)
    assert get_player_schedule(session, 999, 1) is None
    assert get_player_schedule(session, event.id, 999) is None


def test_player_without_units_gets_empty_schedule(session: Session):
    event = create_event(session)
    player = _add(session, Player(first_name="Ana", last_name="Lopez"))

    schedule = get_player_schedule(session, event.id, player.id)

    assert schedule.player_name == "Ana Lopez"
    assert schedule.matches == []
    assert schedule.next_match is None


def test_player_schedule_ordering_and_fields(session: Session):
    event = create_event(session)
    (court,) = create_courts(session, event, 1)
    division = create_division(session, event, "Mixed")
    player = _add(session, Player(first_name="Ana", last_name="Lopez"))
    mine = _add(session, Unit(event_id=event.id, division_id=division.id, name="Lopez/Kim"))
    rival = _add(session, Unit(event_id=event.id, division_id=division.id, name="Diaz/Ng"))
    declined = _add(session, Unit(event_id=event.id, division_id=division.id, name="Old Team"))
    _add(session, UnitMember(unit_id=mine.id, user_id=player.id))
    _add(session, UnitMember(unit_id=declined.id, user_id=player.id, invite_status="Declined"))

    def encounter(**kwargs):
        return _add(session, Encounter(event_id=event.id, division_id=division.id, **kwargs))

    done = encounter(
        unit1_id=mine.id,
        unit2_id=rival.id,
        status=EncounterStatus.completed,
        tournament_court_id=court.id,
        estimated_start_time=T0,
    )
    later = encounter(unit1_id=rival.id, unit2_id=mine.id, estimated_start_time=T0 + timedelta(hours=3))
    soon = encounter(unit1_id=mine.id, unit2_seed_label="Winner M4", scheduled_time=T0 + timedelta(hours=1))
    untimed = encounter(unit1_id=mine.id, unit1_seed_label="BYE")
    encounter(unit1_id=declined.id, unit2_id=rival.id, estimated_start_time=T0)

    now = T0 + timedelta(minutes=30)
    schedule = get_player_schedule(session, event.id, player.id, now=now)

    assert [m.encounter_id for m in schedule.matches] == [done.id, soon.id, later.id, untimed.id]

    first = schedule.matches[0]
    assert first.court_label == "Court 1"
    assert first.opponent_name == "Diaz/Ng"
    assert first.my_team_name == "Lopez/Kim"
    assert first.time_until_match is None

    second = schedule.matches[1]
    assert second.opponent_name == "Winner M4"
    assert second.time_until_match == "in 30 min"

    third = schedule.matches[2]
    assert third.opponent_unit_id == rival.id
    assert third.my_unit_id == mine.id
    assert third.time_until_match == "in 2h 30m"

    fourth = schedule.matches[3]
    assert fourth.opponent_name == "TBD"
    assert fourth.is_bye is True

    assert schedule.next_match.encounter_id == soon.id
    assert schedule.total_matches == 4
    assert schedule.completed_matches == 1
    assert schedule.remaining_matches == 3
