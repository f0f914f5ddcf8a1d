"""
Player Schedule Builder

Projects an event's encounters onto one player's itinerary. Read-only.
"""

from datetime import datetime, timedelta
from typing import Dict, List, Optional

from sqlmodel import Session, or_, select

from court_scheduler.models.court import TournamentCourt
from court_scheduler.models.division import Division
from court_scheduler.models.division_phase import DivisionPhase
from court_scheduler.models.encounter import Encounter, EncounterStatus
from court_scheduler.models.event import Event
from court_scheduler.models.player import Player
from court_scheduler.models.unit import Unit, UnitMember
from court_scheduler.utils.master_schedule_models import PlayerSchedule, PlayerScheduleItem

BYE_SEED_LABEL = "BYE"

_FINISHED_STATUSES = (EncounterStatus.completed, EncounterStatus.cancelled)


def format_time_until(delta: timedelta) -> str:
    """'in N min' under an hour, 'in Hh Mm' under a day, else 'in Dd Hh'."""
    total_minutes = int(delta.total_seconds() // 60)
    if total_minutes < 60:
        return f"in {total_minutes} min"
    total_hours = total_minutes // 60
    if total_hours < 24:
        return f"in {total_hours}h {total_minutes % 60}m"
    return f"in {total_hours // 24}d {total_hours % 24}h"


def _match_time(encounter: Encounter) -> Optional[datetime]:
    return encounter.estimated_start_time or encounter.scheduled_time


def _by_id(session: Session, model, ids) -> Dict[int, object]:
    ids = sorted({i for i in ids if i is not None})
    if not ids:
        return {}
    return {row.id: row for row in session.exec(select(model).where(model.id.in_(ids))).all()}


def get_player_schedule(
    session: Session, event_id: int, user_id: int, now: Optional[datetime] = None
) -> Optional[PlayerSchedule]:
    """
    Build a player's schedule for an event.

    Units come from accepted memberships. Encounters are ordered by estimated
    start, then scheduled time; encounters with neither go last.

    Returns:
        PlayerSchedule, or None if the event or player does not exist
    """
    event = session.get(Event, event_id)
    if not event:
        return None
    player = session.get(Player, user_id)
    if not player:
        return None

    now = now or datetime.now()
    schedule = PlayerSchedule(
        event_id=event.id,
        event_name=event.name,
        player_id=player.id,
        player_name=player.display_name or "Unknown",
    )

    unit_ids = set(
        session.exec(
            select(UnitMember.unit_id)
            .join(Unit, Unit.id == UnitMember.unit_id)
            .where(
                UnitMember.user_id == user_id,
                UnitMember.invite_status == "Accepted",
                Unit.event_id == event_id,
            )
        ).all()
    )
    if not unit_ids:
        return schedule

    encounters = list(
        session.exec(
            select(Encounter).where(
                Encounter.event_id == event_id,
                or_(Encounter.unit1_id.in_(sorted(unit_ids)), Encounter.unit2_id.in_(sorted(unit_ids))),
            )
        ).all()
    )
    encounters.sort(key=lambda e: (_match_time(e) is None, _match_time(e) or datetime.min, e.id))

    units = _by_id(session, Unit, [e.unit1_id for e in encounters] + [e.unit2_id for e in encounters])
    courts = _by_id(session, TournamentCourt, [e.tournament_court_id for e in encounters])
    divisions = _by_id(session, Division, [e.division_id for e in encounters])
    phases = _by_id(session, DivisionPhase, [e.phase_id for e in encounters])

    items: List[PlayerScheduleItem] = []
    for encounter in encounters:
        is_unit1 = encounter.unit1_id in unit_ids
        my_unit = units.get(encounter.unit1_id if is_unit1 else encounter.unit2_id)
        opponent_id = encounter.unit2_id if is_unit1 else encounter.unit1_id
        opponent = units.get(opponent_id)
        opponent_seed = encounter.unit2_seed_label if is_unit1 else encounter.unit1_seed_label

        match_time = _match_time(encounter)
        time_until = None
        if match_time is not None and match_time > now and encounter.status not in _FINISHED_STATUSES:
            time_until = format_time_until(match_time - now)

        court = courts.get(encounter.tournament_court_id)
        division = divisions.get(encounter.division_id)
        phase = phases.get(encounter.phase_id)

        items.append(
            PlayerScheduleItem(
                encounter_id=encounter.id,
                match_time=match_time,
                estimated_end_time=encounter.estimated_end_time,
                court_id=encounter.tournament_court_id,
                court_label=court.court_label if court else None,
                division_id=encounter.division_id,
                division_name=division.name if division else "",
                phase_id=encounter.phase_id,
                phase_name=phase.name if phase else None,
                phase_type=phase.phase_type if phase else None,
                round_name=encounter.round_name,
                encounter_label=encounter.encounter_label,
                opponent_name=opponent.name if opponent else (opponent_seed or "TBD"),
                opponent_unit_id=opponent.id if opponent else None,
                my_team_name=my_unit.name if my_unit else None,
                my_unit_id=my_unit.id if my_unit else None,
                status=EncounterStatus(encounter.status).value,
                time_until_match=time_until,
                is_bye=(
                    encounter.status == EncounterStatus.bye
                    or (opponent is None and encounter.unit1_seed_label == BYE_SEED_LABEL)
                ),
            )
        )

    completed = sum(1 for m in items if m.status == EncounterStatus.completed.value)
    schedule.matches = items
    schedule.next_match = next(
        (m for m in items if m.status not in [s.value for s in _FINISHED_STATUSES] and not m.is_bye),
        None,
    )
    schedule.total_matches = len(items)
    schedule.completed_matches = completed
    schedule.remaining_matches = len(items) - completed
    return schedule
