"""
Greedy court/time assignment.

Two modes over an already-ordered list of encounters:

Time-aware (division and block scheduling):
    Every court keeps a "next available" clock, initialised to the run start.
    Each encounter goes to the court with the smallest clock (ties: lower
    sort_order, then lower id), starts at that clock and pushes the clock
    forward by its duration.

Round-robin (phase court spreading):
    Courts are handed out in turn, i = (i + 1) % len(courts). No times.

The caller's encounter order is a contract: it is never re-sorted here.

Non-goals:
- Global optimisation / bin-packing
- Court availability windows
- Rest rules between a unit's encounters
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from court_scheduler.models.court import TournamentCourt
from court_scheduler.models.encounter import Encounter
from court_scheduler.utils.court_pool import get_court_sort_key


class GreedyAssignError(Exception):
    """Base exception for greedy assignment errors"""

    pass


class NoCourtsAvailableError(GreedyAssignError):
    """The court pool is empty"""

    pass


@dataclass
class Placement:
    encounter_id: Optional[int]
    court_id: int
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    duration_minutes: Optional[int] = None


@dataclass
class GreedyRun:
    """Outcome of one engine run"""

    start_time: Optional[datetime] = None
    placements: List[Placement] = field(default_factory=list)
    court_clocks: Dict[int, datetime] = field(default_factory=dict)

    @property
    def assigned_count(self) -> int:
        return len(self.placements)

    @property
    def estimated_end(self) -> Optional[datetime]:
        if not self.court_clocks:
            return self.start_time
        return max(self.court_clocks.values())


def division_encounter_sort_key(encounter: Encounter) -> Tuple:
    """Division-level order: round -> encounter number -> id"""
    return (encounter.round_number or 0, encounter.encounter_number or 0, encounter.id or 0)


def phase_encounter_sort_key(encounter: Encounter) -> Tuple:
    """
    Phase/block-level order: pool -> round -> encounter number -> id

    Encounters without a pool sort first (SQL NULLS FIRST semantics).
    """
    return (
        encounter.pool_id is not None,
        encounter.pool_id or 0,
        encounter.round_number or 0,
        encounter.encounter_number or 0,
        encounter.id or 0,
    )


def pick_earliest_court(courts: Sequence[TournamentCourt], clocks: Dict[int, datetime]) -> TournamentCourt:
    """Court whose clock is smallest; ties go to the lowest sort_order."""
    return min(courts, key=lambda c: (clocks[c.id], get_court_sort_key(c)))


def assign_time_aware(
    encounters: Sequence[Encounter],
    courts: Sequence[TournamentCourt],
    start_time: datetime,
    duration_for: Callable[[Encounter], int],
) -> GreedyRun:
    """
    Place every encounter on the soonest-available court.

    Mutates the encounters' scheduling outputs (court, start, duration, end).

    Raises:
        NoCourtsAvailableError: If the court pool is empty
    """
    if not courts:
        raise NoCourtsAvailableError("No courts available")

    run = GreedyRun(start_time=start_time)
    run.court_clocks = {court.id: start_time for court in courts}

    for encounter in encounters:
        court = pick_earliest_court(courts, run.court_clocks)
        slot_start = run.court_clocks[court.id]
        duration = duration_for(encounter)
        slot_end = slot_start + timedelta(minutes=duration)

        encounter.tournament_court_id = court.id
        encounter.estimated_start_time = slot_start
        encounter.estimated_duration_minutes = duration
        encounter.estimated_end_time = slot_end
        encounter.updated_at = datetime.utcnow()

        run.court_clocks[court.id] = slot_end
        run.placements.append(
            Placement(
                encounter_id=encounter.id,
                court_id=court.id,
                start_time=slot_start,
                end_time=slot_end,
                duration_minutes=duration,
            )
        )

    return run


def assign_round_robin(encounters: Sequence[Encounter], courts: Sequence[TournamentCourt]) -> GreedyRun:
    """
    Spread encounters across courts in turn. Sets courts only, never times.

    Raises:
        NoCourtsAvailableError: If the court pool is empty
    """
    if not courts:
        raise NoCourtsAvailableError("No courts available")

    run = GreedyRun()
    court_index = 0
    for encounter in encounters:
        court = courts[court_index]
        encounter.tournament_court_id = court.id
        encounter.updated_at = datetime.utcnow()
        run.placements.append(Placement(encounter_id=encounter.id, court_id=court.id))
        court_index = (court_index + 1) % len(courts)

    return run
