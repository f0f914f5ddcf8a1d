"""
Encounter duration resolution.

Fallback chain: phase override -> division default -> DEFAULT_MATCH_DURATION_MINUTES.
"""
from typing import Optional

from court_scheduler.models.division import Division
from court_scheduler.models.division_phase import DivisionPhase

DEFAULT_MATCH_DURATION_MINUTES = 20


def _positive(value: Optional[int]) -> Optional[int]:
    if value is None or value <= 0:
        return None
    return value


def calculate_encounter_duration(
    division: Optional[Division], phase: Optional[DivisionPhase] = None
) -> int:
    """Expected duration in minutes for one encounter. Always a positive int."""
    if phase is not None and _positive(phase.estimated_match_duration_minutes):
        return phase.estimated_match_duration_minutes
    if division is not None and _positive(division.estimated_match_duration_minutes):
        return division.estimated_match_duration_minutes
    return DEFAULT_MATCH_DURATION_MINUTES
