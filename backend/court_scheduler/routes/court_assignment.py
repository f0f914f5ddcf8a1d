from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, model_validator
from sqlmodel import Session

from court_scheduler.database import get_session
from court_scheduler.models.division import Division
from court_scheduler.services.court_assignment import (
    CourtAssignmentOptions,
    assign_court_groups_to_division,
    auto_assign_division,
    auto_assign_phase,
    calculate_phase_times,
    clear_division_assignments,
)
from court_scheduler.utils.court_pool import get_available_courts_for_division

router = APIRouter()


class AutoAssignDivisionRequest(BaseModel):
    start_time: Optional[datetime] = None
    match_duration_minutes: Optional[int] = None
    clear_existing: bool = True

    @model_validator(mode="after")
    def validate_duration(self):
        if self.match_duration_minutes is not None and self.match_duration_minutes < 1:
            raise ValueError("match_duration_minutes must be >= 1")
        return self


class DivisionCourtGroupsRequest(BaseModel):
    court_group_ids: List[int] = []


class CourtResponse(BaseModel):
    id: int
    court_label: str
    sort_order: int
    is_active: bool

    class Config:
        from_attributes = True


@router.get("/divisions/{division_id}/courts", response_model=List[CourtResponse])
def get_division_courts(division_id: int, phase_id: Optional[int] = None, session: Session = Depends(get_session)):
    """Courts available to a division (optionally one phase) via its court-group assignments"""
    division = session.get(Division, division_id)
    if not division:
        raise HTTPException(status_code=404, detail="Division not found")

    return get_available_courts_for_division(session, division_id, phase_id)


@router.put("/divisions/{division_id}/court-groups")
def assign_division_court_groups(
    division_id: int, request: DivisionCourtGroupsRequest, session: Session = Depends(get_session)
):
    """Replace the court groups a division draws its courts from"""
    result = assign_court_groups_to_division(session, division_id, request.court_group_ids)
    if not result.success:
        raise HTTPException(status_code=404, detail=result.message)
    return result.to_dict()


@router.post("/divisions/{division_id}/court-assignment/auto")
def auto_assign_division_courts(
    division_id: int,
    request: Optional[AutoAssignDivisionRequest] = None,
    session: Session = Depends(get_session),
):
    """Assign courts and start times to every schedulable encounter of a division"""
    request = request or AutoAssignDivisionRequest()
    options = CourtAssignmentOptions(
        start_time=request.start_time,
        match_duration_minutes=request.match_duration_minutes,
        clear_existing=request.clear_existing,
    )
    return auto_assign_division(session, division_id, options).to_dict()


@router.delete("/divisions/{division_id}/court-assignment")
def clear_division_court_assignments(
    division_id: int, phase_id: Optional[int] = None, session: Session = Depends(get_session)
):
    """Clear court and time assignments for a division"""
    division = session.get(Division, division_id)
    if not division:
        raise HTTPException(status_code=404, detail="Division not found")

    cleared = clear_division_assignments(session, division_id, phase_id)
    return {"success": True, "message": f"Cleared {cleared} assignments", "cleared_count": cleared}


@router.post("/phases/{phase_id}/court-assignment/auto")
def auto_assign_phase_courts(phase_id: int, session: Session = Depends(get_session)):
    """Spread a phase's unassigned encounters across its courts (no times)"""
    return auto_assign_phase(session, phase_id).to_dict()


@router.post("/phases/{phase_id}/calculate-times")
def calculate_phase_encounter_times(phase_id: int, session: Session = Depends(get_session)):
    """Compute start/end times for a phase's court-assigned encounters"""
    return calculate_phase_times(session, phase_id).to_dict()
