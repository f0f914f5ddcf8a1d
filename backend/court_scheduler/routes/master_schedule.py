from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session

from court_scheduler.database import get_session
from court_scheduler.models.event import Event
from court_scheduler.services.auto_scheduler import auto_schedule_event
from court_scheduler.services.block_conflicts import validate_schedule_blocks
from court_scheduler.services.player_schedule import get_player_schedule
from court_scheduler.services.schedule_blocks import (
    create_schedule_block,
    delete_schedule_block,
    get_schedule_block,
    list_schedule_blocks,
    update_schedule_block,
)
from court_scheduler.services.schedule_publishing import publish_schedule, unpublish_schedule
from court_scheduler.services.schedule_validation import validate_schedule
from court_scheduler.services.timeline import get_timeline
from court_scheduler.utils.master_schedule_models import (
    AutoScheduleRequest,
    AutoScheduleResult,
    MasterScheduleTimeline,
    PlayerSchedule,
    ScheduleBlockConflict,
    ScheduleBlockCreate,
    ScheduleBlockResponse,
    ScheduleBlockResult,
    ScheduleBlockUpdate,
    SchedulePublishRequest,
    ScheduleValidationResult,
)

router = APIRouter()


def _require_event(session: Session, event_id: int) -> Event:
    event = session.get(Event, event_id)
    if not event:
        raise HTTPException(status_code=404, detail="Event not found")
    return event


# ============================================================================
# Schedule Blocks
# ============================================================================


@router.get("/events/{event_id}/master-schedule", response_model=List[ScheduleBlockResponse])
def get_master_schedule(event_id: int, session: Session = Depends(get_session)):
    """Active schedule blocks of an event"""
    _require_event(session, event_id)
    return list_schedule_blocks(session, event_id)


@router.post("/events/{event_id}/master-schedule/blocks", response_model=ScheduleBlockResult)
def create_block(
    event_id: int,
    request: ScheduleBlockCreate,
    user_id: Optional[int] = None,
    session: Session = Depends(get_session),
):
    _require_event(session, event_id)
    result = create_schedule_block(session, event_id, request, user_id=user_id)
    if not result.success:
        raise HTTPException(status_code=400, detail=result.message)
    return result


@router.get("/master-schedule/blocks/{block_id}", response_model=ScheduleBlockResponse)
def get_block(block_id: int, session: Session = Depends(get_session)):
    block = get_schedule_block(session, block_id)
    if not block:
        raise HTTPException(status_code=404, detail="Schedule block not found")
    return block


@router.put("/master-schedule/blocks/{block_id}", response_model=ScheduleBlockResult)
def update_block(
    block_id: int,
    request: ScheduleBlockUpdate,
    user_id: Optional[int] = None,
    session: Session = Depends(get_session),
):
    """Partial update: only fields present in the body are applied"""
    result = update_schedule_block(session, block_id, request, user_id=user_id)
    if not result.success:
        status_code = 404 if result.message == "Schedule block not found" else 400
        raise HTTPException(status_code=status_code, detail=result.message)
    return result


@router.delete("/master-schedule/blocks/{block_id}", response_model=ScheduleBlockResult)
def delete_block(block_id: int, session: Session = Depends(get_session)):
    result = delete_schedule_block(session, block_id)
    if not result.success:
        raise HTTPException(status_code=404, detail=result.message)
    return result


# ============================================================================
# Timeline / Auto-Schedule / Conflicts
# ============================================================================


@router.get("/events/{event_id}/master-schedule/timeline", response_model=MasterScheduleTimeline)
def get_master_schedule_timeline(event_id: int, session: Session = Depends(get_session)):
    timeline = get_timeline(session, event_id)
    if not timeline:
        raise HTTPException(status_code=404, detail="Event not found")
    return timeline


@router.post("/events/{event_id}/master-schedule/auto-schedule", response_model=AutoScheduleResult)
def auto_schedule(
    event_id: int,
    request: Optional[AutoScheduleRequest] = None,
    session: Session = Depends(get_session),
):
    """
    Auto-schedule the event's blocks.

    Partial failures are reported per block in block_results; the response is
    200 even when some (or all) blocks failed.
    """
    return auto_schedule_event(session, event_id, request or AutoScheduleRequest())


@router.get("/events/{event_id}/master-schedule/conflicts", response_model=List[ScheduleBlockConflict])
def get_master_schedule_conflicts(event_id: int, session: Session = Depends(get_session)):
    _require_event(session, event_id)
    return validate_schedule_blocks(session, event_id)


# ============================================================================
# Encounter-level validation / Player schedule
# ============================================================================


@router.get("/events/{event_id}/schedule/validate", response_model=ScheduleValidationResult)
def validate_event_schedule(event_id: int, division_id: Optional[int] = None, session: Session = Depends(get_session)):
    _require_event(session, event_id)
    return validate_schedule(session, event_id, division_id)


@router.get("/events/{event_id}/players/{user_id}/schedule", response_model=PlayerSchedule)
def get_player_event_schedule(event_id: int, user_id: int, session: Session = Depends(get_session)):
    schedule = get_player_schedule(session, event_id, user_id)
    if not schedule:
        raise HTTPException(status_code=404, detail="Event or player not found")
    return schedule


# ============================================================================
# Publishing
# ============================================================================


@router.post("/events/{event_id}/schedule/publish")
def publish_event_schedule(
    event_id: int,
    request: Optional[SchedulePublishRequest] = None,
    user_id: Optional[int] = None,
    session: Session = Depends(get_session),
):
    """Publish the schedule; refused with 400 when validation finds blocking conflicts"""
    _require_event(session, event_id)
    request = request or SchedulePublishRequest()
    result = publish_schedule(session, event_id, validate_first=request.validate_first, user_id=user_id)
    if not result.success:
        raise HTTPException(status_code=400, detail=result.to_dict())
    return result.to_dict()


@router.post("/events/{event_id}/schedule/unpublish")
def unpublish_event_schedule(event_id: int, session: Session = Depends(get_session)):
    _require_event(session, event_id)
    return unpublish_schedule(session, event_id).to_dict()
