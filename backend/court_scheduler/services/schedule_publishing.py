"""
Schedule Publishing

Marks an event's schedule (and its active divisions) as published for
players and spectators. Publishing is gated on encounter-level validation
unless the caller opts out.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlmodel import Session, select

from court_scheduler.models.division import Division
from court_scheduler.models.event import Event
from court_scheduler.services.schedule_validation import validate_schedule
from court_scheduler.utils.master_schedule_models import ScheduleValidationResult

logger = logging.getLogger(__name__)


class PublishResult:
    """Structured result from publish/unpublish"""

    def __init__(self, success: bool = False, message: Optional[str] = None):
        self.success = success
        self.message = message
        self.published_at: Optional[datetime] = None
        self.validation: Optional[ScheduleValidationResult] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "message": self.message,
            "published_at": self.published_at,
            "validation": self.validation.model_dump(mode="json") if self.validation else None,
        }


def _active_divisions(session: Session, event_id: int) -> List[Division]:
    return list(
        session.exec(select(Division).where(Division.event_id == event_id, Division.is_active == True)).all()  # noqa: E712
    )


def _stamp(session: Session, event: Event, published_at: Optional[datetime], user_id: Optional[int]) -> None:
    event.schedule_published_at = published_at
    event.schedule_published_by_user_id = user_id
    session.add(event)
    for division in _active_divisions(session, event.id):
        division.schedule_published_at = published_at
        division.schedule_published_by_user_id = user_id
        session.add(division)


def publish_schedule(
    session: Session, event_id: int, validate_first: bool = True, user_id: Optional[int] = None
) -> PublishResult:
    """
    Publish an event's schedule.

    With validate_first, an invalid schedule (court double-booking or unit
    overlap) is refused and nothing is written. The validation result is
    attached either way.
    """
    event = session.get(Event, event_id)
    if not event:
        return PublishResult(success=False, message="Event not found")

    validation = None
    if validate_first:
        validation = validate_schedule(session, event_id)
        if not validation.is_valid:
            result = PublishResult(
                success=False, message=f"Cannot publish: {len(validation.conflicts)} conflicts found"
            )
            result.validation = validation
            return result

    published_at = datetime.utcnow()
    _stamp(session, event, published_at, user_id)
    session.commit()

    logger.info("Schedule published for event %s by user %s", event_id, user_id)

    result = PublishResult(success=True, message="Schedule published successfully")
    result.published_at = published_at
    result.validation = validation
    return result


def unpublish_schedule(session: Session, event_id: int) -> PublishResult:
    """Clear the published stamp from an event and its active divisions."""
    event = session.get(Event, event_id)
    if not event:
        return PublishResult(success=False, message="Event not found")

    _stamp(session, event, None, None)
    session.commit()

    logger.info("Schedule unpublished for event %s", event_id)
    return PublishResult(success=True, message="Schedule unpublished")
