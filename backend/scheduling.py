"""Tee time proposals at a course, with an invite list."""
import logging
from datetime import datetime
from typing import Iterable, List, Optional

from errors import NotFoundError, ValidationError
from models import TeeTime, TeeTimeStatus, as_utc
from storage import Storage

logger = logging.getLogger(__name__)


def parse_datetime(value) -> datetime:
    if isinstance(value, datetime):
        parsed = value
    elif not value or not isinstance(value, str):
        raise ValidationError("A date and time is required")
    else:
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            raise ValidationError(f"Invalid date: {value!r}")
    return as_utc(parsed)


def propose_activity(
    storage: Storage,
    course_id: int,
    when,
    created_by: int,
    participants: Optional[Iterable[int]] = None,
) -> TeeTime:
    if not storage.get_user(created_by):
        raise NotFoundError(f"User {created_by} not found")
    if not storage.get_course(course_id):
        raise NotFoundError(f"Course {course_id} not found")
    date = parse_datetime(when)

    invited: List[int] = []
    for user_id in participants or []:
        if user_id in invited:
            continue
        if not storage.get_user(user_id):
            raise NotFoundError(f"User {user_id} not found")
        invited.append(user_id)

    tee_time = storage.create_tee_time(
        TeeTime(
            course_id=course_id,
            date=date,
            status=TeeTimeStatus.pending,
            created_by=created_by,
            participants=invited,
        )
    )
    logger.info("User %s proposed tee time %s at course %s", created_by, tee_time.id, course_id)
    return tee_time


def tee_times_for(storage: Storage, user_id: int) -> List[dict]:
    return [
        {**t.model_dump(), "course": storage.get_course(t.course_id)}
        for t in storage.tee_times_for_user(user_id)
    ]
