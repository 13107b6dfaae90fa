"""Live session service — pure business logic, no FastAPI imports.

Teachers schedule, edit, cancel and attach recordings to sessions of courses
they own. Enrolled students list them with a status derived at read time.
Both sides also get a calendar feed spanning all of their courses.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from academy.clock import as_utc
from academy.enrollment.service import get_owned_course, require_viewable_enrollment
from academy.exceptions import (
    InvalidDateRangeError,
    InvalidSessionTimesError,
    LiveSessionNotFoundError,
)
from academy.live_sessions.status import (
    LiveSessionPolicy,
    LiveSessionStatus,
    can_join,
    derive_status,
)
from academy.models.course import Course
from academy.models.enrollment import Enrollment
from academy.models.enums import EnrollmentStatus
from academy.models.live_session import LiveSession

logger = logging.getLogger(__name__)

# Fields a PATCH may explicitly clear
_CLEARABLE_FIELDS = frozenset({"description", "end_time", "week"})


@dataclass(frozen=True)
class SessionView:
    session: LiveSession
    status: LiveSessionStatus
    can_join: bool


def _validate_times(start_time: datetime, end_time: datetime | None) -> None:
    if end_time is not None and as_utc(end_time) <= as_utc(start_time):
        raise InvalidSessionTimesError()


def _view(session: LiveSession, now: datetime, policy: LiveSessionPolicy) -> SessionView:
    status = derive_status(
        now,
        session.start_time,
        session.end_time,
        has_recording=bool(session.recording_url),
        policy=policy,
    )
    return SessionView(session=session, status=status, can_join=can_join(status))


async def _list_for_course(db: AsyncSession, course_id: UUID) -> list[LiveSession]:
    stmt = (
        select(LiveSession)
        .where(LiveSession.course_id == course_id)
        .order_by(LiveSession.week, LiveSession.start_time)
    )
    return list((await db.execute(stmt)).scalars().all())


async def get_owned_session(db: AsyncSession, session_id: UUID, teacher_id: UUID) -> LiveSession:
    session = await db.get(LiveSession, session_id)
    if session is None:
        raise LiveSessionNotFoundError(str(session_id))
    await get_owned_course(db, session.course_id, teacher_id)
    return session


# ---------------------------------------------------------------------------
# Student
# ---------------------------------------------------------------------------


async def get_live_sessions(
    db: AsyncSession,
    user_id: UUID,
    course_id: UUID,
    *,
    now: datetime,
    policy: LiveSessionPolicy,
) -> list[SessionView]:
    await require_viewable_enrollment(db, user_id, course_id)
    return [_view(s, now, policy) for s in await _list_for_course(db, course_id)]


# ---------------------------------------------------------------------------
# Teacher
# ---------------------------------------------------------------------------


async def list_course_sessions(
    db: AsyncSession,
    teacher_id: UUID,
    course_id: UUID,
    *,
    now: datetime,
    policy: LiveSessionPolicy,
) -> list[SessionView]:
    await get_owned_course(db, course_id, teacher_id)
    return [_view(s, now, policy) for s in await _list_for_course(db, course_id)]


async def create_session(
    db: AsyncSession,
    teacher_id: UUID,
    course_id: UUID,
    *,
    title: str,
    meeting_link: str,
    start_time: datetime,
    end_time: datetime | None = None,
    description: str | None = None,
    week: int | None = None,
    now: datetime,
) -> LiveSession:
    await get_owned_course(db, course_id, teacher_id)
    _validate_times(start_time, end_time)

    session = LiveSession(
        course_id=course_id,
        title=title,
        description=description,
        meeting_link=meeting_link,
        start_time=start_time,
        end_time=end_time,
        week=week,
        created_at=now,
        updated_at=now,
    )
    db.add(session)
    await db.flush()
    await db.refresh(session)
    logger.info("Live session %s scheduled for course %s", session.session_id, course_id)
    return session


async def update_session(
    db: AsyncSession,
    teacher_id: UUID,
    session_id: UUID,
    updates: dict[str, Any],
    *,
    now: datetime,
) -> LiveSession:
    """Apply a partial update; times are validated against the merged result."""
    session = await get_owned_session(db, session_id, teacher_id)
    updates = {k: v for k, v in updates.items() if v is not None or k in _CLEARABLE_FIELDS}

    start_time = updates.get("start_time", session.start_time)
    end_time = updates.get("end_time", session.end_time)
    _validate_times(start_time, end_time)

    for key, value in updates.items():
        setattr(session, key, value)
    session.updated_at = now
    await db.flush()
    await db.refresh(session)
    logger.info("Live session %s updated: %s", session_id, sorted(updates))
    return session


async def delete_session(db: AsyncSession, teacher_id: UUID, session_id: UUID) -> LiveSession:
    session = await get_owned_session(db, session_id, teacher_id)
    await db.delete(session)
    await db.flush()
    logger.info("Live session %s cancelled", session_id)
    return session


async def upload_recording(
    db: AsyncSession,
    teacher_id: UUID,
    session_id: UUID,
    recording_url: str,
    *,
    now: datetime,
) -> LiveSession:
    session = await get_owned_session(db, session_id, teacher_id)
    session.recording_url = recording_url
    session.updated_at = now
    await db.flush()
    await db.refresh(session)
    logger.info("Recording attached to live session %s", session_id)
    return session


# ---------------------------------------------------------------------------
# Calendar
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CalendarEntry:
    view: SessionView
    course_title: str


async def _calendar(
    db: AsyncSession,
    course_ids: Select,
    *,
    start: datetime | None,
    end: datetime | None,
    now: datetime,
    policy: LiveSessionPolicy,
) -> list[CalendarEntry]:
    if start is not None and end is not None and as_utc(end) < as_utc(start):
        raise InvalidDateRangeError()

    stmt = (
        select(LiveSession, Course.title)
        .join(Course, Course.course_id == LiveSession.course_id)
        .where(LiveSession.course_id.in_(course_ids))
        .order_by(LiveSession.start_time)
    )
    if start is not None:
        stmt = stmt.where(LiveSession.start_time >= start)
    if end is not None:
        stmt = stmt.where(LiveSession.start_time <= end)

    rows = (await db.execute(stmt)).all()
    return [CalendarEntry(view=_view(s, now, policy), course_title=title) for s, title in rows]


async def get_student_calendar(
    db: AsyncSession,
    user_id: UUID,
    *,
    start: datetime | None = None,
    end: datetime | None = None,
    now: datetime,
    policy: LiveSessionPolicy,
) -> list[CalendarEntry]:
    """Sessions across every course the user holds an ACTIVE enrollment in."""
    course_ids = select(Enrollment.course_id).where(
        Enrollment.user_id == user_id,
        Enrollment.status == EnrollmentStatus.ACTIVE,
    )
    return await _calendar(db, course_ids, start=start, end=end, now=now, policy=policy)


async def get_teacher_calendar(
    db: AsyncSession,
    teacher_id: UUID,
    *,
    start: datetime | None = None,
    end: datetime | None = None,
    now: datetime,
    policy: LiveSessionPolicy,
) -> list[CalendarEntry]:
    """Sessions across every course the teacher owns."""
    course_ids = select(Course.course_id).where(Course.teacher_id == teacher_id)
    return await _calendar(db, course_ids, start=start, end=end, now=now, policy=policy)
