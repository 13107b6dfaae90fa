"""Live session controller — maps service results to HTTP responses, catches domain exceptions.

Audit events go out only after the service call succeeded; a sink failure
never fails the request.
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from academy.audit.sink import AuditSink, emit_audit
from academy.clock import Clock
from academy.http_errors import handle_domain_error
from academy.live_sessions import service
from academy.live_sessions.schemas import (
    CalendarEntryResponse,
    CreateLiveSessionRequest,
    MessageResponse,
    StudentLiveSessionResponse,
    TeacherLiveSessionResponse,
    UpdateLiveSessionRequest,
    UploadRecordingRequest,
)
from academy.live_sessions.status import LiveSessionPolicy
from academy.models.live_session import LiveSession
from shared.events.schemas import AuditEvent, AuditEventType


async def _audit(
    sink: AuditSink,
    event_type: AuditEventType,
    session: LiveSession,
    actor_id: UUID,
    clock: Clock,
) -> None:
    await emit_audit(
        sink,
        AuditEvent(
            type=event_type,
            title=session.title,
            course_id=session.course_id,
            session_id=session.session_id,
            actor_user_id=actor_id,
            occurred_at=clock(),
        ),
    )


def _student_item(view: service.SessionView) -> StudentLiveSessionResponse:
    s = view.session
    return StudentLiveSessionResponse(
        session_id=s.session_id,
        title=s.title,
        description=s.description,
        start_time=s.start_time,
        end_time=s.end_time,
        week=s.week,
        recording_url=s.recording_url,
        status=view.status,
        can_join=view.can_join,
        meeting_link=s.meeting_link if view.can_join else None,
    )


def _teacher_item(view: service.SessionView) -> TeacherLiveSessionResponse:
    item = TeacherLiveSessionResponse.model_validate(view.session)
    return item.model_copy(update={"status": view.status})


async def get_live_sessions(
    db: AsyncSession,
    course_id: UUID,
    user_id: UUID,
    policy: LiveSessionPolicy,
    clock: Clock,
) -> list[StudentLiveSessionResponse]:
    try:
        views = await service.get_live_sessions(
            db, user_id, course_id, now=clock(), policy=policy
        )
        return [_student_item(v) for v in views]
    except Exception as exc:
        raise handle_domain_error(exc) from exc


async def list_course_sessions(
    db: AsyncSession,
    course_id: UUID,
    teacher_id: UUID,
    policy: LiveSessionPolicy,
    clock: Clock,
) -> list[TeacherLiveSessionResponse]:
    try:
        views = await service.list_course_sessions(
            db, teacher_id, course_id, now=clock(), policy=policy
        )
        return [_teacher_item(v) for v in views]
    except Exception as exc:
        raise handle_domain_error(exc) from exc


async def create_session(
    db: AsyncSession,
    body: CreateLiveSessionRequest,
    teacher_id: UUID,
    sink: AuditSink,
    clock: Clock,
) -> TeacherLiveSessionResponse:
    try:
        session = await service.create_session(
            db,
            teacher_id,
            body.course_id,
            title=body.title,
            description=body.description,
            meeting_link=body.meeting_link,
            start_time=body.start_time,
            end_time=body.end_time,
            week=body.week,
            now=clock(),
        )
    except Exception as exc:
        raise handle_domain_error(exc) from exc
    await _audit(sink, AuditEventType.LIVE_SCHEDULED, session, teacher_id, clock)
    return TeacherLiveSessionResponse.model_validate(session)


async def update_session(
    db: AsyncSession,
    session_id: UUID,
    body: UpdateLiveSessionRequest,
    teacher_id: UUID,
    sink: AuditSink,
    clock: Clock,
) -> TeacherLiveSessionResponse:
    try:
        session = await service.update_session(
            db, teacher_id, session_id, body.model_dump(exclude_unset=True), now=clock()
        )
    except Exception as exc:
        raise handle_domain_error(exc) from exc
    await _audit(sink, AuditEventType.LIVE_UPDATED, session, teacher_id, clock)
    return TeacherLiveSessionResponse.model_validate(session)


async def delete_session(
    db: AsyncSession,
    session_id: UUID,
    teacher_id: UUID,
    sink: AuditSink,
    clock: Clock,
) -> MessageResponse:
    try:
        session = await service.delete_session(db, teacher_id, session_id)
    except Exception as exc:
        raise handle_domain_error(exc) from exc
    await _audit(sink, AuditEventType.LIVE_CANCELLED, session, teacher_id, clock)
    return MessageResponse(message="Live session cancelled.")


async def upload_recording(
    db: AsyncSession,
    session_id: UUID,
    body: UploadRecordingRequest,
    teacher_id: UUID,
    sink: AuditSink,
    clock: Clock,
) -> TeacherLiveSessionResponse:
    try:
        session = await service.upload_recording(
            db, teacher_id, session_id, body.recording_url, now=clock()
        )
    except Exception as exc:
        raise handle_domain_error(exc) from exc
    await _audit(sink, AuditEventType.RECORDING_UPLOADED, session, teacher_id, clock)
    return TeacherLiveSessionResponse.model_validate(session)


def _calendar_item(entry: service.CalendarEntry) -> CalendarEntryResponse:
    s = entry.view.session
    return CalendarEntryResponse(
        session_id=s.session_id,
        course_id=s.course_id,
        course_title=entry.course_title,
        title=s.title,
        start_time=s.start_time,
        end_time=s.end_time,
        week=s.week,
        status=entry.view.status,
        can_join=entry.view.can_join,
    )


async def get_student_calendar(
    db: AsyncSession,
    user_id: UUID,
    start: datetime | None,
    end: datetime | None,
    policy: LiveSessionPolicy,
    clock: Clock,
) -> list[CalendarEntryResponse]:
    try:
        entries = await service.get_student_calendar(
            db, user_id, start=start, end=end, now=clock(), policy=policy
        )
        return [_calendar_item(e) for e in entries]
    except Exception as exc:
        raise handle_domain_error(exc) from exc


async def get_teacher_calendar(
    db: AsyncSession,
    teacher_id: UUID,
    start: datetime | None,
    end: datetime | None,
    policy: LiveSessionPolicy,
    clock: Clock,
) -> list[CalendarEntryResponse]:
    try:
        entries = await service.get_teacher_calendar(
            db, teacher_id, start=start, end=end, now=clock(), policy=policy
        )
        return [_calendar_item(e) for e in entries]
    except Exception as exc:
        raise handle_domain_error(exc) from exc
