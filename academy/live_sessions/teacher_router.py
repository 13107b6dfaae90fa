"""Live session management — teacher-facing routes.

Routes:
  GET    /api/v1/teacher/live-sessions/calendar                 Sessions across owned courses
  GET    /api/v1/teacher/live-sessions/courses/{course_id}      All sessions of an owned course
  POST   /api/v1/teacher/live-sessions                          Schedule a session
  PATCH  /api/v1/teacher/live-sessions/{session_id}             Partial update
  DELETE /api/v1/teacher/live-sessions/{session_id}             Cancel
  POST   /api/v1/teacher/live-sessions/{session_id}/recording   Attach recording URL

Requires: TEACHER, ADMIN or SUPER_ADMIN role, and ownership of the course.
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from academy.audit.sink import AuditSink
from academy.clock import Clock
from academy.database import get_db
from academy.dependencies import (
    get_audit_sink,
    get_clock,
    get_live_session_policy,
    require_teacher,
)
from academy.live_sessions import controller
from academy.live_sessions.schemas import (
    CalendarEntryResponse,
    CreateLiveSessionRequest,
    MessageResponse,
    TeacherLiveSessionResponse,
    UpdateLiveSessionRequest,
    UploadRecordingRequest,
)
from academy.live_sessions.status import LiveSessionPolicy
from shared.models.user import CurrentUser

router = APIRouter(prefix="/teacher/live-sessions", tags=["teacher-live-sessions"])


@router.get(
    "/calendar",
    response_model=list[CalendarEntryResponse],
    summary="[Teacher] Live-session calendar across my courses",
)
async def get_calendar(
    start: datetime | None = Query(None, description="Earliest session start (inclusive)"),
    end: datetime | None = Query(None, description="Latest session start (inclusive)"),
    teacher: CurrentUser = Depends(require_teacher),
    db: AsyncSession = Depends(get_db),
    policy: LiveSessionPolicy = Depends(get_live_session_policy),
    clock: Clock = Depends(get_clock),
) -> list[CalendarEntryResponse]:
    return await controller.get_teacher_calendar(db, teacher.id, start, end, policy, clock)


@router.get(
    "/courses/{course_id}",
    response_model=list[TeacherLiveSessionResponse],
    summary="[Teacher] List sessions of my course",
)
async def list_course_sessions(
    course_id: UUID,
    teacher: CurrentUser = Depends(require_teacher),
    db: AsyncSession = Depends(get_db),
    policy: LiveSessionPolicy = Depends(get_live_session_policy),
    clock: Clock = Depends(get_clock),
) -> list[TeacherLiveSessionResponse]:
    return await controller.list_course_sessions(db, course_id, teacher.id, policy, clock)


@router.post(
    "",
    response_model=TeacherLiveSessionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="[Teacher] Schedule a live session",
)
async def create_session(
    body: CreateLiveSessionRequest,
    teacher: CurrentUser = Depends(require_teacher),
    db: AsyncSession = Depends(get_db),
    sink: AuditSink = Depends(get_audit_sink),
    clock: Clock = Depends(get_clock),
) -> TeacherLiveSessionResponse:
    return await controller.create_session(db, body, teacher.id, sink, clock)


@router.patch(
    "/{session_id}",
    response_model=TeacherLiveSessionResponse,
    summary="[Teacher] Update a live session",
)
async def update_session(
    session_id: UUID,
    body: UpdateLiveSessionRequest,
    teacher: CurrentUser = Depends(require_teacher),
    db: AsyncSession = Depends(get_db),
    sink: AuditSink = Depends(get_audit_sink),
    clock: Clock = Depends(get_clock),
) -> TeacherLiveSessionResponse:
    return await controller.update_session(db, session_id, body, teacher.id, sink, clock)


@router.delete(
    "/{session_id}",
    response_model=MessageResponse,
    summary="[Teacher] Cancel a live session",
)
async def delete_session(
    session_id: UUID,
    teacher: CurrentUser = Depends(require_teacher),
    db: AsyncSession = Depends(get_db),
    sink: AuditSink = Depends(get_audit_sink),
    clock: Clock = Depends(get_clock),
) -> MessageResponse:
    return await controller.delete_session(db, session_id, teacher.id, sink, clock)


@router.post(
    "/{session_id}/recording",
    response_model=TeacherLiveSessionResponse,
    summary="[Teacher] Attach a recording to a session",
)
async def upload_recording(
    session_id: UUID,
    body: UploadRecordingRequest,
    teacher: CurrentUser = Depends(require_teacher),
    db: AsyncSession = Depends(get_db),
    sink: AuditSink = Depends(get_audit_sink),
    clock: Clock = Depends(get_clock),
) -> TeacherLiveSessionResponse:
    return await controller.upload_recording(db, session_id, body, teacher.id, sink, clock)
