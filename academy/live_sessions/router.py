"""Live session router — student-facing listing.

Routes:
  GET /api/v1/live-sessions/courses/{course_id}   Sessions with derived status
  GET /api/v1/live-sessions/calendar               Sessions across my ACTIVE enrollments
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from academy.clock import Clock
from academy.database import get_db
from academy.dependencies import get_clock, get_current_user, get_live_session_policy
from academy.live_sessions import controller
from academy.live_sessions.schemas import CalendarEntryResponse, StudentLiveSessionResponse
from academy.live_sessions.status import LiveSessionPolicy
from shared.models.user import CurrentUser

router = APIRouter(prefix="/live-sessions", tags=["Live Sessions"])


@router.get(
    "/courses/{course_id}",
    response_model=list[StudentLiveSessionResponse],
    summary="List live sessions of a course I am enrolled in",
    description="`meeting_link` is only returned while a session is joinable or live.",
)
async def get_live_sessions(
    course_id: UUID,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
    policy: LiveSessionPolicy = Depends(get_live_session_policy),
    clock: Clock = Depends(get_clock),
) -> list[StudentLiveSessionResponse]:
    return await controller.get_live_sessions(db, course_id, user.id, policy, clock)


@router.get(
    "/calendar",
    response_model=list[CalendarEntryResponse],
    summary="My live-session calendar",
    description="Sessions of every course I hold an ACTIVE enrollment in, by start time.",
)
async def get_calendar(
    start: datetime | None = Query(None, description="Earliest session start (inclusive)"),
    end: datetime | None = Query(None, description="Latest session start (inclusive)"),
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
    policy: LiveSessionPolicy = Depends(get_live_session_policy),
    clock: Clock = Depends(get_clock),
) -> list[CalendarEntryResponse]:
    return await controller.get_student_calendar(db, user.id, start, end, policy, clock)
