"""Progress router — HTTP layer only.

Routes:
  POST /api/v1/progress/lessons/{lesson_id}/toggle   Mark / unmark a lesson done
  GET  /api/v1/progress/courses/{course_id}          Weekly lesson list with progress
"""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from academy.clock import Clock
from academy.database import get_db
from academy.dependencies import get_clock, get_current_user
from academy.progress import controller
from academy.progress.schemas import (
    CourseProgressResponse,
    ToggleLessonRequest,
    ToggleLessonResponse,
)
from shared.models.user import CurrentUser

router = APIRouter(prefix="/progress", tags=["Progress"])


@router.post(
    "/lessons/{lesson_id}/toggle",
    response_model=ToggleLessonResponse,
    summary="Toggle completion of a lesson",
    description="Idempotent in both directions. Requires an ACTIVE enrollment. Only the "
    "cached progress is refreshed; enrollment status is untouched.",
)
async def toggle_lesson(
    lesson_id: UUID,
    body: ToggleLessonRequest,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
    clock: Clock = Depends(get_clock),
) -> ToggleLessonResponse:
    return await controller.toggle_lesson(db, lesson_id, user.id, body, clock)


@router.get(
    "/courses/{course_id}",
    response_model=CourseProgressResponse,
    summary="Course content and progress for the enrolled user",
)
async def get_course_details(
    course_id: UUID,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
    clock: Clock = Depends(get_clock),
) -> CourseProgressResponse:
    return await controller.get_course_details(db, course_id, user.id, clock)
