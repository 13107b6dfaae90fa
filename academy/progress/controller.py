"""Progress controller — maps service results to HTTP responses, catches domain exceptions."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from academy.clock import Clock
from academy.http_errors import handle_domain_error
from academy.progress import service
from academy.progress.schemas import (
    CourseProgressResponse,
    ToggleLessonRequest,
    ToggleLessonResponse,
    WeekProgress,
)


async def toggle_lesson(
    db: AsyncSession,
    lesson_id: UUID,
    user_id: UUID,
    body: ToggleLessonRequest,
    clock: Clock,
) -> ToggleLessonResponse:
    try:
        progress = await service.toggle_lesson_completion(
            db,
            user_id=user_id,
            lesson_id=lesson_id,
            course_id=body.course_id,
            enrollment_id=body.enrollment_id,
            is_completed=body.is_completed,
            now=clock(),
        )
        return ToggleLessonResponse(new_progress_percentage=progress)
    except Exception as exc:
        raise handle_domain_error(exc) from exc


async def get_course_details(
    db: AsyncSession,
    course_id: UUID,
    user_id: UUID,
    clock: Clock,
) -> CourseProgressResponse:
    try:
        view = await service.get_course_details(db, user_id, course_id, now=clock())
    except Exception as exc:
        raise handle_domain_error(exc) from exc

    enrollment = view.enrollment
    return CourseProgressResponse(
        course_id=course_id,
        course_title=view.course_title,
        enrollment_id=enrollment.enrollment_id,
        enrollment_status=enrollment.status,
        progress=view.progress,
        current_marks=enrollment.grade or 0.0,
        last_accessed_at=enrollment.last_accessed_at,
        weeks=[WeekProgress.model_validate(w) for w in view.weeks],
    )
