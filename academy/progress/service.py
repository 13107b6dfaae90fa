"""Progress service — lesson completion toggles and progress recomputation.

``Enrollment.progress`` is a cache of the completion set. It is always rebuilt
from fresh counts, never incremented in place, so concurrent toggles from
several tabs converge on the same value.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from academy.enrollment.service import (
    get_course_by_id,
    require_active_enrollment,
    require_viewable_enrollment,
)
from academy.exceptions import LessonNotFoundError
from academy.models.enrollment import Enrollment
from academy.models.lesson import Lesson
from academy.models.lesson_completion import LessonCompletion

logger = logging.getLogger(__name__)

_HUNDRED = Decimal("100")
_CENTS = Decimal("0.01")


def compute_progress(completed: int, total: int) -> Decimal:
    """``100 * completed / total`` rounded to two places; 0 for an empty course."""
    if total <= 0:
        return Decimal("0.00")
    pct = _HUNDRED * Decimal(completed) / Decimal(total)
    return min(pct, _HUNDRED).quantize(_CENTS, rounding=ROUND_HALF_UP)


async def recompute_progress(db: AsyncSession, enrollment: Enrollment) -> Decimal:
    total = await db.scalar(
        select(func.count()).select_from(Lesson).where(Lesson.course_id == enrollment.course_id)
    ) or 0
    # Only completions for lessons still in the course count
    completed = await db.scalar(
        select(func.count())
        .select_from(LessonCompletion)
        .join(Lesson, Lesson.lesson_id == LessonCompletion.lesson_id)
        .where(
            LessonCompletion.enrollment_id == enrollment.enrollment_id,
            Lesson.course_id == enrollment.course_id,
        )
    ) or 0

    progress = compute_progress(completed, total)
    # Only the cached progress is written here; status belongs to the lifecycle table
    enrollment.progress = progress
    logger.debug("Enrollment %s progress %s", enrollment.enrollment_id, progress)

    await db.flush()
    return progress


async def _get_lesson_in_course(db: AsyncSession, lesson_id: UUID, course_id: UUID) -> Lesson:
    stmt = select(Lesson).where(Lesson.lesson_id == lesson_id, Lesson.course_id == course_id)
    lesson = (await db.execute(stmt)).scalar_one_or_none()
    if lesson is None:
        raise LessonNotFoundError(str(lesson_id))
    return lesson


async def _mark_complete(
    db: AsyncSession,
    user_id: UUID,
    lesson_id: UUID,
    enrollment_id: UUID,
    now: datetime,
) -> None:
    stmt = select(LessonCompletion.completion_id).where(
        LessonCompletion.user_id == user_id,
        LessonCompletion.lesson_id == lesson_id,
        LessonCompletion.enrollment_id == enrollment_id,
    )
    if (await db.execute(stmt)).scalar_one_or_none() is not None:
        return
    # Callers hold the enrollment row lock, so the existence check cannot race
    db.add(
        LessonCompletion(
            user_id=user_id,
            lesson_id=lesson_id,
            enrollment_id=enrollment_id,
            completed_at=now,
        )
    )


async def toggle_lesson_completion(
    db: AsyncSession,
    *,
    user_id: UUID,
    lesson_id: UUID,
    course_id: UUID,
    enrollment_id: UUID,
    is_completed: bool,
    now: datetime,
) -> Decimal:
    enrollment = await require_active_enrollment(
        db, enrollment_id, user_id, course_id, for_update=True
    )
    await _get_lesson_in_course(db, lesson_id, course_id)

    if is_completed:
        await _mark_complete(db, user_id, lesson_id, enrollment_id, now)
    else:
        await db.execute(
            delete(LessonCompletion).where(
                LessonCompletion.user_id == user_id,
                LessonCompletion.lesson_id == lesson_id,
                LessonCompletion.enrollment_id == enrollment_id,
            )
        )
    await db.flush()
    return await recompute_progress(db, enrollment)


# ---------------------------------------------------------------------------
# Course detail for an enrolled user
# ---------------------------------------------------------------------------


@dataclass
class LessonView:
    lesson_id: UUID
    title: str
    lesson_type: str
    is_completed: bool


@dataclass
class WeekView:
    week: int
    lessons: list[LessonView] = field(default_factory=list)


@dataclass
class CourseProgressView:
    enrollment: Enrollment
    course_title: str
    progress: Decimal
    weeks: list[WeekView]


async def get_course_details(
    db: AsyncSession,
    user_id: UUID,
    course_id: UUID,
    *,
    now: datetime,
) -> CourseProgressView:
    enrollment = await require_viewable_enrollment(db, user_id, course_id)
    course = await get_course_by_id(db, course_id)
    enrollment.last_accessed_at = now

    lessons = list(
        (
            await db.execute(
                select(Lesson)
                .where(Lesson.course_id == course_id)
                .order_by(Lesson.week, Lesson.sort_order)
            )
        ).scalars().all()
    )
    completed_ids = set(
        (
            await db.execute(
                select(LessonCompletion.lesson_id).where(
                    LessonCompletion.enrollment_id == enrollment.enrollment_id
                )
            )
        ).scalars().all()
    )

    weeks: dict[int, WeekView] = {}
    for lesson in lessons:
        week_no = lesson.week or 1
        weeks.setdefault(week_no, WeekView(week=week_no)).lessons.append(
            LessonView(
                lesson_id=lesson.lesson_id,
                title=lesson.title,
                lesson_type=lesson.lesson_type,
                is_completed=lesson.lesson_id in completed_ids,
            )
        )

    progress = await recompute_progress(db, enrollment)
    return CourseProgressView(
        enrollment=enrollment,
        course_title=course.title,
        progress=progress,
        weeks=[weeks[k] for k in sorted(weeks)],
    )
