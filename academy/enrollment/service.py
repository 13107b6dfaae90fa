"""Enrollment service — pure business logic, no FastAPI imports.

Holds the lookups and ownership guards shared by the payment, progress and
live-session domains, plus the free-course enrollment path.
"""

from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from academy.exceptions import (
    AlreadyEnrolledError,
    CourseNotFoundError,
    EnrollmentAccessDeniedError,
    EnrollmentNotActiveError,
    NotCourseOwnerError,
    PaymentRequiredError,
)
from academy.models.course import Course
from academy.models.enrollment import Enrollment
from academy.models.enums import CourseStatus, EnrollmentStatus

logger = logging.getLogger(__name__)

# Enrollments that grant read access to course content
VIEWABLE_STATUSES = frozenset({EnrollmentStatus.ACTIVE, EnrollmentStatus.COMPLETED})


# ---------------------------------------------------------------------------
# Lookups & guards
# ---------------------------------------------------------------------------


async def get_course_by_id(db: AsyncSession, course_id: UUID) -> Course:
    course = await db.get(Course, course_id)
    if course is None:
        raise CourseNotFoundError(str(course_id))
    return course


async def get_published_course(db: AsyncSession, course_id: UUID) -> Course:
    course = await get_course_by_id(db, course_id)
    if course.status != CourseStatus.PUBLISHED:
        raise CourseNotFoundError(str(course_id))
    return course


async def get_owned_course(db: AsyncSession, course_id: UUID, teacher_id: UUID) -> Course:
    course = await get_course_by_id(db, course_id)
    if course.teacher_id != teacher_id:
        raise NotCourseOwnerError()
    return course


async def find_enrollment(
    db: AsyncSession,
    user_id: UUID,
    course_id: UUID,
) -> Enrollment | None:
    stmt = select(Enrollment).where(
        Enrollment.user_id == user_id,
        Enrollment.course_id == course_id,
    )
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def require_viewable_enrollment(
    db: AsyncSession,
    user_id: UUID,
    course_id: UUID,
) -> Enrollment:
    """The caller's enrollment in ``course_id``; must be ACTIVE or COMPLETED."""
    enrollment = await find_enrollment(db, user_id, course_id)
    if enrollment is None:
        raise EnrollmentAccessDeniedError()
    if enrollment.status not in VIEWABLE_STATUSES:
        raise EnrollmentNotActiveError(enrollment.status.value)
    return enrollment


async def require_active_enrollment(
    db: AsyncSession,
    enrollment_id: UUID,
    user_id: UUID,
    course_id: UUID,
    *,
    for_update: bool = False,
) -> Enrollment:
    """An enrollment owned by ``user_id`` in ``course_id`` that is ACTIVE."""
    stmt = select(Enrollment).where(
        Enrollment.enrollment_id == enrollment_id,
        Enrollment.user_id == user_id,
        Enrollment.course_id == course_id,
    )
    if for_update:
        stmt = stmt.with_for_update()
    enrollment = (await db.execute(stmt)).scalar_one_or_none()
    if enrollment is None:
        raise EnrollmentAccessDeniedError()
    if enrollment.status != EnrollmentStatus.ACTIVE:
        raise EnrollmentNotActiveError(enrollment.status.value)
    return enrollment


def raise_for_existing(enrollment: Enrollment | None, conflict: type[Exception]) -> None:
    """ACTIVE/COMPLETED → AlreadyEnrolledError; any other existing row → ``conflict``."""
    if enrollment is None:
        return
    if enrollment.status in VIEWABLE_STATUSES:
        raise AlreadyEnrolledError()
    raise conflict()


# ---------------------------------------------------------------------------
# Free enrollment
# ---------------------------------------------------------------------------


async def enroll_free(
    db: AsyncSession,
    course_id: UUID,
    user_id: UUID,
    *,
    now: datetime,
) -> Enrollment:
    """Free courses skip payment entirely and are ACTIVE immediately."""
    course = await get_published_course(db, course_id)
    if not course.is_free:
        raise PaymentRequiredError()

    raise_for_existing(await find_enrollment(db, user_id, course_id), AlreadyEnrolledError)

    enrollment = Enrollment(
        user_id=user_id,
        course_id=course_id,
        status=EnrollmentStatus.ACTIVE,
        paid=True,
        progress=Decimal("0.00"),
        activated_at=now,
        enrolled_at=now,
    )
    db.add(enrollment)
    try:
        await db.flush()
    except IntegrityError as exc:
        logger.info("Concurrent free enrollment for user=%s course=%s", user_id, course_id)
        raise AlreadyEnrolledError() from exc
    await db.refresh(enrollment)
    return enrollment


async def list_my_enrollments(db: AsyncSession, user_id: UUID) -> list[Enrollment]:
    stmt = (
        select(Enrollment)
        .where(
            Enrollment.user_id == user_id,
            Enrollment.status.in_(
                [
                    EnrollmentStatus.ACTIVE,
                    EnrollmentStatus.COMPLETED,
                    EnrollmentStatus.PENDING_PAYMENT_CONFIRMATION,
                ]
            ),
        )
        .order_by(Enrollment.enrolled_at.desc())
    )
    result = await db.execute(stmt)
    return list(result.scalars().all())
