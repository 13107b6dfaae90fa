"""Enrollment controller — maps service results to HTTP responses, catches domain exceptions."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from academy.clock import Clock
from academy.enrollment import service
from academy.enrollment.schemas import EnrollFreeResponse, EnrollmentResponse
from academy.http_errors import handle_domain_error


async def enroll_free(
    db: AsyncSession,
    course_id: UUID,
    user_id: UUID,
    clock: Clock,
) -> EnrollFreeResponse:
    try:
        enrollment = await service.enroll_free(db, course_id, user_id, now=clock())
        return EnrollFreeResponse(
            enrollment_id=enrollment.enrollment_id,
            status=enrollment.status,
        )
    except Exception as exc:
        raise handle_domain_error(exc) from exc


async def list_my_enrollments(db: AsyncSession, user_id: UUID) -> list[EnrollmentResponse]:
    enrollments = await service.list_my_enrollments(db, user_id)
    return [EnrollmentResponse.model_validate(e) for e in enrollments]
