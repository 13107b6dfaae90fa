"""Enrollment router — HTTP layer only."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from academy.clock import Clock
from academy.database import get_db
from academy.dependencies import get_clock, get_current_user
from academy.enrollment import controller
from academy.enrollment.schemas import EnrollFreeResponse, EnrollmentResponse
from shared.models.user import CurrentUser

router = APIRouter(prefix="/enrollments", tags=["Enrollment"])


@router.post(
    "/courses/{course_id}/enroll",
    response_model=EnrollFreeResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Enroll in a free course",
    description="Free courses are ACTIVE immediately and never create a payment. "
    "Paid courses must go through the payment-proof flow.",
)
async def enroll_free(
    course_id: UUID,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
    clock: Clock = Depends(get_clock),
) -> EnrollFreeResponse:
    return await controller.enroll_free(db, course_id, user.id, clock)


@router.get(
    "/me",
    response_model=list[EnrollmentResponse],
    summary="List my active, completed and pending enrollments",
)
async def list_my_enrollments(
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
) -> list[EnrollmentResponse]:
    return await controller.list_my_enrollments(db, user.id)
