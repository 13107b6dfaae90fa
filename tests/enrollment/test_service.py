from decimal import Decimal
from uuid import uuid4

import pytest
from sqlalchemy import func, select

from academy.enrollment.service import (
    enroll_free,
    get_owned_course,
    list_my_enrollments,
    require_active_enrollment,
    require_viewable_enrollment,
)
from academy.exceptions import (
    AlreadyEnrolledError,
    CourseNotFoundError,
    EnrollmentAccessDeniedError,
    EnrollmentNotActiveError,
    NotCourseOwnerError,
    PaymentRequiredError,
)
from academy.models import Enrollment
from academy.models.enums import CourseStatus, EnrollmentStatus
from tests.conftest import NOW


@pytest.mark.asyncio
async def test_enroll_free_is_active_immediately(db_session, make_course, student_id) -> None:
    course = await make_course(price=Decimal("0"))
    enrollment = await enroll_free(db_session, course.course_id, student_id, now=NOW)
    assert enrollment.status == EnrollmentStatus.ACTIVE
    assert enrollment.paid is True
    assert enrollment.progress == Decimal("0")


@pytest.mark.asyncio
async def test_enroll_free_twice_is_conflict(db_session, make_course, student_id) -> None:
    course = await make_course(price=Decimal("0"))
    await enroll_free(db_session, course.course_id, student_id, now=NOW)
    with pytest.raises(AlreadyEnrolledError):
        await enroll_free(db_session, course.course_id, student_id, now=NOW)


@pytest.mark.asyncio
async def test_concurrent_free_enroll_is_conflict(
    session_factory, make_course, make_enrollment, student_id, monkeypatch
) -> None:
    course = await make_course(price=Decimal("0"))
    await make_enrollment(course, student_id)

    # The competing row lands between the up-front check and the insert
    async def _not_seen(*_args, **_kwargs):
        return None

    monkeypatch.setattr("academy.enrollment.service.find_enrollment", _not_seen)
    async with session_factory() as session:
        with pytest.raises(AlreadyEnrolledError):
            await enroll_free(session, course.course_id, student_id, now=NOW)

    async with session_factory() as session:
        count = await session.scalar(
            select(func.count())
            .select_from(Enrollment)
            .where(Enrollment.course_id == course.course_id)
        )
    assert count == 1


@pytest.mark.asyncio
async def test_enroll_free_on_paid_course_requires_payment(
    db_session, make_course, student_id
) -> None:
    course = await make_course(price=Decimal("10.00"))
    with pytest.raises(PaymentRequiredError):
        await enroll_free(db_session, course.course_id, student_id, now=NOW)


@pytest.mark.asyncio
async def test_enroll_free_hides_draft_courses(db_session, make_course, student_id) -> None:
    course = await make_course(price=Decimal("0"), status=CourseStatus.DRAFT)
    with pytest.raises(CourseNotFoundError):
        await enroll_free(db_session, course.course_id, student_id, now=NOW)


@pytest.mark.asyncio
async def test_viewable_enrollment_guards(
    db_session, make_course, make_enrollment, student_id
) -> None:
    course = await make_course()
    with pytest.raises(EnrollmentAccessDeniedError):
        await require_viewable_enrollment(db_session, student_id, course.course_id)

    await make_enrollment(course, student_id, EnrollmentStatus.PENDING_PAYMENT_CONFIRMATION)
    with pytest.raises(EnrollmentNotActiveError):
        await require_viewable_enrollment(db_session, student_id, course.course_id)


@pytest.mark.asyncio
async def test_completed_enrollment_is_viewable_but_not_active(
    db_session, make_course, make_enrollment, student_id
) -> None:
    course = await make_course()
    enrollment = await make_enrollment(course, student_id, EnrollmentStatus.COMPLETED)
    found = await require_viewable_enrollment(db_session, student_id, course.course_id)
    assert found.enrollment_id == enrollment.enrollment_id

    with pytest.raises(EnrollmentNotActiveError):
        await require_active_enrollment(
            db_session, enrollment.enrollment_id, student_id, course.course_id
        )


@pytest.mark.asyncio
async def test_active_enrollment_must_belong_to_caller(
    db_session, make_course, make_enrollment, student_id
) -> None:
    course = await make_course()
    enrollment = await make_enrollment(course, student_id)
    with pytest.raises(EnrollmentAccessDeniedError):
        await require_active_enrollment(
            db_session, enrollment.enrollment_id, uuid4(), course.course_id
        )


@pytest.mark.asyncio
async def test_get_owned_course(db_session, make_course, teacher_id) -> None:
    course = await make_course()
    assert (await get_owned_course(db_session, course.course_id, teacher_id)).course_id == (
        course.course_id
    )
    with pytest.raises(NotCourseOwnerError):
        await get_owned_course(db_session, course.course_id, uuid4())
    with pytest.raises(CourseNotFoundError):
        await get_owned_course(db_session, uuid4(), teacher_id)


@pytest.mark.asyncio
async def test_list_my_enrollments_skips_rejected(
    db_session, make_course, make_enrollment, student_id
) -> None:
    active = await make_course()
    pending = await make_course()
    rejected = await make_course()
    await make_enrollment(active, student_id, EnrollmentStatus.ACTIVE)
    await make_enrollment(pending, student_id, EnrollmentStatus.PENDING_PAYMENT_CONFIRMATION)
    await make_enrollment(rejected, student_id, EnrollmentStatus.REJECTED)

    enrollments = await list_my_enrollments(db_session, student_id)
    assert {e.course_id for e in enrollments} == {active.course_id, pending.course_id}
