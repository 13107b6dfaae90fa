from decimal import Decimal
from uuid import uuid4

import pytest
from sqlalchemy import func, select

from academy.exceptions import (
    EnrollmentAccessDeniedError,
    EnrollmentNotActiveError,
    LessonNotFoundError,
)
from academy.models import Enrollment, LessonCompletion
from academy.models.enums import EnrollmentStatus
from academy.progress.service import (
    compute_progress,
    get_course_details,
    toggle_lesson_completion,
)
from tests.conftest import NOW, lesson_ids


def test_compute_progress_rounds_to_cents() -> None:
    assert compute_progress(9, 12) == Decimal("75.00")
    assert compute_progress(1, 3) == Decimal("33.33")
    assert compute_progress(2, 3) == Decimal("66.67")
    assert compute_progress(0, 0) == Decimal("0.00")
    assert compute_progress(4, 4) == Decimal("100.00")


async def _toggle(db, enrollment, lesson_id, is_completed: bool) -> Decimal:
    return await toggle_lesson_completion(
        db,
        user_id=enrollment.user_id,
        lesson_id=lesson_id,
        course_id=enrollment.course_id,
        enrollment_id=enrollment.enrollment_id,
        is_completed=is_completed,
        now=NOW,
    )


@pytest.mark.asyncio
async def test_nine_of_twelve_is_seventy_five(
    db_session, session_factory, make_course, make_enrollment, student_id
) -> None:
    course = await make_course(lessons=12)
    enrollment = await make_enrollment(course, student_id)
    ids = await lesson_ids(session_factory, course)

    progress = Decimal("0")
    for lesson_id in ids[:9]:
        progress = await _toggle(db_session, enrollment, lesson_id, True)
    assert progress == Decimal("75.00")


@pytest.mark.asyncio
async def test_toggle_is_idempotent_both_ways(
    db_session, session_factory, make_course, make_enrollment, student_id
) -> None:
    course = await make_course(lessons=4)
    enrollment = await make_enrollment(course, student_id)
    lesson_id = (await lesson_ids(session_factory, course))[0]

    assert await _toggle(db_session, enrollment, lesson_id, True) == Decimal("25.00")
    assert await _toggle(db_session, enrollment, lesson_id, True) == Decimal("25.00")
    assert await _toggle(db_session, enrollment, lesson_id, False) == Decimal("0.00")
    assert await _toggle(db_session, enrollment, lesson_id, False) == Decimal("0.00")


@pytest.mark.asyncio
async def test_last_lesson_can_be_toggled_again_and_unchecked(
    db_session, session_factory, make_course, make_enrollment, student_id
) -> None:
    course = await make_course(lessons=1)
    enrollment = await make_enrollment(course, student_id)
    lesson_id = (await lesson_ids(session_factory, course))[0]

    assert await _toggle(db_session, enrollment, lesson_id, True) == Decimal("100.00")
    assert await _toggle(db_session, enrollment, lesson_id, True) == Decimal("100.00")
    count = await db_session.scalar(
        select(func.count())
        .select_from(LessonCompletion)
        .where(LessonCompletion.enrollment_id == enrollment.enrollment_id)
    )
    assert count == 1

    assert await _toggle(db_session, enrollment, lesson_id, False) == Decimal("0.00")
    stored = await db_session.get(Enrollment, enrollment.enrollment_id)
    assert stored.status == EnrollmentStatus.ACTIVE
    assert stored.completed_at is None


@pytest.mark.asyncio
async def test_full_progress_leaves_status_alone(
    db_session, session_factory, make_course, make_enrollment, student_id
) -> None:
    course = await make_course(lessons=2)
    enrollment = await make_enrollment(course, student_id)
    for lesson_id in await lesson_ids(session_factory, course):
        await _toggle(db_session, enrollment, lesson_id, True)

    view = await get_course_details(db_session, student_id, course.course_id, now=NOW)
    assert view.progress == Decimal("100.00")
    assert view.enrollment.status == EnrollmentStatus.ACTIVE


@pytest.mark.asyncio
async def test_pending_enrollment_cannot_toggle(
    db_session, session_factory, make_course, make_enrollment, student_id
) -> None:
    course = await make_course(lessons=1)
    enrollment = await make_enrollment(
        course, student_id, EnrollmentStatus.PENDING_PAYMENT_CONFIRMATION
    )
    lesson_id = (await lesson_ids(session_factory, course))[0]
    with pytest.raises(EnrollmentNotActiveError):
        await _toggle(db_session, enrollment, lesson_id, True)


@pytest.mark.asyncio
async def test_other_users_enrollment_is_denied(
    db_session, session_factory, make_course, make_enrollment, student_id
) -> None:
    course = await make_course(lessons=1)
    enrollment = await make_enrollment(course, student_id)
    lesson_id = (await lesson_ids(session_factory, course))[0]
    with pytest.raises(EnrollmentAccessDeniedError):
        await toggle_lesson_completion(
            db_session,
            user_id=uuid4(),
            lesson_id=lesson_id,
            course_id=course.course_id,
            enrollment_id=enrollment.enrollment_id,
            is_completed=True,
            now=NOW,
        )


@pytest.mark.asyncio
async def test_lesson_from_another_course_is_not_found(
    db_session, session_factory, make_course, make_enrollment, student_id
) -> None:
    course = await make_course(lessons=1)
    other = await make_course(lessons=1)
    enrollment = await make_enrollment(course, student_id)
    foreign_lesson = (await lesson_ids(session_factory, other))[0]
    with pytest.raises(LessonNotFoundError):
        await _toggle(db_session, enrollment, foreign_lesson, True)


@pytest.mark.asyncio
async def test_course_details_groups_by_week(
    db_session, session_factory, make_course, make_enrollment, student_id
) -> None:
    course = await make_course(lessons=5)
    enrollment = await make_enrollment(course, student_id)
    ids = await lesson_ids(session_factory, course)
    await _toggle(db_session, enrollment, ids[0], True)

    view = await get_course_details(db_session, student_id, course.course_id, now=NOW)
    assert [w.week for w in view.weeks] == [1, 2]
    assert [len(w.lessons) for w in view.weeks] == [3, 2]
    assert view.weeks[0].lessons[0].is_completed is True
    assert view.weeks[0].lessons[1].is_completed is False
    assert view.progress == Decimal("20.00")
    assert view.enrollment.last_accessed_at == NOW


@pytest.mark.asyncio
async def test_course_details_require_enrollment(db_session, make_course, student_id) -> None:
    course = await make_course(lessons=1)
    with pytest.raises(EnrollmentAccessDeniedError):
        await get_course_details(db_session, student_id, course.course_id, now=NOW)
