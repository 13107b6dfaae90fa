import pytest

from tests.conftest import auth_headers, lesson_ids


@pytest.mark.asyncio
async def test_toggle_returns_new_progress(
    client, session_factory, make_course, make_enrollment, student_id
) -> None:
    course = await make_course(lessons=4)
    enrollment = await make_enrollment(course, student_id)
    lesson_id = (await lesson_ids(session_factory, course))[0]

    resp = await client.post(
        f"/api/v1/progress/lessons/{lesson_id}/toggle",
        json={
            "course_id": str(course.course_id),
            "enrollment_id": str(enrollment.enrollment_id),
            "is_completed": True,
        },
        headers=auth_headers(student_id),
    )
    assert resp.status_code == 200
    assert resp.json()["new_progress_percentage"] == "25.00"


@pytest.mark.asyncio
async def test_toggle_on_pending_enrollment_is_forbidden(
    client, session_factory, make_course, make_enrollment, student_id
) -> None:
    from academy.models.enums import EnrollmentStatus

    course = await make_course(lessons=1)
    enrollment = await make_enrollment(
        course, student_id, EnrollmentStatus.PENDING_PAYMENT_CONFIRMATION
    )
    lesson_id = (await lesson_ids(session_factory, course))[0]

    resp = await client.post(
        f"/api/v1/progress/lessons/{lesson_id}/toggle",
        json={
            "course_id": str(course.course_id),
            "enrollment_id": str(enrollment.enrollment_id),
            "is_completed": True,
        },
        headers=auth_headers(student_id),
    )
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_course_details(client, make_course, make_enrollment, student_id) -> None:
    course = await make_course(lessons=4)
    await make_enrollment(course, student_id)

    resp = await client.get(
        f"/api/v1/progress/courses/{course.course_id}", headers=auth_headers(student_id)
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["course_title"] == "Intro to Statistics"
    assert data["current_marks"] == 0
    assert [w["week"] for w in data["weeks"]] == [1, 2]
    assert data["last_accessed_at"] is not None


@pytest.mark.asyncio
async def test_course_details_without_enrollment_is_forbidden(
    client, make_course, student_id
) -> None:
    course = await make_course(lessons=1)
    resp = await client.get(
        f"/api/v1/progress/courses/{course.course_id}", headers=auth_headers(student_id)
    )
    assert resp.status_code == 403
