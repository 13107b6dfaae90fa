import json
from decimal import Decimal
from uuid import uuid4

import pytest
from sqlalchemy import select

from academy.models import Enrollment, Payment
from academy.models.enums import EnrollmentStatus, PaymentStatus
from academy.payments.webhook import compute_signature
from shared.constants import Role
from tests.conftest import WEBHOOK_SECRET, auth_headers

PROOF = {"proof_image_url": "https://files.example.com/receipts/r1.png"}


async def _submit(client, course, user_id):
    return await client.post(
        f"/api/v1/payments/courses/{course.course_id}/proof",
        json=PROOF,
        headers=auth_headers(user_id),
    )


async def _payment_for(session_factory, user_id) -> Payment:
    async with session_factory() as session:
        result = await session.execute(select(Payment).where(Payment.user_id == user_id))
        return result.scalar_one()


@pytest.mark.asyncio
async def test_submit_proof_requires_auth(client, make_course) -> None:
    course = await make_course()
    resp = await client.post(f"/api/v1/payments/courses/{course.course_id}/proof", json=PROOF)
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_submit_proof_created(client, make_course, student_id) -> None:
    course = await make_course()
    resp = await _submit(client, course, student_id)
    assert resp.status_code == 201
    data = resp.json()
    assert data["payment_reference_id"].startswith("PAY-")
    assert "pending review" in data["message"]


@pytest.mark.asyncio
async def test_submit_proof_twice_is_conflict(client, make_course, student_id) -> None:
    course = await make_course()
    assert (await _submit(client, course, student_id)).status_code == 201
    resp = await _submit(client, course, student_id)
    assert resp.status_code == 409


@pytest.mark.asyncio
async def test_submit_proof_for_free_course_is_bad_request(client, make_course, student_id) -> None:
    course = await make_course(price=Decimal("0"))
    resp = await _submit(client, course, student_id)
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_submit_proof_unknown_course(client, student_id) -> None:
    resp = await client.post(
        f"/api/v1/payments/courses/{uuid4()}/proof", json=PROOF, headers=auth_headers(student_id)
    )
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_admin_routes_require_admin_role(client, student_id) -> None:
    resp = await client.get("/api/v1/admin/payments/pending", headers=auth_headers(student_id))
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_admin_approve_flow(
    client, session_factory, make_course, student_id, audit_sink
) -> None:
    course = await make_course()
    await _submit(client, course, student_id)
    admin = auth_headers(uuid4(), Role.ADMIN)

    pending = await client.get("/api/v1/admin/payments/pending", headers=admin)
    assert pending.status_code == 200
    body = pending.json()
    assert body["total"] == 1
    payment_id = body["items"][0]["payment_id"]

    resp = await client.post(f"/api/v1/admin/payments/{payment_id}/approve", headers=admin)
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == PaymentStatus.COMPLETED.value
    assert data["enrollment_status"] == EnrollmentStatus.ACTIVE.value
    assert audit_sink.types() == ["ENROLLMENT_ACTIVATED"]

    async with session_factory() as session:
        enrollment = (
            await session.execute(select(Enrollment).where(Enrollment.user_id == student_id))
        ).scalar_one()
        assert enrollment.status == EnrollmentStatus.ACTIVE

    again = await client.post(f"/api/v1/admin/payments/{payment_id}/approve", headers=admin)
    assert again.status_code == 409


@pytest.mark.asyncio
async def test_admin_reject_with_reason(client, session_factory, make_course, student_id) -> None:
    course = await make_course()
    await _submit(client, course, student_id)
    payment = await _payment_for(session_factory, student_id)

    resp = await client.post(
        f"/api/v1/admin/payments/{payment.payment_id}/reject",
        json={"reason": "Amount does not match"},
        headers=auth_headers(uuid4(), Role.SUPER_ADMIN),
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == PaymentStatus.REJECTED.value
    assert data["admin_notes"] == "Amount does not match"
    assert data["enrollment_status"] == EnrollmentStatus.REJECTED.value


@pytest.mark.asyncio
async def test_admin_approve_unknown_payment(client) -> None:
    resp = await client.post(
        f"/api/v1/admin/payments/{uuid4()}/approve", headers=auth_headers(uuid4(), Role.ADMIN)
    )
    assert resp.status_code == 404


# ---------------------------------------------------------------------------
# Webhook
# ---------------------------------------------------------------------------


def _signed(payload: dict, secret: str = WEBHOOK_SECRET) -> tuple[bytes, dict[str, str]]:
    body = json.dumps(payload).encode()
    return body, {
        "X-Webhook-Signature": compute_signature(body, secret),
        "Content-Type": "application/json",
    }


@pytest.mark.asyncio
async def test_webhook_rejects_bad_signature(client, session_factory, make_course, student_id) -> None:
    course = await make_course()
    await _submit(client, course, student_id)
    payment = await _payment_for(session_factory, student_id)

    body, headers = _signed(
        {"payment_reference_id": payment.payment_reference_id, "outcome": "succeeded"},
        secret="wrong-secret",
    )
    resp = await client.post("/api/v1/payments/webhook", content=body, headers=headers)
    assert resp.status_code == 401

    refreshed = await _payment_for(session_factory, student_id)
    assert refreshed.status == PaymentStatus.PROOF_SUBMITTED


@pytest.mark.asyncio
async def test_webhook_success_and_redelivery(
    client, session_factory, make_course, student_id, audit_sink
) -> None:
    course = await make_course()
    await _submit(client, course, student_id)
    payment = await _payment_for(session_factory, student_id)
    body, headers = _signed(
        {
            "event_id": "evt_1",
            "payment_reference_id": payment.payment_reference_id,
            "outcome": "succeeded",
        }
    )

    first = await client.post("/api/v1/payments/webhook", content=body, headers=headers)
    assert first.status_code == 200
    assert first.json()["duplicate"] is False
    assert first.json()["enrollment_status"] == EnrollmentStatus.ACTIVE.value

    second = await client.post("/api/v1/payments/webhook", content=body, headers=headers)
    assert second.status_code == 200
    assert second.json()["duplicate"] is True
    assert audit_sink.types() == ["ENROLLMENT_ACTIVATED"]


@pytest.mark.asyncio
async def test_webhook_malformed_payload(client) -> None:
    body, headers = _signed({"outcome": "maybe"})
    resp = await client.post("/api/v1/payments/webhook", content=body, headers=headers)
    assert resp.status_code == 400
