"""Payment controller — maps service results to HTTP responses, catches domain exceptions."""

from __future__ import annotations

from uuid import UUID

from fastapi import HTTPException, status
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from academy.audit.sink import AuditSink, emit_audit
from academy.clock import Clock
from academy.http_errors import handle_domain_error
from academy.models.enrollment import Enrollment
from academy.models.enums import EnrollmentStatus
from academy.models.payment import Payment
from academy.payments import service
from academy.payments.schemas import (
    PaymentResponse,
    PaymentReviewResponse,
    PendingPaymentListResponse,
    RejectPaymentRequest,
    SubmitProofRequest,
    SubmitProofResponse,
    WebhookAckResponse,
)
from academy.payments.webhook import verify_signature
from shared.events.schemas import AuditEvent, AuditEventType, PaymentWebhookEvent
from shared.models.pagination import PaginationParams


def _review_response(payment: Payment, enrollment: Enrollment) -> PaymentReviewResponse:
    return PaymentReviewResponse(
        **PaymentResponse.model_validate(payment).model_dump(),
        enrollment_status=enrollment.status,
    )


async def _announce_activation(
    sink: AuditSink,
    payment: Payment,
    enrollment: Enrollment,
    actor_id: UUID | None,
    clock: Clock,
) -> None:
    if enrollment.status != EnrollmentStatus.ACTIVE:
        return
    await emit_audit(
        sink,
        AuditEvent(
            type=AuditEventType.ENROLLMENT_ACTIVATED,
            title=f"Enrollment activated: {payment.payment_reference_id}",
            course_id=payment.course_id,
            payment_id=payment.payment_id,
            actor_user_id=actor_id,
            occurred_at=clock(),
        ),
    )


async def submit_proof(
    db: AsyncSession,
    course_id: UUID,
    user_id: UUID,
    body: SubmitProofRequest,
    clock: Clock,
) -> SubmitProofResponse:
    try:
        payment = await service.submit_proof(
            db, course_id, user_id, proof_image_url=body.proof_image_url, now=clock()
        )
        return SubmitProofResponse(
            payment_reference_id=payment.payment_reference_id,
            message="Payment proof submitted successfully. It is now pending review.",
        )
    except Exception as exc:
        raise handle_domain_error(exc) from exc


async def approve_payment(
    db: AsyncSession,
    payment_id: UUID,
    admin_id: UUID,
    sink: AuditSink,
    clock: Clock,
) -> PaymentReviewResponse:
    try:
        payment, enrollment = await service.approve_payment(
            db, payment_id, admin_id, now=clock()
        )
    except Exception as exc:
        raise handle_domain_error(exc) from exc
    await _announce_activation(sink, payment, enrollment, admin_id, clock)
    return _review_response(payment, enrollment)


async def reject_payment(
    db: AsyncSession,
    payment_id: UUID,
    admin_id: UUID,
    body: RejectPaymentRequest,
    clock: Clock,
) -> PaymentReviewResponse:
    try:
        payment, enrollment = await service.reject_payment(
            db, payment_id, admin_id, reason=body.reason, now=clock()
        )
        return _review_response(payment, enrollment)
    except Exception as exc:
        raise handle_domain_error(exc) from exc


async def list_pending_payments(
    db: AsyncSession,
    pagination: PaginationParams,
    *,
    search: str | None,
) -> PendingPaymentListResponse:
    payments, total = await service.list_pending_payments(
        db,
        search=search,
        limit=pagination.limit(),
        offset=pagination.offset(),
    )
    return PendingPaymentListResponse(
        items=[PaymentResponse.model_validate(p) for p in payments],
        total=total,
        page=pagination.page,
        page_size=pagination.page_size,
    )


async def handle_webhook(
    db: AsyncSession,
    raw_body: bytes,
    signature: str | None,
    secret: str,
    sink: AuditSink,
    clock: Clock,
) -> WebhookAckResponse:
    try:
        verify_signature(raw_body, signature, secret)
        event = PaymentWebhookEvent.model_validate_json(raw_body)
    except ValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Malformed webhook payload."
        ) from exc
    except Exception as exc:
        raise handle_domain_error(exc) from exc

    try:
        result = await service.apply_webhook_outcome(db, event, now=clock())
    except Exception as exc:
        raise handle_domain_error(exc) from exc

    if not result.duplicate:
        await _announce_activation(sink, result.payment, result.enrollment, None, clock)
    return WebhookAckResponse(
        payment_id=result.payment.payment_id,
        status=result.payment.status,
        enrollment_status=result.enrollment.status,
        duplicate=result.duplicate,
    )
