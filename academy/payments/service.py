"""Payment lifecycle service — pure business logic, no FastAPI imports.

Drives the Enrollment + Payment pair from proof submission to approval,
rejection or provider failure. The request-scoped session is the transaction:
every function here only flushes, so a failure anywhere rolls back both rows.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal
from uuid import UUID

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from academy.enrollment.service import (
    find_enrollment,
    get_course_by_id,
    raise_for_existing,
)
from academy.exceptions import (
    CourseIsFreeError,
    CourseNotPublishedError,
    InvalidStatusTransitionError,
    PaymentAlreadyExistsError,
    PaymentNotFoundError,
    PaymentReferenceUnavailableError,
)
from academy.lifecycle import LifecycleEvent, apply_payment_outcome, next_payment_status
from academy.models.enrollment import Enrollment
from academy.models.enums import (
    CourseStatus,
    EnrollmentStatus,
    PaymentProvider,
    PaymentStatus,
)
from academy.models.payment import Payment
from academy.payments.reference import generate_payment_reference
from shared.events.schemas import PaymentWebhookEvent

logger = logging.getLogger(__name__)

WEBHOOK_OUTCOME_EVENTS: dict[str, LifecycleEvent] = {
    "succeeded": LifecycleEvent.APPROVE,
    "rejected": LifecycleEvent.REJECT,
    "failed": LifecycleEvent.FAIL,
}


@dataclass(frozen=True)
class WebhookResult:
    payment: Payment
    enrollment: Enrollment
    duplicate: bool


# ---------------------------------------------------------------------------
# Proof submission
# ---------------------------------------------------------------------------


# Millisecond offsets tried before giving up on a reference
_REFERENCE_ATTEMPTS = 20


async def _allocate_payment_reference(
    db: AsyncSession,
    course_id: UUID,
    user_id: UUID,
    now: datetime,
) -> str:
    """First free reference at ``now``, ``now + 1ms``, ...

    Two users sharing the last four id characters collide whenever their
    submissions share the timestamp fragment.
    """
    for offset in range(_REFERENCE_ATTEMPTS):
        reference = generate_payment_reference(
            course_id, user_id, now + timedelta(milliseconds=offset)
        )
        taken = await db.scalar(
            select(Payment.payment_id).where(Payment.payment_reference_id == reference)
        )
        if taken is None:
            return reference
        logger.info("Payment reference %s taken, retrying", reference)
    raise PaymentReferenceUnavailableError()


async def submit_proof(
    db: AsyncSession,
    course_id: UUID,
    user_id: UUID,
    *,
    proof_image_url: str,
    now: datetime,
) -> Payment:
    """Create the PENDING enrollment and PROOF_SUBMITTED payment together."""
    course = await get_course_by_id(db, course_id)
    if course.is_free:
        raise CourseIsFreeError()
    if course.status != CourseStatus.PUBLISHED:
        raise CourseNotPublishedError()

    raise_for_existing(await find_enrollment(db, user_id, course_id), PaymentAlreadyExistsError)

    enrollment = Enrollment(
        user_id=user_id,
        course_id=course_id,
        status=EnrollmentStatus.PENDING_PAYMENT_CONFIRMATION,
        paid=False,
        progress=Decimal("0.00"),
        enrolled_at=now,
    )
    db.add(enrollment)
    try:
        # Enrollment first: its unique (user, course) constraint is the race guard
        await db.flush()
        reference = await _allocate_payment_reference(db, course_id, user_id, now)
        payment = Payment(
            enrollment_id=enrollment.enrollment_id,
            user_id=user_id,
            course_id=course_id,
            amount=course.price,
            payment_reference_id=reference,
            provider=PaymentProvider.MANUAL_TRANSFER,
            proof_image_url=proof_image_url,
            status=PaymentStatus.PROOF_SUBMITTED,
            created_at=now,
        )
        db.add(payment)
        await db.flush()
    except IntegrityError as exc:
        logger.info(
            "Concurrent payment submission rejected for user=%s course=%s", user_id, course_id
        )
        raise PaymentAlreadyExistsError() from exc

    await db.refresh(payment)
    logger.info(
        "Payment proof submitted: payment=%s reference=%s course=%s",
        payment.payment_id,
        payment.payment_reference_id,
        course_id,
    )
    return payment


# ---------------------------------------------------------------------------
# Admin review
# ---------------------------------------------------------------------------


async def _lock_payment_pair(
    db: AsyncSession,
    *,
    payment_id: UUID | None = None,
    reference_id: str | None = None,
) -> tuple[Payment, Enrollment]:
    stmt = select(Payment).with_for_update()
    if payment_id is not None:
        stmt = stmt.where(Payment.payment_id == payment_id)
    else:
        stmt = stmt.where(Payment.payment_reference_id == reference_id)
    payment = (await db.execute(stmt)).scalar_one_or_none()
    if payment is None:
        raise PaymentNotFoundError(str(payment_id or reference_id))

    enrollment = (
        await db.execute(
            select(Enrollment)
            .where(Enrollment.enrollment_id == payment.enrollment_id)
            .with_for_update()
        )
    ).scalar_one()
    return payment, enrollment


async def _review(
    db: AsyncSession,
    payment_id: UUID,
    event: LifecycleEvent,
    *,
    reviewer_id: UUID,
    notes: str | None,
    now: datetime,
) -> tuple[Payment, Enrollment]:
    payment, enrollment = await _lock_payment_pair(db, payment_id=payment_id)
    apply_payment_outcome(payment, enrollment, event, now=now)
    payment.reviewed_by_id = reviewer_id
    payment.reviewed_at = now
    if notes is not None:
        payment.admin_notes = notes
    await db.flush()
    await db.refresh(payment)
    await db.refresh(enrollment)
    logger.info(
        "Payment %s %s by %s: payment=%s enrollment=%s",
        payment.payment_id,
        event.value,
        reviewer_id,
        payment.status.value,
        enrollment.status.value,
    )
    return payment, enrollment


async def approve_payment(
    db: AsyncSession,
    payment_id: UUID,
    admin_id: UUID,
    *,
    now: datetime,
) -> tuple[Payment, Enrollment]:
    return await _review(
        db, payment_id, LifecycleEvent.APPROVE, reviewer_id=admin_id, notes=None, now=now
    )


async def reject_payment(
    db: AsyncSession,
    payment_id: UUID,
    admin_id: UUID,
    *,
    reason: str | None,
    now: datetime,
) -> tuple[Payment, Enrollment]:
    return await _review(
        db, payment_id, LifecycleEvent.REJECT, reviewer_id=admin_id, notes=reason, now=now
    )


async def list_pending_payments(
    db: AsyncSession,
    *,
    search: str | None = None,
    limit: int = 10,
    offset: int = 0,
) -> tuple[list[Payment], int]:
    base = select(Payment).where(Payment.status == PaymentStatus.PROOF_SUBMITTED)
    count_base = (
        select(func.count())
        .select_from(Payment)
        .where(Payment.status == PaymentStatus.PROOF_SUBMITTED)
    )
    if search:
        pattern = f"%{search}%"
        cond = or_(
            Payment.payment_reference_id.ilike(pattern),
            Payment.proof_image_url.ilike(pattern),
        )
        base = base.where(cond)
        count_base = count_base.where(cond)

    total = await db.scalar(count_base) or 0
    stmt = base.order_by(Payment.created_at.desc()).limit(limit).offset(offset)
    result = await db.execute(stmt)
    return list(result.scalars().all()), total


# ---------------------------------------------------------------------------
# Provider webhook
# ---------------------------------------------------------------------------


async def apply_webhook_outcome(
    db: AsyncSession,
    event: PaymentWebhookEvent,
    *,
    now: datetime,
) -> WebhookResult:
    """Automated mirror of approve/reject driven by the provider.

    A redelivered event whose outcome already matches the payment is
    acknowledged without touching either row.
    """
    lifecycle_event = WEBHOOK_OUTCOME_EVENTS[event.outcome]
    payment, enrollment = await _lock_payment_pair(db, reference_id=event.payment_reference_id)

    try:
        apply_payment_outcome(payment, enrollment, lifecycle_event, now=now)
    except InvalidStatusTransitionError:
        if payment.status == _webhook_target(lifecycle_event):
            logger.info(
                "Duplicate webhook %s for payment %s ignored", event.event_id, payment.payment_id
            )
            return WebhookResult(payment=payment, enrollment=enrollment, duplicate=True)
        raise

    payment.reviewed_at = now
    if event.reason is not None:
        payment.admin_notes = event.reason
    await db.flush()
    await db.refresh(payment)
    await db.refresh(enrollment)
    logger.info(
        "Webhook %s applied to payment %s: %s",
        event.outcome,
        payment.payment_id,
        payment.status.value,
    )
    return WebhookResult(payment=payment, enrollment=enrollment, duplicate=False)


def _webhook_target(event: LifecycleEvent) -> PaymentStatus:
    return next_payment_status(PaymentStatus.PROOF_SUBMITTED, event)
