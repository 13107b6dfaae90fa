"""Payment router — student-facing and provider-facing endpoints.

Routes:
  POST /api/v1/payments/courses/{course_id}/proof   Submit manual transfer proof
  POST /api/v1/payments/webhook                     Signed provider outcome
"""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Header, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from academy.audit.sink import AuditSink
from academy.clock import Clock
from academy.config import Settings
from academy.database import get_db
from academy.dependencies import get_audit_sink, get_clock, get_current_user, get_settings
from academy.payments import controller
from academy.payments.schemas import (
    SubmitProofRequest,
    SubmitProofResponse,
    WebhookAckResponse,
)
from shared.models.user import CurrentUser

router = APIRouter(prefix="/payments", tags=["Payments"])


@router.post(
    "/courses/{course_id}/proof",
    response_model=SubmitProofResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Submit proof of an off-platform payment",
    description="Creates a PENDING_PAYMENT_CONFIRMATION enrollment and a PROOF_SUBMITTED "
    "payment in one transaction. 409 if already enrolled or a payment is already in "
    "progress; 400 for free or unpublished courses.",
)
async def submit_proof(
    course_id: UUID,
    body: SubmitProofRequest,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
    clock: Clock = Depends(get_clock),
) -> SubmitProofResponse:
    return await controller.submit_proof(db, course_id, user.id, body, clock)


@router.post(
    "/webhook",
    response_model=WebhookAckResponse,
    summary="Payment provider outcome webhook",
    description="Body must be signed with HMAC-SHA256 of the raw payload in "
    "`X-Webhook-Signature`. Redeliveries of an already-applied outcome are acknowledged "
    "with `duplicate=true`.",
)
async def payment_webhook(
    request: Request,
    signature: str | None = Header(default=None, alias="X-Webhook-Signature"),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
    sink: AuditSink = Depends(get_audit_sink),
    clock: Clock = Depends(get_clock),
) -> WebhookAckResponse:
    raw_body = await request.body()
    return await controller.handle_webhook(
        db, raw_body, signature, settings.payment_webhook_secret, sink, clock
    )
