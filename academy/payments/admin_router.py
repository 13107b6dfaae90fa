"""Payment review — admin-facing routes.

Routes:
  GET  /api/v1/admin/payments/pending              PROOF_SUBMITTED queue, newest first
  POST /api/v1/admin/payments/{payment_id}/approve Payment → COMPLETED, enrollment → ACTIVE
  POST /api/v1/admin/payments/{payment_id}/reject  Payment → REJECTED, enrollment → REJECTED

Requires: ADMIN or SUPER_ADMIN role.
"""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from academy.audit.sink import AuditSink
from academy.clock import Clock
from academy.database import get_db
from academy.dependencies import get_audit_sink, get_clock, require_admin
from academy.payments import controller
from academy.payments.schemas import (
    PaymentReviewResponse,
    PendingPaymentListResponse,
    RejectPaymentRequest,
)
from shared.models.pagination import PaginationParams
from shared.models.user import CurrentUser

router = APIRouter(prefix="/admin/payments", tags=["admin-payments"])


@router.get(
    "/pending",
    response_model=PendingPaymentListResponse,
    summary="[Admin] List payments awaiting review",
)
async def list_pending_payments(
    pagination: PaginationParams = Depends(),
    search: str | None = Query(None, max_length=100, description="Match on reference id."),
    admin: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> PendingPaymentListResponse:
    return await controller.list_pending_payments(db, pagination, search=search)


@router.post(
    "/{payment_id}/approve",
    response_model=PaymentReviewResponse,
    summary="[Admin] Approve a submitted payment proof",
    description="Only PROOF_SUBMITTED payments can be approved; approving a COMPLETED, "
    "REJECTED or ERROR payment returns 409.",
)
async def approve_payment(
    payment_id: UUID,
    admin: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    sink: AuditSink = Depends(get_audit_sink),
    clock: Clock = Depends(get_clock),
) -> PaymentReviewResponse:
    return await controller.approve_payment(db, payment_id, admin.id, sink, clock)


@router.post(
    "/{payment_id}/reject",
    response_model=PaymentReviewResponse,
    summary="[Admin] Reject a submitted payment proof",
)
async def reject_payment(
    payment_id: UUID,
    body: RejectPaymentRequest | None = None,
    admin: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> PaymentReviewResponse:
    return await controller.reject_payment(
        db, payment_id, admin.id, body or RejectPaymentRequest(), clock
    )
