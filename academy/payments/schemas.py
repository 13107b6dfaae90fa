"""Payment domain Pydantic V2 schemas.

Follows RORO: separate request models from response models.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from academy.models.enums import EnrollmentStatus, PaymentProvider, PaymentStatus
from shared.models.pagination import PaginatedResponse


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class SubmitProofRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    proof_image_url: str = Field(
        min_length=1,
        max_length=1000,
        description="Object-store URL of the uploaded transfer receipt.",
    )


class RejectPaymentRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    reason: str | None = Field(
        default=None,
        max_length=1000,
        description="Shown to the student; stored as admin notes.",
    )


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class SubmitProofResponse(BaseModel):
    payment_reference_id: str
    message: str


class PaymentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    payment_id: UUID
    enrollment_id: UUID
    user_id: UUID
    course_id: UUID
    amount: Decimal
    payment_reference_id: str
    provider: PaymentProvider
    proof_image_url: str | None = None
    status: PaymentStatus
    admin_notes: str | None = None
    reviewed_by_id: UUID | None = None
    reviewed_at: datetime | None = None
    created_at: datetime


class PaymentReviewResponse(PaymentResponse):
    enrollment_status: EnrollmentStatus


class PendingPaymentListResponse(PaginatedResponse[PaymentResponse]):
    pass


class WebhookAckResponse(BaseModel):
    payment_id: UUID
    status: PaymentStatus
    enrollment_status: EnrollmentStatus
    duplicate: bool = False
