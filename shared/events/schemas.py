from datetime import datetime, timezone
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class AuditEventType(str, Enum):
    LIVE_SCHEDULED = "LIVE_SCHEDULED"
    LIVE_UPDATED = "LIVE_UPDATED"
    LIVE_CANCELLED = "LIVE_CANCELLED"
    RECORDING_UPLOADED = "RECORDING_UPLOADED"
    ENROLLMENT_ACTIVATED = "ENROLLMENT_ACTIVATED"


class AuditEvent(BaseModel):
    """Structured audit event consumed by the external observability sink."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    type: AuditEventType
    title: str
    course_id: UUID | None = None
    session_id: UUID | None = None
    payment_id: UUID | None = None
    actor_user_id: UUID | None = None
    occurred_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class PaymentWebhookEvent(BaseModel):
    """Outcome notification posted by an automated payment provider."""

    model_config = ConfigDict(extra="ignore")

    event_id: str | None = None
    payment_reference_id: str = Field(min_length=1, max_length=64)
    outcome: str = Field(pattern="^(succeeded|failed|rejected)$")
    reason: str | None = Field(default=None, max_length=1000)
