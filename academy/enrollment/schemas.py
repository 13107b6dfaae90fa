"""Enrollment domain Pydantic V2 schemas."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from academy.models.enums import EnrollmentStatus


class EnrollmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    enrollment_id: UUID
    user_id: UUID
    course_id: UUID
    status: EnrollmentStatus
    paid: bool
    progress: Decimal = Field(description="Completion percentage, 0–100, two decimals.")
    grade: float | None = None
    last_accessed_at: datetime | None = None
    activated_at: datetime | None = None
    completed_at: datetime | None = None
    enrolled_at: datetime


class EnrollFreeResponse(BaseModel):
    enrollment_id: UUID
    status: EnrollmentStatus
