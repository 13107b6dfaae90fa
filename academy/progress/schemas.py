"""Progress domain Pydantic V2 schemas."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from academy.models.enums import EnrollmentStatus


class ToggleLessonRequest(BaseModel):
    course_id: UUID
    enrollment_id: UUID
    is_completed: bool


class ToggleLessonResponse(BaseModel):
    new_progress_percentage: Decimal


class LessonProgressItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    lesson_id: UUID
    title: str
    lesson_type: str
    is_completed: bool


class WeekProgress(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    week: int
    lessons: list[LessonProgressItem]


class CourseProgressResponse(BaseModel):
    course_id: UUID
    course_title: str
    enrollment_id: UUID
    enrollment_status: EnrollmentStatus
    progress: Decimal
    current_marks: float
    last_accessed_at: datetime | None = None
    weeks: list[WeekProgress]
