"""Live session domain Pydantic V2 schemas."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from academy.live_sessions.status import LiveSessionStatus


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class CreateLiveSessionRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    course_id: UUID
    title: str = Field(min_length=1, max_length=300)
    description: str | None = Field(default=None, max_length=5000)
    meeting_link: str = Field(min_length=1, max_length=1000)
    start_time: datetime
    end_time: datetime | None = None
    week: int | None = Field(default=None, ge=1, le=52)


class UpdateLiveSessionRequest(BaseModel):
    """All fields optional; only the ones sent are applied."""

    model_config = ConfigDict(str_strip_whitespace=True)

    title: str | None = Field(default=None, min_length=1, max_length=300)
    description: str | None = Field(default=None, max_length=5000)
    meeting_link: str | None = Field(default=None, min_length=1, max_length=1000)
    start_time: datetime | None = None
    end_time: datetime | None = None
    week: int | None = Field(default=None, ge=1, le=52)


class UploadRecordingRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    recording_url: str = Field(min_length=1, max_length=1000)


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class StudentLiveSessionResponse(BaseModel):
    session_id: UUID
    title: str
    description: str | None = None
    start_time: datetime
    end_time: datetime | None = None
    week: int | None = None
    recording_url: str | None = None
    status: LiveSessionStatus
    can_join: bool
    # Only present while the session is joinable or live
    meeting_link: str | None = None


class TeacherLiveSessionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    session_id: UUID
    course_id: UUID
    title: str
    description: str | None = None
    meeting_link: str
    start_time: datetime
    end_time: datetime | None = None
    week: int | None = None
    recording_url: str | None = None
    created_at: datetime
    updated_at: datetime
    status: LiveSessionStatus | None = None


class CalendarEntryResponse(BaseModel):
    """One session on a calendar; the meeting link is fetched per course."""

    session_id: UUID
    course_id: UUID
    course_title: str
    title: str
    start_time: datetime
    end_time: datetime | None = None
    week: int | None = None
    status: LiveSessionStatus
    can_join: bool


class MessageResponse(BaseModel):
    message: str
