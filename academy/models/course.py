import uuid
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import DateTime, Index, Numeric, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shared.database.postgres import Base

from .enums import CourseStatus, course_status_enum


class Course(Base):
    """Read-only input for this service; authored by the course CRUD surface."""

    __tablename__ = "courses"

    course_id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    title: Mapped[str] = mapped_column(String(300), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    # Soft reference: users live with the identity provider
    teacher_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0.00"))
    status: Mapped[CourseStatus] = mapped_column(
        course_status_enum, nullable=False, default=CourseStatus.DRAFT
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc)
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    lessons = relationship("Lesson", back_populates="course", lazy="noload")
    enrollments = relationship("Enrollment", back_populates="course", lazy="noload")
    live_sessions = relationship("LiveSession", back_populates="course", lazy="noload")

    @property
    def is_free(self) -> bool:
        return (self.price or Decimal("0")) <= 0

    __table_args__ = (
        Index("ix_courses_teacher_id", "teacher_id"),
        Index("ix_courses_status", "status"),
    )
