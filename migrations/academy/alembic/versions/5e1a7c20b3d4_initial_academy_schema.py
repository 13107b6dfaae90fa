"""initial academy schema: courses, lessons, enrollments, payments, completions, live sessions

Revision ID: 5e1a7c20b3d4
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision: str = "5e1a7c20b3d4"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

course_status = postgresql.ENUM(
    "DRAFT", "PUBLISHED", "ARCHIVED", name="course_status", create_type=False,
)
enrollment_status = postgresql.ENUM(
    "PENDING_PAYMENT_CONFIRMATION", "ACTIVE", "COMPLETED", "REJECTED",
    name="enrollment_status", create_type=False,
)
payment_status = postgresql.ENUM(
    "PROOF_SUBMITTED", "COMPLETED", "REJECTED", "ERROR",
    name="payment_status", create_type=False,
)
payment_provider = postgresql.ENUM(
    "MANUAL_TRANSFER", "GATEWAY", name="payment_provider", create_type=False,
)


def upgrade() -> None:
    # ── Enums ────────────────────────────────────────────────────────────
    op.execute("CREATE TYPE course_status AS ENUM ('DRAFT', 'PUBLISHED', 'ARCHIVED')")
    op.execute(
        "CREATE TYPE enrollment_status AS ENUM "
        "('PENDING_PAYMENT_CONFIRMATION', 'ACTIVE', 'COMPLETED', 'REJECTED')"
    )
    op.execute(
        "CREATE TYPE payment_status AS ENUM "
        "('PROOF_SUBMITTED', 'COMPLETED', 'REJECTED', 'ERROR')"
    )
    op.execute("CREATE TYPE payment_provider AS ENUM ('MANUAL_TRANSFER', 'GATEWAY')")

    # ── courses / lessons ────────────────────────────────────────────────
    op.create_table(
        "courses",
        sa.Column("course_id", sa.Uuid(), primary_key=True),
        sa.Column("title", sa.String(length=300), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("teacher_id", sa.Uuid(), nullable=False),
        sa.Column("price", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("status", course_status, nullable=False, server_default="DRAFT"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_courses_teacher_id", "courses", ["teacher_id"])
    op.create_index("ix_courses_status", "courses", ["status"])

    op.create_table(
        "lessons",
        sa.Column("lesson_id", sa.Uuid(), primary_key=True),
        sa.Column(
            "course_id", sa.Uuid(),
            sa.ForeignKey("courses.course_id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("title", sa.String(length=300), nullable=False),
        sa.Column("lesson_type", sa.String(length=30), nullable=False, server_default="TEXT"),
        sa.Column("week", sa.SmallInteger(), nullable=True),
        sa.Column("sort_order", sa.SmallInteger(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_lessons_course_id", "lessons", ["course_id"])

    # ── enrollments / payments ───────────────────────────────────────────
    op.create_table(
        "enrollments",
        sa.Column("enrollment_id", sa.Uuid(), primary_key=True),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column(
            "course_id", sa.Uuid(),
            sa.ForeignKey("courses.course_id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column(
            "status", enrollment_status, nullable=False,
            server_default="PENDING_PAYMENT_CONFIRMATION",
        ),
        sa.Column("paid", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("progress", sa.Numeric(5, 2), nullable=False, server_default="0"),
        sa.Column("grade", sa.Float(), nullable=True),
        sa.Column("last_accessed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("activated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("enrolled_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("user_id", "course_id", name="uq_enrollments_user_course"),
    )
    op.create_index("ix_enrollments_user_id", "enrollments", ["user_id"])
    op.create_index("ix_enrollments_course_id", "enrollments", ["course_id"])
    op.create_index("ix_enrollments_status", "enrollments", ["status"])

    op.create_table(
        "payments",
        sa.Column("payment_id", sa.Uuid(), primary_key=True),
        sa.Column(
            "enrollment_id", sa.Uuid(),
            sa.ForeignKey("enrollments.enrollment_id", ondelete="CASCADE"),
            nullable=False, unique=True,
        ),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column(
            "course_id", sa.Uuid(),
            sa.ForeignKey("courses.course_id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("payment_reference_id", sa.String(length=64), nullable=False, unique=True),
        sa.Column("provider", payment_provider, nullable=False, server_default="MANUAL_TRANSFER"),
        sa.Column("proof_image_url", sa.String(length=1000), nullable=True),
        sa.Column("status", payment_status, nullable=False, server_default="PROOF_SUBMITTED"),
        sa.Column("admin_notes", sa.Text(), nullable=True),
        sa.Column("reviewed_by_id", sa.Uuid(), nullable=True),
        sa.Column("reviewed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_payments_status", "payments", ["status"])
    op.create_index("ix_payments_created_at", "payments", ["created_at"])

    # ── lesson_completions ───────────────────────────────────────────────
    op.create_table(
        "lesson_completions",
        sa.Column("completion_id", sa.Uuid(), primary_key=True),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column(
            "lesson_id", sa.Uuid(),
            sa.ForeignKey("lessons.lesson_id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column(
            "enrollment_id", sa.Uuid(),
            sa.ForeignKey("enrollments.enrollment_id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint(
            "user_id", "lesson_id", "enrollment_id",
            name="uq_lesson_completions_user_lesson_enrollment",
        ),
    )
    op.create_index(
        "ix_lesson_completions_enrollment_id", "lesson_completions", ["enrollment_id"]
    )

    # ── live_sessions ────────────────────────────────────────────────────
    op.create_table(
        "live_sessions",
        sa.Column("session_id", sa.Uuid(), primary_key=True),
        sa.Column(
            "course_id", sa.Uuid(),
            sa.ForeignKey("courses.course_id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("title", sa.String(length=300), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("meeting_link", sa.String(length=1000), nullable=False),
        sa.Column("start_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("recording_url", sa.String(length=1000), nullable=True),
        sa.Column("week", sa.SmallInteger(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_live_sessions_course_id", "live_sessions", ["course_id"])
    op.create_index("ix_live_sessions_start_time", "live_sessions", ["start_time"])


def downgrade() -> None:
    op.drop_table("live_sessions")
    op.drop_table("lesson_completions")
    op.drop_table("payments")
    op.drop_table("enrollments")
    op.drop_table("lessons")
    op.drop_table("courses")
    op.execute("DROP TYPE IF EXISTS payment_provider")
    op.execute("DROP TYPE IF EXISTS payment_status")
    op.execute("DROP TYPE IF EXISTS enrollment_status")
    op.execute("DROP TYPE IF EXISTS course_status")
