import enum

from sqlalchemy import Enum as SAEnum


class CourseStatus(str, enum.Enum):
    DRAFT = "DRAFT"
    PUBLISHED = "PUBLISHED"
    ARCHIVED = "ARCHIVED"


class EnrollmentStatus(str, enum.Enum):
    PENDING_PAYMENT_CONFIRMATION = "PENDING_PAYMENT_CONFIRMATION"
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"
    REJECTED = "REJECTED"


class PaymentStatus(str, enum.Enum):
    PROOF_SUBMITTED = "PROOF_SUBMITTED"
    COMPLETED = "COMPLETED"
    REJECTED = "REJECTED"
    ERROR = "ERROR"


class PaymentProvider(str, enum.Enum):
    MANUAL_TRANSFER = "MANUAL_TRANSFER"
    GATEWAY = "GATEWAY"


# SQLAlchemy Enum instances (reuse across models to avoid duplicate type creation).
# Native ENUM types on PostgreSQL, VARCHAR elsewhere.
course_status_enum = SAEnum(CourseStatus, name="course_status")
enrollment_status_enum = SAEnum(EnrollmentStatus, name="enrollment_status")
payment_status_enum = SAEnum(PaymentStatus, name="payment_status")
payment_provider_enum = SAEnum(PaymentProvider, name="payment_provider")
