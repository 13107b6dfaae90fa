"""Shared domain exception classes for the academy service.

These are raised by service-layer code and caught by controllers
to map to appropriate HTTP responses.
"""


# ---------------------------------------------------------------------------
# NOT_FOUND
# ---------------------------------------------------------------------------


class CourseNotFoundError(Exception):
    """Raised when a course cannot be found (or is not visible to the caller)."""

    def __init__(self, identifier: str = ""):
        self.identifier = identifier
        super().__init__(f"Course not found: {identifier}")


class LessonNotFoundError(Exception):
    def __init__(self, lesson_id: str = ""):
        self.lesson_id = lesson_id
        super().__init__(f"Lesson not found in this course: {lesson_id}")


class PaymentNotFoundError(Exception):
    def __init__(self, identifier: str = ""):
        self.identifier = identifier
        super().__init__(f"Payment not found: {identifier}")


class LiveSessionNotFoundError(Exception):
    def __init__(self, session_id: str = ""):
        self.session_id = session_id
        super().__init__(f"Live session not found: {session_id}")


# ---------------------------------------------------------------------------
# FORBIDDEN
# ---------------------------------------------------------------------------


class EnrollmentAccessDeniedError(Exception):
    """Raised when the enrollment is missing or belongs to another user/course."""


class EnrollmentNotActiveError(Exception):
    """Raised when an operation needs an ACTIVE enrollment (e.g. payment still pending)."""

    def __init__(self, status: str = ""):
        self.status = status
        super().__init__(f"Enrollment is not active: {status}")


class NotCourseOwnerError(Exception):
    """Raised when a teacher acts on a course they do not own."""


# ---------------------------------------------------------------------------
# BAD_REQUEST
# ---------------------------------------------------------------------------


class CourseNotPublishedError(Exception):
    """Raised when payment is attempted on a non-PUBLISHED course."""


class CourseIsFreeError(Exception):
    """Raised when a payment is submitted for a course with price 0."""


class PaymentRequiredError(Exception):
    """Raised when the free-enroll path is used for a paid course."""


class InvalidSessionTimesError(Exception):
    """Raised when a live session's end time is not after its start time."""


class InvalidDateRangeError(Exception):
    """Raised when a calendar range ends before it starts."""


# ---------------------------------------------------------------------------
# CONFLICT
# ---------------------------------------------------------------------------


class AlreadyEnrolledError(Exception):
    """Raised when the user already holds an ACTIVE or COMPLETED enrollment."""


class PaymentAlreadyExistsError(Exception):
    """Raised when an enrollment/payment pair already exists for (user, course).

    Covers both a pending/rejected pair found up front and the uniqueness
    violation raised by a concurrent submission.
    """


class InvalidStatusTransitionError(Exception):
    """Raised when the lifecycle table has no transition for (state, event)."""

    def __init__(self, current: str, event: str):
        self.current = current
        self.event = event
        super().__init__(f"Cannot apply {event} to a record in state {current}")


# ---------------------------------------------------------------------------
# UNAUTHORIZED
# ---------------------------------------------------------------------------


class InvalidWebhookSignatureError(Exception):
    """Raised when a provider webhook fails HMAC verification."""


# ---------------------------------------------------------------------------
# SERVICE_UNAVAILABLE
# ---------------------------------------------------------------------------


class PaymentReferenceUnavailableError(Exception):
    """Raised when every candidate payment reference is already taken."""
