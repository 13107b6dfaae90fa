"""Domain exception → HTTPException mapping shared by every controller."""

from __future__ import annotations

import logging

from fastapi import HTTPException, status

from academy.exceptions import (
    AlreadyEnrolledError,
    CourseIsFreeError,
    CourseNotFoundError,
    CourseNotPublishedError,
    EnrollmentAccessDeniedError,
    EnrollmentNotActiveError,
    InvalidDateRangeError,
    InvalidSessionTimesError,
    InvalidStatusTransitionError,
    InvalidWebhookSignatureError,
    LessonNotFoundError,
    LiveSessionNotFoundError,
    NotCourseOwnerError,
    PaymentAlreadyExistsError,
    PaymentNotFoundError,
    PaymentReferenceUnavailableError,
    PaymentRequiredError,
)

logger = logging.getLogger(__name__)

_NOT_FOUND = (
    CourseNotFoundError,
    LessonNotFoundError,
    LiveSessionNotFoundError,
    PaymentNotFoundError,
)

# (exception type, status code, client-facing detail); None keeps str(exc)
_MAPPING: tuple[tuple[type[Exception], int, str | None], ...] = (
    (EnrollmentAccessDeniedError, status.HTTP_403_FORBIDDEN,
     "Invalid enrollment or you don't have access to this course."),
    (EnrollmentNotActiveError, status.HTTP_403_FORBIDDEN,
     "Your enrollment is not active. Payment may still be pending confirmation."),
    (NotCourseOwnerError, status.HTTP_403_FORBIDDEN, "Not the course teacher."),
    (CourseNotPublishedError, status.HTTP_400_BAD_REQUEST,
     "This course is not currently published."),
    (CourseIsFreeError, status.HTTP_400_BAD_REQUEST,
     "This course is free and does not require payment."),
    (PaymentRequiredError, status.HTTP_400_BAD_REQUEST,
     "This course requires payment. Use the payment flow instead."),
    (InvalidSessionTimesError, status.HTTP_400_BAD_REQUEST, "End time must be after start time."),
    (InvalidDateRangeError, status.HTTP_400_BAD_REQUEST, "Range end must not be before its start."),
    (AlreadyEnrolledError, status.HTTP_409_CONFLICT, "You are already enrolled in this course."),
    (PaymentAlreadyExistsError, status.HTTP_409_CONFLICT,
     "A payment process for this course already exists. Please refresh the page."),
    (InvalidStatusTransitionError, status.HTTP_409_CONFLICT, None),
    (InvalidWebhookSignatureError, status.HTTP_401_UNAUTHORIZED, "Invalid webhook signature."),
    (PaymentReferenceUnavailableError, status.HTTP_503_SERVICE_UNAVAILABLE,
     "Could not allocate a payment reference. Please try again."),
)


def handle_domain_error(exc: Exception) -> HTTPException:
    if isinstance(exc, HTTPException):
        return exc
    if isinstance(exc, _NOT_FOUND):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    for exc_type, status_code, detail in _MAPPING:
        if isinstance(exc, exc_type):
            return HTTPException(status_code=status_code, detail=detail or str(exc))
    logger.error("Unexpected error in academy service", exc_info=exc)
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal error.")
