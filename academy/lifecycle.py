"""Enrollment and payment state machines.

Every status change on an Enrollment or Payment goes through ``apply_*`` here.
Any (state, event) pair missing from the tables is illegal, so terminal states
reject further events without call-site guards.

```
Payment:    PROOF_SUBMITTED --APPROVE--> COMPLETED
            PROOF_SUBMITTED --REJECT---> REJECTED
            PROOF_SUBMITTED --FAIL-----> ERROR
Enrollment: PENDING_PAYMENT_CONFIRMATION --APPROVE--> ACTIVE
            PENDING_PAYMENT_CONFIRMATION --REJECT---> REJECTED
            PENDING_PAYMENT_CONFIRMATION --FAIL-----> REJECTED
            ACTIVE --COMPLETE--> COMPLETED
```

COMPLETE is owned by the grading surface; progress changes never fire it.
"""

from __future__ import annotations

import enum
from datetime import datetime

from academy.exceptions import InvalidStatusTransitionError
from academy.models.enrollment import Enrollment
from academy.models.enums import EnrollmentStatus, PaymentStatus
from academy.models.payment import Payment


class LifecycleEvent(str, enum.Enum):
    APPROVE = "APPROVE"
    REJECT = "REJECT"
    FAIL = "FAIL"
    COMPLETE = "COMPLETE"


PAYMENT_TRANSITIONS: dict[PaymentStatus, dict[LifecycleEvent, PaymentStatus]] = {
    PaymentStatus.PROOF_SUBMITTED: {
        LifecycleEvent.APPROVE: PaymentStatus.COMPLETED,
        LifecycleEvent.REJECT: PaymentStatus.REJECTED,
        LifecycleEvent.FAIL: PaymentStatus.ERROR,
    },
}

ENROLLMENT_TRANSITIONS: dict[EnrollmentStatus, dict[LifecycleEvent, EnrollmentStatus]] = {
    EnrollmentStatus.PENDING_PAYMENT_CONFIRMATION: {
        LifecycleEvent.APPROVE: EnrollmentStatus.ACTIVE,
        LifecycleEvent.REJECT: EnrollmentStatus.REJECTED,
        LifecycleEvent.FAIL: EnrollmentStatus.REJECTED,
    },
    EnrollmentStatus.ACTIVE: {
        LifecycleEvent.COMPLETE: EnrollmentStatus.COMPLETED,
    },
}


def next_payment_status(current: PaymentStatus, event: LifecycleEvent) -> PaymentStatus:
    target = PAYMENT_TRANSITIONS.get(current, {}).get(event)
    if target is None:
        raise InvalidStatusTransitionError(current.value, event.value)
    return target


def next_enrollment_status(
    current: EnrollmentStatus, event: LifecycleEvent
) -> EnrollmentStatus:
    target = ENROLLMENT_TRANSITIONS.get(current, {}).get(event)
    if target is None:
        raise InvalidStatusTransitionError(current.value, event.value)
    return target


def apply_payment_outcome(
    payment: Payment,
    enrollment: Enrollment,
    event: LifecycleEvent,
    *,
    now: datetime,
) -> None:
    """Move a payment and its enrollment together.

    Both targets are resolved before either row is touched, so an illegal
    transition on one side leaves both unchanged.
    """
    payment_target = next_payment_status(payment.status, event)
    enrollment_target = next_enrollment_status(enrollment.status, event)

    payment.status = payment_target
    enrollment.status = enrollment_target
    if enrollment_target == EnrollmentStatus.ACTIVE:
        enrollment.paid = True
        enrollment.activated_at = now
