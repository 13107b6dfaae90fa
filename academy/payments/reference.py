"""Human-readable payment reference ids, used for manual reconciliation only."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID


def generate_payment_reference(course_id: UUID, user_id: UUID, now: datetime) -> str:
    """``PAY-<course prefix>-<user fragment>-<timestamp fragment>``.

    e.g. ``PAY-1A2B3C4D-9F3E-482913``. Not parsed back anywhere.
    """
    course_part = course_id.hex[:8].upper()
    user_part = user_id.hex[-4:].upper()
    millis = str(int(now.timestamp() * 1000))
    return f"PAY-{course_part}-{user_part}-{millis[-6:]}"
