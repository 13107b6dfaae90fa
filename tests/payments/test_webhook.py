from datetime import datetime, timezone
from uuid import UUID

import pytest

from academy.exceptions import InvalidWebhookSignatureError
from academy.payments.reference import generate_payment_reference
from academy.payments.webhook import compute_signature, verify_signature

SECRET = "s3cret"


def test_valid_signature_passes() -> None:
    body = b'{"payment_reference_id": "PAY-1", "outcome": "succeeded"}'
    verify_signature(body, compute_signature(body, SECRET), SECRET)


@pytest.mark.parametrize("signature", [None, "", "deadbeef"])
def test_missing_or_wrong_signature_raises(signature) -> None:
    with pytest.raises(InvalidWebhookSignatureError):
        verify_signature(b"{}", signature, SECRET)


def test_signature_covers_exact_body() -> None:
    signature = compute_signature(b'{"a": 1}', SECRET)
    with pytest.raises(InvalidWebhookSignatureError):
        verify_signature(b'{"a": 2}', signature, SECRET)


def test_payment_reference_format() -> None:
    course_id = UUID("1a2b3c4d-0000-0000-0000-000000000000")
    user_id = UUID("00000000-0000-0000-0000-000000009f3e")
    now = datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)
    ref = generate_payment_reference(course_id, user_id, now)
    millis = str(int(now.timestamp() * 1000))
    assert ref == f"PAY-1A2B3C4D-9F3E-{millis[-6:]}"
