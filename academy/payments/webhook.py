"""HMAC verification for payment provider webhooks."""

from __future__ import annotations

import hashlib
import hmac

from academy.exceptions import InvalidWebhookSignatureError


def compute_signature(body: bytes, secret: str) -> str:
    return hmac.new(secret.encode(), body, hashlib.sha256).hexdigest()


def verify_signature(body: bytes, signature: str | None, secret: str) -> None:
    if not signature:
        raise InvalidWebhookSignatureError()
    expected = compute_signature(body, secret)
    if not hmac.compare_digest(expected, signature.strip().lower()):
        raise InvalidWebhookSignatureError()
