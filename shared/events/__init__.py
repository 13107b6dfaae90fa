from shared.events.schemas import AuditEvent, AuditEventType, PaymentWebhookEvent

__all__ = ["AuditEvent", "AuditEventType", "PaymentWebhookEvent"]
