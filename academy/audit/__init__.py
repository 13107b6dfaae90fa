from academy.audit.sink import (
    AuditSink,
    LogAuditSink,
    RedisStreamAuditSink,
    build_audit_sink,
    emit_audit,
)

__all__ = [
    "AuditSink",
    "LogAuditSink",
    "RedisStreamAuditSink",
    "build_audit_sink",
    "emit_audit",
]
