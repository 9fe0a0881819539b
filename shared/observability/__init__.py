"""Observability utilities shared across the records services."""

from .logger import (
    configure_logging,
    generate_request_id,
    get_logger,
    get_request_id,
    request_context,
)
from .middleware import CorrelationIdMiddleware, RequestTimingMiddleware
from .audit import (
    AuditRepository,
    InMemoryAuditRepository,
    RecordAudit,
    StdoutAuditRepository,
    get_audit_repository,
    record_audit,
)

__all__ = [
    "AuditRepository",
    "CorrelationIdMiddleware",
    "InMemoryAuditRepository",
    "RecordAudit",
    "RequestTimingMiddleware",
    "StdoutAuditRepository",
    "configure_logging",
    "generate_request_id",
    "get_audit_repository",
    "get_logger",
    "get_request_id",
    "record_audit",
    "request_context",
]
