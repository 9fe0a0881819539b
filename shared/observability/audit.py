"""Audit helpers for recording mutations of stored records."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Protocol

import structlog

from .logger import get_logger, get_request_id

__all__ = [
    "AuditRepository",
    "InMemoryAuditRepository",
    "RecordAudit",
    "StdoutAuditRepository",
    "get_audit_repository",
    "record_audit",
]


@dataclass(slots=True)
class RecordAudit:
    """Structured payload describing one create, update or delete."""

    event: str
    entity: str
    record_id: int
    request_id: str | None = None
    service: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict[str, Any]:
        return {
            "event": self.event,
            "entity": self.entity,
            "recordId": self.record_id,
            "requestId": self.request_id,
            "service": self.service,
            "metadata": dict(self.metadata),
            "createdAt": self.created_at.isoformat(),
        }


class AuditRepository(Protocol):
    """Contract for persisting record audit entries."""

    def persist(self, audit: RecordAudit) -> None:  # pragma: no cover - interface definition
        """Persist ``audit`` to the underlying backend."""


class StdoutAuditRepository:
    """Emit audit entries through the structured logger."""

    def __init__(self) -> None:
        self._logger = get_logger("audit")

    def persist(self, audit: RecordAudit) -> None:
        self._logger.info("record_audit", **audit.to_dict())


class InMemoryAuditRepository:
    """Keep audit entries in a list; useful for tests and local inspection."""

    def __init__(self) -> None:
        self.entries: list[RecordAudit] = []

    def persist(self, audit: RecordAudit) -> None:
        self.entries.append(audit)

    def events(self) -> list[str]:
        return [entry.event for entry in self.entries]


_DEFAULT_REPOSITORY: AuditRepository | None = None


def get_audit_repository() -> AuditRepository:
    """Return the process-wide audit repository."""

    global _DEFAULT_REPOSITORY
    if _DEFAULT_REPOSITORY is None:
        _DEFAULT_REPOSITORY = StdoutAuditRepository()
    return _DEFAULT_REPOSITORY


def record_audit(
    event: str,
    *,
    entity: str,
    record_id: int,
    metadata: dict[str, Any] | None = None,
    repository: AuditRepository | None = None,
) -> RecordAudit:
    """Build an audit entry from the current log context and persist it."""

    repo = repository or get_audit_repository()
    context = structlog.contextvars.get_contextvars()
    entry = RecordAudit(
        event=event,
        entity=entity,
        record_id=record_id,
        request_id=get_request_id(),
        service=context.get("service"),
        metadata=dict(metadata or {}),
    )
    repo.persist(entry)
    return entry
