from __future__ import annotations

from shared.observability.audit import (
    InMemoryAuditRepository,
    StdoutAuditRepository,
    get_audit_repository,
    record_audit,
)
from shared.observability.logger import request_context


def test_record_audit_captures_request_context() -> None:
    repository = InMemoryAuditRepository()

    with request_context(request_id="req-9"):
        entry = record_audit(
            "record.updated",
            entity="Room",
            record_id=3,
            metadata={"equipment": ["Bed"]},
            repository=repository,
        )

    assert repository.entries == [entry]
    assert repository.events() == ["record.updated"]
    payload = entry.to_dict()
    assert payload["recordId"] == 3
    assert payload["requestId"] == "req-9"
    assert payload["metadata"] == {"equipment": ["Bed"]}
    assert payload["createdAt"].endswith("+00:00")


def test_default_repository_is_shared_stdout_repository() -> None:
    repository = get_audit_repository()

    assert isinstance(repository, StdoutAuditRepository)
    assert get_audit_repository() is repository
    record_audit("record.deleted", entity="Doctor", record_id=1, repository=repository)
