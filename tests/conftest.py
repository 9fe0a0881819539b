from __future__ import annotations

import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from services.records.context import RecordServices, StorageContext  # noqa: E402
from services.records.storage import InMemoryStore  # noqa: E402
from shared.observability.audit import InMemoryAuditRepository  # noqa: E402


class FixedClock:
    """Clock returning ``now`` until a test moves it."""

    def __init__(self, now: int = 1_700_000_000_000_000_000) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now


@pytest.fixture
def anyio_backend() -> str:
    """Limit ``pytest-anyio`` to the asyncio backend."""

    return "asyncio"


@pytest.fixture
def memory() -> InMemoryStore:
    return InMemoryStore(page_size=512)


@pytest.fixture
def storage(memory: InMemoryStore) -> StorageContext:
    return StorageContext.build(memory, bucket_size_pages=4)


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def audit() -> InMemoryAuditRepository:
    return InMemoryAuditRepository()


@pytest.fixture
def services(
    storage: StorageContext, clock: FixedClock, audit: InMemoryAuditRepository
) -> RecordServices:
    return RecordServices(storage, clock=clock, audit=audit)
