from __future__ import annotations

import pytest

from services.records.storage import (
    InMemoryStore,
    MemoryAccessError,
    MemoryManager,
    PartitionConflictError,
    StorageError,
)


@pytest.fixture
def manager() -> MemoryManager:
    return MemoryManager(InMemoryStore(page_size=512), bucket_size_pages=2)


def test_new_partitions_start_empty(manager: MemoryManager) -> None:
    partition = manager.get(7)

    assert partition.size() == 0
    with pytest.raises(MemoryAccessError):
        partition.read(0, 1)


def test_partitions_are_disjoint(manager: MemoryManager) -> None:
    first, second = manager.get(1), manager.get(2)
    first.grow(1)
    second.grow(1)
    first.grow(3)

    first.write(0, b"A" * 2048)
    second.write(0, b"B" * 512)

    assert first.read(0, 2048) == b"A" * 2048
    assert second.read(0, 512) == b"B" * 512


def test_writes_span_bucket_boundaries(manager: MemoryManager) -> None:
    partition = manager.get(3)
    partition.grow(2)
    manager.get(4).grow(1)
    partition.grow(2)

    payload = bytes(range(256)) * 4
    partition.write(512, payload)

    assert partition.read(512, len(payload)) == payload
    assert manager.get(4).read(0, 16) == b"\x00" * 16


def test_grow_returns_previous_size(manager: MemoryManager) -> None:
    partition = manager.get(5)

    assert partition.grow(3) == 0
    assert partition.grow(1) == 3
    assert manager.partition_size(5) == 4


def test_grow_fails_when_store_is_exhausted() -> None:
    store = InMemoryStore(page_size=512, max_pages=21)
    manager = MemoryManager(store, bucket_size_pages=1)
    partition = manager.get(0)

    assert partition.grow(1) == 0
    assert partition.grow(1) == -1
    assert partition.size() == 1


def test_layout_survives_reload() -> None:
    store = InMemoryStore(page_size=512)
    manager = MemoryManager(store, bucket_size_pages=2)
    manager.get(1).grow(3)
    manager.get(1).write(1000, b"kept")

    reloaded = MemoryManager(store, bucket_size_pages=2)

    assert reloaded.bucket_size_pages == 2
    assert reloaded.partition_size(1) == 3
    assert reloaded.get(1).read(1000, 4) == b"kept"


def test_reload_rejects_different_bucket_size() -> None:
    store = InMemoryStore(page_size=512)
    MemoryManager(store, bucket_size_pages=2)

    with pytest.raises(StorageError):
        MemoryManager(store, bucket_size_pages=4)


def test_claim_rejects_second_owner(manager: MemoryManager) -> None:
    manager.claim(1, "patients")

    assert manager.claim(1, "patients") is manager.get(1)
    with pytest.raises(PartitionConflictError) as excinfo:
        manager.claim(1, "doctors")
    assert excinfo.value.existing_owner == "patients"
    assert manager.owner_of(1) == "patients"


@pytest.mark.parametrize("region_id", [-1, 255])
def test_invalid_partition_ids_are_rejected(manager: MemoryManager, region_id: int) -> None:
    with pytest.raises(ValueError):
        manager.get(region_id)
