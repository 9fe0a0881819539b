"""Partition manager dividing one durable store into independent regions.

Store layout::

    offset 0     magic(3s) | version(u8) | allocated_buckets(u16) | bucket_size_pages(u16)
    offset 8     partition sizes in pages, MAX_PARTITIONS x u64
    offset 2048  bucket table, MAX_BUCKETS x u8 (owning partition id, 0xFF = free)
    page N..     buckets of ``bucket_size_pages`` pages each

A partition owns an ordered list of buckets. Its address space is the
concatenation of those buckets, so partitions never overlap and a partition
id always resolves to the same bytes after a restart.
"""

from __future__ import annotations

import struct

from shared.observability.logger import get_logger

from services.records.storage.errors import (
    MemoryAccessError,
    MemoryGrowError,
    PartitionConflictError,
    StorageError,
)
from services.records.storage.memory import DurableMemory

MAX_PARTITIONS = 255
MAX_BUCKETS = 8192
DEFAULT_BUCKET_SIZE_PAGES = 16

_MAGIC = b"RMM"
_VERSION = 1
_UNALLOCATED = 0xFF

_HEADER_FMT = "<3sBHH"
_HEADER_SIZE = struct.calcsize(_HEADER_FMT)
_ALLOCATED_OFFSET = 4
_SIZES_OFFSET = 8
_SIZE_FMT = "<Q"
_BUCKETS_OFFSET = 2048
_HEADER_BYTES = _BUCKETS_OFFSET + MAX_BUCKETS

logger = get_logger(__name__)


class Partition:
    """Handle on one region of the store, addressed from offset zero."""

    def __init__(self, manager: "MemoryManager", region_id: int) -> None:
        self._manager = manager
        self.region_id = region_id

    @property
    def page_size(self) -> int:
        return self._manager.page_size

    def size(self) -> int:
        """Return the partition size in pages."""

        return self._manager.partition_size(self.region_id)

    def grow(self, pages: int) -> int:
        """Grow the partition; return the previous size or ``-1``."""

        return self._manager.grow(self.region_id, pages)

    def read(self, offset: int, length: int) -> bytes:
        return self._manager.read(self.region_id, offset, length)

    def write(self, offset: int, data: bytes) -> None:
        self._manager.write(self.region_id, offset, data)

    def sync(self) -> None:
        self._manager.sync()

    def __repr__(self) -> str:
        return f"Partition(region_id={self.region_id}, pages={self.size()})"


class MemoryManager:
    """Allocate and translate partition addresses onto a durable store."""

    def __init__(
        self,
        memory: DurableMemory,
        *,
        bucket_size_pages: int = DEFAULT_BUCKET_SIZE_PAGES,
    ) -> None:
        if bucket_size_pages <= 0:
            raise ValueError("bucket_size_pages must be positive")

        self._memory = memory
        self.page_size = memory.page_size
        self._header_pages = -(-_HEADER_BYTES // self.page_size)
        self._data_start = self._header_pages * self.page_size
        self._partitions: dict[int, Partition] = {}
        self._owners: dict[int, str] = {}

        if memory.size() == 0:
            self._initialize(bucket_size_pages)
        else:
            self._load(bucket_size_pages)

    @property
    def bucket_size_pages(self) -> int:
        return self._bucket_pages

    def get(self, region_id: int) -> Partition:
        """Return the stable handle for ``region_id``."""

        self._check_region(region_id)
        partition = self._partitions.get(region_id)
        if partition is None:
            partition = Partition(self, region_id)
            self._partitions[region_id] = partition
        return partition

    def claim(self, region_id: int, owner: str) -> Partition:
        """Return ``region_id`` for exclusive use by ``owner``."""

        self._check_region(region_id)
        existing = self._owners.get(region_id)
        if existing is not None and existing != owner:
            raise PartitionConflictError(region_id, owner, existing)
        self._owners[region_id] = owner
        logger.debug("partition_claimed", region_id=region_id, owner=owner)
        return self.get(region_id)

    def owner_of(self, region_id: int) -> str | None:
        return self._owners.get(region_id)

    def partition_size(self, region_id: int) -> int:
        self._check_region(region_id)
        return self._sizes[region_id]

    def grow(self, region_id: int, pages: int) -> int:
        """Extend ``region_id`` by ``pages`` pages.

        Buckets are appended to the partition as needed. Returns the previous
        size in pages, or ``-1`` when the bucket table or the underlying store
        is exhausted; nothing is modified in that case.
        """

        self._check_region(region_id)
        if pages < 0:
            raise ValueError("pages must not be negative")
        previous = self._sizes[region_id]
        if pages == 0:
            return previous

        new_size = previous + pages
        owned = self._buckets.setdefault(region_id, [])
        needed = -(-new_size // self._bucket_pages) - len(owned)
        if needed > 0:
            if self._allocated + needed > MAX_BUCKETS:
                return -1
            required = self._header_pages + (self._allocated + needed) * self._bucket_pages
            missing = required - self._memory.size()
            if missing > 0 and self._memory.grow(missing) == -1:
                return -1

            first = self._allocated
            self._memory.write(_BUCKETS_OFFSET + first, bytes([region_id]) * needed)
            self._allocated += needed
            self._memory.write(_ALLOCATED_OFFSET, struct.pack("<H", self._allocated))
            owned.extend(range(first, first + needed))
            logger.debug(
                "partition_buckets_allocated",
                region_id=region_id,
                buckets=needed,
                allocated=self._allocated,
            )

        self._sizes[region_id] = new_size
        self._memory.write(
            _SIZES_OFFSET + region_id * 8, struct.pack(_SIZE_FMT, new_size)
        )
        self._memory.sync()
        return previous

    def read(self, region_id: int, offset: int, length: int) -> bytes:
        out = bytearray()
        for address, chunk in self._translate(region_id, offset, length):
            out += self._memory.read(address, chunk)
        return bytes(out)

    def write(self, region_id: int, offset: int, data: bytes) -> None:
        view = memoryview(data)
        position = 0
        for address, chunk in self._translate(region_id, offset, len(data)):
            self._memory.write(address, bytes(view[position : position + chunk]))
            position += chunk

    def sync(self) -> None:
        self._memory.sync()

    # ------------------------------------------------------------------ helpers

    def _translate(self, region_id: int, offset: int, length: int) -> list[tuple[int, int]]:
        self._check_region(region_id)
        size_bytes = self._sizes[region_id] * self.page_size
        if offset < 0 or length < 0 or offset + length > size_bytes:
            raise MemoryAccessError(offset, length, size_bytes)

        bucket_bytes = self._bucket_pages * self.page_size
        owned = self._buckets.get(region_id, [])
        spans: list[tuple[int, int]] = []
        while length > 0:
            index, within = divmod(offset, bucket_bytes)
            chunk = min(length, bucket_bytes - within)
            spans.append((self._data_start + owned[index] * bucket_bytes + within, chunk))
            offset += chunk
            length -= chunk
        return spans

    def _initialize(self, bucket_size_pages: int) -> None:
        if self._memory.grow(self._header_pages) == -1:
            raise MemoryGrowError("Unable to allocate the partition table header.")
        self._bucket_pages = bucket_size_pages
        self._allocated = 0
        self._sizes = [0] * MAX_PARTITIONS
        self._buckets: dict[int, list[int]] = {}

        self._memory.write(0, struct.pack(_HEADER_FMT, _MAGIC, _VERSION, 0, bucket_size_pages))
        self._memory.write(_BUCKETS_OFFSET, bytes([_UNALLOCATED]) * MAX_BUCKETS)
        self._memory.sync()
        logger.info("partition_table_initialized", bucket_size_pages=bucket_size_pages)

    def _load(self, bucket_size_pages: int) -> None:
        raw = self._memory.read(0, _HEADER_BYTES)
        magic, version, allocated, stored_bucket_pages = struct.unpack_from(_HEADER_FMT, raw, 0)
        if magic != _MAGIC:
            raise StorageError("Bad magic; the store was not written by the partition manager.")
        if version != _VERSION:
            raise StorageError(f"Unsupported partition table version {version}.")
        if stored_bucket_pages != bucket_size_pages:
            raise StorageError(
                f"Bucket size mismatch: store={stored_bucket_pages}, "
                f"expected={bucket_size_pages}."
            )

        self._bucket_pages = stored_bucket_pages
        self._allocated = allocated
        self._sizes = list(struct.unpack_from(f"<{MAX_PARTITIONS}Q", raw, _SIZES_OFFSET))
        self._buckets = {}
        table = raw[_BUCKETS_OFFSET : _BUCKETS_OFFSET + allocated]
        for index, owner in enumerate(table):
            if owner == _UNALLOCATED:
                continue
            self._buckets.setdefault(owner, []).append(index)
        logger.info(
            "partition_table_loaded",
            allocated_buckets=allocated,
            partitions=sorted(self._buckets),
        )

    @staticmethod
    def _check_region(region_id: int) -> None:
        if not 0 <= region_id < MAX_PARTITIONS:
            raise ValueError(
                f"Partition id must be between 0 and {MAX_PARTITIONS - 1}; got {region_id}."
            )


__all__ = [
    "DEFAULT_BUCKET_SIZE_PAGES",
    "MAX_BUCKETS",
    "MAX_PARTITIONS",
    "MemoryManager",
    "Partition",
]
