"""Ordered, durable ``u64 -> record`` map stored in one partition.

Partition layout::

    offset 0    magic(3s) | version(u8) | max_value_size(u32) | slot_count(u64)
    offset 32   slot[0], slot[1], ...

    slot        status(u8) | pad(3) | value_len(u32) | key(u64, big-endian) | seq(u64) | value

Slots are pre-allocated at the codec's bound, so every record fits any slot.
An overwrite lands in a fresh slot before the old one is released; ``seq``
orders the two copies if the process stops in between.
"""

from __future__ import annotations

import bisect
import struct
from typing import Generic, Iterator

from shared.observability.logger import get_logger

from services.records.storage.codec import RecordCodec, RecordT, decode_key, encode_key
from services.records.storage.errors import MemoryGrowError, StorageError
from services.records.storage.partitions import Partition

_MAGIC = b"KVC"
_VERSION = 1
_HEADER_FMT = "<3sBIQ"
_HEADER_SIZE = 32
_SLOT_COUNT_OFFSET = 8

_SLOT_FMT = "<BxxxI8sQ"
_SLOT_HEADER_SIZE = struct.calcsize(_SLOT_FMT)

_FREE = 0
_LIVE = 1

logger = get_logger(__name__)


class KeyedCollection(Generic[RecordT]):
    """Map integer ids to records with durability after every mutation."""

    def __init__(
        self,
        partition: Partition,
        codec: RecordCodec[RecordT],
        *,
        name: str | None = None,
    ) -> None:
        self._partition = partition
        self._codec = codec
        self.name = name or codec.record_type
        self._slot_size = _SLOT_HEADER_SIZE + codec.max_size
        self._index: dict[int, tuple[int, int]] = {}
        self._keys: list[int] = []
        self._free: list[int] = []
        self._slot_count = 0
        self._seq = 0

        if partition.size() == 0:
            self._initialize()
        else:
            self._load()

    # ------------------------------------------------------------------ reads

    def get(self, key: int) -> RecordT | None:
        entry = self._index.get(key)
        if entry is None:
            return None
        return self._read_value(entry[0])

    def contains(self, key: int) -> bool:
        return key in self._index

    def __contains__(self, key: object) -> bool:
        return key in self._index

    def __len__(self) -> int:
        return len(self._keys)

    def __iter__(self) -> Iterator[int]:
        return iter(tuple(self._keys))

    def keys(self) -> list[int]:
        """Return the stored ids in ascending order."""

        return list(self._keys)

    def items(self) -> Iterator[tuple[int, RecordT]]:
        """Yield ``(id, record)`` pairs in ascending id order."""

        for key in tuple(self._keys):
            entry = self._index.get(key)
            if entry is not None:
                yield key, self._read_value(entry[0])

    # ---------------------------------------------------------------- mutations

    def insert(self, key: int, record: RecordT) -> RecordT | None:
        """Store ``record`` under ``key`` and return the value it replaced."""

        key_bytes = encode_key(key)
        data = self._codec.encode(record)

        existing = self._index.get(key)
        previous = self._read_value(existing[0]) if existing else None

        if self._free:
            slot, appended = self._free.pop(), False
        else:
            slot, appended = self._slot_count, True
            self._ensure_capacity(slot)

        self._seq += 1
        self._write_slot(slot, key_bytes, self._seq, data)
        if appended:
            self._slot_count += 1
            self._partition.write(
                _SLOT_COUNT_OFFSET, struct.pack("<Q", self._slot_count)
            )

        if existing is not None:
            self._release(existing[0])
        else:
            bisect.insort(self._keys, key)
        self._index[key] = (slot, self._seq)
        self._partition.sync()
        return previous

    def remove(self, key: int) -> RecordT | None:
        """Delete ``key`` and return the removed value, if any."""

        entry = self._index.get(key)
        if entry is None:
            return None
        value = self._read_value(entry[0])

        self._release(entry[0])
        del self._index[key]
        position = bisect.bisect_left(self._keys, key)
        del self._keys[position]
        self._partition.sync()
        return value

    # ------------------------------------------------------------------ helpers

    def _slot_offset(self, slot: int) -> int:
        return _HEADER_SIZE + slot * self._slot_size

    def _read_value(self, slot: int) -> RecordT:
        offset = self._slot_offset(slot)
        _, length, _, _ = struct.unpack(
            _SLOT_FMT, self._partition.read(offset, _SLOT_HEADER_SIZE)
        )
        data = self._partition.read(offset + _SLOT_HEADER_SIZE, length)
        return self._codec.decode(data)

    def _write_slot(self, slot: int, key: bytes, seq: int, data: bytes) -> None:
        offset = self._slot_offset(slot)
        # Value first, then the header that marks the slot live.
        self._partition.write(offset + _SLOT_HEADER_SIZE, data)
        self._partition.write(
            offset, struct.pack(_SLOT_FMT, _LIVE, len(data), key, seq)
        )

    def _release(self, slot: int) -> None:
        self._partition.write(self._slot_offset(slot), bytes([_FREE]))
        self._free.append(slot)

    def _ensure_capacity(self, slot: int) -> None:
        page_size = self._partition.page_size
        required = self._slot_offset(slot + 1)
        available = self._partition.size() * page_size
        if required <= available:
            return
        pages = -(-(required - available) // page_size)
        if self._partition.grow(pages) == -1:
            raise MemoryGrowError(
                f"Partition {self._partition.region_id} cannot grow to hold "
                f"more {self.name} records."
            )

    def _initialize(self) -> None:
        if self._partition.grow(1) == -1:
            raise MemoryGrowError(
                f"Unable to allocate partition {self._partition.region_id} for {self.name}."
            )
        self._partition.write(
            0, struct.pack(_HEADER_FMT, _MAGIC, _VERSION, self._codec.max_size, 0)
        )
        self._partition.sync()
        logger.info(
            "collection_initialized",
            collection=self.name,
            region_id=self._partition.region_id,
            max_value_size=self._codec.max_size,
        )

    def _load(self) -> None:
        magic, version, max_value_size, slot_count = struct.unpack_from(
            _HEADER_FMT, self._partition.read(0, _HEADER_SIZE), 0
        )
        if magic != _MAGIC:
            raise StorageError(
                f"Partition {self._partition.region_id} does not hold a keyed collection."
            )
        if version != _VERSION:
            raise StorageError(f"Unsupported collection layout version {version}.")
        if max_value_size != self._codec.max_size:
            raise StorageError(
                f"Slot size mismatch for {self.name}: stored={max_value_size}, "
                f"codec={self._codec.max_size}."
            )

        self._slot_count = slot_count
        repaired = 0
        for slot in range(slot_count):
            status, _, raw_key, seq = struct.unpack(
                _SLOT_FMT,
                self._partition.read(self._slot_offset(slot), _SLOT_HEADER_SIZE),
            )
            key = decode_key(raw_key)
            self._seq = max(self._seq, seq)
            if status != _LIVE:
                self._free.append(slot)
                continue

            existing = self._index.get(key)
            if existing is None:
                self._index[key] = (slot, seq)
                continue
            # Interrupted overwrite: the newer copy wins.
            stale, kept = (existing, (slot, seq)) if existing[1] < seq else ((slot, seq), existing)
            self._release(stale[0])
            self._index[key] = kept
            repaired += 1

        self._keys = sorted(self._index)
        self._free.sort(reverse=True)
        if repaired:
            self._partition.sync()
        logger.info(
            "collection_loaded",
            collection=self.name,
            region_id=self._partition.region_id,
            records=len(self._keys),
            free_slots=len(self._free),
            repaired=repaired,
        )


__all__ = ["KeyedCollection"]
