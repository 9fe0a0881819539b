"""Durable monotonic identifier counter stored in its own partition."""

from __future__ import annotations

import struct

from shared.observability.logger import get_logger

from services.records.storage.codec import U64_MAX
from services.records.storage.errors import (
    CounterOverflowError,
    MemoryGrowError,
    StorageError,
)
from services.records.storage.partitions import Partition


# magic(3s) | version(u8) | value(u64)
_CELL_FMT = "<3sBQ"
_CELL_SIZE = struct.calcsize(_CELL_FMT)
_MAGIC = b"SCL"
_VERSION = 1

logger = get_logger(__name__)


class IdCounter:
    """Issue unique ascending identifiers, persisting each one before use.

    Every entity collection that shares a counter draws from one identifier
    space, so ids are unique across entity types rather than per type.
    """

    def __init__(self, partition: Partition, *, initial: int = 0) -> None:
        if not 0 <= initial <= U64_MAX:
            raise ValueError("initial counter value must fit in an unsigned 64-bit integer")
        self._partition = partition

        if partition.size() == 0:
            if partition.grow(1) == -1:
                raise MemoryGrowError("Unable to allocate the counter partition.")
            self._store(initial)
            logger.info("id_counter_initialized", region_id=partition.region_id, value=initial)
            return

        magic, version, _ = struct.unpack(_CELL_FMT, partition.read(0, _CELL_SIZE))
        if magic != _MAGIC:
            raise StorageError(
                f"Partition {partition.region_id} does not hold an id counter."
            )
        if version != _VERSION:
            raise StorageError(f"Unsupported counter cell version {version}.")

    @property
    def value(self) -> int:
        """Return the most recently issued identifier (``0`` if none)."""

        _, _, value = struct.unpack(_CELL_FMT, self._partition.read(0, _CELL_SIZE))
        return value

    def next_id(self) -> int:
        """Durably advance the counter and return the new identifier."""

        current = self.value
        if current >= U64_MAX:
            raise CounterOverflowError("The identifier counter is exhausted.")
        issued = current + 1
        self._store(issued)
        return issued

    def _store(self, value: int) -> None:
        self._partition.write(0, struct.pack(_CELL_FMT, _MAGIC, _VERSION, value))
        self._partition.sync()


__all__ = ["IdCounter", "U64_MAX"]
