"""Fatal error types raised by the records storage layer."""

from __future__ import annotations


class StorageError(RuntimeError):
    """Base error for storage layer operations.

    Storage errors are not business errors: they abort the current call and
    signal that the store is unusable until an operator intervenes.
    """


class MemoryAccessError(StorageError):
    """Raised when a read or write falls outside the addressable range."""

    def __init__(self, offset: int, length: int, size: int) -> None:
        super().__init__(
            f"Access of {length} bytes at offset {offset} exceeds memory size {size}."
        )
        self.offset = offset
        self.length = length
        self.size = size


class MemoryGrowError(StorageError):
    """Raised when a partition cannot be grown to hold more data."""


class PartitionConflictError(StorageError):
    """Raised when two collections claim the same partition."""

    def __init__(self, region_id: int, owner: str, existing_owner: str) -> None:
        super().__init__(
            f"Partition {region_id} is already owned by '{existing_owner}' "
            f"and cannot be claimed by '{owner}'."
        )
        self.region_id = region_id
        self.owner = owner
        self.existing_owner = existing_owner


class CounterOverflowError(StorageError):
    """Raised when the identifier counter would exceed the u64 range."""


class EncodingOverflowError(StorageError):
    """Raised when an encoded record exceeds its declared size bound."""

    def __init__(self, record_type: str, size: int, max_size: int) -> None:
        super().__init__(
            f"Encoded {record_type} is {size} bytes; the bound is {max_size} bytes."
        )
        self.record_type = record_type
        self.size = size
        self.max_size = max_size


class RecordIntegrityError(StorageError):
    """Raised when stored bytes cannot be decoded into their record type."""


__all__ = [
    "CounterOverflowError",
    "EncodingOverflowError",
    "MemoryAccessError",
    "MemoryGrowError",
    "PartitionConflictError",
    "RecordIntegrityError",
    "StorageError",
]
