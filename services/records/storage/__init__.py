"""Durable storage primitives for the records service."""

from .cell import IdCounter
from .codec import RecordCodec, decode_key, encode_key
from .collection import KeyedCollection
from .errors import (
    CounterOverflowError,
    EncodingOverflowError,
    MemoryAccessError,
    MemoryGrowError,
    PartitionConflictError,
    RecordIntegrityError,
    StorageError,
)
from .memory import DurableMemory, FileMemory, InMemoryStore
from .partitions import MAX_PARTITIONS, MemoryManager, Partition

__all__ = [
    "CounterOverflowError",
    "DurableMemory",
    "EncodingOverflowError",
    "FileMemory",
    "IdCounter",
    "InMemoryStore",
    "KeyedCollection",
    "MAX_PARTITIONS",
    "MemoryAccessError",
    "MemoryGrowError",
    "MemoryManager",
    "Partition",
    "PartitionConflictError",
    "RecordCodec",
    "RecordIntegrityError",
    "StorageError",
    "decode_key",
    "encode_key",
]
