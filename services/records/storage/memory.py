"""Durable byte stores backing the partition manager.

A store is a flat, byte addressable memory that grows in whole pages. The
partition manager is the only component that talks to a store directly.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Protocol

from services.records.storage.errors import MemoryAccessError, StorageError

DEFAULT_PAGE_SIZE = 4096


class DurableMemory(Protocol):
    """Protocol implemented by durable byte stores."""

    page_size: int

    def size(self) -> int:
        """Return the current size of the memory in pages."""

    def grow(self, pages: int) -> int:
        """Grow by ``pages`` pages; return the previous size or ``-1``."""

    def read(self, offset: int, length: int) -> bytes:
        """Return ``length`` bytes starting at ``offset``."""

    def write(self, offset: int, data: bytes) -> None:
        """Overwrite the bytes starting at ``offset`` with ``data``."""

    def sync(self) -> None:
        """Flush pending writes to durable media."""


def _check_range(offset: int, length: int, size_bytes: int) -> None:
    if offset < 0 or length < 0 or offset + length > size_bytes:
        raise MemoryAccessError(offset, length, size_bytes)


class InMemoryStore:
    """Volatile store used for tests and throwaway deployments."""

    def __init__(
        self, *, page_size: int = DEFAULT_PAGE_SIZE, max_pages: int | None = None
    ) -> None:
        self.page_size = page_size
        self._max_pages = max_pages
        self._buffer = bytearray()

    def size(self) -> int:
        return len(self._buffer) // self.page_size

    def grow(self, pages: int) -> int:
        previous = self.size()
        if self._max_pages is not None and previous + pages > self._max_pages:
            return -1
        self._buffer.extend(bytes(pages * self.page_size))
        return previous

    def read(self, offset: int, length: int) -> bytes:
        _check_range(offset, length, len(self._buffer))
        return bytes(self._buffer[offset : offset + length])

    def write(self, offset: int, data: bytes) -> None:
        _check_range(offset, len(data), len(self._buffer))
        self._buffer[offset : offset + len(data)] = data

    def sync(self) -> None:
        return None


class FileMemory:
    """Single-file store; every ``sync`` issues an ``fsync``.

    The file length is always a whole number of pages. A file whose length is
    not page aligned was written with a different page size and is rejected.
    """

    def __init__(
        self,
        path: str | Path,
        *,
        page_size: int = DEFAULT_PAGE_SIZE,
        max_pages: int | None = None,
    ) -> None:
        self._path = Path(path)
        self.page_size = page_size
        self._max_pages = max_pages

        self._path.parent.mkdir(parents=True, exist_ok=True)
        mode = "r+b" if self._path.exists() else "w+b"
        self._handle = open(self._path, mode, buffering=0)
        self._handle.seek(0, os.SEEK_END)
        self._length = self._handle.tell()
        if self._length % page_size:
            self._handle.close()
            raise StorageError(
                f"{self._path} is {self._length} bytes, not a multiple of the "
                f"{page_size} byte page size."
            )

    @property
    def path(self) -> Path:
        """Return the backing file path."""

        return self._path

    def size(self) -> int:
        return self._length // self.page_size

    def grow(self, pages: int) -> int:
        previous = self.size()
        if self._max_pages is not None and previous + pages > self._max_pages:
            return -1
        self._length += pages * self.page_size
        self._handle.truncate(self._length)
        return previous

    def read(self, offset: int, length: int) -> bytes:
        _check_range(offset, length, self._length)
        self._handle.seek(offset)
        data = self._handle.read(length)
        if len(data) != length:
            raise StorageError(f"Short read from {self._path} at offset {offset}.")
        return data

    def write(self, offset: int, data: bytes) -> None:
        _check_range(offset, len(data), self._length)
        self._handle.seek(offset)
        self._handle.write(data)

    def sync(self) -> None:
        self._handle.flush()
        os.fsync(self._handle.fileno())

    def close(self) -> None:
        """Sync and close the backing file."""

        if self._handle.closed:
            return
        try:
            self.sync()
        finally:
            self._handle.close()


__all__ = ["DEFAULT_PAGE_SIZE", "DurableMemory", "FileMemory", "InMemoryStore"]
