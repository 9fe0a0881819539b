"""Bounded encoding of records and keys for collection storage."""

from __future__ import annotations

import struct
from typing import Generic, TypeVar

from pydantic import BaseModel, ValidationError

from services.records.storage.errors import EncodingOverflowError, RecordIntegrityError

U64_MAX = 2**64 - 1
_KEY_FMT = ">Q"


RecordT = TypeVar("RecordT", bound=BaseModel)


def encode_key(key: int) -> bytes:
    """Encode ``key`` big-endian so byte order matches numeric order."""

    if not 0 <= key <= U64_MAX:
        raise ValueError(f"Key {key} does not fit in an unsigned 64-bit integer.")
    return struct.pack(_KEY_FMT, key)


def decode_key(data: bytes) -> int:
    (key,) = struct.unpack(_KEY_FMT, data)
    return key


class RecordCodec(Generic[RecordT]):
    """Serialize one pydantic record type to compact JSON bytes.

    ``max_size`` defaults to the model's ``MAX_SIZE``. Collections size their
    slots from it, so exceeding it is a fatal error rather than a warning.
    """

    def __init__(self, model: type[RecordT], *, max_size: int | None = None) -> None:
        bound = max_size if max_size is not None else getattr(model, "MAX_SIZE", None)
        if bound is None or bound <= 0:
            raise ValueError(f"{model.__name__} must declare a positive MAX_SIZE")
        self.model = model
        self.max_size = int(bound)

    @property
    def record_type(self) -> str:
        return self.model.__name__

    def encode(self, record: RecordT) -> bytes:
        data = record.model_dump_json().encode("utf-8")
        if len(data) > self.max_size:
            raise EncodingOverflowError(self.record_type, len(data), self.max_size)
        return data

    def decode(self, data: bytes) -> RecordT:
        try:
            return self.model.model_validate_json(data)
        except ValidationError as exc:
            raise RecordIntegrityError(
                f"Stored bytes are not a valid {self.record_type}: {exc.error_count()} error(s)."
            ) from exc


__all__ = [
    "RecordCodec",
    "U64_MAX",
    "decode_key",
    "encode_key",
]
