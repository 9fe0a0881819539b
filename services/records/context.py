"""Process-wide storage context wiring the store to the entity services."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping

from shared.config.settings import DEFAULT_PARTITIONS, StorageSettings
from shared.observability.audit import AuditRepository
from shared.observability.logger import get_logger

from services.records.clock import Clock, MonotonicClock
from services.records.constants import COUNTER_OWNER
from services.records.entities import (
    AuctionService,
    DoctorService,
    PatientService,
    RoomService,
)
from services.records.models import Auction, Doctor, Patient, Room
from services.records.storage import (
    DurableMemory,
    FileMemory,
    IdCounter,
    InMemoryStore,
    KeyedCollection,
    MemoryManager,
    RecordCodec,
)

logger = get_logger(__name__)


def open_memory(settings: StorageSettings) -> DurableMemory:
    """Open the durable store selected by ``settings.backend``."""

    if settings.backend == "memory":
        return InMemoryStore(page_size=settings.page_size, max_pages=settings.max_pages)
    return FileMemory(
        settings.path, page_size=settings.page_size, max_pages=settings.max_pages
    )


@dataclass
class StorageContext:
    """Store, partition manager, counter and one collection per entity type.

    Build it once per process. Every partition is claimed while the context is
    built, so two collections mapped onto the same partition fail immediately.
    """

    memory: DurableMemory
    manager: MemoryManager
    counter: IdCounter
    patients: KeyedCollection[Patient]
    doctors: KeyedCollection[Doctor]
    rooms: KeyedCollection[Room]
    auctions: KeyedCollection[Auction]

    @classmethod
    def build(
        cls,
        memory: DurableMemory,
        *,
        bucket_size_pages: int = 16,
        counter_partition: int = 0,
        partitions: Mapping[str, int] | None = None,
    ) -> "StorageContext":
        layout = dict(DEFAULT_PARTITIONS if partitions is None else partitions)
        manager = MemoryManager(memory, bucket_size_pages=bucket_size_pages)
        counter = IdCounter(manager.claim(counter_partition, COUNTER_OWNER))

        def collection(name: str, model: type) -> KeyedCollection:
            partition = manager.claim(layout[name], name)
            return KeyedCollection(partition, RecordCodec(model), name=name)

        context = cls(
            memory=memory,
            manager=manager,
            counter=counter,
            patients=collection("patients", Patient),
            doctors=collection("doctors", Doctor),
            rooms=collection("rooms", Room),
            auctions=collection("auctions", Auction),
        )
        logger.info(
            "storage_context_ready",
            counter_partition=counter_partition,
            partitions=layout,
            last_id=counter.value,
        )
        return context

    def close(self) -> None:
        self.memory.sync()
        close = getattr(self.memory, "close", None)
        if close is not None:
            close()


def open_storage(settings: StorageSettings) -> StorageContext:
    """Open the configured store and build a :class:`StorageContext` over it."""

    return StorageContext.build(
        open_memory(settings),
        bucket_size_pages=settings.bucket_size_pages,
        counter_partition=settings.counter_partition,
        partitions=settings.partitions,
    )


@dataclass
class RecordServices:
    """Entity services sharing one storage context, counter and clock."""

    storage: StorageContext
    clock: Clock = field(default_factory=MonotonicClock)
    audit: AuditRepository | None = None
    patients: PatientService = field(init=False)
    doctors: DoctorService = field(init=False)
    rooms: RoomService = field(init=False)
    auctions: AuctionService = field(init=False)

    def __post_init__(self) -> None:
        storage = self.storage
        options = {"audit": self.audit}
        self.patients = PatientService(storage.patients, storage.counter, self.clock, **options)
        self.doctors = DoctorService(storage.doctors, storage.counter, self.clock, **options)
        self.rooms = RoomService(storage.rooms, storage.counter, self.clock, **options)
        self.auctions = AuctionService(storage.auctions, storage.counter, self.clock, **options)

    def close(self) -> None:
        self.storage.close()


__all__ = ["RecordServices", "StorageContext", "open_memory", "open_storage"]
