"""Generic validation and orchestration over one keyed collection."""

from __future__ import annotations

from typing import Any, ClassVar, Generic, TypeVar

from pydantic import BaseModel

from shared.observability.audit import AuditRepository, record_audit
from shared.observability.logger import get_logger

from services.records.clock import Clock
from services.records.errors import EmptyFieldsError, NotFoundError
from services.records.storage import IdCounter, KeyedCollection

RecordT = TypeVar("RecordT", bound=BaseModel)
PayloadT = TypeVar("PayloadT", bound=BaseModel)

logger = get_logger(__name__)


class EntityService(Generic[RecordT, PayloadT]):
    """Create, read and list records of one entity type.

    Subclasses declare the record model, the payload fields that must be
    non-blank (``required_fields``) and the numeric payload fields that must
    be non-zero whenever they are supplied (``positive_fields``).
    """

    entity_name: ClassVar[str]
    record_model: ClassVar[type[BaseModel]]
    required_fields: ClassVar[tuple[str, ...]] = ()
    positive_fields: ClassVar[tuple[str, ...]] = ()

    def __init__(
        self,
        collection: KeyedCollection[RecordT],
        counter: IdCounter,
        clock: Clock,
        *,
        audit: AuditRepository | None = None,
    ) -> None:
        self._collection = collection
        self._counter = counter
        self._clock = clock
        self._audit = audit

    # ---------------------------------------------------------------- validation

    def validate(self, payload: PayloadT) -> None:
        """Raise :class:`EmptyFieldsError` when ``payload`` breaks its contract."""

        blank = [
            name
            for name in self.required_fields
            if not str(getattr(payload, name) or "").strip()
        ]
        zero = [
            name
            for name in self.positive_fields
            if getattr(payload, name) is not None and getattr(payload, name) == 0
        ]
        if not blank and not zero:
            return

        parts: list[str] = []
        if blank:
            parts.append(
                "You must fill in the following fields: "
                + ", ".join(self._label(payload, name) for name in blank)
            )
        if zero:
            parts.append(
                "The following fields must be greater than zero: "
                + ", ".join(self._label(payload, name) for name in zero)
            )
        raise EmptyFieldsError(". ".join(parts), fields=blank + zero)

    @staticmethod
    def _label(payload: BaseModel, name: str) -> str:
        field = type(payload).model_fields.get(name)
        return (field.title if field is not None else None) or name

    # -------------------------------------------------------------- operations

    def create(self, payload: PayloadT) -> RecordT:
        self.validate(payload)
        record_id = self._counter.next_id()
        record = self._build(record_id, payload, self._clock())
        self._collection.insert(record_id, record)
        self._emit("created", record_id)
        return record

    def get(self, record_id: int) -> RecordT:
        record = self._collection.get(record_id)
        if record is None:
            raise NotFoundError(self.entity_name, record_id)
        return record

    def list(self) -> list[RecordT]:
        """Return every stored record in ascending id order."""

        return [record for _, record in self._collection.items()]

    def count(self) -> int:
        return len(self._collection)

    # ------------------------------------------------------------------ hooks

    def _payload_values(self, payload: PayloadT) -> dict[str, Any]:
        """Return the payload fields that also exist on the record model."""

        record_fields = self.record_model.model_fields
        return {
            name: getattr(payload, name)
            for name in type(payload).model_fields
            if name in record_fields
        }

    def _defaults(self, payload: PayloadT, now: int) -> dict[str, Any]:
        """Return server-owned fields stamped at creation time."""

        return {}

    def _build(self, record_id: int, payload: PayloadT, now: int) -> RecordT:
        values = self._payload_values(payload)
        values.update(self._defaults(payload, now))
        return self.record_model(id=record_id, **values)  # type: ignore[return-value]

    def _emit(self, action: str, record_id: int, **metadata: Any) -> None:
        logger.info(
            f"record_{action}",
            entity=self.entity_name,
            record_id=record_id,
            collection=self._collection.name,
        )
        record_audit(
            f"record.{action}",
            entity=self.entity_name,
            record_id=record_id,
            metadata=metadata,
            repository=self._audit,
        )


class MutableEntityService(EntityService[RecordT, PayloadT]):
    """Entity service that also supports whole-record update and deletion."""

    def update(self, record_id: int, payload: PayloadT) -> RecordT:
        """Overwrite the payload-covered fields of an existing record.

        ``id``, creation stamps and fields outside the payload type are kept.
        """

        self.validate(payload)
        existing = self.get(record_id)
        updated = existing.model_copy(update=self._payload_values(payload))
        self._collection.insert(record_id, updated)
        self._emit("updated", record_id)
        return updated

    def delete(self, record_id: int) -> None:
        if self._collection.remove(record_id) is None:
            raise NotFoundError(self.entity_name, record_id)
        self._emit("deleted", record_id)

    def _modify(self, record_id: int, action: str, **changes: Any) -> RecordT:
        existing = self.get(record_id)
        updated = existing.model_copy(update=changes)
        self._collection.insert(record_id, updated)
        self._emit(action, record_id, **changes)
        return updated


__all__ = ["EntityService", "MutableEntityService"]
