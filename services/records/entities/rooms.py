"""Room records and their equipment lists."""

from __future__ import annotations

from services.records.errors import EmptyFieldsError
from services.records.models import Room, RoomPayload

from .base import MutableEntityService


class RoomService(MutableEntityService[Room, RoomPayload]):
    entity_name = "Room"
    record_model = Room
    required_fields = ("name", "location")

    def add_equipment(self, room_id: int, item: str) -> Room:
        """Append ``item`` to the room's equipment list."""

        item = item.strip()
        if not item:
            raise EmptyFieldsError(
                "You must fill in the following fields: Equipment", fields=["item"]
            )
        room = self.get(room_id)
        return self._modify(room_id, "equipment_added", equipment=[*room.equipment, item])


__all__ = ["RoomService"]
