"""Room record and payload models."""

from __future__ import annotations

from typing import ClassVar

from pydantic import BaseModel, Field


class RoomPayload(BaseModel):
    """Caller supplied fields for creating or replacing a room."""

    name: str = Field(default="", title="Name")
    location: str = Field(default="", title="Location")
    current_doctor_id: int = Field(default=0, ge=0, title="Current Doctor")


class Room(BaseModel):
    """Stored room record. ``equipment`` is managed separately from the payload."""

    MAX_SIZE: ClassVar[int] = 4096

    id: int = Field(ge=0)
    name: str
    location: str
    current_doctor_id: int = Field(default=0, ge=0)
    equipment: list[str] = Field(default_factory=list)


class EquipmentItem(BaseModel):
    """Body of a request adding one piece of equipment to a room."""

    item: str = Field(default="", title="Equipment")


__all__ = ["EquipmentItem", "Room", "RoomPayload"]
