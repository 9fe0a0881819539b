"""Record and payload models stored by the records service."""

from .auction import Auction, AuctionPayload
from .doctor import Doctor, DoctorPayload, PatientAssignment
from .patient import Patient, PatientPayload
from .room import EquipmentItem, Room, RoomPayload

__all__ = [
    "Auction",
    "AuctionPayload",
    "Doctor",
    "DoctorPayload",
    "EquipmentItem",
    "Patient",
    "PatientAssignment",
    "PatientPayload",
    "Room",
    "RoomPayload",
]
