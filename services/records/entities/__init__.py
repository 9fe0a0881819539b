"""Entity services layered over the keyed collections."""

from .auctions import AuctionService
from .base import EntityService, MutableEntityService
from .doctors import DoctorService
from .patients import PatientService
from .rooms import RoomService

__all__ = [
    "AuctionService",
    "DoctorService",
    "EntityService",
    "MutableEntityService",
    "PatientService",
    "RoomService",
]
