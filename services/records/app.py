"""FastAPI application exposing the patient, doctor, room and auction records."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, cast

from fastapi import APIRouter, Depends, FastAPI, Request, Response, status
from fastapi.responses import JSONResponse

from shared.config.settings import get_settings
from shared.http.errors import (
    PROBLEM_BASE_URI,
    ProblemDetails,
    problem_response,
    register_exception_handlers,
)
from shared.observability.audit import get_audit_repository
from shared.observability.logger import configure_logging, get_logger
from shared.observability.middleware import (
    CorrelationIdMiddleware,
    RequestTimingMiddleware,
)

from services.records.context import RecordServices, open_storage
from services.records.models import (
    Auction,
    AuctionPayload,
    Doctor,
    DoctorPayload,
    EquipmentItem,
    Patient,
    PatientAssignment,
    PatientPayload,
    Room,
    RoomPayload,
)
from services.records.storage import StorageError

configure_logging(
    service_name=get_settings().app.service_name, level=get_settings().logging.level
)
logger = get_logger(__name__)

_services: RecordServices | None = None


async def get_services() -> RecordServices:
    """Return the process-wide :class:`RecordServices`, opening the store on first use.

    Runs on the event loop so the first concurrent requests cannot each open
    the store.
    """

    global _services
    if _services is None:
        _services = RecordServices(
            open_storage(get_settings().storage), audit=get_audit_repository()
        )
    return _services


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    global _services
    yield
    if _services is not None:
        _services.close()
        _services = None


app = FastAPI(title="Records Service", lifespan=lifespan)

app.add_middleware(RequestTimingMiddleware)
app.add_middleware(CorrelationIdMiddleware)
register_exception_handlers(app)


def _storage_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    error = cast(StorageError, exc)
    logger.exception(
        "storage_failure",
        error=str(error),
        error_type=type(error).__name__,
        path=str(request.url),
    )
    problem = ProblemDetails(
        type=f"{PROBLEM_BASE_URI}/storage-unavailable",
        title="Storage Unavailable",
        status=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail="The record store could not complete the request.",
        instance=str(request.url),
    )
    return problem_response(problem)


app.add_exception_handler(StorageError, _storage_exception_handler)


@app.get("/health", tags=["health"])
async def health() -> dict[str, str]:
    """Return a simple health payload for orchestration checks."""

    return {"status": "ok", "service": get_settings().app.service_name}


patients = APIRouter(prefix="/patients", tags=["patients"])
doctors = APIRouter(prefix="/doctors", tags=["doctors"])
rooms = APIRouter(prefix="/rooms", tags=["rooms"])
auctions = APIRouter(prefix="/auctions", tags=["auctions"])


# ------------------------------------------------------------------ patients


@patients.post("", response_model=Patient, status_code=status.HTTP_201_CREATED)
async def create_patient(
    payload: PatientPayload, services: RecordServices = Depends(get_services)
) -> Patient:
    return services.patients.create(payload)


@patients.get("", response_model=list[Patient])
async def list_patients(services: RecordServices = Depends(get_services)) -> list[Patient]:
    return services.patients.list()


@patients.get("/{patient_id}", response_model=Patient)
async def get_patient(
    patient_id: int, services: RecordServices = Depends(get_services)
) -> Patient:
    return services.patients.get(patient_id)


@patients.put("/{patient_id}", response_model=Patient)
async def update_patient(
    patient_id: int,
    payload: PatientPayload,
    services: RecordServices = Depends(get_services),
) -> Patient:
    return services.patients.update(patient_id, payload)


@patients.delete("/{patient_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_patient(
    patient_id: int, services: RecordServices = Depends(get_services)
) -> Response:
    services.patients.delete(patient_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ------------------------------------------------------------------- doctors


@doctors.post("", response_model=Doctor, status_code=status.HTTP_201_CREATED)
async def create_doctor(
    payload: DoctorPayload, services: RecordServices = Depends(get_services)
) -> Doctor:
    return services.doctors.create(payload)


@doctors.get("", response_model=list[Doctor])
async def list_doctors(services: RecordServices = Depends(get_services)) -> list[Doctor]:
    return services.doctors.list()


@doctors.get("/{doctor_id}", response_model=Doctor)
async def get_doctor(
    doctor_id: int, services: RecordServices = Depends(get_services)
) -> Doctor:
    return services.doctors.get(doctor_id)


@doctors.put("/{doctor_id}", response_model=Doctor)
async def update_doctor(
    doctor_id: int,
    payload: DoctorPayload,
    services: RecordServices = Depends(get_services),
) -> Doctor:
    return services.doctors.update(doctor_id, payload)


@doctors.delete("/{doctor_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_doctor(
    doctor_id: int, services: RecordServices = Depends(get_services)
) -> Response:
    services.doctors.delete(doctor_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@doctors.put("/{doctor_id}/current-patient", response_model=Doctor)
async def assign_patient(
    doctor_id: int,
    assignment: PatientAssignment,
    services: RecordServices = Depends(get_services),
) -> Doctor:
    """Point a doctor at a patient id, or clear it with ``patient_id`` 0."""

    return services.doctors.assign_patient(doctor_id, assignment.patient_id)


# --------------------------------------------------------------------- rooms


@rooms.post("", response_model=Room, status_code=status.HTTP_201_CREATED)
async def create_room(
    payload: RoomPayload, services: RecordServices = Depends(get_services)
) -> Room:
    return services.rooms.create(payload)


@rooms.get("", response_model=list[Room])
async def list_rooms(services: RecordServices = Depends(get_services)) -> list[Room]:
    return services.rooms.list()


@rooms.get("/{room_id}", response_model=Room)
async def get_room(room_id: int, services: RecordServices = Depends(get_services)) -> Room:
    return services.rooms.get(room_id)


@rooms.put("/{room_id}", response_model=Room)
async def update_room(
    room_id: int,
    payload: RoomPayload,
    services: RecordServices = Depends(get_services),
) -> Room:
    return services.rooms.update(room_id, payload)


@rooms.delete("/{room_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_room(room_id: int, services: RecordServices = Depends(get_services)) -> Response:
    services.rooms.delete(room_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@rooms.post("/{room_id}/equipment", response_model=Room)
async def add_equipment(
    room_id: int,
    equipment: EquipmentItem,
    services: RecordServices = Depends(get_services),
) -> Room:
    return services.rooms.add_equipment(room_id, equipment.item)


# ------------------------------------------------------------------ auctions


@auctions.post("", response_model=Auction, status_code=status.HTTP_201_CREATED)
async def create_auction(
    payload: AuctionPayload, services: RecordServices = Depends(get_services)
) -> Auction:
    return services.auctions.create(payload)


@auctions.get("", response_model=list[Auction])
async def list_auctions(services: RecordServices = Depends(get_services)) -> list[Auction]:
    return services.auctions.list()


@auctions.get("/{auction_id}", response_model=Auction)
async def get_auction(
    auction_id: int, services: RecordServices = Depends(get_services)
) -> Auction:
    return services.auctions.get(auction_id)


app.include_router(patients)
app.include_router(doctors)
app.include_router(rooms)
app.include_router(auctions)


def get_app() -> FastAPI:
    """Return the FastAPI app instance."""

    return app


__all__ = ["app", "get_app", "get_services", "health"]
