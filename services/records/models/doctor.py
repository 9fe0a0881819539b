"""Doctor record and payload models."""

from __future__ import annotations

from typing import ClassVar

from pydantic import BaseModel, Field


class DoctorPayload(BaseModel):
    """Caller supplied fields for creating or replacing a doctor."""

    name: str = Field(default="", title="Name")
    email: str = Field(default="", title="Email")
    phone_number: str = Field(default="", title="Phone No.")
    speciality: str = Field(default="", title="Speciality")


class Doctor(BaseModel):
    """Stored doctor record; ``current_patient`` is a raw patient id, 0 when unset."""

    MAX_SIZE: ClassVar[int] = 2048

    id: int = Field(ge=0)
    name: str
    email: str
    phone_number: str
    speciality: str
    current_patient: int = Field(default=0, ge=0)


class PatientAssignment(BaseModel):
    """Body of a request assigning a patient to a doctor."""

    patient_id: int = Field(ge=0)


__all__ = ["Doctor", "DoctorPayload", "PatientAssignment"]
