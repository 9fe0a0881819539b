"""Patient record and payload models."""

from __future__ import annotations

from typing import ClassVar

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class PatientPayload(BaseModel):
    """Caller supplied fields for creating or replacing a patient."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(default="", title="Name")
    date_of_birth: str = Field(default="", title="DOB", description="Format: DD-MM-YYYY")
    age: int | None = Field(default=None, ge=0, title="Age")
    gender: str = Field(default="", title="Gender")
    ethnicity: str = Field(
        default="",
        title="Ethnicity",
        validation_alias=AliasChoices("ethnicity", "ethncity"),
    )
    address: str = Field(default="", title="Address")
    phone_number: str = Field(default="", title="Phone No.")
    email: str = Field(default="", title="Email")
    next_of_kin: str = Field(default="", title="Next of Kin")
    kins_phone_number: str = Field(default="", title="Kin's Phone No.")
    diagnostics: str = Field(default="", title="Diagnostics")


class Patient(BaseModel):
    """Stored patient record."""

    MAX_SIZE: ClassVar[int] = 2048

    model_config = ConfigDict(populate_by_name=True)

    id: int = Field(ge=0)
    name: str
    date_of_birth: str
    age: int | None = Field(default=None, ge=0)
    gender: str
    ethnicity: str = Field(validation_alias=AliasChoices("ethnicity", "ethncity"))
    address: str
    phone_number: str
    email: str = ""
    next_of_kin: str
    kins_phone_number: str
    registered_on: int = Field(ge=0, description="Creation time in nanoseconds since the epoch")
    diagnostics: str = ""


__all__ = ["Patient", "PatientPayload"]
