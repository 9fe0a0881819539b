"""Patient records."""

from __future__ import annotations

from typing import Any

from services.records.models import Patient, PatientPayload

from .base import MutableEntityService


class PatientService(MutableEntityService[Patient, PatientPayload]):
    entity_name = "Patient"
    record_model = Patient
    required_fields = (
        "name",
        "date_of_birth",
        "gender",
        "ethnicity",
        "address",
        "phone_number",
        "next_of_kin",
        "kins_phone_number",
    )
    # ``age`` is optional but a supplied age of zero is rejected.
    positive_fields = ("age",)

    def _defaults(self, payload: PatientPayload, now: int) -> dict[str, Any]:
        return {"registered_on": now}


__all__ = ["PatientService"]
