"""Doctor records and patient assignment."""

from __future__ import annotations

from services.records.models import Doctor, DoctorPayload

from .base import MutableEntityService


class DoctorService(MutableEntityService[Doctor, DoctorPayload]):
    entity_name = "Doctor"
    record_model = Doctor
    required_fields = ("name", "email", "phone_number", "speciality")

    def assign_patient(self, doctor_id: int, patient_id: int) -> Doctor:
        """Set ``current_patient`` on a doctor; ``0`` clears the assignment.

        The patient id is stored as a raw reference and is not checked.
        """

        return self._modify(doctor_id, "patient_assigned", current_patient=patient_id)


__all__ = ["DoctorService"]
