from __future__ import annotations

import pytest

from services.records.context import RecordServices
from services.records.errors import EmptyFieldsError, NotFoundError
from services.records.models import DoctorPayload, PatientPayload


def _doctor(**overrides: str) -> DoctorPayload:
    values = {
        "name": "Dr. Grey",
        "email": "grey@example.org",
        "phone_number": "555-0100",
        "speciality": "Surgery",
    }
    values.update(overrides)
    return DoctorPayload(**values)


def _patient_id(services: RecordServices) -> int:
    payload = PatientPayload(
        name="Amy",
        date_of_birth="01-01-1990",
        gender="F",
        ethnicity="X",
        address="Y",
        phone_number="123",
        next_of_kin="Bob",
        kins_phone_number="456",
    )
    return services.patients.create(payload).id


def test_create_doctor_starts_without_patient(services: RecordServices) -> None:
    doctor = services.doctors.create(_doctor())

    assert doctor.current_patient == 0
    assert services.doctors.get(doctor.id).speciality == "Surgery"


def test_create_doctor_requires_contact_fields(services: RecordServices) -> None:
    with pytest.raises(EmptyFieldsError) as excinfo:
        services.doctors.create(_doctor(email="", speciality=""))

    assert excinfo.value.fields == ["email", "speciality"]


def test_ids_are_shared_across_entity_types(services: RecordServices) -> None:
    patient_id = _patient_id(services)
    doctor = services.doctors.create(_doctor())

    assert doctor.id == patient_id + 1
    with pytest.raises(NotFoundError):
        services.doctors.get(patient_id)


def test_assign_patient_survives_update(services: RecordServices) -> None:
    patient_id = _patient_id(services)
    doctor = services.doctors.create(_doctor())

    assigned = services.doctors.assign_patient(doctor.id, patient_id)
    updated = services.doctors.update(doctor.id, _doctor(name="Dr. Shepherd"))

    assert assigned.current_patient == patient_id
    assert updated.name == "Dr. Shepherd"
    assert updated.current_patient == patient_id


def test_assign_patient_stores_raw_reference(services: RecordServices) -> None:
    doctor = services.doctors.create(_doctor())

    assert services.doctors.assign_patient(doctor.id, 404).current_patient == 404
    assert services.doctors.assign_patient(doctor.id, 0).current_patient == 0

    with pytest.raises(NotFoundError) as excinfo:
        services.doctors.assign_patient(999, 0)
    assert excinfo.value.entity == "Doctor"


def test_assignment_is_audited(services: RecordServices, audit) -> None:
    doctor = services.doctors.create(_doctor())
    services.doctors.assign_patient(doctor.id, 7)

    assert audit.events()[-1] == "record.patient_assigned"
    assert audit.entries[-1].metadata == {"current_patient": 7}
