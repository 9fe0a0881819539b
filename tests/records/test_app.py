from __future__ import annotations

import time
from typing import AsyncIterator

import anyio
import pytest
from httpx import ASGITransport, AsyncClient

import services.records.app as records_app
from services.records.app import app, get_services
from services.records.context import RecordServices, StorageContext
from services.records.storage import InMemoryStore
from shared.config.settings import get_settings

AMY = {
    "name": "Amy",
    "date_of_birth": "01-01-1990",
    "gender": "F",
    "ethncity": "X",
    "address": "Y",
    "phone_number": "123",
    "email": "",
    "next_of_kin": "Bob",
    "kins_phone_number": "456",
}


@pytest.fixture
async def client(services: RecordServices) -> AsyncIterator[AsyncClient]:
    app.dependency_overrides[get_services] = lambda: services
    try:
        async with AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://test",
        ) as client:
            yield client
    finally:
        app.dependency_overrides.clear()


@pytest.mark.anyio
async def test_health(client: AsyncClient) -> None:
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "service": "records"}


@pytest.mark.anyio
async def test_patient_lifecycle(client: AsyncClient, clock) -> None:
    created = await client.post("/patients", json=AMY)
    assert created.status_code == 201
    patient = created.json()
    assert patient["ethnicity"] == "X"
    assert patient["registered_on"] == clock.now

    fetched = await client.get(f"/patients/{patient['id']}")
    assert fetched.json() == patient

    updated = await client.put(f"/patients/{patient['id']}", json={**AMY, "address": "Z"})
    assert updated.status_code == 200
    assert updated.json()["address"] == "Z"

    listing = await client.get("/patients")
    assert [item["id"] for item in listing.json()] == [patient["id"]]

    deleted = await client.delete(f"/patients/{patient['id']}")
    assert deleted.status_code == 204
    missing = await client.get(f"/patients/{patient['id']}")
    assert missing.status_code == 404


@pytest.mark.anyio
async def test_blank_fields_are_reported_as_problem(client: AsyncClient) -> None:
    response = await client.post("/patients", json={**AMY, "name": ""})

    assert response.status_code == 422
    assert response.headers["content-type"].startswith("application/problem+json")
    body = response.json()
    assert body["type"].endswith("/empty-fields")
    assert body["fields"] == ["name"]
    assert "Name" in body["detail"]


@pytest.mark.anyio
async def test_not_found_is_reported_as_problem(client: AsyncClient) -> None:
    response = await client.get("/doctors/77")

    assert response.status_code == 404
    body = response.json()
    assert body["detail"] == "Doctor with ID 77 can not be found"
    assert body["recordId"] == 77


@pytest.mark.anyio
async def test_doctor_assignment_and_room_equipment(client: AsyncClient) -> None:
    patient = (await client.post("/patients", json=AMY)).json()
    doctor = (
        await client.post(
            "/doctors",
            json={
                "name": "Dr. Grey",
                "email": "grey@example.org",
                "phone_number": "555",
                "speciality": "Surgery",
            },
        )
    ).json()
    room = (await client.post("/rooms", json={"name": "Ward", "location": "North"})).json()

    assigned = await client.put(
        f"/doctors/{doctor['id']}/current-patient", json={"patient_id": patient["id"]}
    )
    equipped = await client.post(f"/rooms/{room['id']}/equipment", json={"item": "Bed"})
    dangling = await client.put(
        f"/doctors/{doctor['id']}/current-patient", json={"patient_id": 999}
    )
    no_doctor = await client.put("/doctors/999/current-patient", json={"patient_id": 1})

    assert assigned.json()["current_patient"] == patient["id"]
    assert equipped.json()["equipment"] == ["Bed"]
    assert dangling.json()["current_patient"] == 999
    assert no_doctor.status_code == 404


@pytest.mark.anyio
async def test_auction_routes(client: AsyncClient, clock) -> None:
    created = await client.post(
        "/auctions",
        json={
            "item_name": "Vase",
            "description": "Ming",
            "starting_bid": 100,
            "auction_duration": 3600,
        },
    )

    assert created.status_code == 201
    auction = created.json()
    assert auction["current_bid"] == 100
    assert auction["auction_end_time"] == clock.now + 3600
    assert auction["winner"] is None
    assert (await client.get("/auctions")).json() == [auction]
    assert (await client.put(f"/auctions/{auction['id']}", json={})).status_code == 405


@pytest.mark.anyio
async def test_request_id_is_echoed(client: AsyncClient) -> None:
    response = await client.get("/health", headers={"X-Request-ID": "abc-123"})

    assert response.headers["X-Request-ID"] == "abc-123"
    assert "X-Response-Time" in response.headers


@pytest.mark.anyio
async def test_storage_failure_maps_to_503(clock) -> None:
    # Room for the partition table and one page per partition, nothing more.
    storage = StorageContext.build(InMemoryStore(page_size=512, max_pages=25), bucket_size_pages=1)
    app.dependency_overrides[get_services] = lambda: RecordServices(storage, clock=clock)
    try:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            response = await client.post("/patients", json=AMY)
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 503
    assert response.json()["type"].endswith("/storage-unavailable")


@pytest.mark.anyio
async def test_concurrent_first_requests_open_store_once(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    opened: list[StorageContext] = []

    def _open_storage(settings) -> StorageContext:
        time.sleep(0.05)
        context = StorageContext.build(InMemoryStore(page_size=512), bucket_size_pages=4)
        opened.append(context)
        return context

    monkeypatch.setattr(records_app, "open_storage", _open_storage)
    monkeypatch.setattr(records_app, "_services", None)
    statuses: list[int] = []

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:

        async def _list_patients() -> None:
            statuses.append((await client.get("/patients")).status_code)

        async with anyio.create_task_group() as group:
            for _ in range(4):
                group.start_soon(_list_patients)

        created = await client.post("/patients", json=AMY)
        listing = await client.get("/patients")

    assert statuses == [200] * 4
    assert len(opened) == 1
    assert [item["id"] for item in listing.json()] == [created.json()["id"]]


@pytest.mark.anyio
async def test_health_reports_configured_service_name(
    client: AsyncClient, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("RECORDS_SERVICE_NAME", "records-east")
    get_settings.cache_clear()
    try:
        response = await client.get("/health")
    finally:
        get_settings.cache_clear()

    assert response.json()["service"] == "records-east"
