import pytest
from httpx import AsyncClient

from medtrack.shared.constants import PermissionLevel, Role
from tests.helpers import auth_headers

BASE = "/api/v1/appointments/"


@pytest.mark.asyncio
async def test_appointment_lifecycle(client: AsyncClient, create_patient_func, db):
    patient, profile = await create_patient_func()
    headers = auth_headers(patient)

    response = await client.post(
        BASE,
        json={
            "patientProfileId": str(profile.id),
            "title": "Cardiology check-up",
            "dateTime": "2024-05-20T09:30:00Z",
            "location": "Hospital Clinic, room 4",
        },
        headers=headers,
    )
    assert response.status_code == 201
    appointment = response.json()
    assert appointment["status"] == "SCHEDULED"

    response = await client.patch(
        f"/api/v1/appointments/{appointment['id']}",
        json={"patientProfileId": str(profile.id), "status": "COMPLETED"},
        headers=headers,
    )
    assert response.status_code == 200
    assert response.json()["status"] == "COMPLETED"
    assert response.json()["location"] == "Hospital Clinic, room 4"

    response = await client.delete(
        f"/api/v1/appointments/{appointment['id']}",
        params={"patientProfileId": str(profile.id)},
        headers=headers,
    )
    assert response.status_code == 204
    assert db["Appointment"] == {}


@pytest.mark.asyncio
async def test_list_orders_by_date_and_filters(client: AsyncClient, create_patient_func):
    patient, profile = await create_patient_func()
    headers = auth_headers(patient)
    for title, when, status in [
        ("Dentist", "2024-06-01T10:00:00Z", "SCHEDULED"),
        ("Blood test", "2024-05-01T08:00:00Z", "COMPLETED"),
        ("Eye exam", "2024-07-01T12:00:00Z", "CANCELLED"),
    ]:
        await client.post(
            BASE,
            json={
                "patientProfileId": str(profile.id),
                "title": title,
                "dateTime": when,
                "status": status,
            },
            headers=headers,
        )

    response = await client.get(
        BASE, params={"patientProfileId": str(profile.id)}, headers=headers
    )
    assert [a["title"] for a in response.json()["items"]] == [
        "Blood test",
        "Dentist",
        "Eye exam",
    ]

    response = await client.get(
        BASE,
        params={"patientProfileId": str(profile.id), "status": "CANCELLED"},
        headers=headers,
    )
    assert [a["title"] for a in response.json()["items"]] == ["Eye exam"]

    response = await client.get(
        BASE,
        params={
            "patientProfileId": str(profile.id),
            "from": "2024-05-15T00:00:00Z",
            "to": "2024-06-15T00:00:00Z",
        },
        headers=headers,
    )
    assert [a["title"] for a in response.json()["items"]] == ["Dentist"]


@pytest.mark.asyncio
async def test_rejects_unknown_status(client: AsyncClient, create_patient_func):
    patient, profile = await create_patient_func()

    response = await client.post(
        BASE,
        json={
            "patientProfileId": str(profile.id),
            "title": "Dentist",
            "dateTime": "2024-06-01T10:00:00Z",
            "status": "MAYBE",
        },
        headers=auth_headers(patient),
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_read_caregiver_cannot_create(
    client: AsyncClient, create_patient_func, create_user_func, grant_func
):
    _, profile = await create_patient_func()
    caregiver = await create_user_func(role=Role.CAREGIVER)
    await grant_func(profile, caregiver, level=PermissionLevel.READ)

    response = await client.post(
        BASE,
        json={
            "patientProfileId": str(profile.id),
            "title": "Dentist",
            "dateTime": "2024-06-01T10:00:00Z",
        },
        headers=auth_headers(caregiver),
    )
    assert response.status_code == 403
    assert response.json()["detail"] == "NO_ACCESS"
