import pytest
from httpx import AsyncClient

from medtrack.shared.constants import PermissionLevel, PermissionStatus, Role
from tests.helpers import auth_headers


@pytest.mark.asyncio
async def test_owner_lists_permissions_with_caregiver_identity(
    client: AsyncClient, create_patient_func, create_user_func, grant_func
):
    patient, profile = await create_patient_func()
    caregiver = await create_user_func(role=Role.CAREGIVER)
    permission = await grant_func(profile, caregiver, status=PermissionStatus.PENDING)

    response = await client.get(
        f"/api/v1/permissions/by-patient/{profile.id}", headers=auth_headers(patient)
    )
    assert response.status_code == 200
    rows = response.json()
    assert len(rows) == 1
    assert rows[0]["id"] == str(permission.id)
    assert rows[0]["status"] == "PENDING"
    assert rows[0]["caregiver"] == {
        "id": str(caregiver.id),
        "email": caregiver.email,
        "role": "CAREGIVER",
    }


@pytest.mark.asyncio
async def test_non_owner_cannot_list(
    client: AsyncClient, create_patient_func, create_user_func, grant_func
):
    _, profile = await create_patient_func()
    other_patient, _ = await create_patient_func()
    caregiver = await create_user_func(role=Role.CAREGIVER)
    await grant_func(profile, caregiver, level=PermissionLevel.ADMIN)

    for user in (other_patient, caregiver):
        response = await client.get(
            f"/api/v1/permissions/by-patient/{profile.id}", headers=auth_headers(user)
        )
        assert response.status_code == 403
        assert response.json()["detail"] == "NO_ACCESS"


@pytest.mark.asyncio
async def test_owner_updates_level_and_status(
    client: AsyncClient, create_patient_func, create_user_func, grant_func
):
    patient, profile = await create_patient_func()
    caregiver = await create_user_func(role=Role.CAREGIVER)
    permission = await grant_func(profile, caregiver, status=PermissionStatus.PENDING)

    response = await client.patch(
        f"/api/v1/permissions/{permission.id}",
        json={"status": "ACCEPTED", "level": "WRITE"},
        headers=auth_headers(patient),
    )
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ACCEPTED"
    assert data["level"] == "WRITE"


@pytest.mark.asyncio
async def test_caregiver_cannot_escalate_own_permission(
    client: AsyncClient, create_patient_func, create_user_func, grant_func
):
    _, profile = await create_patient_func()
    caregiver = await create_user_func(role=Role.CAREGIVER)
    permission = await grant_func(profile, caregiver)

    response = await client.patch(
        f"/api/v1/permissions/{permission.id}",
        json={"level": "ADMIN"},
        headers=auth_headers(caregiver),
    )
    assert response.status_code == 403
    assert permission.level == PermissionLevel.READ


@pytest.mark.asyncio
async def test_update_unknown_permission(client: AsyncClient, create_patient_func):
    patient, _ = await create_patient_func()

    response = await client.patch(
        "/api/v1/permissions/not-an-id", json={"level": "READ"}, headers=auth_headers(patient)
    )
    assert response.status_code == 403
