from datetime import datetime, timedelta, timezone

import pytest
from httpx import AsyncClient

from medtrack.modules.notifications.models import (
    Notification,
    NotificationPriority,
    NotificationStatus,
    NotificationType,
)
from medtrack.shared.constants import PermissionStatus, Role
from tests.helpers import auth_headers

BASE = "/api/v1/notifications/"


async def _notify(user, **overrides) -> Notification:
    priority = overrides.pop("priority", NotificationPriority.MEDIUM)
    data = {
        "user_id": str(user.id),
        "type": NotificationType.GENERAL_INFO,
        "title": "Hello",
        "message": "Welcome to MedTrack",
        "priority": priority,
        "priority_rank": priority.rank,
    }
    data.update(overrides)
    notification = Notification(**data)
    await notification.insert()
    return notification


@pytest.mark.asyncio
async def test_create_for_self(client: AsyncClient, create_user_func):
    user = await create_user_func()

    response = await client.post(
        BASE,
        json={
            "userId": str(user.id),
            "type": "MEDICATION_REMINDER",
            "title": "Take your pill",
            "message": "Ibuprofen 400mg",
            "metadata": {"medicationId": "abc"},
        },
        headers=auth_headers(user),
    )
    assert response.status_code == 201
    data = response.json()
    assert data["priority"] == "MEDIUM"
    assert data["status"] == "UNREAD"
    assert data["metadata"] == {"medicationId": "abc"}
    assert "priorityRank" not in data


@pytest.mark.asyncio
async def test_create_for_unknown_user(client: AsyncClient, create_user_func):
    user = await create_user_func()

    response = await client.post(
        BASE,
        json={
            "userId": "000000000000000000000000",
            "type": "GENERAL_INFO",
            "title": "Hi",
            "message": "Hi",
        },
        headers=auth_headers(user),
    )
    assert response.status_code == 404
    assert response.json()["detail"] == "USER_NOT_FOUND"


@pytest.mark.asyncio
async def test_caregiver_notifies_patient_only_when_accepted(
    client: AsyncClient, create_patient_func, create_user_func, grant_func
):
    patient, profile = await create_patient_func()
    caregiver = await create_user_func(role=Role.CAREGIVER)
    stranger = await create_user_func(role=Role.CAREGIVER)
    permission = await grant_func(profile, caregiver, status=PermissionStatus.PENDING)
    body = {
        "userId": str(patient.id),
        "type": "APPOINTMENT_REMINDER",
        "title": "Dentist tomorrow",
        "message": "10:00 at the clinic",
        "priority": "HIGH",
    }

    response = await client.post(BASE, json=body, headers=auth_headers(caregiver))
    assert response.status_code == 403
    assert response.json()["detail"] == "NO_PERMISSION"

    permission.status = PermissionStatus.ACCEPTED
    await permission.save()

    response = await client.post(BASE, json=body, headers=auth_headers(caregiver))
    assert response.status_code == 201
    assert response.json()["userId"] == str(patient.id)

    response = await client.post(BASE, json=body, headers=auth_headers(stranger))
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_create_validates_lengths(client: AsyncClient, create_user_func):
    user = await create_user_func()

    response = await client.post(
        BASE,
        json={
            "userId": str(user.id),
            "type": "GENERAL_INFO",
            "title": "x" * 201,
            "message": "ok",
        },
        headers=auth_headers(user),
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_list_orders_by_priority_then_recency(client: AsyncClient, create_user_func):
    user = await create_user_func()
    other = await create_user_func()
    now = datetime.now(timezone.utc)
    await _notify(user, title="old low", priority=NotificationPriority.LOW, created_at=now - timedelta(hours=3))
    await _notify(user, title="urgent", priority=NotificationPriority.URGENT, created_at=now - timedelta(hours=2))
    await _notify(user, title="new low", priority=NotificationPriority.LOW, created_at=now)
    await _notify(user, title="medium", priority=NotificationPriority.MEDIUM, created_at=now)
    await _notify(other, title="not mine")

    response = await client.get(BASE, headers=auth_headers(user))
    assert response.status_code == 200
    body = response.json()
    assert [n["title"] for n in body["items"]] == ["urgent", "medium", "new low", "old low"]
    assert body["meta"]["total"] == 4


@pytest.mark.asyncio
async def test_list_filters(client: AsyncClient, create_user_func):
    user = await create_user_func()
    await _notify(user, title="Pill time", type=NotificationType.MEDICATION_REMINDER)
    await _notify(user, title="Read one", message="contains KEYWORD", status=NotificationStatus.READ)
    await _notify(
        user,
        title="Old",
        created_at=datetime(2023, 1, 1, tzinfo=timezone.utc),
    )
    headers = auth_headers(user)

    response = await client.get(BASE, params={"type": "MEDICATION_REMINDER"}, headers=headers)
    assert [n["title"] for n in response.json()["items"]] == ["Pill time"]

    response = await client.get(BASE, params={"status": "READ"}, headers=headers)
    assert [n["title"] for n in response.json()["items"]] == ["Read one"]

    response = await client.get(BASE, params={"search": "keyword"}, headers=headers)
    assert [n["title"] for n in response.json()["items"]] == ["Read one"]

    response = await client.get(
        BASE, params={"toDate": "2023-12-31T00:00:00Z"}, headers=headers
    )
    assert [n["title"] for n in response.json()["items"]] == ["Old"]


@pytest.mark.asyncio
async def test_owner_only_access(client: AsyncClient, create_user_func):
    owner = await create_user_func()
    other = await create_user_func()
    notification = await _notify(owner)
    url = f"/api/v1/notifications/{notification.id}"

    assert (await client.get(url, headers=auth_headers(owner))).status_code == 200

    for method, path in [
        ("GET", url),
        ("PATCH", f"{url}/read"),
        ("PATCH", f"{url}/archive"),
        ("DELETE", url),
    ]:
        response = await client.request(method, path, headers=auth_headers(other))
        assert response.status_code == 403
        assert response.json()["detail"] == "NO_PERMISSION"

    response = await client.get(
        "/api/v1/notifications/000000000000000000000000", headers=auth_headers(owner)
    )
    assert response.status_code == 404
    assert response.json()["detail"] == "NOTIFICATION_NOT_FOUND"


@pytest.mark.asyncio
async def test_read_archive_and_update_rules(client: AsyncClient, create_user_func):
    user = await create_user_func()
    headers = auth_headers(user)
    notification = await _notify(user)
    url = f"/api/v1/notifications/{notification.id}"

    response = await client.patch(f"{url}/read", headers=headers)
    assert response.status_code == 200
    assert response.json()["status"] == "READ"
    read_at = response.json()["readAt"]
    assert read_at

    # Marking again keeps the original timestamp.
    response = await client.patch(f"{url}/read", headers=headers)
    assert response.json()["readAt"] == read_at

    response = await client.patch(url, json={"priority": "URGENT"}, headers=headers)
    assert response.status_code == 200
    assert response.json()["priority"] == "URGENT"
    assert notification.priority_rank == NotificationPriority.URGENT.rank

    response = await client.patch(f"{url}/archive", headers=headers)
    assert response.status_code == 200
    assert response.json()["status"] == "ARCHIVED"

    response = await client.patch(url, json={"title": "Changed"}, headers=headers)
    assert response.status_code == 400
    assert response.json()["detail"] == "CANNOT_UPDATE_ARCHIVED"

    response = await client.delete(url, headers=headers)
    assert response.status_code == 204
    assert (await client.get(url, headers=headers)).status_code == 404


@pytest.mark.asyncio
async def test_stats(client: AsyncClient, create_user_func):
    user = await create_user_func()
    await _notify(user, type=NotificationType.MEDICATION_REMINDER)
    await _notify(user, type=NotificationType.MEDICATION_REMINDER, status=NotificationStatus.READ)
    await _notify(
        user,
        type=NotificationType.EMERGENCY_ALERT,
        priority=NotificationPriority.URGENT,
        status=NotificationStatus.ARCHIVED,
    )

    response = await client.get("/api/v1/notifications/stats", headers=auth_headers(user))
    assert response.status_code == 200
    stats = response.json()
    assert stats["total"] == 3
    assert (stats["unread"], stats["read"], stats["archived"]) == (1, 1, 1)
    assert stats["percentages"] == {"unread": 33, "read": 33, "archived": 33}
    assert stats["byType"] == {"MEDICATION_REMINDER": 2, "EMERGENCY_ALERT": 1}
    assert stats["byPriority"] == {"MEDIUM": 2, "URGENT": 1}
    assert "lastUpdated" in stats


@pytest.mark.asyncio
async def test_stats_for_empty_inbox(client: AsyncClient, create_user_func):
    user = await create_user_func()

    response = await client.get("/api/v1/notifications/stats", headers=auth_headers(user))
    stats = response.json()
    assert stats["total"] == 0
    assert stats["percentages"] == {"unread": 0, "read": 0, "archived": 0}
    assert stats["byType"] == {}


@pytest.mark.asyncio
async def test_bulk_read(client: AsyncClient, create_user_func):
    user = await create_user_func()
    other = await create_user_func()
    unread = await _notify(user)
    already_read = await _notify(user, status=NotificationStatus.READ)
    foreign = await _notify(other)
    headers = auth_headers(user)

    response = await client.patch(
        "/api/v1/notifications/bulk/read",
        json={"ids": [str(unread.id), str(already_read.id), str(foreign.id), "junk"]},
        headers=headers,
    )
    assert response.status_code == 200
    assert response.json() == {"processed": 1, "total": 2}
    assert unread.status == NotificationStatus.READ
    assert foreign.status == NotificationStatus.UNREAD

    response = await client.patch(
        "/api/v1/notifications/bulk/read", json={"ids": [str(foreign.id)]}, headers=headers
    )
    assert response.status_code == 404

    response = await client.patch(
        "/api/v1/notifications/bulk/read", json={"ids": []}, headers=headers
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_cleanup_deletes_only_old_archived(client: AsyncClient, create_user_func, db):
    user = await create_user_func()
    other = await create_user_func()
    long_ago = datetime.now(timezone.utc) - timedelta(days=120)
    stale = await _notify(user, status=NotificationStatus.ARCHIVED, updated_at=long_ago)
    fresh = await _notify(user, status=NotificationStatus.ARCHIVED)
    old_unread = await _notify(user, updated_at=long_ago)
    foreign = await _notify(other, status=NotificationStatus.ARCHIVED, updated_at=long_ago)

    response = await client.delete(
        "/api/v1/notifications/cleanup/old", headers=auth_headers(user)
    )
    assert response.status_code == 200
    assert response.json()["deletedCount"] == 1
    remaining = set(db["Notification"])
    assert str(stale.id) not in remaining
    assert {str(fresh.id), str(old_unread.id), str(foreign.id)} <= remaining
