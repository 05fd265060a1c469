"""
Notification feed API tests

Pytest command examples:
================

# run the whole file
pytest cursor_test/api/test_notification_routes.py -v
"""
import pytest
from datetime import datetime, timedelta

from medilinko.infrastructure.database.models import Notification, NotificationType
from medilinko.infrastructure.database.repository.user_repository import UserRepository

BASE = "/api/v1/notifications"


async def _seed(session_factory, user_id, ages_in_hours, read=False):
    """Insert notifications of the given ages; returns their IDs, newest first"""
    now = datetime.now()
    async with session_factory() as session:
        rows = [
            Notification(
                user_id=user_id,
                title=f"Notice {i}",
                message="Your order is ready",
                type=NotificationType.ORDER,
                read=read,
                data={"orderId": f"o-{i}"},
                created_at=now - timedelta(hours=hours),
            )
            for i, hours in enumerate(ages_in_hours)
        ]
        session.add_all(rows)
        await session.commit()
        rows.sort(key=lambda n: n.created_at, reverse=True)
        return [n.id for n in rows]


class TestListNotifications:
    """GET /notifications"""

    @pytest.mark.asyncio
    async def test_default_page_and_unread_count(self, client, auth, patient, test_session_factory):
        # Arrange
        ids = await _seed(test_session_factory, patient.id, [0.1 * i for i in range(1, 11)])

        # Act
        response = await client.get(BASE, headers=auth)

        # Assert
        assert response.status_code == 200
        body = response.json()
        assert [n["id"] for n in body["data"]] == ids[:7]
        assert body["unread_count"] == 10
        assert body["data"][0]["type"] == "order"

    @pytest.mark.asyncio
    async def test_old_notifications_are_pruned(self, client, auth, patient, test_session_factory):
        ids = await _seed(test_session_factory, patient.id, [1, 30])

        response = await client.get(BASE, params={"limit": 50}, headers=auth)

        assert [n["id"] for n in response.json()["data"]] == ids[:1]

    @pytest.mark.asyncio
    async def test_read_filter(self, client, auth, patient, test_session_factory):
        await _seed(test_session_factory, patient.id, [1, 2])
        await _seed(test_session_factory, patient.id, [3], read=True)

        response = await client.get(BASE, params={"read": "true"}, headers=auth)

        assert len(response.json()["data"]) == 1
        assert response.json()["unread_count"] == 2

    @pytest.mark.asyncio
    async def test_other_users_feed_is_not_visible(self, client, other_auth, patient, test_session_factory):
        await _seed(test_session_factory, patient.id, [1])

        response = await client.get(BASE, headers=other_auth)

        assert response.json() == {"data": [], "unread_count": 0}


class TestUpdateNotifications:
    """read flags and deletion"""

    @pytest.mark.asyncio
    async def test_unread_count(self, client, auth, patient, test_session_factory):
        await _seed(test_session_factory, patient.id, [1, 2, 3])

        response = await client.get(f"{BASE}/unread-count", headers=auth)

        assert response.json() == {"count": 3}

    @pytest.mark.asyncio
    async def test_mark_one_read(self, client, auth, patient, test_session_factory):
        ids = await _seed(test_session_factory, patient.id, [1, 2])

        response = await client.patch(f"{BASE}/{ids[0]}/read", headers=auth)

        assert response.status_code == 200
        assert response.json()["read"] is True
        count = await client.get(f"{BASE}/unread-count", headers=auth)
        assert count.json()["count"] == 1

    @pytest.mark.asyncio
    async def test_mark_someone_elses_notification_is_404(self, client, other_auth, patient, test_session_factory):
        ids = await _seed(test_session_factory, patient.id, [1])

        response = await client.patch(f"{BASE}/{ids[0]}/read", headers=other_auth)

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_mark_all_read(self, client, auth, patient, test_session_factory):
        await _seed(test_session_factory, patient.id, [1, 2, 3])

        response = await client.patch(f"{BASE}/mark-all-read", headers=auth)

        assert response.json()["count"] == 3
        count = await client.get(f"{BASE}/unread-count", headers=auth)
        assert count.json()["count"] == 0

    @pytest.mark.asyncio
    async def test_delete_one_and_all(self, client, auth, patient, test_session_factory):
        ids = await _seed(test_session_factory, patient.id, [1, 2, 3])

        single = await client.delete(f"{BASE}/{ids[0]}", headers=auth)
        missing = await client.delete(f"{BASE}/{ids[0]}", headers=auth)
        everything = await client.delete(BASE, headers=auth)

        assert single.status_code == 200
        assert missing.status_code == 404
        assert everything.json()["count"] == 2


class TestSendNotification:
    """POST /notifications/send"""

    @pytest.mark.asyncio
    async def test_send_pushes_and_saves(self, client, auth, other_patient, push_gateway, test_session_factory):
        # Arrange
        async with test_session_factory() as session:
            await UserRepository(session).save_push_token(other_patient.id, "token-ravi", "pixel")
            await session.commit()

        # Act
        response = await client.post(
            f"{BASE}/send",
            json={
                "user_id": other_patient.id,
                "title": "New appointment",
                "body": "Tomorrow 10:00",
                "data": {"type": "new_appointment", "appointmentId": "a-1"},
            },
            headers=auth,
        )

        # Assert
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["notification_id"]
        assert push_gateway.sent[0]["token"] == "token-ravi"
        assert push_gateway.sent[0]["channel_id"] == "appointment_alerts"

    @pytest.mark.asyncio
    async def test_unknown_recipient_is_404(self, client, auth):
        response = await client.post(
            f"{BASE}/send",
            json={"user_id": "nobody", "title": "Hi", "body": "There"},
            headers=auth,
        )

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_without_push_gateway_is_503(self, client, auth, patient, test_app):
        test_app.state.push_gateway = None

        response = await client.post(
            f"{BASE}/send",
            json={"user_id": patient.id, "title": "Hi", "body": "There"},
            headers=auth,
        )

        assert response.status_code == 503
