"""
Tests for follow-up endpoints and the derived reminder feed.
"""

from datetime import datetime, timedelta

import pytest
from httpx import AsyncClient

from factories import (
    FollowUpFactory,
    OverdueFollowUpFactory,
    DueTomorrowFollowUpFactory,
    CompletedFollowUpFactory,
)


def due_in(days=0, hours=0):
    return (datetime.utcnow() + timedelta(days=days, hours=hours)).isoformat()


class TestFollowUpCrud:
    """Tests for follow-up CRUD."""

    @pytest.mark.asyncio
    async def test_create_follow_up(self, authenticated_client: AsyncClient, sample_client):
        payload = FollowUpFactory(client_id=sample_client.id, title="Send contract")

        response = await authenticated_client.post("/api/follow-ups", json=payload)

        assert response.status_code == 201
        data = response.json()
        assert data["title"] == "Send contract"
        assert data["status"] == "pending"
        assert data["completed_at"] is None

    @pytest.mark.asyncio
    async def test_aware_due_date_stored_as_utc(self, authenticated_client: AsyncClient, sample_client):
        payload = FollowUpFactory(client_id=sample_client.id, due_date="2030-03-01T09:00:00+02:00")

        response = await authenticated_client.post("/api/follow-ups", json=payload)

        assert response.status_code == 201
        assert response.json()["due_date"] == "2030-03-01T07:00:00"

    @pytest.mark.asyncio
    async def test_create_for_unknown_client(self, authenticated_client: AsyncClient):
        response = await authenticated_client.post(
            "/api/follow-ups", json=FollowUpFactory(client_id=9999)
        )
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_create_completed_stamps_completed_at(
        self, authenticated_client: AsyncClient, sample_client
    ):
        response = await authenticated_client.post(
            "/api/follow-ups", json=CompletedFollowUpFactory(client_id=sample_client.id)
        )

        assert response.json()["completed_at"] is not None

    @pytest.mark.asyncio
    async def test_complete_and_reopen(self, authenticated_client: AsyncClient, sample_client):
        created = (
            await authenticated_client.post(
                "/api/follow-ups", json=FollowUpFactory(client_id=sample_client.id)
            )
        ).json()
        url = f"/api/follow-ups/{created['id']}"

        completed = (await authenticated_client.put(url, json={"status": "completed"})).json()
        assert completed["status"] == "completed"
        assert completed["completed_at"] is not None

        renamed = (await authenticated_client.put(url, json={"title": "Renamed"})).json()
        assert renamed["completed_at"] == completed["completed_at"]

        reopened = (await authenticated_client.put(url, json={"status": "pending"})).json()
        assert reopened["status"] == "pending"
        assert reopened["completed_at"] is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("field", ["title", "due_date", "status", "priority"])
    async def test_null_for_required_field_is_rejected(
        self, authenticated_client: AsyncClient, sample_client, field
    ):
        created = (
            await authenticated_client.post(
                "/api/follow-ups", json=FollowUpFactory(client_id=sample_client.id)
            )
        ).json()
        url = f"/api/follow-ups/{created['id']}"

        response = await authenticated_client.put(url, json={field: None})

        assert response.status_code == 422
        assert (await authenticated_client.get("/api/follow-ups")).json()[0][field] == created[field]

    @pytest.mark.asyncio
    async def test_null_description_clears_it(self, authenticated_client: AsyncClient, sample_client):
        created = (
            await authenticated_client.post(
                "/api/follow-ups",
                json=FollowUpFactory(client_id=sample_client.id, description="Bring slides"),
            )
        ).json()

        response = await authenticated_client.put(
            f"/api/follow-ups/{created['id']}", json={"description": None}
        )

        assert response.status_code == 200
        assert response.json()["description"] is None

    @pytest.mark.asyncio
    async def test_delete(self, authenticated_client: AsyncClient, sample_client):
        created = (
            await authenticated_client.post(
                "/api/follow-ups", json=FollowUpFactory(client_id=sample_client.id)
            )
        ).json()

        response = await authenticated_client.delete(f"/api/follow-ups/{created['id']}")

        assert response.status_code == 204
        assert (await authenticated_client.get("/api/follow-ups")).json() == []

    @pytest.mark.asyncio
    async def test_first_follow_up_milestone(self, authenticated_client: AsyncClient, sample_client):
        await authenticated_client.post(
            "/api/follow-ups", json=FollowUpFactory(client_id=sample_client.id)
        )

        journey = (await authenticated_client.get("/api/journey")).json()
        completed = {m["milestone_type"] for m in journey["milestones"] if m["is_completed"]}
        assert "first_follow_up_scheduled" in completed
        assert "ten_follow_ups_milestone" not in completed


class TestFollowUpViews:
    """Tests for the overdue, upcoming and per-client lists."""

    @pytest.mark.asyncio
    async def test_overdue_and_upcoming(self, authenticated_client: AsyncClient, sample_client):
        overdue = (
            await authenticated_client.post(
                "/api/follow-ups", json=OverdueFollowUpFactory(client_id=sample_client.id)
            )
        ).json()
        upcoming = (
            await authenticated_client.post(
                "/api/follow-ups", json=FollowUpFactory(client_id=sample_client.id)
            )
        ).json()
        await authenticated_client.post(
            "/api/follow-ups",
            json=CompletedFollowUpFactory(client_id=sample_client.id, due_date=due_in(-5)),
        )

        overdue_list = (await authenticated_client.get("/api/follow-ups/overdue")).json()
        upcoming_list = (await authenticated_client.get("/api/follow-ups/upcoming")).json()
        all_list = (await authenticated_client.get("/api/follow-ups")).json()

        assert [f["id"] for f in overdue_list] == [overdue["id"]]
        assert [f["id"] for f in upcoming_list] == [upcoming["id"]]
        assert len(all_list) == 3
        assert all_list[0]["id"] != upcoming["id"]

    @pytest.mark.asyncio
    async def test_client_follow_ups(self, authenticated_client: AsyncClient, sample_client):
        other = (
            await authenticated_client.post("/api/clients", json={"name": "Other", "email": "o@example.com"})
        ).json()
        await authenticated_client.post("/api/follow-ups", json=FollowUpFactory(client_id=sample_client.id))
        await authenticated_client.post("/api/follow-ups", json=FollowUpFactory(client_id=other["id"]))

        response = await authenticated_client.get(f"/api/follow-ups/client/{other['id']}")

        assert [f["client_id"] for f in response.json()] == [other["id"]]


class TestFollowUpNotifications:
    """Tests for GET /api/follow-ups/notifications."""

    @pytest.mark.asyncio
    async def test_notification_feed(self, authenticated_client: AsyncClient, sample_client):
        await authenticated_client.post(
            "/api/follow-ups",
            json=OverdueFollowUpFactory(client_id=sample_client.id, title="Chase invoice"),
        )
        await authenticated_client.post(
            "/api/follow-ups",
            json=DueTomorrowFollowUpFactory(client_id=sample_client.id, title="Demo prep"),
        )
        await authenticated_client.post(
            "/api/follow-ups",
            json=FollowUpFactory(client_id=sample_client.id, due_date=due_in(30), title="Renewal"),
        )
        await authenticated_client.post(
            "/api/follow-ups",
            json=CompletedFollowUpFactory(client_id=sample_client.id, due_date=due_in(-1)),
        )

        response = await authenticated_client.get("/api/follow-ups/notifications")

        assert response.status_code == 200
        notifications = response.json()
        assert [n["type"] for n in notifications] == ["overdue", "due_tomorrow"]

        overdue = notifications[0]
        assert overdue["id"].startswith("overdue-")
        assert overdue["title"] == "Overdue Follow-up"
        assert overdue["client_name"] == "Acme Corp"
        assert overdue["message"].startswith('Follow-up "Chase invoice" for Acme Corp was due ')
        assert (overdue["priority"], overdue["color"], overdue["icon"]) == ("high", "red", "AlertTriangle")

        tomorrow = notifications[1]
        assert tomorrow["title"] == "Due Tomorrow"
        assert tomorrow["message"] == 'Follow-up "Demo prep" for Acme Corp is due tomorrow'

    @pytest.mark.asyncio
    async def test_empty_feed(self, authenticated_client: AsyncClient):
        response = await authenticated_client.get("/api/follow-ups/notifications")

        assert response.status_code == 200
        assert response.json() == []
