"""
Tests for dashboard stats and the analytics overview.
"""

from datetime import datetime, timedelta

import pytest
from httpx import AsyncClient

from factories import ClientFactory, FollowUpFactory, OverdueFollowUpFactory, CompletedFollowUpFactory


async def seed(client: AsyncClient):
    """Two clients, three follow-ups and one interaction."""
    acme = (await client.post("/api/clients", json=ClientFactory(status="active", priority="high"))).json()
    await client.post("/api/clients", json=ClientFactory(status="lead"))
    await client.post("/api/follow-ups", json=FollowUpFactory(client_id=acme["id"]))
    await client.post("/api/follow-ups", json=OverdueFollowUpFactory(client_id=acme["id"]))
    await client.post(
        "/api/follow-ups",
        json=CompletedFollowUpFactory(
            client_id=acme["id"],
            due_date=(datetime.utcnow() - timedelta(days=3)).isoformat(),
        ),
    )
    await client.post(
        "/api/interactions", json={"client_id": acme["id"], "type": "call", "notes": "Intro"}
    )
    return acme


class TestDashboard:
    """Tests for GET /api/dashboard/stats."""

    @pytest.mark.asyncio
    async def test_stats(self, authenticated_client: AsyncClient):
        await seed(authenticated_client)

        response = await authenticated_client.get("/api/dashboard/stats")

        assert response.status_code == 200
        assert response.json() == {
            "total_clients": 2,
            "pending_follow_ups": 2,
            "completed_this_week": 1,
            "new_this_month": 2,
            "overdue_follow_ups": 1,
        }

    @pytest.mark.asyncio
    async def test_stats_empty(self, authenticated_client: AsyncClient):
        response = await authenticated_client.get("/api/dashboard/stats")

        assert response.json()["total_clients"] == 0
        assert response.json()["overdue_follow_ups"] == 0


class TestAnalyticsOverview:
    """Tests for GET /api/analytics/overview."""

    @pytest.mark.asyncio
    async def test_overview(self, authenticated_client: AsyncClient):
        acme = await seed(authenticated_client)

        response = await authenticated_client.get("/api/analytics/overview")

        assert response.status_code == 200
        data = response.json()
        assert data["total_clients"] == 2
        assert data["active_clients"] == 1
        assert data["total_interactions"] == 1
        assert data["total_follow_ups"] == 3
        assert data["completed_follow_ups"] == 1
        assert data["overdue_follow_ups"] == 1
        assert data["clients_by_status"] == {"active": 1, "lead": 1}
        assert data["clients_by_priority"]["high"] == 1
        assert acme["id"] in [c["id"] for c in data["recent_activity"]["clients"]]
        assert len(data["recent_activity"]["follow_ups"]) == 3
        assert len(data["recent_activity"]["interactions"]) == 1

    @pytest.mark.asyncio
    async def test_overview_completes_reporting_milestone(self, authenticated_client: AsyncClient):
        await authenticated_client.get("/api/analytics/overview")

        journey = (await authenticated_client.get("/api/journey")).json()
        completed = {m["milestone_type"] for m in journey["milestones"] if m["is_completed"]}
        assert "advanced_reporting_used" in completed
