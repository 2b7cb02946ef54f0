"""
Tests for interaction endpoints.
"""

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from tracker_suite.models.interaction import Interaction, InteractionType


class TestInteractions:
    """Interactions are append-only contact history."""

    @pytest.mark.asyncio
    async def test_log_interaction(self, authenticated_client: AsyncClient, sample_client, test_user):
        response = await authenticated_client.post(
            "/api/interactions",
            json={"client_id": sample_client.id, "type": "meeting", "notes": "Kickoff"},
        )

        assert response.status_code == 201
        data = response.json()
        assert data["type"] == "meeting"
        assert data["user_id"] == test_user.id
        assert data["created_at"]

    @pytest.mark.asyncio
    async def test_unknown_type_rejected(self, authenticated_client: AsyncClient, sample_client):
        response = await authenticated_client.post(
            "/api/interactions",
            json={"client_id": sample_client.id, "type": "fax", "notes": "Sent a fax"},
        )
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_type_stored_as_enum(
        self, authenticated_client: AsyncClient, test_db: AsyncSession, sample_client
    ):
        response = await authenticated_client.post(
            "/api/interactions",
            json={"client_id": sample_client.id, "type": "call", "notes": "Intro call"},
        )

        stored = await test_db.get(Interaction, response.json()["id"])
        assert stored.type is InteractionType.call

    @pytest.mark.asyncio
    async def test_notes_required(self, authenticated_client: AsyncClient, sample_client):
        response = await authenticated_client.post(
            "/api/interactions",
            json={"client_id": sample_client.id, "type": "note", "notes": ""},
        )
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_unknown_client(self, authenticated_client: AsyncClient):
        response = await authenticated_client.post(
            "/api/interactions", json={"client_id": 404, "type": "call", "notes": "Hello"}
        )
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_list_newest_first(self, authenticated_client: AsyncClient, sample_client):
        for note in ("first", "second", "third"):
            await authenticated_client.post(
                "/api/interactions",
                json={"client_id": sample_client.id, "type": "note", "notes": note},
            )

        response = await authenticated_client.get("/api/interactions")

        assert [i["notes"] for i in response.json()] == ["third", "second", "first"]

    @pytest.mark.asyncio
    async def test_no_update_endpoint(self, authenticated_client: AsyncClient, sample_client):
        created = (
            await authenticated_client.post(
                "/api/interactions",
                json={"client_id": sample_client.id, "type": "call", "notes": "Intro"},
            )
        ).json()

        response = await authenticated_client.put(
            f"/api/interactions/{created['id']}", json={"notes": "Edited"}
        )

        assert response.status_code in (404, 405)

    @pytest.mark.asyncio
    async def test_first_interaction_milestone(self, authenticated_client: AsyncClient, sample_client):
        await authenticated_client.post(
            "/api/interactions",
            json={"client_id": sample_client.id, "type": "call", "notes": "Intro"},
        )

        journey = (await authenticated_client.get("/api/journey")).json()
        completed = {m["milestone_type"] for m in journey["milestones"] if m["is_completed"]}
        assert "first_interaction_logged" in completed
