"""
Tests for the journey tracker.
"""

from unittest.mock import patch

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tracker_suite.models.client import Client
from tracker_suite.models.journey import (
    JourneyStage,
    MilestoneType,
    UserJourneyMilestone,
)
from tracker_suite.services.journey_service import (
    MILESTONE_DEFINITIONS,
    JourneyService,
    compute_level,
    compute_stage,
)


async def add_clients(db: AsyncSession, user_id: int, count: int):
    for i in range(count):
        db.add(Client(user_id=user_id, name=f"Client {i}", email=f"client{i}@example.com"))
    await db.commit()


class TestLevelAndStage:
    """Pure level and stage computation."""

    @pytest.mark.parametrize(
        "points,level", [(0, 1), (15, 1), (49, 1), (50, 2), (99, 2), (100, 3), (475, 10)]
    )
    def test_level(self, points, level):
        assert compute_level(points) == level

    def test_stage_needs_points_and_milestones(self):
        assert compute_stage(15, 2) == JourneyStage.onboarding
        assert compute_stage(60, 2) == JourneyStage.onboarding
        assert compute_stage(60, 3) == JourneyStage.exploring
        assert compute_stage(150, 8) == JourneyStage.active
        assert compute_stage(300, 12) == JourneyStage.power_user
        assert compute_stage(500, 15) == JourneyStage.expert

    def test_stage_uses_supplied_thresholds(self):
        thresholds = {"exploring": {"min_points": 10, "min_milestones": 1}}
        assert compute_stage(15, 2, thresholds) == JourneyStage.exploring

    def test_every_milestone_type_is_defined(self):
        assert set(MILESTONE_DEFINITIONS) == set(MilestoneType)


class TestInitializeJourney:
    """Tests for initialize_user_journey."""

    @pytest.mark.asyncio
    async def test_creates_all_milestones(self, test_db: AsyncSession, test_user):
        progress = await JourneyService(test_db).initialize_user_journey(test_user.id)

        assert progress.total_points == 15
        assert progress.completed_milestones == 2
        assert progress.current_level == 1
        assert progress.journey_stage == JourneyStage.onboarding

        result = await test_db.execute(
            select(UserJourneyMilestone).where(UserJourneyMilestone.user_id == test_user.id)
        )
        milestones = result.scalars().all()
        assert len(milestones) == len(MilestoneType)
        completed = {m.milestone_type for m in milestones if m.is_completed}
        assert completed == {MilestoneType.account_created, MilestoneType.trial_started}

    @pytest.mark.asyncio
    async def test_initialize_twice_is_noop(self, test_db: AsyncSession, test_user):
        service = JourneyService(test_db)
        first = await service.initialize_user_journey(test_user.id)
        second = await service.initialize_user_journey(test_user.id)

        assert first.id == second.id
        data = await service.get_user_journey_data(test_user.id)
        assert len(data["milestones"]) == len(MilestoneType)

    @pytest.mark.asyncio
    async def test_lost_initialization_race_returns_existing(self, test_db: AsyncSession, test_user):
        """A second initializer that missed the existing row gets that row back."""
        service = JourneyService(test_db)
        first = await service.initialize_user_journey(test_user.id)

        real_get_progress = service._get_progress
        calls = []

        async def stale_then_real(user_id):
            calls.append(user_id)
            if len(calls) == 1:
                return None
            return await real_get_progress(user_id)

        with patch.object(service, "_get_progress", side_effect=stale_then_real):
            second = await service.initialize_user_journey(test_user.id)

        assert second.id == first.id
        assert len(calls) == 2
        assert test_user.email == "test@example.com"
        result = await test_db.execute(
            select(UserJourneyMilestone).where(UserJourneyMilestone.user_id == test_user.id)
        )
        assert len(result.scalars().all()) == len(MilestoneType)


class TestCompleteMilestone:
    """Tests for complete_milestone and the count sweep."""

    @pytest.mark.asyncio
    async def test_awards_points_once(self, test_db: AsyncSession, test_user):
        service = JourneyService(test_db)
        await service.initialize_user_journey(test_user.id)

        assert await service.complete_milestone(test_user.id, MilestoneType.first_export) is True
        assert await service.complete_milestone(test_user.id, MilestoneType.first_export) is False

        progress = (await service.get_user_journey_data(test_user.id))["progress"]
        assert progress.total_points == 40
        assert progress.completed_milestones == 3

    @pytest.mark.asyncio
    async def test_completing_initial_milestone_again_is_rejected(self, test_db: AsyncSession, test_user):
        service = JourneyService(test_db)
        await service.initialize_user_journey(test_user.id)

        assert await service.complete_milestone(test_user.id, MilestoneType.account_created) is False

    @pytest.mark.asyncio
    async def test_initializes_lazily(self, test_db: AsyncSession, test_user):
        service = JourneyService(test_db)

        assert await service.complete_milestone(test_user.id, MilestoneType.account_upgraded) is True

        progress = (await service.get_user_journey_data(test_user.id))["progress"]
        assert progress.total_points == 115
        assert progress.current_level == 3

    @pytest.mark.asyncio
    async def test_completed_at_is_set(self, test_db: AsyncSession, test_user):
        service = JourneyService(test_db)
        await service.complete_milestone(test_user.id, MilestoneType.first_email_sent)

        result = await test_db.execute(
            select(UserJourneyMilestone).where(
                UserJourneyMilestone.user_id == test_user.id,
                UserJourneyMilestone.milestone_type == MilestoneType.first_email_sent,
            )
        )
        milestone = result.scalar_one()
        assert milestone.is_completed is True
        assert milestone.completed_at is not None

    @pytest.mark.asyncio
    async def test_count_requirement_blocks_completion(self, test_db: AsyncSession, test_user):
        service = JourneyService(test_db)
        await add_clients(test_db, test_user.id, 4)

        assert await service.check_and_complete_milestone(
            test_user.id, MilestoneType.five_clients_milestone
        ) is False

        await add_clients(test_db, test_user.id, 1)
        assert await service.check_and_complete_milestone(
            test_user.id, MilestoneType.five_clients_milestone
        ) is True

    @pytest.mark.asyncio
    async def test_check_all_milestones_sweeps_counts_only(self, test_db: AsyncSession, test_user):
        service = JourneyService(test_db)
        await service.initialize_user_journey(test_user.id)
        await add_clients(test_db, test_user.id, 5)

        completed = await service.check_all_milestones(test_user.id)

        assert set(completed) == {
            MilestoneType.first_client_added,
            MilestoneType.five_clients_milestone,
        }
        progress = (await service.get_user_journey_data(test_user.id))["progress"]
        assert progress.total_points == 15 + 20 + 30
        assert progress.completed_milestones == 4
        assert progress.current_level == 2
        assert progress.journey_stage == JourneyStage.exploring

        assert await service.check_all_milestones(test_user.id) == []
