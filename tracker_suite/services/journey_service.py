"""
User journey tracker.

Every user gets one progress row and one row per milestone type. Completing
a milestone is a one-way transition guarded by a conditional UPDATE, and the
progress totals are incremented under a row lock so concurrent completions
never double count.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Any

from sqlalchemy import select, update, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from tracker_suite.config import settings
from tracker_suite.models.client import Client
from tracker_suite.models.follow_up import FollowUp
from tracker_suite.models.interaction import Interaction
from tracker_suite.models.journey import (
    UserJourneyMilestone,
    UserJourneyProgress,
    MilestoneType,
    MilestoneCategory,
    JourneyStage,
)

logger = logging.getLogger(__name__)

POINTS_PER_LEVEL = 50


@dataclass(frozen=True)
class MilestoneDefinition:
    title: str
    description: str
    category: MilestoneCategory
    points: int
    # Completed by the count sweep; the rest are completed by the event that defines them
    auto_complete: bool = False


MILESTONE_DEFINITIONS: dict[MilestoneType, MilestoneDefinition] = {
    MilestoneType.account_created: MilestoneDefinition(
        "Welcome Aboard!", "Successfully created your account",
        MilestoneCategory.getting_started, 10,
    ),
    MilestoneType.profile_completed: MilestoneDefinition(
        "Profile Complete", "Filled out your complete profile information",
        MilestoneCategory.getting_started, 15,
    ),
    MilestoneType.trial_started: MilestoneDefinition(
        "Trial Journey Begins", "Started your 7-day free trial",
        MilestoneCategory.getting_started, 5,
    ),
    MilestoneType.first_client_added: MilestoneDefinition(
        "First Client Added", "Added your first client to the system",
        MilestoneCategory.client_management, 20, auto_complete=True,
    ),
    MilestoneType.first_follow_up_scheduled: MilestoneDefinition(
        "Staying Organized", "Scheduled your first follow-up task",
        MilestoneCategory.client_management, 15, auto_complete=True,
    ),
    MilestoneType.first_interaction_logged: MilestoneDefinition(
        "Communication Tracker", "Logged your first client interaction",
        MilestoneCategory.engagement, 15, auto_complete=True,
    ),
    MilestoneType.first_email_sent: MilestoneDefinition(
        "Direct Communication", "Sent your first email through the platform",
        MilestoneCategory.engagement, 20,
    ),
    MilestoneType.first_export: MilestoneDefinition(
        "Data Export Master", "Exported your first data report",
        MilestoneCategory.advanced, 25,
    ),
    MilestoneType.five_clients_milestone: MilestoneDefinition(
        "Growing Network", "Reached 5 clients in your network",
        MilestoneCategory.growth, 30, auto_complete=True,
    ),
    MilestoneType.ten_follow_ups_milestone: MilestoneDefinition(
        "Follow-up Pro", "Scheduled 10 follow-up tasks",
        MilestoneCategory.client_management, 25, auto_complete=True,
    ),
    MilestoneType.twenty_clients_milestone: MilestoneDefinition(
        "Network Expansion", "Reached 20 clients in your network",
        MilestoneCategory.growth, 50, auto_complete=True,
    ),
    MilestoneType.fifty_interactions_milestone: MilestoneDefinition(
        "Engagement Champion", "Logged 50 client interactions",
        MilestoneCategory.engagement, 40, auto_complete=True,
    ),
    MilestoneType.advanced_reporting_used: MilestoneDefinition(
        "Analytics Expert", "Used the advanced reporting features",
        MilestoneCategory.advanced, 30,
    ),
    MilestoneType.account_upgraded: MilestoneDefinition(
        "Premium Member", "Upgraded to a premium account",
        MilestoneCategory.advanced, 100,
    ),
}

# Milestones completed as soon as the journey exists
INITIAL_MILESTONES = (MilestoneType.account_created, MilestoneType.trial_started)

# milestone -> (model counted per user, minimum count)
COUNT_REQUIREMENTS: dict[MilestoneType, tuple[Any, int]] = {
    MilestoneType.first_client_added: (Client, 1),
    MilestoneType.five_clients_milestone: (Client, 5),
    MilestoneType.twenty_clients_milestone: (Client, 20),
    MilestoneType.first_follow_up_scheduled: (FollowUp, 1),
    MilestoneType.ten_follow_ups_milestone: (FollowUp, 10),
    MilestoneType.first_interaction_logged: (Interaction, 1),
    MilestoneType.fifty_interactions_milestone: (Interaction, 50),
}

STAGE_ORDER = (
    JourneyStage.expert,
    JourneyStage.power_user,
    JourneyStage.active,
    JourneyStage.exploring,
)


def compute_level(total_points: int) -> int:
    return total_points // POINTS_PER_LEVEL + 1


def compute_stage(
    total_points: int,
    completed_milestones: int,
    thresholds: Optional[dict[str, dict[str, int]]] = None,
) -> JourneyStage:
    """Highest stage whose point and milestone minimums are both met."""
    thresholds = thresholds if thresholds is not None else settings.JOURNEY_STAGE_THRESHOLDS
    for stage in STAGE_ORDER:
        requirement = thresholds.get(stage.value)
        if requirement is None:
            continue
        if (
            total_points >= requirement.get("min_points", 0)
            and completed_milestones >= requirement.get("min_milestones", 0)
        ):
            return stage
    return JourneyStage.onboarding


class JourneyService:
    """Milestone bookkeeping for one database session."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _get_progress(self, user_id: int) -> Optional[UserJourneyProgress]:
        result = await self.db.execute(
            select(UserJourneyProgress).where(UserJourneyProgress.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def initialize_user_journey(self, user_id: int) -> UserJourneyProgress:
        """Create the progress row and all milestone rows. Safe to call twice."""
        progress = await self._get_progress(user_id)
        if progress is not None:
            return progress

        now = datetime.utcnow()
        initial_points = 0
        completed = len(INITIAL_MILESTONES)
        for milestone_type, definition in MILESTONE_DEFINITIONS.items():
            if milestone_type in INITIAL_MILESTONES:
                initial_points += definition.points
        progress = UserJourneyProgress(
            user_id=user_id,
            total_points=initial_points,
            completed_milestones=completed,
            current_level=compute_level(initial_points),
            journey_stage=compute_stage(initial_points, completed),
            last_activity_at=now,
        )

        try:
            async with self.db.begin_nested():
                for milestone_type, definition in MILESTONE_DEFINITIONS.items():
                    done = milestone_type in INITIAL_MILESTONES
                    self.db.add(
                        UserJourneyMilestone(
                            user_id=user_id,
                            milestone_type=milestone_type,
                            title=definition.title,
                            description=definition.description,
                            category=definition.category,
                            points=definition.points,
                            is_completed=done,
                            completed_at=now if done else None,
                        )
                    )
                self.db.add(progress)
        except IntegrityError:
            # Another request initialized this user first
            existing = await self._get_progress(user_id)
            if existing is None:
                raise
            logger.info("User journey already initialized", extra={"user_id": user_id})
            return existing

        await self.db.commit()
        await self.db.refresh(progress)

        logger.info(
            "Initialized user journey",
            extra={"user_id": user_id, "total_points": initial_points},
        )
        return progress

    async def verify_milestone_requirements(self, user_id: int, milestone_type: MilestoneType) -> bool:
        requirement = COUNT_REQUIREMENTS.get(milestone_type)
        if requirement is None:
            return True
        model, minimum = requirement
        result = await self.db.execute(
            select(func.count(model.id)).where(model.user_id == user_id)
        )
        return (result.scalar() or 0) >= minimum

    async def complete_milestone(self, user_id: int, milestone_type: MilestoneType) -> bool:
        """Mark a milestone completed and award its points.

        Returns True only for the call that performed the transition.
        """
        if await self._get_progress(user_id) is None:
            await self.initialize_user_journey(user_id)

        now = datetime.utcnow()
        result = await self.db.execute(
            update(UserJourneyMilestone)
            .where(
                UserJourneyMilestone.user_id == user_id,
                UserJourneyMilestone.milestone_type == milestone_type,
                UserJourneyMilestone.is_completed == False,  # noqa: E712
            )
            .values(is_completed=True, completed_at=now)
        )
        if result.rowcount != 1:
            return False

        points = MILESTONE_DEFINITIONS[milestone_type].points
        progress = (
            await self.db.execute(
                select(UserJourneyProgress)
                .where(UserJourneyProgress.user_id == user_id)
                .with_for_update()
                .execution_options(populate_existing=True)
            )
        ).scalar_one()

        progress.total_points += points
        progress.completed_milestones += 1
        progress.current_level = compute_level(progress.total_points)
        progress.journey_stage = compute_stage(progress.total_points, progress.completed_milestones)
        progress.last_activity_at = now
        await self.db.commit()

        logger.info(
            "Completed milestone",
            extra={
                "user_id": user_id,
                "milestone_type": milestone_type.value,
                "points": points,
                "total_points": progress.total_points,
            },
        )
        return True

    async def check_and_complete_milestone(self, user_id: int, milestone_type: MilestoneType) -> bool:
        if not await self.verify_milestone_requirements(user_id, milestone_type):
            return False
        return await self.complete_milestone(user_id, milestone_type)

    async def check_all_milestones(self, user_id: int) -> list[MilestoneType]:
        """Run the count sweep over every auto-complete milestone."""
        completed = []
        for milestone_type, definition in MILESTONE_DEFINITIONS.items():
            if not definition.auto_complete:
                continue
            if await self.check_and_complete_milestone(user_id, milestone_type):
                completed.append(milestone_type)
        return completed

    async def get_user_journey_data(self, user_id: int) -> dict[str, Any]:
        progress = await self._get_progress(user_id)
        result = await self.db.execute(
            select(UserJourneyMilestone)
            .where(UserJourneyMilestone.user_id == user_id)
            .order_by(UserJourneyMilestone.created_at.desc(), UserJourneyMilestone.id)
        )
        return {"progress": progress, "milestones": list(result.scalars().all())}
