from fastapi import APIRouter

from tracker_suite.api.deps import DbSession, TrialUser
from tracker_suite.models.journey import MilestoneType
from tracker_suite.schemas.journey import (
    JourneyResponse,
    MilestoneCompletionResponse,
    CheckMilestonesResponse,
)
from tracker_suite.services.journey_service import JourneyService

router = APIRouter()


@router.get("", response_model=JourneyResponse)
async def get_journey(db: DbSession, current_user: TrialUser):
    """Progress and every milestone, creating the journey on first access."""
    service = JourneyService(db)
    await service.initialize_user_journey(current_user.id)
    return await service.get_user_journey_data(current_user.id)


@router.post("/milestone/{milestone_type}", response_model=MilestoneCompletionResponse)
async def complete_milestone(milestone_type: MilestoneType, db: DbSession, current_user: TrialUser):
    """Attempt a milestone. Count-based milestones only complete once their requirement is met."""
    service = JourneyService(db)
    completed = await service.check_and_complete_milestone(current_user.id, milestone_type)
    if not completed:
        return MilestoneCompletionResponse(completed=False)
    journey = await service.get_user_journey_data(current_user.id)
    return MilestoneCompletionResponse(completed=True, journey=journey)


@router.post("/check-milestones", response_model=CheckMilestonesResponse)
async def check_milestones(db: DbSession, current_user: TrialUser):
    service = JourneyService(db)
    await service.initialize_user_journey(current_user.id)
    completed = await service.check_all_milestones(current_user.id)
    journey = await service.get_user_journey_data(current_user.id)
    return CheckMilestonesResponse(completed_milestones=completed, journey=journey)
