from fastapi import APIRouter, status
from sqlalchemy import select
import logging

from tracker_suite.api.deps import DbSession, TrialUser
from tracker_suite.api.routes.clients import get_owned_client
from tracker_suite.models.interaction import Interaction
from tracker_suite.models.journey import MilestoneType
from tracker_suite.schemas.interaction import InteractionCreate, InteractionResponse
from tracker_suite.services.journey_service import JourneyService

logger = logging.getLogger(__name__)

router = APIRouter()

INTERACTION_MILESTONES = (
    MilestoneType.first_interaction_logged,
    MilestoneType.fifty_interactions_milestone,
)


@router.get("", response_model=list[InteractionResponse])
async def list_interactions(db: DbSession, current_user: TrialUser):
    """Interaction history for all of the user's clients, newest first."""
    result = await db.execute(
        select(Interaction)
        .where(Interaction.user_id == current_user.id)
        .order_by(Interaction.created_at.desc(), Interaction.id.desc())
    )
    return result.scalars().all()


@router.get("/client/{client_id}", response_model=list[InteractionResponse])
async def list_client_interactions(client_id: int, db: DbSession, current_user: TrialUser):
    await get_owned_client(db, client_id, current_user.id)
    result = await db.execute(
        select(Interaction)
        .where(Interaction.client_id == client_id, Interaction.user_id == current_user.id)
        .order_by(Interaction.created_at.desc(), Interaction.id.desc())
    )
    return result.scalars().all()


@router.post("", response_model=InteractionResponse, status_code=status.HTTP_201_CREATED)
async def create_interaction(
    interaction_data: InteractionCreate,
    db: DbSession,
    current_user: TrialUser,
):
    """Log a contact event. Interactions cannot be edited afterwards."""
    await get_owned_client(db, interaction_data.client_id, current_user.id)

    interaction = Interaction(user_id=current_user.id, **interaction_data.model_dump())
    db.add(interaction)
    await db.commit()
    await db.refresh(interaction)

    journey = JourneyService(db)
    for milestone in INTERACTION_MILESTONES:
        await journey.check_and_complete_milestone(current_user.id, milestone)

    return interaction
