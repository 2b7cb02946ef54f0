from fastapi import APIRouter, status
from sqlalchemy import select
from datetime import datetime
import logging

from tracker_suite.api.deps import DbSession, TrialUser
from tracker_suite.api.routes.clients import get_owned_client
from tracker_suite.exceptions import NotFoundError
from tracker_suite.models.client import Client
from tracker_suite.models.follow_up import FollowUp, FollowUpStatus
from tracker_suite.models.journey import MilestoneType
from tracker_suite.schemas.follow_up import (
    FollowUpCreate,
    FollowUpUpdate,
    FollowUpResponse,
    FollowUpNotificationResponse,
)
from tracker_suite.services.follow_up_notifications import derive_notifications
from tracker_suite.services.journey_service import JourneyService

logger = logging.getLogger(__name__)

router = APIRouter()

FOLLOW_UP_MILESTONES = (
    MilestoneType.first_follow_up_scheduled,
    MilestoneType.ten_follow_ups_milestone,
)


async def _get_owned_follow_up(db, follow_up_id: int, user_id: int) -> FollowUp:
    result = await db.execute(
        select(FollowUp).where(FollowUp.id == follow_up_id, FollowUp.user_id == user_id)
    )
    follow_up = result.scalar_one_or_none()
    if not follow_up:
        raise NotFoundError("Follow-up", follow_up_id)
    return follow_up


@router.get("", response_model=list[FollowUpResponse])
async def list_follow_ups(db: DbSession, current_user: TrialUser):
    result = await db.execute(
        select(FollowUp)
        .where(FollowUp.user_id == current_user.id)
        .order_by(FollowUp.due_date, FollowUp.id)
    )
    return result.scalars().all()


@router.get("/overdue", response_model=list[FollowUpResponse])
async def list_overdue_follow_ups(db: DbSession, current_user: TrialUser):
    """Open follow-ups whose due date has passed."""
    result = await db.execute(
        select(FollowUp)
        .where(
            FollowUp.user_id == current_user.id,
            FollowUp.status != FollowUpStatus.completed,
            FollowUp.due_date < datetime.utcnow(),
        )
        .order_by(FollowUp.due_date, FollowUp.id)
    )
    return result.scalars().all()


@router.get("/upcoming", response_model=list[FollowUpResponse])
async def list_upcoming_follow_ups(db: DbSession, current_user: TrialUser):
    """Open follow-ups due from now on."""
    result = await db.execute(
        select(FollowUp)
        .where(
            FollowUp.user_id == current_user.id,
            FollowUp.status != FollowUpStatus.completed,
            FollowUp.due_date >= datetime.utcnow(),
        )
        .order_by(FollowUp.due_date, FollowUp.id)
    )
    return result.scalars().all()


@router.get("/notifications", response_model=list[FollowUpNotificationResponse])
async def get_follow_up_notifications(db: DbSession, current_user: TrialUser):
    """Reminders derived from open follow-ups, most urgent first."""
    follow_ups = (
        await db.execute(
            select(FollowUp).where(
                FollowUp.user_id == current_user.id,
                FollowUp.status != FollowUpStatus.completed,
            )
        )
    ).scalars().all()
    clients = (
        await db.execute(select(Client).where(Client.user_id == current_user.id))
    ).scalars().all()

    notifications = derive_notifications(follow_ups, {c.id: c for c in clients})
    return [n.to_dict() for n in notifications]


@router.get("/client/{client_id}", response_model=list[FollowUpResponse])
async def list_client_follow_ups(client_id: int, db: DbSession, current_user: TrialUser):
    await get_owned_client(db, client_id, current_user.id)
    result = await db.execute(
        select(FollowUp)
        .where(FollowUp.client_id == client_id, FollowUp.user_id == current_user.id)
        .order_by(FollowUp.due_date, FollowUp.id)
    )
    return result.scalars().all()


@router.post("", response_model=FollowUpResponse, status_code=status.HTTP_201_CREATED)
async def create_follow_up(
    follow_up_data: FollowUpCreate,
    db: DbSession,
    current_user: TrialUser,
):
    await get_owned_client(db, follow_up_data.client_id, current_user.id)

    follow_up = FollowUp(user_id=current_user.id, **follow_up_data.model_dump())
    if follow_up.status == FollowUpStatus.completed:
        follow_up.completed_at = datetime.utcnow()
    db.add(follow_up)
    await db.commit()
    await db.refresh(follow_up)

    journey = JourneyService(db)
    for milestone in FOLLOW_UP_MILESTONES:
        await journey.check_and_complete_milestone(current_user.id, milestone)

    return follow_up


@router.put("/{follow_up_id}", response_model=FollowUpResponse)
async def update_follow_up(
    follow_up_id: int,
    follow_up_data: FollowUpUpdate,
    db: DbSession,
    current_user: TrialUser,
):
    """Partial update. Completing stamps ``completed_at``; reopening clears it."""
    follow_up = await _get_owned_follow_up(db, follow_up_id, current_user.id)

    update_data = follow_up_data.model_dump(exclude_unset=True)
    for field, value in update_data.items():
        setattr(follow_up, field, value)

    if "status" in update_data:
        if follow_up.status == FollowUpStatus.completed:
            follow_up.completed_at = follow_up.completed_at or datetime.utcnow()
        else:
            follow_up.completed_at = None

    await db.commit()
    await db.refresh(follow_up)
    return follow_up


@router.delete("/{follow_up_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_follow_up(follow_up_id: int, db: DbSession, current_user: TrialUser):
    follow_up = await _get_owned_follow_up(db, follow_up_id, current_user.id)
    await db.delete(follow_up)
    await db.commit()
