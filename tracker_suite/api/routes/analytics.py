"""Dashboard stats and the analytics overview."""

from fastapi import APIRouter
from sqlalchemy import select, func
from datetime import datetime, timedelta

from tracker_suite.api.deps import DbSession, TrialUser
from tracker_suite.models.client import Client, ClientStatus
from tracker_suite.models.follow_up import FollowUp, FollowUpStatus
from tracker_suite.models.interaction import Interaction
from tracker_suite.models.journey import MilestoneType
from tracker_suite.schemas.analytics import DashboardStats, AnalyticsOverview, RecentActivity
from tracker_suite.services.journey_service import JourneyService

dashboard_router = APIRouter()
analytics_router = APIRouter()

RECENT_ACTIVITY_LIMIT = 10


async def _count(db, query) -> int:
    result = await db.execute(query)
    return result.scalar() or 0


def _open_overdue(user_id: int, now: datetime):
    return select(func.count(FollowUp.id)).where(
        FollowUp.user_id == user_id,
        FollowUp.status != FollowUpStatus.completed,
        FollowUp.due_date < now,
    )


@dashboard_router.get("/stats", response_model=DashboardStats)
async def get_dashboard_stats(db: DbSession, current_user: TrialUser):
    now = datetime.utcnow()
    week_ago = now - timedelta(days=7)
    month_ago = now - timedelta(days=30)
    user_id = current_user.id

    return DashboardStats(
        total_clients=await _count(
            db, select(func.count(Client.id)).where(Client.user_id == user_id)
        ),
        pending_follow_ups=await _count(
            db,
            select(func.count(FollowUp.id)).where(
                FollowUp.user_id == user_id, FollowUp.status == FollowUpStatus.pending
            ),
        ),
        completed_this_week=await _count(
            db,
            select(func.count(FollowUp.id)).where(
                FollowUp.user_id == user_id,
                FollowUp.status == FollowUpStatus.completed,
                FollowUp.completed_at >= week_ago,
            ),
        ),
        new_this_month=await _count(
            db,
            select(func.count(Client.id)).where(
                Client.user_id == user_id, Client.created_at >= month_ago
            ),
        ),
        overdue_follow_ups=await _count(db, _open_overdue(user_id, now)),
    )


@analytics_router.get("/overview", response_model=AnalyticsOverview)
async def get_analytics_overview(db: DbSession, current_user: TrialUser):
    """Totals, breakdowns and the latest activity. Viewing it counts as using reporting."""
    user_id = current_user.id
    now = datetime.utcnow()

    status_rows = await db.execute(
        select(Client.status, func.count(Client.id))
        .where(Client.user_id == user_id)
        .group_by(Client.status)
    )
    clients_by_status = {status.value: count for status, count in status_rows.all()}

    priority_rows = await db.execute(
        select(Client.priority, func.count(Client.id))
        .where(Client.user_id == user_id)
        .group_by(Client.priority)
    )
    clients_by_priority = {priority.value: count for priority, count in priority_rows.all()}

    recent_clients = await db.execute(
        select(Client).where(Client.user_id == user_id)
        .order_by(Client.created_at.desc(), Client.id.desc()).limit(RECENT_ACTIVITY_LIMIT)
    )
    recent_follow_ups = await db.execute(
        select(FollowUp).where(FollowUp.user_id == user_id)
        .order_by(FollowUp.created_at.desc(), FollowUp.id.desc()).limit(RECENT_ACTIVITY_LIMIT)
    )
    recent_interactions = await db.execute(
        select(Interaction).where(Interaction.user_id == user_id)
        .order_by(Interaction.created_at.desc(), Interaction.id.desc()).limit(RECENT_ACTIVITY_LIMIT)
    )

    overview = AnalyticsOverview(
        total_clients=sum(clients_by_status.values()),
        active_clients=clients_by_status.get(ClientStatus.active.value, 0),
        total_interactions=await _count(
            db, select(func.count(Interaction.id)).where(Interaction.user_id == user_id)
        ),
        total_follow_ups=await _count(
            db, select(func.count(FollowUp.id)).where(FollowUp.user_id == user_id)
        ),
        completed_follow_ups=await _count(
            db,
            select(func.count(FollowUp.id)).where(
                FollowUp.user_id == user_id, FollowUp.status == FollowUpStatus.completed
            ),
        ),
        overdue_follow_ups=await _count(db, _open_overdue(user_id, now)),
        clients_by_status=clients_by_status,
        clients_by_priority=clients_by_priority,
        recent_activity=RecentActivity(
            clients=recent_clients.scalars().all(),
            follow_ups=recent_follow_ups.scalars().all(),
            interactions=recent_interactions.scalars().all(),
        ),
    )

    await JourneyService(db).complete_milestone(user_id, MilestoneType.advanced_reporting_used)
    return overview
