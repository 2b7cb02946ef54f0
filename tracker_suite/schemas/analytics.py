"""Dashboard and analytics schemas."""
from pydantic import BaseModel

from tracker_suite.schemas.client import ClientResponse
from tracker_suite.schemas.follow_up import FollowUpResponse
from tracker_suite.schemas.interaction import InteractionResponse


class DashboardStats(BaseModel):
    total_clients: int
    pending_follow_ups: int
    completed_this_week: int
    new_this_month: int
    overdue_follow_ups: int


class RecentActivity(BaseModel):
    clients: list[ClientResponse]
    follow_ups: list[FollowUpResponse]
    interactions: list[InteractionResponse]


class AnalyticsOverview(BaseModel):
    total_clients: int
    active_clients: int
    total_interactions: int
    total_follow_ups: int
    completed_follow_ups: int
    overdue_follow_ups: int
    clients_by_status: dict[str, int]
    clients_by_priority: dict[str, int]
    recent_activity: RecentActivity
