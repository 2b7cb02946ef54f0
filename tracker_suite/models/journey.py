"""User journey models - milestones and per-user progress."""

from sqlalchemy import (
    Column, Integer, String, DateTime, Text, Boolean, Enum, ForeignKey, UniqueConstraint,
)
from sqlalchemy.sql import func
import enum

from tracker_suite.database import Base


class MilestoneType(str, enum.Enum):
    account_created = "account_created"
    first_client_added = "first_client_added"
    first_follow_up_scheduled = "first_follow_up_scheduled"
    first_interaction_logged = "first_interaction_logged"
    five_clients_milestone = "five_clients_milestone"
    ten_follow_ups_milestone = "ten_follow_ups_milestone"
    first_export = "first_export"
    trial_started = "trial_started"
    account_upgraded = "account_upgraded"
    profile_completed = "profile_completed"
    first_email_sent = "first_email_sent"
    advanced_reporting_used = "advanced_reporting_used"
    twenty_clients_milestone = "twenty_clients_milestone"
    fifty_interactions_milestone = "fifty_interactions_milestone"


class MilestoneCategory(str, enum.Enum):
    getting_started = "getting_started"
    client_management = "client_management"
    engagement = "engagement"
    growth = "growth"
    advanced = "advanced"


class JourneyStage(str, enum.Enum):
    onboarding = "onboarding"
    exploring = "exploring"
    active = "active"
    power_user = "power_user"
    expert = "expert"


class UserJourneyMilestone(Base):
    """One-time achievement. Once completed it is never reopened."""

    __tablename__ = "user_journey_milestones"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    milestone_type = Column(Enum(MilestoneType), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    is_completed = Column(Boolean, nullable=False, default=False, index=True)
    completed_at = Column(DateTime, nullable=True)
    points = Column(Integer, nullable=False, default=10)
    category = Column(Enum(MilestoneCategory), nullable=False, index=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now())

    __table_args__ = (
        UniqueConstraint("user_id", "milestone_type", name="unique_user_milestone"),
    )

    def __repr__(self):
        return f"<UserJourneyMilestone {self.milestone_type} user={self.user_id}>"


class UserJourneyProgress(Base):
    """Running totals for a user's journey; one row per user."""

    __tablename__ = "user_journey_progress"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True, index=True
    )
    total_points = Column(Integer, nullable=False, default=0)
    completed_milestones = Column(Integer, nullable=False, default=0)
    current_level = Column(Integer, nullable=False, default=1, index=True)
    journey_stage = Column(
        Enum(JourneyStage), nullable=False, default=JourneyStage.onboarding, index=True
    )
    last_activity_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, nullable=False, server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<UserJourneyProgress user={self.user_id} points={self.total_points}>"
