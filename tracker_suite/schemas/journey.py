"""Journey schemas."""
from pydantic import BaseModel
from datetime import datetime
from typing import Optional

from tracker_suite.models.journey import MilestoneType, MilestoneCategory, JourneyStage


class MilestoneResponse(BaseModel):
    id: int
    milestone_type: MilestoneType
    title: str
    description: str
    is_completed: bool
    completed_at: Optional[datetime] = None
    points: int
    category: MilestoneCategory
    created_at: datetime

    class Config:
        from_attributes = True


class ProgressResponse(BaseModel):
    total_points: int
    completed_milestones: int
    current_level: int
    journey_stage: JourneyStage
    last_activity_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class JourneyResponse(BaseModel):
    progress: Optional[ProgressResponse] = None
    milestones: list[MilestoneResponse] = []


class MilestoneCompletionResponse(BaseModel):
    completed: bool
    journey: Optional[JourneyResponse] = None


class CheckMilestonesResponse(BaseModel):
    completed_milestones: list[MilestoneType]
    journey: JourneyResponse
