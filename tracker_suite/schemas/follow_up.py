"""Follow-up schemas for request/response validation."""
from pydantic import BaseModel, Field, field_validator
from datetime import datetime
from typing import Optional

from tracker_suite.models.client import Priority
from tracker_suite.models.follow_up import FollowUpStatus
from tracker_suite.schemas.types import UtcDateTime


class FollowUpBase(BaseModel):
    client_id: int
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    due_date: UtcDateTime
    status: FollowUpStatus = FollowUpStatus.pending
    priority: Priority = Priority.medium


class FollowUpCreate(FollowUpBase):
    pass


class FollowUpUpdate(BaseModel):
    """Partial update. Moving to ``completed`` stamps ``completed_at``."""
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    due_date: Optional[UtcDateTime] = None
    status: Optional[FollowUpStatus] = None
    priority: Optional[Priority] = None

    @field_validator("title", "due_date", "status", "priority")
    @classmethod
    def reject_null(cls, v):
        if v is None:
            raise ValueError("may not be null")
        return v


class FollowUpResponse(FollowUpBase):
    id: int
    user_id: int
    completed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class FollowUpNotificationResponse(BaseModel):
    """Derived reminder for a single follow-up."""
    id: str
    type: str
    title: str
    message: str
    follow_up_id: int
    client_id: int
    client_name: str
    due_date: datetime
    priority: str
    color: str
    icon: str
