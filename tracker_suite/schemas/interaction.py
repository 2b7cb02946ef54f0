"""Interaction schemas for request/response validation."""
from pydantic import BaseModel, Field
from datetime import datetime

from tracker_suite.models.interaction import InteractionType


class InteractionCreate(BaseModel):
    """Schema for logging an interaction. There is no update schema."""
    client_id: int
    type: InteractionType
    notes: str = Field(..., min_length=1)


class InteractionResponse(BaseModel):
    id: int
    user_id: int
    client_id: int
    type: InteractionType
    notes: str
    created_at: datetime

    class Config:
        from_attributes = True
