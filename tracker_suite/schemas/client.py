from pydantic import BaseModel, EmailStr, Field, field_validator
from datetime import datetime
from typing import Optional

from tracker_suite.models.client import ClientStatus, Priority


def _unique_tags(tags: Optional[list[str]]) -> Optional[list[str]]:
    """Tags behave as a set; keep first-seen order for stable output."""
    if tags is None:
        return None
    seen: dict[str, None] = {}
    for tag in tags:
        tag = tag.strip()
        if tag:
            seen.setdefault(tag, None)
    return list(seen)


class ClientBase(BaseModel):
    """Base client schema."""
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    phone: Optional[str] = Field(None, max_length=50)
    company: Optional[str] = Field(None, max_length=255)
    position: Optional[str] = Field(None, max_length=255)
    status: ClientStatus = ClientStatus.prospect
    priority: Priority = Priority.medium
    category: Optional[str] = Field(None, max_length=100)
    source: Optional[str] = Field(None, max_length=100)
    tags: list[str] = Field(default_factory=list)
    notes: Optional[str] = None
    last_contact_date: Optional[datetime] = None

    @field_validator("tags")
    @classmethod
    def dedupe_tags(cls, v):
        return _unique_tags(v)


class ClientCreate(ClientBase):
    """Schema for creating a client."""
    pass


class ClientUpdate(BaseModel):
    """Schema for updating a client (all fields optional)."""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=50)
    company: Optional[str] = Field(None, max_length=255)
    position: Optional[str] = Field(None, max_length=255)
    status: Optional[ClientStatus] = None
    priority: Optional[Priority] = None
    category: Optional[str] = Field(None, max_length=100)
    source: Optional[str] = Field(None, max_length=100)
    tags: Optional[list[str]] = None
    notes: Optional[str] = None
    last_contact_date: Optional[datetime] = None

    @field_validator("tags")
    @classmethod
    def dedupe_tags(cls, v):
        return _unique_tags(v)

    @field_validator("name", "email", "status", "priority", "tags")
    @classmethod
    def reject_null(cls, v):
        if v is None:
            raise ValueError("may not be null")
        return v


class ClientResponse(ClientBase):
    """Schema for client response."""
    id: int
    user_id: int
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
