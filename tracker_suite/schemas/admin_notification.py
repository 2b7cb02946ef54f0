"""Admin notification schemas."""
from pydantic import BaseModel, Field
from datetime import datetime
from typing import Any, Optional

from tracker_suite.models.admin_notification import AdminNotificationType, NotificationPriority


class AdminNotificationCreate(BaseModel):
    type: AdminNotificationType
    title: str = Field(..., min_length=1, max_length=255)
    message: str = Field(..., min_length=1)
    priority: NotificationPriority = NotificationPriority.medium
    user_id: Optional[int] = None
    user_name: Optional[str] = None
    user_email: Optional[str] = None
    data: Optional[dict[str, Any]] = None


class AdminNotificationResponse(BaseModel):
    id: int
    type: AdminNotificationType
    title: str
    message: str
    priority: NotificationPriority
    user_id: Optional[int] = None
    user_name: Optional[str] = None
    user_email: Optional[str] = None
    is_read: bool
    data: Optional[dict[str, Any]] = None
    created_at: datetime

    class Config:
        from_attributes = True


class UnreadCountResponse(BaseModel):
    unread: int


class MarkAllReadResponse(BaseModel):
    success: bool = True
    count: int
