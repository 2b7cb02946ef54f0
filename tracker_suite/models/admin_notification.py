"""Admin notification model - durable events for the admin console."""

from sqlalchemy import Column, Integer, String, DateTime, Text, Boolean, Enum, JSON
from sqlalchemy.sql import func
import enum

from tracker_suite.database import Base


class AdminNotificationType(str, enum.Enum):
    user_registration = "user_registration"
    user_login = "user_login"
    role_change = "role_change"
    trial_expiring = "trial_expiring"
    trial_expired = "trial_expired"
    admin_action = "admin_action"
    system_alert = "system_alert"


class NotificationPriority(str, enum.Enum):
    low = "low"
    medium = "medium"
    high = "high"
    critical = "critical"


class AdminNotification(Base):
    """Event surfaced to admins. Only ``is_read`` ever changes after insert."""

    __tablename__ = "admin_notifications"

    id = Column(Integer, primary_key=True, index=True)
    type = Column(Enum(AdminNotificationType), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)

    # Subject user, denormalized so the entry survives user deletion
    user_id = Column(Integer, nullable=True)
    user_name = Column(String(255), nullable=True)
    user_email = Column(String(255), nullable=True)

    priority = Column(
        Enum(NotificationPriority), nullable=False, default=NotificationPriority.medium, index=True
    )
    is_read = Column(Boolean, nullable=False, default=False, index=True)
    data = Column(JSON, nullable=True)

    created_at = Column(DateTime, nullable=False, server_default=func.now(), index=True)

    def __repr__(self):
        return f"<AdminNotification {self.type}: {self.title[:30]}>"
