"""Admin notification store.

Durable, explicitly created events for the admin console. Read state only
moves from unread to read. Counts are always queried live.
"""

import logging
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import select, update, delete, func
from sqlalchemy.ext.asyncio import AsyncSession

from tracker_suite.exceptions import NotFoundError
from tracker_suite.models.admin_notification import (
    AdminNotification,
    AdminNotificationType,
    NotificationPriority,
)
from tracker_suite.models.user import User, UserRole
from tracker_suite.schemas.admin_notification import AdminNotificationCreate

logger = logging.getLogger(__name__)

DEFAULT_LIST_LIMIT = 50


def trial_expiring_priority(days_left: int) -> NotificationPriority:
    if days_left <= 1:
        return NotificationPriority.critical
    if days_left <= 3:
        return NotificationPriority.high
    return NotificationPriority.medium


def _role_label(role: Any) -> str:
    return role.value if isinstance(role, UserRole) else str(role)


class AdminNotificationService:
    """CRUD for admin notifications plus the event helpers used across the API."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, payload: AdminNotificationCreate) -> AdminNotification:
        notification = AdminNotification(
            type=payload.type,
            title=payload.title,
            message=payload.message,
            priority=payload.priority,
            user_id=payload.user_id,
            user_name=payload.user_name,
            user_email=payload.user_email,
            data=payload.data,
            is_read=False,
        )
        self.db.add(notification)
        await self.db.commit()
        await self.db.refresh(notification)

        logger.info(
            "Admin notification created",
            extra={
                "notification_id": notification.id,
                "notification_type": notification.type.value,
                "priority": notification.priority.value,
            },
        )
        return notification

    async def get(self, notification_id: int) -> AdminNotification:
        result = await self.db.execute(
            select(AdminNotification).where(AdminNotification.id == notification_id)
        )
        notification = result.scalar_one_or_none()
        if not notification:
            raise NotFoundError("Notification", notification_id)
        return notification

    async def list_recent(
        self, limit: int = DEFAULT_LIST_LIMIT, unread_only: bool = False
    ) -> list[AdminNotification]:
        query = select(AdminNotification)
        if unread_only:
            query = query.where(AdminNotification.is_read == False)  # noqa: E712
        query = query.order_by(
            AdminNotification.created_at.desc(), AdminNotification.id.desc()
        ).limit(limit)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def unread_count(self) -> int:
        result = await self.db.execute(
            select(func.count(AdminNotification.id)).where(AdminNotification.is_read == False)  # noqa: E712
        )
        return result.scalar() or 0

    async def mark_read(self, notification_id: int) -> AdminNotification:
        """Mark one notification read. Marking an already-read one is a no-op."""
        notification = await self.get(notification_id)
        if not notification.is_read:
            await self.db.execute(
                update(AdminNotification)
                .where(AdminNotification.id == notification_id)
                .values(is_read=True)
            )
            await self.db.commit()
            await self.db.refresh(notification)
        return notification

    async def mark_all_read(self) -> int:
        """Mark every unread notification read; returns how many changed."""
        result = await self.db.execute(
            update(AdminNotification)
            .where(AdminNotification.is_read == False)  # noqa: E712
            .values(is_read=True)
            .returning(AdminNotification.id)
        )
        count = len(result.all())
        await self.db.commit()
        return count

    async def delete(self, notification_id: int) -> None:
        result = await self.db.execute(
            delete(AdminNotification)
            .where(AdminNotification.id == notification_id)
            .returning(AdminNotification.id)
        )
        if result.scalar_one_or_none() is None:
            await self.db.rollback()
            raise NotFoundError("Notification", notification_id)
        await self.db.commit()

    # Event helpers

    async def _notify(
        self,
        type: AdminNotificationType,
        title: str,
        message: str,
        priority: NotificationPriority,
        user: Optional[User] = None,
        data: Optional[dict[str, Any]] = None,
    ) -> AdminNotification:
        payload = AdminNotificationCreate(
            type=type,
            title=title,
            message=message,
            priority=priority,
            user_id=user.id if user else None,
            user_name=user.full_name if user else None,
            user_email=user.email if user else None,
            data=data,
        )
        return await self.create(payload)

    async def notify_user_registration(self, user: User) -> AdminNotification:
        role = _role_label(user.user_role)
        return await self._notify(
            AdminNotificationType.user_registration,
            "New User Registration",
            f"{user.full_name} ({role}) has registered an account",
            NotificationPriority.medium,
            user=user,
            data={"user_role": role, "registration_date": datetime.utcnow().isoformat()},
        )

    async def notify_user_login(self, user: User) -> Optional[AdminNotification]:
        """Only admin and master admin logins are recorded."""
        if not user.is_admin:
            return None
        role = _role_label(user.user_role)
        return await self._notify(
            AdminNotificationType.user_login,
            "Admin Login",
            f"{user.full_name} ({role}) logged in",
            NotificationPriority.low,
            user=user,
            data={"user_role": role, "login_time": datetime.utcnow().isoformat()},
        )

    async def notify_role_change(
        self, user: User, old_role: Any, new_role: Any, changed_by: str
    ) -> AdminNotification:
        old_label, new_label = _role_label(old_role), _role_label(new_role)
        return await self._notify(
            AdminNotificationType.role_change,
            "User Role Changed",
            f"{user.full_name}'s role changed from {old_label} to {new_label} by {changed_by}",
            NotificationPriority.high,
            user=user,
            data={
                "old_role": old_label,
                "new_role": new_label,
                "changed_by": changed_by,
                "change_time": datetime.utcnow().isoformat(),
            },
        )

    async def notify_trial_expiring(self, user: User, days_left: int) -> AdminNotification:
        plural = "" if days_left == 1 else "s"
        return await self._notify(
            AdminNotificationType.trial_expiring,
            "Trial Expiring Soon",
            f"{user.full_name}'s trial expires in {days_left} day{plural}",
            trial_expiring_priority(days_left),
            user=user,
            data={"days_left": days_left, "expiration_alert": True},
        )

    async def notify_trial_expired(self, user: User) -> AdminNotification:
        return await self._notify(
            AdminNotificationType.trial_expired,
            "Trial Expired",
            f"{user.full_name}'s trial has expired",
            NotificationPriority.critical,
            user=user,
            data={"expired": True, "expired_at": datetime.utcnow().isoformat()},
        )

    async def notify_admin_action(
        self, action: str, details: str, performed_by: str, target_user: Optional[User] = None
    ) -> AdminNotification:
        return await self._notify(
            AdminNotificationType.admin_action,
            f"Admin Action: {action}",
            f"{details} performed by {performed_by}",
            NotificationPriority.medium,
            user=target_user,
            data={
                "action": action,
                "performed_by": performed_by,
                "performed_at": datetime.utcnow().isoformat(),
            },
        )

    async def notify_system_alert(
        self,
        title: str,
        message: str,
        priority: NotificationPriority = NotificationPriority.medium,
    ) -> AdminNotification:
        return await self._notify(
            AdminNotificationType.system_alert,
            title,
            message,
            priority,
            data={"system_alert": True, "alert_time": datetime.utcnow().isoformat()},
        )
