"""Admin console: user management, trial control and admin notifications."""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select
from datetime import timedelta, datetime
import logging

from tracker_suite.api.deps import DbSession, EmailServiceDep
from tracker_suite.exceptions import NotFoundError, BusinessRuleError, ForbiddenError
from tracker_suite.models.journey import MilestoneType
from tracker_suite.models.user import User, UserRole, AccountStatus
from tracker_suite.schemas.admin import RoleUpdate, TrialUpdate, TrialCheckResponse
from tracker_suite.schemas.admin_notification import (
    AdminNotificationCreate,
    AdminNotificationResponse,
    UnreadCountResponse,
    MarkAllReadResponse,
)
from tracker_suite.schemas.auth import UserResponse
from tracker_suite.security.rbac import (
    AdminUser,
    MasterAdminUser,
    Permission,
    can_manage_user,
    require_permission,
)
from tracker_suite.services.admin_notification_service import AdminNotificationService
from tracker_suite.services.journey_service import JourneyService
from tracker_suite.services.trial import run_trial_check

logger = logging.getLogger(__name__)

router = APIRouter()


async def _get_user(db, user_id: int) -> User:
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if not user:
        raise NotFoundError("User", user_id)
    return user


# Users

@router.get(
    "/users",
    response_model=list[UserResponse],
    dependencies=[Depends(require_permission(Permission.VIEW_USERS))],
)
async def list_users(db: DbSession, admin: AdminUser):
    result = await db.execute(select(User).order_by(User.created_at, User.id))
    return result.scalars().all()


@router.put("/users/{user_id}/role", response_model=UserResponse)
async def update_user_role(
    user_id: int,
    role_update: RoleUpdate,
    db: DbSession,
    admin: MasterAdminUser,
):
    """Change a user's role. Master admins cannot demote themselves."""
    if admin.id == user_id and role_update.role != UserRole.master_admin:
        raise BusinessRuleError("Cannot demote yourself")

    user = await _get_user(db, user_id)
    old_role = user.user_role
    user.user_role = role_update.role
    await db.commit()
    await db.refresh(user)

    logger.info(
        "User role changed",
        extra={"user_id": user.id, "new_role": role_update.role.value, "changed_by": admin.id},
    )
    await AdminNotificationService(db).notify_role_change(
        user, old_role, role_update.role, admin.full_name
    )
    return user


@router.put(
    "/users/{user_id}/trial",
    response_model=UserResponse,
    dependencies=[Depends(require_permission(Permission.MODIFY_TRIALS))],
)
async def update_user_trial(
    user_id: int,
    trial_update: TrialUpdate,
    db: DbSession,
    admin: AdminUser,
):
    """Set the account status; ``trial_days`` restarts the trial from now.

    Admins may only change plain users; master admins anyone but themselves.
    """
    user = await _get_user(db, user_id)
    if not can_manage_user(admin, user):
        logger.warning(
            "Trial update denied",
            extra={"user_id": user.id, "changed_by": admin.id},
        )
        raise ForbiddenError("Not allowed to manage this account")
    previous_status = user.account_status

    user.account_status = trial_update.account_status
    if trial_update.account_status == AccountStatus.trial and trial_update.trial_days:
        user.trial_ends_at = datetime.utcnow() + timedelta(days=trial_update.trial_days)
        user.trial_email_sent = False
    await db.commit()

    if (
        trial_update.account_status == AccountStatus.active
        and previous_status != AccountStatus.active
    ):
        await JourneyService(db).complete_milestone(user.id, MilestoneType.account_upgraded)

    await db.refresh(user)
    await AdminNotificationService(db).notify_admin_action(
        "Account Status Update",
        f"Account status of {user.full_name} set to {trial_update.account_status.value}",
        admin.full_name,
        target_user=user,
    )
    return user


@router.delete("/users/{user_id}")
async def delete_user(user_id: int, db: DbSession, admin: MasterAdminUser):
    if admin.id == user_id:
        raise BusinessRuleError("Cannot delete your own account")

    user = await _get_user(db, user_id)
    await db.delete(user)
    await db.commit()

    logger.info("User deleted", extra={"user_id": user_id, "deleted_by": admin.id})
    return {"message": "User deleted successfully"}


@router.post(
    "/trials/check",
    response_model=TrialCheckResponse,
    dependencies=[Depends(require_permission(Permission.MODIFY_TRIALS))],
)
async def check_trials(db: DbSession, admin: AdminUser, email_service: EmailServiceDep):
    """Run the trial monitor once, now."""
    return await run_trial_check(db, email_service)


# Notifications

@router.get("/notifications", response_model=list[AdminNotificationResponse])
async def list_notifications(
    db: DbSession,
    admin: AdminUser,
    limit: int = Query(50, ge=1, le=200),
    unread_only: bool = False,
):
    return await AdminNotificationService(db).list_recent(limit=limit, unread_only=unread_only)


@router.get("/notifications/unread-count", response_model=UnreadCountResponse)
async def get_unread_count(db: DbSession, admin: AdminUser):
    return UnreadCountResponse(unread=await AdminNotificationService(db).unread_count())


@router.post(
    "/notifications",
    response_model=AdminNotificationResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_notification(
    payload: AdminNotificationCreate,
    db: DbSession,
    admin: AdminUser,
):
    return await AdminNotificationService(db).create(payload)


@router.patch("/notifications/read-all", response_model=MarkAllReadResponse)
async def mark_all_notifications_read(db: DbSession, admin: AdminUser):
    count = await AdminNotificationService(db).mark_all_read()
    return MarkAllReadResponse(count=count)


@router.patch("/notifications/{notification_id}/read", response_model=AdminNotificationResponse)
async def mark_notification_read(notification_id: int, db: DbSession, admin: AdminUser):
    return await AdminNotificationService(db).mark_read(notification_id)


@router.delete("/notifications/{notification_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_notification(notification_id: int, db: DbSession, admin: AdminUser):
    await AdminNotificationService(db).delete(notification_id)
