"""
Role-Based Access Control (RBAC) Module

Maps the three account roles to permissions and provides the dependencies
that guard the admin console.
"""

from enum import Enum
from typing import Annotated, Set
from fastapi import Depends
import logging

from tracker_suite.api.deps import CurrentUser
from tracker_suite.exceptions import ForbiddenError
from tracker_suite.models.user import User, UserRole

logger = logging.getLogger(__name__)


class Permission(str, Enum):
    """Admin console permissions."""
    VIEW_USERS = "view_users"
    MODIFY_TRIALS = "modify_trials"


# Role-to-permissions mapping
ROLE_PERMISSIONS: dict[UserRole, Set[Permission]] = {
    UserRole.user: set(),
    UserRole.admin: {
        Permission.VIEW_USERS,
        Permission.MODIFY_TRIALS,
    },
    UserRole.master_admin: set(Permission),  # All permissions
}


def get_user_role(user: User) -> UserRole:
    return UserRole(user.user_role)


def get_user_permissions(user: User) -> Set[Permission]:
    """Get all permissions for a user based on their role."""
    return ROLE_PERMISSIONS.get(get_user_role(user), set())


def has_permission(user: User, permission: Permission) -> bool:
    """Check if user has a specific permission."""
    return permission in get_user_permissions(user)


def can_manage_user(manager: User, target: User) -> bool:
    """Master admins manage anyone else; admins manage plain users only."""
    if manager.id == target.id:
        return False
    manager_role = get_user_role(manager)
    if manager_role == UserRole.master_admin:
        return True
    if manager_role == UserRole.admin:
        return get_user_role(target) == UserRole.user
    return False


def require_permission(permission: Permission):
    """
    Dependency factory for requiring a specific permission.

    Usage:
        @router.put("/admin/users/{user_id}/trial")
        async def update_trial(
            current_user: CurrentUser,
            _: None = Depends(require_permission(Permission.MODIFY_TRIALS))
        ):
            ...
    """
    def checker(current_user: CurrentUser) -> None:
        if not has_permission(current_user, permission):
            logger.warning(
                f"Permission denied: user {current_user.id} lacks {permission.value}",
                extra={"user_id": current_user.id, "permission": permission.value}
            )
            raise ForbiddenError(f"Permission denied: requires {permission.value}")
    return checker


def require_admin(current_user: CurrentUser) -> User:
    """Dependency for requiring admin or master admin role."""
    role = get_user_role(current_user)
    if role not in (UserRole.admin, UserRole.master_admin):
        logger.warning(
            f"Admin access denied for user {current_user.id}",
            extra={"user_id": current_user.id, "role": role.value}
        )
        raise ForbiddenError("Admin privileges required")
    return current_user


def require_master_admin(current_user: CurrentUser) -> User:
    """Dependency for requiring master admin role."""
    if get_user_role(current_user) != UserRole.master_admin:
        logger.warning(
            f"Master admin access denied for user {current_user.id}",
            extra={"user_id": current_user.id}
        )
        raise ForbiddenError("Master admin privileges required")
    return current_user


AdminUser = Annotated[User, Depends(require_admin)]
MasterAdminUser = Annotated[User, Depends(require_master_admin)]
