"""Staff roles and what each may do."""

from enum import Enum

from zipparents.auth.context import AuthContext
from zipparents.errors import PermissionDeniedError
from zipparents.models.user import UserRole


class Permission(str, Enum):
    VIEW_USERS = "view_users"
    MODERATE_CONTENT = "moderate_content"
    BAN_USERS = "ban_users"
    VIEW_REPORTS = "view_reports"
    MANAGE_EVENTS = "manage_events"


MODERATOR_PERMISSIONS = frozenset({
    Permission.VIEW_USERS,
    Permission.MODERATE_CONTENT,
    Permission.VIEW_REPORTS,
})


def has_permission(role: UserRole, permission: Permission) -> bool:
    if role == UserRole.ADMIN:
        return True
    if role == UserRole.MODERATOR:
        return permission in MODERATOR_PERMISSIONS
    return False


def require_permission(ctx: AuthContext, permission: Permission) -> None:
    ctx.require_active()
    if not has_permission(ctx.role, permission):
        raise PermissionDeniedError("Unauthorized: Admin access required")
