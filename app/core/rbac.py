# app/core/rbac.py

from fastapi import Depends
from app.api.deps import get_current_user
from app.core.exceptions import Unauthorized
from app.core.permissions import check_capability, normalize_role
from app.models.enums import Capability
from app.models.user import User, UserRole


def RequireCapability(*capabilities: Capability):
    """
    Route guard: the current user must hold every listed capability.
    Super Admin bypasses the flags.
    """

    async def capability_checker(current_user: User = Depends(get_current_user)):
        check_capability(current_user, *capabilities)
        return current_user

    return capability_checker


def AllowRoles(*allowed_roles):
    """
    Coarse role guard. Accepts UserRole values or their display strings.
    Super Admin bypasses everything.
    """

    normalized_allowed = {normalize_role(r) for r in allowed_roles}

    async def role_checker(current_user: User = Depends(get_current_user)):
        user_role = normalize_role(current_user.role)

        if user_role == UserRole.SuperAdmin:
            return current_user

        if user_role not in normalized_allowed:
            raise Unauthorized()

        return current_user

    return role_checker


require_super_admin = AllowRoles(UserRole.SuperAdmin)
require_admin = AllowRoles(UserRole.Admin)
