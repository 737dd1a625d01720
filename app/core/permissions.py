# app/core/permissions.py
"""
Permission evaluation.

Every function here is a pure function of an actor snapshot and the static
rules below. An actor is anything exposing ``role``, ``id`` and the
capability flags as attributes (a ``User`` row) or as keys (a mapping).

The caller is responsible for rejecting unauthenticated requests before
asking any of these questions.
"""

from collections.abc import Mapping
from typing import Any, Callable, Iterable, Optional, TypeVar

from loguru import logger

from app.core.exceptions import Unauthorized
from app.models.enums import Capability
from app.models.user import UserRole

T = TypeVar("T")

# Roles that may never be handed out by a given creator role.
# Super Admin is absent: it may assign anything.
FORBIDDEN_ASSIGNMENTS: dict[UserRole, frozenset[UserRole]] = {
    UserRole.Admin: frozenset({UserRole.SuperAdmin, UserRole.Admin}),
    UserRole.User: frozenset(UserRole),
}


def _get(actor: Any, key: str, default: Any = None) -> Any:
    if isinstance(actor, Mapping):
        return actor.get(key, default)
    return getattr(actor, key, default)


def normalize_role(role: Any) -> Optional[UserRole]:
    """Accepts a UserRole or its display value ("Super Admin"). Unknown → None."""
    if isinstance(role, UserRole):
        return role
    if role is None:
        return None
    try:
        return UserRole(str(role).strip())
    except ValueError:
        return None


def _capability_key(capability: Capability | str) -> str:
    if isinstance(capability, Capability):
        return capability.value
    return str(capability)


def is_super_admin(actor: Any) -> bool:
    return normalize_role(_get(actor, "role")) == UserRole.SuperAdmin


def has_capability(actor: Any, capability: Capability | str) -> bool:
    # Super Admin satisfies every check regardless of stored flags
    if is_super_admin(actor):
        return True
    return bool(_get(actor, _capability_key(capability), False))


def can_assign_role(creator_role: Any, target_role: Any) -> bool:
    creator = normalize_role(creator_role)
    target = normalize_role(target_role)
    if creator is None or target is None:
        return False
    return target not in FORBIDDEN_ASSIGNMENTS.get(creator, frozenset())


def can_assign_capability(creator: Any, capability: Capability | str) -> bool:
    role = normalize_role(_get(creator, "role"))
    if role == UserRole.SuperAdmin:
        return True
    if role == UserRole.Admin:
        # No escalation beyond the admin's own grant set
        return bool(_get(creator, _capability_key(capability), False))
    return False


def filter_visible_records(
    actor: Any,
    records: Iterable[T],
    owner_of: Callable[[T], Any],
    *,
    self_of: Optional[Callable[[T], Any]] = None,
    read_all: Capability | str = Capability.SeeAllRecords,
) -> list[T]:
    """
    Super Admins and holders of ``read_all`` see everything. Admins see the
    records they own. Users see the records they own and, when ``self_of``
    is given, their own record.
    """
    records = list(records)
    if has_capability(actor, read_all):
        return records

    actor_id = _get(actor, "id")
    role = normalize_role(_get(actor, "role"))

    if role == UserRole.Admin:
        return [r for r in records if owner_of(r) == actor_id]

    if role == UserRole.User:
        return [
            r for r in records
            if owner_of(r) == actor_id or (self_of is not None and self_of(r) == actor_id)
        ]

    return []


def can_view_record(
    actor: Any,
    record: Any,
    owner_of: Callable[[Any], Any],
    *,
    self_of: Optional[Callable[[Any], Any]] = None,
    read_all: Capability | str = Capability.SeeAllRecords,
) -> bool:
    return bool(filter_visible_records(actor, [record], owner_of, self_of=self_of, read_all=read_all))


# ----------------------------------------------------------------
# Raising variants used by endpoints and dependencies
# ----------------------------------------------------------------
def check_capability(actor: Any, *capabilities: Capability | str) -> None:
    for capability in capabilities:
        if not has_capability(actor, capability):
            logger.warning(
                f"Denied {_get(actor, 'user_id', _get(actor, 'id'))}: missing {_capability_key(capability)}"
            )
            raise Unauthorized()


def check_role_assignment(creator: Any, target_role: Any) -> None:
    if not can_assign_role(_get(creator, "role"), target_role):
        logger.warning(
            f"Denied {_get(creator, 'user_id', _get(creator, 'id'))}: may not assign role {target_role}"
        )
        raise Unauthorized()


def check_capability_grants(creator: Any, requested: Mapping[str, bool]) -> None:
    """``requested`` maps capability keys to the value being set. Only grants (True) are checked."""
    for key, value in requested.items():
        if value and not can_assign_capability(creator, key):
            logger.warning(
                f"Denied {_get(creator, 'user_id', _get(creator, 'id'))}: may not grant {key}"
            )
            raise Unauthorized()
