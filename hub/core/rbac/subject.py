"""Resolved actors for authorization checks.

A ``Subject`` is the flattened view of a user the policies evaluate against:
the set of role names the user holds and the union of the permissions
granted by those roles. Permission names are parsed into typed
``Permission`` values once, here, so the policies never compare raw strings.
"""

from dataclasses import dataclass, field
from typing import Any, FrozenSet, Iterable, Union

from hub.common.logger import get_logger

from .permissions import Permission, PERMISSION_DEFINITIONS
from .roles import SUPER_ADMIN

logger = get_logger("rbac.subject")

PermissionLike = Union[str, Permission]


def _role_name(role: Any) -> str:
    return role if isinstance(role, str) else role.name


def parse_permissions(names: Iterable[PermissionLike]) -> FrozenSet[Permission]:
    """Parse permission names into registry permissions.

    Names outside the registry are skipped; they cannot satisfy any policy.
    """
    parsed = set()
    for name in names:
        if isinstance(name, Permission):
            parsed.add(name)
            continue
        perm = PERMISSION_DEFINITIONS.get(str(getattr(name, "name", name)))
        if perm is None:
            logger.debug(f"Skipping unregistered permission: {name}")
            continue
        parsed.add(perm)
    return frozenset(parsed)


@dataclass(frozen=True)
class Subject:
    """An actor (or a target user) with resolved roles and permissions."""

    id: Any
    roles: FrozenSet[str] = field(default_factory=frozenset)
    permissions: FrozenSet[Permission] = field(default_factory=frozenset)

    @classmethod
    def build(
        cls,
        id: Any,
        roles: Iterable[str] = (),
        permissions: Iterable[PermissionLike] = (),
    ) -> "Subject":
        """Build a subject from plain role and permission names."""
        return cls(
            id=id,
            roles=frozenset(_role_name(r) for r in roles),
            permissions=parse_permissions(permissions),
        )

    @property
    def is_super_admin(self) -> bool:
        return SUPER_ADMIN in self.roles

    def has_role(self, role: Union[str, Any, Iterable]) -> bool:
        """Check a role name or Role object; a collection matches if any member does."""
        if isinstance(role, str) or hasattr(role, "name"):
            return _role_name(role) in self.roles
        return any(self.has_role(r) for r in role)

    def has_any_role(self, roles: Iterable) -> bool:
        return any(self.has_role(r) for r in roles)

    def has_all_roles(self, roles: Iterable) -> bool:
        return all(self.has_role(r) for r in roles)

    def has_permission(self, permission: PermissionLike) -> bool:
        """Check if the subject holds a registry permission."""
        if isinstance(permission, Permission):
            return permission in self.permissions
        perm = PERMISSION_DEFINITIONS.get(str(getattr(permission, "name", permission)))
        return perm is not None and perm in self.permissions

    has_permission_to = has_permission

    def has_any_permission(self, permissions: Iterable[PermissionLike]) -> bool:
        return any(self.has_permission(p) for p in permissions)

    def has_all_permissions(self, permissions: Iterable[PermissionLike]) -> bool:
        return all(self.has_permission(p) for p in permissions)


def resolve_subject(user) -> Subject:
    """
    Flatten a user's roles into a Subject.

    Args:
        user: User model instance with a ``roles`` relationship whose items
            expose ``name`` and ``permissions`` (items with ``name``)

    Returns:
        Subject whose permissions are the union over all assigned roles
    """
    roles = list(getattr(user, "roles", None) or [])
    names = [perm.name for role in roles for perm in (role.permissions or [])]
    return Subject(
        id=user.id,
        roles=frozenset(role.name for role in roles),
        permissions=parse_permissions(names),
    )
