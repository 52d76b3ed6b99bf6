"""Default role definitions for the Analytics Hub.

Defines the 6 standard roles with their permission sets:
1. Super Administrator - every permission, system role
2. Administrator - user, RBAC, content and menu management
3. Manager - analytics and data access
4. Data Analyst - analytics viewing and basic data access
5. Viewer - read-only analytics
6. Regular User - minimal analytics access

``admin`` and ``super_admin`` are also the role names that the permissive
policies treat as a bypass.
"""

from typing import Dict, FrozenSet, List

from .permissions import Action, Permission, PERMISSION_DEFINITIONS, Resource

SUPER_ADMIN = "super_admin"
ADMIN = "admin"

# Roles that short-circuit permissive policies
BYPASS_ROLES: FrozenSet[str] = frozenset([ADMIN, SUPER_ADMIN])


def _build_permissions(*perms: tuple) -> List[str]:
    """Build permission strings from (Resource, Action) tuples."""
    return [str(Permission(r, a)) for r, a in perms]


# Super admin: every registered permission
SUPER_ADMIN_PERMISSIONS = list(PERMISSION_DEFINITIONS.keys())

ADMIN_PERMISSIONS = _build_permissions(
    # Users
    (Resource.USERS, Action.VIEW),
    (Resource.USERS, Action.CREATE),
    (Resource.USERS, Action.UPDATE),
    (Resource.USERS, Action.MANAGE),

    # RBAC administration (restricted grants stay with super admins)
    (Resource.ROLES, Action.VIEW),
    (Resource.ROLES, Action.CREATE),
    (Resource.ROLES, Action.UPDATE),
    (Resource.ROLES, Action.ASSIGN_PERMISSIONS),
    (Resource.PERMISSIONS, Action.VIEW),
    (Resource.USER_ROLES, Action.VIEW),
    (Resource.USER_ROLES, Action.ASSIGN),
    (Resource.USER_ROLES, Action.REMOVE),

    # Analytics and data
    (Resource.ANALYTICS, Action.VIEW),
    (Resource.ANALYTICS, Action.CREATE),
    (Resource.ANALYTICS, Action.UPDATE),
    (Resource.ANALYTICS, Action.DELETE),
    (Resource.ANALYTICS, Action.EXPORT),
    (Resource.DATA, Action.VIEW),
    (Resource.DATA, Action.IMPORT),
    (Resource.DATA, Action.EXPORT),

    # Administration
    (Resource.ADMIN, Action.VIEW),
    (Resource.ADMIN, Action.LOGS),
    (Resource.TERMS, Action.VIEW),
    (Resource.TERMS, Action.MANAGE),
    (Resource.IP_BLOCKS, Action.VIEW),
    (Resource.IP_BLOCKS, Action.MANAGE),
    (Resource.INVITATIONS, Action.VIEW),
    (Resource.INVITATIONS, Action.SEND),
    (Resource.INVITATIONS, Action.MANAGE),

    # Navigation and content
    (Resource.MENUS, Action.MANAGE),
    (Resource.CONTENT, Action.MANAGE),
)

MANAGER_PERMISSIONS = _build_permissions(
    (Resource.USERS, Action.VIEW),
    (Resource.ANALYTICS, Action.VIEW),
    (Resource.ANALYTICS, Action.CREATE),
    (Resource.ANALYTICS, Action.UPDATE),
    (Resource.ANALYTICS, Action.EXPORT),
    (Resource.DATA, Action.VIEW),
    (Resource.DATA, Action.EXPORT),
    (Resource.ADMIN, Action.VIEW),
    (Resource.TERMS, Action.VIEW),
)

ANALYST_PERMISSIONS = _build_permissions(
    (Resource.ANALYTICS, Action.VIEW),
    (Resource.ANALYTICS, Action.CREATE),
    (Resource.ANALYTICS, Action.EXPORT),
    (Resource.DATA, Action.VIEW),
    (Resource.DATA, Action.EXPORT),
    (Resource.TERMS, Action.VIEW),
)

VIEWER_PERMISSIONS = _build_permissions(
    (Resource.ANALYTICS, Action.VIEW),
    (Resource.DATA, Action.VIEW),
    (Resource.TERMS, Action.VIEW),
)

USER_PERMISSIONS = _build_permissions(
    (Resource.ANALYTICS, Action.VIEW),
    (Resource.TERMS, Action.VIEW),
)


# Default roles configuration
DEFAULT_ROLES: Dict[str, dict] = {
    SUPER_ADMIN: {
        "display_name": "Super Administrator",
        "description": "Full system access with all permissions",
        "color": "#DC2626",
        "permissions": SUPER_ADMIN_PERMISSIONS,
        "is_system": True,
    },
    ADMIN: {
        "display_name": "Administrator",
        "description": "Administrator with user and content management access",
        "color": "#EA580C",
        "permissions": ADMIN_PERMISSIONS,
        "is_system": False,
    },
    "manager": {
        "display_name": "Manager",
        "description": "Manager with analytics and data access",
        "color": "#D97706",
        "permissions": MANAGER_PERMISSIONS,
        "is_system": False,
    },
    "analyst": {
        "display_name": "Data Analyst",
        "description": "Data analyst with analytics viewing and basic data access",
        "color": "#059669",
        "permissions": ANALYST_PERMISSIONS,
        "is_system": False,
    },
    "viewer": {
        "display_name": "Viewer",
        "description": "Read-only access to analytics and basic data",
        "color": "#0284C7",
        "permissions": VIEWER_PERMISSIONS,
        "is_system": False,
    },
    "user": {
        "display_name": "Regular User",
        "description": "Basic user with limited analytics access",
        "color": "#6366F1",
        "permissions": USER_PERMISSIONS,
        "is_system": False,
    },
}


def get_default_role_permissions(role_key: str) -> List[str]:
    """Get permissions list for a default role."""
    role = DEFAULT_ROLES.get(role_key)
    if not role:
        raise ValueError(f"Unknown default role: {role_key}")
    return role["permissions"]


def get_all_default_roles() -> Dict[str, dict]:
    """Get all default role definitions."""
    return DEFAULT_ROLES.copy()
