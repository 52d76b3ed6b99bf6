"""Permission registry for the Analytics Hub RBAC.

Defines all resources, actions, and permission combinations.
Uses a matrix approach: permissions = actions × resources.

Permission string format: "resource.action"
Examples:
  - content.publish
  - menus.reorder
  - roles.assign_permissions
  - email-templates.view
"""

import re
from enum import Enum
from typing import Dict, FrozenSet, List, NamedTuple


class Resource(str, Enum):
    """Resources that can be protected by permissions."""

    # Identity and access
    USERS = "users"
    ROLES = "roles"
    PERMISSIONS = "permissions"
    USER_ROLES = "user_roles"

    # Analytics hub
    ANALYTICS = "analytics"
    DATA = "data"

    # System administration
    ADMIN = "admin"
    TERMS = "terms"
    IP_BLOCKS = "ip_blocks"
    INVITATIONS = "invitations"

    # Navigation and content
    MENUS = "menus"
    CONTENT = "content"
    EMAIL_TEMPLATES = "email-templates"


class Action(str, Enum):
    """Actions that can be performed on resources."""

    # Standard CRUD actions
    VIEW = "view"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    RESTORE = "restore"
    FORCE_DELETE = "force_delete"

    # Coarse grant covering every action on a resource's policy
    MANAGE = "manage"

    # Specialized actions
    ASSIGN_PERMISSIONS = "assign_permissions"
    ASSIGN = "assign"
    REMOVE = "remove"
    EXPORT = "export"
    IMPORT = "import"
    SETTINGS = "settings"
    LOGS = "logs"
    MAINTENANCE = "maintenance"
    SEND = "send"
    PUBLISH = "publish"
    REORDER = "reorder"


class Permission(NamedTuple):
    """A permission is a combination of resource and action."""
    resource: Resource
    action: Action

    def __str__(self) -> str:
        return f"{self.resource.value}.{self.action.value}"

    @property
    def name(self) -> str:
        return str(self)

    @property
    def group(self) -> str:
        return RESOURCE_GROUPS[self.resource]

    @classmethod
    def from_string(cls, perm_str: str) -> "Permission":
        """Parse a registered permission name like 'content.view'."""
        resource, sep, action = perm_str.partition(".")
        if not sep or not resource or not action:
            raise ValueError(f"Invalid permission format: {perm_str}")
        try:
            perm = cls(Resource(resource), Action(action))
        except ValueError:
            raise ValueError(f"Unknown permission: {perm_str}") from None
        if perm.action not in PERMISSION_MATRIX.get(perm.resource, frozenset()):
            raise ValueError(f"Unknown permission: {perm_str}")
        return perm


# Permission definitions matrix
# Maps each resource to its valid actions
PERMISSION_MATRIX: Dict[Resource, FrozenSet[Action]] = {
    Resource.USERS: frozenset([
        Action.VIEW, Action.CREATE, Action.UPDATE, Action.DELETE, Action.MANAGE,
    ]),
    Resource.ROLES: frozenset([
        Action.VIEW, Action.CREATE, Action.UPDATE, Action.DELETE,
        Action.RESTORE, Action.FORCE_DELETE, Action.ASSIGN_PERMISSIONS,
    ]),
    Resource.PERMISSIONS: frozenset([
        Action.VIEW, Action.CREATE, Action.UPDATE, Action.DELETE,
        Action.RESTORE, Action.FORCE_DELETE,
    ]),
    Resource.USER_ROLES: frozenset([
        Action.VIEW, Action.ASSIGN, Action.REMOVE,
    ]),
    Resource.ANALYTICS: frozenset([
        Action.VIEW, Action.CREATE, Action.UPDATE, Action.DELETE, Action.EXPORT,
    ]),
    Resource.DATA: frozenset([
        Action.VIEW, Action.IMPORT, Action.EXPORT, Action.MANAGE,
    ]),
    Resource.ADMIN: frozenset([
        Action.VIEW, Action.SETTINGS, Action.LOGS, Action.MAINTENANCE,
    ]),
    Resource.TERMS: frozenset([
        Action.VIEW, Action.MANAGE,
    ]),
    Resource.IP_BLOCKS: frozenset([
        Action.VIEW, Action.MANAGE,
    ]),
    Resource.INVITATIONS: frozenset([
        Action.VIEW, Action.SEND, Action.MANAGE,
    ]),
    Resource.MENUS: frozenset([
        Action.VIEW, Action.CREATE, Action.UPDATE, Action.DELETE,
        Action.MANAGE, Action.REORDER,
    ]),
    Resource.CONTENT: frozenset([
        Action.VIEW, Action.CREATE, Action.UPDATE, Action.DELETE,
        Action.MANAGE, Action.PUBLISH,
    ]),
    Resource.EMAIL_TEMPLATES: frozenset([
        Action.VIEW, Action.CREATE, Action.UPDATE, Action.DELETE,
    ]),
}

# Group label shown in the admin UI; defaults to the resource name
RESOURCE_GROUPS: Dict[Resource, str] = {
    resource: resource.value for resource in Resource
}
RESOURCE_GROUPS[Resource.IP_BLOCKS] = "security"
RESOURCE_GROUPS[Resource.EMAIL_TEMPLATES] = "email_templates"


def _generate_permission_definitions() -> Dict[str, Permission]:
    """Generate all valid permission combinations from the matrix."""
    permissions = {}
    for resource, actions in PERMISSION_MATRIX.items():
        for action in sorted(actions, key=lambda a: a.value):
            perm = Permission(resource, action)
            permissions[str(perm)] = perm
    return permissions


# All valid permissions as a dictionary: "resource.action" -> Permission
PERMISSION_DEFINITIONS = _generate_permission_definitions()


# Only a super admin may grant these to a role
RESTRICTED_PERMISSIONS: FrozenSet[Permission] = frozenset([
    Permission(Resource.ROLES, Action.CREATE),
    Permission(Resource.ROLES, Action.DELETE),
    Permission(Resource.USERS, Action.DELETE),
    Permission(Resource.PERMISSIONS, Action.CREATE),
    Permission(Resource.PERMISSIONS, Action.DELETE),
    Permission(Resource.ADMIN, Action.SETTINGS),
    Permission(Resource.ADMIN, Action.MAINTENANCE),
])

RESTRICTED_PERMISSION_NAMES: FrozenSet[str] = frozenset(str(p) for p in RESTRICTED_PERMISSIONS)


# Naming rules enforced at data entry
PERMISSION_NAME_PATTERN = re.compile(r"^[a-z0-9._-]+$")
ROLE_NAME_PATTERN = re.compile(r"^[a-z0-9_-]+$")


def is_valid_permission(perm_str: str) -> bool:
    """Check if a permission string is a registered permission."""
    return perm_str in PERMISSION_DEFINITIONS


def is_valid_permission_name(name: str) -> bool:
    """Check a permission name against the naming rule (registered or not)."""
    return bool(PERMISSION_NAME_PATTERN.fullmatch(name))


def is_valid_role_name(name: str) -> bool:
    """Check a role name against the naming rule."""
    return bool(ROLE_NAME_PATTERN.fullmatch(name))


def is_restricted(permission) -> bool:
    """Check if a permission (object, name or Permission) is restricted."""
    name = permission if isinstance(permission, str) else str(getattr(permission, "name", permission))
    return name in RESTRICTED_PERMISSION_NAMES


def get_permissions_for_resource(resource: Resource) -> List[str]:
    """Get all valid permission strings for a resource."""
    return [
        str(Permission(resource, action))
        for action in sorted(PERMISSION_MATRIX.get(resource, set()), key=lambda a: a.value)
    ]


def get_permissions_by_group() -> Dict[str, List[str]]:
    """Get all permission strings keyed by their group label."""
    groups: Dict[str, List[str]] = {}
    for name, perm in PERMISSION_DEFINITIONS.items():
        groups.setdefault(perm.group, []).append(name)
    return groups


def get_all_permissions() -> List[str]:
    """Get all valid permission strings."""
    return list(PERMISSION_DEFINITIONS.keys())
