"""RBAC (Role-Based Access Control) module for the Analytics Hub.

This module defines the permission registry, role definitions, resolved
subjects, per-resource policies and the string-keyed gate.
"""

from .permissions import (
    Action,
    Permission,
    PERMISSION_DEFINITIONS,
    RESTRICTED_PERMISSIONS,
    Resource,
)
from .roles import ADMIN, BYPASS_ROLES, DEFAULT_ROLES, SUPER_ADMIN
from .subject import Subject, resolve_subject
from .policies import (
    CONTENT_POLICY,
    Decision,
    MENU_POLICY,
    PERMISSION_POLICY,
    PolicyFlavor,
    ROLE_POLICY,
    ResourcePolicy,
    USER_ROLE_POLICY,
    get_policy,
)
from .assignment import RolePermissionPolicy, UserRolePolicy
from .gate import Gate, gate

__all__ = [
    "Action",
    "Permission",
    "PERMISSION_DEFINITIONS",
    "RESTRICTED_PERMISSIONS",
    "Resource",
    "ADMIN",
    "BYPASS_ROLES",
    "DEFAULT_ROLES",
    "SUPER_ADMIN",
    "Subject",
    "resolve_subject",
    "CONTENT_POLICY",
    "Decision",
    "MENU_POLICY",
    "PERMISSION_POLICY",
    "PolicyFlavor",
    "ROLE_POLICY",
    "ResourcePolicy",
    "USER_ROLE_POLICY",
    "get_policy",
    "RolePermissionPolicy",
    "UserRolePolicy",
    "Gate",
    "gate",
]
