"""Assignment policies: permissions onto roles, roles onto users.

These rules do not fit a flat ability table because they depend on the
relationship between actor and target:

- a system role's permission set is frozen for everyone;
- restricted permissions are granted only by super admins;
- admins may manage the roles of ordinary users but never of other admins
  or super admins;
- a super admin may drop their own super_admin role but not another's.
"""

from typing import Any

from .permissions import Action, Permission, Resource, is_restricted
from .policies import ROLE_POLICY, USER_ROLE_POLICY, deny_system_role
from .roles import ADMIN, BYPASS_ROLES, SUPER_ADMIN

ASSIGN_PERMISSIONS = Permission(Resource.ROLES, Action.ASSIGN_PERMISSIONS)
USER_ROLES_ASSIGN = Permission(Resource.USER_ROLES, Action.ASSIGN)
USER_ROLES_REMOVE = Permission(Resource.USER_ROLES, Action.REMOVE)


class RolePermissionPolicy:
    """Who may change which permissions a role carries."""

    @staticmethod
    def assign_permissions(actor, role: Any) -> bool:
        """Check if the actor may change the role's permission set at all."""
        return ROLE_POLICY.allows(actor, "assign_permissions", role)

    @staticmethod
    def can_assign_permission(actor, role: Any, permission: Any) -> bool:
        """
        Check if the actor may grant one specific permission to a role.

        The order matters: the system-role and base-permission checks apply
        to everyone, the restricted list only to non super admins.

        Args:
            actor: Subject performing the assignment
            role: Target role (exposes ``is_system``)
            permission: Permission, permission name, or object with ``name``

        Returns:
            True if the grant is allowed
        """
        if deny_system_role(role):
            return False
        if actor is None or not actor.has_permission(ASSIGN_PERMISSIONS):
            return False
        if actor.has_role(SUPER_ADMIN):
            return True
        return not is_restricted(permission)


class UserRolePolicy:
    """Who may view or change a user's role assignments."""

    @staticmethod
    def view_any(actor) -> bool:
        return USER_ROLE_POLICY.allows(actor, "view_any")

    @staticmethod
    def view(actor, target=None) -> bool:
        """Holders of user_roles.view see everyone; users always see themselves."""
        if actor is None:
            return False
        if USER_ROLE_POLICY.allows(actor, "view"):
            return True
        return target is not None and actor.id == target.id

    @staticmethod
    def assign_role(actor, target) -> bool:
        if actor is None:
            return False
        if actor.has_role(SUPER_ADMIN):
            return True
        if actor.has_role(ADMIN) and not target.has_role(BYPASS_ROLES):
            return actor.has_permission(USER_ROLES_ASSIGN)
        return False

    @staticmethod
    def remove_role(actor, target) -> bool:
        if actor is None:
            return False
        if actor.has_role(SUPER_ADMIN):
            return not (target.has_role(SUPER_ADMIN) and actor.id != target.id)
        if actor.has_role(ADMIN) and not target.has_role(BYPASS_ROLES):
            return actor.has_permission(USER_ROLES_REMOVE)
        return False

    @classmethod
    def sync_roles(cls, actor, target) -> bool:
        return cls.assign_role(actor, target)
