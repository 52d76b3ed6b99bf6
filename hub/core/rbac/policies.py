"""Per-resource authorization policies.

Each protected resource declares a ``ResourcePolicy``: a table mapping an
ability (``view_any``, ``update``, ``publish`` ...) to the permissions that
grant it, plus the policy flavor:

- PERMISSIVE: the admin and super_admin roles bypass the permission check
  (content and menus).
- STRICT: only the exact permission grants the ability, no role shortcut
  (roles, permissions, user roles).

A rule may carry a guard over the target entity. The guard runs before
anything else and its denial holds for every actor, super admins included.

Policies are pure: a decision depends only on the actor's resolved roles and
permissions and the target's attributes.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, FrozenSet, List, Mapping, Optional

from .permissions import Action, Permission, Resource
from .roles import BYPASS_ROLES


class PolicyFlavor(str, Enum):
    """How a policy treats role membership."""

    PERMISSIVE = "permissive"  # admin/super_admin bypass
    STRICT = "strict"          # exact permission only


# A guard returns a denial reason, or None to let the permission check run
Guard = Callable[[Any], Optional[str]]


def deny_system_role(role: Any) -> Optional[str]:
    """System roles cannot be updated, deleted, or have permissions changed."""
    if getattr(role, "is_system", False):
        return "system roles are immutable"
    return None


@dataclass(frozen=True)
class AbilityRule:
    """Permissions that grant an ability (any one suffices)."""
    permissions: FrozenSet[Permission]
    guard: Optional[Guard] = None


@dataclass(frozen=True)
class Decision:
    """Outcome of a single authorization check."""
    allowed: bool
    ability: str
    reason: Optional[str] = None

    def __bool__(self) -> bool:
        return self.allowed


@dataclass(frozen=True)
class ResourcePolicy:
    """
    Authorization table for one resource type.

    Abilities not present in the table are denied.
    """
    resource: Resource
    flavor: PolicyFlavor
    rules: Mapping[str, AbilityRule]
    bypass_roles: FrozenSet[str] = field(default=BYPASS_ROLES)

    @property
    def abilities(self) -> List[str]:
        return list(self.rules.keys())

    def inspect(self, actor, ability: str, target: Any = None) -> Decision:
        """
        Evaluate an ability and explain the outcome.

        Args:
            actor: Subject performing the action (None when unauthenticated)
            ability: Ability name, e.g. "update"
            target: Entity the ability applies to, if any

        Returns:
            Decision with the allow/deny outcome and a short reason
        """
        rule = self.rules.get(ability)
        if rule is None:
            return Decision(False, ability, f"unknown ability for {self.resource.value}")

        if rule.guard is not None and target is not None:
            reason = rule.guard(target)
            if reason:
                return Decision(False, ability, reason)

        if actor is None:
            return Decision(False, ability, "unauthenticated")

        if actor.has_any_permission(rule.permissions):
            return Decision(True, ability, "permission")

        if self.flavor is PolicyFlavor.PERMISSIVE and actor.has_any_role(self.bypass_roles):
            return Decision(True, ability, "role bypass")

        required = ", ".join(sorted(str(p) for p in rule.permissions))
        return Decision(False, ability, f"requires one of: {required}")

    def allows(self, actor, ability: str, target: Any = None) -> bool:
        return self.inspect(actor, ability, target).allowed

    def denies(self, actor, ability: str, target: Any = None) -> bool:
        return not self.allows(actor, ability, target)


def _build_rules(
    resource: Resource,
    abilities: Dict[str, Optional[Action]],
    *,
    coarse: Optional[Action] = None,
    guards: Optional[Dict[str, Guard]] = None,
) -> Dict[str, AbilityRule]:
    """Build ability rules from ability -> scoped action.

    ``coarse`` is added to every rule (e.g. ``manage``); an ability mapped to
    None is granted by the coarse permission alone.
    """
    guards = guards or {}
    rules = {}
    for ability, action in abilities.items():
        perms = set()
        if action is not None:
            perms.add(Permission(resource, action))
        if coarse is not None:
            perms.add(Permission(resource, coarse))
        if not perms:
            raise ValueError(f"Ability {ability} on {resource.value} has no granting permission")
        rules[ability] = AbilityRule(frozenset(perms), guards.get(ability))
    return rules


CONTENT_POLICY = ResourcePolicy(
    resource=Resource.CONTENT,
    flavor=PolicyFlavor.PERMISSIVE,
    rules=_build_rules(
        Resource.CONTENT,
        {
            "view_any": Action.VIEW,
            "view": Action.VIEW,
            "create": Action.CREATE,
            "update": Action.UPDATE,
            "delete": Action.DELETE,
            "restore": None,
            "force_delete": None,
            "publish": Action.PUBLISH,
            "manage": None,
        },
        coarse=Action.MANAGE,
    ),
)

MENU_POLICY = ResourcePolicy(
    resource=Resource.MENUS,
    flavor=PolicyFlavor.PERMISSIVE,
    rules=_build_rules(
        Resource.MENUS,
        {
            "view_any": Action.VIEW,
            "view": Action.VIEW,
            "create": Action.CREATE,
            "update": Action.UPDATE,
            "delete": Action.DELETE,
            "restore": None,
            "force_delete": None,
            "reorder": Action.REORDER,
            "manage": None,
        },
        coarse=Action.MANAGE,
    ),
)

ROLE_POLICY = ResourcePolicy(
    resource=Resource.ROLES,
    flavor=PolicyFlavor.STRICT,
    rules=_build_rules(
        Resource.ROLES,
        {
            "view_any": Action.VIEW,
            "view": Action.VIEW,
            "create": Action.CREATE,
            "update": Action.UPDATE,
            "delete": Action.DELETE,
            "restore": Action.RESTORE,
            "force_delete": Action.FORCE_DELETE,
            "assign_permissions": Action.ASSIGN_PERMISSIONS,
        },
        guards={
            "update": deny_system_role,
            "delete": deny_system_role,
            "force_delete": deny_system_role,
            "assign_permissions": deny_system_role,
        },
    ),
)

PERMISSION_POLICY = ResourcePolicy(
    resource=Resource.PERMISSIONS,
    flavor=PolicyFlavor.STRICT,
    rules=_build_rules(
        Resource.PERMISSIONS,
        {
            "view_any": Action.VIEW,
            "view": Action.VIEW,
            "create": Action.CREATE,
            "update": Action.UPDATE,
            "delete": Action.DELETE,
            "restore": Action.RESTORE,
            "force_delete": Action.FORCE_DELETE,
        },
    ),
)

# Table part of the user-role policy; the role-tier rules live in assignment.py
USER_ROLE_POLICY = ResourcePolicy(
    resource=Resource.USER_ROLES,
    flavor=PolicyFlavor.STRICT,
    rules=_build_rules(
        Resource.USER_ROLES,
        {
            "view_any": Action.VIEW,
            "view": Action.VIEW,
        },
    ),
)


POLICIES: Dict[Resource, ResourcePolicy] = {
    policy.resource: policy
    for policy in (CONTENT_POLICY, MENU_POLICY, ROLE_POLICY, PERMISSION_POLICY, USER_ROLE_POLICY)
}


def get_policy(resource) -> ResourcePolicy:
    """Get the policy for a resource (Resource or its string value)."""
    try:
        policy = POLICIES.get(Resource(resource))
    except ValueError:
        policy = None
    if policy is None:
        raise KeyError(f"No policy registered for resource: {resource}")
    return policy
