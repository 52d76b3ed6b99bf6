"""String-keyed ability lookup over the resource policies.

Abilities are addressed as ``"<resource>.<ability>"`` (``"content.publish"``,
``"roles.delete"``, ``"user_roles.assign_role"``) or by one of the named
gates (``"manage-rbac"``, ``"manage-users"``, ``"super-admin-only"``).
Callers translate a denial into an access-denied response; ``authorize``
does that translation by raising ``AuthorizationDenied``.
"""

from typing import Any, Callable, Dict, List, Optional, Union

from hub.common.logger import get_logger
from hub.core.errors import AuthorizationDenied

from .assignment import RolePermissionPolicy, UserRolePolicy
from .permissions import Action, Permission, Resource
from .policies import Decision, POLICIES, ResourcePolicy
from .roles import BYPASS_ROLES, SUPER_ADMIN

logger = get_logger("rbac.gate")

GateCallback = Callable[..., Union[bool, Decision]]


def _policy_callback(policy: ResourcePolicy, ability: str) -> GateCallback:
    def check(actor, target: Any = None) -> Decision:
        return policy.inspect(actor, ability, target)
    return check


class Gate:
    """Registry of named abilities, each a pure predicate over an actor."""

    def __init__(self, policies: Optional[Dict[Resource, ResourcePolicy]] = None):
        self._abilities: Dict[str, GateCallback] = {}

        for resource, policy in (policies or POLICIES).items():
            for ability in policy.abilities:
                self.define(f"{resource.value}.{ability}", _policy_callback(policy, ability))

        self.define("roles.assign_permission", RolePermissionPolicy.can_assign_permission)
        self.define("user_roles.assign_role", UserRolePolicy.assign_role)
        self.define("user_roles.remove_role", UserRolePolicy.remove_role)
        self.define("user_roles.sync_roles", UserRolePolicy.sync_roles)
        self.define("user_roles.view", UserRolePolicy.view)

        self.define(
            "manage-rbac",
            lambda actor: actor is not None and actor.has_any_role(BYPASS_ROLES),
        )
        self.define(
            "manage-users",
            lambda actor: actor is not None
            and actor.has_permission(Permission(Resource.USERS, Action.MANAGE)),
        )
        self.define(
            "super-admin-only",
            lambda actor: actor is not None and actor.has_role(SUPER_ADMIN),
        )

    def define(self, ability: str, callback: GateCallback) -> None:
        """Register (or replace) an ability."""
        if ability in self._abilities:
            logger.debug(f"Overwriting ability: {ability}")
        self._abilities[ability] = callback

    def has(self, ability: str) -> bool:
        return ability in self._abilities

    def abilities(self) -> List[str]:
        return sorted(self._abilities)

    def inspect(self, actor, ability: str, *args: Any) -> Decision:
        """Evaluate an ability; unknown abilities are denied."""
        callback = self._abilities.get(ability)
        if callback is None:
            return Decision(False, ability, "unknown ability")

        result = callback(actor, *args)
        if isinstance(result, Decision):
            return Decision(result.allowed, ability, result.reason)
        return Decision(bool(result), ability)

    def allows(self, actor, ability: str, *args: Any) -> bool:
        return self.inspect(actor, ability, *args).allowed

    def denies(self, actor, ability: str, *args: Any) -> bool:
        return not self.allows(actor, ability, *args)

    def authorize(self, actor, ability: str, *args: Any) -> Decision:
        """
        Evaluate an ability and raise if it is denied.

        Raises:
            AuthorizationDenied: If the decision is a denial
        """
        decision = self.inspect(actor, ability, *args)
        if not decision.allowed:
            actor_id = getattr(actor, "id", None)
            logger.debug(f"Denied {ability} for actor {actor_id}: {decision.reason}")
            raise AuthorizationDenied(ability, decision.reason)
        return decision


# Default gate over the declared policies
gate = Gate()
