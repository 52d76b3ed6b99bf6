"""Tests for default role definitions."""

import pytest

from hub.core.rbac.permissions import PERMISSION_DEFINITIONS, is_valid_permission
from hub.core.rbac.roles import (
    DEFAULT_ROLES, SUPER_ADMIN, ADMIN, BYPASS_ROLES,
    get_default_role_permissions, get_all_default_roles,
)


class TestDefaultRoles:
    """Test role definitions."""

    def test_six_default_roles(self):
        assert set(DEFAULT_ROLES) == {SUPER_ADMIN, ADMIN, "manager", "analyst", "viewer", "user"}

    def test_only_super_admin_is_system(self):
        """Test that only the super admin role is immutable."""
        system = [name for name, cfg in DEFAULT_ROLES.items() if cfg["is_system"]]
        assert system == [SUPER_ADMIN]

    def test_super_admin_has_everything(self):
        assert set(get_default_role_permissions(SUPER_ADMIN)) == set(PERMISSION_DEFINITIONS)

    def test_all_role_permissions_registered(self):
        """Test that every default permission exists in the registry."""
        for name, cfg in DEFAULT_ROLES.items():
            for perm in cfg["permissions"]:
                assert is_valid_permission(perm), f"{name}: {perm}"

    def test_admin_lacks_restricted(self):
        perms = set(get_default_role_permissions(ADMIN))
        assert "roles.delete" not in perms
        assert "admin.settings" not in perms
        assert "roles.assign_permissions" in perms

    def test_colors_are_hex(self):
        for cfg in DEFAULT_ROLES.values():
            assert cfg["color"].startswith("#") and len(cfg["color"]) == 7

    def test_bypass_roles(self):
        assert BYPASS_ROLES == frozenset({"admin", "super_admin"})

    def test_unknown_role(self):
        with pytest.raises(ValueError):
            get_default_role_permissions("nonexistent")

    def test_get_all_default_roles_is_copy(self):
        roles = get_all_default_roles()
        roles.pop(SUPER_ADMIN)
        assert SUPER_ADMIN in DEFAULT_ROLES
