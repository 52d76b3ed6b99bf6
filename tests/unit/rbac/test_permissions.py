"""Tests for the permission registry."""

import pytest

from hub.core.rbac.permissions import (
    Permission, Resource, Action,
    PERMISSION_DEFINITIONS, RESTRICTED_PERMISSIONS,
    is_valid_permission, is_valid_permission_name, is_valid_role_name,
    is_restricted, get_permissions_for_resource, get_permissions_by_group,
    get_all_permissions,
)


class TestPermissionModel:
    """Test permission definitions."""

    def test_permission_string_format(self):
        """Test permission string format."""
        perm = Permission(Resource.CONTENT, Action.PUBLISH)
        assert str(perm) == "content.publish"
        assert perm.name == "content.publish"

    def test_permission_from_string(self):
        """Test parsing permission from string."""
        perm = Permission.from_string("roles.assign_permissions")
        assert perm.resource == Resource.ROLES
        assert perm.action == Action.ASSIGN_PERMISSIONS

    def test_hyphenated_resource(self):
        """Test resources whose name contains a hyphen."""
        perm = Permission.from_string("email-templates.update")
        assert perm.resource == Resource.EMAIL_TEMPLATES
        assert perm.group == "email_templates"

    def test_invalid_permission_format(self):
        """Test parsing invalid permission strings."""
        with pytest.raises(ValueError, match="Invalid permission format"):
            Permission.from_string("invalid")

        with pytest.raises(ValueError, match="Invalid permission format"):
            Permission.from_string(".view")

    def test_unknown_permission(self):
        """Test that resource/action pairs outside the matrix are rejected."""
        with pytest.raises(ValueError, match="Unknown permission"):
            Permission.from_string("widgets.view")

        # Both halves exist but the pair is not registered
        with pytest.raises(ValueError, match="Unknown permission"):
            Permission.from_string("users.publish")

    def test_is_valid_permission(self):
        """Test permission validation."""
        assert is_valid_permission("menus.reorder")
        assert is_valid_permission("ip_blocks.manage")
        assert not is_valid_permission("menus.publish")
        assert not is_valid_permission("users:view")

    def test_registry_size(self):
        """Test that the matrix generates the full registry."""
        all_perms = get_all_permissions()
        assert len(all_perms) == 57
        assert len(set(all_perms)) == len(all_perms)
        assert "content.publish" in all_perms
        assert "admin.maintenance" in all_perms

    def test_permissions_for_resource(self):
        """Test getting permissions for a specific resource."""
        menu_perms = get_permissions_for_resource(Resource.MENUS)
        assert set(menu_perms) == {
            "menus.view", "menus.create", "menus.update",
            "menus.delete", "menus.manage", "menus.reorder",
        }
        assert "content.view" not in menu_perms

    def test_groups(self):
        """Test group labels used by the role editor."""
        groups = get_permissions_by_group()
        assert "ip_blocks.view" in groups["security"]
        assert "users.view" in groups["users"]
        assert sum(len(v) for v in groups.values()) == len(PERMISSION_DEFINITIONS)


class TestRestrictedPermissions:
    """Test the list of permissions reserved for super admins."""

    def test_restricted_set(self):
        names = {str(p) for p in RESTRICTED_PERMISSIONS}
        assert names == {
            "roles.create", "roles.delete", "users.delete",
            "permissions.create", "permissions.delete",
            "admin.settings", "admin.maintenance",
        }

    def test_is_restricted_accepts_names_and_objects(self):
        """Test that names, Permission values and rows are all accepted."""
        class Row:
            name = "roles.delete"

        assert is_restricted("admin.settings")
        assert is_restricted(Permission(Resource.USERS, Action.DELETE))
        assert is_restricted(Row())
        assert not is_restricted("users.view")
        assert not is_restricted("custom.thing")


class TestNamingRules:
    """Test the role and permission name patterns."""

    @pytest.mark.parametrize("name", ["editor", "data-team", "ops_2"])
    def test_valid_role_names(self, name):
        assert is_valid_role_name(name)

    @pytest.mark.parametrize("name", ["Editor", "data team", "ops.2", ""])
    def test_invalid_role_names(self, name):
        assert not is_valid_role_name(name)

    def test_permission_names_allow_dots(self):
        assert is_valid_permission_name("reports.quarterly.view")
        assert is_valid_permission_name("email-templates.view")
        assert not is_valid_permission_name("Reports.View")
        assert not is_valid_permission_name("reports view")
