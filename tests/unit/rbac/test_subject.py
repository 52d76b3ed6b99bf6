"""Tests for resolved subjects."""

from types import SimpleNamespace

from hub.core.rbac.permissions import Action, Permission, Resource
from hub.core.rbac.subject import Subject, parse_permissions, resolve_subject


def _role(name, *perms):
    return SimpleNamespace(name=name, permissions=[SimpleNamespace(name=p) for p in perms])


class TestSubject:
    """Test role and permission membership queries."""

    def test_build_parses_permissions(self):
        s = Subject.build(1, roles=["viewer"], permissions=["analytics.view"])
        assert Permission(Resource.ANALYTICS, Action.VIEW) in s.permissions
        assert s.roles == frozenset({"viewer"})

    def test_unregistered_permissions_are_skipped(self):
        """Names outside the registry cannot satisfy any check."""
        s = Subject.build(1, permissions=["reports.custom", "analytics.view"])
        assert len(s.permissions) == 1
        assert not s.has_permission("reports.custom")

    def test_has_role_variants(self):
        """Test string, object and collection forms of has_role."""
        s = Subject.build(1, roles=["admin"])
        assert s.has_role("admin")
        assert s.has_role(SimpleNamespace(name="admin"))
        assert s.has_role(["viewer", "admin"])
        assert not s.has_role(["viewer", "user"])
        assert not s.has_role("super_admin")

    def test_any_and_all_roles(self):
        s = Subject.build(1, roles=["admin", "manager"])
        assert s.has_any_role(["manager", "viewer"])
        assert s.has_all_roles(["admin", "manager"])
        assert not s.has_all_roles(["admin", "viewer"])

    def test_has_permission_variants(self):
        s = Subject.build(1, permissions=["content.publish"])
        assert s.has_permission("content.publish")
        assert s.has_permission(Permission(Resource.CONTENT, Action.PUBLISH))
        assert s.has_permission(SimpleNamespace(name="content.publish"))
        assert s.has_permission_to("content.publish")
        assert not s.has_permission("content.delete")

    def test_any_and_all_permissions(self):
        s = Subject.build(1, permissions=["menus.view", "menus.update"])
        assert s.has_any_permission(["menus.delete", "menus.view"])
        assert s.has_all_permissions(["menus.view", "menus.update"])
        assert not s.has_all_permissions(["menus.view", "menus.delete"])

    def test_is_super_admin(self):
        assert Subject.build(1, roles=["super_admin"]).is_super_admin
        assert not Subject.build(1, roles=["admin"]).is_super_admin


class TestResolveSubject:
    """Test flattening a user's roles."""

    def test_union_of_role_permissions(self):
        user = SimpleNamespace(
            id=7,
            roles=[
                _role("viewer", "analytics.view", "data.view"),
                _role("editor", "content.update", "analytics.view"),
            ],
        )
        s = resolve_subject(user)
        assert s.id == 7
        assert s.roles == frozenset({"viewer", "editor"})
        assert {str(p) for p in s.permissions} == {"analytics.view", "data.view", "content.update"}

    def test_user_without_roles(self):
        s = resolve_subject(SimpleNamespace(id=3, roles=[]))
        assert s.roles == frozenset()
        assert s.permissions == frozenset()

    def test_parse_permissions_keeps_typed_values(self):
        perm = Permission(Resource.USERS, Action.VIEW)
        assert parse_permissions([perm, "users.view"]) == frozenset({perm})
