"""Tests for database seeding."""

from hub.core.rbac.permissions import PERMISSION_DEFINITIONS
from hub.core.rbac.roles import DEFAULT_ROLES
from hub.db.models import Permission, Role
from hub.db.seed import get_role_by_name, permission_display_name, seed_rbac


class TestSeed:
    """Test the registry and default roles are loaded."""

    def test_permissions_seeded(self, seeded_db):
        assert seeded_db.query(Permission).count() == len(PERMISSION_DEFINITIONS)
        row = seeded_db.query(Permission).filter(Permission.name == "ip_blocks.manage").one()
        assert row.group == "security"
        assert row.display_name == "Manage Ip Blocks"

    def test_roles_seeded(self, seeded_db):
        assert {r.name for r in seeded_db.query(Role).all()} == set(DEFAULT_ROLES)
        super_admin = get_role_by_name(seeded_db, "super_admin")
        assert super_admin.is_system
        assert len(super_admin.permissions) == len(PERMISSION_DEFINITIONS)
        assert get_role_by_name(seeded_db, "admin").color == "#EA580C"

    def test_idempotent(self, seeded_db):
        seed_rbac(seeded_db)
        assert seeded_db.query(Permission).count() == len(PERMISSION_DEFINITIONS)
        assert seeded_db.query(Role).count() == len(DEFAULT_ROLES)

    def test_display_name(self):
        assert permission_display_name(PERMISSION_DEFINITIONS["roles.force_delete"]) == "Force Delete Roles"
        assert permission_display_name(PERMISSION_DEFINITIONS["email-templates.view"]) == "View Email Templates"
