"""Database models for the Analytics Hub."""

from hub.db.models.associations import permission_role, role_user
from hub.db.models.user import User
from hub.db.models.role import Role
from hub.db.models.permission import Permission
from hub.db.models.content import Content
from hub.db.models.menu import Menu

__all__ = [
    "permission_role",
    "role_user",
    "User",
    "Role",
    "Permission",
    "Content",
    "Menu",
]
