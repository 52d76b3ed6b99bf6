"""Pivot tables linking users, roles and permissions."""

from sqlalchemy import Column, ForeignKey, Integer, Table

from hub.db.base import Base

role_user = Table(
    "role_user",
    Base.metadata,
    Column("role_id", Integer, ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True),
    Column("user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
)

permission_role = Table(
    "permission_role",
    Base.metadata,
    Column("permission_id", Integer, ForeignKey("permissions.id", ondelete="CASCADE"), primary_key=True),
    Column("role_id", Integer, ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True),
)
