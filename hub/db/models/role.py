from datetime import datetime
from sqlalchemy import Column, Integer, String, Text, DateTime, Boolean
from sqlalchemy.orm import relationship

from hub.db.base import Base
from hub.db.models.mixins import SoftDeleteMixin
from hub.db.models.associations import permission_role, role_user


class Role(SoftDeleteMixin, Base):
    __tablename__ = "roles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), unique=True, nullable=False, index=True)
    display_name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    color = Column(String(7), nullable=True)
    is_system = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    users = relationship("User", secondary=role_user, back_populates="roles")
    permissions = relationship(
        "Permission",
        secondary=permission_role,
        back_populates="roles",
        order_by="Permission.name",
    )

    @property
    def permission_names(self):
        return [p.name for p in self.permissions]
