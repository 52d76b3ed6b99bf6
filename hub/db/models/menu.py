from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, JSON, ForeignKey
from sqlalchemy.orm import relationship

from hub.core.hierarchy import menu_is_accessible
from hub.db.base import Base
from hub.db.models.mixins import SoftDeleteMixin


class Menu(SoftDeleteMixin, Base):
    __tablename__ = "menus"

    id = Column(Integer, primary_key=True, autoincrement=True)
    parent_id = Column(Integer, ForeignKey("menus.id", ondelete="CASCADE"), nullable=True, index=True)
    name = Column(String(255), nullable=False)
    type = Column(String(50), nullable=False, default="list_menu")  # list_menu, content_menu
    icon = Column(String(100), nullable=True)
    route_or_url = Column(String(500), nullable=True)
    content_id = Column(Integer, ForeignKey("contents.id", ondelete="SET NULL"), nullable=True)
    order = Column(Integer, nullable=False, default=0)
    role_permissions_required = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    parent = relationship("Menu", remote_side=[id], back_populates="children")
    children = relationship("Menu", back_populates="parent", order_by="Menu.order")
    content = relationship("Content", back_populates="menus")

    def is_accessible_by(self, subject) -> bool:
        return menu_is_accessible(self.role_permissions_required, subject)
