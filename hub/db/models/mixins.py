from datetime import datetime
from sqlalchemy import Column, DateTime


class SoftDeleteMixin:
    """Rows are trashed by stamping ``deleted_at`` and stay until force-deleted."""

    deleted_at = Column(DateTime, nullable=True, index=True)

    @property
    def trashed(self) -> bool:
        return self.deleted_at is not None

    def soft_delete(self) -> None:
        self.deleted_at = datetime.utcnow()

    def restore(self) -> None:
        self.deleted_at = None

    @classmethod
    def active(cls):
        """Filter criterion excluding trashed rows."""
        return cls.deleted_at.is_(None)
