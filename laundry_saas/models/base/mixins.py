from datetime import datetime, timezone

from sqlalchemy import Column, Integer, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import declared_attr
from sqlalchemy.sql import func


def _user_fk():
    return Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)


class TimestampMixin:
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())


class SoftDeleteMixin:
    """Rows are hidden instead of removed; every query must filter on is_deleted."""

    is_deleted = Column(Boolean, default=False, nullable=False)
    deleted_at = Column(DateTime(timezone=True), nullable=True)

    def mark_deleted(self, by_user_id: int | None = None):
        self.is_deleted = True
        self.deleted_at = datetime.now(timezone.utc)
        if by_user_id is not None and hasattr(self, "updated_by_id"):
            self.updated_by_id = by_user_id


class AuditMixin:
    @declared_attr
    def created_by_id(cls):
        return _user_fk()

    @declared_attr
    def updated_by_id(cls):
        return _user_fk()


class TenancyScopedMixin:
    @declared_attr
    def tenancy_id(cls):
        return Column(Integer, ForeignKey("tenancies.id", ondelete="CASCADE"), nullable=False, index=True)
