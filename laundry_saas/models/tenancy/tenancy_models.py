from sqlalchemy import Column, Integer, String, Boolean, Index
from laundry_saas.core.db import Base
from laundry_saas.models.base.mixins import TimestampMixin, AuditMixin


class Tenancy(Base, TimestampMixin, AuditMixin):
    """One onboarded laundry business."""

    __tablename__ = "tenancies"

    id = Column(Integer, primary_key=True)
    name = Column(String(150), nullable=False)
    slug = Column(String(63), nullable=False, unique=True, index=True)
    contact_email = Column(String(255), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)

    __table_args__ = (Index("ix_tenancy_active", "is_active"),)

    def __repr__(self):
        return f"<Tenancy id={self.id} slug={self.slug} active={self.is_active}>"
