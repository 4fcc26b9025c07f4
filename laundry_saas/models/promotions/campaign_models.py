from sqlalchemy import (
    Column, Integer, String, Numeric, Date, DateTime, Boolean, JSON,
    ForeignKey, Index, CheckConstraint,
)
from laundry_saas.core.db import Base
from laundry_saas.models.base.mixins import TimestampMixin, SoftDeleteMixin, AuditMixin
from laundry_saas.models.enums.campaign_status import (
    CampaignStatus,
    CampaignTrigger,
    AudienceTarget,
    BudgetType,
)


class Campaign(Base, TimestampMixin, SoftDeleteMixin, AuditMixin):
    __tablename__ = "campaigns"

    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False)
    description = Column(String(500), nullable=True)

    scope = Column(String(20), nullable=False)  # TENANT | GLOBAL
    # NULL for GLOBAL campaigns
    tenancy_id = Column(Integer, ForeignKey("tenancies.id", ondelete="CASCADE"), nullable=True, index=True)
    # GLOBAL only; empty list means every tenancy
    applicable_tenancy_ids = Column(JSON, nullable=False, default=list)

    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    priority = Column(Integer, nullable=False, default=0)
    status = Column(String(20), nullable=False, default=CampaignStatus.DRAFT.value)

    approval_required = Column(Boolean, nullable=False, default=False)
    approved_by_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    approved_at = Column(DateTime(timezone=True), nullable=True)

    trigger_type = Column(String(30), nullable=False, default=CampaignTrigger.ORDER_CHECKOUT.value)
    min_order_value = Column(Numeric(12, 2), nullable=True)

    audience_target = Column(String(20), nullable=False, default=AudienceTarget.ALL_USERS.value)
    min_order_count = Column(Integer, nullable=True)
    max_order_count = Column(Integer, nullable=True)
    min_total_spent = Column(Numeric(12, 2), nullable=True)
    max_total_spent = Column(Numeric(12, 2), nullable=True)

    # list of {type, discount_id, value, max_discount}
    promotions = Column(JSON, nullable=False, default=list)

    budget_type = Column(String(20), nullable=False, default=BudgetType.UNLIMITED.value)
    budget_total = Column(Numeric(12, 2), nullable=False, default=0)
    budget_spent = Column(Numeric(12, 2), nullable=False, default=0)

    total_usage_limit = Column(Integer, nullable=False, default=0)  # 0 = unlimited
    used_count = Column(Integer, nullable=False, default=0)

    conversions = Column(Integer, nullable=False, default=0)
    total_savings = Column(Numeric(12, 2), nullable=False, default=0)
    total_revenue = Column(Numeric(12, 2), nullable=False, default=0)

    __table_args__ = (
        CheckConstraint("scope IN ('TENANT', 'GLOBAL')", name="ck_campaign_scope"),
        CheckConstraint("scope = 'GLOBAL' OR tenancy_id IS NOT NULL", name="ck_campaign_tenant_owner"),
        CheckConstraint("end_date > start_date", name="ck_campaign_date_range"),
        CheckConstraint("priority >= 0 AND priority <= 100", name="ck_campaign_priority"),
        Index("ix_campaign_scope_status", "scope", "status"),
        Index("ix_campaign_tenancy_status", "tenancy_id", "status"),
        Index("ix_campaign_date_range", "start_date", "end_date"),
    )

    def __repr__(self):
        return f"<Campaign id={self.id} scope={self.scope} name={self.name} status={self.status}>"
