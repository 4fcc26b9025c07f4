from sqlalchemy import Column, Integer, String, Numeric, Date, Boolean, JSON, Index, CheckConstraint
from sqlalchemy.orm import validates
from laundry_saas.core.db import Base
from laundry_saas.models.base.mixins import TimestampMixin, AuditMixin, TenancyScopedMixin


class Discount(Base, TimestampMixin, AuditMixin, TenancyScopedMixin):
    __tablename__ = "discounts"

    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False)
    description = Column(String(500), nullable=True)

    # list of DiscountRule payloads, validated by schemas.promotions.discount_rule_schemas
    rules = Column(JSON, nullable=False, default=list)
    # ",percentage,tiered," kept in step with rules for the list filter
    rule_types = Column(String(100), nullable=False, default="")

    priority = Column(Integer, nullable=False, default=0)
    can_stack_with_coupons = Column(Boolean, nullable=False, default=True)
    can_stack_with_other_discounts = Column(Boolean, nullable=False, default=False)

    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)

    usage_limit = Column(Integer, nullable=False, default=0)  # 0 = unlimited
    per_user_limit = Column(Integer, nullable=False, default=0)  # 0 = unlimited
    used_count = Column(Integer, nullable=False, default=0)

    is_active = Column(Boolean, default=True, nullable=False)

    total_savings = Column(Numeric(12, 2), nullable=False, default=0)
    total_orders = Column(Integer, nullable=False, default=0)

    __table_args__ = (
        CheckConstraint("used_count >= 0", name="ck_discount_used_count_non_negative"),
        CheckConstraint("usage_limit >= 0", name="ck_discount_usage_limit_non_negative"),
        CheckConstraint("end_date > start_date", name="ck_discount_date_range"),
        Index("ix_discount_tenancy_active", "tenancy_id", "is_active"),
        Index("ix_discount_date_range", "start_date", "end_date"),
        Index("ix_discount_priority", "priority"),
    )

    @validates("rules")
    def _sync_rule_types(self, key, rules):
        types = sorted({rule["type"] for rule in rules or []})
        self.rule_types = f",{','.join(types)}," if types else ""
        return rules

    def __repr__(self):
        return f"<Discount id={self.id} tenancy_id={self.tenancy_id} name={self.name} priority={self.priority}>"
