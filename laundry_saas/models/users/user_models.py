from sqlalchemy import Column, Integer, String, Boolean, DateTime, Numeric, ForeignKey, CheckConstraint
from sqlalchemy.sql import func
from laundry_saas.core.db import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    # NULL only for platform superadmins
    tenancy_id = Column(Integer, ForeignKey("tenancies.id", ondelete="CASCADE"), nullable=True, index=True)
    username = Column(String(150), unique=True, nullable=False, index=True)
    full_name = Column(String(150), nullable=True)
    password_hash = Column(String, nullable=False)
    role = Column(String(50), nullable=False, default="customer")
    is_active = Column(Boolean, default=True, nullable=False)
    token_version = Column(Integer, nullable=False, default=0)
    last_login = Column(DateTime(timezone=True))

    # customer profile used by promotion targeting
    order_count = Column(Integer, nullable=False, default=0)
    total_spent = Column(Numeric(12, 2), nullable=False, default=0)
    customer_segment = Column(String(20), nullable=True)  # vip | senior

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    __table_args__ = (
        CheckConstraint("role IN ('superadmin', 'admin', 'customer')", name="ck_user_role"),
        CheckConstraint("order_count >= 0", name="ck_user_order_count_non_negative"),
    )

    def __repr__(self):
        return f"<User id={self.id} username={self.username} role={self.role} tenancy_id={self.tenancy_id}>"
