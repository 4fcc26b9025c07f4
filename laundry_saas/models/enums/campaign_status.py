import enum


class CampaignStatus(str, enum.Enum):
    DRAFT = "DRAFT"
    PENDING_APPROVAL = "PENDING_APPROVAL"
    ACTIVE = "ACTIVE"
    PAUSED = "PAUSED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class CampaignScope(str, enum.Enum):
    TENANT = "TENANT"
    GLOBAL = "GLOBAL"


class CampaignTrigger(str, enum.Enum):
    ORDER_CHECKOUT = "ORDER_CHECKOUT"
    USER_REGISTRATION = "USER_REGISTRATION"


class AudienceTarget(str, enum.Enum):
    ALL_USERS = "ALL_USERS"
    NEW_USERS = "NEW_USERS"
    EXISTING_USERS = "EXISTING_USERS"


class BudgetType(str, enum.Enum):
    UNLIMITED = "UNLIMITED"
    FIXED_AMOUNT = "FIXED_AMOUNT"


class PromotionType(str, enum.Enum):
    DISCOUNT = "DISCOUNT"
    WALLET_CREDIT = "WALLET_CREDIT"
    LOYALTY_POINTS = "LOYALTY_POINTS"
