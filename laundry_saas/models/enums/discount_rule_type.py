from enum import Enum


class DiscountRuleType(str, Enum):
    PERCENTAGE = "percentage"
    FIXED_AMOUNT = "fixed_amount"
    TIERED = "tiered"
    BUY_X_GET_Y = "buy_x_get_y"


class CustomerType(str, Enum):
    ALL = "all"
    NEW = "new"
    RETURNING = "returning"
    VIP = "vip"
    SENIOR = "senior"
