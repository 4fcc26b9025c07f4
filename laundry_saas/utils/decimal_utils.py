# laundry_saas/utils/decimal_utils.py
from decimal import Decimal, ROUND_HALF_UP

TWOPLACES = Decimal("0.01")
ZERO = Decimal("0.00")
HUNDRED = Decimal("100")


def to_decimal(value) -> Decimal:
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value.quantize(TWOPLACES, rounding=ROUND_HALF_UP)
    return Decimal(str(value)).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def percent_of(amount, percentage) -> Decimal:
    return to_decimal(Decimal(str(amount)) * Decimal(str(percentage)) / HUNDRED)


def remaining_amount(order_value: Decimal, total_discount: Decimal) -> Decimal:
    # a stacked total larger than the order never produces a negative payable
    return max(ZERO, to_decimal(order_value) - to_decimal(total_discount))
