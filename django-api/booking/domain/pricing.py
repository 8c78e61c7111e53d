"""Booking total calculation.

Total = (Quantity x UnitPrice) - Discount - LoyaltyPointsRedeemed

Promotional discounts are applied first; loyalty points are then subtracted
from the discounted amount. One point is worth one currency unit. Points
earned are a fraction of the amount actually paid, rounded down.
"""

from decimal import ROUND_FLOOR, Decimal

from booking.domain.errors import LoyaltyRedemptionError
from booking.domain.models import BookingSummary
from booking.domain.value_objects import LoyaltyPoints, Money, Quantity

DEFAULT_EARN_RATE = Decimal("0.10")
DEFAULT_REDEMPTION_CAP = Decimal("0.50")


def _floor(value: Decimal) -> int:
    return int(value.to_integral_value(rounding=ROUND_FLOOR))


def calculate_subtotal(quantity: Quantity, unit_price: Money) -> Money:
    return Money(amount=unit_price.amount * quantity.value)


def apply_discount(subtotal: Money, discount: Money) -> Money:
    """Subtract a promotional discount, never going below zero."""
    return Money(amount=max(Decimal("0"), subtotal.amount - discount.amount))


def max_redeemable_points(
    amount: Money,
    balance: LoyaltyPoints | None = None,
    cap_rate: Decimal = DEFAULT_REDEMPTION_CAP,
) -> LoyaltyPoints:
    """Largest redemption allowed against an amount, limited by the balance if given."""
    limit = _floor(amount.amount * cap_rate)
    if balance is not None:
        limit = min(limit, balance.value)
    return LoyaltyPoints(value=limit)


def clamp_redemption(
    requested: int,
    amount: Money,
    balance: LoyaltyPoints | None = None,
    cap_rate: Decimal = DEFAULT_REDEMPTION_CAP,
) -> LoyaltyPoints:
    limit = max_redeemable_points(amount, balance, cap_rate)
    return LoyaltyPoints(value=min(max(0, requested), limit.value))


def points_earned(amount_paid: Money, rate: Decimal = DEFAULT_EARN_RATE) -> LoyaltyPoints:
    return LoyaltyPoints(value=max(0, _floor(amount_paid.amount * rate)))


def calculate_summary(
    quantity: Quantity,
    unit_price: Money,
    loyalty_points: LoyaltyPoints | None = None,
    discount: Money | None = None,
    earn_rate: Decimal = DEFAULT_EARN_RATE,
    cap_rate: Decimal = DEFAULT_REDEMPTION_CAP,
) -> BookingSummary:
    """Compute the full price breakdown for a booking.

    Raises:
        LoyaltyRedemptionError: If loyalty_points exceeds the redemption cap
            of the discounted amount. Callers clamp before calling.
    """
    loyalty_points = loyalty_points or LoyaltyPoints(value=0)
    discount = discount or Money.zero()

    subtotal = calculate_subtotal(quantity, unit_price)
    discounted = apply_discount(subtotal, discount)

    limit = max_redeemable_points(discounted, cap_rate=cap_rate)
    if loyalty_points.value > limit.value:
        raise LoyaltyRedemptionError(loyalty_points.value, limit.value)

    total = Money(amount=max(Decimal("0"), discounted.amount - loyalty_points.value))

    return BookingSummary(
        unit_price=unit_price,
        quantity=quantity.value,
        subtotal=subtotal,
        discount=Money(amount=subtotal.amount - discounted.amount),
        loyalty_points_used=loyalty_points,
        loyalty_points_earned=points_earned(total, earn_rate),
        total=total,
    )
