"""Loyalty point redemption and earning."""

import math
from decimal import Decimal
from typing import Optional

from .errors import CommandRejectedError, InvalidAmountError, errmsg
from .models import Customer
from .money import ZERO

TIER_MULTIPLIERS = {
    "bronze": Decimal("1"),
    "silver": Decimal("1.5"),
    "gold": Decimal("2"),
    "platinum": Decimal("2.5"),
}


def tier_multiplier(tier: str) -> Decimal:
    """Unknown tiers earn at the base rate."""
    return TIER_MULTIPLIERS.get((tier or "").lower(), Decimal("1"))


def earn_rate(customer: Optional[Customer], points_per_dollar: Decimal) -> Decimal:
    if customer is None:
        return ZERO
    return points_per_dollar * tier_multiplier(customer.tier)


def points_earned(total: Decimal, rate: Decimal) -> int:
    """``floor(total * rate)``; never negative."""
    if total <= ZERO or rate <= ZERO:
        return 0
    return math.floor(total * rate)


def redemption_value(points: int, point_value: Decimal) -> Decimal:
    return point_value * points


def check_redemption(points, customer: Optional[Customer]) -> int:
    """Validate a redemption request and return the points to redeem.

    Zero is accepted and clears an existing redemption.
    """
    if isinstance(points, bool) or not isinstance(points, int):
        raise InvalidAmountError(errmsg.QUANTITY_INTEGER)
    if points < 0:
        raise InvalidAmountError(errmsg.POINTS_NEGATIVE)
    if points == 0:
        return 0
    if customer is None:
        raise CommandRejectedError(errmsg.CUSTOMER_REQUIRED)
    if points > customer.loyalty_points:
        raise CommandRejectedError(errmsg.POINTS_INSUFFICIENT)
    return points
