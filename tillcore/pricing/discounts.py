"""Item and cart discount amounts.

Both functions return unrounded amounts; the totals aggregator rounds each
output field once.
"""

from decimal import Decimal
from typing import Optional

from ..models import CartDiscount, DiscountKind, ItemDiscount, LineItem
from ..money import ZERO, clamp, percent_of


def _discount_amount(base: Decimal, kind: DiscountKind, value: Decimal) -> Decimal:
    if base <= ZERO:
        return ZERO
    if kind == DiscountKind.PERCENTAGE:
        return clamp(percent_of(base, value), ZERO, base)
    return clamp(value, ZERO, base)


def resolve_cart_discount(base: Decimal, cart_discount: Optional[CartDiscount]) -> Decimal:
    """Amount the cart discount takes off ``base``, clamped to ``[0, base]``."""
    if cart_discount is None:
        return ZERO
    return _discount_amount(base, cart_discount.kind, cart_discount.value)


def item_discount_amount(item: LineItem, discount: Optional[ItemDiscount] = None) -> Decimal:
    discount = discount or item.discount
    if discount is None:
        return ZERO
    return _discount_amount(item.line_total, discount.kind, discount.value)
