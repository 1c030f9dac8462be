"""Coupon validation, discount computation and stacking.

Coupons are always computed against the undiscounted line totals of the items
they apply to, independently of each other and of any cart discount. When
several coupons are stacked the tightest ``max_stacking_value`` caps their sum.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Callable, Iterable, Optional

from ..errors import CouponValidationError, errmsg
from ..log import get_logger
from ..models import CartDiscount, DiscountKind, LineItem
from ..money import ZERO, format_money, money_sum, percent_of, round_money
from .model import (
    AppliedCoupon,
    BuyXGetYOffer,
    CategoryOffer,
    Coupon,
    FixedOffer,
    PercentageOffer,
    normalize_code,
)

log = get_logger(domain="coupon")


def applicable_items(items: Iterable[LineItem], categories) -> list[LineItem]:
    """Items the offer applies to; ``None`` categories means every item."""
    if categories is None:
        return list(items)
    wanted = set(categories)
    return [item for item in items if item.category in wanted]


def items_subtotal(items: Iterable[LineItem]) -> Decimal:
    return money_sum(item.line_total for item in items)


def free_units(total_units: int, buy_quantity: int, get_quantity: int) -> int:
    """Units given away when every ``buy`` units earn ``get`` more.

    Buy 2 get 1 frees 1 unit of a basket of 2 or 3 and 2 units of a basket
    of 4. Never more than the basket holds.
    """
    return min(total_units, (total_units // buy_quantity) * get_quantity)


def _percentage(base: Decimal, value: Decimal, maximum: Optional[Decimal]) -> Decimal:
    amount = percent_of(base, value)
    if maximum is not None:
        amount = min(amount, maximum)
    return amount


def _buy_x_get_y(offer: BuyXGetYOffer, items: list[LineItem]) -> Decimal:
    total_units = sum(item.quantity for item in items)
    to_give = free_units(total_units, offer.buy_quantity, offer.get_quantity)
    discount = ZERO
    for item in sorted(items, key=lambda i: i.unit_price):
        if to_give <= 0:
            break
        units = min(item.quantity, to_give)
        discount += item.unit_price * units
        to_give -= units
    return discount


def compute_discount(coupon: Coupon, items: Iterable[LineItem]) -> Decimal:
    """Discount the coupon is worth for the given cart, rounded to cents."""
    offer = coupon.offer
    matching = applicable_items(items, offer.applicable_categories)
    base = items_subtotal(matching)

    if isinstance(offer, PercentageOffer):
        amount = _percentage(base, offer.value, offer.maximum_discount)
    elif isinstance(offer, FixedOffer):
        amount = min(offer.value, base)
    elif isinstance(offer, BuyXGetYOffer):
        amount = _buy_x_get_y(offer, matching)
    elif isinstance(offer, CategoryOffer):
        if offer.basis == DiscountKind.PERCENTAGE:
            amount = _percentage(base, offer.value, offer.maximum_discount)
        else:
            amount = min(offer.value, base)
            if offer.maximum_discount is not None:
                amount = min(amount, offer.maximum_discount)
    else:
        raise TypeError(f"Unknown coupon offer: {type(offer).__name__}")

    return round_money(max(ZERO, min(amount, base)))


def check_coupon(
    coupon: Optional[Coupon],
    *,
    subtotal: Decimal,
    applied: list[AppliedCoupon],
    cart_discount: Optional[CartDiscount],
    today: date,
) -> Coupon:
    """Run the validation rules in order, raising on the first failure."""
    if coupon is None:
        raise CouponValidationError("not_found", errmsg.COUPON_NOT_FOUND)
    if not coupon.is_active:
        raise CouponValidationError("inactive", errmsg.COUPON_INACTIVE)
    if today < coupon.start_date:
        raise CouponValidationError("not_started", errmsg.COUPON_NOT_STARTED)
    if today > coupon.end_date:
        raise CouponValidationError("expired", errmsg.COUPON_EXPIRED)
    if coupon.usage_exhausted():
        raise CouponValidationError("usage_exhausted", errmsg.COUPON_USAGE_EXHAUSTED)
    if coupon.minimum_purchase is not None and subtotal < coupon.minimum_purchase:
        raise CouponValidationError(
            "below_minimum",
            errmsg.COUPON_BELOW_MINIMUM.format(minimum=format_money(coupon.minimum_purchase)),
        )
    if any(ac.coupon.key == coupon.key for ac in applied):
        raise CouponValidationError("duplicate", errmsg.COUPON_DUPLICATE)
    if applied and not (
        coupon.stacking.allow_with_other_coupons
        and all(ac.coupon.stacking.allow_with_other_coupons for ac in applied)
    ):
        raise CouponValidationError("stacking_conflict", errmsg.COUPON_STACKING)
    if cart_discount is not None and not coupon.stacking.allow_with_discounts:
        raise CouponValidationError("stacking_conflict", errmsg.COUPON_DISCOUNT_STACKING)
    return coupon


def stacked_amounts(applied: list[AppliedCoupon], subtotal: Decimal) -> list[Decimal]:
    """Per-coupon amounts after the stacking cap, in application order.

    The cap only bites when more than one coupon is applied. Any excess is
    taken back from the most recently applied coupons first.
    """
    amounts = [ac.discount_amount for ac in applied]
    if len(applied) < 2:
        return amounts
    caps = [
        ac.coupon.stacking.max_stacking_value
        for ac in applied
        if ac.coupon.stacking.max_stacking_value is not None
    ]
    if not caps:
        return amounts

    limit = round_money(percent_of(subtotal, min(caps)))
    excess = money_sum(amounts) - limit
    for i in reversed(range(len(amounts))):
        if excess <= ZERO:
            break
        cut = min(amounts[i], excess)
        amounts[i] -= cut
        excess -= cut
    return amounts


class CouponEngine:
    """Validates coupon codes against the catalog and the current cart."""

    def __init__(self, catalog, clock: Callable[[], datetime]):
        self._catalog = catalog
        self._clock = clock

    def validate(
        self,
        code: str,
        items: list[LineItem],
        applied: list[AppliedCoupon],
        cart_discount: Optional[CartDiscount] = None,
    ) -> Coupon:
        return check_coupon(
            self._catalog.find(code),
            subtotal=items_subtotal(items),
            applied=applied,
            cart_discount=cart_discount,
            today=self._clock().date(),
        )

    def apply(
        self,
        code: str,
        items: list[LineItem],
        applied: list[AppliedCoupon],
        cart_discount: Optional[CartDiscount] = None,
    ) -> AppliedCoupon:
        coupon = self.validate(code, items, applied, cart_discount)
        return AppliedCoupon(
            coupon=coupon,
            discount_amount=compute_discount(coupon, items),
            applied_at=self._clock(),
        )

    def revalidate(
        self,
        items: list[LineItem],
        applied: list[AppliedCoupon],
        cart_discount: Optional[CartDiscount] = None,
    ) -> tuple[list[AppliedCoupon], list[tuple[AppliedCoupon, CouponValidationError]]]:
        """Re-check applied coupons against the current cart, in order.

        Returns the coupons that still qualify (freshly priced, with their
        original ``applied_at``) and the ones that must be detached.
        """
        kept: list[AppliedCoupon] = []
        detached: list[tuple[AppliedCoupon, CouponValidationError]] = []
        for ac in applied:
            try:
                coupon = self.validate(ac.code, items, kept, cart_discount)
            except CouponValidationError as e:
                log.info("coupon_detached", code=ac.code, reason=e.reason)
                detached.append((ac, e))
                continue
            kept.append(
                AppliedCoupon(
                    coupon=coupon,
                    discount_amount=compute_discount(coupon, items),
                    applied_at=ac.applied_at,
                )
            )
        return kept, detached


__all__ = [
    "CouponEngine",
    "applicable_items",
    "check_coupon",
    "compute_discount",
    "free_units",
    "items_subtotal",
    "normalize_code",
    "stacked_amounts",
]
