"""Totals aggregator.

A single pure function of the sale ledger. Every consumer (the live sale,
the payment ledger, receipts, held carts) reads totals through
``compute_totals`` so there is exactly one derivation.

Each component is rounded half-up once; ``total_savings``, ``taxable_base``
and ``total`` are derived from the rounded components so a printed receipt
always adds up.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Optional

from ..coupons.engine import stacked_amounts
from ..coupons.model import AppliedCoupon
from ..models import CartDiscount, LineItem
from ..money import ZERO, money_sum, non_negative, round_money
from ..payment import Tender, change_due, remaining_balance, tendered
from .discounts import item_discount_amount, resolve_cart_discount


@dataclass(frozen=True)
class Totals:
    subtotal: Decimal = ZERO
    item_discounts: Decimal = ZERO
    cart_discount: Decimal = ZERO
    coupon_discounts: Decimal = ZERO
    loyalty_discount: Decimal = ZERO
    total_savings: Decimal = ZERO
    taxable_base: Decimal = ZERO
    tax: Decimal = ZERO
    total: Decimal = ZERO
    tendered: Decimal = ZERO
    remaining: Decimal = ZERO
    change: Decimal = ZERO
    coupon_breakdown: tuple[tuple[str, Decimal], ...] = ()


def _trim_to(amounts: list[Decimal], limit: Decimal) -> list[Decimal]:
    """Reduce ``amounts`` to sum to at most ``limit``, latest entries first."""
    amounts = list(amounts)
    excess = money_sum(amounts) - limit
    for i in reversed(range(len(amounts))):
        if excess <= ZERO:
            break
        cut = min(amounts[i], excess)
        amounts[i] -= cut
        excess -= cut
    return amounts


def compute_totals(
    items: Iterable[LineItem],
    *,
    tax_rate: Decimal,
    point_value: Decimal,
    cart_discount: Optional[CartDiscount] = None,
    coupons: Iterable[AppliedCoupon] = (),
    points_to_redeem: int = 0,
    tenders: Iterable[Tender] = (),
) -> Totals:
    items = list(items)
    coupons = list(coupons)
    tenders = list(tenders)

    subtotal = round_money(money_sum(item.line_total for item in items))
    item_discounts = round_money(money_sum(item_discount_amount(item) for item in items))

    after_items = non_negative(subtotal - item_discounts)
    cart_amount = round_money(resolve_cart_discount(after_items, cart_discount))

    after_cart = non_negative(after_items - cart_amount)
    coupon_amounts = _trim_to(stacked_amounts(coupons, subtotal), after_cart)
    coupon_amount = money_sum(coupon_amounts)

    after_coupons = non_negative(after_cart - coupon_amount)
    loyalty_amount = round_money(min(point_value * points_to_redeem, after_coupons))

    total_savings = item_discounts + cart_amount + coupon_amount + loyalty_amount
    taxable_base = non_negative(subtotal - total_savings)
    tax = round_money(taxable_base * tax_rate)
    total = taxable_base + tax

    return Totals(
        subtotal=subtotal,
        item_discounts=item_discounts,
        cart_discount=cart_amount,
        coupon_discounts=coupon_amount,
        loyalty_discount=loyalty_amount,
        total_savings=total_savings,
        taxable_base=taxable_base,
        tax=tax,
        total=total,
        tendered=tendered(tenders),
        remaining=remaining_balance(total, tenders),
        change=change_due(total, tenders),
        coupon_breakdown=tuple(
            (ac.code, amount) for ac, amount in zip(coupons, coupon_amounts)
        ),
    )
