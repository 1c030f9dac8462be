"""Coupon definitions.

The offer is a tagged variant: each kind carries only the fields that mean
something for it, so a percentage coupon can never carry a buy quantity.
"""

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Union

from ..models import DiscountKind


@dataclass(frozen=True)
class PercentageOffer:
    value: Decimal
    maximum_discount: Optional[Decimal] = None
    applicable_categories: Optional[tuple[str, ...]] = None

    kind = "percentage"


@dataclass(frozen=True)
class FixedOffer:
    value: Decimal
    applicable_categories: Optional[tuple[str, ...]] = None

    kind = "fixed"


@dataclass(frozen=True)
class BuyXGetYOffer:
    buy_quantity: int
    get_quantity: int
    applicable_categories: Optional[tuple[str, ...]] = None

    kind = "buy_x_get_y"


@dataclass(frozen=True)
class CategoryOffer:
    value: Decimal
    applicable_categories: tuple[str, ...]
    basis: DiscountKind = DiscountKind.PERCENTAGE
    maximum_discount: Optional[Decimal] = None

    kind = "category_discount"


Offer = Union[PercentageOffer, FixedOffer, BuyXGetYOffer, CategoryOffer]


@dataclass(frozen=True)
class StackingRules:
    allow_with_other_coupons: bool = False
    allow_with_discounts: bool = True
    max_stacking_value: Optional[Decimal] = None  # percent of subtotal


@dataclass(frozen=True)
class Coupon:
    code: str
    name: str
    offer: Offer
    start_date: date
    end_date: date
    description: str = ""
    minimum_purchase: Optional[Decimal] = None
    usage_limit: Optional[int] = None
    usage_count: int = 0
    is_active: bool = True
    stacking: StackingRules = field(default_factory=StackingRules)

    @property
    def key(self) -> str:
        return normalize_code(self.code)

    @property
    def kind(self) -> str:
        return self.offer.kind

    def usage_exhausted(self) -> bool:
        return self.usage_limit is not None and self.usage_count >= self.usage_limit

    def with_usage(self, usage_count: int) -> "Coupon":
        return replace(self, usage_count=usage_count)


@dataclass(frozen=True)
class AppliedCoupon:
    """Snapshot of a coupon as applied to the cart; recomputed on every cart change."""

    coupon: Coupon
    discount_amount: Decimal
    applied_at: datetime

    @property
    def code(self) -> str:
        return self.coupon.code


def normalize_code(code: str) -> str:
    return code.strip().upper()
