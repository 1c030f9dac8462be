"""Coupon definitions, catalog and discount engine."""

from .catalog import CATALOG_KEY, CouponCatalog, coupon_from_dict, coupon_to_dict
from .defaults import default_coupons
from .engine import (
    CouponEngine,
    applicable_items,
    check_coupon,
    compute_discount,
    free_units,
    stacked_amounts,
)
from .model import (
    AppliedCoupon,
    BuyXGetYOffer,
    CategoryOffer,
    Coupon,
    FixedOffer,
    Offer,
    PercentageOffer,
    StackingRules,
    normalize_code,
)

__all__ = [
    "AppliedCoupon",
    "BuyXGetYOffer",
    "CATALOG_KEY",
    "CategoryOffer",
    "Coupon",
    "CouponCatalog",
    "CouponEngine",
    "FixedOffer",
    "Offer",
    "PercentageOffer",
    "StackingRules",
    "applicable_items",
    "check_coupon",
    "compute_discount",
    "coupon_from_dict",
    "coupon_to_dict",
    "default_coupons",
    "free_units",
    "normalize_code",
    "stacked_amounts",
]
