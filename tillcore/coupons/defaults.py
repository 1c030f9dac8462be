"""Stock coupon set restored by ``CouponCatalog.reset_to_defaults``."""

from datetime import date
from decimal import Decimal

from ..models import DiscountKind
from .model import (
    BuyXGetYOffer,
    CategoryOffer,
    Coupon,
    FixedOffer,
    PercentageOffer,
    StackingRules,
)

START = date(2024, 1, 1)
END = date(2030, 12, 31)

_EXCLUSIVE = StackingRules(allow_with_other_coupons=False, allow_with_discounts=True)
_STRICT = StackingRules(allow_with_other_coupons=False, allow_with_discounts=False)


def default_coupons() -> list[Coupon]:
    return [
        Coupon(
            code="SAVE10",
            name="10% Off Everything",
            description="Get 10% off your entire purchase",
            offer=PercentageOffer(value=Decimal("10")),
            start_date=START,
            end_date=END,
            stacking=_EXCLUSIVE,
        ),
        Coupon(
            code="SAVE20",
            name="20% Off $50+",
            description="Get 20% off when you spend $50 or more",
            offer=PercentageOffer(value=Decimal("20"), maximum_discount=Decimal("100")),
            minimum_purchase=Decimal("50"),
            start_date=START,
            end_date=END,
            stacking=_STRICT,
        ),
        Coupon(
            code="VIP25",
            name="VIP 25% Discount",
            description="25% off for VIP customers (minimum $100)",
            offer=PercentageOffer(value=Decimal("25"), maximum_discount=Decimal("200")),
            minimum_purchase=Decimal("100"),
            usage_limit=100,
            start_date=START,
            end_date=END,
            stacking=_STRICT,
        ),
        Coupon(
            code="5OFF",
            name="$5 Off Any Purchase",
            description="Get $5 off your purchase",
            offer=FixedOffer(value=Decimal("5")),
            start_date=START,
            end_date=END,
            stacking=StackingRules(
                allow_with_other_coupons=True,
                allow_with_discounts=True,
                max_stacking_value=Decimal("50"),
            ),
        ),
        Coupon(
            code="10OFF25",
            name="$10 Off $25+",
            description="Get $10 off when you spend $25 or more",
            offer=FixedOffer(value=Decimal("10")),
            minimum_purchase=Decimal("25"),
            start_date=START,
            end_date=END,
            stacking=_EXCLUSIVE,
        ),
        Coupon(
            code="WELCOME15",
            name="New Customer $15 Off",
            description="Welcome! Get $15 off your first order of $50+",
            offer=FixedOffer(value=Decimal("15")),
            minimum_purchase=Decimal("50"),
            usage_limit=1000,
            start_date=START,
            end_date=END,
            stacking=_STRICT,
        ),
        Coupon(
            code="BUY2GET1",
            name="Buy 2 Get 1 Free",
            description="Buy 2 drinks, get 1 free",
            offer=BuyXGetYOffer(buy_quantity=2, get_quantity=1, applicable_categories=("Beverages",)),
            start_date=START,
            end_date=END,
            stacking=StackingRules(allow_with_other_coupons=True, allow_with_discounts=True),
        ),
        Coupon(
            code="BUY3GET2",
            name="Buy 3 Get 2 Free Snacks",
            description="Buy 3 snacks, get 2 free",
            offer=BuyXGetYOffer(buy_quantity=3, get_quantity=2, applicable_categories=("Snacks",)),
            minimum_purchase=Decimal("20"),
            start_date=START,
            end_date=END,
            stacking=_EXCLUSIVE,
        ),
        Coupon(
            code="SNACKS15",
            name="15% Off All Snacks",
            description="Get 15% off all snack items",
            offer=CategoryOffer(value=Decimal("15"), applicable_categories=("Snacks",)),
            start_date=START,
            end_date=END,
            stacking=StackingRules(
                allow_with_other_coupons=True,
                allow_with_discounts=True,
                max_stacking_value=Decimal("30"),
            ),
        ),
        Coupon(
            code="DRINKS20",
            name="20% Off Beverages",
            description="Get 20% off all beverage items",
            offer=CategoryOffer(
                value=Decimal("20"),
                applicable_categories=("Beverages",),
                basis=DiscountKind.PERCENTAGE,
                maximum_discount=Decimal("25"),
            ),
            minimum_purchase=Decimal("10"),
            start_date=START,
            end_date=END,
            stacking=_EXCLUSIVE,
        ),
        Coupon(
            code="FLASH30",
            name="Flash Sale 30% Off",
            description="Limited time: 30% off everything (max $50 discount)",
            offer=PercentageOffer(value=Decimal("30"), maximum_discount=Decimal("50")),
            minimum_purchase=Decimal("30"),
            usage_limit=500,
            start_date=START,
            end_date=date(2024, 12, 31),
            stacking=_STRICT,
        ),
        Coupon(
            code="WEEKEND",
            name="Weekend Special",
            description="$7 off weekend purchases over $35",
            offer=FixedOffer(value=Decimal("7")),
            minimum_purchase=Decimal("35"),
            start_date=START,
            end_date=END,
            stacking=StackingRules(
                allow_with_other_coupons=True,
                allow_with_discounts=True,
                max_stacking_value=Decimal("40"),
            ),
        ),
    ]
