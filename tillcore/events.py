"""Sale events.

Command handlers only ever return these; all state changes happen by
applying them through the state router.
"""

from dataclasses import dataclass
from typing import Optional

from .coupons.model import AppliedCoupon
from .models import CartDiscount, Customer, ItemDiscount, LineItem, PendingOverride
from .payment import Tender
from .receipt import TransactionRecord


@dataclass(frozen=True)
class ItemAdded:
    item: LineItem


@dataclass(frozen=True)
class ItemRemoved:
    item_id: str


@dataclass(frozen=True)
class QuantityChanged:
    item_id: str
    quantity: int


@dataclass(frozen=True)
class ItemDiscountApplied:
    item_id: str
    discount: ItemDiscount


@dataclass(frozen=True)
class ItemDiscountRemoved:
    item_id: str


@dataclass(frozen=True)
class CartDiscountApplied:
    discount: CartDiscount


@dataclass(frozen=True)
class CartDiscountRemoved:
    pass


@dataclass(frozen=True)
class CouponApplied:
    applied: AppliedCoupon


@dataclass(frozen=True)
class CouponRemoved:
    code: str


@dataclass(frozen=True)
class CouponRepriced:
    applied: AppliedCoupon


@dataclass(frozen=True)
class CouponDetached:
    code: str
    reason: str
    message: str


@dataclass(frozen=True)
class CustomerSelected:
    customer: Optional[Customer]


@dataclass(frozen=True)
class LoyaltyRedemptionSet:
    points: int


@dataclass(frozen=True)
class OverrideRequested:
    request: PendingOverride


@dataclass(frozen=True)
class OverrideResolved:
    override_id: str
    approved: bool


@dataclass(frozen=True)
class TenderAdded:
    tender: Tender


@dataclass(frozen=True)
class TenderRemoved:
    tender_id: str


@dataclass(frozen=True)
class CartCleared:
    pass


@dataclass(frozen=True)
class SaleSettled:
    record: TransactionRecord
