"""Value types shared by the cart ledger, pricing and settlement."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional


class DiscountKind(str, Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


class ItemKind(str, Enum):
    PRODUCT = "product"
    SERVICE = "service"


@dataclass(frozen=True)
class ItemDiscount:
    value: Decimal
    kind: DiscountKind = DiscountKind.PERCENTAGE


@dataclass(frozen=True)
class LineItem:
    item_id: str
    name: str
    unit_price: Decimal
    quantity: int
    category: str = ""
    kind: ItemKind = ItemKind.PRODUCT
    discount: Optional[ItemDiscount] = None

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity


@dataclass(frozen=True)
class CartDiscount:
    kind: DiscountKind
    value: Decimal
    applied_at: datetime
    reason: Optional[str] = None
    requires_override: bool = False


@dataclass(frozen=True)
class Customer:
    customer_id: str
    name: str = ""
    loyalty_points: int = 0
    store_credit: Decimal = Decimal("0")
    tier: str = "bronze"


@dataclass(frozen=True)
class PendingOverride:
    """A discount waiting on manager approval; excluded from totals until approved.

    ``item_id`` is set for item-level discounts and None for the cart discount.
    """

    override_id: str
    kind: DiscountKind
    value: Decimal
    requested_at: datetime
    item_id: Optional[str] = None
    reason: Optional[str] = None
