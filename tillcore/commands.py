"""Sale commands.

Plain values; the sale aggregate validates them and answers with events.
Amounts may arrive as int, str, float or Decimal and are coerced by the
handlers.
"""

from dataclasses import dataclass
from typing import Any, Optional

from .models import DiscountKind, ItemKind
from .payment import TenderKind


@dataclass(frozen=True)
class AddItem:
    item_id: str
    name: str
    unit_price: Any
    quantity: Any = 1
    category: str = ""
    kind: ItemKind = ItemKind.PRODUCT


@dataclass(frozen=True)
class RemoveItem:
    item_id: str


@dataclass(frozen=True)
class UpdateQuantity:
    item_id: str
    quantity: Any


@dataclass(frozen=True)
class ApplyItemDiscount:
    item_id: str
    value: Any
    kind: DiscountKind = DiscountKind.PERCENTAGE
    requires_override: bool = False
    reason: Optional[str] = None


@dataclass(frozen=True)
class RemoveItemDiscount:
    item_id: str


@dataclass(frozen=True)
class ApplyCartDiscount:
    kind: DiscountKind
    value: Any
    reason: Optional[str] = None
    requires_override: bool = False


@dataclass(frozen=True)
class RemoveCartDiscount:
    pass


@dataclass(frozen=True)
class ApplyCoupon:
    code: str


@dataclass(frozen=True)
class RemoveCoupon:
    code: str


@dataclass(frozen=True)
class SelectCustomer:
    """Attach the customer with ``customer_id``; None detaches."""

    customer_id: Optional[str]


@dataclass(frozen=True)
class RedeemLoyaltyPoints:
    points: Any


@dataclass(frozen=True)
class AddTender:
    kind: TenderKind
    amount: Any


@dataclass(frozen=True)
class RemoveTender:
    tender_id: str


@dataclass(frozen=True)
class Settle:
    pass


@dataclass(frozen=True)
class ApproveOverride:
    override_id: str
    credentials: Any = None


@dataclass(frozen=True)
class RejectOverride:
    override_id: str


@dataclass(frozen=True)
class ClearCart:
    pass
