"""Immutable transaction record produced at settlement.

The record's field names are the contract shared with the printing and
delivery collaborators. ``to_struct`` encodes it as a protobuf ``Struct``
with money as fixed two-decimal strings and the settlement time as an
RFC3339 timestamp.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Iterable, Optional

from google.protobuf import json_format
from google.protobuf.struct_pb2 import Struct
from google.protobuf.timestamp_pb2 import Timestamp

from .coupons.model import AppliedCoupon
from .models import LineItem
from .money import round_money
from .payment import Tender
from .pricing.discounts import item_discount_amount
from .pricing.totals import Totals


@dataclass(frozen=True)
class ReceiptLine:
    item_id: str
    name: str
    category: str
    kind: str
    quantity: int
    unit_price: Decimal
    line_total: Decimal
    discount: Decimal


@dataclass(frozen=True)
class CouponLine:
    code: str
    name: str
    amount: Decimal


@dataclass(frozen=True)
class TransactionRecord:
    receipt_number: str
    customer_id: Optional[str]
    items: tuple[ReceiptLine, ...]
    subtotal: Decimal
    item_discounts: Decimal
    cart_discount: Decimal
    coupons: tuple[CouponLine, ...]
    loyalty_discount: Decimal
    total_savings: Decimal
    taxable_base: Decimal
    tax: Decimal
    total: Decimal
    tenders: tuple[Tender, ...]
    tendered: Decimal
    change: Decimal
    points_earned: int
    points_used: int
    settled_at: datetime

    def to_dict(self) -> dict:
        return {
            "receiptNumber": self.receipt_number,
            "customerId": self.customer_id,
            "items": [
                {
                    "itemId": line.item_id,
                    "name": line.name,
                    "category": line.category,
                    "kind": line.kind,
                    "quantity": line.quantity,
                    "unitPrice": _money(line.unit_price),
                    "lineTotal": _money(line.line_total),
                    "discount": _money(line.discount),
                }
                for line in self.items
            ],
            "subtotal": _money(self.subtotal),
            "discounts": {
                "item": _money(self.item_discounts),
                "cart": _money(self.cart_discount),
                "coupons": [
                    {"code": c.code, "name": c.name, "amount": _money(c.amount)}
                    for c in self.coupons
                ],
                "loyalty": _money(self.loyalty_discount),
            },
            "totalSavings": _money(self.total_savings),
            "taxableBase": _money(self.taxable_base),
            "tax": _money(self.tax),
            "total": _money(self.total),
            "tenders": [
                {"tenderId": t.tender_id, "kind": t.kind.value, "amount": _money(t.amount)}
                for t in self.tenders
            ],
            "tendered": _money(self.tendered),
            "change": _money(self.change),
            "pointsEarned": self.points_earned,
            "pointsUsed": self.points_used,
            "settledAt": _timestamp(self.settled_at),
        }

    def to_struct(self) -> Struct:
        struct = Struct()
        struct.update(self.to_dict())
        return struct

    def to_json(self) -> str:
        return json_format.MessageToJson(self.to_struct())


def _money(value: Decimal) -> str:
    return f"{round_money(value):.2f}"


def _timestamp(value: datetime) -> str:
    ts = Timestamp()
    ts.FromDatetime(value)
    return ts.ToJsonString()


def new_receipt_number(prefix: str, at: datetime) -> str:
    return f"{prefix}-{at:%Y%m%d-%H%M%S}-{uuid.uuid4().hex[:4].upper()}"


def build_record(
    *,
    receipt_number: str,
    customer_id: Optional[str],
    items: Iterable[LineItem],
    coupons: Iterable[AppliedCoupon],
    tenders: Iterable[Tender],
    totals: Totals,
    points_earned: int,
    points_used: int,
    settled_at: datetime,
) -> TransactionRecord:
    amounts = dict(totals.coupon_breakdown)
    return TransactionRecord(
        receipt_number=receipt_number,
        customer_id=customer_id,
        items=tuple(
            ReceiptLine(
                item_id=item.item_id,
                name=item.name,
                category=item.category,
                kind=item.kind.value,
                quantity=item.quantity,
                unit_price=item.unit_price,
                line_total=round_money(item.line_total),
                discount=round_money(item_discount_amount(item)),
            )
            for item in items
        ),
        subtotal=totals.subtotal,
        item_discounts=totals.item_discounts,
        cart_discount=totals.cart_discount,
        coupons=tuple(
            CouponLine(code=ac.code, name=ac.coupon.name, amount=amounts.get(ac.code, ac.discount_amount))
            for ac in coupons
        ),
        loyalty_discount=totals.loyalty_discount,
        total_savings=totals.total_savings,
        taxable_base=totals.taxable_base,
        tax=totals.tax,
        total=totals.total,
        tenders=tuple(tenders),
        tendered=totals.tendered,
        change=totals.change,
        points_earned=points_earned,
        points_used=points_used,
        settled_at=settled_at,
    )
