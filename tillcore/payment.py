"""Payment settlement ledger.

Tenders are already-authorized amounts. They accumulate against the grand
total until the sale settles (tenders cover the total) or the payment is
cancelled. Only tender kinds that can hand back change may exceed the
remaining balance.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Iterable, Optional

from .errors import CommandRejectedError, InsufficientPaymentError, InvalidAmountError, errmsg
from .models import Customer
from .money import ZERO, money_sum, non_negative


class TenderKind(str, Enum):
    CASH = "cash"
    CARD = "card"
    WALLET = "wallet"
    GIFT_CARD = "gift_card"
    STORE_CREDIT = "store_credit"


class PaymentStatus(str, Enum):
    OPEN = "open"
    SETTLED = "settled"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class Tender:
    tender_id: str
    kind: TenderKind
    amount: Decimal
    applied_at: datetime


def tendered(tenders: Iterable[Tender]) -> Decimal:
    return money_sum(t.amount for t in tenders)


def remaining_balance(total: Decimal, tenders: Iterable[Tender]) -> Decimal:
    return non_negative(total - tendered(tenders))


def change_due(total: Decimal, tenders: Iterable[Tender]) -> Decimal:
    return non_negative(tendered(tenders) - total)


def store_credit_available(customer: Optional[Customer], tenders: Iterable[Tender]) -> Decimal:
    if customer is None:
        return ZERO
    used = money_sum(t.amount for t in tenders if t.kind == TenderKind.STORE_CREDIT)
    return non_negative(customer.store_credit - used)


def accept_tender(
    kind: TenderKind,
    amount: Decimal,
    *,
    total: Decimal,
    tenders: list[Tender],
    customer: Optional[Customer],
    change_kinds: frozenset,
) -> Decimal:
    """Return the amount to record for a new tender, or raise.

    Store credit is capped at what the customer still has and at the balance
    due. Other kinds that cannot give change are rejected when they exceed
    the balance due.
    """
    if amount <= ZERO:
        raise InvalidAmountError(errmsg.AMOUNT_POSITIVE)

    due = remaining_balance(total, tenders)
    if due <= ZERO:
        raise CommandRejectedError(errmsg.NOTHING_DUE)

    if kind == TenderKind.STORE_CREDIT:
        available = store_credit_available(customer, tenders)
        if available <= ZERO:
            raise CommandRejectedError(errmsg.STORE_CREDIT_UNAVAILABLE)
        return min(amount, available, due)

    if kind not in change_kinds and amount > due:
        raise CommandRejectedError(errmsg.TENDER_EXCEEDS_BALANCE)
    return amount


def require_covered(total: Decimal, tenders: Iterable[Tender]) -> None:
    """Raise InsufficientPaymentError unless the tenders cover ``total``."""
    tenders = list(tenders)
    if tendered(tenders) < total:
        raise InsufficientPaymentError(remaining_balance(total, tenders))
