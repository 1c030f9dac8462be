"""Shared builders and fake collaborators for sale core tests."""

from datetime import datetime, timezone
from decimal import Decimal

from tillcore import ApprovalGate, Customer, LineItem, TransactionSink

NOW = datetime(2025, 6, 15, 12, 0, tzinfo=timezone.utc)


def fixed_clock(at: datetime = NOW):
    return lambda: at


def item(item_id, price, quantity=1, category=""):
    return LineItem(
        item_id=item_id,
        name=item_id,
        unit_price=Decimal(price),
        quantity=quantity,
        category=category,
    )


# =============================================================================
# Fake collaborators
# =============================================================================


class RecordingSink(TransactionSink):
    """Sink that keeps every published record."""

    def __init__(self):
        self.records = []

    def publish(self, record) -> None:
        self.records.append(record)


class FailingSink(TransactionSink):
    def publish(self, record) -> None:
        raise ConnectionError("printer offline")


class TokenGate(ApprovalGate):
    """Approves requests presenting the expected token."""

    def __init__(self, token: str = "manager-token"):
        self.token = token
        self.requests = []

    def authorize(self, request, credentials) -> bool:
        self.requests.append(request)
        return credentials == self.token


CUSTOMERS = [
    Customer(customer_id="c-bronze", name="Avery", loyalty_points=500, store_credit=Decimal("20")),
    Customer(customer_id="c-gold", name="Jordan", loyalty_points=2000, tier="gold"),
    Customer(customer_id="c-none", name="Sam"),
]
