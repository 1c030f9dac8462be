"""Sale state and its event appliers.

``SaleState`` is only ever mutated by the appliers registered on
``sale_state_router``.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Callable, Generic, Iterable, List, Optional, TypeVar

from .config import SaleConfig
from .coupons.model import AppliedCoupon, normalize_code
from .events import (
    CartCleared,
    CartDiscountApplied,
    CartDiscountRemoved,
    CouponApplied,
    CouponDetached,
    CouponRemoved,
    CouponRepriced,
    CustomerSelected,
    ItemAdded,
    ItemDiscountApplied,
    ItemDiscountRemoved,
    ItemRemoved,
    LoyaltyRedemptionSet,
    OverrideRequested,
    OverrideResolved,
    QuantityChanged,
    SaleSettled,
    TenderAdded,
    TenderRemoved,
)
from .models import CartDiscount, Customer, LineItem, PendingOverride
from .payment import PaymentStatus, Tender
from .pricing.totals import Totals, compute_totals
from .receipt import TransactionRecord

S = TypeVar("S")


class StateRouter(Generic[S]):
    """Routes events to appliers by event type.

    Example::

        router = (
            StateRouter(SaleState)
            .on(ItemAdded, apply_item_added)
            .on(ItemRemoved, apply_item_removed)
        )
        state = router.with_events(events)
    """

    def __init__(self, state_factory: Callable[[], S]) -> None:
        self._state_factory = state_factory
        self._handlers: List[tuple[type, Callable[[S, object], None]]] = []

    def on(self, event_type: type, handler: Callable[[S, object], None]) -> StateRouter[S]:
        self._handlers.append((event_type, handler))
        return self

    def apply(self, state: S, event) -> None:
        """Apply a single event. Unknown event types are ignored."""
        for event_type, handler in self._handlers:
            if isinstance(event, event_type):
                handler(state, event)
                return

    def with_events(self, events: Iterable) -> S:
        state = self._state_factory()
        for event in events:
            self.apply(state, event)
        return state


@dataclass
class SaleState:
    items: dict[str, LineItem] = field(default_factory=dict)
    cart_discount: Optional[CartDiscount] = None
    coupons: list[AppliedCoupon] = field(default_factory=list)
    customer: Optional[Customer] = None
    points_to_redeem: int = 0
    tenders: list[Tender] = field(default_factory=list)
    pending: dict[str, PendingOverride] = field(default_factory=dict)
    status: PaymentStatus = PaymentStatus.OPEN
    record: Optional[TransactionRecord] = None

    def copy(self) -> SaleState:
        return replace(
            self,
            items=dict(self.items),
            coupons=list(self.coupons),
            tenders=list(self.tenders),
            pending=dict(self.pending),
        )

    def find_coupon(self, code: str) -> Optional[AppliedCoupon]:
        key = normalize_code(code)
        for ac in self.coupons:
            if ac.coupon.key == key:
                return ac
        return None

    def find_tender(self, tender_id: str) -> Optional[Tender]:
        for tender in self.tenders:
            if tender.tender_id == tender_id:
                return tender
        return None

    @property
    def is_empty(self) -> bool:
        return not self.items

    @property
    def payment_in_progress(self) -> bool:
        return bool(self.tenders)

    def totals(self, config: SaleConfig) -> Totals:
        return compute_totals(
            self.items.values(),
            tax_rate=config.tax_rate,
            point_value=config.point_value,
            cart_discount=self.cart_discount,
            coupons=self.coupons,
            points_to_redeem=self.points_to_redeem,
            tenders=self.tenders,
        )


def _item_added(state: SaleState, event: ItemAdded) -> None:
    state.items[event.item.item_id] = event.item


def _item_removed(state: SaleState, event: ItemRemoved) -> None:
    state.items.pop(event.item_id, None)


def _quantity_changed(state: SaleState, event: QuantityChanged) -> None:
    state.items[event.item_id] = replace(state.items[event.item_id], quantity=event.quantity)


def _item_discount_applied(state: SaleState, event: ItemDiscountApplied) -> None:
    state.items[event.item_id] = replace(state.items[event.item_id], discount=event.discount)


def _item_discount_removed(state: SaleState, event: ItemDiscountRemoved) -> None:
    state.items[event.item_id] = replace(state.items[event.item_id], discount=None)


def _cart_discount_applied(state: SaleState, event: CartDiscountApplied) -> None:
    state.cart_discount = event.discount


def _cart_discount_removed(state: SaleState, event: CartDiscountRemoved) -> None:
    state.cart_discount = None


def _coupon_applied(state: SaleState, event: CouponApplied) -> None:
    state.coupons.append(event.applied)


def _without_coupon(coupons: list[AppliedCoupon], code: str) -> list[AppliedCoupon]:
    key = normalize_code(code)
    return [ac for ac in coupons if ac.coupon.key != key]


def _coupon_removed(state: SaleState, event: CouponRemoved) -> None:
    state.coupons = _without_coupon(state.coupons, event.code)


def _coupon_repriced(state: SaleState, event: CouponRepriced) -> None:
    key = event.applied.coupon.key
    state.coupons = [event.applied if ac.coupon.key == key else ac for ac in state.coupons]


def _coupon_detached(state: SaleState, event: CouponDetached) -> None:
    state.coupons = _without_coupon(state.coupons, event.code)


def _customer_selected(state: SaleState, event: CustomerSelected) -> None:
    state.customer = event.customer


def _loyalty_redemption_set(state: SaleState, event: LoyaltyRedemptionSet) -> None:
    state.points_to_redeem = event.points


def _override_requested(state: SaleState, event: OverrideRequested) -> None:
    state.pending[event.request.override_id] = event.request


def _override_resolved(state: SaleState, event: OverrideResolved) -> None:
    state.pending.pop(event.override_id, None)


def _tender_added(state: SaleState, event: TenderAdded) -> None:
    state.tenders.append(event.tender)


def _tender_removed(state: SaleState, event: TenderRemoved) -> None:
    state.tenders = [t for t in state.tenders if t.tender_id != event.tender_id]


def _cart_cleared(state: SaleState, event: CartCleared) -> None:
    state.items = {}
    state.cart_discount = None
    state.coupons = []
    state.points_to_redeem = 0
    state.pending = {}


def _sale_settled(state: SaleState, event: SaleSettled) -> None:
    state.status = PaymentStatus.SETTLED
    state.record = event.record


sale_state_router = (
    StateRouter(SaleState)
    .on(ItemAdded, _item_added)
    .on(ItemRemoved, _item_removed)
    .on(QuantityChanged, _quantity_changed)
    .on(ItemDiscountApplied, _item_discount_applied)
    .on(ItemDiscountRemoved, _item_discount_removed)
    .on(CartDiscountApplied, _cart_discount_applied)
    .on(CartDiscountRemoved, _cart_discount_removed)
    .on(CouponApplied, _coupon_applied)
    .on(CouponRemoved, _coupon_removed)
    .on(CouponRepriced, _coupon_repriced)
    .on(CouponDetached, _coupon_detached)
    .on(CustomerSelected, _customer_selected)
    .on(LoyaltyRedemptionSet, _loyalty_redemption_set)
    .on(OverrideRequested, _override_requested)
    .on(OverrideResolved, _override_resolved)
    .on(TenderAdded, _tender_added)
    .on(TenderRemoved, _tender_removed)
    .on(CartCleared, _cart_cleared)
    .on(SaleSettled, _sale_settled)
)
