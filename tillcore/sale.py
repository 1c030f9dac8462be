"""Sale aggregate: cart ledger, discounts, coupons, loyalty and payment.

Every command runs to completion and the totals are recomputed from the
event-sourced state before the next one is accepted. Cart mutations also
re-validate the applied coupons; coupons that no longer qualify are detached
in the same command and surfaced on ``coupon_validation_error``.
"""

from __future__ import annotations

import math
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Callable, Optional

from .aggregate import Aggregate, handles
from .commands import (
    AddItem,
    AddTender,
    ApplyCartDiscount,
    ApplyCoupon,
    ApplyItemDiscount,
    ApproveOverride,
    ClearCart,
    RedeemLoyaltyPoints,
    RejectOverride,
    RemoveCartDiscount,
    RemoveCoupon,
    RemoveItem,
    RemoveItemDiscount,
    RemoveTender,
    SelectCustomer,
    Settle,
    UpdateQuantity,
)
from .config import SaleConfig
from .coupons.engine import CouponEngine
from .coupons.model import AppliedCoupon
from .errors import (
    CommandRejectedError,
    CouponValidationError,
    OverrideDeniedError,
    OverrideRequiredError,
    errmsg,
)
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
from .log import get_logger
from .loyalty import check_redemption, earn_rate, points_earned
from .models import (
    CartDiscount,
    Customer,
    DiscountKind,
    ItemDiscount,
    ItemKind,
    LineItem,
    PendingOverride,
)
from .money import ZERO
from .payment import PaymentStatus, Tender, TenderKind, accept_tender, require_covered
from .ports import ApprovalGate, CustomerDirectory, TransactionSink
from .pricing.totals import Totals
from .receipt import TransactionRecord, build_record, new_receipt_number
from .state import SaleState, sale_state_router
from .validation import (
    require_exists,
    require_in,
    require_non_negative,
    require_percentage,
    require_positive,
    require_positive_quantity,
    require_quantity,
)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class HeldCart:
    """Snapshot of a parked cart. Persisting it is up to the caller."""

    hold_id: str
    items: tuple[LineItem, ...]
    cart_discount: Optional[CartDiscount]
    coupon_codes: tuple[str, ...]
    customer: Optional[Customer]
    points_to_redeem: int
    totals: Totals
    held_at: datetime
    cashier: str = ""
    reason: Optional[str] = None


def _discount_kind(kind) -> DiscountKind:
    try:
        return DiscountKind(kind)
    except ValueError as e:
        raise CommandRejectedError(f"Unknown discount kind: {kind}", e) from e


def _item_kind(kind) -> ItemKind:
    try:
        return ItemKind(kind)
    except ValueError as e:
        raise CommandRejectedError(errmsg.ITEM_KIND_UNKNOWN, e) from e


def _discount_value(kind: DiscountKind, value) -> Decimal:
    if kind == DiscountKind.PERCENTAGE:
        return require_percentage(value)
    return require_non_negative(value, errmsg.DISCOUNT_NEGATIVE)


def _first(events, event_type):
    for event in events:
        if isinstance(event, event_type):
            return event
    return None


class Sale(Aggregate[SaleState]):
    """A single checkout.

    Collaborators are injected: ``catalog`` supplies coupon definitions and
    records usage on settlement, ``approval_gate`` decides overrides,
    ``customers`` resolves customer ids and ``sink`` receives the settled
    transaction record.
    """

    domain = "sale"

    def __init__(
        self,
        catalog,
        config: Optional[SaleConfig] = None,
        *,
        approval_gate: Optional[ApprovalGate] = None,
        customers: Optional[CustomerDirectory] = None,
        sink: Optional[TransactionSink] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        super().__init__()
        self.sale_id = uuid.uuid4().hex
        self.config = config or SaleConfig()
        self._catalog = catalog
        self._approval_gate = approval_gate
        self._customers = customers
        self._sink = sink
        self._clock = clock or utc_now
        self._coupons = CouponEngine(catalog, self._clock)
        self._payment_checkpoint: Optional[int] = None
        self._payment_status = PaymentStatus.OPEN
        self.coupon_validation_error: Optional[CouponValidationError] = None
        self.log = get_logger(domain=self.domain, sale_id=self.sale_id)

    def _create_empty_state(self) -> SaleState:
        return SaleState()

    def _apply_event(self, state: SaleState, event) -> None:
        sale_state_router.apply(state, event)

    # --- queries ---

    @property
    def totals(self) -> Totals:
        return self.state.totals(self.config)

    @property
    def items(self) -> list[LineItem]:
        return list(self.state.items.values())

    @property
    def applied_coupons(self) -> list[AppliedCoupon]:
        return list(self.state.coupons)

    @property
    def cart_discount(self) -> Optional[CartDiscount]:
        return self.state.cart_discount

    @property
    def customer(self) -> Optional[Customer]:
        return self.state.customer

    @property
    def tenders(self) -> list[Tender]:
        return list(self.state.tenders)

    @property
    def pending_overrides(self) -> list[PendingOverride]:
        return list(self.state.pending.values())

    @property
    def record(self) -> Optional[TransactionRecord]:
        return self.state.record

    @property
    def payment_status(self) -> PaymentStatus:
        if self.state.status == PaymentStatus.SETTLED:
            return PaymentStatus.SETTLED
        return self._payment_status

    # --- dispatch ---

    def dispatch(self, command) -> list:
        log = self.log.bind(command_type=type(command).__name__)
        self.coupon_validation_error = None
        if self.state.status == PaymentStatus.SETTLED:
            log.warning("command_rejected", reason=errmsg.SALE_SETTLED)
            raise CommandRejectedError(errmsg.SALE_SETTLED)

        try:
            events = super().dispatch(command)
        except CouponValidationError as e:
            self.coupon_validation_error = e
            log.warning("command_rejected", reason=str(e), coupon_reason=e.reason)
            raise
        except CommandRejectedError as e:
            log.warning("command_rejected", reason=str(e))
            raise

        for event in events:
            if isinstance(event, CouponDetached):
                self.coupon_validation_error = CouponValidationError(event.reason, event.message)
            elif isinstance(event, TenderAdded):
                self._payment_status = PaymentStatus.OPEN
            elif isinstance(event, SaleSettled):
                self._on_settled(event.record)

        if isinstance(command, ApproveOverride):
            resolved = _first(events, OverrideResolved)
            if resolved is not None and not resolved.approved:
                raise OverrideDeniedError(resolved.override_id)
        return events

    def _reprice_coupons(self, *events) -> tuple:
        """Append coupon re-validation events for the cart ``events`` produce."""
        preview = self.state.copy()
        for event in events:
            sale_state_router.apply(preview, event)
        kept, detached = self._coupons.revalidate(
            list(preview.items.values()), preview.coupons, preview.cart_discount
        )
        follow_up = []
        for ac in kept:
            before = preview.find_coupon(ac.code)
            if before is None or before.discount_amount != ac.discount_amount:
                follow_up.append(CouponRepriced(applied=ac))
        for ac, error in detached:
            follow_up.append(CouponDetached(code=ac.code, reason=error.reason, message=error.message))
        return (*events, *follow_up)

    def _require_no_payment(self) -> None:
        if self.state.payment_in_progress:
            raise CommandRejectedError(errmsg.PAYMENT_IN_PROGRESS)

    def _require_discounts_allowed(self) -> None:
        for ac in self.state.coupons:
            if not ac.coupon.stacking.allow_with_discounts:
                raise CommandRejectedError(errmsg.DISCOUNTS_NOT_ALLOWED)

    def _new_override(self, kind: DiscountKind, value: Decimal, item_id=None, reason=None) -> OverrideRequested:
        request = PendingOverride(
            override_id=uuid.uuid4().hex,
            kind=kind,
            value=value,
            requested_at=self._clock(),
            item_id=item_id,
            reason=reason,
        )
        self.log.info("override_requested", override_id=request.override_id, item_id=item_id)
        return OverrideRequested(request=request)

    # --- cart ledger ---

    @handles(AddItem)
    def handle_add_item(self, cmd: AddItem) -> tuple:
        require_exists(cmd.item_id, errmsg.ITEM_ID_REQUIRED)
        quantity = require_positive_quantity(cmd.quantity)
        price = require_non_negative(cmd.unit_price, errmsg.PRICE_NEGATIVE)
        kind = _item_kind(cmd.kind)

        existing = self.state.items.get(cmd.item_id)
        if existing is not None:
            event = QuantityChanged(item_id=cmd.item_id, quantity=existing.quantity + quantity)
        else:
            event = ItemAdded(
                item=LineItem(
                    item_id=cmd.item_id,
                    name=cmd.name,
                    unit_price=price,
                    quantity=quantity,
                    category=cmd.category or "",
                    kind=kind,
                )
            )
        self.log.info("adding_item", item_id=cmd.item_id, quantity=quantity, merged=existing is not None)
        return self._reprice_coupons(event)

    def _removal_events(self, item_id: str) -> tuple:
        discarded = [
            OverrideResolved(override_id=p.override_id, approved=False)
            for p in self.state.pending.values()
            if p.item_id == item_id
        ]
        return (ItemRemoved(item_id=item_id), *discarded)

    @handles(RemoveItem)
    def handle_remove_item(self, cmd: RemoveItem) -> tuple:
        require_in(cmd.item_id, self.state.items, errmsg.ITEM_NOT_IN_CART)
        self.log.info("removing_item", item_id=cmd.item_id)
        return self._reprice_coupons(*self._removal_events(cmd.item_id))

    @handles(UpdateQuantity)
    def handle_update_quantity(self, cmd: UpdateQuantity) -> tuple:
        require_in(cmd.item_id, self.state.items, errmsg.ITEM_NOT_IN_CART)
        quantity = require_quantity(cmd.quantity)
        if quantity <= 0:
            self.log.info("removing_item", item_id=cmd.item_id)
            return self._reprice_coupons(*self._removal_events(cmd.item_id))
        return self._reprice_coupons(QuantityChanged(item_id=cmd.item_id, quantity=quantity))

    @handles(ApplyItemDiscount)
    def handle_apply_item_discount(self, cmd: ApplyItemDiscount) -> tuple:
        require_in(cmd.item_id, self.state.items, errmsg.ITEM_NOT_IN_CART)
        kind = _discount_kind(cmd.kind)
        value = _discount_value(kind, cmd.value)
        if cmd.requires_override:
            return (self._new_override(kind, value, item_id=cmd.item_id, reason=cmd.reason),)
        discount = ItemDiscount(value=value, kind=kind)
        return self._reprice_coupons(ItemDiscountApplied(item_id=cmd.item_id, discount=discount))

    @handles(RemoveItemDiscount)
    def handle_remove_item_discount(self, cmd: RemoveItemDiscount) -> tuple:
        require_in(cmd.item_id, self.state.items, errmsg.ITEM_NOT_IN_CART)
        if self.state.items[cmd.item_id].discount is None:
            raise CommandRejectedError(errmsg.NO_ITEM_DISCOUNT)
        return self._reprice_coupons(ItemDiscountRemoved(item_id=cmd.item_id))

    @handles(ClearCart)
    def handle_clear_cart(self, cmd: ClearCart) -> CartCleared:
        self._require_no_payment()
        self.log.info("clearing_cart", items=len(self.state.items))
        return CartCleared()

    # --- cart discount ---

    @handles(ApplyCartDiscount)
    def handle_apply_cart_discount(self, cmd: ApplyCartDiscount):
        kind = _discount_kind(cmd.kind)
        value = _discount_value(kind, cmd.value)
        self._require_discounts_allowed()
        if cmd.requires_override:
            return self._new_override(kind, value, reason=cmd.reason)
        return CartDiscountApplied(
            discount=CartDiscount(kind=kind, value=value, applied_at=self._clock(), reason=cmd.reason)
        )

    @handles(RemoveCartDiscount)
    def handle_remove_cart_discount(self, cmd: RemoveCartDiscount) -> CartDiscountRemoved:
        if self.state.cart_discount is None:
            raise CommandRejectedError(errmsg.NO_CART_DISCOUNT)
        return CartDiscountRemoved()

    # --- coupons ---

    @handles(ApplyCoupon)
    def handle_apply_coupon(self, cmd: ApplyCoupon) -> CouponApplied:
        code = (cmd.code or "").strip()
        require_exists(code, errmsg.COUPON_CODE_REQUIRED)
        state = self.state
        applied = self._coupons.apply(code, list(state.items.values()), state.coupons, state.cart_discount)
        self.log.info("applying_coupon", code=applied.code, discount=str(applied.discount_amount))
        return CouponApplied(applied=applied)

    @handles(RemoveCoupon)
    def handle_remove_coupon(self, cmd: RemoveCoupon) -> CouponRemoved:
        applied = self.state.find_coupon(cmd.code or "")
        if applied is None:
            raise CommandRejectedError(errmsg.COUPON_NOT_APPLIED)
        return CouponRemoved(code=applied.code)

    # --- customer and loyalty ---

    @handles(SelectCustomer)
    def handle_select_customer(self, cmd: SelectCustomer) -> tuple:
        self._require_no_payment()
        state = self.state
        if cmd.customer_id is None:
            events = [CustomerSelected(customer=None)]
            if state.points_to_redeem:
                events.append(LoyaltyRedemptionSet(points=0))
            return tuple(events)

        customer = self._customers.lookup(cmd.customer_id) if self._customers else None
        if customer is None:
            raise CommandRejectedError(errmsg.CUSTOMER_NOT_FOUND)
        events = [CustomerSelected(customer=customer)]
        if state.points_to_redeem > customer.loyalty_points:
            events.append(LoyaltyRedemptionSet(points=0))
        self.log.info("customer_selected", customer_id=customer.customer_id, tier=customer.tier)
        return tuple(events)

    @handles(RedeemLoyaltyPoints)
    def handle_redeem_loyalty_points(self, cmd: RedeemLoyaltyPoints) -> LoyaltyRedemptionSet:
        points = check_redemption(cmd.points, self.state.customer)
        return LoyaltyRedemptionSet(points=points)

    # --- overrides ---

    @handles(ApproveOverride)
    def handle_approve_override(self, cmd: ApproveOverride) -> tuple:
        request = self.state.pending.get(cmd.override_id)
        if request is None:
            raise CommandRejectedError(errmsg.OVERRIDE_NOT_FOUND)
        if self._approval_gate is None:
            raise CommandRejectedError(errmsg.NO_APPROVAL_GATE)

        if not self._approval_gate.authorize(request, cmd.credentials):
            self.log.warning("override_denied", override_id=request.override_id)
            return (OverrideResolved(override_id=request.override_id, approved=False),)

        resolved = OverrideResolved(override_id=request.override_id, approved=True)
        self.log.info("override_approved", override_id=request.override_id)
        if request.item_id is not None:
            discount = ItemDiscount(value=request.value, kind=request.kind)
            return self._reprice_coupons(
                resolved, ItemDiscountApplied(item_id=request.item_id, discount=discount)
            )

        self._require_discounts_allowed()
        discount = CartDiscount(
            kind=request.kind,
            value=request.value,
            applied_at=self._clock(),
            reason=request.reason,
            requires_override=True,
        )
        return (resolved, CartDiscountApplied(discount=discount))

    @handles(RejectOverride)
    def handle_reject_override(self, cmd: RejectOverride) -> OverrideResolved:
        require_in(cmd.override_id, self.state.pending, errmsg.OVERRIDE_NOT_FOUND)
        return OverrideResolved(override_id=cmd.override_id, approved=False)

    # --- payment ---

    @handles(AddTender)
    def handle_add_tender(self, cmd: AddTender) -> TenderAdded:
        try:
            kind = TenderKind(cmd.kind)
        except ValueError as e:
            raise CommandRejectedError(errmsg.TENDER_KIND_UNKNOWN, e) from e
        amount = require_positive(cmd.amount)
        state = self.state
        if state.is_empty:
            raise CommandRejectedError(errmsg.CART_EMPTY)

        recorded = accept_tender(
            kind,
            amount,
            total=self.totals.total,
            tenders=state.tenders,
            customer=state.customer,
            change_kinds=self.config.change_tender_kinds,
        )
        if self._payment_checkpoint is None:
            self._payment_checkpoint = len(self._events)
        tender = Tender(tender_id=uuid.uuid4().hex, kind=kind, amount=recorded, applied_at=self._clock())
        self.log.info("adding_tender", kind=kind.value, amount=str(recorded))
        return TenderAdded(tender=tender)

    @handles(RemoveTender)
    def handle_remove_tender(self, cmd: RemoveTender) -> TenderRemoved:
        if self.state.find_tender(cmd.tender_id) is None:
            raise CommandRejectedError(errmsg.TENDER_NOT_FOUND)
        return TenderRemoved(tender_id=cmd.tender_id)

    def _points_used(self, totals: Totals) -> int:
        """Points actually consumed; a clamped redemption only spends what it was worth."""
        if totals.loyalty_discount <= ZERO or self.config.point_value <= ZERO:
            return 0
        worth = math.ceil(totals.loyalty_discount / self.config.point_value)
        return min(self.state.points_to_redeem, worth)

    def _require_coupons_still_valid(self) -> None:
        """Re-check applied coupons against the catalog as it is now.

        Another sale may have used up a limited coupon, or it may have been
        deactivated or expired since it was applied.
        """
        state = self.state
        _, failed = self._coupons.revalidate(
            list(state.items.values()), state.coupons, state.cart_discount
        )
        if failed:
            ac, error = failed[0]
            raise CouponValidationError(error.reason, f"{ac.code}: {error.message}")

    @handles(Settle)
    def handle_settle(self, cmd: Settle) -> SaleSettled:
        state = self.state
        if state.is_empty:
            raise CommandRejectedError(errmsg.CART_EMPTY)
        if state.pending:
            raise OverrideRequiredError(list(state.pending))
        self._require_coupons_still_valid()

        totals = self.totals
        require_covered(totals.total, state.tenders)

        settled_at = self._clock()
        rate = earn_rate(state.customer, self.config.points_per_dollar)
        record = build_record(
            receipt_number=new_receipt_number(self.config.receipt_prefix, settled_at),
            customer_id=state.customer.customer_id if state.customer else None,
            items=state.items.values(),
            coupons=state.coupons,
            tenders=state.tenders,
            totals=totals,
            points_earned=points_earned(totals.total, rate),
            points_used=self._points_used(totals),
            settled_at=settled_at,
        )
        self.log.info(
            "sale_settled",
            receipt_number=record.receipt_number,
            total=str(record.total),
            change=str(record.change),
        )
        return SaleSettled(record=record)

    def _on_settled(self, record: TransactionRecord) -> None:
        """Record coupon usage and hand the record off; neither undoes the settlement."""
        self._payment_checkpoint = None
        for line in record.coupons:
            try:
                self._catalog.increment_usage(line.code)
            except CommandRejectedError as e:
                self.log.warning("coupon_usage_not_recorded", code=line.code, reason=str(e))

        if self._sink is None:
            return
        try:
            self._sink.publish(record)
        except Exception as e:
            self.log.error(
                "transaction_sink_failed", receipt_number=record.receipt_number, error=str(e)
            )

    def cancel(self) -> None:
        """Abandon the payment and roll the sale back to before the first tender."""
        if self.state.status == PaymentStatus.SETTLED:
            raise CommandRejectedError(errmsg.SALE_SETTLED)
        if self._payment_checkpoint is None:
            raise CommandRejectedError(errmsg.NO_PAYMENT_IN_PROGRESS)

        discarded = len(self._events) - self._payment_checkpoint
        del self._events[self._payment_checkpoint:]
        self._payment_checkpoint = None
        self._state = None
        self._payment_status = PaymentStatus.CANCELLED
        self.coupon_validation_error = None
        self.log.info("payment_cancelled", discarded_events=discarded)

    # --- hold / resume ---

    def hold(self, cashier: str = "", reason: Optional[str] = None) -> HeldCart:
        """Park the cart and clear the live sale."""
        state = self.state
        if state.status == PaymentStatus.SETTLED:
            raise CommandRejectedError(errmsg.SALE_SETTLED)
        if state.is_empty:
            raise CommandRejectedError(errmsg.CART_EMPTY)
        self._require_no_payment()

        held = HeldCart(
            hold_id=uuid.uuid4().hex,
            items=tuple(state.items.values()),
            cart_discount=state.cart_discount,
            coupon_codes=tuple(ac.code for ac in state.coupons),
            customer=state.customer,
            points_to_redeem=state.points_to_redeem,
            totals=self.totals,
            held_at=self._clock(),
            cashier=cashier,
            reason=reason,
        )
        self.dispatch(ClearCart())
        if state.customer is not None:
            self.dispatch(SelectCustomer(customer_id=None))
        self.log.info("cart_held", hold_id=held.hold_id, items=len(held.items))
        return held

    @classmethod
    def resume(cls, held: HeldCart, catalog, config: Optional[SaleConfig] = None, **collaborators):
        """Start a new sale from a held cart.

        Coupons are re-validated against the current catalog; any that no
        longer qualify are dropped and the last reason is left on
        ``coupon_validation_error``. The customer is looked up again so
        balances are current.
        """
        sale = cls(catalog, config, **collaborators)
        for item in held.items:
            sale.add_item(item.item_id, item.name, item.unit_price, item.quantity, item.category, item.kind)
            if item.discount is not None:
                sale.apply_item_discount(item.item_id, item.discount.value, item.discount.kind)
        if held.cart_discount is not None:
            sale.apply_cart_discount(
                held.cart_discount.kind, held.cart_discount.value, reason=held.cart_discount.reason
            )

        if held.customer is not None:
            try:
                sale.select_customer(held.customer.customer_id)
                if held.points_to_redeem:
                    sale.redeem_loyalty_points(held.points_to_redeem)
            except CommandRejectedError as e:
                sale.log.warning("held_customer_dropped", customer_id=held.customer.customer_id, reason=str(e))

        dropped = None
        for code in held.coupon_codes:
            try:
                sale.apply_coupon(code)
            except CouponValidationError as e:
                sale.log.info("held_coupon_dropped", code=code, reason=e.reason)
                dropped = e
        sale.coupon_validation_error = dropped
        sale.log.info("cart_resumed", hold_id=held.hold_id)
        return sale

    # --- command surface ---

    def add_item(self, item_id, name, unit_price, quantity=1, category="", kind=ItemKind.PRODUCT) -> LineItem:
        self.dispatch(AddItem(item_id, name, unit_price, quantity, category, kind))
        return self.state.items[item_id]

    def remove_item(self, item_id) -> None:
        self.dispatch(RemoveItem(item_id))

    def update_quantity(self, item_id, quantity) -> None:
        self.dispatch(UpdateQuantity(item_id, quantity))

    def apply_item_discount(
        self, item_id, value, kind=DiscountKind.PERCENTAGE, *, requires_override=False, reason=None
    ) -> Optional[PendingOverride]:
        events = self.dispatch(ApplyItemDiscount(item_id, value, kind, requires_override, reason))
        requested = _first(events, OverrideRequested)
        return requested.request if requested else None

    def remove_item_discount(self, item_id) -> None:
        self.dispatch(RemoveItemDiscount(item_id))

    def apply_cart_discount(
        self, kind, value, *, reason=None, requires_override=False
    ) -> Optional[PendingOverride]:
        events = self.dispatch(ApplyCartDiscount(kind, value, reason, requires_override))
        requested = _first(events, OverrideRequested)
        return requested.request if requested else None

    def remove_cart_discount(self) -> None:
        self.dispatch(RemoveCartDiscount())

    def apply_coupon(self, code) -> AppliedCoupon:
        events = self.dispatch(ApplyCoupon(code))
        return _first(events, CouponApplied).applied

    def remove_coupon(self, code) -> None:
        self.dispatch(RemoveCoupon(code))

    def select_customer(self, customer_id) -> Optional[Customer]:
        self.dispatch(SelectCustomer(customer_id))
        return self.state.customer

    def redeem_loyalty_points(self, points) -> None:
        self.dispatch(RedeemLoyaltyPoints(points))

    def approve_override(self, override_id, credentials=None) -> None:
        self.dispatch(ApproveOverride(override_id, credentials))

    def reject_override(self, override_id) -> None:
        self.dispatch(RejectOverride(override_id))

    def add_tender(self, kind, amount) -> Tender:
        events = self.dispatch(AddTender(kind, amount))
        return _first(events, TenderAdded).tender

    def remove_tender(self, tender_id) -> None:
        self.dispatch(RemoveTender(tender_id))

    def settle(self) -> TransactionRecord:
        events = self.dispatch(Settle())
        return _first(events, SaleSettled).record

    def clear_cart(self) -> None:
        self.dispatch(ClearCart())
