"""Tests for the Sale aggregate."""

from decimal import Decimal

import pytest

from tillcore import (
    CommandRejectedError,
    CouponValidationError,
    DiscountKind,
    InsufficientPaymentError,
    InvalidAmountError,
    ItemKind,
    OverrideDeniedError,
    OverrideRequiredError,
    PaymentStatus,
    Sale,
    SaleConfig,
    TenderKind,
)
from tillcore.commands import AddItem
from tillcore.events import CouponDetached

from .fixtures import FailingSink, fixed_clock


def hundred_dollar_cart(sale):
    sale.add_item("jacket", "Jacket", "100", category="Apparel")
    return sale


def scenario_sale(sale):
    hundred_dollar_cart(sale)
    sale.apply_cart_discount(DiscountKind.FIXED, "5")
    sale.apply_coupon("SAVE10")
    return sale


# =============================================================================
# Cart ledger
# =============================================================================


class TestCartLedger:
    def test_add_item_merges_by_id(self, sale):
        sale.add_item("cola", "Cola", "2.50", quantity=2, category="Beverages")
        merged = sale.add_item("cola", "Cola", "2.50", quantity=3, category="Beverages")
        assert merged.quantity == 5
        assert len(sale.items) == 1

    def test_add_service_item(self, sale):
        line = sale.add_item("fit", "Fitting", "15", kind=ItemKind.SERVICE)
        assert line.kind == ItemKind.SERVICE

    def test_unknown_item_kind_rejected(self, sale):
        with pytest.raises(CommandRejectedError, match="Unknown item kind"):
            sale.add_item("gift", "Gift", "5", kind="voucher")
        assert sale.events == ()

    @pytest.mark.parametrize(
        "price,quantity",
        [("-1", 1), ("abc", 1), ("5", 0), ("5", -2), ("5", 1.5), (None, 1)],
    )
    def test_invalid_input_rejected_before_mutation(self, sale, price, quantity):
        with pytest.raises(InvalidAmountError):
            sale.add_item("x", "X", price, quantity=quantity)
        assert sale.items == []
        assert sale.events == ()

    def test_update_quantity_zero_removes(self, sale):
        sale.add_item("cola", "Cola", "2.50", quantity=2)
        sale.update_quantity("cola", 0)
        assert sale.items == []

    def test_unknown_item_rejected(self, sale):
        with pytest.raises(CommandRejectedError, match="not in cart"):
            sale.remove_item("ghost")
        with pytest.raises(CommandRejectedError, match="not in cart"):
            sale.update_quantity("ghost", 2)

    def test_item_discounts(self, sale):
        sale.add_item("mug", "Mug", "10", quantity=3)
        sale.apply_item_discount("mug", "10")
        assert sale.totals.item_discounts == Decimal("3.00")
        sale.apply_item_discount("mug", "50", DiscountKind.FIXED)
        assert sale.totals.item_discounts == Decimal("30.00")
        sale.remove_item_discount("mug")
        assert sale.totals.item_discounts == Decimal("0.00")
        with pytest.raises(CommandRejectedError, match="no discount"):
            sale.remove_item_discount("mug")

    def test_item_discount_percentage_out_of_range(self, sale):
        sale.add_item("mug", "Mug", "10")
        with pytest.raises(InvalidAmountError, match="0-100"):
            sale.apply_item_discount("mug", "120")

    def test_clear_cart(self, sale):
        scenario_sale(sale)
        sale.clear_cart()
        assert sale.items == []
        assert sale.applied_coupons == []
        assert sale.cart_discount is None
        assert sale.totals.total == Decimal("0")

    def test_totals_are_idempotent(self, sale):
        scenario_sale(sale)
        assert sale.totals == sale.totals


# =============================================================================
# Cart discount and coupons
# =============================================================================


class TestDiscountsAndCoupons:
    def test_cart_discount_and_coupon_totals(self, sale):
        totals = scenario_sale(sale).totals
        assert totals.cart_discount == Decimal("5.00")
        assert totals.coupon_discounts == Decimal("10.00")
        assert totals.total_savings == Decimal("15.00")
        assert totals.taxable_base == Decimal("85.00")
        assert totals.tax == Decimal("6.80")
        assert totals.total == Decimal("91.80")

    def test_new_cart_discount_replaces_previous(self, sale):
        hundred_dollar_cart(sale)
        sale.apply_cart_discount(DiscountKind.FIXED, "5")
        sale.apply_cart_discount(DiscountKind.PERCENTAGE, "20")
        assert sale.totals.cart_discount == Decimal("20.00")
        sale.remove_cart_discount()
        assert sale.totals.cart_discount == Decimal("0.00")
        with pytest.raises(CommandRejectedError, match="No cart discount"):
            sale.remove_cart_discount()

    def test_coupon_rejection_is_surfaced(self, sale):
        sale.add_item("pen", "Pen", "10")
        with pytest.raises(CouponValidationError):
            sale.apply_coupon("SAVE20")
        assert sale.coupon_validation_error.reason == "below_minimum"
        assert sale.applied_coupons == []

    def test_unknown_coupon(self, sale):
        with pytest.raises(CouponValidationError) as exc:
            sale.apply_coupon("NOPE")
        assert exc.value.reason == "not_found"

    def test_blank_coupon_code(self, sale):
        with pytest.raises(CommandRejectedError, match="required"):
            sale.apply_coupon("   ")

    def test_cart_discount_blocked_by_strict_coupon(self, sale):
        hundred_dollar_cart(sale)
        sale.apply_coupon("SAVE20")
        with pytest.raises(CommandRejectedError, match="cannot be combined"):
            sale.apply_cart_discount(DiscountKind.FIXED, "5")

    def test_strict_coupon_blocked_by_cart_discount(self, sale):
        hundred_dollar_cart(sale)
        sale.apply_cart_discount(DiscountKind.FIXED, "5")
        with pytest.raises(CouponValidationError) as exc:
            sale.apply_coupon("SAVE20")
        assert exc.value.reason == "stacking_conflict"

    def test_removing_qualifying_item_detaches_coupon(self, sale):
        sale.add_item("coat", "Coat", "45")
        sale.add_item("hat", "Hat", "15")
        sale.apply_coupon("SAVE20")

        events = sale.dispatch(AddItem("sock", "Sock", "1"))
        assert not any(isinstance(e, CouponDetached) for e in events)
        before = sale.totals.total_savings
        contribution = sale.applied_coupons[0].discount_amount
        assert contribution == Decimal("12.20")

        sale.remove_item("hat")
        assert sale.applied_coupons == []
        assert sale.coupon_validation_error.reason == "below_minimum"
        assert sale.totals.total_savings == before - contribution

    def test_coupons_are_repriced_on_cart_change(self, sale):
        sale.add_item("cola", "Cola", "2", quantity=3, category="Beverages")
        sale.apply_coupon("BUY2GET1")
        assert sale.totals.coupon_discounts == Decimal("2.00")
        sale.update_quantity("cola", 6)
        assert sale.totals.coupon_discounts == Decimal("6.00")

    def test_stackable_coupons_are_capped(self, sale):
        sale.add_item("chips", "Chips", "10", quantity=2, category="Snacks")
        sale.apply_coupon("5OFF")
        sale.apply_coupon("SNACKS15")
        # 5.00 + 3.00 trimmed to 30% of 20.00, taken from SNACKS15
        assert sale.totals.coupon_discounts == Decimal("6.00")
        assert sale.totals.coupon_breakdown == (("5OFF", Decimal("5.00")), ("SNACKS15", Decimal("1.00")))

    def test_remove_coupon(self, sale):
        scenario_sale(sale)
        sale.remove_coupon("save10")
        assert sale.applied_coupons == []
        with pytest.raises(CommandRejectedError, match="not applied"):
            sale.remove_coupon("SAVE10")


# =============================================================================
# Customer and loyalty
# =============================================================================


class TestLoyalty:
    def test_redeem_requires_customer(self, sale):
        hundred_dollar_cart(sale)
        with pytest.raises(CommandRejectedError, match="customer"):
            sale.redeem_loyalty_points(100)

    def test_redeem_and_clear(self, sale):
        hundred_dollar_cart(sale)
        sale.select_customer("c-bronze")
        sale.redeem_loyalty_points(250)
        assert sale.totals.loyalty_discount == Decimal("2.50")
        with pytest.raises(CommandRejectedError, match="Not enough"):
            sale.redeem_loyalty_points(501)
        sale.redeem_loyalty_points(0)
        assert sale.totals.loyalty_discount == Decimal("0.00")

    def test_detaching_customer_drops_redemption(self, sale):
        hundred_dollar_cart(sale)
        sale.select_customer("c-bronze")
        sale.redeem_loyalty_points(100)
        sale.select_customer(None)
        assert sale.customer is None
        assert sale.totals.loyalty_discount == Decimal("0.00")

    def test_unknown_customer(self, sale):
        with pytest.raises(CommandRejectedError, match="Customer not found"):
            sale.select_customer("nobody")

    def test_points_earned_use_tier(self, sale):
        hundred_dollar_cart(sale)
        sale.select_customer("c-gold")
        sale.add_tender(TenderKind.CARD, "108")
        record = sale.settle()
        assert record.points_earned == 2160
        assert record.customer_id == "c-gold"

    def test_points_used_only_cover_what_was_worth(self, sale):
        sale.add_item("gum", "Gum", "1")
        sale.select_customer("c-bronze")
        sale.redeem_loyalty_points(500)
        assert sale.totals.loyalty_discount == Decimal("1.00")
        assert sale.totals.total == Decimal("0.00")


# =============================================================================
# Overrides
# =============================================================================


class TestOverrides:
    def test_pending_discount_excluded_until_approved(self, sale, gate):
        hundred_dollar_cart(sale)
        request = sale.apply_cart_discount(DiscountKind.PERCENTAGE, "30", requires_override=True)
        assert request is not None
        assert sale.totals.cart_discount == Decimal("0.00")

        sale.approve_override(request.override_id, credentials=gate.token)
        assert sale.pending_overrides == []
        assert sale.totals.cart_discount == Decimal("30.00")
        assert sale.cart_discount.requires_override is True

    def test_denied_override_is_discarded(self, sale):
        sale.add_item("tv", "TV", "500")
        request = sale.apply_item_discount("tv", "50", requires_override=True)
        with pytest.raises(OverrideDeniedError):
            sale.approve_override(request.override_id, credentials="wrong")
        assert sale.pending_overrides == []
        assert sale.totals.item_discounts == Decimal("0.00")

    def test_reject_override(self, sale):
        sale.add_item("tv", "TV", "500")
        request = sale.apply_item_discount("tv", "50", requires_override=True)
        sale.reject_override(request.override_id)
        assert sale.pending_overrides == []
        with pytest.raises(CommandRejectedError, match="not found"):
            sale.reject_override(request.override_id)

    def test_settle_refused_while_pending(self, sale):
        sale.add_item("tv", "TV", "500")
        request = sale.apply_item_discount("tv", "50", requires_override=True)
        sale.add_tender(TenderKind.CASH, "540")
        with pytest.raises(OverrideRequiredError) as exc:
            sale.settle()
        assert exc.value.override_ids == [request.override_id]
        assert sale.payment_status == PaymentStatus.OPEN

    def test_removing_item_discards_its_override(self, sale):
        sale.add_item("tv", "TV", "500")
        sale.apply_item_discount("tv", "50", requires_override=True)
        sale.remove_item("tv")
        assert sale.pending_overrides == []

    def test_no_gate_configured(self, make_sale):
        sale = make_sale(approval_gate=None)
        sale.add_item("tv", "TV", "500")
        request = sale.apply_item_discount("tv", "50", requires_override=True)
        with pytest.raises(CommandRejectedError, match="approval gate"):
            sale.approve_override(request.override_id, credentials="anything")
        assert len(sale.pending_overrides) == 1


# =============================================================================
# Payment
# =============================================================================


class TestPayment:
    def test_split_tender_settles(self, sale, sink, catalog):
        scenario_sale(sale)
        sale.add_tender(TenderKind.CASH, "50")
        sale.add_tender(TenderKind.CARD, "41.80")
        assert sale.totals.remaining == Decimal("0")
        record = sale.settle()
        assert record.change == Decimal("0")
        assert sale.payment_status == PaymentStatus.SETTLED
        assert sink.records == [record]
        assert catalog.get_by_code("SAVE10").usage_count == 1

    def test_insufficient_payment(self, sale, sink):
        scenario_sale(sale)
        sale.add_tender(TenderKind.CASH, "40")
        with pytest.raises(InsufficientPaymentError) as exc:
            sale.settle()
        assert exc.value.remaining == Decimal("51.80")
        assert sale.payment_status == PaymentStatus.OPEN
        assert sink.records == []

    def test_cash_overpayment_gives_change(self, sale):
        scenario_sale(sale)
        sale.add_tender(TenderKind.CASH, "100")
        assert sale.settle().change == Decimal("8.20")

    def test_store_credit_capped(self, sale):
        hundred_dollar_cart(sale)
        sale.select_customer("c-bronze")
        tender = sale.add_tender(TenderKind.STORE_CREDIT, "50")
        assert tender.amount == Decimal("20")

    def test_remove_tender(self, sale):
        hundred_dollar_cart(sale)
        tender = sale.add_tender(TenderKind.CARD, "50")
        sale.remove_tender(tender.tender_id)
        assert sale.tenders == []
        with pytest.raises(CommandRejectedError, match="Tender not found"):
            sale.remove_tender(tender.tender_id)

    def test_tender_on_empty_cart(self, sale):
        with pytest.raises(CommandRejectedError, match="empty"):
            sale.add_tender(TenderKind.CASH, "5")

    def test_unknown_tender_kind(self, sale):
        hundred_dollar_cart(sale)
        with pytest.raises(CommandRejectedError, match="Unknown tender"):
            sale.add_tender("cheque", "5")

    def test_commands_rejected_after_settlement(self, sale):
        hundred_dollar_cart(sale)
        sale.add_tender(TenderKind.CASH, "108")
        sale.settle()
        with pytest.raises(CommandRejectedError, match="already settled"):
            sale.add_item("extra", "Extra", "1")
        with pytest.raises(CommandRejectedError, match="already settled"):
            sale.cancel()

    def test_limited_coupon_is_not_oversold_across_sales(self, make_sale, catalog):
        catalog.update("SAVE10", usage_limit=1)
        first, second = make_sale(), make_sale()
        for sale in (first, second):
            hundred_dollar_cart(sale)
            sale.apply_coupon("SAVE10")
            sale.add_tender(TenderKind.CASH, "200")

        first.settle()
        with pytest.raises(CouponValidationError) as exc:
            second.settle()
        assert exc.value.reason == "usage_exhausted"
        assert second.coupon_validation_error.reason == "usage_exhausted"
        assert second.payment_status == PaymentStatus.OPEN
        assert catalog.get_by_code("SAVE10").usage_count == 1

        second.remove_coupon("SAVE10")
        record = second.settle()
        assert record.coupons == ()
        assert record.total == Decimal("108.00")
        assert catalog.get_by_code("SAVE10").usage_count == 1

    def test_coupon_deactivated_before_settle(self, sale, catalog):
        scenario_sale(sale)
        sale.add_tender(TenderKind.CASH, "100")
        catalog.update("SAVE10", is_active=False)
        with pytest.raises(CouponValidationError, match="SAVE10") as exc:
            sale.settle()
        assert exc.value.reason == "inactive"
        assert sale.record is None

    def test_failing_sink_does_not_undo_settlement(self, make_sale):
        sale = make_sale(sink=FailingSink())
        hundred_dollar_cart(sale)
        sale.add_tender(TenderKind.CASH, "108")
        record = sale.settle()
        assert sale.record is record
        assert sale.payment_status == PaymentStatus.SETTLED

    def test_cancel_rolls_back_to_first_tender(self, sale):
        scenario_sale(sale)
        before = sale.totals
        sale.add_tender(TenderKind.CASH, "20")
        sale.remove_coupon("SAVE10")
        sale.add_item("socks", "Socks", "5")
        sale.add_tender(TenderKind.CARD, "10")

        sale.cancel()
        assert sale.tenders == []
        assert sale.totals == before
        assert [ac.code for ac in sale.applied_coupons] == ["SAVE10"]
        assert sale.payment_status == PaymentStatus.CANCELLED

        sale.add_tender(TenderKind.CASH, "91.80")
        assert sale.payment_status == PaymentStatus.OPEN
        assert sale.settle().total == Decimal("91.80")

    def test_cancel_without_payment(self, sale):
        hundred_dollar_cart(sale)
        with pytest.raises(CommandRejectedError, match="No payment"):
            sale.cancel()

    def test_customer_locked_during_payment(self, sale):
        hundred_dollar_cart(sale)
        sale.add_tender(TenderKind.CASH, "10")
        with pytest.raises(CommandRejectedError, match="in progress"):
            sale.select_customer("c-gold")

    def test_configured_change_tenders(self, catalog):
        config = SaleConfig(change_tender_kinds=frozenset({TenderKind.CASH, TenderKind.CARD}))
        sale = Sale(catalog, config, clock=fixed_clock())
        hundred_dollar_cart(sale)
        sale.add_tender(TenderKind.CARD, "200")
        assert sale.settle().change == Decimal("92.00")


# =============================================================================
# Hold and resume
# =============================================================================


class TestHoldResume:
    def test_hold_clears_and_resume_restores(self, sale, catalog, customers):
        scenario_sale(sale)
        sale.select_customer("c-bronze")
        sale.redeem_loyalty_points(100)
        held = sale.hold(cashier="pat", reason="customer stepped away")

        assert sale.items == []
        assert sale.customer is None
        assert held.totals.total == Decimal("90.72")
        assert held.coupon_codes == ("SAVE10",)

        resumed = Sale.resume(held, catalog, customers=customers, clock=fixed_clock())
        assert resumed.totals == held.totals
        assert resumed.customer.customer_id == "c-bronze"
        assert resumed.coupon_validation_error is None

    def test_resume_drops_coupons_that_no_longer_qualify(self, sale, catalog):
        scenario_sale(sale)
        held = sale.hold()
        catalog.update("SAVE10", is_active=False)

        resumed = Sale.resume(held, catalog, clock=fixed_clock())
        assert resumed.applied_coupons == []
        assert resumed.coupon_validation_error.reason == "inactive"
        assert resumed.totals.cart_discount == Decimal("5.00")

    def test_cannot_hold_empty_cart(self, sale):
        with pytest.raises(CommandRejectedError, match="empty"):
            sale.hold()

    def test_cannot_hold_during_payment(self, sale):
        hundred_dollar_cart(sale)
        sale.add_tender(TenderKind.CASH, "10")
        with pytest.raises(CommandRejectedError, match="in progress"):
            sale.hold()
