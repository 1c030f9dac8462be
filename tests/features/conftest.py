"""Step definitions shared by the checkout and coupon scenarios."""

from decimal import Decimal

import pytest
from pytest_bdd import given, parsers, then, when

from tillcore import CommandRejectedError, DiscountKind, PaymentStatus, TenderKind


class SaleTestContext:
    """Test context for sale BDD scenarios."""

    def __init__(self, make_sale, catalog, gate):
        self.make_sale = make_sale
        self.catalog = catalog
        self.gate = gate
        self.sale = None
        self.error = None
        self.override = None

    def attempt(self, action, *args):
        try:
            result = action(*args)
        except CommandRejectedError as e:
            self.error = e
            return None
        self.error = None
        return result


@pytest.fixture
def ctx(make_sale, catalog, gate):
    """Fixture providing fresh test context for each scenario."""
    return SaleTestContext(make_sale, catalog, gate)


def datatable_to_items(datatable):
    """Convert a pytest-bdd datatable (row 0 is headers) into item dicts."""
    if not datatable or len(datatable) < 2:
        return []
    headers = datatable[0]
    return [dict(zip(headers, row)) for row in datatable[1:]]


# --- Given steps ---


@given("a new sale")
def new_sale(ctx):
    ctx.sale = ctx.make_sale()


@given("the cart contains:")
def cart_contains(ctx, datatable):
    for row in datatable_to_items(datatable):
        ctx.sale.add_item(
            row["item_id"],
            row["name"],
            Decimal(row["unit_price"]),
            quantity=int(row["quantity"]),
            category=row.get("category", ""),
        )


@given(parsers.parse("a fixed cart discount of {amount}"))
def fixed_cart_discount(ctx, amount):
    ctx.sale.apply_cart_discount(DiscountKind.FIXED, Decimal(amount))


@given(parsers.parse('coupon "{code}" is applied'))
def coupon_is_applied(ctx, code):
    ctx.sale.apply_coupon(code)


@given(parsers.parse('customer "{customer_id}" is selected'))
def customer_selected(ctx, customer_id):
    ctx.sale.select_customer(customer_id)


# --- When steps ---


@when(parsers.parse("I apply a fixed cart discount of {amount}"))
def apply_fixed_cart_discount(ctx, amount):
    ctx.attempt(ctx.sale.apply_cart_discount, DiscountKind.FIXED, Decimal(amount))


@when(parsers.parse("I request a {percent:d} percent cart discount needing approval"))
def request_cart_discount(ctx, percent):
    ctx.override = ctx.sale.apply_cart_discount(
        DiscountKind.PERCENTAGE, percent, requires_override=True
    )


@when("the manager approves the override")
def manager_approves(ctx):
    ctx.attempt(ctx.sale.approve_override, ctx.override.override_id, ctx.gate.token)


@when(parsers.parse('I apply coupon "{code}"'))
def apply_coupon(ctx, code):
    ctx.attempt(ctx.sale.apply_coupon, code)


@when(parsers.parse('I remove item "{item_id}"'))
def remove_item(ctx, item_id):
    ctx.attempt(ctx.sale.remove_item, item_id)


@when(parsers.parse("I redeem {points:d} loyalty points"))
def redeem_points(ctx, points):
    ctx.attempt(ctx.sale.redeem_loyalty_points, points)


@when(parsers.parse("I tender {amount} as {kind}"))
def tender(ctx, amount, kind):
    ctx.attempt(ctx.sale.add_tender, TenderKind(kind), Decimal(amount))


@when("I settle the sale")
def settle(ctx):
    ctx.attempt(ctx.sale.settle)


@when("I cancel the payment")
def cancel_payment(ctx):
    ctx.attempt(ctx.sale.cancel)


# --- Then steps ---


@then(parsers.parse("the subtotal is {amount}"))
def subtotal_is(ctx, amount):
    assert ctx.sale.totals.subtotal == Decimal(amount)


@then(parsers.parse("the cart discount is {amount}"))
def cart_discount_is(ctx, amount):
    assert ctx.sale.totals.cart_discount == Decimal(amount)


@then(parsers.parse("the coupon discounts are {amount}"))
def coupon_discounts_are(ctx, amount):
    assert ctx.sale.totals.coupon_discounts == Decimal(amount)


@then(parsers.parse("the loyalty discount is {amount}"))
def loyalty_discount_is(ctx, amount):
    assert ctx.sale.totals.loyalty_discount == Decimal(amount)


@then(parsers.parse("the tax is {amount}"))
def tax_is(ctx, amount):
    assert ctx.sale.totals.tax == Decimal(amount)


@then(parsers.parse("the total is {amount}"))
def total_is(ctx, amount):
    assert ctx.sale.totals.total == Decimal(amount)


@then(parsers.parse("the remaining balance is {amount}"))
def remaining_is(ctx, amount):
    assert ctx.sale.totals.remaining == Decimal(amount)


@then(parsers.parse("the change due is {amount}"))
def change_due_is(ctx, amount):
    assert ctx.sale.record is not None
    assert ctx.sale.record.change == Decimal(amount)


@then("the sale is settled")
def sale_is_settled(ctx):
    assert ctx.error is None
    assert ctx.sale.payment_status == PaymentStatus.SETTLED


@then("the sale is open")
def sale_is_open(ctx):
    assert ctx.sale.payment_status == PaymentStatus.OPEN


@then(parsers.parse('the payment status is "{status}"'))
def payment_status_is(ctx, status):
    assert ctx.sale.payment_status == PaymentStatus(status)


@then("no tenders are recorded")
def no_tenders(ctx):
    assert ctx.sale.tenders == []


@then(parsers.parse('the command is rejected with "{text}"'))
def command_rejected(ctx, text):
    assert ctx.error is not None, "Expected command to be rejected"
    assert text in str(ctx.error)


@then(parsers.parse('the coupon error reason is "{reason}"'))
def coupon_error_reason(ctx, reason):
    assert ctx.sale.coupon_validation_error is not None
    assert ctx.sale.coupon_validation_error.reason == reason


@then("no coupons are applied")
def no_coupons(ctx):
    assert ctx.sale.applied_coupons == []


@then(parsers.parse('the applied coupons are "{codes}"'))
def applied_coupons_are(ctx, codes):
    expected = [code.strip() for code in codes.split(",")]
    assert [ac.code for ac in ctx.sale.applied_coupons] == expected


@then(parsers.parse("the receipt shows {earned:d} points earned and {used:d} points used"))
def receipt_points(ctx, earned, used):
    record = ctx.sale.record
    assert record.points_earned == earned
    assert record.points_used == used


@then(parsers.parse('coupon "{code}" has been used {count:d} time'))
def coupon_usage(ctx, code, count):
    assert ctx.catalog.get_by_code(code).usage_count == count
