"""Error types and message constants for the sale core.

Every error is recoverable at the command level: a rejected command leaves the
sale exactly as it was before the command was issued.
"""

from decimal import Decimal
from typing import Optional


class errmsg:
    """Error message constants for the sale domain."""

    SALE_SETTLED = "Sale is already settled"
    UNKNOWN_COMMAND = "Unknown command type"
    ITEM_ID_REQUIRED = "Item ID is required"
    ITEM_NOT_IN_CART = "Item not in cart"
    CART_EMPTY = "Cart is empty"
    QUANTITY_INTEGER = "Quantity must be a whole number"
    QUANTITY_POSITIVE = "Quantity must be positive"
    ITEM_KIND_UNKNOWN = "Unknown item kind"
    PRICE_NEGATIVE = "Unit price cannot be negative"
    AMOUNT_NOT_NUMERIC = "Amount must be numeric"
    AMOUNT_POSITIVE = "Amount must be positive"
    DISCOUNT_NEGATIVE = "Discount cannot be negative"
    PERCENTAGE_RANGE = "Percentage must be 0-100"
    NO_CART_DISCOUNT = "No cart discount is active"
    NO_ITEM_DISCOUNT = "Item has no discount"
    DISCOUNTS_NOT_ALLOWED = "An applied coupon cannot be combined with discounts"

    COUPON_CODE_REQUIRED = "Coupon code is required"
    COUPON_NOT_FOUND = "Coupon code not found"
    COUPON_INACTIVE = "This coupon is no longer active"
    COUPON_NOT_STARTED = "This coupon is not yet valid"
    COUPON_EXPIRED = "This coupon has expired"
    COUPON_USAGE_EXHAUSTED = "This coupon has reached its usage limit"
    COUPON_BELOW_MINIMUM = "Minimum purchase of {minimum} required"
    COUPON_DUPLICATE = "This coupon is already applied"
    COUPON_STACKING = "Cannot combine with currently applied coupons"
    COUPON_DISCOUNT_STACKING = "This coupon cannot be combined with discounts"
    COUPON_NOT_APPLIED = "Coupon is not applied"
    COUPON_EXISTS = "A coupon with this code already exists"
    COUPON_CODE_IMMUTABLE = "Coupon code cannot be changed"
    COUPON_FIELD_UNKNOWN = "Unknown coupon field"

    CUSTOMER_NOT_FOUND = "Customer not found"
    CUSTOMER_REQUIRED = "A customer must be selected"
    POINTS_NEGATIVE = "Points cannot be negative"
    POINTS_INSUFFICIENT = "Not enough loyalty points available"

    TENDER_NOT_FOUND = "Tender not found"
    TENDER_KIND_UNKNOWN = "Unknown tender kind"
    TENDER_EXCEEDS_BALANCE = "Tender exceeds remaining balance"
    STORE_CREDIT_UNAVAILABLE = "No store credit available"
    NOTHING_DUE = "Nothing remains to be paid"
    INSUFFICIENT_PAYMENT = "Insufficient payment: {remaining} remaining"
    NO_PAYMENT_IN_PROGRESS = "No payment in progress"
    PAYMENT_IN_PROGRESS = "Payment is in progress"

    OVERRIDE_NOT_FOUND = "Override request not found"
    OVERRIDE_PENDING = "Manager approval is still pending"
    OVERRIDE_DENIED = "Manager approval was denied"
    NO_APPROVAL_GATE = "No approval gate is configured"


class TillError(Exception):
    """Base class for sale core errors."""

    def __init__(self, message: str, cause: Optional[Exception] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause

    def __str__(self) -> str:
        if self.cause:
            return f"{self.message}: {self.cause}"
        return self.message


class CommandRejectedError(TillError):
    """Command was rejected due to business rule violation."""


class InvalidAmountError(CommandRejectedError):
    """Negative, zero or non-numeric quantity or amount at the command boundary."""


class CouponValidationError(CommandRejectedError):
    """Coupon failed validation; ``reason`` is a stable machine-readable code."""

    def __init__(self, reason: str, message: str):
        super().__init__(message)
        self.reason = reason


class InsufficientPaymentError(CommandRejectedError):
    """Tenders do not cover the total."""

    def __init__(self, remaining: Decimal):
        super().__init__(errmsg.INSUFFICIENT_PAYMENT.format(remaining=f"${remaining:.2f}"))
        self.remaining = remaining


class OverrideRequiredError(CommandRejectedError):
    """An override request is still awaiting approval."""

    def __init__(self, override_ids: list[str]):
        super().__init__(errmsg.OVERRIDE_PENDING)
        self.override_ids = override_ids


class OverrideDeniedError(CommandRejectedError):
    """The approval gate refused a pending override."""

    def __init__(self, override_id: str):
        super().__init__(errmsg.OVERRIDE_DENIED)
        self.override_id = override_id
