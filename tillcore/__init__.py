"""tillcore: pricing, coupon and payment-settlement core for a point-of-sale cart."""

from .aggregate import Aggregate, handles
from .config import SaleConfig
from .coupons import (
    AppliedCoupon,
    BuyXGetYOffer,
    CategoryOffer,
    Coupon,
    CouponCatalog,
    CouponEngine,
    FixedOffer,
    PercentageOffer,
    StackingRules,
)
from .errors import (
    CommandRejectedError,
    CouponValidationError,
    InsufficientPaymentError,
    InvalidAmountError,
    OverrideDeniedError,
    OverrideRequiredError,
    TillError,
    errmsg,
)
from .log import configure_logging, get_logger
from .models import (
    CartDiscount,
    Customer,
    DiscountKind,
    ItemDiscount,
    ItemKind,
    LineItem,
    PendingOverride,
)
from .payment import PaymentStatus, Tender, TenderKind
from .ports import (
    ApprovalGate,
    CustomerDirectory,
    InMemoryCustomerDirectory,
    InMemoryKeyValueStore,
    KeyValueStore,
    TransactionSink,
)
from .pricing import Totals, compute_totals
from .receipt import CouponLine, ReceiptLine, TransactionRecord
from .sale import HeldCart, Sale
from .state import SaleState, StateRouter

__all__ = [
    # Sale
    "Sale",
    "SaleConfig",
    "SaleState",
    "HeldCart",
    "Totals",
    "compute_totals",
    # Aggregate base
    "Aggregate",
    "handles",
    "StateRouter",
    # Models
    "CartDiscount",
    "Customer",
    "DiscountKind",
    "ItemDiscount",
    "ItemKind",
    "LineItem",
    "PendingOverride",
    "PaymentStatus",
    "Tender",
    "TenderKind",
    # Coupons
    "AppliedCoupon",
    "BuyXGetYOffer",
    "CategoryOffer",
    "Coupon",
    "CouponCatalog",
    "CouponEngine",
    "FixedOffer",
    "PercentageOffer",
    "StackingRules",
    # Ports
    "ApprovalGate",
    "CustomerDirectory",
    "InMemoryCustomerDirectory",
    "InMemoryKeyValueStore",
    "KeyValueStore",
    "TransactionSink",
    # Records
    "CouponLine",
    "ReceiptLine",
    "TransactionRecord",
    # Errors
    "CommandRejectedError",
    "CouponValidationError",
    "InsufficientPaymentError",
    "InvalidAmountError",
    "OverrideDeniedError",
    "OverrideRequiredError",
    "TillError",
    "errmsg",
    # Logging
    "configure_logging",
    "get_logger",
]
