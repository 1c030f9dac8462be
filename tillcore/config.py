"""Sale configuration.

Tax rate and loyalty parameters are owned by the store, not by the core, so
they arrive here as plain configuration. ``from_env`` reads the same values
from ``TILL_*`` environment variables.
"""

import os
from dataclasses import dataclass, field
from decimal import Decimal

from .payment import TenderKind


@dataclass(frozen=True)
class SaleConfig:
    tax_rate: Decimal = Decimal("0.08")
    point_value: Decimal = Decimal("0.01")  # dollars per loyalty point
    points_per_dollar: Decimal = Decimal("10")
    change_tender_kinds: frozenset = field(default_factory=lambda: frozenset({TenderKind.CASH}))
    receipt_prefix: str = "RCP"

    @classmethod
    def from_env(cls) -> "SaleConfig":
        defaults = cls()
        change_kinds = os.environ.get("TILL_CHANGE_TENDERS")
        return cls(
            tax_rate=Decimal(os.environ.get("TILL_TAX_RATE", str(defaults.tax_rate))),
            point_value=Decimal(os.environ.get("TILL_POINT_VALUE", str(defaults.point_value))),
            points_per_dollar=Decimal(
                os.environ.get("TILL_POINTS_PER_DOLLAR", str(defaults.points_per_dollar))
            ),
            change_tender_kinds=(
                frozenset(TenderKind(k.strip()) for k in change_kinds.split(",") if k.strip())
                if change_kinds is not None
                else defaults.change_tender_kinds
            ),
            receipt_prefix=os.environ.get("TILL_RECEIPT_PREFIX", defaults.receipt_prefix),
        )
