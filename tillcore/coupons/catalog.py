"""Coupon catalog persisted as JSON through a key-value store.

The persisted camelCase shape is the storage contract shared with the
management screens, so field names here must not drift.
"""

from __future__ import annotations

import json
from dataclasses import fields, replace
from datetime import date
from decimal import Decimal
from typing import Optional

from ..errors import CommandRejectedError, CouponValidationError, errmsg
from ..log import get_logger
from ..models import DiscountKind
from ..money import to_money
from ..ports import KeyValueStore
from .defaults import default_coupons
from .model import (
    BuyXGetYOffer,
    CategoryOffer,
    Coupon,
    FixedOffer,
    PercentageOffer,
    StackingRules,
    normalize_code,
)

log = get_logger(domain="coupon_catalog")

CATALOG_KEY = "coupon-catalog"
_COUPON_FIELDS = frozenset(f.name for f in fields(Coupon))


def _number(value: Optional[Decimal]):
    if value is None:
        return None
    if value == value.to_integral_value():
        return int(value)
    return float(value)


def _decimal(value) -> Optional[Decimal]:
    if value is None:
        return None
    return to_money(value)


def _categories(value) -> Optional[tuple[str, ...]]:
    if value is None:
        return None
    return tuple(value)


def coupon_to_dict(coupon: Coupon) -> dict:
    offer = coupon.offer
    categories = offer.applicable_categories
    data = {
        "code": coupon.code,
        "name": coupon.name,
        "description": coupon.description,
        "kind": offer.kind,
        "value": _number(getattr(offer, "value", None)),
        "minimumPurchase": _number(coupon.minimum_purchase),
        "maximumDiscount": _number(getattr(offer, "maximum_discount", None)),
        "applicableCategories": list(categories) if categories is not None else None,
        "buyQuantity": getattr(offer, "buy_quantity", None),
        "getQuantity": getattr(offer, "get_quantity", None),
        "startDate": coupon.start_date.isoformat(),
        "endDate": coupon.end_date.isoformat(),
        "usageLimit": coupon.usage_limit,
        "usageCount": coupon.usage_count,
        "isActive": coupon.is_active,
        "stackingRules": {
            "allowWithOtherCoupons": coupon.stacking.allow_with_other_coupons,
            "allowWithDiscounts": coupon.stacking.allow_with_discounts,
            "maxStackingValue": _number(coupon.stacking.max_stacking_value),
        },
    }
    if isinstance(offer, CategoryOffer):
        data["basis"] = offer.basis.value
    return data


def _offer_from_dict(data: dict):
    kind = data["kind"]
    categories = _categories(data.get("applicableCategories"))
    if kind == PercentageOffer.kind:
        return PercentageOffer(
            value=_decimal(data["value"]),
            maximum_discount=_decimal(data.get("maximumDiscount")),
            applicable_categories=categories,
        )
    if kind == FixedOffer.kind:
        return FixedOffer(value=_decimal(data["value"]), applicable_categories=categories)
    if kind == BuyXGetYOffer.kind:
        return BuyXGetYOffer(
            buy_quantity=int(data["buyQuantity"]),
            get_quantity=int(data["getQuantity"]),
            applicable_categories=categories,
        )
    if kind == CategoryOffer.kind:
        return CategoryOffer(
            value=_decimal(data["value"]),
            applicable_categories=categories or (),
            basis=DiscountKind(data.get("basis", DiscountKind.PERCENTAGE.value)),
            maximum_discount=_decimal(data.get("maximumDiscount")),
        )
    raise ValueError(f"Unknown coupon kind: {kind}")


def coupon_from_dict(data: dict) -> Coupon:
    rules = data.get("stackingRules") or {}
    return Coupon(
        code=data["code"],
        name=data["name"],
        description=data.get("description", ""),
        offer=_offer_from_dict(data),
        minimum_purchase=_decimal(data.get("minimumPurchase")),
        start_date=date.fromisoformat(data["startDate"]),
        end_date=date.fromisoformat(data["endDate"]),
        usage_limit=data.get("usageLimit"),
        usage_count=data.get("usageCount", 0),
        is_active=data.get("isActive", True),
        stacking=StackingRules(
            allow_with_other_coupons=rules.get("allowWithOtherCoupons", False),
            allow_with_discounts=rules.get("allowWithDiscounts", True),
            max_stacking_value=_decimal(rules.get("maxStackingValue")),
        ),
    )


class CouponCatalog:
    """Coupon definitions keyed by case-insensitive code.

    An empty store is seeded with the default coupon set.
    """

    def __init__(self, store: KeyValueStore, key: str = CATALOG_KEY):
        self._store = store
        self._key = key
        self._coupons: dict[str, Coupon] = {}
        self._load()

    def _load(self) -> None:
        raw = self._store.get(self._key)
        if raw is None:
            self._replace_all(default_coupons())
            return
        data = json.loads(raw, parse_float=Decimal)
        self._coupons = {}
        for entry in data:
            coupon = coupon_from_dict(entry)
            self._coupons[coupon.key] = coupon

    def _save(self) -> None:
        payload = [coupon_to_dict(c) for c in self._coupons.values()]
        self._store.set(self._key, json.dumps(payload))

    def _replace_all(self, coupons: list[Coupon]) -> None:
        self._coupons = {c.key: c for c in coupons}
        self._save()

    def list(self) -> list[Coupon]:
        return list(self._coupons.values())

    def get_by_code(self, code: str) -> Optional[Coupon]:
        return self._coupons.get(normalize_code(code))

    find = get_by_code

    def _require(self, code: str) -> Coupon:
        coupon = self.get_by_code(code)
        if coupon is None:
            raise CommandRejectedError(errmsg.COUPON_NOT_FOUND)
        return coupon

    def create(self, coupon: Coupon) -> Coupon:
        if not normalize_code(coupon.code):
            raise CommandRejectedError(errmsg.COUPON_CODE_REQUIRED)
        if coupon.key in self._coupons:
            raise CommandRejectedError(errmsg.COUPON_EXISTS)
        coupon = replace(coupon, code=coupon.key, usage_count=0)
        self._coupons[coupon.key] = coupon
        self._save()
        log.info("coupon_created", code=coupon.code, kind=coupon.kind)
        return coupon

    def update(self, code: str, **changes) -> Coupon:
        """Replace fields of an existing coupon. The code itself cannot change."""
        current = self._require(code)
        if "code" in changes and normalize_code(changes["code"]) != current.key:
            raise CommandRejectedError(errmsg.COUPON_CODE_IMMUTABLE)
        changes.pop("code", None)
        unknown = sorted(set(changes) - _COUPON_FIELDS)
        if unknown:
            raise CommandRejectedError(f"{errmsg.COUPON_FIELD_UNKNOWN}: {', '.join(unknown)}")
        updated = replace(current, **changes)
        self._coupons[current.key] = updated
        self._save()
        log.info("coupon_updated", code=current.code, fields=sorted(changes))
        return updated

    def delete(self, code: str) -> None:
        current = self._require(code)
        del self._coupons[current.key]
        self._save()
        log.info("coupon_deleted", code=current.code)

    def increment_usage(self, code: str) -> Coupon:
        """Count one redemption; a coupon never goes past its usage limit."""
        current = self._require(code)
        if current.usage_exhausted():
            raise CouponValidationError("usage_exhausted", errmsg.COUPON_USAGE_EXHAUSTED)
        updated = current.with_usage(current.usage_count + 1)
        self._coupons[current.key] = updated
        self._save()
        log.info("coupon_usage_incremented", code=current.code, usage_count=updated.usage_count)
        return updated

    def reset_to_defaults(self) -> None:
        self._replace_all(default_coupons())
        log.info("coupon_catalog_reset", count=len(self._coupons))
