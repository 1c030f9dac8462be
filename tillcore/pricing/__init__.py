"""Discount resolution and totals aggregation."""

from .discounts import item_discount_amount, resolve_cart_discount
from .totals import Totals, compute_totals

__all__ = ["Totals", "compute_totals", "item_discount_amount", "resolve_cart_discount"]
