"""Validation helpers for command handler precondition checks.

Eliminates repeated validation boilerplate across the sale handlers.
"""

from decimal import Decimal

from .errors import CommandRejectedError, InvalidAmountError, errmsg
from .money import HUNDRED, ZERO, to_money


def require_exists(field, error_msg: str) -> None:
    """Require that a field is non-empty (entity exists)."""
    if not field:
        raise CommandRejectedError(error_msg)


def require_in(key, mapping, error_msg: str) -> None:
    """Require that ``key`` is present in ``mapping``."""
    if key not in mapping:
        raise CommandRejectedError(error_msg)


def require_quantity(value) -> int:
    """Require a whole-number quantity; zero and negatives pass through."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidAmountError(errmsg.QUANTITY_INTEGER)
    return value


def require_positive_quantity(value) -> int:
    quantity = require_quantity(value)
    if quantity <= 0:
        raise InvalidAmountError(errmsg.QUANTITY_POSITIVE)
    return quantity


def require_positive(value, error_msg: str = errmsg.AMOUNT_POSITIVE) -> Decimal:
    """Require that a value is numeric and greater than zero."""
    amount = to_money(value)
    if amount <= ZERO:
        raise InvalidAmountError(error_msg)
    return amount


def require_non_negative(value, error_msg: str) -> Decimal:
    """Require that a value is numeric and zero or greater."""
    amount = to_money(value)
    if amount < ZERO:
        raise InvalidAmountError(error_msg)
    return amount


def require_percentage(value) -> Decimal:
    percent = to_money(value)
    if percent < ZERO or percent > HUNDRED:
        raise InvalidAmountError(errmsg.PERCENTAGE_RANGE)
    return percent
