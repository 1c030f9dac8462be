"""Currency-safe arithmetic.

All monetary values are ``Decimal``. Rounding to cents uses ROUND_HALF_UP and
is applied once per output field, never to per-unit intermediates.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from .errors import InvalidAmountError, errmsg

ZERO = Decimal("0")
CENT = Decimal("0.01")
HUNDRED = Decimal("100")


def to_money(value) -> Decimal:
    """Coerce caller input into a Decimal.

    Floats go through ``str`` so 0.1 stays 0.1. Booleans, None and anything
    non-numeric are rejected.
    """
    if isinstance(value, bool) or value is None:
        raise InvalidAmountError(errmsg.AMOUNT_NOT_NUMERIC)
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, float, str)):
        try:
            result = Decimal(str(value).strip())
        except InvalidOperation as e:
            raise InvalidAmountError(errmsg.AMOUNT_NOT_NUMERIC, e) from e
    else:
        raise InvalidAmountError(errmsg.AMOUNT_NOT_NUMERIC)
    if not result.is_finite():
        raise InvalidAmountError(errmsg.AMOUNT_NOT_NUMERIC)
    return result


def round_money(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def non_negative(value: Decimal) -> Decimal:
    return value if value > ZERO else ZERO


def clamp(value: Decimal, low: Decimal, high: Decimal) -> Decimal:
    return max(low, min(value, high))


def percent_of(amount: Decimal, percent: Decimal) -> Decimal:
    """Unrounded ``amount * percent / 100``."""
    return amount * percent / HUNDRED


def money_sum(values) -> Decimal:
    return sum(values, ZERO)


def format_money(value: Decimal) -> str:
    return f"${round_money(value):.2f}"
