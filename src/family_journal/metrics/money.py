from __future__ import annotations

from decimal import Context, Decimal, DivisionByZero, InvalidOperation, Overflow, localcontext
from typing import Iterable

from family_journal.errors import ArithmeticOverflow

ZERO = Decimal("0")
HUNDRED = Decimal("100")
DEFAULT_MONEY_LIMIT = Decimal(10) ** 15

_MONEY_CONTEXT = Context(prec=34, traps=[Overflow, InvalidOperation, DivisionByZero])


def to_decimal(value: object) -> Decimal:
    if isinstance(value, Decimal):
        return value
    # str() of a float is its shortest round-trip form, so 0.1 stays 0.1.
    return Decimal(str(value))


def checked(value: Decimal, limit: Decimal = DEFAULT_MONEY_LIMIT) -> Decimal:
    if not value.is_finite() or abs(value) >= limit:
        raise ArithmeticOverflow(f"Monetary amount {value} exceeds the supported limit of {limit}.")
    return value


def money_mul(price: Decimal, quantity: Decimal, limit: Decimal = DEFAULT_MONEY_LIMIT) -> Decimal:
    with localcontext(_MONEY_CONTEXT):
        try:
            result = price * quantity
        except Overflow as exc:
            raise ArithmeticOverflow(f"Overflow computing {price} * {quantity}.") from exc
    return checked(result, limit)


def money_add(left: Decimal, right: Decimal, limit: Decimal = DEFAULT_MONEY_LIMIT) -> Decimal:
    with localcontext(_MONEY_CONTEXT):
        try:
            result = left + right
        except Overflow as exc:
            raise ArithmeticOverflow(f"Overflow adding {left} + {right}.") from exc
    return checked(result, limit)


def money_sum(values: Iterable[Decimal], limit: Decimal = DEFAULT_MONEY_LIMIT) -> Decimal:
    total = ZERO
    for value in values:
        total = money_add(total, value, limit)
    return total


def ratio(numerator: Decimal, denominator: Decimal) -> Decimal:
    with localcontext(_MONEY_CONTEXT):
        return numerator / denominator


def percent_of(numerator: Decimal, denominator: Decimal) -> Decimal:
    """Return ``numerator / denominator * 100``, or 0 when the denominator is not positive."""
    if denominator <= 0:
        return ZERO
    with localcontext(_MONEY_CONTEXT):
        return numerator / denominator * HUNDRED
