# Overview: Exact money handling; amounts live as integer cents, the API speaks "12.34" strings.

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from .errors import ValidationError

# Maximum price: 99,999,999.99, matches the NUMERIC(10, 2) range
MAX_AMOUNT_CENTS = 9_999_999_999

_CENT = Decimal("0.01")


def parse_money(value, field: str = "amount") -> int:
    """
    Parse a decimal amount into integer cents.

    Accepts strings ("2.50", "3") and numbers. Floats go through their repr so
    2.5 parses as 250 cents. More than two fraction digits, negatives,
    booleans and non-numeric input are rejected.
    """
    if value is None or isinstance(value, bool):
        raise ValidationError(f"{field} must be a decimal amount")

    if isinstance(value, float):
        value = repr(value)

    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{field} must be a decimal amount")

    if not amount.is_finite():
        raise ValidationError(f"{field} must be a decimal amount")
    if amount != amount.quantize(_CENT):
        raise ValidationError(f"{field} cannot have more than 2 decimal places")
    if amount < 0:
        raise ValidationError(f"{field} must be >= 0")

    cents = int(amount.quantize(_CENT) * 100)
    if cents > MAX_AMOUNT_CENTS:
        raise ValidationError(f"{field} is too large")
    return cents


def cents_to_decimal(cents: int) -> Decimal:
    return (Decimal(cents) / 100).quantize(_CENT)


def format_cents(cents: int | None) -> str | None:
    """250 -> "2.50"."""
    if cents is None:
        return None
    return str(cents_to_decimal(cents))


def average_cents(total_cents: int, count: int) -> int:
    """Average rounded half-up to the cent; 0 when count is 0."""
    if count <= 0:
        return 0
    avg = (Decimal(total_cents) / Decimal(count)).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return int(avg)
