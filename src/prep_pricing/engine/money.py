"""
Money helpers - Decimal conversion, rounding and display formatting.

All currency values are 2-decimal fixed point. Rounding is ROUND_HALF_UP and
happens only where a total is produced, never on intermediate values.
"""
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def to_decimal(value) -> Decimal:
    """
    Convert a catalog/form value to Decimal.

    Accepts Decimal, int, float and numeric strings ("1.5", "$1,200.00").
    Blank values (None, "") become zero. Floats go through ``str`` so that
    0.1 stays 0.1 rather than its binary expansion.
    """
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, bool):
        raise ValueError(f"Not a money amount: {value!r}")
    elif isinstance(value, int):
        result = Decimal(value)
    elif isinstance(value, float):
        result = Decimal(str(value))
    else:
        text = str(value).strip().replace('$', '').replace(',', '')
        if text == '':
            return ZERO
        try:
            result = Decimal(text)
        except InvalidOperation:
            raise ValueError(f"Not a money amount: {value!r}") from None

    if not result.is_finite():
        raise ValueError(f"Not a money amount: {value!r}")
    return result


def round_money(value) -> Decimal:
    """Round to cents using standard (half-up) rounding."""
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def format_money(value) -> str:
    """Format with trailing zeros preserved: 0.1 → "0.10"."""
    return f"{round_money(value):.2f}"


def format_currency(value, symbol: str = "$") -> str:
    """Format as a display amount, e.g. "$1,250.00"."""
    return f"{symbol}{round_money(value):,.2f}"
