"""Money formatting in the local (es-VE) style."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

CENTS = Decimal("0.01")


def format_money(amount: Decimal, symbol: str = "Bs.") -> str:
    """
    Format an amount with dot thousands and comma decimals.

    >>> format_money(Decimal("1234.5"))
    'Bs. 1.234,50'
    """
    quantized = amount.quantize(CENTS, rounding=ROUND_HALF_UP)
    sign = "-" if quantized < 0 else ""
    text = f"{abs(quantized):,.2f}"
    # Swap separators: 1,234.50 -> 1.234,50
    text = text.replace(",", "_").replace(".", ",").replace("_", ".")
    return f"{sign}{symbol} {text}" if symbol else f"{sign}{text}"


def format_percent(rate: Decimal) -> str:
    """Fee rate as a short percentage ("3%")."""
    value = (rate * 100).normalize()
    return f"{format(value, 'f')}%"
