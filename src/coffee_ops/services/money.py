"""Currency display helpers."""

import math

from babel.numbers import format_currency, get_currency_symbol

# Currencies shown without fractional units.
ZERO_DECIMAL_CURRENCIES = frozenset({"IDR", "VND", "MMK", "KHR", "LAK"})

_SHORT_STEPS = (
    (1_000_000_000, "B"),
    (1_000_000, "M"),
    (1_000, "K"),
)


def format_money(
    value: float | None,
    currency_code: str = "IDR",
    locale: str = "id_ID",
    *,
    short: bool = False,
) -> str:
    """Format an amount in the shop's currency; non-finite amounts show as zero."""
    amount = value if isinstance(value, int | float) and math.isfinite(value) else 0
    if short:
        symbol = get_currency_symbol(currency_code, locale=locale)
        for step, suffix in _SHORT_STEPS:
            if amount >= step:
                return f"{symbol}{amount / step:.1f}{suffix}"
        return f"{symbol}{amount:g}"
    if currency_code in ZERO_DECIMAL_CURRENCIES:
        return format_currency(
            amount,
            currency_code,
            format="¤#,##0",
            locale=locale,
            currency_digits=False,
        )
    return format_currency(amount, currency_code, locale=locale)
