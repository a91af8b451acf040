"""Quote calculation and amount scaling."""

from confswap.quotes.calculator import (
    MAX_AMOUNT_DIGITS,
    QUOTE_DECIMALS,
    Quote,
    from_base_units,
    parse_amount,
    quote,
    to_base_units,
)

__all__ = [
    "MAX_AMOUNT_DIGITS",
    "QUOTE_DECIMALS",
    "Quote",
    "from_base_units",
    "parse_amount",
    "quote",
    "to_base_units",
]
