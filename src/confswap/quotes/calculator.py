"""Price-ratio quote calculator.

Quotes are pure: they depend only on the amount, the asset pair and the
price table passed in, and are recomputed on every call.

Rounding policy:
- Display quotes round half away from zero to QUOTE_DECIMALS places.
- Scaling to integer base units truncates toward zero, so an input with more
  fractional digits than the asset supports never rounds up into funds the
  user did not enter. from_base_units is the exact inverse for any amount
  that already fits the asset precision.
"""

import logging
from dataclasses import dataclass
from decimal import ROUND_DOWN, ROUND_HALF_UP, Decimal, InvalidOperation, localcontext
from typing import Optional, Union

from confswap.assets import PRICE_TABLE, AssetId, AssetInfo

logger = logging.getLogger(__name__)

QUOTE_DECIMALS = 6
_QUOTE_EXPONENT = Decimal(1).scaleb(-QUOTE_DECIMALS)

# Larger amounts cannot be a token balance and are treated as unparsable
MAX_AMOUNT_DIGITS = 30
_QUOTE_PRECISION = MAX_AMOUNT_DIGITS + QUOTE_DECIMALS + 12


@dataclass(frozen=True)
class Quote:
    """Counter-amount for a swap at the reference price ratio."""

    from_asset: AssetId
    to_asset: AssetId
    amount: Decimal
    rate: Decimal
    output_amount: Decimal

    def to_dict(self) -> dict:
        """Convert to dictionary with decimal strings."""
        return {
            "from_asset": self.from_asset.value,
            "to_asset": self.to_asset.value,
            "amount": str(self.amount),
            "rate": str(self.rate),
            "output_amount": str(self.output_amount),
        }


def parse_amount(amount: Union[str, Decimal, None]) -> Optional[Decimal]:
    """Parse a user-entered amount.

    Returns:
        Non-negative finite Decimal, or None for empty/unparsable input and
        for amounts with more than MAX_AMOUNT_DIGITS integer digits
    """
    if amount is None:
        return None

    if isinstance(amount, Decimal):
        value = amount
    else:
        text = str(amount).strip()
        if not text:
            return None
        try:
            value = Decimal(text)
        except InvalidOperation:
            return None

    if not value.is_finite() or value < 0:
        return None
    if not value.is_zero() and value.adjusted() >= MAX_AMOUNT_DIGITS:
        return None
    if value.is_signed():
        value = value.copy_abs()
    return value


def quote(
    amount: Union[str, Decimal, None],
    from_asset: Union[str, AssetId],
    to_asset: Union[str, AssetId],
    price_table: Optional[dict[AssetId, AssetInfo]] = None,
) -> Optional[Quote]:
    """Compute the counter-amount for swapping amount of from_asset.

    Same-asset pairs are allowed here (rate 1); rejecting them is up to
    the orchestrator.

    Args:
        amount: Decimal string entered by the user
        from_asset: Source asset key
        to_asset: Destination asset key
        price_table: Table to price against (defaults to PRICE_TABLE)

    Returns:
        Quote, or None when there is no usable amount yet

    Raises:
        ValueError: If an asset key is unknown
    """
    value = parse_amount(amount)
    if value is None:
        return None

    table = price_table if price_table is not None else PRICE_TABLE
    source = AssetId.parse(from_asset)
    target = AssetId.parse(to_asset)

    from_price = table[source].price
    to_price = table[target].price

    with localcontext() as ctx:
        ctx.prec = _QUOTE_PRECISION
        rate = from_price / to_price
        output = (value * from_price / to_price).quantize(_QUOTE_EXPONENT, rounding=ROUND_HALF_UP)

    return Quote(
        from_asset=source,
        to_asset=target,
        amount=value,
        rate=rate,
        output_amount=output,
    )


def to_base_units(amount: Decimal, decimals: int) -> int:
    """Scale a decimal amount to integer token units, truncating toward zero."""
    with localcontext() as ctx:
        ctx.prec = _QUOTE_PRECISION
        ctx.rounding = ROUND_DOWN
        scaled = amount.scaleb(decimals)
        return int(scaled.to_integral_value(rounding=ROUND_DOWN))


def from_base_units(units: int, decimals: int) -> Decimal:
    """Inverse of to_base_units."""
    return Decimal(units).scaleb(-decimals)
