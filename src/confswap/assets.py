"""Static price table for the confidential digital assets.

Reference prices are fixed USD values used only to derive display quotes.
They are not market data.
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Optional

from confswap.config import Settings, get_settings


class AssetId(str, Enum):
    """Key into the price table."""
    DGOLD = "DGOLD"
    USDT = "USDT"
    SILVER = "SILVER"
    PLATINUM = "PLATINUM"

    @classmethod
    def parse(cls, value: "str | AssetId") -> "AssetId":
        """Resolve a user-supplied asset key (case-insensitive).

        Raises:
            ValueError: If the key is not in the price table
        """
        if isinstance(value, AssetId):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            raise ValueError(f"Unknown asset: {value}") from None


@dataclass(frozen=True)
class AssetInfo:
    """Display name, precision and reference price of an asset."""

    symbol: str
    name: str
    decimals: int
    price: Decimal


PRICE_TABLE: dict[AssetId, AssetInfo] = {
    AssetId.DGOLD: AssetInfo(symbol="DGOLD", name="Digital Gold", decimals=6, price=Decimal("2000")),
    AssetId.USDT: AssetInfo(symbol="USDT", name="Tether USD", decimals=6, price=Decimal("1")),
    AssetId.SILVER: AssetInfo(symbol="DSILVER", name="Digital Silver", decimals=6, price=Decimal("25")),
    AssetId.PLATINUM: AssetInfo(symbol="DPLAT", name="Digital Platinum", decimals=6, price=Decimal("1000")),
}


def get_asset_info(asset: "str | AssetId") -> AssetInfo:
    """Look up an asset in the price table."""
    return PRICE_TABLE[AssetId.parse(asset)]


def get_contract_address(
    asset: "str | AssetId",
    settings: Optional[Settings] = None,
) -> Optional[str]:
    """Get the confidential token contract for an asset.

    Returns:
        Contract address, or None if it is not configured
    """
    settings = settings or get_settings()
    address = settings.get_token_address(AssetId.parse(asset).value)
    return address or None
