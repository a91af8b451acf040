"""Asset and chain context contracts."""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field


class AssetInfo(BaseModel):
    """A tradable confidential asset."""

    id: str = Field(..., description="Asset key (DGOLD, USDT, ...)")
    symbol: str = Field(..., description="Display symbol")
    name: str = Field(..., description="Full asset name")
    decimals: int = Field(..., description="Token decimals")
    price: Decimal = Field(..., description="Reference price in USD")
    contract_address: Optional[str] = Field(
        None,
        description="Confidential token contract (None if not configured)"
    )


class AssetListResponse(BaseModel):
    """Response containing the price table."""

    success: bool = True
    assets: list[AssetInfo] = Field(default_factory=list)
    total: int = Field(default=0, description="Total number of assets")


class ContextResponse(BaseModel):
    """Wallet account and network of the session."""

    account: Optional[str] = Field(None, description="Connected account")
    chain_id: Optional[int] = Field(None, description="Connected chain id")
    expected_chain_id: int = Field(..., description="Chain the contracts live on")
    network_name: str = Field(..., description="Expected network name")
    is_connected: bool = Field(..., description="Whether an account is available")
    is_expected_network: bool = Field(..., description="Whether chain_id matches")
