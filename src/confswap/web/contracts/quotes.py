"""Quote request and response contracts."""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field


class QuoteRequest(BaseModel):
    """Request for a swap quote."""

    from_asset: str = Field(..., description="Source asset key (e.g., DGOLD)")
    to_asset: str = Field(..., description="Destination asset key")
    amount: Optional[str] = Field(
        None,
        description="Decimal amount as typed; empty means no quote yet"
    )


class QuoteResponse(BaseModel):
    """Quote at the reference price ratio."""

    success: bool = Field(..., description="Whether the request was understood")
    available: bool = Field(default=False, description="Whether a quote could be computed")
    from_asset: str = Field(..., description="Source asset")
    to_asset: str = Field(..., description="Destination asset")
    amount: Optional[Decimal] = Field(None, description="Input amount")
    rate: Optional[Decimal] = Field(None, description="Units of to_asset per from_asset")
    output_amount: Optional[Decimal] = Field(None, description="Expected output amount")
    error: Optional[str] = Field(None, description="Error message if failed")
