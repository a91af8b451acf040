"""Swap submission and state contracts."""

from typing import Optional

from pydantic import BaseModel, Field


class SwapRequest(BaseModel):
    """Request to start a confidential swap."""

    from_asset: str = Field(..., description="Source asset key")
    to_asset: str = Field(..., description="Destination asset key")
    amount: str = Field(..., description="Decimal amount to swap")


class ErrorInfoModel(BaseModel):
    """Structured failure of an execution."""

    kind: str
    reason: str
    message: str
    tx_hash: Optional[str] = None


class SwapIntentModel(BaseModel):
    from_asset: str
    to_asset: str
    amount: str


class QuoteModel(BaseModel):
    from_asset: str
    to_asset: str
    amount: str
    rate: str
    output_amount: str


class SwapExecutionModel(BaseModel):
    """Public view of a swap execution. The encrypted payload is never exposed."""

    id: str
    intent: SwapIntentModel
    phase: str
    quote: Optional[QuoteModel] = None
    scaled_amount: int
    contract_address: str
    owner_address: str
    tx_hash: Optional[str] = None
    confirmations: int = 0
    error: Optional[ErrorInfoModel] = None
    superseded: bool = False
    created_at: float
    updated_at: float


class SwapStateResponse(BaseModel):
    """Current state of the session's swap orchestrator."""

    success: bool = True
    phase: str = Field(..., description="idle, encrypting, submitting, confirming, confirmed or failed")
    is_encrypting: bool = Field(default=False, description="Encryption call outstanding")
    execution: Optional[SwapExecutionModel] = None
    explorer_url: Optional[str] = Field(None, description="Block explorer link for the transaction")
