"""Encrypted balance contracts."""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from confswap.web.contracts.swaps import ErrorInfoModel


class BalanceResponse(BaseModel):
    """Balance view of one asset. plaintext stays None until revealed."""

    success: bool = True
    asset: str = Field(..., description="Asset key")
    symbol: str = Field(..., description="Display symbol")
    ciphertext_handle: Optional[str] = Field(None, description="Encrypted balance handle (hex)")
    revealed: bool = Field(default=False, description="Whether the balance was decrypted")
    plaintext: Optional[Decimal] = Field(None, description="Decrypted balance")
    last_revealed_at: Optional[float] = Field(None, description="Time of the last reveal")
    is_decrypting: bool = False
    error: Optional[ErrorInfoModel] = None
