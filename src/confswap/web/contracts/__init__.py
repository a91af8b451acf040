"""Request and response contracts for the web layer.

These Pydantic models define the API interface for the UI.
"""

from confswap.web.contracts.assets import (
    AssetInfo,
    AssetListResponse,
    ContextResponse,
)
from confswap.web.contracts.balances import BalanceResponse
from confswap.web.contracts.notifications import (
    NotificationListResponse,
    NotificationModel,
)
from confswap.web.contracts.quotes import QuoteRequest, QuoteResponse
from confswap.web.contracts.swaps import (
    ErrorInfoModel,
    SwapExecutionModel,
    SwapRequest,
    SwapStateResponse,
)

__all__ = [
    # Asset contracts
    "AssetInfo",
    "AssetListResponse",
    "ContextResponse",
    # Quote contracts
    "QuoteRequest",
    "QuoteResponse",
    # Swap contracts
    "SwapRequest",
    "SwapStateResponse",
    "SwapExecutionModel",
    "ErrorInfoModel",
    # Balance contracts
    "BalanceResponse",
    # Notification contracts
    "NotificationModel",
    "NotificationListResponse",
]
