"""Chain submission and read layer.

Provides:
- ChainClient: write / watch / read interface
- ChainContext: current account and network
- web3 and dry-run implementations
"""

from confswap.chain.base import (
    ChainClient,
    ChainContext,
    ChainError,
    ChainReadError,
    ConfirmationUpdate,
    NodeRejectedError,
    ReceiptStatus,
    SignerRejectedError,
    TxSpec,
)

__all__ = [
    "ChainClient",
    "ChainContext",
    "ChainError",
    "ChainReadError",
    "ConfirmationUpdate",
    "NodeRejectedError",
    "ReceiptStatus",
    "SignerRejectedError",
    "TxSpec",
]
