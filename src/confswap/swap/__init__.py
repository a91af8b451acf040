"""Swap orchestration.

Provides:
- SwapOrchestrator: encrypt -> submit -> confirm state machine
- TransactionTracker: generic submit-and-watch for contract writes
- Swap models (SwapIntent, SwapExecution, Phase)
"""

from confswap.swap.models import Phase, SwapExecution, SwapIntent
from confswap.swap.orchestrator import SwapOrchestrator
from confswap.swap.tracker import TransactionTracker, TxHandle, TxStatus

__all__ = [
    "Phase",
    "SwapExecution",
    "SwapIntent",
    "SwapOrchestrator",
    "TransactionTracker",
    "TxHandle",
    "TxStatus",
]
