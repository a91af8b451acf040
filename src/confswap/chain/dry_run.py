"""Dry-run chain client for simulated swaps (PoC).

Transactions get random hashes and are "mined" one block per block_time.
Failures can be scripted for the next write.
"""

import asyncio
import logging
import secrets
from typing import Any, AsyncIterator, Optional

from confswap.chain.base import (
    ChainClient,
    ChainError,
    ConfirmationUpdate,
    ReceiptStatus,
)
from confswap.encryption.base import ZERO_HANDLE

logger = logging.getLogger(__name__)

# Account used when no wallet is configured in dry-run mode
DRY_RUN_ACCOUNT = "0x000000000000000000000000000000000000dead"


class DryRunChainClient(ChainClient):
    """Simulated chain for development and tests."""

    def __init__(self, chain_id: int = 11155111, block_time: float = 0.5):
        """Initialize dry-run chain.

        Args:
            chain_id: Chain id reported to the session
            block_time: Simulated seconds per block
        """
        self._chain_id = chain_id
        self.block_time = block_time
        self.submitted: list[dict] = []
        self.fail_next_write: Optional[ChainError] = None
        self.revert_next: bool = False
        self.drop_next: bool = False
        self._outcomes: dict[str, ReceiptStatus] = {}
        self._balances: dict[tuple[str, str], bytes] = {}

    @property
    def name(self) -> str:
        return "Dry Run"

    def set_chain_id(self, chain_id: int) -> None:
        """Simulate the wallet switching networks."""
        self._chain_id = chain_id

    def set_balance_handle(self, contract_address: str, owner_address: str, handle: bytes) -> None:
        """Seed the encrypted balance handle for an account."""
        self._balances[(contract_address.lower(), owner_address.lower())] = handle

    async def write(
        self,
        contract_address: str,
        function_name: str,
        args: tuple[Any, ...],
        signer_address: str,
    ) -> str:
        if self.fail_next_write is not None:
            error, self.fail_next_write = self.fail_next_write, None
            logger.info(f"[DRY RUN] {function_name} rejected: {error}")
            raise error

        tx_hash = "0x" + secrets.token_hex(32)
        outcome = ReceiptStatus.SUCCESS
        if self.revert_next:
            outcome, self.revert_next = ReceiptStatus.REVERTED, False
        elif self.drop_next:
            outcome, self.drop_next = ReceiptStatus.DROPPED, False
        self._outcomes[tx_hash] = outcome

        self.submitted.append(
            {
                "tx_hash": tx_hash,
                "contract_address": contract_address,
                "function_name": function_name,
                "args": args,
                "signer_address": signer_address,
            }
        )
        logger.info(f"[DRY RUN] Broadcast {function_name} on {contract_address}: {tx_hash}")
        return tx_hash

    async def watch_confirmations(self, tx_hash: str) -> AsyncIterator[ConfirmationUpdate]:
        outcome = self._outcomes.get(tx_hash, ReceiptStatus.DROPPED)
        yield ConfirmationUpdate(confirmations=0)

        block = 0
        while True:
            await asyncio.sleep(self.block_time)

            if outcome == ReceiptStatus.DROPPED:
                yield ConfirmationUpdate(confirmations=0, status=ReceiptStatus.DROPPED)
                return

            block += 1
            yield ConfirmationUpdate(confirmations=block, status=outcome, block_number=1)
            if outcome == ReceiptStatus.REVERTED:
                return

    async def read_balance_handle(self, contract_address: str, owner_address: str) -> bytes:
        return self._balances.get((contract_address.lower(), owner_address.lower()), ZERO_HANDLE)

    async def chain_id(self) -> int:
        return self._chain_id
