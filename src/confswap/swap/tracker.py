"""Transaction lifecycle tracker.

Generic "submit, then watch until N confirmations" wrapper used for any
contract write. Each submission gets a TxHandle whose status is a single
enum, so combinations like confirmed-and-pending cannot be represented.

Status flow:
    PENDING -> (hash known) -> CONFIRMING -> CONFIRMED
    PENDING/CONFIRMING -> FAILED
    any -> IDLE (caller reset)

CONFIRMED and FAILED are sticky: only reset() leaves them.
"""

import asyncio
import logging
import time
import uuid
from contextlib import aclosing
from enum import Enum
from typing import Callable, Optional

from confswap.chain.base import (
    ChainClient,
    ChainReadError,
    ConfirmationUpdate,
    NodeRejectedError,
    ReceiptStatus,
    SignerRejectedError,
    TxSpec,
)
from confswap.errors import (
    ConfirmationError,
    ConfSwapError,
    FailureReason,
    SubmissionError,
)

logger = logging.getLogger(__name__)


class TxStatus(str, Enum):
    """Lifecycle status of a tracked transaction."""
    IDLE = "idle"
    PENDING = "pending"
    CONFIRMING = "confirming"
    CONFIRMED = "confirmed"
    FAILED = "failed"


UpdateCallback = Callable[["TxHandle"], None]


class TxHandle:
    """Observable state of one submitted transaction."""

    def __init__(self, spec: TxSpec, required_confirmations: int = 1):
        self.id = uuid.uuid4().hex
        self.spec = spec
        self.required_confirmations = required_confirmations
        self.status = TxStatus.PENDING
        self.hash: Optional[str] = None
        self.confirmation_count = 0
        self.error: Optional[ConfSwapError] = None
        self.submitted_at = time.time()
        self.finished_at: Optional[float] = None
        self._listeners: list[UpdateCallback] = []
        self._settled = asyncio.Event()
        self._task: Optional[asyncio.Task] = None

    @property
    def pending(self) -> bool:
        return self.status == TxStatus.PENDING

    @property
    def confirming(self) -> bool:
        return self.status == TxStatus.CONFIRMING

    @property
    def confirmed(self) -> bool:
        return self.status == TxStatus.CONFIRMED

    @property
    def failed(self) -> bool:
        return self.status == TxStatus.FAILED

    @property
    def is_terminal(self) -> bool:
        return self.status in (TxStatus.CONFIRMED, TxStatus.FAILED)

    def subscribe(self, callback: UpdateCallback) -> None:
        """Register a callback invoked after every state change."""
        self._listeners.append(callback)

    def _emit(self) -> None:
        for callback in list(self._listeners):
            try:
                callback(self)
            except Exception:
                logger.exception(f"Transaction listener failed for {self.id}")

    def _update(
        self,
        status: Optional[TxStatus] = None,
        hash: Optional[str] = None,
        confirmation_count: Optional[int] = None,
        error: Optional[ConfSwapError] = None,
    ) -> bool:
        """Apply a change unless the handle is terminal or was reset."""
        if self.status == TxStatus.IDLE or self.is_terminal:
            logger.debug(f"Ignoring update for settled transaction {self.id} ({self.status.value})")
            return False

        if hash is not None:
            self.hash = hash
        if confirmation_count is not None:
            self.confirmation_count = confirmation_count
        if error is not None:
            self.error = error
        if status is not None:
            self.status = status

        if self.is_terminal:
            self.finished_at = time.time()
            self._settled.set()

        self._emit()
        return True

    async def wait(self) -> "TxHandle":
        """Wait until the transaction is confirmed, failed or reset."""
        await self._settled.wait()
        return self

    def reset(self) -> None:
        """Stop tracking locally.

        A broadcast transaction cannot be retracted; this only stops watching it.
        A write still waiting on the signer or node runs to completion and its
        result is ignored.
        """
        if self.hash is not None and self._task is not None and not self._task.done():
            self._task.cancel()
        self._listeners.clear()
        self.status = TxStatus.IDLE
        self._settled.set()

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "id": self.id,
            "status": self.status.value,
            "pending": self.pending,
            "confirming": self.confirming,
            "confirmed": self.confirmed,
            "failed": self.failed,
            "hash": self.hash,
            "confirmation_count": self.confirmation_count,
            "required_confirmations": self.required_confirmations,
            "error": self.error.to_info().to_dict() if self.error else None,
        }


class TransactionTracker:
    """Submits transactions and drives their handles to a terminal state."""

    def __init__(
        self,
        chain: ChainClient,
        confirmations: int = 1,
        timeout: float = 120.0,
        read_retries: int = 3,
        retry_delay: float = 1.0,
    ):
        """Initialize tracker.

        Args:
            chain: Chain layer to write to and watch
            confirmations: Default confirmation depth
            timeout: Maximum seconds from broadcast to final confirmation
            read_retries: Consecutive watch failures tolerated
            retry_delay: Seconds before re-subscribing after a read failure
        """
        if confirmations < 1:
            raise ValueError("Confirmation depth must be at least 1")
        self.chain = chain
        self.confirmations = confirmations
        self.timeout = timeout
        self.read_retries = read_retries
        self.retry_delay = retry_delay

    def submit(
        self,
        spec: TxSpec,
        on_update: Optional[UpdateCallback] = None,
        confirmations: Optional[int] = None,
    ) -> TxHandle:
        """Submit a transaction and start tracking it.

        Must be called from a running event loop. Never raises for chain
        failures; they end up on the handle.
        """
        handle = TxHandle(spec, required_confirmations=confirmations or self.confirmations)
        if on_update is not None:
            handle.subscribe(on_update)

        handle._task = asyncio.get_running_loop().create_task(
            self._drive(handle), name=f"tx-{handle.id}"
        )
        logger.debug(f"Tracking {spec.function_name} on {spec.contract_address} as {handle.id}")
        return handle

    async def _drive(self, handle: TxHandle) -> None:
        spec = handle.spec

        try:
            tx_hash = await self.chain.write(
                spec.contract_address,
                spec.function_name,
                spec.args,
                spec.signer_address,
            )
        except SignerRejectedError as e:
            logger.info(f"Signer declined {handle.id}: {e}")
            handle._update(
                status=TxStatus.FAILED,
                error=SubmissionError(
                    "Transaction was declined by the signer", reason=FailureReason.USER_REJECTED
                ),
            )
            return
        except NodeRejectedError as e:
            logger.warning(f"Node rejected {handle.id}: {e}")
            handle._update(
                status=TxStatus.FAILED,
                error=SubmissionError(f"Transaction rejected: {e}", reason=FailureReason.NODE_REJECTED),
            )
            return
        except Exception as e:
            logger.error(f"Submission of {handle.id} failed: {type(e).__name__}: {e}")
            handle._update(
                status=TxStatus.FAILED,
                error=SubmissionError(
                    f"Transaction submission failed: {e}", reason=FailureReason.NODE_REJECTED
                ),
            )
            return

        if not handle._update(hash=tx_hash):
            logger.info(f"Transaction {tx_hash} sent after tracking of {handle.id} was reset")
            return

        try:
            await asyncio.wait_for(self._watch(handle), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Transaction {tx_hash} not confirmed after {self.timeout}s")
            handle._update(
                status=TxStatus.FAILED,
                error=ConfirmationError(
                    f"Transaction not confirmed after {self.timeout:.0f}s",
                    reason=FailureReason.TIMEOUT,
                    tx_hash=tx_hash,
                ),
            )
        except ChainReadError as e:
            logger.error(f"Gave up watching {tx_hash}: {e}")
            handle._update(
                status=TxStatus.FAILED,
                error=ConfirmationError(
                    "Transaction status could not be read",
                    reason=FailureReason.READ_FAILED,
                    tx_hash=tx_hash,
                ),
            )

    async def _watch(self, handle: TxHandle) -> None:
        """Consume confirmation updates, re-subscribing after read failures."""
        failures = 0

        while True:
            try:
                async with aclosing(self.chain.watch_confirmations(handle.hash)) as updates:
                    async for update in updates:
                        failures = 0
                        if self._apply(handle, update):
                            return
            except ChainReadError as e:
                failures += 1
                if failures > self.read_retries:
                    raise
                logger.warning(
                    f"Read error watching {handle.hash} (attempt {failures}/{self.read_retries}): {e}"
                )
                await asyncio.sleep(self.retry_delay)
                continue

            # Stream ended without reaching a terminal state
            handle._update(
                status=TxStatus.FAILED,
                error=ConfirmationError(
                    "Transaction was dropped", reason=FailureReason.DROPPED, tx_hash=handle.hash
                ),
            )
            return

    def _apply(self, handle: TxHandle, update: ConfirmationUpdate) -> bool:
        """Apply one update. Returns True when watching can stop."""
        if update.status == ReceiptStatus.REVERTED:
            handle._update(
                status=TxStatus.FAILED,
                confirmation_count=update.confirmations,
                error=ConfirmationError(
                    "Transaction reverted", reason=FailureReason.REVERTED, tx_hash=handle.hash
                ),
            )
            return True

        if update.status == ReceiptStatus.DROPPED:
            handle._update(
                status=TxStatus.FAILED,
                error=ConfirmationError(
                    "Transaction was dropped", reason=FailureReason.DROPPED, tx_hash=handle.hash
                ),
            )
            return True

        if update.confirmations < 1:
            return False

        if update.confirmations >= handle.required_confirmations:
            handle._update(status=TxStatus.CONFIRMED, confirmation_count=update.confirmations)
            logger.info(f"Transaction {handle.hash} confirmed ({update.confirmations} blocks)")
            return True

        handle._update(status=TxStatus.CONFIRMING, confirmation_count=update.confirmations)
        return False
