"""Swap orchestrator.

Drives one swap intent through encryption, submission and confirmation:

    IDLE -> ENCRYPTING -> SUBMITTING -> CONFIRMING -> CONFIRMED | FAILED

Exactly one execution is live at a time. Submitting while another execution
is in flight supersedes it: the old execution keeps running in the
background (a signed transaction cannot be recalled) but none of its results
reach the live state. Every write to the live slot goes through _transition,
which checks liveness first.

Only validation errors are raised to the caller. Everything else ends the
execution in FAILED with an ErrorInfo.
"""

import asyncio
import logging
import time
from typing import Callable, Optional

from confswap.assets import PRICE_TABLE, AssetId, AssetInfo, get_contract_address
from confswap.chain.base import ChainContext, TxSpec
from confswap.encryption.pipeline import UINT64_MAX, EncryptionPipeline
from confswap.errors import (
    EncryptionError,
    ErrorInfo,
    ErrorKind,
    FailureReason,
    ValidationError,
)
from confswap.notifications.feed import Notification, NotificationLevel, Notifier
from confswap.quotes.calculator import Quote, parse_amount, quote, to_base_units
from confswap.swap.models import Phase, SwapExecution, SwapIntent
from confswap.swap.tracker import TransactionTracker, TxHandle

logger = logging.getLogger(__name__)

ContractResolver = Callable[[AssetId], Optional[str]]

# Contract function carrying (recipient, ciphertext handle, input proof)
SWAP_FUNCTION = "transfer"


class SwapOrchestrator:
    """Owns the live swap execution and its state machine."""

    def __init__(
        self,
        pipeline: EncryptionPipeline,
        tracker: TransactionTracker,
        context: ChainContext,
        notifier: Optional[Notifier] = None,
        contract_resolver: Optional[ContractResolver] = None,
        price_table: Optional[dict[AssetId, AssetInfo]] = None,
    ):
        """Initialize orchestrator.

        Args:
            pipeline: Encryption pipeline for swap amounts
            tracker: Transaction tracker for the token contract write
            context: Wallet account and network
            notifier: Receives one notification per phase transition
            contract_resolver: Maps an asset to its token contract
            price_table: Prices and decimals (defaults to PRICE_TABLE)
        """
        self._pipeline = pipeline
        self._tracker = tracker
        self._context = context
        self._notifier = notifier
        self._resolve_contract = contract_resolver or get_contract_address
        self._price_table = price_table if price_table is not None else PRICE_TABLE
        self._live: Optional[SwapExecution] = None

    @property
    def current(self) -> Optional[SwapExecution]:
        """The live execution, if any."""
        return self._live

    @property
    def phase(self) -> Phase:
        return self._live.phase if self._live is not None else Phase.IDLE

    @property
    def is_encrypting(self) -> bool:
        return self._pipeline.is_encrypting

    @property
    def context(self) -> ChainContext:
        return self._context

    def quote(self, amount: Optional[str], from_asset: "str | AssetId", to_asset: "str | AssetId") -> Optional[Quote]:
        """Price an intent against the current price table."""
        return quote(amount, from_asset, to_asset, self._price_table)

    def submit(self, intent: SwapIntent) -> SwapExecution:
        """Accept an intent and start its pipeline.

        Must be called from a running event loop.

        Returns:
            The new live execution (phase ENCRYPTING)

        Raises:
            ValidationError: If the intent cannot be executed; nothing is started
        """
        value, contract_address = self._validate(intent)

        previous = self._live
        if previous is not None:
            if previous.phase.is_in_flight:
                logger.info(f"Superseding swap {previous.id} in phase {previous.phase.value}")
            self._release(previous)

        execution = SwapExecution(
            intent=intent,
            quote=self.quote(intent.amount, intent.from_asset, intent.to_asset),
            scaled_amount=value,
            contract_address=contract_address,
            owner_address=self._context.account,
        )
        self._live = execution
        logger.info(
            f"Swap {execution.id} started: {intent.amount} {intent.from_asset.value} -> "
            f"{intent.to_asset.value}"
        )
        self._announce(execution, Phase.ENCRYPTING)

        execution.task = asyncio.get_running_loop().create_task(
            self._run(execution), name=f"swap-{execution.id}"
        )
        return execution

    async def wait(self, execution: Optional[SwapExecution] = None) -> Optional[SwapExecution]:
        """Wait for an execution's background work to finish.

        A superseded execution returns as soon as its own work settles; its
        phase never reflects results that arrived after it was replaced.
        """
        execution = execution or self._live
        if execution is None:
            return None
        if execution.task is not None:
            await execution.task
        return execution

    def reset(self) -> None:
        """Return to IDLE.

        Broadcast transactions are not recalled; only local tracking stops.
        """
        if self._live is not None:
            logger.info(f"Resetting swap {self._live.id} from phase {self._live.phase.value}")
            self._release(self._live)
        self._live = None
        if self._notifier is not None:
            self._notifier.dismiss()

    def _validate(self, intent: SwapIntent) -> tuple[int, str]:
        """Check an intent before anything asynchronous starts.

        Returns:
            (amount in base units, source token contract)
        """
        amount = parse_amount(intent.amount)
        if amount is None or amount <= 0:
            raise ValidationError("Please enter a valid amount")

        if intent.from_asset == intent.to_asset:
            raise ValidationError("Cannot swap the same token")

        if not self._context.is_connected:
            raise ValidationError(
                "Connect a wallet account first", reason=FailureReason.MISSING_ACCOUNT
            )

        if not self._context.is_expected_network:
            raise ValidationError(
                f"Please switch to {self._context.network_name}",
                reason=FailureReason.UNSUPPORTED_NETWORK,
            )

        info = self._price_table[intent.from_asset]
        contract_address = self._resolve_contract(intent.from_asset)
        if not contract_address:
            raise ValidationError(f"No contract address configured for {info.symbol}")

        value = to_base_units(amount, info.decimals)
        if value <= 0:
            raise ValidationError(f"Amount is below the smallest unit of {info.symbol}")
        if value > UINT64_MAX:
            raise ValidationError("Amount exceeds the maximum encrypted value")

        return value, contract_address

    def _is_live(self, execution: SwapExecution) -> bool:
        return execution is self._live and not execution.superseded

    def _release(self, execution: SwapExecution) -> None:
        """Detach an execution from the live slot and stop watching its transaction."""
        execution.superseded = True
        execution.payload = None
        if execution.tx_handle is not None:
            execution.tx_handle.reset()

    def _transition(self, execution: SwapExecution, phase: Phase, **changes) -> bool:
        """Apply a phase change to the live execution.

        Returns:
            False if the execution is stale or already terminal
        """
        if not self._is_live(execution):
            logger.debug(f"Discarding {phase.value} for superseded swap {execution.id}")
            return False
        if execution.phase.is_terminal:
            logger.debug(f"Swap {execution.id} is {execution.phase.value}; ignoring {phase.value}")
            return False

        for name, value in changes.items():
            setattr(execution, name, value)
        execution.updated_at = time.time()

        if execution.phase != phase:
            logger.info(f"Swap {execution.id}: {execution.phase.value} -> {phase.value}")
            execution.phase = phase
            self._announce(execution, phase)
        return True

    def _fail(self, execution: SwapExecution, error: ErrorInfo) -> None:
        if self._transition(execution, Phase.FAILED, error=error):
            logger.warning(f"Swap {execution.id} failed ({error.kind.value}/{error.reason.value}): {error.message}")

    async def _run(self, execution: SwapExecution) -> None:
        """Background pipeline for one execution."""
        try:
            payload = await self._pipeline.encrypt(
                execution.id,
                execution.contract_address,
                execution.owner_address,
                execution.scaled_amount,
            )
        except EncryptionError as e:
            self._fail(execution, e.to_info())
            return
        except Exception as e:
            logger.exception(f"Unexpected error encrypting swap {execution.id}")
            self._fail(
                execution,
                ErrorInfo(
                    kind=ErrorKind.ENCRYPTION,
                    reason=FailureReason.SERVICE_UNAVAILABLE,
                    message=f"Encryption failed: {e}",
                ),
            )
            return

        if not self._transition(execution, Phase.SUBMITTING, payload=payload):
            logger.info(f"Dropping encryption result of superseded swap {execution.id}")
            return

        handle_bytes, proof = payload.consume()
        execution.payload = None

        spec = TxSpec(
            contract_address=execution.contract_address,
            function_name=SWAP_FUNCTION,
            args=(execution.owner_address, handle_bytes, proof),
            signer_address=execution.owner_address,
            description=f"swap {execution.intent.amount} {execution.intent.from_asset.value}",
        )
        tx_handle = self._tracker.submit(
            spec, on_update=lambda handle: self._on_tx_update(execution, handle)
        )
        execution.tx_handle = tx_handle
        await tx_handle.wait()

    def _on_tx_update(self, execution: SwapExecution, handle: TxHandle) -> None:
        """Map tracker state onto the execution."""
        if not self._is_live(execution):
            return

        if handle.failed:
            self._fail(execution, handle.error.to_info())
            return

        if handle.hash and execution.phase == Phase.SUBMITTING:
            self._transition(execution, Phase.CONFIRMING, tx_hash=handle.hash)

        if handle.confirmed:
            self._transition(execution, Phase.CONFIRMED, confirmations=handle.confirmation_count)
        elif handle.confirming:
            self._transition(execution, Phase.CONFIRMING, confirmations=handle.confirmation_count)

    def _announce(self, execution: SwapExecution, phase: Phase) -> None:
        """Publish the notification for a phase, once per execution."""
        if phase in execution.announced:
            return
        execution.announced.add(phase)
        if self._notifier is None:
            return

        intent = execution.intent
        source = self._price_table[intent.from_asset].symbol
        target = self._price_table[intent.to_asset].symbol
        output = execution.quote.output_amount if execution.quote else "?"

        if phase == Phase.ENCRYPTING:
            level, title = NotificationLevel.INFO, "Encrypting amount"
            description = f"Encrypting {intent.amount} {source} for a confidential transfer"
        elif phase == Phase.SUBMITTING:
            level, title = NotificationLevel.INFO, "Digital Asset Swap Initiated"
            description = f"Swapping {intent.amount} {source} for {output} {target}"
        elif phase == Phase.CONFIRMING:
            level, title = NotificationLevel.INFO, "Transaction submitted"
            description = f"Waiting for confirmation of {execution.tx_hash}"
        elif phase == Phase.CONFIRMED:
            level, title = NotificationLevel.SUCCESS, "Swap confirmed"
            description = f"Swapped {intent.amount} {source} for {output} {target}"
        elif phase == Phase.FAILED:
            level, title = NotificationLevel.ERROR, "Swap failed"
            description = execution.error.message if execution.error else "Unknown error"
        else:
            return

        self._notifier.notify(
            Notification(
                level=level,
                title=title,
                description=description,
                execution_id=execution.id,
                phase=phase.value,
                tx_hash=execution.tx_hash,
            )
        )
