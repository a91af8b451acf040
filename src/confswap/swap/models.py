"""Swap intent, phase and execution models."""

import asyncio
import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Optional

from confswap.assets import AssetId
from confswap.encryption.base import EncryptedPayload
from confswap.errors import ErrorInfo, ValidationError
from confswap.quotes.calculator import Quote

if TYPE_CHECKING:
    from confswap.swap.tracker import TxHandle


class Phase(str, Enum):
    """Where a swap execution is in its lifecycle."""
    IDLE = "idle"
    ENCRYPTING = "encrypting"
    SUBMITTING = "submitting"
    CONFIRMING = "confirming"
    CONFIRMED = "confirmed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (Phase.CONFIRMED, Phase.FAILED)

    @property
    def is_in_flight(self) -> bool:
        return self in (Phase.ENCRYPTING, Phase.SUBMITTING, Phase.CONFIRMING)


@dataclass(frozen=True)
class SwapIntent:
    """What the user asked for. Replaced, never mutated, when inputs change."""

    from_asset: AssetId
    to_asset: AssetId
    amount: str

    @classmethod
    def create(cls, from_asset: "str | AssetId", to_asset: "str | AssetId", amount: str) -> "SwapIntent":
        """Build an intent from user input.

        Raises:
            ValidationError: If an asset key is unknown
        """
        try:
            source = AssetId.parse(from_asset)
            target = AssetId.parse(to_asset)
        except ValueError as e:
            raise ValidationError(str(e)) from None
        return cls(from_asset=source, to_asset=target, amount=str(amount).strip())

    def flipped(self) -> "SwapIntent":
        """Same amount with source and destination switched."""
        return SwapIntent(from_asset=self.to_asset, to_asset=self.from_asset, amount=self.amount)

    def to_dict(self) -> dict:
        return {
            "from_asset": self.from_asset.value,
            "to_asset": self.to_asset.value,
            "amount": self.amount,
        }


@dataclass(eq=False)
class SwapExecution:
    """The orchestrator's unit of work for one accepted intent."""

    intent: SwapIntent
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    phase: Phase = Phase.ENCRYPTING
    quote: Optional[Quote] = None
    scaled_amount: int = 0
    contract_address: str = ""
    owner_address: str = ""
    payload: Optional[EncryptedPayload] = field(default=None, repr=False)
    tx_hash: Optional[str] = None
    confirmations: int = 0
    error: Optional[ErrorInfo] = None
    superseded: bool = False
    created_at: float = field(default_factory=time.time)
    updated_at: float = field(default_factory=time.time)
    announced: set[Phase] = field(default_factory=set, repr=False)
    tx_handle: Optional["TxHandle"] = field(default=None, repr=False)
    task: Optional[asyncio.Task] = field(default=None, repr=False)

    @property
    def is_terminal(self) -> bool:
        return self.phase.is_terminal

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "id": self.id,
            "intent": self.intent.to_dict(),
            "phase": self.phase.value,
            "quote": self.quote.to_dict() if self.quote else None,
            "scaled_amount": self.scaled_amount,
            "contract_address": self.contract_address,
            "owner_address": self.owner_address,
            "tx_hash": self.tx_hash,
            "confirmations": self.confirmations,
            "error": self.error.to_dict() if self.error else None,
            "superseded": self.superseded,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
