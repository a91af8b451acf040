"""Confidential balance reveal.

Balances live on-chain as ciphertext handles. A BalanceView stays concealed
until the user explicitly asks to decrypt it, and then stays revealed until
the session ends. Every decrypt re-reads the handle, since the balance may
have changed since the last reveal.

Independent of the swap orchestrator: it shares the encryption service but
never reads or writes swap state.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from decimal import Decimal
from typing import Callable, Optional

from confswap.assets import PRICE_TABLE, AssetId, AssetInfo, get_contract_address
from confswap.chain.base import ChainClient, ChainContext, ChainError
from confswap.encryption.base import ZERO_HANDLE, EncryptionService, EncryptionServiceError
from confswap.errors import DecryptError, ErrorInfo, FailureReason
from confswap.quotes.calculator import from_base_units

logger = logging.getLogger(__name__)


@dataclass
class BalanceView:
    """What the UI shows for one asset balance.

    Attributes:
        asset: Asset the balance belongs to
        ciphertext_handle: Last handle read from the token contract
        plaintext: Revealed amount, None while concealed
        last_revealed_at: Completion time of the last successful decrypt
        is_decrypting: True while a decrypt call is outstanding
        error: Last decrypt failure
    """
    asset: AssetId
    ciphertext_handle: Optional[bytes] = None
    plaintext: Optional[Decimal] = None
    last_revealed_at: Optional[float] = None
    is_decrypting: bool = False
    error: Optional[ErrorInfo] = None

    @property
    def is_revealed(self) -> bool:
        return self.plaintext is not None

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "asset": self.asset.value,
            "ciphertext_handle": "0x" + self.ciphertext_handle.hex() if self.ciphertext_handle else None,
            "revealed": self.is_revealed,
            "plaintext": str(self.plaintext) if self.plaintext is not None else None,
            "last_revealed_at": self.last_revealed_at,
            "is_decrypting": self.is_decrypting,
            "error": self.error.to_dict() if self.error else None,
        }


class BalanceDecryptor:
    """Reads encrypted balance handles and reveals them on request."""

    def __init__(
        self,
        service: EncryptionService,
        chain: ChainClient,
        context: ChainContext,
        contract_resolver: Optional[Callable[[AssetId], Optional[str]]] = None,
        price_table: Optional[dict[AssetId, AssetInfo]] = None,
        clock: Callable[[], float] = time.time,
    ):
        self._service = service
        self._chain = chain
        self._context = context
        self._resolve_contract = contract_resolver or get_contract_address
        self._price_table = price_table if price_table is not None else PRICE_TABLE
        self._clock = clock
        self._views: dict[AssetId, BalanceView] = {}
        self._inflight: dict[AssetId, asyncio.Task] = {}

    @property
    def is_decrypting(self) -> bool:
        return bool(self._inflight)

    def view(self, asset: "str | AssetId") -> BalanceView:
        """Get the view for an asset (concealed if never decrypted)."""
        asset = AssetId.parse(asset)
        if asset not in self._views:
            self._views[asset] = BalanceView(asset=asset)
        return self._views[asset]

    async def refresh(self, asset: "str | AssetId") -> BalanceView:
        """Re-read the encrypted handle without revealing it.

        Raises:
            DecryptError: If the handle cannot be read
        """
        view = self.view(asset)
        view.ciphertext_handle = await self._read_handle(view.asset)
        return view

    async def decrypt(self, asset: "str | AssetId") -> BalanceView:
        """Reveal the current balance.

        A second call while one is outstanding for the same asset waits for
        the first instead of calling the service again.

        Raises:
            DecryptError: If the handle cannot be read or decrypted
        """
        asset = AssetId.parse(asset)
        task = self._inflight.get(asset)
        if task is None:
            task = asyncio.get_running_loop().create_task(self._decrypt(asset))
            self._inflight[asset] = task
        else:
            logger.debug(f"Joining in-flight decrypt for {asset.value}")
        return await asyncio.shield(task)

    async def _decrypt(self, asset: AssetId) -> BalanceView:
        view = self.view(asset)
        view.is_decrypting = True

        try:
            handle = await self._read_handle(asset)
            view.ciphertext_handle = handle

            if handle == ZERO_HANDLE:
                units = 0
            else:
                units = await self._decrypt_handle(handle)

            view.plaintext = from_base_units(units, self._price_table[asset].decimals)
            view.last_revealed_at = self._clock()
            view.error = None
            logger.info(f"Revealed {asset.value} balance")
            return view

        except DecryptError as e:
            view.error = e.to_info()
            raise

        finally:
            view.is_decrypting = False
            self._inflight.pop(asset, None)

    async def _decrypt_handle(self, handle: bytes) -> int:
        try:
            return await self._service.decrypt(handle)
        except EncryptionServiceError as e:
            logger.warning(f"Decrypt rejected by {self._service.name}: {e}")
            reason = FailureReason.INVALID_INPUT if e.invalid_input else FailureReason.SERVICE_UNAVAILABLE
            raise DecryptError(f"Decryption failed: {e}", reason=reason) from None
        except Exception as e:
            logger.error(f"Decrypt error from {self._service.name}: {type(e).__name__}: {e}")
            raise DecryptError("Decryption service unavailable") from None

    async def _read_handle(self, asset: AssetId) -> bytes:
        account = self._context.account
        if not account:
            raise DecryptError("Connect a wallet account first", reason=FailureReason.MISSING_ACCOUNT)

        contract_address = self._resolve_contract(asset)
        if not contract_address:
            raise DecryptError(
                f"No contract address configured for {self._price_table[asset].symbol}",
                reason=FailureReason.INVALID_INPUT,
            )

        try:
            return await self._chain.read_balance_handle(contract_address, account)
        except ChainError as e:
            logger.warning(f"Failed to read {asset.value} balance handle: {e}")
            raise DecryptError("Could not read encrypted balance", reason=FailureReason.READ_FAILED) from None
