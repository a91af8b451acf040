"""Pytest configuration and fixtures."""

import asyncio
import os
from typing import Any, AsyncIterator, Optional, Union

import pytest

# Set test environment
os.environ["ENVIRONMENT"] = "test"
os.environ["DRY_RUN"] = "true"
os.environ["DEBUG"] = "true"

from confswap.chain.base import (
    ChainClient,
    ChainContext,
    ConfirmationUpdate,
)
from confswap.chain.dry_run import DRY_RUN_ACCOUNT, DryRunChainClient
from confswap.config import Settings, get_settings
from confswap.encryption.base import (
    EncryptedPayload,
    EncryptionService,
)
from confswap.encryption.dry_run import DryRunEncryptionService
from confswap.encryption.pipeline import EncryptionPipeline
from confswap.notifications.feed import NotificationFeed
from confswap.swap.orchestrator import SwapOrchestrator
from confswap.swap.tracker import TransactionTracker

DGOLD_ADDRESS = "0x5FbDB2315678afecb367f032d93F642f64180aa3"
USDT_ADDRESS = "0xe7f1725E7734CE288F8367e1Bb143E90bb3F0512"
SEPOLIA = 11155111

CONTRACTS = {
    "DGOLD": DGOLD_ADDRESS,
    "USDT": USDT_ADDRESS,
    "SILVER": "0x1111111111111111111111111111111111111111",
    "PLATINUM": "0x2222222222222222222222222222222222222222",
}


def resolve_contract(asset) -> Optional[str]:
    return CONTRACTS.get(asset.value)


class ControlledEncryptionService(EncryptionService):
    """Encryption service whose calls resolve only when the test says so."""

    def __init__(self):
        self.calls: list[tuple[str, str, int]] = []
        self._futures: list[asyncio.Future] = []
        self.plaintexts: dict[bytes, int] = {}
        self.decrypt_calls = 0
        self.decrypt_error: Optional[Exception] = None
        self.decrypt_gate: Optional[asyncio.Event] = None

    @property
    def name(self) -> str:
        return "Controlled"

    async def encrypt(self, contract_address: str, owner_address: str, value: int) -> EncryptedPayload:
        self.calls.append((contract_address, owner_address, value))
        future = asyncio.get_running_loop().create_future()
        self._futures.append(future)
        return await future

    def resolve(self, index: int = -1) -> EncryptedPayload:
        contract_address, owner_address, value = self.calls[index]
        handle = bytes([len(self.plaintexts) + 1]) * 32
        self.plaintexts[handle] = value
        payload = EncryptedPayload(
            handle=handle,
            proof=b"proof-" + handle[:4],
            contract_address=contract_address,
            owner_address=owner_address,
        )
        self._futures[index].set_result(payload)
        return payload

    def fail(self, error: Exception, index: int = -1) -> None:
        self._futures[index].set_exception(error)

    async def decrypt(self, handle: bytes) -> int:
        self.decrypt_calls += 1
        if self.decrypt_gate is not None:
            await self.decrypt_gate.wait()
        if self.decrypt_error is not None:
            raise self.decrypt_error
        return self.plaintexts[handle]


Step = Union[ConfirmationUpdate, Exception]


class ScriptedChainClient(ChainClient):
    """Chain client replaying scripted confirmation streams.

    Each watch subscription consumes the next script. A script item that is
    an exception is raised at that point. With hang=True a finished script
    blocks instead of ending the stream. Writes wait on write_gate when set.
    """

    def __init__(self, scripts: Optional[list[list[Step]]] = None, hang: bool = False):
        self.scripts = list(scripts or [])
        self.hang = hang
        self.write_error: Optional[Exception] = None
        self.write_gate: Optional[asyncio.Event] = None
        self.write_cancelled = False
        self.written: list[dict] = []
        self.subscriptions = 0
        self.balance_handles: dict[tuple[str, str], bytes] = {}
        self.current_chain_id = SEPOLIA

    @property
    def name(self) -> str:
        return "Scripted"

    async def write(self, contract_address: str, function_name: str, args: tuple[Any, ...], signer_address: str) -> str:
        if self.write_gate is not None:
            try:
                await self.write_gate.wait()
            except asyncio.CancelledError:
                self.write_cancelled = True
                raise
        if self.write_error is not None:
            raise self.write_error
        tx_hash = "0x" + f"{len(self.written) + 1:064x}"
        self.written.append(
            {
                "tx_hash": tx_hash,
                "contract_address": contract_address,
                "function_name": function_name,
                "args": args,
                "signer_address": signer_address,
            }
        )
        return tx_hash

    async def watch_confirmations(self, tx_hash: str) -> AsyncIterator[ConfirmationUpdate]:
        self.subscriptions += 1
        script = self.scripts.pop(0) if self.scripts else []
        for step in script:
            await asyncio.sleep(0)
            if isinstance(step, Exception):
                raise step
            yield step
        if self.hang:
            await asyncio.Event().wait()

    async def read_balance_handle(self, contract_address: str, owner_address: str) -> bytes:
        return self.balance_handles.get((contract_address, owner_address), b"\x00" * 32)

    async def chain_id(self) -> int:
        return self.current_chain_id


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Settings are cached per process; tests start from a clean cache."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings() -> Settings:
    """Dry-run settings with fast confirmations."""
    return Settings(
        environment="test",
        dry_run=True,
        dgold_token_address=DGOLD_ADDRESS,
        usdt_token_address=USDT_ADDRESS,
        confirmation_poll_interval=0.01,
        confirmation_timeout=5,
        _env_file=None,
    )


@pytest.fixture
def context() -> ChainContext:
    """Connected wallet on the expected network."""
    return ChainContext(account=DRY_RUN_ACCOUNT, chain_id=SEPOLIA, expected_chain_id=SEPOLIA)


@pytest.fixture
def dry_chain() -> DryRunChainClient:
    return DryRunChainClient(chain_id=SEPOLIA, block_time=0)


@pytest.fixture
def dry_encryption() -> DryRunEncryptionService:
    return DryRunEncryptionService()


@pytest.fixture
def controlled_encryption() -> ControlledEncryptionService:
    return ControlledEncryptionService()


@pytest.fixture
def feed() -> NotificationFeed:
    return NotificationFeed(max_history=50)


def build_orchestrator(
    encryption: EncryptionService,
    chain: ChainClient,
    context: ChainContext,
    feed: Optional[NotificationFeed] = None,
    **tracker_options,
) -> SwapOrchestrator:
    tracker_options.setdefault("retry_delay", 0)
    return SwapOrchestrator(
        EncryptionPipeline(encryption),
        TransactionTracker(chain, **tracker_options),
        context,
        notifier=feed,
        contract_resolver=resolve_contract,
    )
