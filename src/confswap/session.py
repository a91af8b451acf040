"""Session wiring.

A SwapSession bundles everything one user interacts with: chain context,
encryption pipeline, transaction tracker, swap orchestrator, balance
decryptor and notification feed.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from confswap.assets import PRICE_TABLE, AssetId, get_contract_address
from confswap.balance.decryptor import BalanceDecryptor
from confswap.chain.base import ChainClient, ChainContext, ChainError
from confswap.chain.dry_run import DRY_RUN_ACCOUNT, DryRunChainClient
from confswap.chain.factory import create_chain_client
from confswap.config import Settings, get_settings
from confswap.encryption.base import EncryptionService
from confswap.encryption.dry_run import DryRunEncryptionService
from confswap.encryption.factory import create_encryption_service
from confswap.encryption.pipeline import EncryptionPipeline
from confswap.notifications.feed import NotificationFeed
from confswap.quotes.calculator import to_base_units
from confswap.swap.orchestrator import SwapOrchestrator
from confswap.swap.tracker import TransactionTracker

logger = logging.getLogger(__name__)

# Starting balance of every asset in dry-run mode
DRY_RUN_BALANCE = Decimal("1000")


@dataclass
class SwapSession:
    """All components of one user session."""

    settings: Settings
    context: ChainContext
    chain: ChainClient
    encryption: EncryptionService
    pipeline: EncryptionPipeline
    tracker: TransactionTracker
    orchestrator: SwapOrchestrator
    decryptor: BalanceDecryptor
    notifications: NotificationFeed

    async def start(self) -> None:
        """Read the connected network. Failures leave the chain id unknown."""
        try:
            await self.context.refresh(self.chain)
        except ChainError as e:
            logger.warning(f"Could not read chain id from {self.chain.name}: {e}")
            return
        logger.info(
            f"Session ready: account={self.context.account} chain={self.context.chain_id} "
            f"expected={self.context.expected_chain_id}"
        )

    def explorer_url(self, tx_hash: Optional[str]) -> Optional[str]:
        """Block explorer link for a transaction, if there is one."""
        if not tx_hash:
            return None
        return self.settings.get_explorer_url(tx_hash)


def _seed_dry_run_balances(
    settings: Settings,
    account: str,
    chain: DryRunChainClient,
    encryption: DryRunEncryptionService,
) -> None:
    for asset, info in PRICE_TABLE.items():
        contract_address = get_contract_address(asset, settings)
        if not contract_address:
            continue
        handle = encryption.register(to_base_units(DRY_RUN_BALANCE, info.decimals))
        chain.set_balance_handle(contract_address, account, handle)
    logger.debug(f"Seeded dry-run balances of {DRY_RUN_BALANCE} for {account}")


def create_session(
    settings: Optional[Settings] = None,
    chain: Optional[ChainClient] = None,
    encryption: Optional[EncryptionService] = None,
) -> SwapSession:
    """Build a session from settings.

    Args:
        settings: Settings to use (defaults to get_settings())
        chain: Chain client override
        encryption: Encryption service override
    """
    settings = settings or get_settings()
    chain = chain or create_chain_client(settings)
    encryption = encryption or create_encryption_service(settings)

    account = settings.wallet_address or getattr(chain, "local_address", None)
    if not account and settings.dry_run:
        account = DRY_RUN_ACCOUNT

    context = ChainContext(
        account=account,
        chain_id=None,
        expected_chain_id=settings.expected_chain_id,
        network_name=settings.network_name,
    )

    def resolve_contract(asset: AssetId) -> Optional[str]:
        return get_contract_address(asset, settings)

    notifications = NotificationFeed(max_history=settings.notification_history)
    pipeline = EncryptionPipeline(encryption)
    tracker = TransactionTracker(
        chain,
        confirmations=settings.confirmation_depth,
        timeout=settings.confirmation_timeout,
        read_retries=settings.confirmation_read_retries,
        retry_delay=settings.confirmation_poll_interval,
    )
    orchestrator = SwapOrchestrator(
        pipeline,
        tracker,
        context,
        notifier=notifications,
        contract_resolver=resolve_contract,
    )
    decryptor = BalanceDecryptor(
        encryption,
        chain,
        context,
        contract_resolver=resolve_contract,
    )

    if account and isinstance(chain, DryRunChainClient) and isinstance(encryption, DryRunEncryptionService):
        _seed_dry_run_balances(settings, account, chain, encryption)

    logger.info(f"Created session (chain={chain.name}, encryption={encryption.name})")
    return SwapSession(
        settings=settings,
        context=context,
        chain=chain,
        encryption=encryption,
        pipeline=pipeline,
        tracker=tracker,
        orchestrator=orchestrator,
        decryptor=decryptor,
        notifications=notifications,
    )
