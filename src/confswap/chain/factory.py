"""Chain client factory."""

import logging
from typing import Optional

from confswap.chain.base import ChainClient
from confswap.config import Settings, get_settings

logger = logging.getLogger(__name__)


def create_chain_client(settings: Optional[Settings] = None) -> ChainClient:
    """Create the configured chain client.

    Dry-run mode never touches the network.
    """
    settings = settings or get_settings()

    if settings.dry_run:
        from confswap.chain.dry_run import DryRunChainClient

        logger.info("Using dry-run chain client")
        return DryRunChainClient(
            chain_id=settings.expected_chain_id,
            block_time=settings.confirmation_poll_interval,
        )

    from confswap.chain.web3_client import Web3ChainClient

    logger.info(f"Using web3 chain client at {settings.rpc_url}")
    return Web3ChainClient(
        rpc_url=settings.rpc_url,
        private_key=settings.wallet_private_key,
        poll_interval=settings.confirmation_poll_interval,
    )
