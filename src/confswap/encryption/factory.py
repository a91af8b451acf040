"""Encryption service factory.

Creates the simulated service in dry-run mode and the gateway client
otherwise.
"""

import logging
from typing import Optional

from confswap.config import Settings, get_settings
from confswap.encryption.base import EncryptionService

logger = logging.getLogger(__name__)


def create_encryption_service(settings: Optional[Settings] = None) -> EncryptionService:
    """Create the configured encryption service."""
    settings = settings or get_settings()

    if settings.dry_run:
        from confswap.encryption.dry_run import DryRunEncryptionService

        logger.info("Using dry-run encryption service")
        return DryRunEncryptionService()

    from confswap.encryption.gateway import GatewayEncryptionService

    logger.info(f"Using encryption gateway at {settings.encryption_gateway_url}")
    return GatewayEncryptionService(
        base_url=settings.encryption_gateway_url,
        timeout=settings.encryption_timeout,
    )
