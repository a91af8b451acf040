"""Dry-run encryption service for simulated swaps (PoC).

Handles are random 32-byte values and the plaintext is kept in memory, so
decrypt returns exactly what was encrypted. NOT a cryptosystem.
"""

import asyncio
import logging
import secrets

from web3 import Web3

from confswap.encryption.base import (
    HANDLE_SIZE,
    EncryptedPayload,
    EncryptionService,
    EncryptionServiceError,
)

logger = logging.getLogger(__name__)


class DryRunEncryptionService(EncryptionService):
    """Simulated encryption service for development and tests."""

    def __init__(self, latency: float = 0.0):
        """Initialize dry-run service.

        Args:
            latency: Simulated seconds per call
        """
        self.latency = latency
        self._plaintexts: dict[bytes, int] = {}
        self.encrypt_calls = 0
        self.decrypt_calls = 0

    @property
    def name(self) -> str:
        return "Dry Run"

    def register(self, value: int) -> bytes:
        """Create a ciphertext handle for a known plaintext (seeds balances)."""
        handle = secrets.token_bytes(HANDLE_SIZE)
        self._plaintexts[handle] = value
        return handle

    async def encrypt(
        self,
        contract_address: str,
        owner_address: str,
        value: int,
    ) -> EncryptedPayload:
        self.encrypt_calls += 1
        if self.latency:
            await asyncio.sleep(self.latency)

        handle = self.register(value)
        proof = bytes(
            Web3.solidity_keccak(
                ["bytes32", "address", "address"],
                [handle, Web3.to_checksum_address(contract_address), Web3.to_checksum_address(owner_address)],
            )
        )
        logger.debug(f"[DRY RUN] Encrypted {value} -> 0x{handle.hex()[:16]}...")

        return EncryptedPayload(
            handle=handle,
            proof=proof,
            contract_address=contract_address,
            owner_address=owner_address,
        )

    async def decrypt(self, handle: bytes) -> int:
        self.decrypt_calls += 1
        if self.latency:
            await asyncio.sleep(self.latency)

        if handle not in self._plaintexts:
            raise EncryptionServiceError(
                f"Unknown handle 0x{handle.hex()[:16]}...", invalid_input=True
            )
        return self._plaintexts[handle]
