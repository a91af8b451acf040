"""Encryption pipeline: one service call per swap execution.

Wraps the external encryption service so that:
- each execution encrypts at most once at a time
- callers see a single is_encrypting flag
- service exceptions surface only as EncryptionError
- payloads are never cached or handed out twice
"""

import logging

from web3 import Web3

from confswap.encryption.base import (
    EncryptedPayload,
    EncryptionService,
    EncryptionServiceError,
)
from confswap.errors import EncryptionError, FailureReason

logger = logging.getLogger(__name__)

# Confidential token amounts are euint64
UINT64_MAX = 2**64 - 1


class EncryptionInProgressError(EncryptionError):
    """Raised when an execution asks for a second concurrent encryption."""

    default_reason = FailureReason.IN_PROGRESS


class EncryptionPipeline:
    """Adapter between the orchestrator and the encryption service."""

    def __init__(self, service: EncryptionService):
        self._service = service
        self._outstanding: set[str] = set()

    @property
    def service(self) -> EncryptionService:
        return self._service

    @property
    def is_encrypting(self) -> bool:
        """True while any encryption call is outstanding."""
        return bool(self._outstanding)

    def is_outstanding(self, request_id: str) -> bool:
        """Check whether a given execution still waits on the service."""
        return request_id in self._outstanding

    async def encrypt(
        self,
        request_id: str,
        contract_address: str,
        owner_address: str,
        value: int,
    ) -> EncryptedPayload:
        """Encrypt a scaled amount for one execution.

        Args:
            request_id: Execution identifier (guards duplicate calls)
            contract_address: Token contract consuming the ciphertext
            owner_address: Caller address
            value: Amount in integer token units

        Returns:
            Fresh EncryptedPayload

        Raises:
            EncryptionInProgressError: If request_id already has a call in flight
            EncryptionError: If the input is malformed or the service fails
        """
        if request_id in self._outstanding:
            raise EncryptionInProgressError(
                f"Encryption already in progress for execution {request_id}"
            )

        self._check_input(contract_address, owner_address, value)

        self._outstanding.add(request_id)
        logger.info(f"Encrypting amount for {request_id} via {self._service.name}")
        try:
            payload = await self._service.encrypt(contract_address, owner_address, value)
        except EncryptionServiceError as e:
            reason = (
                FailureReason.INVALID_INPUT if e.invalid_input else FailureReason.SERVICE_UNAVAILABLE
            )
            logger.warning(f"Encryption service rejected {request_id}: {e}")
            raise EncryptionError(f"Encryption failed: {e}", reason=reason) from None
        except Exception as e:
            logger.error(f"Encryption service error for {request_id}: {type(e).__name__}: {e}")
            raise EncryptionError(
                "Encryption service unavailable", reason=FailureReason.SERVICE_UNAVAILABLE
            ) from None
        finally:
            self._outstanding.discard(request_id)

        if not payload.handle or not payload.proof or payload.consumed:
            raise EncryptionError(
                "Encryption service returned an unusable payload",
                reason=FailureReason.SERVICE_UNAVAILABLE,
            )

        logger.debug(f"Encrypted {request_id}: handle 0x{payload.handle.hex()[:16]}...")
        return payload

    @staticmethod
    def _check_input(contract_address: str, owner_address: str, value: int) -> None:
        """Reject inputs the service would refuse anyway."""
        if not contract_address or not Web3.is_address(contract_address):
            raise EncryptionError(
                f"Invalid contract address: {contract_address!r}",
                reason=FailureReason.INVALID_INPUT,
            )
        if not owner_address or not Web3.is_address(owner_address):
            raise EncryptionError(
                f"Invalid owner address: {owner_address!r}",
                reason=FailureReason.INVALID_INPUT,
            )
        if isinstance(value, bool) or not isinstance(value, int) or value <= 0 or value > UINT64_MAX:
            raise EncryptionError(
                f"Amount {value!r} is outside the encrypted integer range",
                reason=FailureReason.INVALID_INPUT,
            )
