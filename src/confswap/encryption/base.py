"""Base interfaces for the encryption service.

Encryption flow:
1. Scale the user amount to integer token units
2. Ask the service to encrypt it for (contract, owner)
3. Service returns a ciphertext handle and an input proof
4. Handle and proof are passed to the token contract exactly once
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional

logger = logging.getLogger(__name__)

HANDLE_SIZE = 32
ZERO_HANDLE = b"\x00" * HANDLE_SIZE


@dataclass(eq=False)
class EncryptedPayload:
    """Ciphertext handle plus validity proof for one submission.

    Attributes:
        handle: 32-byte ciphertext reference usable on-chain
        proof: Input proof bound to (contract, owner)
        contract_address: Contract the input was encrypted for
        owner_address: Account the input was encrypted for
    """
    handle: bytes
    proof: bytes
    contract_address: str
    owner_address: str
    _consumed: bool = field(default=False, repr=False)

    @property
    def consumed(self) -> bool:
        return self._consumed

    def consume(self) -> tuple[bytes, bytes]:
        """Hand out (handle, proof) for a single submission.

        Raises:
            PayloadReusedError: If the payload was already submitted
        """
        if self._consumed:
            raise PayloadReusedError(
                f"Encrypted payload 0x{self.handle.hex()[:16]}... was already submitted"
            )
        self._consumed = True
        return self.handle, self.proof


class EncryptionService(ABC):
    """Abstract interface to the homomorphic encryption service.

    The bit-level format of handles and proofs is the service's concern.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Service name identifier."""
        pass

    @abstractmethod
    async def encrypt(
        self,
        contract_address: str,
        owner_address: str,
        value: int,
    ) -> EncryptedPayload:
        """Encrypt an unsigned integer for use by a contract.

        Args:
            contract_address: Contract that will consume the ciphertext
            owner_address: Account allowed to use the ciphertext
            value: Amount in integer token units

        Returns:
            EncryptedPayload with handle and proof

        Raises:
            EncryptionServiceError: If the service fails or rejects the input
        """
        pass

    @abstractmethod
    async def decrypt(self, handle: bytes) -> int:
        """Decrypt a ciphertext handle to its plaintext integer.

        Raises:
            EncryptionServiceError: If the service fails or rejects the handle
        """
        pass

    async def health_check(self) -> bool:
        """Check if the service is reachable."""
        return True

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name})"


class EncryptionServiceError(Exception):
    """Raised by encryption service implementations."""

    def __init__(self, message: str, invalid_input: bool = False, status_code: Optional[int] = None):
        self.invalid_input = invalid_input
        self.status_code = status_code
        super().__init__(message)


class PayloadReusedError(RuntimeError):
    """Raised when an encrypted payload is submitted twice."""
    pass
