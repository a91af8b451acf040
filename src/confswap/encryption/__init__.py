"""Client-side FHE input encryption and balance decryption.

Provides:
- EncryptionService: interface to the external encryption gateway
- EncryptionPipeline: exactly-once encryption per swap execution
- Gateway and dry-run service implementations
"""

from confswap.encryption.base import (
    EncryptedPayload,
    EncryptionService,
    EncryptionServiceError,
    PayloadReusedError,
)
from confswap.encryption.pipeline import EncryptionInProgressError, EncryptionPipeline

__all__ = [
    "EncryptedPayload",
    "EncryptionService",
    "EncryptionServiceError",
    "PayloadReusedError",
    "EncryptionPipeline",
    "EncryptionInProgressError",
]
