"""Error taxonomy for the confidential swap flow.

Validation errors are raised synchronously to the caller. Every other error
is recorded on the failing execution as an ErrorInfo, so callers observe
failures through state rather than exceptions.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Which stage of the flow produced the error."""
    VALIDATION = "validation"
    ENCRYPTION = "encryption"
    SUBMISSION = "submission"
    CONFIRMATION = "confirmation"
    DECRYPT = "decrypt"


class FailureReason(str, Enum):
    """Finer-grained cause, used by the UI to pick a message."""
    INVALID_INPUT = "invalid_input"
    UNSUPPORTED_NETWORK = "unsupported_network"
    MISSING_ACCOUNT = "missing_account"
    SERVICE_UNAVAILABLE = "service_unavailable"
    USER_REJECTED = "user_rejected"
    NODE_REJECTED = "node_rejected"
    REVERTED = "reverted"
    DROPPED = "dropped"
    TIMEOUT = "timeout"
    IN_PROGRESS = "in_progress"
    READ_FAILED = "read_failed"


@dataclass(frozen=True)
class ErrorInfo:
    """Structured failure attached to a terminal execution."""

    kind: ErrorKind
    reason: FailureReason
    message: str
    tx_hash: Optional[str] = None

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "kind": self.kind.value,
            "reason": self.reason.value,
            "message": self.message,
            "tx_hash": self.tx_hash,
        }


class ConfSwapError(Exception):
    """Base class for all swap flow errors."""

    kind: ErrorKind = ErrorKind.VALIDATION
    default_reason: FailureReason = FailureReason.INVALID_INPUT

    def __init__(
        self,
        message: str,
        reason: Optional[FailureReason] = None,
        tx_hash: Optional[str] = None,
    ):
        self.message = message
        self.reason = reason or self.default_reason
        self.tx_hash = tx_hash
        super().__init__(message)

    def to_info(self) -> ErrorInfo:
        """Convert to the structured form stored on executions."""
        return ErrorInfo(
            kind=self.kind,
            reason=self.reason,
            message=self.message,
            tx_hash=self.tx_hash,
        )


class ValidationError(ConfSwapError):
    """Bad user input. Never reaches the encryption service or the chain."""

    kind = ErrorKind.VALIDATION
    default_reason = FailureReason.INVALID_INPUT


class EncryptionError(ConfSwapError):
    """Encryption service failure or malformed amount."""

    kind = ErrorKind.ENCRYPTION
    default_reason = FailureReason.SERVICE_UNAVAILABLE


class SubmissionError(ConfSwapError):
    """Transaction was not accepted (signer declined or node rejected)."""

    kind = ErrorKind.SUBMISSION
    default_reason = FailureReason.NODE_REJECTED

    @property
    def user_cancelled(self) -> bool:
        return self.reason == FailureReason.USER_REJECTED


class ConfirmationError(ConfSwapError):
    """Transaction reverted, dropped or timed out after submission."""

    kind = ErrorKind.CONFIRMATION
    default_reason = FailureReason.REVERTED


class DecryptError(ConfSwapError):
    """Balance decryption failed. Only surfaced to the balance view."""

    kind = ErrorKind.DECRYPT
    default_reason = FailureReason.SERVICE_UNAVAILABLE
