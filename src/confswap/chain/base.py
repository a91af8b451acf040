"""Base interfaces for chain submission and reads."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, AsyncIterator, Optional

logger = logging.getLogger(__name__)


class ReceiptStatus(str, Enum):
    """State of a transaction as seen by the node."""
    PENDING = "pending"       # Known to the node, not in a block yet
    SUCCESS = "success"       # Mined with status 1
    REVERTED = "reverted"     # Mined with status 0
    DROPPED = "dropped"       # Disappeared from the mempool


@dataclass(frozen=True)
class ConfirmationUpdate:
    """One observation from a confirmation watch."""

    confirmations: int
    status: ReceiptStatus = ReceiptStatus.PENDING
    block_number: Optional[int] = None

    @property
    def is_terminal_failure(self) -> bool:
        return self.status in (ReceiptStatus.REVERTED, ReceiptStatus.DROPPED)


@dataclass(frozen=True)
class TxSpec:
    """A contract call to submit.

    Attributes:
        contract_address: Target contract
        function_name: ABI function to call
        args: Positional call arguments
        signer_address: Account sending the transaction
        description: Human-readable summary for logs
    """
    contract_address: str
    function_name: str
    args: tuple[Any, ...]
    signer_address: str
    description: str = ""


@dataclass
class ChainContext:
    """Wallet and network the session is operating on."""

    account: Optional[str]
    chain_id: Optional[int]
    expected_chain_id: int
    network_name: str = "Sepolia"

    @property
    def is_connected(self) -> bool:
        return bool(self.account)

    @property
    def is_expected_network(self) -> bool:
        return self.chain_id is not None and self.chain_id == self.expected_chain_id

    async def refresh(self, client: "ChainClient") -> None:
        """Re-read the chain id from the node."""
        self.chain_id = await client.chain_id()
        if not self.is_expected_network:
            logger.warning(
                f"Connected to chain {self.chain_id}, expected {self.expected_chain_id} "
                f"({self.network_name})"
            )

    def to_dict(self) -> dict:
        return {
            "account": self.account,
            "chain_id": self.chain_id,
            "expected_chain_id": self.expected_chain_id,
            "network_name": self.network_name,
            "is_connected": self.is_connected,
            "is_expected_network": self.is_expected_network,
        }


class ChainClient(ABC):
    """Abstract chain layer used by the transaction tracker."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Client name identifier."""
        pass

    @abstractmethod
    async def write(
        self,
        contract_address: str,
        function_name: str,
        args: tuple[Any, ...],
        signer_address: str,
    ) -> str:
        """Sign and broadcast a contract call.

        Returns:
            Transaction hash (0x-prefixed hex)

        Raises:
            SignerRejectedError: If the signer declined
            NodeRejectedError: If the node refused the transaction
        """
        pass

    @abstractmethod
    def watch_confirmations(self, tx_hash: str) -> AsyncIterator[ConfirmationUpdate]:
        """Stream confirmation counts for a transaction.

        The stream ends after a REVERTED or DROPPED update. Consumers stop
        iterating once they have seen enough confirmations.

        Raises:
            ChainReadError: If the node cannot be read
        """
        pass

    @abstractmethod
    async def read_balance_handle(self, contract_address: str, owner_address: str) -> bytes:
        """Read the encrypted balance handle of owner on a confidential token."""
        pass

    @abstractmethod
    async def chain_id(self) -> int:
        """Get the connected chain id."""
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name})"


class ChainError(Exception):
    """Base class for chain layer errors."""
    pass


class SignerRejectedError(ChainError):
    """The signer declined to sign the transaction."""
    pass


class NodeRejectedError(ChainError):
    """The node refused the transaction (bad nonce, funds, revert on estimate)."""
    pass


class ChainReadError(ChainError):
    """A read from the node failed. Usually transient."""
    pass
