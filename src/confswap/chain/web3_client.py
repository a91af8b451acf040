"""web3.py chain client for confidential token contracts.

Writes are signed locally with eth-account when a private key is configured,
otherwise they are sent through the node-managed account (where a wallet may
decline them). Confirmations are observed by polling receipts.
"""

import asyncio
import logging
from typing import Any, AsyncIterator, Optional

from eth_account import Account
from web3 import AsyncWeb3, Web3
from web3.exceptions import TransactionNotFound

from confswap.chain.base import (
    ChainClient,
    ChainError,
    ChainReadError,
    ConfirmationUpdate,
    NodeRejectedError,
    ReceiptStatus,
    SignerRejectedError,
)

logger = logging.getLogger(__name__)

# EIP-1193 "User Rejected Request"
USER_REJECTED_CODE = 4001

_USER_REJECTED_MARKERS = ("user rejected", "user denied", "rejected by user", "request rejected")

# Confidential ERC-20 fragments: amounts travel as (bytes32 handle, bytes proof)
CONFIDENTIAL_TOKEN_ABI = [
    {
        "name": "transfer",
        "type": "function",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "to", "type": "address"},
            {"name": "handle", "type": "bytes32"},
            {"name": "proof", "type": "bytes"},
        ],
        "outputs": [{"name": "", "type": "bool"}],
    },
    {
        "name": "balanceOf",
        "type": "function",
        "stateMutability": "view",
        "inputs": [{"name": "account", "type": "address"}],
        "outputs": [{"name": "", "type": "bytes32"}],
    },
]


def classify_write_error(exc: Exception) -> ChainError:
    """Map a web3/RPC exception to signer-declined or node-rejected."""
    code = None
    message = str(exc)

    payload = exc.args[0] if exc.args else None
    if isinstance(payload, dict):
        code = payload.get("code")
        message = payload.get("message", message)

    # web3 v7 Web3RPCError keeps the raw response
    rpc_response = getattr(exc, "rpc_response", None)
    if isinstance(rpc_response, dict) and isinstance(rpc_response.get("error"), dict):
        error = rpc_response["error"]
        code = error.get("code", code)
        message = error.get("message", message)

    lowered = message.lower()
    if code == USER_REJECTED_CODE or any(marker in lowered for marker in _USER_REJECTED_MARKERS):
        return SignerRejectedError(message)
    return NodeRejectedError(message)


class Web3ChainClient(ChainClient):
    """Chain client over an EVM JSON-RPC endpoint."""

    def __init__(
        self,
        rpc_url: str,
        private_key: Optional[str] = None,
        poll_interval: float = 2.0,
        web3: Optional[AsyncWeb3] = None,
    ):
        """Initialize the client.

        Args:
            rpc_url: JSON-RPC endpoint
            private_key: Optional local signing key
            poll_interval: Seconds between receipt polls
            web3: Preconfigured AsyncWeb3 instance (tests)
        """
        self.rpc_url = rpc_url
        self.poll_interval = poll_interval
        self._web3 = web3
        self._account = Account.from_key(private_key) if private_key else None

    @property
    def name(self) -> str:
        return "web3"

    @property
    def web3(self) -> AsyncWeb3:
        """Lazy load web3 instance."""
        if self._web3 is None:
            self._web3 = AsyncWeb3(AsyncWeb3.AsyncHTTPProvider(self.rpc_url))
        return self._web3

    @property
    def local_address(self) -> Optional[str]:
        """Address of the local signing key, if any."""
        return self._account.address if self._account else None

    def _contract(self, address: str):
        return self.web3.eth.contract(address=Web3.to_checksum_address(address), abi=CONFIDENTIAL_TOKEN_ABI)

    async def write(
        self,
        contract_address: str,
        function_name: str,
        args: tuple[Any, ...],
        signer_address: str,
    ) -> str:
        signer = Web3.to_checksum_address(signer_address)
        call = getattr(self._contract(contract_address).functions, function_name)(*args)

        try:
            if self._account is not None:
                if self._account.address != signer:
                    raise SignerRejectedError(
                        f"Local key controls {self._account.address}, not {signer}"
                    )
                nonce = await self.web3.eth.get_transaction_count(signer, "pending")
                tx_params = await call.build_transaction(
                    {
                        "from": signer,
                        "nonce": nonce,
                        "chainId": await self.web3.eth.chain_id,
                    }
                )
                signed_tx = self._account.sign_transaction(tx_params)
                # web3.py 7.x uses raw_transaction, older versions use rawTransaction
                raw_tx = getattr(signed_tx, "raw_transaction", None) or signed_tx.rawTransaction
                tx_hash = await self.web3.eth.send_raw_transaction(raw_tx)
            else:
                tx_hash = await call.transact({"from": signer})
        except ChainError:
            raise
        except Exception as e:
            error = classify_write_error(e)
            logger.warning(f"{function_name} on {contract_address} rejected: {type(error).__name__}: {error}")
            raise error from e

        tx_hash_hex = Web3.to_hex(tx_hash)
        logger.info(f"Broadcast {function_name} on {contract_address}: {tx_hash_hex}")
        return tx_hash_hex

    async def _read(self, awaitable, what: str):
        """Await a node read, translating unexpected failures."""
        try:
            return await awaitable
        except TransactionNotFound:
            raise
        except Exception as e:
            raise ChainReadError(f"Failed to read {what}: {type(e).__name__}: {e}") from e

    async def _observe(self, tx_hash: str, seen: bool) -> tuple[ConfirmationUpdate, bool]:
        """Take one observation of a transaction."""
        try:
            receipt = await self._read(self.web3.eth.get_transaction_receipt(tx_hash), "receipt")
        except TransactionNotFound:
            receipt = None

        if receipt is None:
            try:
                await self._read(self.web3.eth.get_transaction(tx_hash), "transaction")
                seen = True
            except TransactionNotFound:
                if seen:
                    return ConfirmationUpdate(confirmations=0, status=ReceiptStatus.DROPPED), seen
            return ConfirmationUpdate(confirmations=0), seen

        current_block = await self._read(self.web3.eth.block_number, "block number")
        tx_block = receipt["blockNumber"]
        confirmations = max(current_block - tx_block + 1, 1)
        status = ReceiptStatus.SUCCESS if receipt["status"] == 1 else ReceiptStatus.REVERTED
        return ConfirmationUpdate(confirmations=confirmations, status=status, block_number=tx_block), True

    async def watch_confirmations(self, tx_hash: str) -> AsyncIterator[ConfirmationUpdate]:
        seen = False
        last: Optional[ConfirmationUpdate] = None

        while True:
            update, seen = await self._observe(tx_hash, seen)

            if update != last:
                last = update
                yield update

            if update.is_terminal_failure:
                return

            await asyncio.sleep(self.poll_interval)

    async def read_balance_handle(self, contract_address: str, owner_address: str) -> bytes:
        call = self._contract(contract_address).functions.balanceOf(
            Web3.to_checksum_address(owner_address)
        )
        handle = await self._read(call.call(), "balance handle")
        return bytes(handle)

    async def chain_id(self) -> int:
        return await self._read(self.web3.eth.chain_id, "chain id")
