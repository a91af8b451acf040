"""HTTP client for the FHE encryption gateway.

The gateway owns the cryptosystem: it produces input ciphertexts with their
validity proofs and performs user decryption of balance handles.

Endpoints:
    POST /v1/encrypt  {contract_address, owner_address, value} -> {handles, input_proof}
    POST /v1/decrypt  {handle} -> {value}
    GET  /health
"""

import logging
from typing import Any, Optional

import httpx
from web3 import Web3

from confswap.encryption.base import (
    HANDLE_SIZE,
    EncryptedPayload,
    EncryptionService,
    EncryptionServiceError,
)

logger = logging.getLogger(__name__)


class GatewayEncryptionService(EncryptionService):
    """Encryption service backed by a remote gateway."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 60.0,
        api_key: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize gateway client.

        Args:
            base_url: Gateway base URL
            timeout: Request timeout in seconds
            api_key: Optional bearer token
            transport: Custom httpx transport (tests)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.api_key = api_key
        self._transport = transport

    @property
    def name(self) -> str:
        return "FHE Gateway"

    def _get_headers(self) -> dict:
        """Get request headers with authorization."""
        headers = {"Accept": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self._transport)

    async def _post(self, path: str, payload: dict) -> dict[str, Any]:
        """POST JSON and return the decoded body.

        Raises:
            EncryptionServiceError: On transport errors, non-2xx status or bad JSON
        """
        url = f"{self.base_url}{path}"
        try:
            async with self._client() as client:
                response = await client.post(url, json=payload, headers=self._get_headers())
        except httpx.HTTPError as e:
            raise EncryptionServiceError(f"Gateway unreachable: {type(e).__name__}: {e}")

        if response.status_code >= 400:
            logger.warning(f"Gateway error on {path}: {response.status_code} - {response.text}")
            raise EncryptionServiceError(
                f"Gateway returned {response.status_code}",
                invalid_input=400 <= response.status_code < 500,
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError:
            raise EncryptionServiceError("Gateway returned invalid JSON")

        if not isinstance(data, dict):
            raise EncryptionServiceError("Gateway returned unexpected payload")
        return data

    async def encrypt(
        self,
        contract_address: str,
        owner_address: str,
        value: int,
    ) -> EncryptedPayload:
        data = await self._post(
            "/v1/encrypt",
            {
                "contract_address": contract_address,
                "owner_address": owner_address,
                "value": str(value),
            },
        )

        try:
            handle = Web3.to_bytes(hexstr=data["handles"][0])
            proof = Web3.to_bytes(hexstr=data["input_proof"])
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise EncryptionServiceError(f"Malformed encrypt response: {e}")

        if len(handle) != HANDLE_SIZE:
            raise EncryptionServiceError(f"Handle must be {HANDLE_SIZE} bytes, got {len(handle)}")

        return EncryptedPayload(
            handle=handle,
            proof=proof,
            contract_address=contract_address,
            owner_address=owner_address,
        )

    async def decrypt(self, handle: bytes) -> int:
        data = await self._post("/v1/decrypt", {"handle": "0x" + handle.hex()})

        try:
            return int(data["value"])
        except (KeyError, TypeError, ValueError) as e:
            raise EncryptionServiceError(f"Malformed decrypt response: {e}")

    async def health_check(self) -> bool:
        """Check if the gateway answers its health endpoint."""
        try:
            async with self._client() as client:
                response = await client.get(f"{self.base_url}/health")
            return response.status_code == 200
        except httpx.HTTPError as e:
            logger.warning(f"Gateway health check failed: {e}")
            return False
