"""Tests for the encryption pipeline and service implementations."""

import asyncio
import json

import httpx
import pytest

from confswap.encryption import (
    EncryptedPayload,
    EncryptionInProgressError,
    EncryptionPipeline,
    EncryptionServiceError,
    PayloadReusedError,
)
from confswap.encryption.dry_run import DryRunEncryptionService
from confswap.encryption.gateway import GatewayEncryptionService
from confswap.encryption.pipeline import UINT64_MAX
from confswap.errors import EncryptionError, FailureReason

from tests.conftest import DGOLD_ADDRESS, ControlledEncryptionService

OWNER = "0x000000000000000000000000000000000000dead"


class FailingService(ControlledEncryptionService):
    """Service raising a fixed exception."""

    def __init__(self, error: Exception):
        super().__init__()
        self.error = error

    async def encrypt(self, contract_address, owner_address, value):
        self.calls.append((contract_address, owner_address, value))
        raise self.error


class TestEncryptionPipeline:
    """Tests for EncryptionPipeline."""

    async def test_encrypt_returns_payload(self, dry_encryption):
        pipeline = EncryptionPipeline(dry_encryption)

        payload = await pipeline.encrypt("exec-1", DGOLD_ADDRESS, OWNER, 2_000_000)

        assert len(payload.handle) == 32
        assert payload.proof
        assert payload.contract_address == DGOLD_ADDRESS
        assert not payload.consumed
        assert dry_encryption.encrypt_calls == 1

    async def test_is_encrypting_during_call(self, controlled_encryption):
        pipeline = EncryptionPipeline(controlled_encryption)

        task = asyncio.create_task(pipeline.encrypt("exec-1", DGOLD_ADDRESS, OWNER, 5))
        await asyncio.sleep(0)

        assert pipeline.is_encrypting
        assert pipeline.is_outstanding("exec-1")

        controlled_encryption.resolve()
        await task

        assert not pipeline.is_encrypting
        assert not pipeline.is_outstanding("exec-1")

    async def test_duplicate_request_rejected(self, controlled_encryption):
        """A second call for the same execution never reaches the service."""
        pipeline = EncryptionPipeline(controlled_encryption)

        task = asyncio.create_task(pipeline.encrypt("exec-1", DGOLD_ADDRESS, OWNER, 5))
        await asyncio.sleep(0)

        with pytest.raises(EncryptionInProgressError) as exc_info:
            await pipeline.encrypt("exec-1", DGOLD_ADDRESS, OWNER, 5)

        assert exc_info.value.reason == FailureReason.IN_PROGRESS

        assert len(controlled_encryption.calls) == 1
        controlled_encryption.resolve()
        await task

    async def test_different_requests_run_concurrently(self, controlled_encryption):
        pipeline = EncryptionPipeline(controlled_encryption)

        first = asyncio.create_task(pipeline.encrypt("a", DGOLD_ADDRESS, OWNER, 1))
        second = asyncio.create_task(pipeline.encrypt("b", DGOLD_ADDRESS, OWNER, 2))
        await asyncio.sleep(0)

        controlled_encryption.resolve(1)
        controlled_encryption.resolve(0)
        payload_a, payload_b = await asyncio.gather(first, second)

        assert controlled_encryption.plaintexts[payload_a.handle] == 1
        assert controlled_encryption.plaintexts[payload_b.handle] == 2

    async def test_service_error_translated(self):
        service = FailingService(EncryptionServiceError("gateway down"))
        pipeline = EncryptionPipeline(service)

        with pytest.raises(EncryptionError) as exc_info:
            await pipeline.encrypt("exec-1", DGOLD_ADDRESS, OWNER, 5)

        assert exc_info.value.reason == FailureReason.SERVICE_UNAVAILABLE
        assert exc_info.value.__cause__ is None
        assert not pipeline.is_encrypting

    async def test_invalid_input_reason(self):
        service = FailingService(EncryptionServiceError("bad value", invalid_input=True))
        pipeline = EncryptionPipeline(service)

        with pytest.raises(EncryptionError) as exc_info:
            await pipeline.encrypt("exec-1", DGOLD_ADDRESS, OWNER, 5)

        assert exc_info.value.reason == FailureReason.INVALID_INPUT

    async def test_unexpected_exception_translated(self):
        pipeline = EncryptionPipeline(FailingService(RuntimeError("boom")))

        with pytest.raises(EncryptionError, match="unavailable"):
            await pipeline.encrypt("exec-1", DGOLD_ADDRESS, OWNER, 5)

    @pytest.mark.parametrize(
        "contract,owner,value",
        [
            ("not-an-address", OWNER, 5),
            (DGOLD_ADDRESS, "", 5),
            (DGOLD_ADDRESS, OWNER, 0),
            (DGOLD_ADDRESS, OWNER, UINT64_MAX + 1),
            (DGOLD_ADDRESS, OWNER, True),
        ],
    )
    async def test_malformed_input(self, controlled_encryption, contract, owner, value):
        pipeline = EncryptionPipeline(controlled_encryption)

        with pytest.raises(EncryptionError) as exc_info:
            await pipeline.encrypt("exec-1", contract, owner, value)

        assert exc_info.value.reason == FailureReason.INVALID_INPUT
        assert controlled_encryption.calls == []

    async def test_consumed_payload_rejected(self):
        consumed = EncryptedPayload(b"\x01" * 32, b"proof", DGOLD_ADDRESS, OWNER)
        consumed.consume()

        class StaleService(ControlledEncryptionService):
            async def encrypt(self, contract_address, owner_address, value):
                return consumed

        with pytest.raises(EncryptionError, match="unusable"):
            await EncryptionPipeline(StaleService()).encrypt("exec-1", DGOLD_ADDRESS, OWNER, 5)


class TestEncryptedPayload:
    """Tests for single-use payloads."""

    def test_consume_once(self):
        payload = EncryptedPayload(b"\x01" * 32, b"proof", DGOLD_ADDRESS, OWNER)

        assert payload.consume() == (b"\x01" * 32, b"proof")
        assert payload.consumed

        with pytest.raises(PayloadReusedError):
            payload.consume()


class TestDryRunEncryptionService:
    """Tests for the simulated service."""

    async def test_decrypt_returns_encrypted_value(self, dry_encryption):
        payload = await dry_encryption.encrypt(DGOLD_ADDRESS, OWNER, 42)

        assert await dry_encryption.decrypt(payload.handle) == 42

    async def test_fresh_handle_per_call(self, dry_encryption):
        first = await dry_encryption.encrypt(DGOLD_ADDRESS, OWNER, 42)
        second = await dry_encryption.encrypt(DGOLD_ADDRESS, OWNER, 42)

        assert first.handle != second.handle
        assert first.proof != second.proof

    async def test_registered_handle(self, dry_encryption):
        handle = dry_encryption.register(7)

        assert await dry_encryption.decrypt(handle) == 7

    async def test_unknown_handle(self, dry_encryption):
        with pytest.raises(EncryptionServiceError) as exc_info:
            await dry_encryption.decrypt(b"\xff" * 32)

        assert exc_info.value.invalid_input


def gateway(handler) -> GatewayEncryptionService:
    return GatewayEncryptionService(
        "http://gateway.test/",
        transport=httpx.MockTransport(handler),
    )


class TestGatewayEncryptionService:
    """Tests for the HTTP gateway client."""

    async def test_encrypt(self):
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(
                200,
                json={"handles": ["0x" + "ab" * 32], "input_proof": "0xdeadbeef"},
            )

        payload = await gateway(handler).encrypt(DGOLD_ADDRESS, OWNER, 2_000_000)

        assert payload.handle == bytes.fromhex("ab" * 32)
        assert payload.proof == bytes.fromhex("deadbeef")
        assert str(requests[0].url) == "http://gateway.test/v1/encrypt"
        assert json.loads(requests[0].content) == {
            "contract_address": DGOLD_ADDRESS,
            "owner_address": OWNER,
            "value": "2000000",
        }

    async def test_decrypt(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert json.loads(request.content) == {"handle": "0x" + "cd" * 32}
            return httpx.Response(200, json={"value": "1500000"})

        assert await gateway(handler).decrypt(bytes.fromhex("cd" * 32)) == 1_500_000

    async def test_client_error_is_invalid_input(self):
        service = gateway(lambda request: httpx.Response(422, json={"error": "value out of range"}))

        with pytest.raises(EncryptionServiceError) as exc_info:
            await service.encrypt(DGOLD_ADDRESS, OWNER, 1)

        assert exc_info.value.invalid_input
        assert exc_info.value.status_code == 422

    async def test_server_error(self):
        service = gateway(lambda request: httpx.Response(503, text="unavailable"))

        with pytest.raises(EncryptionServiceError) as exc_info:
            await service.encrypt(DGOLD_ADDRESS, OWNER, 1)

        assert not exc_info.value.invalid_input

    async def test_transport_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(EncryptionServiceError, match="unreachable"):
            await gateway(handler).encrypt(DGOLD_ADDRESS, OWNER, 1)

    async def test_malformed_response(self):
        service = gateway(lambda request: httpx.Response(200, json={"handles": []}))

        with pytest.raises(EncryptionServiceError, match="Malformed"):
            await service.encrypt(DGOLD_ADDRESS, OWNER, 1)

    async def test_short_handle(self):
        service = gateway(
            lambda request: httpx.Response(200, json={"handles": ["0x1234"], "input_proof": "0x00"})
        )

        with pytest.raises(EncryptionServiceError, match="32 bytes"):
            await service.encrypt(DGOLD_ADDRESS, OWNER, 1)

    async def test_invalid_json(self):
        service = gateway(lambda request: httpx.Response(200, text="<html>"))

        with pytest.raises(EncryptionServiceError, match="invalid JSON"):
            await service.decrypt(b"\x01" * 32)

    async def test_health_check(self):
        assert await gateway(lambda request: httpx.Response(200)).health_check()
        assert not await gateway(lambda request: httpx.Response(500)).health_check()

    async def test_pipeline_over_gateway(self):
        """Gateway failures reach callers only as EncryptionError."""
        service = gateway(lambda request: httpx.Response(500))

        with pytest.raises(EncryptionError):
            await EncryptionPipeline(service).encrypt("exec-1", DGOLD_ADDRESS, OWNER, 1)
