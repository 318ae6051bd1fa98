"""Tests for the vision request gateway."""

import asyncio
from unittest.mock import MagicMock

import pytest

from pantrypal.scanner.camera import RawImage
from pantrypal.scanner.config import VisionConfig
from pantrypal.scanner.credentials import CredentialResolver
from pantrypal.scanner.gateway import DETECTION_PROMPT, VisionGateway
from pantrypal.scanner.result import DetectionErrorKind, Err, Ok
from pantrypal.scanner.vision import VisionBackend


class FakeBackend(VisionBackend):
    def __init__(self, reply="[]", error=None, delay=0.0):
        self.reply = reply
        self.error = error
        self.delay = delay
        self.calls = []

    async def complete(self, prompt, image):
        self.calls.append((prompt, image))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.reply


@pytest.fixture
def image():
    return RawImage(data=b"jpeg", media_type="image/jpeg", captured_at="")


def _gateway(backend, system_key="sys-key", **config_kwargs):
    factory = MagicMock(return_value=backend)
    config = VisionConfig(**config_kwargs)
    gateway = VisionGateway(CredentialResolver(system_key), config, backend_factory=factory)
    return gateway, factory, config


@pytest.mark.asyncio
async def test_missing_credential_makes_no_request(image):
    backend = FakeBackend()
    gateway, factory, _ = _gateway(backend, system_key="")

    result = await gateway.detect(image, "u1")

    assert isinstance(result, Err)
    assert result.error.kind is DetectionErrorKind.CREDENTIAL_MISSING
    factory.assert_not_called()
    assert backend.calls == []


@pytest.mark.asyncio
async def test_success_returns_reply_text(image):
    backend = FakeBackend(reply='[{"name": "Milk"}]')
    gateway, factory, config = _gateway(backend)

    result = await gateway.detect(image, "u1")

    assert result == Ok('[{"name": "Milk"}]')
    factory.assert_called_once_with(config, "sys-key")
    [(prompt, sent)] = backend.calls
    assert prompt == DETECTION_PROMPT
    assert sent is image


@pytest.mark.asyncio
async def test_transport_error_is_network_failure_without_retry(image):
    backend = FakeBackend(error=ConnectionError("connection reset"))
    gateway, _, _ = _gateway(backend)

    result = await gateway.detect(image, "u1")

    assert isinstance(result, Err)
    assert result.error.kind is DetectionErrorKind.NETWORK_FAILURE
    assert "connection reset" in result.error.message
    assert len(backend.calls) == 1


@pytest.mark.asyncio
async def test_timeout_is_network_failure(image):
    backend = FakeBackend(delay=1.0)
    gateway, _, _ = _gateway(backend, timeout=0.01)

    result = await gateway.detect(image, "u1")

    assert isinstance(result, Err)
    assert result.error.kind is DetectionErrorKind.NETWORK_FAILURE
    assert "timed out" in result.error.message


@pytest.mark.parametrize("reply", ["", "   \n", None])
@pytest.mark.asyncio
async def test_empty_reply_is_network_failure(image, reply):
    gateway, _, _ = _gateway(FakeBackend(reply=reply))

    result = await gateway.detect(image, "u1")

    assert isinstance(result, Err)
    assert result.error.kind is DetectionErrorKind.NETWORK_FAILURE


@pytest.mark.asyncio
async def test_missing_sdk_is_not_masked(image):
    gateway, _, _ = _gateway(FakeBackend(error=ImportError("no sdk")))
    with pytest.raises(ImportError):
        await gateway.detect(image, "u1")


def test_prompt_requests_json_array():
    assert "JSON array" in DETECTION_PROMPT
    for field in ("name", "category", "confidence", "suggestedLocation", "estimatedExpiryDays"):
        assert field in DETECTION_PROMPT
