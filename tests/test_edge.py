"""Tests for the serverless scan request handler."""

import base64
import json

import pytest

from pantrypal.scanner.detection import DetectionService
from pantrypal.scanner.edge import BadRequest, decode_image, handle_scan_request
from pantrypal.scanner.result import DetectionError, DetectionErrorKind, Err, Ok

JPEG = b"\xff\xd8\xff\xe0fake"
JPEG_B64 = base64.b64encode(JPEG).decode()


class FakeGateway:
    def __init__(self, result):
        self.result = result
        self.images = []

    async def detect(self, image, user_id):
        self.images.append(image)
        return self.result


class TestDecodeImage:
    def test_plain_base64(self):
        image = decode_image({"image": JPEG_B64})
        assert image.data == JPEG
        assert image.media_type == "image/jpeg"

    def test_data_url_prefix(self):
        image = decode_image({"image": f"data:image/png;base64,{JPEG_B64}"})
        assert image.data == JPEG
        assert image.media_type == "image/png"

    def test_line_wrapped_base64(self):
        wrapped = base64.encodebytes(JPEG * 20).decode()
        assert "\n" in wrapped
        assert decode_image({"image": wrapped}).data == JPEG * 20

    def test_alternate_key(self):
        assert decode_image({"imageBase64": JPEG_B64}).data == JPEG

    @pytest.mark.parametrize("body", [
        None,
        [],
        {},
        {"image": ""},
        {"image": 123},
        {"image": "not base64!!"},
    ])
    def test_bad_requests(self, body):
        with pytest.raises(BadRequest):
            decode_image(body)


@pytest.mark.asyncio
async def test_handle_scan_success():
    raw = json.dumps([{"name": "Milk", "confidence": 0.95, "suggestedLocation": "Fridge"}])
    gateway = FakeGateway(Ok(raw))
    status, payload = await handle_scan_request({"image": JPEG_B64}, DetectionService(gateway))

    assert status == 200
    assert payload["source"] == "vision"
    assert payload["items"][0]["name"] == "Milk"
    assert payload["items"][0]["suggestedLocation"] == "Fridge"
    assert gateway.images[0].data == JPEG


@pytest.mark.asyncio
async def test_handle_scan_fallback():
    gateway = FakeGateway(Err(DetectionError(DetectionErrorKind.CREDENTIAL_MISSING, "no key")))
    status, payload = await handle_scan_request({"image": JPEG_B64}, DetectionService(gateway))

    assert status == 200
    assert payload["source"] == "fallback"
    assert [i["name"] for i in payload["items"]] == ["Fresh Bananas", "Whole Milk", "Large Eggs"]


@pytest.mark.asyncio
async def test_handle_scan_no_items():
    status, payload = await handle_scan_request(
        {"image": JPEG_B64}, DetectionService(FakeGateway(Ok("[]")))
    )
    assert status == 200
    assert payload == {"items": [], "source": "vision"}


@pytest.mark.asyncio
async def test_handle_scan_bad_request_skips_detection():
    gateway = FakeGateway(Ok("[]"))
    status, payload = await handle_scan_request({}, DetectionService(gateway))
    assert status == 400
    assert "error" in payload
    assert gateway.images == []
