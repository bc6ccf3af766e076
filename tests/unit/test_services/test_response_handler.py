"""
Non-Streaming Response Handler Unit Tests
"""

import json
from unittest.mock import AsyncMock

import httpx
import pytest

from conftest import make_json_response, make_stream_response
from sensetime_relay.common.errors import (
    DecodeError,
    UpstreamCloseError,
    UpstreamReadError,
    VendorError,
)
from sensetime_relay.domain.relay import Usage
from sensetime_relay.services.response_handler import (
    close_response,
    handle_chat_response,
    handle_embedding_response,
    handle_image_response,
    read_response_body,
)

CHAT_PAYLOAD = {
    "data": {
        "id": "resp-1",
        "choices": [{"role": "assistant", "message": "Hello there", "index": 0}],
        "usage": {"prompt_tokens": 3, "completion_tokens": 2, "total_tokens": 5},
    }
}


@pytest.mark.asyncio
async def test_chat_response_is_translated():
    relay_response = await handle_chat_response(make_json_response(CHAT_PAYLOAD))

    body = json.loads(relay_response.body)
    assert relay_response.status_code == 200
    assert relay_response.headers["Content-Type"] == "application/json"
    assert body["object"] == "chat.completion"
    assert body["model"] == "sensechat"
    assert len(body["choices"]) == 1
    assert body["choices"][0]["index"] == 0
    assert body["choices"][0]["message"]["role"] == "assistant"
    assert body["choices"][0]["message"]["content"] == "Hello there"
    assert body["choices"][0]["finish_reason"] == "stop"
    assert body["usage"] == {"prompt_tokens": 3, "completion_tokens": 2, "total_tokens": 5}
    assert relay_response.usage == Usage(prompt_tokens=3, completion_tokens=2, total_tokens=5)


@pytest.mark.asyncio
async def test_chat_response_model_name_can_be_overridden():
    relay_response = await handle_chat_response(make_json_response(CHAT_PAYLOAD), model_name="SenseChat-5")
    assert json.loads(relay_response.body)["model"] == "SenseChat-5"


@pytest.mark.asyncio
async def test_vendor_error_keeps_upstream_status():
    response = make_json_response({"error": {"message": "bad key"}}, status_code=401)

    with pytest.raises(VendorError) as exc_info:
        await handle_chat_response(response)

    assert exc_info.value.message == "bad key"
    assert exc_info.value.status_code == 401
    assert exc_info.value.error_type == "sensetime_error"


@pytest.mark.asyncio
async def test_vendor_error_code_is_passed_through():
    response = make_json_response({"error": {"code": 17, "message": "rate limited"}}, status_code=429)

    with pytest.raises(VendorError) as exc_info:
        await handle_chat_response(response)

    assert exc_info.value.code == 17
    assert exc_info.value.status_code == 429


@pytest.mark.asyncio
async def test_chat_response_decode_failure():
    response = httpx.Response(200, content=b"<html>gateway timeout</html>")

    with pytest.raises(DecodeError):
        await handle_chat_response(response)


@pytest.mark.asyncio
async def test_embedding_response_is_translated():
    response = make_json_response(
        {
            "embeddings": [
                {"index": 0, "embedding": [0.1, 0.2], "status_code": 0},
                {"index": 1, "embedding": [0.3, 0.4], "status_code": 0},
            ],
            "usage": {"prompt_tokens": 10, "total_tokens": 15},
        }
    )

    relay_response = await handle_embedding_response(response)

    body = json.loads(relay_response.body)
    assert body["object"] == "list"
    assert body["model"] == "nova-embedding-stable"
    assert [item["embedding"] for item in body["data"]] == [[0.1, 0.2], [0.3, 0.4]]
    assert relay_response.usage == Usage(prompt_tokens=10, completion_tokens=5, total_tokens=15)


@pytest.mark.asyncio
async def test_embedding_response_decode_failure():
    with pytest.raises(DecodeError):
        await handle_embedding_response(httpx.Response(200, content=b"not json"))


@pytest.mark.asyncio
async def test_image_response_is_passed_through():
    payload = {"created": 1700000000, "data": [{"url": "https://example.com/a.png"}]}
    relay_response = await handle_image_response(make_json_response(payload))

    assert json.loads(relay_response.body) == payload
    assert relay_response.usage == Usage()


@pytest.mark.asyncio
async def test_image_response_error_is_vendor_error():
    response = make_json_response({"error": {"message": "not allowed", "code": "forbidden"}}, status_code=403)

    with pytest.raises(VendorError) as exc_info:
        await handle_image_response(response)
    assert exc_info.value.status_code == 403


@pytest.mark.asyncio
async def test_read_failure_closes_body():
    response, upstream = make_stream_response(
        [b'{"data":'],
        read_error=httpx.ReadError("connection reset"),
    )

    with pytest.raises(UpstreamReadError):
        await read_response_body(response)
    assert upstream.closed is True


@pytest.mark.asyncio
async def test_close_response_failure():
    response, _ = make_stream_response([], close_error=OSError("socket already closed"))

    with pytest.raises(UpstreamCloseError):
        await close_response(response)


@pytest.mark.asyncio
async def test_close_failure_after_read_is_reported(monkeypatch):
    monkeypatch.setattr(
        "sensetime_relay.services.response_handler.close_response",
        AsyncMock(side_effect=UpstreamCloseError("close response body failed")),
    )

    with pytest.raises(UpstreamCloseError):
        await handle_chat_response(make_json_response(CHAT_PAYLOAD))


@pytest.mark.asyncio
async def test_chat_error_status_without_vendor_message():
    response = make_json_response({"data": {}}, status_code=400)

    with pytest.raises(VendorError) as exc_info:
        await handle_chat_response(response)

    assert exc_info.value.status_code == 400
    assert exc_info.value.error_type == "sensetime_error"


@pytest.mark.asyncio
async def test_embedding_vendor_error_is_raised():
    response = make_json_response({"error": {"code": 3, "message": "invalid input"}}, status_code=400)

    with pytest.raises(VendorError) as exc_info:
        await handle_embedding_response(response)

    assert exc_info.value.message == "invalid input"
    assert exc_info.value.code == 3
    assert exc_info.value.status_code == 400


@pytest.mark.asyncio
async def test_embedding_error_status_with_non_json_body():
    with pytest.raises(VendorError) as exc_info:
        await handle_embedding_response(httpx.Response(502, content=b"bad gateway"))

    assert exc_info.value.status_code == 502
    assert exc_info.value.details["body"] == "bad gateway"
