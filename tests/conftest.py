"""
Test Configuration Module
"""

from typing import Iterable, Optional

import httpx
import pytest

from sensetime_relay.config import get_settings
from sensetime_relay.providers.factory import _adaptors

SENSETIME_BASE_URL = "https://sensetime.test"
CHAT_URL = f"{SENSETIME_BASE_URL}/v1/llm/chat-completions"
TEST_API_KEY = "test-ak|test-sk"


class FakeUpstreamStream(httpx.AsyncByteStream):
    """
    Upstream body delivered in the given chunks

    Optionally fails mid-read or on close, and records whether it was closed.
    """

    def __init__(
        self,
        chunks: Iterable[bytes],
        read_error: Optional[Exception] = None,
        close_error: Optional[Exception] = None,
    ):
        self.chunks = list(chunks)
        self.read_error = read_error
        self.close_error = close_error
        self.closed = False
        self.delivered = 0

    async def __aiter__(self):
        for chunk in self.chunks:
            self.delivered += 1
            yield chunk
        if self.read_error is not None:
            raise self.read_error

    async def aclose(self) -> None:
        self.closed = True
        if self.close_error is not None:
            raise self.close_error


def make_stream_response(
    chunks: Iterable[bytes],
    status_code: int = 200,
    read_error: Optional[Exception] = None,
    close_error: Optional[Exception] = None,
) -> tuple[httpx.Response, FakeUpstreamStream]:
    stream = FakeUpstreamStream(chunks, read_error=read_error, close_error=close_error)
    response = httpx.Response(
        status_code,
        headers={"Content-Type": "text/event-stream"},
        stream=stream,
        request=httpx.Request("POST", CHAT_URL),
    )
    return response, stream


def make_json_response(payload, status_code: int = 200, url: str = CHAT_URL) -> httpx.Response:
    return httpx.Response(status_code, json=payload, request=httpx.Request("POST", url))


@pytest.fixture(autouse=True)
def reset_state():
    """Fresh settings and adaptor cache for every test."""
    get_settings.cache_clear()
    _adaptors.clear()
    yield
    get_settings.cache_clear()
    _adaptors.clear()
