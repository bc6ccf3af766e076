"""
SenseTime Adaptor

Relays OpenAI-compatible calls to SenseTime:
- /v1/llm/chat-completions (streaming and non-streaming)
- /v1/llm/embeddings
Image generation has no SenseTime counterpart and is rejected up front.
"""

import logging
from typing import Any, Optional

import httpx

from sensetime_relay.common.auth_token import build_authorization
from sensetime_relay.common.encoding import EVENT_STREAM_HEADERS
from sensetime_relay.common.errors import InvalidRequestError, UnsupportedRequestError
from sensetime_relay.common.http_client import HttpClient
from sensetime_relay.domain.relay import Meta, RelayMode, RelayResponse
from sensetime_relay.domain.request import GeneralOpenAIRequest
from sensetime_relay.providers.base import Adaptor
from sensetime_relay.providers.sensetime_conversion import (
    convert_chat_request,
    convert_embedding_request,
)
from sensetime_relay.services.response_handler import (
    handle_chat_response,
    handle_embedding_response,
    handle_image_response,
)
from sensetime_relay.services.stream_handler import StreamHandler

logger = logging.getLogger(__name__)

CHAT_COMPLETIONS_PATH = "/v1/llm/chat-completions"
EMBEDDINGS_PATH = "/v1/llm/embeddings"
EMBEDDING_MODEL_PREFIX = "Embedding"


class SenseTimeAdaptor(Adaptor):
    """
    SenseTime Adaptor

    Signs a fresh token per request and translates responses back to the
    normalized protocol.
    """

    def __init__(self, http_client: Optional[HttpClient] = None):
        self.http_client = http_client or HttpClient()

    def get_request_url(self, meta: Meta) -> str:
        base_url = meta.base_url.rstrip("/")
        if meta.mode == RelayMode.EMBEDDINGS or meta.actual_model_name.startswith(EMBEDDING_MODEL_PREFIX):
            return f"{base_url}{EMBEDDINGS_PATH}"
        return f"{base_url}{CHAT_COMPLETIONS_PATH}"

    def setup_request_header(self, headers: dict[str, str], meta: Meta) -> dict[str, str]:
        """
        Raises:
            AuthError: The channel key is malformed or the token cannot be signed
        """
        new_headers = dict(headers)
        new_headers["Authorization"] = build_authorization(meta.api_key)
        new_headers["Content-Type"] = "application/json"
        if meta.is_stream:
            new_headers["Accept"] = EVENT_STREAM_HEADERS["Content-Type"]
        return new_headers

    def convert_request(self, mode: RelayMode, request: Optional[GeneralOpenAIRequest]) -> dict[str, Any]:
        if request is None:
            raise InvalidRequestError(message="request is nil")
        if mode == RelayMode.IMAGES_GENERATIONS:
            return self.convert_image_request(request)
        if mode == RelayMode.EMBEDDINGS:
            return convert_embedding_request(request)
        return convert_chat_request(request)

    def convert_image_request(self, request: GeneralOpenAIRequest) -> dict[str, Any]:
        raise UnsupportedRequestError(message="request is not supported")

    async def do_request(
        self,
        meta: Meta,
        url: str,
        headers: dict[str, str],
        body: dict[str, Any],
    ) -> httpx.Response:
        return await self.http_client.send_stream("POST", url, headers=headers, json_body=body)

    async def do_response(self, response: httpx.Response, meta: Meta) -> RelayResponse:
        """
        Route the upstream response to exactly one handler

        embeddings -> embedding handler, image generation -> image handler,
        otherwise stream flag -> stream handler, else chat handler.
        """
        if meta.mode == RelayMode.EMBEDDINGS:
            return await handle_embedding_response(response)
        if meta.mode == RelayMode.IMAGES_GENERATIONS:
            return await handle_image_response(response)

        if meta.is_stream:
            if response.status_code >= 400:
                # Error payloads arrive as plain JSON even on streaming calls.
                logger.warning("SenseTime stream request failed: status=%s", response.status_code)
                return await handle_chat_response(response)
            handler = StreamHandler(response)
            return RelayResponse(
                status_code=response.status_code,
                headers=dict(EVENT_STREAM_HEADERS),
                stream=handler.stream(),
                usage_source=handler,
            )
        return await handle_chat_response(response)

    def get_channel_name(self) -> str:
        return "sensetime"

    async def close(self) -> None:
        await self.http_client.close()
