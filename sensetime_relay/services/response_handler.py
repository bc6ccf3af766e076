"""
Non-Streaming Response Handlers

Read a complete SenseTime response body once and turn it into the normalized
JSON body (chat completion, embedding list or image passthrough).
"""

import json
import logging
from typing import Optional

import httpx
from pydantic import ValidationError

from sensetime_relay.common.encoding import JSON_HEADERS, dump_model_json
from sensetime_relay.common.errors import (
    DecodeError,
    UpstreamCloseError,
    UpstreamReadError,
    VendorError,
)
from sensetime_relay.config import get_settings
from sensetime_relay.domain.relay import RelayResponse, Usage
from sensetime_relay.providers.sensetime_conversion import (
    chat_response_to_openai,
    embedding_response_to_openai,
    embedding_usage,
)
from sensetime_relay.providers.sensetime_schemas import (
    SenseChatResponse,
    SenseEmbeddingResponse,
    SenseErrorMessage,
)

logger = logging.getLogger(__name__)

ERROR_BODY_PREVIEW_BYTES = 512


async def read_response_body(response: httpx.Response) -> bytes:
    """
    Read the whole upstream body, then release it

    Raises:
        UpstreamReadError: Reading the body failed
        UpstreamCloseError: Releasing the body failed
    """
    try:
        body = await response.aread()
    except (httpx.HTTPError, httpx.StreamError) as e:
        raise UpstreamReadError(message=f"read response body failed: {e}") from e
    finally:
        await close_response(response)
    return body


async def close_response(response: httpx.Response) -> None:
    """
    Release the upstream body

    Raises:
        UpstreamCloseError: The body could not be closed
    """
    try:
        await response.aclose()
    except Exception as e:
        raise UpstreamCloseError(message=f"close response body failed: {e}") from e


def _status_error(response: httpx.Response, body: bytes) -> VendorError:
    """Error for a failing status whose body carries no vendor error message."""
    return VendorError(
        message=f"SenseTime request failed with status {response.status_code}",
        status_code=response.status_code,
        details={"body": body[:ERROR_BODY_PREVIEW_BYTES].decode("utf-8", errors="replace")},
    )


def _check_vendor_error(response: httpx.Response, error: SenseErrorMessage, body: bytes) -> None:
    """
    Raises:
        VendorError: SenseTime returned an error payload or a failing status
    """
    if error.message:
        raise VendorError(
            message=error.message,
            code=error.code,
            status_code=response.status_code,
        )
    if response.status_code >= 400:
        raise _status_error(response, body)


async def handle_chat_response(
    response: httpx.Response,
    model_name: Optional[str] = None,
) -> RelayResponse:
    """
    Translate a non-streaming SenseTime chat response

    Raises:
        VendorError: SenseTime returned an error payload or a failing status
        DecodeError: The body is not a SenseTime chat response
    """
    body = await read_response_body(response)
    try:
        sense_response = SenseChatResponse.model_validate_json(body)
    except ValidationError as e:
        if response.status_code >= 400:
            raise _status_error(response, body) from e
        raise DecodeError(message=f"unmarshal response body failed: {e}") from e

    _check_vendor_error(response, sense_response.error, body)

    full_response = chat_response_to_openai(
        sense_response,
        model_name=model_name or get_settings().RESPONSE_MODEL_NAME,
    )
    return RelayResponse(
        status_code=response.status_code,
        headers=dict(JSON_HEADERS),
        body=dump_model_json(full_response).encode("utf-8"),
        final_usage=sense_response.data.usage.to_usage(),
    )


async def handle_embedding_response(response: httpx.Response) -> RelayResponse:
    """
    Translate a SenseTime embedding response

    Raises:
        VendorError: SenseTime returned an error payload or a failing status
        DecodeError: The body is not a SenseTime embedding response
    """
    body = await read_response_body(response)
    try:
        sense_response = SenseEmbeddingResponse.model_validate_json(body)
    except ValidationError as e:
        if response.status_code >= 400:
            raise _status_error(response, body) from e
        raise DecodeError(message=f"unmarshal response body failed: {e}") from e

    _check_vendor_error(response, sense_response.error, body)

    full_response = embedding_response_to_openai(sense_response)
    return RelayResponse(
        status_code=response.status_code,
        headers=dict(JSON_HEADERS),
        body=dump_model_json(full_response).encode("utf-8"),
        final_usage=embedding_usage(sense_response),
    )


async def handle_image_response(response: httpx.Response) -> RelayResponse:
    """
    Pass an image generation response through unchanged

    Only an error payload is interpreted; image usage is not billed by tokens.
    """
    body = await read_response_body(response)
    try:
        parsed = json.loads(body)
    except json.JSONDecodeError as e:
        raise DecodeError(message=f"unmarshal response body failed: {e}") from e

    error = parsed.get("error") if isinstance(parsed, dict) else None
    if isinstance(error, dict) and error.get("message"):
        raise VendorError(
            message=error["message"],
            code=error.get("code", ""),
            status_code=response.status_code,
        )

    return RelayResponse(
        status_code=response.status_code,
        headers=dict(JSON_HEADERS),
        body=body,
        final_usage=Usage(),
    )
