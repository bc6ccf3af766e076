"""
Relay API

Provides the OpenAI-compatible endpoints served through SenseTime.
"""

import json
import logging
from typing import AsyncGenerator

import anyio
from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse, Response, StreamingResponse
from pydantic import ValidationError

from sensetime_relay.api.deps import RelayServiceDep
from sensetime_relay.common.errors import AppError, InvalidRequestError
from sensetime_relay.common.event_stream import EventStream
from sensetime_relay.config import get_settings
from sensetime_relay.domain.relay import RelayMode
from sensetime_relay.domain.request import GeneralOpenAIRequest

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Relay - OpenAI"])


class RelayStreamingResponse(StreamingResponse):
    """
    Streaming response that always releases its event stream

    The stream is closed when the response ends for any reason, including a
    client that disconnects before the first event is pulled.
    """

    async def __call__(self, scope, receive, send) -> None:
        try:
            await super().__call__(scope, receive, send)
        finally:
            with anyio.CancelScope(shield=True):
                await self.body_iterator.aclose()


async def _parse_request(request: Request) -> GeneralOpenAIRequest:
    """
    Read the inbound body as a normalized request

    Raises:
        InvalidRequestError: The body is not valid JSON or has the wrong shape
    """
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise InvalidRequestError(message=f"invalid JSON body: {e}") from e
    if not isinstance(body, dict):
        raise InvalidRequestError(message="request body must be a JSON object")
    try:
        return GeneralOpenAIRequest.model_validate(body)
    except ValidationError as e:
        raise InvalidRequestError(
            message="invalid request body",
            details={"errors": json.loads(e.json())},
        ) from e


async def _guard_stream(stream: EventStream) -> AsyncGenerator[bytes, None]:
    """
    Forward a relay stream to the client

    Headers are already sent once the first event goes out, so a failure
    after that point can only end the stream; it is logged here.
    """
    try:
        async for chunk in stream:
            yield chunk
    except AppError as e:
        logger.error("Stream aborted: type=%s code=%s message=%s", e.error_type, e.code, e.message)
    finally:
        await stream.aclose()


async def _handle_relay_request(
    request: Request,
    service: RelayServiceDep,
    mode: RelayMode,
):
    """
    Handle generic relay request logic
    """
    settings = get_settings()
    try:
        relay_request = await _parse_request(request)
        relay_response = await service.relay(mode, relay_request)

        if relay_response.stream is not None:
            stream = relay_response.stream
            return RelayStreamingResponse(
                EventStream(_guard_stream(stream), release=stream.aclose),
                status_code=relay_response.status_code,
                headers=relay_response.headers,
                media_type="text/event-stream",
            )

        return Response(
            content=relay_response.body,
            status_code=relay_response.status_code,
            headers=relay_response.headers,
        )

    except AppError as e:
        return JSONResponse(
            content=e.to_dict(include_details=settings.DEBUG),
            status_code=e.status_code,
        )
    except Exception as e:
        # Unexpected errors return 500
        logger.error("Unexpected error: %s", str(e), exc_info=True)
        return JSONResponse(
            content={
                "error": {
                    "message": "Internal server error",
                    "type": "internal_error",
                    "code": "internal_error",
                }
            },
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )


@router.post("/v1/chat/completions")
async def chat_completions(request: Request, service: RelayServiceDep):
    """
    OpenAI Chat Completions API Relay
    """
    return await _handle_relay_request(request, service, RelayMode.CHAT_COMPLETIONS)


@router.post("/v1/embeddings")
async def embeddings(request: Request, service: RelayServiceDep):
    """
    OpenAI Embeddings API Relay
    """
    return await _handle_relay_request(request, service, RelayMode.EMBEDDINGS)


@router.post("/v1/images/generations")
async def images_generations(request: Request, service: RelayServiceDep):
    """
    OpenAI Images API Relay

    SenseTime has no image generation endpoint; the call is rejected before
    any upstream request.
    """
    return await _handle_relay_request(request, service, RelayMode.IMAGES_GENERATIONS)
