"""
SenseTime Protocol Conversion

Normalized (OpenAI-compatible) request -> SenseTime request, and SenseTime
response -> normalized response. The normalized side is built with the
`openai` SDK types so the emitted JSON matches what OpenAI clients parse.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from openai.types import CompletionUsage, CreateEmbeddingResponse, Embedding
from openai.types.chat import ChatCompletion, ChatCompletionMessage
from openai.types.chat.chat_completion import Choice
from openai.types.chat.chat_completion_chunk import ChatCompletionChunk, ChoiceDelta
from openai.types.chat.chat_completion_chunk import Choice as ChunkChoice
from openai.types.create_embedding_response import Usage as EmbeddingUsage

from sensetime_relay.common.time import get_timestamp
from sensetime_relay.config import get_settings
from sensetime_relay.domain.relay import Usage
from sensetime_relay.domain.request import GeneralOpenAIRequest
from sensetime_relay.providers.sensetime_schemas import (
    SenseChatRequest,
    SenseChatResponse,
    SenseChatStreamResponse,
    SenseEmbeddingRequest,
    SenseEmbeddingResponse,
    SenseMessage,
)

logger = logging.getLogger(__name__)

STOP_FINISH_REASON = "stop"


def convert_chat_request(request: GeneralOpenAIRequest) -> dict[str, Any]:
    """
    Map a normalized chat request to the SenseTime chat body

    Messages keep their order; list content is flattened to text.
    Unset generation parameters are left out of the body.
    """
    sense_request = SenseChatRequest(
        model=request.model,
        messages=[
            SenseMessage(role=message.role, content=message.string_content())
            for message in request.messages
        ],
        temperature=request.temperature,
        top_p=request.top_p,
        stream=request.stream,
        max_new_tokens=request.max_tokens,
    )
    body = sense_request.model_dump(exclude_none=True)
    logger.debug("SenseTime chat request: %s", body)
    return body


def convert_embedding_request(
    request: GeneralOpenAIRequest,
    embedding_model: Optional[str] = None,
) -> dict[str, Any]:
    """
    Map a normalized embedding request to the SenseTime embedding body

    The vendor model is fixed by configuration, never taken from the client.
    """
    model = embedding_model or get_settings().EMBEDDING_MODEL
    return SenseEmbeddingRequest(model=model, input=request.parse_input()).model_dump()


def stream_response_to_openai(
    response: SenseChatStreamResponse,
    model_name: str,
) -> Optional[ChatCompletionChunk]:
    """
    Convert one SenseTime stream chunk into a chat.completion.chunk

    Returns None when the chunk carries no choice to forward.
    """
    if not response.data.choices:
        return None

    sense_choice = response.data.choices[0]
    finish_reason = STOP_FINISH_REASON if sense_choice.finish_reason == STOP_FINISH_REASON else None
    return ChatCompletionChunk(
        id=response.data.id,
        object="chat.completion.chunk",
        created=get_timestamp(),
        model=model_name,
        choices=[
            ChunkChoice(
                index=0,
                delta=ChoiceDelta(content=sense_choice.delta),
                finish_reason=finish_reason,
            )
        ],
    )


def chat_response_to_openai(response: SenseChatResponse, model_name: str) -> ChatCompletion:
    """
    Convert a SenseTime chat response into a single-choice chat.completion

    SenseTime reports no finish reason outside streaming, so it is always "stop".
    """
    content = response.data.choices[0].message if response.data.choices else ""
    usage = response.data.usage
    return ChatCompletion(
        id=response.data.id,
        object="chat.completion",
        created=get_timestamp(),
        model=model_name,
        choices=[
            Choice(
                index=0,
                message=ChatCompletionMessage(role="assistant", content=content),
                finish_reason=STOP_FINISH_REASON,
            )
        ],
        usage=CompletionUsage(
            prompt_tokens=usage.prompt_tokens,
            completion_tokens=usage.completion_tokens,
            total_tokens=usage.total_tokens,
        ),
    )


def embedding_usage(response: SenseEmbeddingResponse) -> Usage:
    """SenseTime omits completion tokens for embeddings; derive them from the total."""
    return Usage(
        prompt_tokens=response.usage.prompt_tokens,
        completion_tokens=response.usage.total_tokens - response.usage.prompt_tokens,
        total_tokens=response.usage.total_tokens,
    )


def embedding_response_to_openai(
    response: SenseEmbeddingResponse,
    embedding_model: Optional[str] = None,
) -> CreateEmbeddingResponse:
    """Convert a SenseTime embedding response into an OpenAI embedding list."""
    usage = embedding_usage(response)
    return CreateEmbeddingResponse(
        object="list",
        model=embedding_model or get_settings().EMBEDDING_MODEL,
        data=[
            Embedding(object="embedding", index=item.index, embedding=item.embedding)
            for item in response.embeddings
        ],
        usage=EmbeddingUsage(
            prompt_tokens=usage.prompt_tokens,
            completion_tokens=usage.completion_tokens,
            total_tokens=usage.total_tokens,
        ),
    )
