"""
Normalized Output Encoding

Serialization of normalized payloads and event-stream framing for the client.
"""

from __future__ import annotations

from pydantic import BaseModel
from pydantic_core import PydanticSerializationError

from sensetime_relay.common.errors import EncodeError

DONE_SENTINEL = "[DONE]"

EVENT_STREAM_HEADERS = {
    "Content-Type": "text/event-stream",
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}

JSON_HEADERS = {"Content-Type": "application/json"}


def dump_model_json(model: BaseModel) -> str:
    """
    Serialize a normalized payload, leaving out unset optional fields

    Raises:
        EncodeError: The payload cannot be serialized
    """
    try:
        return model.model_dump_json(exclude_none=True)
    except (PydanticSerializationError, TypeError, ValueError) as e:
        raise EncodeError(message=f"error marshalling response: {e}") from e


def encode_sse_data(payload: str) -> bytes:
    return f"data: {payload}\n\n".encode("utf-8")


def encode_sse_done() -> bytes:
    return encode_sse_data(DONE_SENTINEL)
