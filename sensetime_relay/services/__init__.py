"""
Service Layer Module Initialization

RelayService is imported from sensetime_relay.services.relay_service directly;
it depends on the adaptors, which in turn depend on the handlers below.
"""

from sensetime_relay.services.response_handler import (
    close_response,
    handle_chat_response,
    handle_embedding_response,
    handle_image_response,
    read_response_body,
)
from sensetime_relay.services.stream_handler import StreamHandler

__all__ = [
    "StreamHandler",
    "close_response",
    "handle_chat_response",
    "handle_embedding_response",
    "handle_image_response",
    "read_response_body",
]
