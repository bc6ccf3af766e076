"""
Relay Domain Model

Per-request relay context, usage record and the response handed back to the
HTTP layer.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Protocol

from sensetime_relay.common.event_stream import EventStream


class RelayMode(str, Enum):
    """Call modes the adaptor distinguishes."""

    CHAT_COMPLETIONS = "chat_completions"
    EMBEDDINGS = "embeddings"
    IMAGES_GENERATIONS = "images_generations"


@dataclass
class Usage:
    """
    Token Usage

    Reported to the gateway's billing collaborator once a response completes.
    """

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "prompt_tokens": self.prompt_tokens,
            "completion_tokens": self.completion_tokens,
            "total_tokens": self.total_tokens,
        }


@dataclass
class Meta:
    """
    Relay Meta Data Class

    Everything the adaptor needs to know about one inbound call.
    """

    # Call mode
    mode: RelayMode
    # Upstream base URL
    base_url: str
    # Channel key ("<access_key>|<secret_key>")
    api_key: Optional[str]
    # Model name sent upstream
    actual_model_name: str = ""
    # Whether the client asked for a stream
    is_stream: bool = False


class UsageSource(Protocol):
    """Anything that can report usage once its stream has finished."""

    usage: Usage
    completed: bool


@dataclass
class RelayResponse:
    """
    Relay Response Data Class

    Either a finished JSON body or a stream of encoded event-stream bytes.
    """

    # HTTP status code for the client
    status_code: int
    # Response headers for the client
    headers: dict[str, str] = field(default_factory=dict)
    # JSON body (non-stream)
    body: Any = None
    # Encoded event stream (stream)
    stream: Optional[EventStream] = None
    # Usage of a non-stream response
    final_usage: Optional[Usage] = None
    # Usage source of a stream response
    usage_source: Optional[UsageSource] = None

    @property
    def is_stream(self) -> bool:
        return self.stream is not None

    @property
    def usage(self) -> Optional[Usage]:
        """
        Usage for billing

        For streams this is only available after a graceful end.
        """
        if self.usage_source is not None:
            return self.usage_source.usage if self.usage_source.completed else None
        return self.final_usage
