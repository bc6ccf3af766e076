"""
Domain Model Module Initialization
"""

from sensetime_relay.domain.relay import Meta, RelayMode, RelayResponse, Usage
from sensetime_relay.domain.request import GeneralOpenAIRequest, Message

__all__ = [
    # Request
    "GeneralOpenAIRequest",
    "Message",
    # Relay
    "Meta",
    "RelayMode",
    "RelayResponse",
    "Usage",
]
