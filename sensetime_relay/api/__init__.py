"""
API Router Module Initialization
"""

from sensetime_relay.api.deps import get_relay_service
from sensetime_relay.api.relay import router as relay_router

__all__ = [
    "get_relay_service",
    "relay_router",
]
