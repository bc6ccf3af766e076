"""
API Dependency Injection Module

Provides dependencies required by FastAPI routes.
"""

from typing import Annotated

from fastapi import Depends

from sensetime_relay.providers.factory import get_adaptor
from sensetime_relay.services.relay_service import RelayService


def get_relay_service() -> RelayService:
    """
    Get relay service dependency

    The adaptor (and its HTTP client) is cached by the factory and shared
    across requests.
    """
    return RelayService(adaptor=get_adaptor("sensetime"))


# Relay service dependency type
RelayServiceDep = Annotated[RelayService, Depends(get_relay_service)]
