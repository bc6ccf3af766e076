"""
Adaptor Factory Module

Creates the adaptor for a channel type.
"""

from sensetime_relay.providers.base import Adaptor
from sensetime_relay.providers.sensetime_adaptor import SenseTimeAdaptor


# Adaptor cache
_adaptors: dict[str, Adaptor] = {}


def get_adaptor(channel: str) -> Adaptor:
    """
    Get the adaptor for the specified channel type

    Uses caching so the underlying HTTP client is shared across requests.

    Args:
        channel: Channel type, "sensetime"

    Returns:
        Adaptor: Corresponding adaptor instance

    Raises:
        ValueError: Unsupported channel type
    """
    channel = channel.lower()

    if channel not in _adaptors:
        if channel == "sensetime":
            _adaptors[channel] = SenseTimeAdaptor()
        else:
            raise ValueError(f"Unsupported channel: {channel}")

    return _adaptors[channel]


async def close_adaptors() -> None:
    """Close all cached adaptors."""
    for adaptor in list(_adaptors.values()):
        await adaptor.close()
    _adaptors.clear()
