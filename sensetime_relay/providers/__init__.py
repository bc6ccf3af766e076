"""
Upstream Adaptor Module Initialization

The concrete adaptor and the factory live in sensetime_adaptor and factory;
they pull in the response handlers of the service layer, so they are not
imported here.
"""

from sensetime_relay.providers.base import Adaptor

__all__ = [
    "Adaptor",
]
