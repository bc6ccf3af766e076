"""
Upstream Adaptor Base Class

Defines the contract the relay gateway expects from a vendor adaptor.
"""

from abc import ABC, abstractmethod
from typing import Any

import httpx

from sensetime_relay.domain.relay import Meta, RelayMode, RelayResponse
from sensetime_relay.domain.request import GeneralOpenAIRequest


class Adaptor(ABC):
    """
    Vendor Adaptor Abstract Base Class

    Request side: URL, headers and body for the upstream call.
    Response side: translation of the upstream response back to the
    normalized protocol, together with the usage for billing.
    """

    @abstractmethod
    def get_request_url(self, meta: Meta) -> str:
        """Build the upstream URL for this call."""
        pass

    @abstractmethod
    def setup_request_header(self, headers: dict[str, str], meta: Meta) -> dict[str, str]:
        """
        Build the upstream request headers

        Args:
            headers: Base headers
            meta: Relay meta

        Returns:
            dict: Processed request headers (new dictionary)
        """
        pass

    @abstractmethod
    def convert_request(self, mode: RelayMode, request: GeneralOpenAIRequest) -> dict[str, Any]:
        """Map a normalized request to the vendor body."""
        pass

    @abstractmethod
    def convert_image_request(self, request: GeneralOpenAIRequest) -> dict[str, Any]:
        """Map a normalized image generation request to the vendor body."""
        pass

    @abstractmethod
    async def do_request(
        self,
        meta: Meta,
        url: str,
        headers: dict[str, str],
        body: dict[str, Any],
    ) -> httpx.Response:
        """Send the upstream request; the returned body is still unread."""
        pass

    @abstractmethod
    async def do_response(self, response: httpx.Response, meta: Meta) -> RelayResponse:
        """Translate the upstream response."""
        pass

    @abstractmethod
    def get_channel_name(self) -> str:
        pass

    async def close(self) -> None:
        """Release adaptor resources."""
        return None
