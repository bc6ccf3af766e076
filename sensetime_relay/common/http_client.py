"""
HTTP Client Wrapper Module

Provides the asynchronous HTTP client used for SenseTime calls. Responses are
opened in streaming mode so that the caller decides whether to read the body
at once or frame by frame, and is responsible for closing it.
"""

import json
import logging
from typing import Any, Optional

import httpx

from sensetime_relay.common.errors import UpstreamRequestError
from sensetime_relay.config import get_settings

logger = logging.getLogger(__name__)


class HttpClient:
    """
    Asynchronous HTTP Client Wrapper

    Wraps a lazily created httpx.AsyncClient with the configured timeout.
    """

    def __init__(
        self,
        timeout: Optional[int] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize HTTP Client

        Args:
            timeout: Request timeout (seconds), defaults to configuration
            transport: Custom httpx transport (tests use httpx.MockTransport)
        """
        settings = get_settings()
        self.timeout = timeout or settings.HTTP_TIMEOUT
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    def _get_client(self) -> httpx.AsyncClient:
        """
        Get or create HTTP client instance

        Returns:
            httpx.AsyncClient: HTTP client instance
        """
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close HTTP Client"""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def send_stream(
        self,
        method: str,
        url: str,
        headers: Optional[dict[str, str]] = None,
        json_body: Optional[dict[str, Any]] = None,
    ) -> httpx.Response:
        """
        Send a request and return once the response headers arrive

        The body is left unread; the caller must close the response.

        Raises:
            UpstreamRequestError: The request could not be sent
        """
        client = self._get_client()
        logger.debug(
            "SenseTime Request: method=%s url=%s body=%s",
            method,
            url,
            json.dumps(json_body, ensure_ascii=False),
        )
        request = client.build_request(method=method, url=url, headers=headers, json=json_body)
        try:
            return await client.send(request, stream=True)
        except httpx.TimeoutException as e:
            raise UpstreamRequestError(message=f"Request timeout: {str(e)}", status_code=504) from e
        except httpx.RequestError as e:
            raise UpstreamRequestError(message=f"Request error: {str(e)}") from e
