"""
Relay Service

Drives one inbound call through the adaptor: convert, sign, send, translate,
then hand the usage to the billing callback.
"""

import logging
from typing import AsyncGenerator, Awaitable, Callable, Optional

from sensetime_relay.common.event_stream import EventStream
from sensetime_relay.config import get_settings
from sensetime_relay.domain.relay import Meta, RelayMode, RelayResponse, Usage
from sensetime_relay.domain.request import GeneralOpenAIRequest
from sensetime_relay.providers.base import Adaptor

logger = logging.getLogger(__name__)

UsageCallback = Callable[[Meta, Usage], Awaitable[None]]


async def log_usage(meta: Meta, usage: Usage) -> None:
    """Default billing callback: record the usage in the log."""
    logger.info(
        "Usage: mode=%s model=%s stream=%s prompt_tokens=%s completion_tokens=%s total_tokens=%s",
        meta.mode.value,
        meta.actual_model_name,
        meta.is_stream,
        usage.prompt_tokens,
        usage.completion_tokens,
        usage.total_tokens,
    )


class RelayService:
    """
    Relay Service

    Errors raised by the adaptor (AppError subclasses) propagate to the caller
    unchanged; usage is reported only for responses that complete.
    """

    def __init__(
        self,
        adaptor: Adaptor,
        usage_callback: Optional[UsageCallback] = None,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
    ):
        settings = get_settings()
        self.adaptor = adaptor
        self.usage_callback = usage_callback or log_usage
        self.base_url = base_url or settings.SENSETIME_BASE_URL
        self.api_key = api_key if api_key is not None else settings.SENSETIME_API_KEY

    def build_meta(self, mode: RelayMode, request: GeneralOpenAIRequest) -> Meta:
        return Meta(
            mode=mode,
            base_url=self.base_url,
            api_key=self.api_key,
            actual_model_name=request.model,
            is_stream=mode == RelayMode.CHAT_COMPLETIONS and request.stream,
        )

    async def relay(self, mode: RelayMode, request: GeneralOpenAIRequest) -> RelayResponse:
        """
        Relay one call

        Conversion and signing happen before any network call, so an
        unsupported request or a malformed channel key never reaches SenseTime.

        Returns:
            RelayResponse: JSON body or event stream for the client
        """
        meta = self.build_meta(mode, request)
        body = self.adaptor.convert_request(mode, request)
        headers = self.adaptor.setup_request_header({}, meta)
        url = self.adaptor.get_request_url(meta)

        response = await self.adaptor.do_request(meta, url, headers, body)
        relay_response = await self.adaptor.do_response(response, meta)

        if relay_response.stream is not None:
            inner = relay_response.stream
            relay_response.stream = EventStream(
                self._report_after_stream(meta, relay_response, inner),
                release=inner.aclose,
            )
        elif relay_response.usage is not None:
            await self.usage_callback(meta, relay_response.usage)
        return relay_response

    async def _report_after_stream(
        self,
        meta: Meta,
        relay_response: RelayResponse,
        stream: EventStream,
    ) -> AsyncGenerator[bytes, None]:
        try:
            async for chunk in stream:
                yield chunk
        finally:
            await stream.aclose()

        usage = relay_response.usage
        if usage is not None:
            await self.usage_callback(meta, usage)
