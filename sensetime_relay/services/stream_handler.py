"""
Streaming Response Handler

Translates a SenseTime stream into an OpenAI-compatible event stream.

A reader task pulls the upstream body through the frame reassembler and
hands payloads over a bounded queue; the consuming generator decodes,
translates and yields them in arrival order. With the default queue size of
one, a slow client holds back the upstream reader instead of piling frames
up in memory.
"""

from __future__ import annotations

import asyncio
import logging
from typing import AsyncGenerator, Optional, Union

import anyio
import httpx
from pydantic import ValidationError

from sensetime_relay.common.encoding import (
    DONE_SENTINEL,
    dump_model_json,
    encode_sse_data,
    encode_sse_done,
)
from sensetime_relay.common.errors import AppError, UpstreamReadError
from sensetime_relay.common.event_stream import EventStream
from sensetime_relay.common.stream_frames import iter_payloads
from sensetime_relay.common.stream_usage import StreamUsageAccumulator
from sensetime_relay.config import get_settings
from sensetime_relay.domain.relay import Usage
from sensetime_relay.providers.sensetime_conversion import stream_response_to_openai
from sensetime_relay.providers.sensetime_schemas import SenseChatStreamResponse
from sensetime_relay.services.response_handler import close_response

logger = logging.getLogger(__name__)


class _EndOfStream:
    """Marks the end of the upstream body on the hand-off queue."""


_END_OF_STREAM = _EndOfStream()

QueueItem = Union[str, AppError, _EndOfStream]


class StreamHandler:
    """
    One streaming response translation.

    `stream()` may be consumed once. `usage` is authoritative only when
    `completed` is True, i.e. after the terminal event was sent and the
    upstream body was released.
    """

    def __init__(
        self,
        response: httpx.Response,
        model_name: Optional[str] = None,
        queue_size: Optional[int] = None,
        max_frame_bytes: Optional[int] = None,
    ):
        settings = get_settings()
        self.response = response
        self.model_name = model_name or settings.RESPONSE_MODEL_NAME
        self.queue_size = queue_size or settings.STREAM_QUEUE_SIZE
        self.max_frame_bytes = max_frame_bytes or settings.MAX_FRAME_BYTES

        self.completed = False
        self.forwarded_events = 0
        self.skipped_frames = 0

        self._usage = StreamUsageAccumulator()
        self._consumed = False

    @property
    def usage(self) -> Usage:
        return self._usage.finalize()

    def stream(self) -> EventStream:
        """
        Stream of encoded events for the client

        Closing it releases the upstream body even if it was never iterated.
        """
        return EventStream(self._events(), release=self.release)

    async def release(self) -> None:
        """Release the upstream body; a no-op once it is closed."""
        await close_response(self.response)

    async def _events(self) -> AsyncGenerator[bytes, None]:
        """
        Yield encoded `data: ...` events followed by exactly one `data: [DONE]`

        Raises:
            UpstreamReadError: The upstream body could not be read
            UpstreamCloseError: The upstream body could not be released
        """
        if self._consumed:
            raise RuntimeError("stream already consumed")
        self._consumed = True

        queue: asyncio.Queue[QueueItem] = asyncio.Queue(maxsize=self.queue_size)
        reader = asyncio.create_task(self._read_frames(queue))
        try:
            while True:
                item = await queue.get()
                if isinstance(item, _EndOfStream):
                    break
                if isinstance(item, AppError):
                    raise item

                event = self._translate(item)
                if event is not None:
                    self.forwarded_events += 1
                    yield event

            yield encode_sse_done()
        finally:
            # Also reached when the client disconnects mid-stream.
            with anyio.CancelScope(shield=True):
                if not reader.done():
                    reader.cancel()
                await asyncio.gather(reader, return_exceptions=True)
                await close_response(self.response)

        self.completed = True
        logger.debug(
            "SenseTime stream finished: events=%s skipped=%s usage=%s",
            self.forwarded_events,
            self.skipped_frames,
            self.usage.to_dict(),
        )

    async def _read_frames(self, queue: asyncio.Queue[QueueItem]) -> None:
        try:
            async for payload in iter_payloads(
                self.response.aiter_bytes(),
                max_frame_bytes=self.max_frame_bytes,
            ):
                await queue.put(payload)
        except AppError as e:
            await queue.put(e)
            return
        except Exception as e:
            await queue.put(UpstreamReadError(message=f"read response body failed: {e}"))
            return
        await queue.put(_END_OF_STREAM)

    def _translate(self, payload: str) -> Optional[bytes]:
        data = payload.strip()
        if not data or data == DONE_SENTINEL:
            logger.debug("Skipping SenseTime stream frame: %r", data)
            return None

        try:
            sense_chunk = SenseChatStreamResponse.model_validate_json(data)
        except ValidationError as e:
            self.skipped_frames += 1
            logger.error("error unmarshalling stream response: %s", str(e))
            return None

        if sense_chunk.status.code != 0:
            logger.warning(
                "SenseTime stream status: code=%s message=%s",
                sense_chunk.status.code,
                sense_chunk.status.message,
            )

        self._usage.observe(sense_chunk.usage.to_usage())

        openai_chunk = stream_response_to_openai(sense_chunk, self.model_name)
        if openai_chunk is None:
            return None
        return encode_sse_data(dump_model_json(openai_chunk))
