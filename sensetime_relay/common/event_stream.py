"""
Releasable Event Stream

The upstream body is opened before the client starts reading. An async
generator that was never started ignores `aclose()`, so the stream handed to
the HTTP layer pairs the generator with a release callback that always runs.
"""

from __future__ import annotations

from typing import AsyncGenerator, Awaitable, Callable

Release = Callable[[], Awaitable[None]]


class EventStream:
    """
    Async iterator over encoded events

    `aclose()` closes the underlying generator and then calls `release`,
    whether or not iteration ever started. `release` must tolerate being
    called after the generator already released the resource itself.
    """

    def __init__(self, events: AsyncGenerator[bytes, None], release: Release):
        self._events = events
        self._release = release

    def __aiter__(self) -> "EventStream":
        return self

    async def __anext__(self) -> bytes:
        return await self._events.__anext__()

    async def aclose(self) -> None:
        try:
            await self._events.aclose()
        finally:
            await self._release()
