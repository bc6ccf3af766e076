"""
Releasable Event Stream Unit Tests
"""

import pytest

from sensetime_relay.common.event_stream import EventStream


class ReleaseRecorder:
    def __init__(self):
        self.calls = 0

    async def __call__(self):
        self.calls += 1


async def _events(started):
    started.append(True)
    yield b"data: a\n\n"
    yield b"data: b\n\n"


@pytest.mark.asyncio
async def test_iterates_underlying_events():
    release = ReleaseRecorder()
    stream = EventStream(_events([]), release=release)

    assert [event async for event in stream] == [b"data: a\n\n", b"data: b\n\n"]
    assert release.calls == 0


@pytest.mark.asyncio
async def test_close_before_start_still_releases():
    started = []
    release = ReleaseRecorder()
    stream = EventStream(_events(started), release=release)

    await stream.aclose()

    assert started == []
    assert release.calls == 1


@pytest.mark.asyncio
async def test_close_mid_stream_releases():
    release = ReleaseRecorder()
    stream = EventStream(_events([]), release=release)

    assert await stream.__anext__() == b"data: a\n\n"
    await stream.aclose()

    assert release.calls == 1
    with pytest.raises(StopAsyncIteration):
        await stream.__anext__()
