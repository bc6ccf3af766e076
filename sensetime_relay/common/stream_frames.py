"""
SenseTime Stream Frame Reassembly

SenseTime streams are not standard SSE. Frames are separated by a blank line
("\\n\\n") and carry a 5 character field marker ("data:") in front of the
JSON payload. Network reads split frames at arbitrary points, so bytes are
buffered until a complete frame is available.

Boundary rule (kept exactly as upstream expects it):
- a frame ends at the first "\\n\\n" in the buffer, but only once the buffer
  also contains a ":" somewhere; keep-alive blank lines alone never complete
  a frame
- at end of stream the remaining bytes form one last frame
- frames shorter than 5 bytes are keep-alives and are dropped
"""

from __future__ import annotations

from typing import AsyncIterator, Optional

from sensetime_relay.common.errors import UpstreamReadError

FRAME_DELIMITER = b"\n\n"
FIELD_SEPARATOR = b":"
FIELD_MARKER = "data:"
FIELD_MARKER_LENGTH = 5
MIN_FRAME_LENGTH = 5


class FrameReassembler:
    """
    Incremental frame scanner over a growing buffer.

    Feed raw chunks with `feed()`; call `flush()` once the stream ends.
    """

    def __init__(self, max_frame_bytes: Optional[int] = None) -> None:
        self._buf = bytearray()
        self._max_frame_bytes = max_frame_bytes
        self._closed = False

    @property
    def pending(self) -> int:
        """Number of buffered bytes not yet emitted as a frame."""
        return len(self._buf)

    def feed(self, chunk: bytes) -> list[bytes]:
        """
        Append bytes and return every frame completed by them.

        Raises:
            UpstreamReadError: The buffer outgrew max_frame_bytes without a boundary
        """
        if self._closed:
            raise RuntimeError("FrameReassembler already flushed")
        if not chunk:
            return []

        self._buf.extend(chunk)
        frames: list[bytes] = []
        while True:
            frame = self._next_frame()
            if frame is None:
                break
            frames.append(frame)

        if self._max_frame_bytes is not None and len(self._buf) > self._max_frame_bytes:
            raise UpstreamReadError(
                message=f"stream frame exceeds {self._max_frame_bytes} bytes",
                details={"buffered_bytes": len(self._buf)},
            )
        return frames

    def flush(self) -> list[bytes]:
        """Drain remaining frames at end of stream, including a trailing partial one."""
        frames: list[bytes] = []
        while True:
            frame = self._next_frame()
            if frame is None:
                break
            frames.append(frame)
        if self._buf:
            frames.append(bytes(self._buf))
            self._buf.clear()
        self._closed = True
        return frames

    def _next_frame(self) -> Optional[bytes]:
        index = self._buf.find(FRAME_DELIMITER)
        if index < 0 or self._buf.find(FIELD_SEPARATOR) < 0:
            return None
        frame = bytes(self._buf[:index])
        del self._buf[: index + len(FRAME_DELIMITER)]
        return frame


def extract_payload(frame: bytes) -> Optional[str]:
    """
    Strip the field marker from a frame.

    Returns None for frames too short to carry a payload. When the frame
    holds several SSE field lines (e.g. "id:1\\ndata:{...}") the "data:"
    line is used; otherwise the first 5 characters are removed.
    """
    if len(frame) < MIN_FRAME_LENGTH:
        return None
    text = frame.decode("utf-8", errors="replace")
    for line in text.split("\n"):
        if line.startswith(FIELD_MARKER):
            return line[FIELD_MARKER_LENGTH:]
    return text[FIELD_MARKER_LENGTH:]


async def iter_frames(
    byte_stream: AsyncIterator[bytes],
    max_frame_bytes: Optional[int] = None,
) -> AsyncIterator[bytes]:
    """
    Lazily yield raw frames from an async byte stream.

    Suspends on the underlying reads; finite and not restartable.
    """
    reassembler = FrameReassembler(max_frame_bytes=max_frame_bytes)
    async for chunk in byte_stream:
        for frame in reassembler.feed(chunk):
            yield frame
    for frame in reassembler.flush():
        yield frame


async def iter_payloads(
    byte_stream: AsyncIterator[bytes],
    max_frame_bytes: Optional[int] = None,
) -> AsyncIterator[str]:
    """Lazily yield marker-stripped payloads, skipping keep-alive frames."""
    async for frame in iter_frames(byte_stream, max_frame_bytes=max_frame_bytes):
        payload = extract_payload(frame)
        if payload is None:
            continue
        yield payload
