"""
Streaming Usage Accumulation

SenseTime repeats cumulative usage on stream chunks, not on all of them.
The last non-zero report wins; counts are never summed.
"""

from __future__ import annotations

from sensetime_relay.domain.relay import Usage


class StreamUsageAccumulator:
    """
    Running usage of one streaming response.

    Owned by a single consumer; read once when the stream ends.
    """

    def __init__(self) -> None:
        self._usage = Usage()
        self.updates = 0

    def observe(self, usage: Usage) -> bool:
        """
        Record a chunk's usage report

        Returns:
            bool: Whether the report replaced the running value
        """
        if usage.total_tokens == 0:
            return False
        self._usage = Usage(
            prompt_tokens=usage.prompt_tokens,
            completion_tokens=usage.completion_tokens,
            total_tokens=usage.total_tokens,
        )
        self.updates += 1
        return True

    def finalize(self) -> Usage:
        """Return the authoritative usage (all-zero if nothing was reported)."""
        return Usage(
            prompt_tokens=self._usage.prompt_tokens,
            completion_tokens=self._usage.completion_tokens,
            total_tokens=self._usage.total_tokens,
        )
