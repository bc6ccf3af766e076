"""
Time Utilities
"""

from __future__ import annotations

import time


def get_timestamp() -> int:
    """Return the current Unix timestamp in whole seconds."""
    return int(time.time())
