"""
Datetime utilities.

Provides the protocol clock.
"""

import time
from collections.abc import Callable

# Protocol clock: returns integer unix seconds
Clock = Callable[[], int]


def unix_now() -> int:
    """Current unix timestamp in whole seconds."""
    return int(time.time())
