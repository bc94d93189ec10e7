"""Time utilities for registry bookkeeping."""

import time
from collections.abc import Callable

Clock = Callable[[], int]


def unix_now() -> int:
    """Return the current time as whole seconds since the epoch."""
    return int(time.time())
