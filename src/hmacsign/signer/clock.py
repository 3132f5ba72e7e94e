"""Wall-clock timestamps in whole milliseconds since the Unix epoch."""

import time


def round_half_up_millis(millis: float) -> int:
    """Round a millisecond value half-up (add 0.5, then truncate)."""
    return int(millis + 0.5)


def current_millis() -> int:
    """Current UTC time in milliseconds since 1970-01-01T00:00:00Z."""
    return round_half_up_millis(time.time() * 1000.0)
