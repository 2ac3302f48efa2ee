"""Date and time formatting utilities."""

import time
from typing import Optional

from gityard.constants import PLACEHOLDER

MINUTE = 60
HOUR = 60 * MINUTE
DAY = 24 * HOUR
WEEK = 7 * DAY
MONTH = 30 * DAY
YEAR = 365 * DAY


def format_age(timestamp: Optional[float], now: Optional[float] = None) -> str:
    """
    Format the time elapsed since a unix timestamp as a compact age.

    Args:
        timestamp: Commit time in seconds since the epoch
        now: Reference time (defaults to the current time)

    Returns:
        "Ns", "Nm", "Nh", "Nd", "Nw", "Nmo" or "Ny", or "-" for a missing timestamp
    """
    if not timestamp:
        return PLACEHOLDER

    if now is None:
        now = time.time()
    seconds = max(0, int(now - timestamp))

    if seconds < MINUTE:
        return f"{seconds}s"
    if seconds < HOUR:
        return f"{seconds // MINUTE}m"
    if seconds < DAY:
        return f"{seconds // HOUR}h"
    if seconds < WEEK:
        return f"{seconds // DAY}d"
    if seconds < MONTH:
        return f"{seconds // WEEK}w"
    if seconds < YEAR:
        return f"{seconds // MONTH}mo"
    return f"{seconds // YEAR}y"
