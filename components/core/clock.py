"""Time source shared by the services.

Timestamps are stored as naive UTC datetimes.
"""

from datetime import datetime, timezone
from typing import Callable

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def get_clock() -> Clock:
    """FastAPI dependency, overridden in tests to control time."""
    return utcnow
