from __future__ import annotations

import time
from datetime import datetime, timezone


class Clock:
    """Wall and monotonic time source; swapped out in tests."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    def monotonic(self) -> float:
        return time.monotonic()


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()
