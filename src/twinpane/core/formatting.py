from __future__ import annotations

import datetime
import re
import time
from typing import Tuple

_UNITS = ["B", "KB", "MB", "GB", "TB"]


def format_bytes(n: int) -> str:
    try:
        n = int(n)
    except (TypeError, ValueError):
        return ""
    if n <= 0:
        return "0 B"
    v = float(n)
    i = 0
    while v >= 1024 and i < len(_UNITS) - 1:
        v /= 1024.0
        i += 1
    if i == 0:
        return f"{n} B"
    return f"{v:.1f} {_UNITS[i]}" if v >= 10 else f"{v:.2f} {_UNITS[i]}"


def format_mtime(ts: int) -> str:
    if not ts:
        return ""
    try:
        return datetime.datetime.fromtimestamp(int(ts)).strftime("%Y-%m-%d %H:%M")
    except (OverflowError, OSError, ValueError):
        return ""


def format_speed(bytes_done: int, elapsed_s: float) -> str:
    if elapsed_s <= 0 or bytes_done <= 0:
        return "0 B/s"
    return f"{format_bytes(int(bytes_done / elapsed_s))}/s"


def format_item_counter(done: int, total: int) -> str:
    return f"{done}/{total} items"


_NUM_RE = re.compile(r"(\d+)")


def natural_key(name: str) -> Tuple[Tuple[int, int, str], ...]:
    """Case-insensitive key that orders ``file2`` before ``file10``."""
    return tuple(
        (0, int(chunk), "") if chunk.isdigit() else (1, 0, chunk)
        for chunk in _NUM_RE.split(name.casefold())
        if chunk
    )


class SpeedMeter:
    """Turns cumulative byte counts into a human speed string."""

    def __init__(self, clock=time.monotonic):
        self._clock = clock
        self._start = clock()

    def speed(self, bytes_done: int) -> str:
        return format_speed(bytes_done, self._clock() - self._start)
