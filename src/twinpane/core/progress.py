from __future__ import annotations

import asyncio
import time
from typing import Optional

from twinpane.core.formatting import format_speed
from twinpane.core.transfer_queue import TransferQueue


class ProgressTicker:
    """Simulated progress for backend calls that report none.

    Advances linearly over ``duration`` seconds but never past ``ceiling``
    (below 100). Cancelled by :meth:`stop`, which the caller invokes when the
    real completion arrives or the backend starts reporting real progress.
    """

    def __init__(
        self,
        queue: TransferQueue,
        item_id: str,
        *,
        duration: float = 3.0,
        interval: float = 0.1,
        ceiling: float = 95.0,
        size: int = 0,
        clock=time.monotonic,
    ):
        self._queue = queue
        self._item_id = item_id
        self._duration = max(duration, 1e-6)
        self._interval = interval
        self._ceiling = min(ceiling, 99.0)
        self._size = size
        self._clock = clock
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> "ProgressTicker":
        if self._task is None:
            self._task = asyncio.get_running_loop().create_task(self._run())
        return self

    def stop(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()

    def _speed(self, progress: float, elapsed: float) -> str:
        if not self._size:
            return "--"
        return format_speed(int(self._size * progress / 100.0), elapsed)

    async def _run(self) -> None:
        start = self._clock()
        while True:
            await asyncio.sleep(self._interval)
            elapsed = self._clock() - start
            progress = min(self._ceiling, elapsed / self._duration * 100.0)
            self._queue.update_progress(self._item_id, progress, self._speed(progress, elapsed))
            if progress >= self._ceiling:
                return
