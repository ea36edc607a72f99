from __future__ import annotations

import asyncio
import itertools
import time
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Tuple

from twinpane.core.events import Observable
from twinpane.core.formatting import format_item_counter
from twinpane.core.logging import get_logger

_log = get_logger("twinpane.queue")


class TransferStatus(str, Enum):
    QUEUED = "queued"
    TRANSFERRING = "transferring"
    SUCCESS = "success"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (TransferStatus.SUCCESS, TransferStatus.FAILED)


@dataclass(frozen=True)
class TransferItem:
    id: str
    file_name: str
    progress: float = 0.0
    speed: str = "0 KB/s"
    status: TransferStatus = TransferStatus.QUEUED
    error: Optional[str] = None


def _clamp(progress: float) -> float:
    try:
        p = float(progress)
    except (TypeError, ValueError):
        return 0.0
    return max(0.0, min(100.0, p))


class TransferQueue(Observable):
    """Process-wide transfer log shared by both panes.

    Every mutation replaces the item tuple in one step, so interleaved batches
    only ever touch their own items. One item at a time is the "current"
    transfer shown to the user; after completion it stays current for
    ``grace_period`` seconds so the final state is visible.
    """

    def __init__(self, grace_period: float = 1.0):
        super().__init__()
        self.grace_period = grace_period
        self._items: Tuple[TransferItem, ...] = ()
        self._current: Optional[TransferItem] = None
        self._grace_handle: Optional[asyncio.TimerHandle] = None
        self._seq = itertools.count(1)

    # ---------- snapshots ----------
    @property
    def items(self) -> Tuple[TransferItem, ...]:
        return self._items

    @property
    def current(self) -> Optional[TransferItem]:
        return self._current

    def get(self, item_id: str) -> Optional[TransferItem]:
        return next((i for i in self._items if i.id == item_id), None)

    def _count(self, status: TransferStatus) -> int:
        return sum(1 for i in self._items if i.status == status)

    @property
    def queued_count(self) -> int:
        return self._count(TransferStatus.QUEUED)

    @property
    def transferring_count(self) -> int:
        return self._count(TransferStatus.TRANSFERRING)

    @property
    def success_count(self) -> int:
        return self._count(TransferStatus.SUCCESS)

    @property
    def failed_count(self) -> int:
        return self._count(TransferStatus.FAILED)

    # ---------- mutations ----------
    def _replace_item(self, item_id: str, **changes) -> Optional[TransferItem]:
        updated: Optional[TransferItem] = None
        items = []
        for item in self._items:
            if item.id == item_id:
                item = updated = replace(item, **changes)
            items.append(item)
        if updated is None:
            _log.debug("unknown transfer id %s", item_id)
            return None
        self._items = tuple(items)
        return updated

    def enqueue(self, file_name: str) -> str:
        item_id = f"{int(time.time() * 1000)}-{next(self._seq)}"
        self._items = self._items + (TransferItem(id=item_id, file_name=file_name),)
        self._notify()
        return item_id

    def start(self, item_id: str) -> None:
        updated = self._replace_item(item_id, status=TransferStatus.TRANSFERRING)
        if updated is None:
            return
        self._cancel_grace()
        self._current = updated
        self._notify()

    def update_progress(self, item_id: str, progress: float, speed: str) -> None:
        updated = self._replace_item(item_id, progress=_clamp(progress), speed=speed)
        if updated is None:
            return
        if self._current is not None and self._current.id == item_id:
            self._current = updated
        self._notify()

    def complete(self, item_id: str, success: bool, error: Optional[str] = None) -> None:
        status = TransferStatus.SUCCESS if success else TransferStatus.FAILED
        updated = self._replace_item(item_id, status=status, progress=100.0, error=None if success else error)
        if updated is None:
            return
        if self._current is not None and self._current.id == item_id:
            self._current = updated
            self._schedule_grace(item_id)
        self._notify()

    def report_item_progress(self, progress: float, done: int, total: int) -> None:
        """Out-of-band progress for multi-item operations (recursive deletes).

        Applies to the current transfer and uses an item counter as unit.
        """
        cur = self._current
        if cur is None or cur.status != TransferStatus.TRANSFERRING:
            return
        self.update_progress(cur.id, progress, format_item_counter(done, total))

    def clear_completed(self) -> None:
        remaining = tuple(i for i in self._items if not i.status.is_terminal)
        if len(remaining) == len(self._items):
            return
        self._items = remaining
        self._notify()

    # ---------- current-transfer grace period ----------
    def _cancel_grace(self) -> None:
        if self._grace_handle is not None:
            self._grace_handle.cancel()
            self._grace_handle = None

    def _schedule_grace(self, item_id: str) -> None:
        self._cancel_grace()
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None
        if loop is None or self.grace_period <= 0:
            self._clear_current(item_id)
            return
        self._grace_handle = loop.call_later(self.grace_period, self._clear_current, item_id)

    def _clear_current(self, item_id: str) -> None:
        self._grace_handle = None
        if self._current is not None and self._current.id == item_id:
            self._current = None
            self._notify()
