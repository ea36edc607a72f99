from __future__ import annotations

import asyncio
import itertools
import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

from twinpane.core.events import Observable
from twinpane.core.logging import get_logger

_log = get_logger("twinpane.toast")


class ToastLevel(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    INFO = "info"
    WARNING = "warning"


_LOG_LEVELS = {
    ToastLevel.SUCCESS: logging.INFO,
    ToastLevel.INFO: logging.INFO,
    ToastLevel.WARNING: logging.WARNING,
    ToastLevel.ERROR: logging.WARNING,
}


@dataclass(frozen=True)
class Toast:
    id: int
    message: str
    level: ToastLevel


class Notifier(Observable):
    """Transient user notifications.

    ``visible`` holds the toasts currently on screen; each expires after
    ``ttl`` seconds when an event loop is running. ``history`` keeps every toast
    ever posted for the status log.
    """

    def __init__(self, ttl: float = 3.0, history_limit: int = 200):
        super().__init__()
        self.ttl = ttl
        self._ids = itertools.count(1)
        self._visible: Tuple[Toast, ...] = ()
        self._history: List[Toast] = []
        self._history_limit = history_limit

    @property
    def visible(self) -> Tuple[Toast, ...]:
        return self._visible

    @property
    def history(self) -> Tuple[Toast, ...]:
        return tuple(self._history)

    def messages(self, level: Optional[ToastLevel] = None) -> List[str]:
        return [t.message for t in self._history if level is None or t.level == level]

    def notify(self, message: str, level: ToastLevel = ToastLevel.INFO) -> Toast:
        toast = Toast(id=next(self._ids), message=message, level=ToastLevel(level))
        _log.log(_LOG_LEVELS[toast.level], "[%s] %s", toast.level.value, message)
        self._history.append(toast)
        del self._history[:-self._history_limit]
        self._visible = self._visible + (toast,)
        self._notify()
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None
        if loop is not None and self.ttl > 0:
            loop.call_later(self.ttl, self.dismiss, toast.id)
        return toast

    def success(self, message: str) -> Toast:
        return self.notify(message, ToastLevel.SUCCESS)

    def error(self, message: str) -> Toast:
        return self.notify(message, ToastLevel.ERROR)

    def info(self, message: str) -> Toast:
        return self.notify(message, ToastLevel.INFO)

    def warning(self, message: str) -> Toast:
        return self.notify(message, ToastLevel.WARNING)

    def dismiss(self, toast_id: int) -> None:
        remaining = tuple(t for t in self._visible if t.id != toast_id)
        if len(remaining) != len(self._visible):
            self._visible = remaining
            self._notify()
