from __future__ import annotations

"""Pointer gesture handling for cross-pane drag and drop.

The controller is toolkit independent: the presentation layer feeds it pointer
events in window coordinates and keeps a :class:`HitTestIndex` up to date with
the screen rectangles of both panes and their rows.
"""

import asyncio
import math
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Tuple

from twinpane.core.events import Observable
from twinpane.core.logging import get_logger
from twinpane.core.pane import PaneController, PaneId
from twinpane.services.files_base import Entry

_log = get_logger("twinpane.drag")

PRIMARY_BUTTON = 0


class DragPhase(str, Enum):
    IDLE = "idle"
    ARMED = "armed"
    DRAGGING = "dragging"


@dataclass(frozen=True)
class PointerEvent:
    x: float
    y: float
    button: int = PRIMARY_BUTTON
    ctrl: bool = False
    shift: bool = False


@dataclass(frozen=True)
class Rect:
    left: float
    top: float
    width: float
    height: float

    def contains(self, x: float, y: float) -> bool:
        return self.left <= x < self.left + self.width and self.top <= y < self.top + self.height


@dataclass(frozen=True)
class TransferRequest:
    dest_is_remote: bool
    dest_folder: Optional[str]  # None: the destination pane's current path
    source_paths: Tuple[str, ...]
    source_is_remote: bool


@dataclass(frozen=True)
class DragState:
    is_dragging: bool
    items: Tuple[Entry, ...]
    paths: Tuple[str, ...]
    source_is_remote: bool
    source_path: str
    pointer_x: float
    pointer_y: float
    target_pane: Optional[PaneId] = None
    target_folder: Optional[str] = None


class HitTestIndex:
    """Maps window coordinates to ``(pane, row entry)``."""

    def __init__(self) -> None:
        self._panes: Dict[PaneId, Rect] = {}
        self._rows: Dict[PaneId, List[Tuple[Rect, Entry]]] = {}

    def set_pane(self, pane: PaneId, rect: Rect) -> None:
        self._panes[pane] = rect

    def set_rows(self, pane: PaneId, rows: Iterable[Tuple[Rect, Entry]]) -> None:
        self._rows[pane] = list(rows)

    def clear(self) -> None:
        self._panes.clear()
        self._rows.clear()

    def hit(self, x: float, y: float) -> Tuple[Optional[PaneId], Optional[Entry]]:
        for pane, rect in self._panes.items():
            if not rect.contains(x, y):
                continue
            for row_rect, entry in self._rows.get(pane, ()):
                if row_rect.contains(x, y):
                    return pane, entry
            return pane, None
        return None, None


@dataclass(frozen=True)
class _Press:
    pane: PaneId
    entry: Entry
    x: float
    y: float


class DragController(Observable):
    """Idle -> Armed -> Dragging -> (dropped | cancelled) -> Idle.

    Pointer-down over a row arms the gesture. Moving further than
    ``threshold`` pixels starts the drag and freezes the payload; releasing
    before that is a plain click and is handed back to the selection. Hit tests
    run at most once per ``frame_interval`` while dragging and once more at the
    release point.
    """

    def __init__(
        self,
        panes: Mapping[PaneId, PaneController],
        hit_index: HitTestIndex,
        on_drop: Optional[Callable[[TransferRequest], None]] = None,
        *,
        threshold: float = 5.0,
        frame_interval: float = 1 / 60,
        clock=time.monotonic,
    ):
        super().__init__()
        self.panes = panes
        self.hit_index = hit_index
        self.on_drop = on_drop
        self.threshold = threshold
        self.frame_interval = frame_interval
        self._clock = clock
        self._phase = DragPhase.IDLE
        self._press: Optional[_Press] = None
        self._state: Optional[DragState] = None
        self._last_hit = -math.inf
        self._pending: Optional[asyncio.TimerHandle] = None

    @property
    def phase(self) -> DragPhase:
        return self._phase

    @property
    def state(self) -> Optional[DragState]:
        return self._state

    @property
    def is_dragging(self) -> bool:
        return self._phase is DragPhase.DRAGGING

    # ---------- gesture ----------
    def pointer_down(self, pane: PaneId, event: PointerEvent, entry: Optional[Entry]) -> bool:
        if self._phase is DragPhase.DRAGGING:
            return False
        if event.button != PRIMARY_BUTTON or entry is None or entry.is_parent:
            self._reset()
            return False
        self._press = _Press(pane=pane, entry=entry, x=event.x, y=event.y)
        self._phase = DragPhase.ARMED
        return True

    def pointer_move(self, event: PointerEvent) -> None:
        if self._phase is DragPhase.ARMED:
            press = self._press
            if math.hypot(event.x - press.x, event.y - press.y) <= self.threshold:
                return
            self._begin(event)
            return
        if self._phase is not DragPhase.DRAGGING:
            return
        self._state = self._with_pointer(event.x, event.y)
        now = self._clock()
        if now - self._last_hit >= self.frame_interval:
            self._hit_test()
        else:
            self._schedule_flush(self.frame_interval - (now - self._last_hit))
        self._notify()

    def pointer_up(self, event: PointerEvent) -> Optional[TransferRequest]:
        if self._phase is DragPhase.ARMED:
            press = self._press
            self._reset()
            if not (event.ctrl or event.shift):
                self.panes[press.pane].selection.click(press.entry)
            return None
        if self._phase is not DragPhase.DRAGGING:
            return None

        self._state = self._with_pointer(event.x, event.y)
        self._hit_test()
        state = self._state
        self._reset()
        self._notify()
        if state.target_pane is None:
            _log.debug("drop outside both panes, cancelled")
            return None

        request = TransferRequest(
            dest_is_remote=state.target_pane.is_remote,
            dest_folder=state.target_folder,
            source_paths=state.paths,
            source_is_remote=state.source_is_remote,
        )
        _log.info(
            "drop: %d item(s) %s -> %s %s",
            len(request.source_paths),
            "remote" if request.source_is_remote else "local",
            state.target_pane.value,
            request.dest_folder or "(pane path)",
        )
        if self.on_drop is not None:
            self.on_drop(request)
        return request

    def cancel(self) -> bool:
        if self._phase is DragPhase.IDLE:
            return False
        was_dragging = self._phase is DragPhase.DRAGGING
        self._reset()
        if was_dragging:
            self._notify()
        return was_dragging

    # ---------- internals ----------
    def _begin(self, event: PointerEvent) -> None:
        press = self._press
        pane = self.panes[press.pane]
        if press.entry.path in pane.selection:
            items = tuple(pane.selected_entries()) or (press.entry,)
        else:
            items = (press.entry,)
        self._phase = DragPhase.DRAGGING
        self._state = DragState(
            is_dragging=True,
            items=items,
            paths=tuple(e.path for e in items),
            source_is_remote=press.pane.is_remote,
            source_path=pane.current_path,
            pointer_x=event.x,
            pointer_y=event.y,
        )
        self._hit_test()
        self._notify()

    def _with_pointer(self, x: float, y: float) -> DragState:
        s = self._state
        return DragState(s.is_dragging, s.items, s.paths, s.source_is_remote, s.source_path, x, y,
                         s.target_pane, s.target_folder)

    def _hit_test(self) -> None:
        self._cancel_flush()
        self._last_hit = self._clock()
        s = self._state
        pane, entry = self.hit_index.hit(s.pointer_x, s.pointer_y)
        folder = entry.path if entry is not None and entry.is_dir and not entry.is_parent else None
        if pane != s.target_pane or folder != s.target_folder:
            self._state = DragState(s.is_dragging, s.items, s.paths, s.source_is_remote, s.source_path,
                                    s.pointer_x, s.pointer_y, pane, folder)

    def _flush(self) -> None:
        self._pending = None
        if self._phase is DragPhase.DRAGGING:
            self._hit_test()
            self._notify()

    def _schedule_flush(self, delay: float) -> None:
        if self._pending is not None:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        self._pending = loop.call_later(max(delay, 0.0), self._flush)

    def _cancel_flush(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    def _reset(self) -> None:
        self._cancel_flush()
        self._phase = DragPhase.IDLE
        self._press = None
        self._state = None
        self._last_hit = -math.inf
