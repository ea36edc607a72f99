from __future__ import annotations

import asyncio
import time
from typing import Callable, Coroutine, Dict, List, Optional, Set, Tuple

from twinpane.config.models import AppConfig
from twinpane.core.commands import Action, CommandDispatcher, KeyEvent, Prompter
from twinpane.core.debug_support import log_exception_with_id
from twinpane.core.drag import DragController, DragState, HitTestIndex, PointerEvent, TransferRequest
from twinpane.core.executor import TransferExecutor
from twinpane.core.logging import get_logger
from twinpane.core.notifications import Notifier
from twinpane.core.pane import PaneController, PaneId, PaneState
from twinpane.core.transfer_queue import TransferItem, TransferQueue
from twinpane.services.file_ops import FileOperations
from twinpane.services.files_base import Entry, FilesBackend

_log = get_logger("twinpane.workspace")


class Workspace:
    """Both panes plus everything shared between them.

    This is the surface the presentation layer talks to: it forwards pointer,
    key and menu events here and renders the snapshots. Coroutine entry points
    can be awaited directly or handed to :meth:`spawn` from synchronous
    handlers.
    """

    def __init__(
        self,
        ops: FileOperations,
        config: Optional[AppConfig] = None,
        prompter: Optional[Prompter] = None,
        *,
        on_local_path_changed: Optional[Callable[[str], None]] = None,
        clock=time.monotonic,
    ):
        self.config = config or AppConfig()
        self.ops = ops
        self.on_local_path_changed = on_local_path_changed
        self.on_task_error: Optional[Callable[[BaseException, str], None]] = None
        self.loop: Optional[asyncio.AbstractEventLoop] = None

        self.notifier = Notifier(ttl=self.config.toast_ttl_s)
        self.queue = TransferQueue(grace_period=self.config.current_transfer_grace_s)
        self.panes: Dict[PaneId, PaneController] = {
            pid: PaneController(pid, ops, self.notifier, on_path_changed=self._path_changed)
            for pid in PaneId
        }
        self.hit_index = HitTestIndex()
        self.drag = DragController(
            self.panes,
            self.hit_index,
            on_drop=self._on_drop,
            threshold=self.config.drag_threshold_px,
            frame_interval=self.config.frame_interval_s,
            clock=clock,
        )
        self.executor = TransferExecutor(ops, self.queue, self.notifier, self.panes, self.config)
        self.dispatcher = CommandDispatcher(
            self.panes, self.executor, self.drag, prompter, page_size=self.config.page_size
        )
        self._tasks: Set[asyncio.Task] = set()

    # ---------- lifecycle ----------
    async def start(self, local_path: str, remote_path: str = "/") -> None:
        loads = [self.panes[PaneId.LOCAL].load(local_path)]
        if self.ops.has_remote:
            loads.append(self.panes[PaneId.REMOTE].load(remote_path))
        await asyncio.gather(*loads)

    async def attach_remote(self, backend: Optional[FilesBackend], remote_path: str = "/") -> bool:
        self.ops.set_remote(backend)
        remote = self.panes[PaneId.REMOTE]
        remote.history.clear()
        remote.selection.clear()
        if backend is None:
            return False
        return await remote.load(remote_path)

    def spawn(self, coro: Coroutine) -> asyncio.Task:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            if self.loop is None:
                raise
            loop = self.loop
        task = loop.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._task_done)
        return task

    def _task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is None:
            return
        err_id = log_exception_with_id("TASK", exc, logger_name="twinpane.workspace")
        if self.on_task_error is not None:
            self.on_task_error(exc, str(err_id))

    async def drain(self) -> None:
        """Wait until every spawned task, including ones spawned meanwhile, is done."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def close(self) -> None:
        for task in list(self._tasks):
            task.cancel()
        self.ops.close()

    def _path_changed(self, pane: PaneController, path: str) -> None:
        if pane.pane_id is PaneId.LOCAL and self.on_local_path_changed is not None:
            self.on_local_path_changed(path)

    def _on_drop(self, request: TransferRequest) -> None:
        self.spawn(self.executor.run_batch(request))

    # ---------- snapshots ----------
    def pane(self, pane: PaneId) -> PaneController:
        return self.panes[PaneId(pane)]

    def pane_state(self, pane: PaneId) -> PaneState:
        return self.pane(pane).state

    def visible_entries(self, pane: PaneId) -> List[Entry]:
        return self.pane(pane).visible_entries()

    def selection(self, pane: PaneId) -> Tuple[str, ...]:
        return tuple(self.pane(pane).selection.paths)

    @property
    def active_pane(self) -> PaneId:
        return self.dispatcher.active_pane

    @property
    def transfers(self) -> Tuple[TransferItem, ...]:
        return self.queue.items

    @property
    def current_transfer(self) -> Optional[TransferItem]:
        return self.queue.current

    @property
    def drag_state(self) -> Optional[DragState]:
        return self.drag.state

    # ---------- navigation ----------
    async def navigate(self, pane: PaneId, path: str) -> bool:
        return await self.pane(pane).navigate(path)

    async def navigate_up(self, pane: PaneId) -> bool:
        return await self.pane(pane).navigate_up()

    async def navigate_breadcrumb(self, pane: PaneId, index: int) -> bool:
        return await self.pane(pane).navigate_breadcrumb(index)

    async def go_back(self, pane: PaneId) -> bool:
        return await self.pane(pane).go_back()

    async def go_forward(self, pane: PaneId) -> bool:
        return await self.pane(pane).go_forward()

    async def go_home(self, pane: PaneId) -> bool:
        return await self.pane(pane).go_home()

    async def refresh(self, pane: PaneId) -> bool:
        return await self.pane(pane).refresh()

    # ---------- selection ----------
    def set_active_pane(self, pane: PaneId) -> None:
        self.dispatcher.set_active(pane)

    def select_only(self, pane: PaneId, entry: Entry) -> None:
        if not entry.is_parent:
            self.pane(pane).selection.select_only(entry.path)

    def select_toggle(self, pane: PaneId, entry: Entry) -> None:
        if not entry.is_parent:
            self.pane(pane).selection.toggle(entry.path)

    def select_range(self, pane: PaneId, entry: Entry) -> None:
        ctl = self.pane(pane)
        ctl.selection.select_range(ctl.visible_entries(), entry.path)

    def select_all(self, pane: PaneId) -> None:
        ctl = self.pane(pane)
        ctl.selection.select_all(ctl.visible_entries())

    def clear_selection(self, pane: PaneId) -> None:
        self.pane(pane).selection.clear()

    # ---------- pointer ----------
    def begin_drag(self, pane: PaneId, event: PointerEvent, entry: Optional[Entry]) -> bool:
        """Pointer-down on a row (``entry``) or on the pane background (None)."""
        pane = PaneId(pane)
        if self.drag.is_dragging:
            return False
        self.set_active_pane(pane)
        ctl = self.panes[pane]
        if entry is not None and event.button == 0:
            if event.shift and not entry.is_parent:
                ctl.selection.select_range(ctl.visible_entries(), entry.path)
            else:
                ctl.selection.pointer_down(entry, ctrl=event.ctrl)
        elif entry is None and event.button == 0:
            ctl.selection.clear()
        return self.drag.pointer_down(pane, event, entry)

    def pointer_move(self, event: PointerEvent) -> None:
        self.drag.pointer_move(event)

    def pointer_up(self, event: PointerEvent) -> Optional[TransferRequest]:
        return self.drag.pointer_up(event)

    def mouse_button(self, button: int) -> Optional[asyncio.Task]:
        if button not in (3, 4):
            return None
        return self.spawn(self.dispatcher.handle_mouse_button(button))

    # ---------- keyboard and menu ----------
    def key_press(self, event: KeyEvent) -> Optional[asyncio.Task]:
        if event.key.lower() == "escape":
            self.drag.cancel()
            return None
        return self.spawn(self.dispatcher.handle_key(event))

    async def dispatch_command(self, action: Action, entry: Optional[Entry] = None, pane: Optional[PaneId] = None) -> bool:
        return await self.dispatcher.dispatch(action, entry, pane)

    def clear_completed_transfers(self) -> None:
        self.queue.clear_completed()
