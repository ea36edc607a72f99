from __future__ import annotations

import itertools
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, List, Optional, Tuple

from twinpane.core.events import Observable
from twinpane.core.formatting import natural_key
from twinpane.core.history import HistoryStack
from twinpane.core.i18n import t
from twinpane.core.logging import get_logger
from twinpane.core.notifications import Notifier
from twinpane.core.path_grammar import grammar_for
from twinpane.core.selection import SelectionModel
from twinpane.services.file_ops import FileOperations
from twinpane.services.files_base import Entry, parent_entry

_log = get_logger("twinpane.pane")


class PaneId(str, Enum):
    LOCAL = "local"
    REMOTE = "remote"

    @property
    def is_remote(self) -> bool:
        return self is PaneId.REMOTE

    @property
    def other(self) -> "PaneId":
        return PaneId.LOCAL if self is PaneId.REMOTE else PaneId.REMOTE

    @classmethod
    def for_remote(cls, is_remote: bool) -> "PaneId":
        return cls.REMOTE if is_remote else cls.LOCAL


@dataclass(frozen=True)
class PaneState:
    current_path: str = ""
    entries: Tuple[Entry, ...] = ()
    is_loading: bool = False
    breadcrumbs: Tuple[str, ...] = ()


def view_order(entries) -> List[Entry]:
    """Parent row first, then directories, then files; natural name order."""
    return sorted(entries, key=lambda e: (not e.is_parent, not e.is_dir, natural_key(e.name)))


class PaneController(Observable):
    """Owns the listing, history and selection of one pane."""

    def __init__(
        self,
        pane_id: PaneId,
        ops: FileOperations,
        notifier: Notifier,
        on_path_changed: Optional[Callable[["PaneController", str], None]] = None,
    ):
        super().__init__()
        self.pane_id = pane_id
        self.ops = ops
        self.notifier = notifier
        self.on_path_changed = on_path_changed
        self.grammar = grammar_for(pane_id.is_remote)
        self.history = HistoryStack()
        self.selection = SelectionModel()
        self._state = PaneState()
        self._filter = ""
        self._in_flight: Optional[str] = None
        self._generation = itertools.count(1)
        self._latest = 0

    @property
    def is_remote(self) -> bool:
        return self.pane_id.is_remote

    @property
    def state(self) -> PaneState:
        return self._state

    @property
    def current_path(self) -> str:
        return self._state.current_path

    @property
    def filter_text(self) -> str:
        return self._filter

    def _set_state(self, state: PaneState) -> None:
        self._state = state
        self._notify()

    def set_filter(self, text: str) -> None:
        text = (text or "").strip()
        if text != self._filter:
            self._filter = text
            self._notify()

    def visible_entries(self) -> List[Entry]:
        needle = self._filter.casefold()
        entries = [
            e for e in self._state.entries
            if e.is_parent or not needle or needle in e.name.casefold()
        ]
        return view_order(entries)

    def entry_for(self, path: Optional[str]) -> Optional[Entry]:
        if path is None:
            return None
        return next((e for e in self._state.entries if e.path == path and not e.is_parent), None)

    def selected_entries(self) -> List[Entry]:
        return self.selection.selected_entries(self.visible_entries())

    # ---------- loading ----------
    async def load(self, path: str, skip_history: bool = False) -> bool:
        """List ``path`` and replace the pane state.

        A second request for a path that is already loading is dropped. When a
        newer load has started meanwhile, the older result is discarded. On
        failure one error toast is posted and the last good state is kept.
        """
        if self._in_flight == path:
            _log.debug("%s: load of %s already in flight", self.pane_id.value, path)
            return False
        self._in_flight = path
        gen = self._latest = next(self._generation)
        self._set_state(replace(self._state, is_loading=True))
        try:
            res = await self.ops.list(path, self.is_remote)
        finally:
            if self._in_flight == path:
                self._in_flight = None

        if gen != self._latest:
            _log.debug("%s: stale listing of %s dropped", self.pane_id.value, path)
            return False
        if not res.success:
            self._set_state(replace(self._state, is_loading=False))
            self.notifier.error(t("pane.list_failed", path=path, error=res.error))
            return False

        entries = list(res.data or [])
        if not self.grammar.is_root(path):
            entries.insert(0, parent_entry(path))
        self._set_state(PaneState(
            current_path=path,
            entries=tuple(entries),
            is_loading=False,
            breadcrumbs=tuple(self.grammar.breadcrumbs(path)),
        ))
        if not skip_history and self.history.current != path:
            self.history.push(path)
        self.selection.prune(entries)
        if self.on_path_changed is not None:
            self.on_path_changed(self, path)
        return True

    # ---------- navigation ----------
    async def navigate(self, path: str) -> bool:
        return await self.load(path)

    async def navigate_up(self) -> bool:
        parent = self.grammar.parent(self.current_path)
        if parent is None:
            return False
        return await self.load(parent)

    async def navigate_breadcrumb(self, index: int) -> bool:
        path = self.grammar.from_breadcrumbs(self._state.breadcrumbs, index)
        if path is None:
            return False
        return await self.load(path)

    async def go_back(self) -> bool:
        path = self.history.back()
        if path is None:
            return False
        return await self.load(path, skip_history=True)

    async def go_forward(self) -> bool:
        path = self.history.forward()
        if path is None:
            return False
        return await self.load(path, skip_history=True)

    async def go_home(self) -> bool:
        return await self.load(self.grammar.home(self.current_path))

    async def refresh(self) -> bool:
        if not self.current_path:
            return False
        return await self.load(self.current_path, skip_history=True)

    async def open_entry(self, entry: Entry) -> bool:
        if entry.is_parent:
            return await self.navigate_up()
        if entry.is_dir:
            return await self.navigate(entry.path)
        # file viewing is handled outside the core
        _log.debug("open of file %s ignored", entry.path)
        return False
