from __future__ import annotations

from typing import Dict, List, Optional, Sequence

from twinpane.core.events import Observable
from twinpane.services.files_base import Entry

CURSOR_KEYS = ("up", "down", "home", "end", "page_up", "page_down")


class SelectionModel(Observable):
    """Selected entry paths of one pane, in the order they were selected.

    The last selected path acts as the keyboard cursor. The synthetic ``..``
    row can end up selected through keyboard navigation; callers that want
    transferable items use :meth:`selected_entries`.
    """

    def __init__(self) -> None:
        super().__init__()
        self._paths: Dict[str, None] = {}

    # ---------- queries ----------
    @property
    def paths(self) -> List[str]:
        return list(self._paths)

    def __len__(self) -> int:
        return len(self._paths)

    def __contains__(self, path: object) -> bool:
        return path in self._paths

    @property
    def last(self) -> Optional[str]:
        return next(reversed(self._paths), None) if self._paths else None

    def selected_entries(self, entries: Sequence[Entry]) -> List[Entry]:
        """Selected, non-parent entries in listing order."""
        return [e for e in entries if not e.is_parent and e.path in self._paths]

    # ---------- mutations ----------
    def _replace(self, paths: Sequence[str]) -> None:
        new = dict.fromkeys(paths)
        if list(new) == list(self._paths):
            return
        self._paths = new
        self._notify()

    def select_only(self, path: str) -> None:
        self._replace([path])

    def toggle(self, path: str) -> None:
        if path in self._paths:
            self._replace([p for p in self._paths if p != path])
        else:
            self._replace([*self._paths, path])

    def add(self, path: str) -> None:
        self._replace([*(p for p in self._paths if p != path), path])

    def select_all(self, entries: Sequence[Entry]) -> None:
        self._replace([e.path for e in entries if not e.is_parent])

    def select_range(self, entries: Sequence[Entry], target: str) -> None:
        """Shift-click: select everything between the cursor and ``target``."""
        order = [e.path for e in entries if not e.is_parent]
        if target not in order:
            return
        anchor = self.last if self.last in order else target
        i, j = order.index(anchor), order.index(target)
        lo, hi = min(i, j), max(i, j)
        span = order[lo:hi + 1]
        if j < i:
            span.reverse()
        self._replace(span)

    def clear(self) -> None:
        self._replace([])

    def prune(self, entries: Sequence[Entry]) -> None:
        """Drop selections that are no longer part of the listing."""
        present = {e.path for e in entries}
        self._replace([p for p in self._paths if p in present])

    # ---------- pointer ----------
    def pointer_down(self, entry: Entry, ctrl: bool = False) -> None:
        if entry.is_parent:
            return
        if ctrl:
            self.toggle(entry.path)
        elif entry.path not in self._paths:
            self.select_only(entry.path)
        # already selected: keep a multi-selection intact, it may be dragged

    def click(self, entry: Entry, ctrl: bool = False) -> None:
        """Pointer released without a drag."""
        if entry.is_parent or ctrl:
            return
        if len(self._paths) > 1 and entry.path in self._paths:
            self.select_only(entry.path)

    # ---------- keyboard ----------
    def move_cursor(self, entries: Sequence[Entry], key: str, extend: bool = False, page_size: int = 10) -> Optional[Entry]:
        """Move the cursor inside the visible listing.

        Plain moves replace the selection with one entry; ``extend`` (Shift with
        up/down) adds the next/previous entry instead.
        """
        if key not in CURSOR_KEYS:
            raise ValueError(f"not a cursor key: {key}")
        if not entries:
            return None
        n = len(entries)
        current = -1
        last = self.last
        if last is not None:
            for i, e in enumerate(entries):
                if e.path == last:
                    current = i
                    break

        if key == "down":
            idx = min(current + 1, n - 1)
        elif key == "up":
            idx = max(current - 1, 0)
        elif key == "home":
            idx = 0
        elif key == "end":
            idx = n - 1
        elif key == "page_down":
            idx = min(max(current, 0) + page_size, n - 1)
        else:
            idx = max(current - page_size, 0)

        target = entries[idx]
        if extend and key in ("up", "down") and current >= 0 and not target.is_parent:
            self.add(target.path)
        else:
            self.select_only(target.path)
        return target
