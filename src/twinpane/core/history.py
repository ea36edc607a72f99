from __future__ import annotations

from typing import List, Optional, Tuple


class HistoryStack:
    """Back/forward log of visited paths for one pane (browser semantics)."""

    def __init__(self) -> None:
        self._stack: List[str] = []
        self._index = -1

    @property
    def stack(self) -> Tuple[str, ...]:
        return tuple(self._stack)

    @property
    def index(self) -> int:
        return self._index

    @property
    def current(self) -> Optional[str]:
        if 0 <= self._index < len(self._stack):
            return self._stack[self._index]
        return None

    def can_go_back(self) -> bool:
        return self._index > 0

    def can_go_forward(self) -> bool:
        return self._index < len(self._stack) - 1

    def push(self, path: str) -> None:
        """Record a fresh navigation; forward history is discarded."""
        del self._stack[self._index + 1:]
        self._stack.append(path)
        self._index = len(self._stack) - 1

    def back(self) -> Optional[str]:
        if not self.can_go_back():
            return None
        self._index -= 1
        return self._stack[self._index]

    def forward(self) -> Optional[str]:
        if not self.can_go_forward():
            return None
        self._index += 1
        return self._stack[self._index]

    def clear(self) -> None:
        self._stack.clear()
        self._index = -1
