from __future__ import annotations

from typing import Callable, List

from twinpane.core.logging import get_logger

_log = get_logger("twinpane.events")


class Observable:
    """Minimal listener registry for state owners.

    Listeners are called synchronously after every state replacement. A failing
    listener is logged and does not stop the others.
    """

    def __init__(self) -> None:
        self._listeners: List[Callable[[], None]] = []

    def subscribe(self, listener: Callable[[], None]) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            try:
                self._listeners.remove(listener)
            except ValueError:
                pass

        return _unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener()
            except Exception:
                _log.exception("listener failed")
