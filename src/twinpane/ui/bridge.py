from __future__ import annotations

from typing import Callable, List

from PySide6.QtCore import QObject, Signal

from twinpane.core.workspace import Workspace


class WorkspaceBridge(QObject):
    """Relays core state changes as Qt signals.

    Core listeners run synchronously on the loop thread, which under qasync is
    the GUI thread, so the signals can drive widgets directly.
    """

    paneChanged = Signal(str)  # pane id
    selectionChanged = Signal(str)  # pane id
    queueChanged = Signal()
    toastsChanged = Signal()
    dragChanged = Signal()

    def __init__(self, workspace: Workspace, parent=None):
        super().__init__(parent)
        self.workspace = workspace
        self._unsubscribe: List[Callable[[], None]] = []
        for pid, pane in workspace.panes.items():
            self._unsubscribe.append(pane.subscribe(lambda pid=pid: self.paneChanged.emit(pid.value)))
            self._unsubscribe.append(
                pane.selection.subscribe(lambda pid=pid: self.selectionChanged.emit(pid.value))
            )
        self._unsubscribe.append(workspace.queue.subscribe(self.queueChanged.emit))
        self._unsubscribe.append(workspace.notifier.subscribe(self.toastsChanged.emit))
        self._unsubscribe.append(workspace.drag.subscribe(self.dragChanged.emit))

    def detach(self) -> None:
        for unsubscribe in self._unsubscribe:
            unsubscribe()
        self._unsubscribe.clear()
