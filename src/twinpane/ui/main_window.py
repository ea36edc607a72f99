from __future__ import annotations

from PySide6.QtCore import Qt
from PySide6.QtGui import QCursor
from PySide6.QtWidgets import (
    QApplication,
    QLabel,
    QMainWindow,
    QProgressBar,
    QPushButton,
    QSplitter,
)

from twinpane import __version__
from twinpane.core.i18n import t
from twinpane.core.notifications import ToastLevel
from twinpane.core.pane import PaneId
from twinpane.core.ui_errors import show_exception
from twinpane.core.workspace import Workspace
from twinpane.ui.bridge import WorkspaceBridge
from twinpane.ui.pane_widget import PaneWidget

_TOAST_COLORS = {
    ToastLevel.SUCCESS: "#2e7d32",
    ToastLevel.ERROR: "#c62828",
    ToastLevel.WARNING: "#ef6c00",
    ToastLevel.INFO: "#1565c0",
}


class MainWindow(QMainWindow):
    def __init__(self, workspace: Workspace):
        super().__init__()
        self.workspace = workspace
        self._shutdown_done = False
        self.setWindowTitle(f"{t('app.title')} {__version__}")
        self.resize(1200, 720)

        self.panes = {
            PaneId.LOCAL: PaneWidget(workspace, PaneId.LOCAL, self),
            PaneId.REMOTE: PaneWidget(workspace, PaneId.REMOTE, self),
        }
        splitter = QSplitter(Qt.Orientation.Horizontal)
        for w in self.panes.values():
            splitter.addWidget(w)
        self.setCentralWidget(splitter)

        sb = self.statusBar()
        self.lbl_toast = QLabel("")
        self.lbl_current = QLabel(t("status.idle"))
        self.progress = QProgressBar()
        self.progress.setRange(0, 100)
        self.progress.setMaximumWidth(180)
        self.progress.setVisible(False)
        self.lbl_counts = QLabel("")
        self.btn_clear = QPushButton(t("app.clear"))
        self.btn_clear.clicked.connect(workspace.clear_completed_transfers)
        sb.addWidget(self.lbl_toast, 1)
        sb.addPermanentWidget(self.lbl_current)
        sb.addPermanentWidget(self.progress)
        sb.addPermanentWidget(self.lbl_counts)
        sb.addPermanentWidget(self.btn_clear)

        self.bridge = WorkspaceBridge(workspace, self)
        self.bridge.paneChanged.connect(self._on_pane_changed)
        self.bridge.selectionChanged.connect(self._on_selection_changed)
        self.bridge.queueChanged.connect(self._on_queue_changed)
        self.bridge.toastsChanged.connect(self._on_toasts_changed)
        self.bridge.dragChanged.connect(self._on_drag_changed)
        workspace.on_task_error = self._on_task_error

        self._on_queue_changed()
        for w in self.panes.values():
            w.render_listing()

    def publish_geometry(self) -> None:
        index = self.workspace.hit_index
        index.clear()
        for w in self.panes.values():
            w.publish_geometry(index)

    # ---------- slots ----------
    def _on_pane_changed(self, pane: str) -> None:
        self.panes[PaneId(pane)].render_listing()

    def _on_selection_changed(self, pane: str) -> None:
        self.panes[PaneId(pane)].render_selection()

    def _on_queue_changed(self) -> None:
        q = self.workspace.queue
        self.lbl_counts.setText(t(
            "status.counts",
            queued=q.queued_count + q.transferring_count,
            success=q.success_count,
            failed=q.failed_count,
        ))
        cur = q.current
        if cur is None:
            self.lbl_current.setText(t("status.idle"))
            self.progress.setVisible(False)
            return
        self.lbl_current.setText(f"{cur.file_name}  {cur.speed}")
        self.progress.setVisible(True)
        self.progress.setValue(int(cur.progress))

    def _on_toasts_changed(self) -> None:
        visible = self.workspace.notifier.visible
        if not visible:
            self.lbl_toast.setText("")
            return
        toast = visible[-1]
        self.lbl_toast.setStyleSheet(f"color: {_TOAST_COLORS[toast.level]};")
        self.lbl_toast.setText(toast.message)

    def _on_drag_changed(self) -> None:
        dragging = self.workspace.drag.is_dragging
        if dragging and QApplication.overrideCursor() is None:
            QApplication.setOverrideCursor(QCursor(Qt.CursorShape.DragMoveCursor))
        elif not dragging and QApplication.overrideCursor() is not None:
            QApplication.restoreOverrideCursor()

    def _on_task_error(self, exc: BaseException, error_id: str) -> None:
        show_exception(self, exc=exc, error_id=error_id)

    # ---------- shutdown ----------
    def graceful_shutdown(self) -> None:
        """Idempotent; called from closeEvent and QApplication.aboutToQuit."""
        if self._shutdown_done:
            return
        self._shutdown_done = True
        self.bridge.detach()
        self.workspace.close()

    def closeEvent(self, event) -> None:  # type: ignore[override]
        self.graceful_shutdown()
        super().closeEvent(event)
