from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from PySide6.QtCore import QPoint, Qt
from PySide6.QtGui import QBrush, QKeyEvent, QMouseEvent
from PySide6.QtWidgets import (
    QHBoxLayout,
    QLineEdit,
    QMenu,
    QPushButton,
    QStyle,
    QToolButton,
    QTreeWidget,
    QTreeWidgetItem,
    QVBoxLayout,
    QWidget,
)

from twinpane.core.commands import Action, KeyEvent
from twinpane.core.drag import HitTestIndex, PointerEvent, Rect
from twinpane.core.i18n import t
from twinpane.core.pane import PaneId
from twinpane.core.workspace import Workspace
from twinpane.services.files_base import Entry

if TYPE_CHECKING:
    from twinpane.ui.main_window import MainWindow

_KEY_NAMES = {
    Qt.Key.Key_Up: "up",
    Qt.Key.Key_Down: "down",
    Qt.Key.Key_Left: "left",
    Qt.Key.Key_Right: "right",
    Qt.Key.Key_Home: "home",
    Qt.Key.Key_End: "end",
    Qt.Key.Key_PageUp: "page_up",
    Qt.Key.Key_PageDown: "page_down",
    Qt.Key.Key_Return: "enter",
    Qt.Key.Key_Enter: "enter",
    Qt.Key.Key_Backspace: "backspace",
    Qt.Key.Key_Delete: "delete",
    Qt.Key.Key_Insert: "insert",
    Qt.Key.Key_Escape: "escape",
    Qt.Key.Key_F2: "f2",
    Qt.Key.Key_F3: "f3",
    Qt.Key.Key_F5: "f5",
    Qt.Key.Key_A: "a",
    Qt.Key.Key_Z: "z",
}

_ENTRY_MENU = (Action.OPEN, Action.DOWNLOAD, Action.MOVE, Action.RENAME, Action.DELETE, Action.PROPERTIES)
_BACKGROUND_MENU = (Action.REFRESH, Action.CREATE_DIR, Action.CREATE_DIR_OPEN, Action.CREATE_FILE, Action.UNDO_RENAME)


def _pointer(event: QMouseEvent) -> PointerEvent:
    # global coordinates: both panes share one hit-test space
    gp = event.globalPosition()
    mods = event.modifiers()
    return PointerEvent(
        x=gp.x(),
        y=gp.y(),
        button=0 if event.button() in (Qt.MouseButton.LeftButton, Qt.MouseButton.NoButton) else 1,
        ctrl=bool(mods & Qt.KeyboardModifier.ControlModifier),
        shift=bool(mods & Qt.KeyboardModifier.ShiftModifier),
    )


class _PaneTree(QTreeWidget):
    """Listing view; forwards raw pointer and key input to the workspace."""

    def __init__(self, panel: "PaneWidget"):
        super().__init__()
        self._panel = panel
        self.setColumnCount(3)
        self.setHeaderLabels([t("columns.name"), t("columns.size"), t("columns.modified")])
        self.setRootIsDecorated(False)
        self.setUniformRowHeights(True)
        self.setSelectionMode(QTreeWidget.SelectionMode.NoSelection)
        self.setContextMenuPolicy(Qt.ContextMenuPolicy.CustomContextMenu)

    def entry_at(self, pos: QPoint) -> Optional[Entry]:
        item = self.itemAt(pos)
        return item.data(0, Qt.ItemDataRole.UserRole) if item is not None else None

    def mousePressEvent(self, event: QMouseEvent) -> None:  # type: ignore[override]
        ws = self._panel.workspace
        btn = event.button()
        if btn == Qt.MouseButton.BackButton:
            ws.mouse_button(3)
            return
        if btn == Qt.MouseButton.ForwardButton:
            ws.mouse_button(4)
            return
        entry = self.entry_at(event.position().toPoint())
        if btn == Qt.MouseButton.LeftButton:
            self.setFocus()
            self._panel.window_owner.publish_geometry()
            ws.begin_drag(self._panel.pane_id, _pointer(event), entry)
            return
        ws.set_active_pane(self._panel.pane_id)
        if btn == Qt.MouseButton.RightButton and entry is not None and not entry.is_parent:
            if entry.path not in ws.pane(self._panel.pane_id).selection:
                ws.select_only(self._panel.pane_id, entry)
        super().mousePressEvent(event)

    def mouseMoveEvent(self, event: QMouseEvent) -> None:  # type: ignore[override]
        self._panel.workspace.pointer_move(_pointer(event))

    def mouseReleaseEvent(self, event: QMouseEvent) -> None:  # type: ignore[override]
        if event.button() == Qt.MouseButton.LeftButton:
            self._panel.workspace.pointer_up(_pointer(event))
            return
        super().mouseReleaseEvent(event)

    def mouseDoubleClickEvent(self, event: QMouseEvent) -> None:  # type: ignore[override]
        entry = self.entry_at(event.position().toPoint())
        if entry is not None and event.button() == Qt.MouseButton.LeftButton:
            self._panel.run(Action.OPEN, entry)

    def keyPressEvent(self, event: QKeyEvent) -> None:  # type: ignore[override]
        name = _KEY_NAMES.get(Qt.Key(event.key()))
        if name is None:
            super().keyPressEvent(event)
            return
        mods = event.modifiers()
        ws = self._panel.workspace
        ws.set_active_pane(self._panel.pane_id)
        ws.key_press(KeyEvent(
            key=name,
            ctrl=bool(mods & Qt.KeyboardModifier.ControlModifier),
            shift=bool(mods & Qt.KeyboardModifier.ShiftModifier),
            alt=bool(mods & Qt.KeyboardModifier.AltModifier),
        ))

    def focusInEvent(self, event) -> None:  # type: ignore[override]
        self._panel.workspace.set_active_pane(self._panel.pane_id)
        super().focusInEvent(event)


class PaneWidget(QWidget):
    def __init__(self, workspace: Workspace, pane_id: PaneId, owner: "MainWindow"):
        super().__init__(owner)
        self.workspace = workspace
        self.pane_id = pane_id
        self.window_owner = owner
        self.controller = workspace.pane(pane_id)

        nav = QHBoxLayout()
        self.btn_back = self._tool(QStyle.StandardPixmap.SP_ArrowBack, t("nav.back"), self.workspace.go_back)
        self.btn_forward = self._tool(QStyle.StandardPixmap.SP_ArrowForward, t("nav.forward"), self.workspace.go_forward)
        self.btn_up = self._tool(QStyle.StandardPixmap.SP_FileDialogToParent, t("nav.up"), self.workspace.navigate_up)
        self.btn_home = self._tool(QStyle.StandardPixmap.SP_DirHomeIcon, t("nav.home"), self.workspace.go_home)
        self.btn_refresh = self._tool(QStyle.StandardPixmap.SP_BrowserReload, t("menu.refresh"), self.workspace.refresh)
        for b in (self.btn_back, self.btn_forward, self.btn_up, self.btn_home, self.btn_refresh):
            nav.addWidget(b)
        self.crumbs = QHBoxLayout()
        self.crumbs.setSpacing(0)
        nav.addLayout(self.crumbs, 1)
        self.filter = QLineEdit()
        self.filter.setPlaceholderText(t("nav.filter"))
        self.filter.setClearButtonEnabled(True)
        self.filter.textChanged.connect(self.controller.set_filter)
        nav.addWidget(self.filter)

        self.tree = _PaneTree(self)
        self.tree.customContextMenuRequested.connect(self._context_menu)

        lay = QVBoxLayout(self)
        lay.setContentsMargins(0, 0, 0, 0)
        lay.addLayout(nav)
        lay.addWidget(self.tree, 1)

    def _tool(self, icon, tip: str, handler) -> QToolButton:
        b = QToolButton()
        b.setIcon(self.style().standardIcon(icon))
        b.setToolTip(tip)
        b.clicked.connect(lambda: self.workspace.spawn(handler(self.pane_id)))
        return b

    def run(self, action: Action, entry: Optional[Entry] = None) -> None:
        self.workspace.spawn(self.workspace.dispatch_command(action, entry, self.pane_id))

    # ---------- rendering ----------
    def render_listing(self) -> None:
        state = self.controller.state
        self.tree.clear()
        for entry in self.controller.visible_entries():
            item = QTreeWidgetItem([entry.name, entry.human_size, "" if entry.is_parent else entry.human_modified])
            icon = QStyle.StandardPixmap.SP_DirIcon if entry.is_dir else QStyle.StandardPixmap.SP_FileIcon
            item.setIcon(0, self.style().standardIcon(icon))
            item.setData(0, Qt.ItemDataRole.UserRole, entry)
            self.tree.addTopLevelItem(item)
        self.tree.resizeColumnToContents(0)
        self._render_breadcrumbs(state.breadcrumbs)
        self.btn_back.setEnabled(self.controller.history.can_go_back())
        self.btn_forward.setEnabled(self.controller.history.can_go_forward())
        self.tree.setEnabled(not state.is_loading or bool(state.entries))
        self.render_selection()

    def render_selection(self) -> None:
        selection = self.controller.selection
        highlight = self.palette().highlight()
        for i in range(self.tree.topLevelItemCount()):
            item = self.tree.topLevelItem(i)
            entry: Entry = item.data(0, Qt.ItemDataRole.UserRole)
            brush = highlight if entry.path in selection and not entry.is_parent else QBrush()
            for col in range(self.tree.columnCount()):
                item.setBackground(col, brush)

    def _render_breadcrumbs(self, crumbs) -> None:
        while self.crumbs.count():
            w = self.crumbs.takeAt(0).widget()
            if w is not None:
                w.deleteLater()
        for index, crumb in enumerate(crumbs):
            b = QPushButton(crumb + " /")
            b.setFlat(True)
            b.clicked.connect(lambda _=False, i=index: self.workspace.spawn(
                self.workspace.navigate_breadcrumb(self.pane_id, i)
            ))
            self.crumbs.addWidget(b)
        self.crumbs.addStretch(1)

    def publish_geometry(self, index: HitTestIndex) -> None:
        vp = self.tree.viewport()
        origin = vp.mapToGlobal(QPoint(0, 0))
        index.set_pane(self.pane_id, Rect(origin.x(), origin.y(), vp.width(), vp.height()))
        rows = []
        for i in range(self.tree.topLevelItemCount()):
            item = self.tree.topLevelItem(i)
            r = self.tree.visualItemRect(item)
            if not r.isValid() or r.bottom() < 0 or r.top() > vp.height():
                continue
            rows.append((
                Rect(origin.x() + r.x(), origin.y() + r.y(), r.width(), r.height()),
                item.data(0, Qt.ItemDataRole.UserRole),
            ))
        index.set_rows(self.pane_id, rows)

    # ---------- context menu ----------
    def _context_menu(self, pos: QPoint) -> None:
        entry = self.tree.entry_at(pos)
        menu = QMenu(self)
        if entry is not None and not entry.is_parent:
            for action in _ENTRY_MENU:
                key = "menu.upload" if action is Action.DOWNLOAD and not self.pane_id.is_remote else f"menu.{action.value}"
                menu.addAction(t(key), lambda a=action: self.run(a, entry))
        else:
            for action in _BACKGROUND_MENU:
                menu.addAction(t(f"menu.{action.value}"), lambda a=action: self.run(a))
        menu.exec(self.tree.viewport().mapToGlobal(pos))
