from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Mapping, Optional

from twinpane.core.drag import DragController
from twinpane.core.executor import TransferExecutor
from twinpane.core.i18n import t
from twinpane.core.logging import get_logger
from twinpane.core.pane import PaneController, PaneId
from twinpane.core.selection import CURSOR_KEYS
from twinpane.services.files_base import Entry

_log = get_logger("twinpane.commands")

MOUSE_BACK = 3
MOUSE_FORWARD = 4


class Action(str, Enum):
    # on an entry
    OPEN = "open"
    DOWNLOAD = "download"
    MOVE = "move"
    RENAME = "rename"
    DELETE = "delete"
    PROPERTIES = "properties"
    # on the pane background
    REFRESH = "refresh"
    CREATE_DIR = "create_dir"
    CREATE_DIR_OPEN = "create_dir_open"
    CREATE_FILE = "create_file"
    UNDO_RENAME = "undo_rename"


ENTRY_ACTIONS = frozenset({
    Action.OPEN, Action.DOWNLOAD, Action.MOVE, Action.RENAME, Action.DELETE, Action.PROPERTIES,
})
BACKGROUND_ACTIONS = frozenset({
    Action.REFRESH, Action.CREATE_DIR, Action.CREATE_DIR_OPEN, Action.CREATE_FILE, Action.UNDO_RENAME,
})


@dataclass(frozen=True)
class KeyEvent:
    """Toolkit-neutral key press; ``key`` is a lower-case name like ``"f2"``."""

    key: str
    ctrl: bool = False
    shift: bool = False
    alt: bool = False


class Prompter:
    """Asks the user for input. The default answers are "cancel"."""

    async def ask_text(self, title: str, label: str, default: str = "") -> Optional[str]:
        return None

    async def confirm(self, title: str, message: str) -> bool:
        return False


class CommandDispatcher:
    """Maps menu actions, shortcuts and extra mouse buttons to operations."""

    def __init__(
        self,
        panes: Mapping[PaneId, PaneController],
        executor: TransferExecutor,
        drag: DragController,
        prompter: Optional[Prompter] = None,
        page_size: int = 10,
    ):
        self.panes = panes
        self.executor = executor
        self.drag = drag
        self.prompter = prompter or Prompter()
        self.page_size = page_size
        self.active_pane = PaneId.LOCAL

    def set_active(self, pane: PaneId) -> None:
        self.active_pane = PaneId(pane)

    def _targets(self, pane: PaneController, entry: Entry) -> List[Entry]:
        if entry.path in pane.selection and len(pane.selection) > 1:
            return pane.selected_entries()
        return [entry]

    # ---------- context menu ----------
    async def dispatch(self, action, entry: Optional[Entry] = None, pane: Optional[PaneId] = None) -> bool:
        action = Action(action)
        pane_id = PaneId(pane) if pane is not None else self.active_pane
        ctl = self.panes[pane_id]

        if action in ENTRY_ACTIONS:
            if entry is None:
                raise ValueError(f"{action.value} needs an entry")
            if entry.is_parent:
                if action is Action.OPEN:
                    return await ctl.navigate_up()
                _log.debug("%s on parent entry ignored", action.value)
                return False

        if action is Action.OPEN:
            return await ctl.open_entry(entry)
        if action is Action.DOWNLOAD:
            res = await self.executor.transfer_entries(self._targets(ctl, entry), pane_id)
            return not res.failed
        if action is Action.MOVE:
            res = await self.executor.transfer_entries([entry], pane_id, move=True)
            return not res.failed
        if action is Action.RENAME:
            return await self._rename(ctl, entry)
        if action is Action.DELETE:
            return await self._delete(ctl, self._targets(ctl, entry))
        if action is Action.PROPERTIES:
            self.executor.show_properties(entry)
            return True
        if action is Action.REFRESH:
            return await ctl.refresh()
        if action is Action.UNDO_RENAME:
            return await self.executor.undo_rename()

        directory = action is not Action.CREATE_FILE
        title = t("prompt.create_dir_title" if directory else "prompt.create_file_title")
        name = await self.prompter.ask_text(title, t("prompt.name_label"))
        if not name:
            return False
        return await self.executor.create(
            name, pane_id, directory=directory, open_after=action is Action.CREATE_DIR_OPEN
        )

    async def _rename(self, ctl: PaneController, entry: Entry) -> bool:
        name = await self.prompter.ask_text(t("prompt.rename_title"), t("prompt.rename_label"), entry.name)
        if not name:
            return False
        return await self.executor.rename(entry, name, ctl.pane_id)

    async def _delete(self, ctl: PaneController, entries: List[Entry]) -> bool:
        entries = [e for e in entries if not e.is_parent]
        if not entries:
            return False
        if not await self.prompter.confirm(t("prompt.delete_title"), t("prompt.delete_confirm", count=len(entries))):
            return False
        res = await self.executor.delete_entries(entries, ctl.pane_id)
        return not res.failed

    # ---------- keyboard ----------
    async def handle_key(self, event: KeyEvent) -> bool:
        """Run the shortcut bound to ``event`` on the active pane.

        Returns False when nothing is bound or the binding did not apply.
        """
        key = event.key.lower()
        ctl = self.panes[self.active_pane]

        if key == "escape":
            return self.drag.cancel()
        if event.alt and key in ("left", "right"):
            return await (ctl.go_back() if key == "left" else ctl.go_forward())
        if event.ctrl and key == "a":
            ctl.selection.select_all(ctl.visible_entries())
            return True
        if (event.ctrl and key == "z") or key == "insert":
            return await self.executor.undo_rename()
        if key == "f5":
            return await ctl.refresh()
        if key == "backspace":
            return await ctl.navigate_up()
        if key in CURSOR_KEYS:
            moved = ctl.selection.move_cursor(
                ctl.visible_entries(), key, extend=event.shift, page_size=self.page_size
            )
            return moved is not None

        selected = ctl.selected_entries()
        if key == "delete":
            return await self._delete(ctl, selected)
        if key == "f2":
            if len(selected) != 1:
                return False
            return await self._rename(ctl, selected[0])
        if key == "f3":
            if len(selected) != 1:
                return False
            self.executor.show_properties(selected[0])
            return True
        if key == "enter":
            cursor = ctl.selection.last
            target = next((e for e in ctl.visible_entries() if e.path == cursor), None)
            if target is None:
                return False
            return await ctl.open_entry(target)
        return False

    async def handle_mouse_button(self, button: int) -> bool:
        ctl = self.panes[self.active_pane]
        if button == MOUSE_BACK:
            return await ctl.go_back()
        if button == MOUSE_FORWARD:
            return await ctl.go_forward()
        return False
