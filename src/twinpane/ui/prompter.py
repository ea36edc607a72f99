from __future__ import annotations

import asyncio
from typing import Optional

from PySide6.QtWidgets import QDialog, QInputDialog, QLineEdit, QMessageBox, QWidget

from twinpane.core.commands import Prompter


class QtPrompter(Prompter):
    """Window-modal dialogs awaited as futures (no nested event loop)."""

    def __init__(self, parent: Optional[QWidget] = None):
        self.parent = parent

    async def ask_text(self, title: str, label: str, default: str = "") -> Optional[str]:
        fut: asyncio.Future = asyncio.get_running_loop().create_future()
        dlg = QInputDialog(self.parent)
        dlg.setWindowTitle(title)
        dlg.setLabelText(label)
        dlg.setTextEchoMode(QLineEdit.EchoMode.Normal)
        dlg.setTextValue(default)

        def _done(code: int) -> None:
            if not fut.done():
                fut.set_result(dlg.textValue() if code == QDialog.DialogCode.Accepted.value else None)
            dlg.deleteLater()

        dlg.finished.connect(_done)
        dlg.open()
        return await fut

    async def confirm(self, title: str, message: str) -> bool:
        fut: asyncio.Future = asyncio.get_running_loop().create_future()
        box = QMessageBox(QMessageBox.Icon.Question, title, message, parent=self.parent)
        box.setStandardButtons(QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No)
        box.setDefaultButton(QMessageBox.StandardButton.No)

        def _done(_code: int) -> None:
            if not fut.done():
                fut.set_result(box.result() == QMessageBox.StandardButton.Yes.value)
            box.deleteLater()

        box.finished.connect(_done)
        box.open()
        return await fut
