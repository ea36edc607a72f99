from __future__ import annotations

from typing import Optional

from twinpane.core.debug_support import log_exception_with_id, new_error_id
from twinpane.core.i18n import t


def show_exception(
    parent,
    *,
    exc: Optional[BaseException] = None,
    error_id: Optional[str] = None,
    area: str = "GEN",
) -> None:
    """Critical dialog for an exception that escaped a background task.

    Pass ``error_id`` when the exception has already been logged.
    """
    from PySide6.QtWidgets import QMessageBox

    if error_id is None:
        error_id = str(log_exception_with_id(area, exc) if exc is not None else new_error_id(area))
    msg = t("errors.unexpected_body", error_id=error_id, error=str(exc or ""))
    QMessageBox.critical(parent, t("errors.unexpected_title"), msg)
