"""Shared test helpers: fast config, scripted prompts, mock-backed workspaces."""

from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from twinpane.config.models import AppConfig
from twinpane.core.commands import Prompter
from twinpane.core.drag import Rect
from twinpane.core.pane import PaneId
from twinpane.core.workspace import Workspace
from twinpane.services.file_ops import FileOperations
from twinpane.services.files_base import Entry
from twinpane.services.files_mock import MockFilesBackend

LOCAL_RECT = Rect(0, 0, 400, 600)
REMOTE_RECT = Rect(400, 0, 400, 600)
ROW_HEIGHT = 20


def fast_config(**overrides) -> AppConfig:
    cfg = AppConfig(
        progress_tick_s=0.005,
        progress_duration_s=0.05,
        current_transfer_grace_s=0.0,
        toast_ttl_s=0.0,
        inter_item_delay_s=0.0,
        upload_verify_delay_s=0.0,
    )
    for k, v in overrides.items():
        setattr(cfg, k, v)
    return cfg


class ScriptedPrompter(Prompter):
    def __init__(self, texts: Optional[List[Optional[str]]] = None, confirm: bool = True):
        self.texts = list(texts or [])
        self.answer = confirm
        self.asked: List[Tuple[str, str, str]] = []
        self.confirmations: List[str] = []

    async def ask_text(self, title: str, label: str, default: str = "") -> Optional[str]:
        self.asked.append((title, label, default))
        return self.texts.pop(0) if self.texts else None

    async def confirm(self, title: str, message: str) -> bool:
        self.confirmations.append(message)
        return self.answer


def make_workspace(
    local_files: Optional[Dict[str, object]] = None,
    remote_files: Optional[Dict[str, object]] = None,
    *,
    local_dirs=("C:/",),
    remote_dirs=(),
    prompter: Optional[Prompter] = None,
    clock=None,
    **cfg,
) -> Tuple[Workspace, MockFilesBackend, MockFilesBackend]:
    local = MockFilesBackend(local_files, dirs=local_dirs)
    remote = MockFilesBackend(remote_files, dirs=remote_dirs)
    kwargs = {"clock": clock} if clock is not None else {}
    ws = Workspace(FileOperations(local, remote), fast_config(**cfg), prompter, **kwargs)
    return ws, local, remote


def publish_rows(ws: Workspace) -> None:
    """Lay both panes out side by side, one row per visible entry."""
    ws.hit_index.set_pane(PaneId.LOCAL, LOCAL_RECT)
    ws.hit_index.set_pane(PaneId.REMOTE, REMOTE_RECT)
    for pane, rect in ((PaneId.LOCAL, LOCAL_RECT), (PaneId.REMOTE, REMOTE_RECT)):
        rows = [
            (Rect(rect.left, i * ROW_HEIGHT, rect.width, ROW_HEIGHT), e)
            for i, e in enumerate(ws.visible_entries(pane))
        ]
        ws.hit_index.set_rows(pane, rows)


def row_center(ws: Workspace, pane: PaneId, name: str) -> Tuple[float, float]:
    rect = LOCAL_RECT if pane is PaneId.LOCAL else REMOTE_RECT
    for i, e in enumerate(ws.visible_entries(pane)):
        if e.name == name:
            return rect.left + 10, i * ROW_HEIGHT + ROW_HEIGHT / 2
    raise KeyError(name)


def entry(ws: Workspace, pane: PaneId, name: str) -> Entry:
    for e in ws.visible_entries(pane):
        if e.name == name:
            return e
    raise KeyError(name)
