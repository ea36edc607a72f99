from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Awaitable, Callable, List, Mapping, Optional, Sequence, Tuple

from twinpane.config.models import AppConfig
from twinpane.core.drag import TransferRequest
from twinpane.core.i18n import t
from twinpane.core.logging import get_logger
from twinpane.core.notifications import Notifier
from twinpane.core.pane import PaneController, PaneId
from twinpane.core.path_grammar import grammar_for
from twinpane.core.progress import ProgressTicker
from twinpane.core.transfer_queue import TransferQueue
from twinpane.services.file_ops import CommandResult, FileOperations
from twinpane.services.files_base import Entry

_log = get_logger("twinpane.executor")

# receives the item's progress callback, returns the backend result
_ItemCall = Callable[[Callable], Awaitable[CommandResult]]

_DONE = {"move": "transfer.moved", "download": "transfer.downloaded", "upload": "transfer.uploaded"}
_FAILED = {"move": "transfer.move_failed", "download": "transfer.download_failed", "upload": "transfer.upload_failed"}


@dataclass
class BatchResult:
    succeeded: List[str] = field(default_factory=list)
    failed: List[Tuple[str, str]] = field(default_factory=list)  # (path, error)

    @property
    def total(self) -> int:
        return len(self.succeeded) + len(self.failed)


@dataclass(frozen=True)
class _Rename:
    old_path: str
    new_path: str
    is_remote: bool


class TransferExecutor:
    """Runs file operations one item at a time and reports them.

    Every item goes through the transfer queue and ends with exactly one toast.
    Backend failures are isolated to their item; a batch never aborts early.
    """

    def __init__(
        self,
        ops: FileOperations,
        queue: TransferQueue,
        notifier: Notifier,
        panes: Mapping[PaneId, PaneController],
        config: Optional[AppConfig] = None,
    ):
        self.ops = ops
        self.queue = queue
        self.notifier = notifier
        self.panes = panes
        self.config = config or AppConfig()
        self._last_rename: Optional[_Rename] = None

    @property
    def can_undo(self) -> bool:
        return self._last_rename is not None

    # ---------- per-item plumbing ----------
    def _ticker(self, item_id: str, size: int) -> ProgressTicker:
        cfg = self.config
        return ProgressTicker(
            self.queue,
            item_id,
            duration=cfg.progress_duration_s,
            interval=cfg.progress_tick_s,
            ceiling=cfg.progress_ceiling,
            size=size,
        )

    def _is_open(self, item_id: str) -> bool:
        item = self.queue.get(item_id)
        return item is not None and not item.status.is_terminal

    async def _run_item(self, item_id: str, call: _ItemCall, size: int = 0, item_progress: bool = False) -> CommandResult:
        """start -> simulated progress -> backend call -> complete.

        The first real progress report stops the simulation. ``item_progress``
        selects the delete channel (``progress, done, total``) instead of
        ``progress, speed``.
        """
        self.queue.start(item_id)
        ticker = self._ticker(item_id, size).start()

        def on_transfer(progress: float, speed: str) -> None:
            ticker.stop()
            if self._is_open(item_id):
                self.queue.update_progress(item_id, progress, speed)

        def on_items(progress: float, done: int, total: int) -> None:
            ticker.stop()
            if self._is_open(item_id):
                self.queue.report_item_progress(progress, done, total)

        try:
            res = await call(on_items if item_progress else on_transfer)
        finally:
            ticker.stop()
        self.queue.complete(item_id, res.success, res.error)
        return res

    def _size_of(self, pane: PaneController, path: str) -> int:
        entry = pane.entry_for(path)
        return entry.size if entry is not None else 0

    async def _refresh(self, *pane_ids: PaneId) -> None:
        panes = [self.panes[p] for p in dict.fromkeys(pane_ids)]
        await asyncio.gather(*(p.refresh() for p in panes))

    # ---------- batches ----------
    async def run_batch(self, request: TransferRequest, move: bool = False) -> BatchResult:
        """Transfer ``request.source_paths`` strictly in order.

        Same provider is a rename; otherwise a download or upload, and with
        ``move`` the source is deleted after a successful transfer.
        """
        src_pane = self.panes[PaneId.for_remote(request.source_is_remote)]
        dst_pane = self.panes[PaneId.for_remote(request.dest_is_remote)]
        src_grammar = grammar_for(request.source_is_remote)
        dst_grammar = grammar_for(request.dest_is_remote)
        folder = request.dest_folder or dst_pane.current_path
        same_provider = request.source_is_remote == request.dest_is_remote
        uploading = request.dest_is_remote and not request.source_is_remote

        jobs = []
        for src in request.source_paths:
            name = src_grammar.basename(src)
            jobs.append((self.queue.enqueue(name), name, src, dst_grammar.join(folder, name)))

        result = BatchResult()
        for index, (item_id, name, src, dst) in enumerate(jobs):
            if src == dst:
                error = t("transfer.same_path")
                self.queue.complete(item_id, False, error)
                self.notifier.error(error)
                result.failed.append((src, error))
                continue

            if same_provider:
                kind = "move"
                call = lambda cb, s=src, d=dst: self.ops.rename(s, d, request.source_is_remote)
            elif move:
                kind = "move"
                call = lambda cb, s=src, d=dst: self.ops.move_across(s, d, request.source_is_remote, cb)
            elif request.source_is_remote:
                kind = "download"
                call = lambda cb, s=src, d=dst: self.ops.download(s, d, cb)
            else:
                kind = "upload"
                call = lambda cb, s=src, d=dst: self.ops.upload(s, d, cb)

            res = await self._run_item(item_id, call, size=self._size_of(src_pane, src))
            if res.success:
                result.succeeded.append(src)
                self.notifier.success(t(_DONE[kind], name=name))
            else:
                result.failed.append((src, res.error))
                self.notifier.error(t(_FAILED[kind], name=name, error=res.error))

            if index < len(jobs) - 1 and self.config.inter_item_delay_s > 0:
                await asyncio.sleep(self.config.inter_item_delay_s)

        if len(jobs) > 1:
            ok, failed = len(result.succeeded), len(result.failed)
            message = t("transfer.completed", ok=ok, failed=failed)
            if ok > 0:
                self.notifier.success(message)
            else:
                self.notifier.error(message)

        if same_provider:
            await self._refresh(src_pane.pane_id)
        else:
            await self._refresh(PaneId.LOCAL, PaneId.REMOTE)

        if uploading and result.succeeded:
            await self._verify_upload(folder, [src_grammar.basename(p) for p in result.succeeded])
        return result

    async def _verify_upload(self, folder: str, names: Sequence[str]) -> None:
        """Warn when none of the uploaded names shows up in the remote listing."""
        if self.config.upload_verify_delay_s > 0:
            await asyncio.sleep(self.config.upload_verify_delay_s)
        res = await self.ops.list(folder, True)
        if not res.success:
            _log.info("upload check skipped, listing failed: %s", res.error)
            return
        listed = {e.name for e in res.data or []}
        if not listed.intersection(names):
            self.notifier.warning(t("transfer.not_visible"))

    async def transfer_entries(self, entries: Sequence[Entry], source: PaneId, move: bool = False) -> BatchResult:
        """Send entries to the other pane's current folder (menu download / move)."""
        request = TransferRequest(
            dest_is_remote=source.other.is_remote,
            dest_folder=None,
            source_paths=tuple(e.path for e in entries if not e.is_parent),
            source_is_remote=source.is_remote,
        )
        return await self.run_batch(request, move=move)

    # ---------- delete ----------
    async def delete_entries(self, entries: Sequence[Entry], pane_id: PaneId) -> BatchResult:
        pane = self.panes[pane_id]
        result = BatchResult()
        targets = [e for e in entries if not e.is_parent]
        jobs = [(self.queue.enqueue(e.name), e) for e in targets]
        for item_id, entry in jobs:
            res = await self._run_item(
                item_id,
                lambda cb, p=entry.path: self.ops.delete(p, pane.is_remote, cb),
                item_progress=True,
            )
            if res.success:
                result.succeeded.append(entry.path)
            else:
                _log.warning("delete of %s failed: %s", entry.path, res.error)
                result.failed.append((entry.path, res.error))

        if result.succeeded:
            self.notifier.success(t("delete.done", count=len(result.succeeded)))
            await pane.refresh()
        if result.failed:
            self.notifier.error(t("delete.failed", count=len(result.failed)))
        return result

    # ---------- rename ----------
    async def rename(self, entry: Entry, new_name: str, pane_id: PaneId) -> bool:
        pane = self.panes[pane_id]
        new_name = (new_name or "").strip()
        if not new_name or new_name == entry.name or entry.is_parent:
            return False
        if new_name in (".", "..") or "/" in new_name or "\\" in new_name:
            self.notifier.error(t("rename.invalid", name=new_name))
            return False

        parent = pane.grammar.parent(entry.path) or pane.current_path
        new_path = pane.grammar.join(parent, new_name)
        item_id = self.queue.enqueue(entry.name)
        res = await self._run_item(item_id, lambda cb: self.ops.rename(entry.path, new_path, pane.is_remote))
        if not res.success:
            self.notifier.error(t("rename.failed", name=entry.name, error=res.error))
            return False
        self._last_rename = _Rename(old_path=entry.path, new_path=new_path, is_remote=pane.is_remote)
        self.notifier.success(t("rename.done", name=new_name))
        await pane.refresh()
        return True

    async def undo_rename(self) -> bool:
        last = self._last_rename
        if last is None:
            self.notifier.info(t("rename.nothing"))
            return False
        res = await self.ops.rename(last.new_path, last.old_path, last.is_remote)
        if not res.success:
            self.notifier.error(t("rename.undo_failed", error=res.error))
            return False
        self._last_rename = None
        self.notifier.success(t("rename.undo_done"))
        await self.panes[PaneId.for_remote(last.is_remote)].refresh()
        return True

    # ---------- create ----------
    async def create(self, name: str, pane_id: PaneId, directory: bool, open_after: bool = False) -> bool:
        pane = self.panes[pane_id]
        name = (name or "").strip()
        if not name:
            return False
        path = pane.grammar.join(pane.current_path, name)
        item_id = self.queue.enqueue(name)
        if directory:
            call = lambda cb: self.ops.create_directory(path, pane.is_remote)
        else:
            call = lambda cb: self.ops.create_file(path, pane.is_remote)
        res = await self._run_item(item_id, call)
        if not res.success:
            self.notifier.error(t("create.failed", name=name, error=res.error))
            return False
        self.notifier.success(t("create.dir_done" if directory else "create.file_done"))
        await pane.refresh()
        if directory and open_after:
            await pane.navigate(path)
        return True

    def show_properties(self, entry: Entry) -> None:
        size = entry.human_size or "-"
        self.notifier.info(t("props.summary", path=entry.path, size=size))
