from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Callable, Generic, List, Optional, Tuple, TypeVar

from twinpane.core.debug_support import log_exception_with_id
from twinpane.core.logging import get_logger
from twinpane.core.path_grammar import PathGrammar, grammar_for
from twinpane.services.files_base import DeleteProgress, Entry, FilesBackend, TransferProgress

T = TypeVar("T")

_log = get_logger("twinpane.ops")


@dataclass(frozen=True)
class CommandResult(Generic[T]):
    """Uniform outcome of every backend call."""

    success: bool
    data: Optional[T] = None
    error: Optional[str] = None

    @classmethod
    def ok(cls, data: Optional[T] = None) -> "CommandResult[T]":
        return cls(True, data, None)

    @classmethod
    def fail(cls, error: str) -> "CommandResult[T]":
        return cls(False, None, error or "Unknown error")


# (backend, path grammar) pair for one side of a copy
_Side = Tuple[FilesBackend, PathGrammar]


def _copy_tree(src: _Side, src_path: str, dst: _Side, dst_path: str, progress: Optional[TransferProgress]) -> None:
    src_be, _ = src
    dst_be, dst_grammar = dst
    if src_be.is_dir(src_path):
        if src_be.is_link(src_path):
            # a linked directory may point back up the tree
            _log.info("Skipping linked directory %s", src_path)
            return
        if not dst_be.is_dir(dst_path):
            dst_be.mkdir(dst_path)
        for entry in src_be.listdir_entries(src_path):
            _copy_tree(src, entry.path, dst, dst_grammar.join(dst_path, entry.name), progress)
        return
    if src_be.is_local_fs and not dst_be.is_local_fs:
        dst_be.upload(src_path, dst_path, progress)
    elif dst_be.is_local_fs and not src_be.is_local_fs:
        src_be.download(src_path, dst_path, progress)
    else:
        dst_be.write_bytes(dst_path, src_be.read_bytes(src_path))
        if progress:
            progress(100.0, "Done")


class FileOperations:
    """Async facade over the local and remote backends.

    Each backend call runs in a worker thread; exceptions never escape and are
    turned into ``CommandResult.fail``. Progress callbacks are delivered on the
    event loop thread.
    """

    def __init__(self, local: FilesBackend, remote: Optional[FilesBackend] = None):
        self.local = local
        self.remote = remote

    @property
    def has_remote(self) -> bool:
        return self.remote is not None

    def set_remote(self, backend: Optional[FilesBackend]) -> None:
        old, self.remote = self.remote, backend
        if old is not None and old is not backend:
            old.close()

    def backend(self, is_remote: bool) -> FilesBackend:
        if not is_remote:
            return self.local
        if self.remote is None:
            raise RuntimeError("Not connected")
        return self.remote

    def _side(self, is_remote: bool) -> _Side:
        return self.backend(is_remote), grammar_for(is_remote)

    async def _call(self, area: str, fn: Callable[..., T], *args) -> CommandResult[T]:
        try:
            data = await asyncio.to_thread(fn, *args)
        except Exception as exc:
            err_id = log_exception_with_id(area, exc, logger_name="twinpane.ops")
            _log.debug("%s failed (%s)", area, err_id)
            return CommandResult.fail(str(exc) or type(exc).__name__)
        return CommandResult.ok(data)

    @staticmethod
    def _on_loop(cb: Optional[Callable]) -> Optional[Callable]:
        if cb is None:
            return None
        loop = asyncio.get_running_loop()

        def _relay(*args) -> None:
            loop.call_soon_threadsafe(cb, *args)

        return _relay

    # ---------- single-provider operations ----------
    async def list(self, path: str, is_remote: bool) -> CommandResult[List[Entry]]:
        return await self._call("LIST", lambda: self.backend(is_remote).listdir_entries(path))

    async def read_text(self, path: str, is_remote: bool) -> CommandResult[str]:
        return await self._call("READ", lambda: self.backend(is_remote).read_text(path))

    async def read_bytes(self, path: str, is_remote: bool) -> CommandResult[bytes]:
        return await self._call("READ", lambda: self.backend(is_remote).read_bytes(path))

    async def write_text(self, path: str, content: str, is_remote: bool) -> CommandResult[None]:
        return await self._call("WRITE", lambda: self.backend(is_remote).write_text(path, content))

    async def stat(self, path: str, is_remote: bool) -> CommandResult[Tuple[int, int]]:
        return await self._call("STAT", lambda: self.backend(is_remote).stat(path))

    async def delete(self, path: str, is_remote: bool, on_progress: Optional[DeleteProgress] = None) -> CommandResult[None]:
        relay = self._on_loop(on_progress)

        def _delete() -> None:
            be = self.backend(is_remote)
            be.remove(path, recursive=be.is_dir(path) and not be.is_link(path), progress=relay)

        return await self._call("DELETE", _delete)

    async def rename(self, old_path: str, new_path: str, is_remote: bool) -> CommandResult[None]:
        return await self._call("RENAME", lambda: self.backend(is_remote).rename(old_path, new_path))

    async def create_file(self, path: str, is_remote: bool) -> CommandResult[None]:
        return await self._call("CREATE", lambda: self.backend(is_remote).create_file(path))

    async def create_directory(self, path: str, is_remote: bool) -> CommandResult[None]:
        return await self._call("MKDIR", lambda: self.backend(is_remote).mkdir(path))

    # ---------- cross-provider operations ----------
    async def upload(self, local_path: str, remote_path: str, on_progress: Optional[TransferProgress] = None) -> CommandResult[None]:
        relay = self._on_loop(on_progress)
        return await self._call(
            "UPLOAD", lambda: _copy_tree(self._side(False), local_path, self._side(True), remote_path, relay)
        )

    async def download(self, remote_path: str, local_path: str, on_progress: Optional[TransferProgress] = None) -> CommandResult[None]:
        relay = self._on_loop(on_progress)
        return await self._call(
            "DOWNLOAD", lambda: _copy_tree(self._side(True), remote_path, self._side(False), local_path, relay)
        )

    async def move_across(
        self,
        src_path: str,
        dst_path: str,
        is_remote_source: bool,
        on_progress: Optional[TransferProgress] = None,
    ) -> CommandResult[None]:
        """Transfer to the other provider, then delete the source."""
        if is_remote_source:
            res = await self.download(src_path, dst_path, on_progress)
        else:
            res = await self.upload(src_path, dst_path, on_progress)
        if not res.success:
            return res
        return await self.delete(src_path, is_remote_source)

    def close(self) -> None:
        self.local.close()
        if self.remote is not None:
            self.remote.close()
