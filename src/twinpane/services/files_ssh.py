from __future__ import annotations

import stat as pystat
from typing import List, Optional, Tuple

from twinpane.core.formatting import SpeedMeter
from twinpane.core.path_grammar import POSIX
from twinpane.services.files_base import DeleteProgress, Entry, FilesBackend, TransferProgress, sort_entries
from twinpane.ssh.client import SSHClientWrapper


class SSHFilesBackend(FilesBackend):
    def __init__(self, ssh: SSHClientWrapper):
        if not ssh.sftp:
            raise RuntimeError("SFTP not available")
        self.ssh = ssh

    @property
    def sftp(self):
        return self.ssh.sftp

    def listdir_entries(self, remote_dir: str) -> List[Entry]:
        entries: List[Entry] = []
        for attr in self.sftp.listdir_attr(remote_dir):
            name = getattr(attr, "filename", "") or ""
            mode = getattr(attr, "st_mode", 0) or 0
            is_dir = pystat.S_ISDIR(mode)
            entries.append(Entry(
                name=name,
                path=POSIX.join(remote_dir, name),
                is_dir=is_dir,
                size=0 if is_dir else int(getattr(attr, "st_size", 0) or 0),
                mtime=int(getattr(attr, "st_mtime", 0) or 0),
                mode=mode,
            ))
        return sort_entries(entries)

    def read_bytes(self, remote_path: str) -> bytes:
        with self.sftp.open(remote_path, "rb") as f:
            return f.read()

    def write_bytes(self, remote_path: str, data: bytes) -> None:
        with self.sftp.open(remote_path, "wb") as f:
            f.write(data)

    def stat(self, remote_path: str) -> Tuple[int, int]:
        st = self.sftp.stat(remote_path)
        return int(getattr(st, "st_size", 0) or 0), int(getattr(st, "st_mtime", 0) or 0)

    def exists(self, remote_path: str) -> bool:
        try:
            self.sftp.stat(remote_path)
        except FileNotFoundError:
            return False
        return True

    def is_dir(self, remote_path: str) -> bool:
        try:
            st = self.sftp.stat(remote_path)
        except FileNotFoundError:
            return False
        return pystat.S_ISDIR(st.st_mode or 0)

    def is_link(self, remote_path: str) -> bool:
        try:
            st = self.sftp.lstat(remote_path)
        except FileNotFoundError:
            return False
        return pystat.S_ISLNK(st.st_mode or 0)

    def _walk(self, remote_dir: str, out: List[Tuple[str, bool]]) -> None:
        # children before parents, so the list can be removed front to back;
        # listdir_attr does not follow links, so a linked dir is removed as a file
        for attr in self.sftp.listdir_attr(remote_dir):
            child = POSIX.join(remote_dir, attr.filename)
            if pystat.S_ISDIR(attr.st_mode or 0):
                self._walk(child, out)
                out.append((child, True))
            else:
                out.append((child, False))

    def remove(self, remote_path: str, recursive: bool = False, progress: Optional[DeleteProgress] = None) -> None:
        if self.is_link(remote_path) or not self.is_dir(remote_path):
            self.sftp.remove(remote_path)
            if progress:
                progress(100.0, 1, 1)
            return

        victims: List[Tuple[str, bool]] = []
        if recursive:
            self._walk(remote_path, victims)
        victims.append((remote_path, True))

        total = len(victims)
        for done, (victim, is_dir) in enumerate(victims, start=1):
            if is_dir:
                self.sftp.rmdir(victim)
            else:
                self.sftp.remove(victim)
            if progress:
                progress(done * 100.0 / total, done, total)

    def rename(self, remote_path: str, new_remote_path: str) -> None:
        if self.exists(new_remote_path):
            raise FileExistsError(f"Destination exists: {new_remote_path}")
        self.sftp.rename(remote_path, new_remote_path)

    def mkdir(self, remote_dir: str) -> None:
        self.sftp.mkdir(remote_dir)

    def _callback(self, progress: Optional[TransferProgress]):
        if progress is None:
            return None
        meter = SpeedMeter()

        def _cb(done: int, total: int) -> None:
            pct = done * 100.0 / total if total else 100.0
            progress(pct, meter.speed(done))

        return _cb

    def download(self, remote_path: str, local_path: str, progress: Optional[TransferProgress] = None) -> None:
        self.sftp.get(remote_path, local_path, callback=self._callback(progress))

    def upload(self, local_path: str, remote_path: str, progress: Optional[TransferProgress] = None) -> None:
        self.sftp.put(local_path, remote_path, callback=self._callback(progress))

    def close(self) -> None:
        self.ssh.close()
