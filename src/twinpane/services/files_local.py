from __future__ import annotations

import os
import shutil
from typing import List, Optional, Tuple

from twinpane.core.path_grammar import LOCAL
from twinpane.services.files_base import DeleteProgress, Entry, FilesBackend, sort_entries


class LocalFilesBackend(FilesBackend):
    is_local_fs = True

    def listdir_entries(self, path: str) -> List[Entry]:
        entries: List[Entry] = []
        with os.scandir(path) as it:
            for de in it:
                try:
                    st = de.stat()
                    is_dir = de.is_dir()
                except OSError:
                    # dangling symlink or vanished entry
                    continue
                entries.append(Entry(
                    name=de.name,
                    path=LOCAL.join(path, de.name),
                    is_dir=is_dir,
                    size=0 if is_dir else int(st.st_size),
                    mtime=int(st.st_mtime),
                    mode=int(st.st_mode),
                ))
        return sort_entries(entries)

    def read_bytes(self, path: str) -> bytes:
        with open(path, "rb") as f:
            return f.read()

    def write_bytes(self, path: str, data: bytes) -> None:
        with open(path, "wb") as f:
            f.write(data)

    def stat(self, path: str) -> Tuple[int, int]:
        st = os.stat(path)
        return int(st.st_size), int(st.st_mtime)

    def exists(self, path: str) -> bool:
        return os.path.lexists(path)

    def is_dir(self, path: str) -> bool:
        return os.path.isdir(path)

    def is_link(self, path: str) -> bool:
        return os.path.islink(path)

    def remove(self, path: str, recursive: bool = False, progress: Optional[DeleteProgress] = None) -> None:
        if not os.path.isdir(path) or os.path.islink(path):
            os.remove(path)
            if progress:
                progress(100.0, 1, 1)
            return
        if not recursive:
            os.rmdir(path)
            if progress:
                progress(100.0, 1, 1)
            return

        victims: List[Tuple[str, bool]] = []
        for root, dirs, files in os.walk(path, topdown=False):
            victims.extend((os.path.join(root, f), False) for f in files)
            victims.extend((os.path.join(root, d), True) for d in dirs)
        victims.append((path, True))

        total = len(victims)
        for done, (victim, is_dir) in enumerate(victims, start=1):
            if is_dir and not os.path.islink(victim):
                os.rmdir(victim)
            else:
                os.remove(victim)
            if progress:
                progress(done * 100.0 / total, done, total)

    def rename(self, path: str, new_path: str) -> None:
        if os.path.lexists(new_path):
            raise FileExistsError(f"Destination exists: {new_path}")
        shutil.move(path, new_path)

    def mkdir(self, path: str) -> None:
        os.mkdir(path)

    def create_file(self, path: str) -> None:
        with open(path, "x", encoding="utf-8"):
            pass
