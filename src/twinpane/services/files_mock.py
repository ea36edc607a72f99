from __future__ import annotations

import re
import time
from typing import Dict, Iterable, List, Optional, Set, Tuple

from twinpane.services.files_base import DeleteProgress, Entry, FilesBackend, sort_entries

_DRIVE_KEY_RE = re.compile(r"^[A-Za-z]:$")


def _key(path: str) -> str:
    # "/" -> "", "C:/" -> "C:", "/a/b/" -> "/a/b"
    return path.replace("\\", "/").rstrip("/")


def _parent_key(key: str) -> Optional[str]:
    if key == "" or _DRIVE_KEY_RE.match(key):
        return None
    if "/" not in key:
        return None
    return key.rsplit("/", 1)[0]


class MockFilesBackend(FilesBackend):
    """In-memory filesystem used for dry runs and tests.

    Accepts POSIX paths and drive-letter paths. ``fail_on`` maps a path to an
    error message raised by any operation touching it; names in ``hidden`` are
    accepted on write but never listed.
    """

    def __init__(self, files: Optional[Dict[str, object]] = None, dirs: Iterable[str] = ()):
        self._files: Dict[str, bytes] = {}
        self._dirs: Set[str] = {""}
        self._mt: Dict[str, int] = {}
        self.fail_on: Dict[str, str] = {}
        self.hidden: Set[str] = set()
        self.calls: List[Tuple[str, ...]] = []
        for d in dirs:
            self._add_dir(_key(d))
        for path, content in (files or {}).items():
            data = content.encode("utf-8") if isinstance(content, str) else bytes(content)  # type: ignore[arg-type]
            k = _key(path)
            self._add_dir(_parent_key(k) or "")
            self._files[k] = data
            self._mt[k] = int(time.time())

    @classmethod
    def demo(cls) -> "MockFilesBackend":
        return cls(files={
            "/pub/readme.txt": "Mock file content\nline2\n",
            "/pub/reports/report.pdf": b"%PDF-1.4 mock",
            "/pub/reports/2024/summary.csv": "a,b\n1,2\n",
            "/incoming/.keep": "",
        })

    # ---------- helpers ----------
    def _add_dir(self, key: str) -> None:
        while key is not None and key not in self._dirs:
            self._dirs.add(key)
            key = _parent_key(key)

    def _is_dir_key(self, key: str) -> bool:
        return key in self._dirs or bool(_DRIVE_KEY_RE.match(key))

    def _check(self, *paths: str) -> None:
        for p in paths:
            msg = self.fail_on.get(p) or self.fail_on.get(_key(p))
            if msg:
                raise PermissionError(msg)

    def _require_parent(self, key: str) -> None:
        parent = _parent_key(key)
        if parent is not None and not self._is_dir_key(parent):
            raise FileNotFoundError(f"No such directory: {parent or '/'}")

    def _children(self, key: str) -> List[str]:
        prefix = key + "/"
        names = set()
        for k in list(self._files) + list(self._dirs):
            if k.startswith(prefix) and k != key:
                names.add(k[len(prefix):].split("/")[0])
        return sorted(names)

    def _descendants(self, key: str) -> List[str]:
        prefix = key + "/"
        return [k for k in list(self._files) + list(self._dirs) if k.startswith(prefix)]

    # ---------- FilesBackend ----------
    def listdir_entries(self, path: str) -> List[Entry]:
        self.calls.append(("list", path))
        self._check(path)
        key = _key(path)
        if key in self._files:
            raise NotADirectoryError(path)
        if not self._is_dir_key(key):
            raise FileNotFoundError(path)
        base = path.rstrip("/\\")
        entries = []
        for name in self._children(key):
            if name in self.hidden:
                continue
            full = f"{key}/{name}"
            is_dir = full in self._dirs
            entries.append(Entry(
                name=name,
                path=f"{base}/{name}",
                is_dir=is_dir,
                size=0 if is_dir else len(self._files.get(full, b"")),
                mtime=self._mt.get(full, 0),
            ))
        return sort_entries(entries)

    def read_bytes(self, path: str) -> bytes:
        self.calls.append(("read", path))
        self._check(path)
        key = _key(path)
        if key not in self._files:
            raise FileNotFoundError(path)
        return self._files[key]

    def write_bytes(self, path: str, data: bytes) -> None:
        self.calls.append(("write", path))
        self._check(path)
        key = _key(path)
        if key in self._dirs:
            raise IsADirectoryError(path)
        self._require_parent(key)
        self._files[key] = bytes(data)
        self._mt[key] = int(time.time())

    def stat(self, path: str) -> Tuple[int, int]:
        key = _key(path)
        if not self.exists(path):
            raise FileNotFoundError(path)
        return len(self._files.get(key, b"")), self._mt.get(key, 0)

    def exists(self, path: str) -> bool:
        key = _key(path)
        return key in self._files or self._is_dir_key(key)

    def is_dir(self, path: str) -> bool:
        return self._is_dir_key(_key(path))

    def remove(self, path: str, recursive: bool = False, progress: Optional[DeleteProgress] = None) -> None:
        self.calls.append(("delete", path))
        self._check(path)
        key = _key(path)
        if key in self._files:
            del self._files[key]
            self._mt.pop(key, None)
            if progress:
                progress(100.0, 1, 1)
            return
        if key not in self._dirs or _parent_key(key) is None:
            raise FileNotFoundError(path)
        victims = sorted(self._descendants(key), key=len, reverse=True)
        if victims and not recursive:
            raise OSError(f"Directory not empty: {path}")
        victims.append(key)
        total = len(victims)
        for done, victim in enumerate(victims, start=1):
            self._files.pop(victim, None)
            self._dirs.discard(victim)
            self._mt.pop(victim, None)
            if progress:
                progress(done * 100.0 / total, done, total)

    def rename(self, path: str, new_path: str) -> None:
        self.calls.append(("rename", path, new_path))
        self._check(path, new_path)
        src, dst = _key(path), _key(new_path)
        if not self.exists(path):
            raise FileNotFoundError(path)
        if self.exists(new_path):
            raise FileExistsError(f"Destination exists: {new_path}")
        self._require_parent(dst)
        if src in self._files:
            self._files[dst] = self._files.pop(src)
            self._mt[dst] = self._mt.pop(src, int(time.time()))
            return
        if dst.startswith(src + "/"):
            raise OSError(f"Cannot move a directory into itself: {path}")
        for k in self._descendants(src):
            nk = dst + k[len(src):]
            if k in self._files:
                self._files[nk] = self._files.pop(k)
                self._mt[nk] = self._mt.pop(k, 0)
            else:
                self._dirs.discard(k)
                self._dirs.add(nk)
        self._dirs.discard(src)
        self._dirs.add(dst)

    def mkdir(self, path: str) -> None:
        self.calls.append(("mkdir", path))
        self._check(path)
        key = _key(path)
        if self.exists(path):
            raise FileExistsError(path)
        self._require_parent(key)
        self._dirs.add(key)
        self._mt[key] = int(time.time())
