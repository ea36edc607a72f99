from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from twinpane.core.formatting import SpeedMeter, format_bytes, format_mtime

PARENT_NAME = ".."

# percent (0..100), human speed
TransferProgress = Callable[[float, str], None]
# percent (0..100), deleted items, total items
DeleteProgress = Callable[[float, int, int], None]


@dataclass(frozen=True)
class Entry:
    """Immutable listing snapshot. Identity is ``path``."""

    name: str
    path: str
    is_dir: bool
    size: int = 0
    mtime: int = 0  # unix epoch seconds
    mode: int = 0

    @property
    def is_parent(self) -> bool:
        return self.name == PARENT_NAME

    @property
    def human_size(self) -> str:
        if self.is_dir:
            return ""
        return format_bytes(self.size)

    @property
    def human_modified(self) -> str:
        return format_mtime(self.mtime)


def parent_entry(current_path: str) -> Entry:
    """Synthetic ``..`` row; it carries the pane's current path."""
    return Entry(name=PARENT_NAME, path=current_path, is_dir=True)


def sort_entries(entries: List[Entry]) -> List[Entry]:
    entries.sort(key=lambda e: (not e.is_dir, e.name.lower()))
    return entries


_CHUNK = 256 * 1024


class FilesBackend(ABC):
    """Synchronous file operations for one provider.

    Implementations raise on failure; the async facade turns exceptions into results.
    """

    # True when paths of this backend are paths of the machine we run on.
    is_local_fs: bool = False

    @abstractmethod
    def listdir_entries(self, path: str) -> List[Entry]:
        raise NotImplementedError

    @abstractmethod
    def read_bytes(self, path: str) -> bytes:
        raise NotImplementedError

    @abstractmethod
    def write_bytes(self, path: str, data: bytes) -> None:
        raise NotImplementedError

    @abstractmethod
    def stat(self, path: str) -> Tuple[int, int]:
        """Return (size, mtime)."""
        raise NotImplementedError

    @abstractmethod
    def exists(self, path: str) -> bool:
        raise NotImplementedError

    @abstractmethod
    def is_dir(self, path: str) -> bool:
        raise NotImplementedError

    def is_link(self, path: str) -> bool:
        """True for a symbolic link; ``is_dir`` follows links, this does not."""
        return False

    @abstractmethod
    def remove(self, path: str, recursive: bool = False, progress: Optional[DeleteProgress] = None) -> None:
        raise NotImplementedError

    @abstractmethod
    def rename(self, path: str, new_path: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def mkdir(self, path: str) -> None:
        raise NotImplementedError

    def read_text(self, path: str) -> str:
        return self.read_bytes(path).decode("utf-8", errors="replace")

    def write_text(self, path: str, text: str) -> None:
        self.write_bytes(path, text.encode("utf-8"))

    def create_file(self, path: str) -> None:
        if self.exists(path):
            raise FileExistsError(path)
        self.write_bytes(path, b"")

    # --- transfers against the machine-local filesystem ---
    # Remote backends with a native protocol transfer override these.
    def download(self, path: str, local_path: str, progress: Optional[TransferProgress] = None) -> None:
        data = self.read_bytes(path)
        meter = SpeedMeter()
        total = len(data) or 1
        with open(local_path, "wb") as f:
            for off in range(0, len(data), _CHUNK):
                f.write(data[off:off + _CHUNK])
                if progress:
                    done = min(off + _CHUNK, len(data))
                    progress(done * 100.0 / total, meter.speed(done))

    def upload(self, local_path: str, path: str, progress: Optional[TransferProgress] = None) -> None:
        with open(local_path, "rb") as f:
            data = f.read()
        self.write_bytes(path, data)
        if progress:
            progress(100.0, "Done")

    def close(self) -> None:
        pass
