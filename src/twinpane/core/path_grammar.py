from __future__ import annotations

"""Path rules for the two providers.

Remote paths are POSIX-rooted (``/a/b``). Local paths are either drive-letter
rooted (``C:/Users`` or ``C:\\Users``) or POSIX-rooted on non-Windows hosts.
Nothing here touches a filesystem and nothing raises on malformed input:
operations that cannot be applied return ``None``.
"""

import re
from typing import List, Optional, Sequence

_DRIVE_RE = re.compile(r"^([A-Za-z]:)")
_DRIVE_ROOT_RE = re.compile(r"^[A-Za-z]:[\\/]*$")
_SEP_RE = re.compile(r"[\\/]")


class PathGrammar:
    separator = "/"

    def is_root(self, path: str) -> bool:
        raise NotImplementedError

    def parent(self, path: str) -> Optional[str]:
        """Parent folder, or None when ``path`` is a root or has no separator."""
        raise NotImplementedError

    def breadcrumbs(self, path: str) -> List[str]:
        raise NotImplementedError

    def from_breadcrumbs(self, crumbs: Sequence[str], index: int) -> Optional[str]:
        """Rebuild the path made of ``crumbs[0..index]``; None for a bad index."""
        raise NotImplementedError

    def join(self, base: str, name: str) -> str:
        raise NotImplementedError

    def basename(self, path: str) -> str:
        raise NotImplementedError

    def home(self, current: str) -> str:
        raise NotImplementedError


class PosixGrammar(PathGrammar):
    separator = "/"

    def is_root(self, path: str) -> bool:
        return path.strip("/") == ""

    def parent(self, path: str) -> Optional[str]:
        if self.is_root(path) or "/" not in path:
            return None
        p = path.rstrip("/")
        idx = p.rfind("/")
        if idx <= 0:
            return "/"
        return p[:idx]

    def breadcrumbs(self, path: str) -> List[str]:
        return [p for p in path.split("/") if p]

    def from_breadcrumbs(self, crumbs: Sequence[str], index: int) -> Optional[str]:
        if index < 0 or index >= len(crumbs):
            return None
        return "/" + "/".join(crumbs[: index + 1])

    def join(self, base: str, name: str) -> str:
        return base.rstrip("/") + "/" + name

    def basename(self, path: str) -> str:
        return path.rstrip("/").split("/")[-1]

    def home(self, current: str) -> str:
        return "/"


class LocalGrammar(PathGrammar):
    separator = "/"

    @staticmethod
    def drive(path: str) -> Optional[str]:
        m = _DRIVE_RE.match(path)
        return m.group(1) if m else None

    def is_root(self, path: str) -> bool:
        if path.strip("/\\") == "":
            return True
        return bool(_DRIVE_ROOT_RE.match(path))

    def parent(self, path: str) -> Optional[str]:
        if self.is_root(path):
            return None
        p = path.rstrip("/\\")
        idx = max(p.rfind("/"), p.rfind("\\"))
        if idx < 0:
            return None
        parent = p[:idx]
        if _DRIVE_ROOT_RE.match(parent) and not parent.endswith(("/", "\\")):
            return parent + "/"
        return parent or "/"

    def breadcrumbs(self, path: str) -> List[str]:
        return [p for p in _SEP_RE.split(path) if p]

    def from_breadcrumbs(self, crumbs: Sequence[str], index: int) -> Optional[str]:
        if index < 0 or index >= len(crumbs):
            return None
        parts = list(crumbs[: index + 1])
        if self.drive(parts[0]):
            if len(parts) == 1:
                return parts[0] + "/"
            return "/".join(parts)
        return "/" + "/".join(parts)

    def join(self, base: str, name: str) -> str:
        # keep backslash-only paths in their native style
        sep = "\\" if "\\" in base and "/" not in base else "/"
        return base.rstrip("/\\") + sep + name

    def basename(self, path: str) -> str:
        return _SEP_RE.split(path.rstrip("/\\"))[-1]

    def home(self, current: str) -> str:
        d = self.drive(current or "")
        return d + "/" if d else "/"


POSIX = PosixGrammar()
LOCAL = LocalGrammar()


def grammar_for(is_remote: bool) -> PathGrammar:
    return POSIX if is_remote else LOCAL


def navigate_up(path: str, is_remote: bool) -> str:
    """Parent of ``path``; ``path`` itself when already at a root or malformed."""
    parent = grammar_for(is_remote).parent(path)
    return path if parent is None else parent


def breadcrumbs_for(path: str, is_remote: bool) -> List[str]:
    return grammar_for(is_remote).breadcrumbs(path)


def path_from_breadcrumbs(crumbs: Sequence[str], index: int, is_remote: bool) -> Optional[str]:
    return grammar_for(is_remote).from_breadcrumbs(crumbs, index)


def go_home(is_remote: bool, current_path: str) -> str:
    return grammar_for(is_remote).home(current_path)
