from __future__ import annotations

import platform
import sys
import time
import uuid
from dataclasses import dataclass
from importlib import metadata
from typing import Dict, Iterable

from twinpane.core.logging import get_logger

# distributions whose versions matter when reading a user's log
STACK = ("PySide6", "paramiko", "qasync")


@dataclass(frozen=True)
class ErrorId:
    """Short id shown to the user and written next to the traceback, e.g. ``UPLOAD-3F9A1C``."""

    area: str
    token: str

    def __str__(self) -> str:
        return f"{self.area}-{self.token}"


def new_error_id(area: str) -> ErrorId:
    return ErrorId(area=(area or "GEN").upper(), token=uuid.uuid4().hex[:6].upper())


def stack_versions(dists: Iterable[str] = STACK) -> Dict[str, str]:
    versions = {}
    for dist in dists:
        try:
            versions[dist] = metadata.version(dist)
        except metadata.PackageNotFoundError:
            versions[dist] = "missing"
    return versions


def log_startup_snapshot() -> None:
    from twinpane import __version__

    log = get_logger("twinpane.startup")
    log.info("twinpane %s starting", __version__)
    log.info(
        "python=%s os=%s %s arch=%s",
        sys.version.split()[0], platform.system(), platform.release(), platform.machine(),
    )
    log.info("stack: %s", ", ".join(f"{k}={v}" for k, v in stack_versions().items()))


def log_exception_with_id(area: str, exc: BaseException, *, logger_name: str = "twinpane") -> ErrorId:
    err_id = new_error_id(area)
    get_logger(logger_name).error("Error-ID=%s: %s", err_id, exc, exc_info=exc)
    return err_id


def timed() -> float:
    return time.monotonic()
