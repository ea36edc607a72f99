from __future__ import annotations

import logging
import sys
import threading
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from twinpane.core.logging import LOG_FORMAT, ROOT_LOGGER, get_logger, log_path

# paramiko logs every SFTP packet at DEBUG
_CHATTY = ("paramiko", "qasync")


def setup_logging(level: int = logging.INFO, path: Optional[Path] = None) -> Optional[Path]:
    """Attach a rotating file handler to the ``twinpane`` logger tree.

    Returns the log file, or None when it could not be opened. Calling it again
    only adjusts the level.
    """
    root = logging.getLogger(ROOT_LOGGER)
    root.setLevel(level)
    for h in root.handlers:
        if isinstance(h, RotatingFileHandler):
            h.setLevel(level)
            return Path(h.baseFilename)

    target = path or log_path()
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(target, maxBytes=2 * 1024 * 1024, backupCount=3, encoding="utf-8")
    except OSError as exc:
        # the app runs without a log file rather than not at all
        sys.stderr.write(f"twinpane: file logging disabled: {exc}\n")
        return None

    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    handler.setLevel(level)
    root.addHandler(handler)

    for name in _CHATTY:
        lib = logging.getLogger(name)
        lib.setLevel(max(level, logging.WARNING))
        lib.addHandler(handler)
    logging.captureWarnings(True)
    return target


def level_from_name(name: str, default: int = logging.INFO) -> int:
    value = logging.getLevelName(str(name or "").upper())
    return value if isinstance(value, int) else default


def install_excepthook() -> None:
    """Log uncaught exceptions, including those of backend worker threads."""
    log = get_logger("twinpane.crash")
    previous = sys.excepthook

    def _hook(exc_type, exc, tb):
        log.critical("Uncaught exception", exc_info=(exc_type, exc, tb))
        previous(exc_type, exc, tb)

    def _thread_hook(args: threading.ExceptHookArgs) -> None:
        if args.exc_type is SystemExit:
            return
        name = args.thread.name if args.thread is not None else "?"
        log.critical("Uncaught exception in thread %s", name,
                     exc_info=(args.exc_type, args.exc_value, args.exc_traceback))

    sys.excepthook = _hook
    threading.excepthook = _thread_hook
