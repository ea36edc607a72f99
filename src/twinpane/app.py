import argparse
import asyncio
import logging
import sys
from typing import List, Optional

import qasync
from PySide6.QtWidgets import QApplication

from twinpane.config.models import SFTPConfig
from twinpane.config.storage import (
    add_recent_folder,
    initial_local_path,
    load_app_config,
    load_connection,
    save_connection,
    save_last_local_path,
)
from twinpane.core.debug_support import log_exception_with_id, log_startup_snapshot
from twinpane.core.i18n import set_language, system_default_language, t, validate_language_files
from twinpane.core.logging import get_logger
from twinpane.core.logging_setup import install_excepthook, level_from_name, setup_logging
from twinpane.core.workspace import Workspace
from twinpane.services.file_ops import FileOperations
from twinpane.services.files_local import LocalFilesBackend
from twinpane.services.files_mock import MockFilesBackend
from twinpane.services.files_ssh import SSHFilesBackend
from twinpane.ssh.client import SSHClientWrapper
from twinpane.ui.main_window import MainWindow
from twinpane.ui.prompter import QtPrompter

_log = get_logger("twinpane.app")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="twinpane", description="Dual-pane local/SFTP file manager")
    p.add_argument("--host", help="SFTP host (default: last used)")
    p.add_argument("--port", type=int, default=None)
    p.add_argument("--user", dest="username")
    p.add_argument("--key", dest="key_path", help="private key file")
    p.add_argument("--password", help="password (never stored)")
    p.add_argument("--dry-run", action="store_true", help="use an in-memory remote instead of SFTP")
    p.add_argument("--lang", choices=("en", "tr"))
    return p


def connection_from_args(args: argparse.Namespace) -> Optional[SFTPConfig]:
    if args.dry_run:
        return SFTPConfig(dry_run=True)
    saved = load_connection()
    host = args.host or (saved.host if saved else "")
    if not host:
        return None
    same = saved is not None and saved.host == host
    return SFTPConfig(
        host=host,
        port=args.port or (saved.port if same else 22),
        username=args.username or (saved.username if same else ""),
        password=args.password or "",
        key_path=args.key_path or (saved.key_path if same else ""),
    )


def _connect(conn: SFTPConfig) -> SSHFilesBackend:
    client = SSHClientWrapper(conn)
    client.connect()
    return SSHFilesBackend(client)


async def attach_remote(workspace: Workspace, conn: Optional[SFTPConfig]) -> None:
    if conn is None:
        workspace.notifier.info(t("app.not_connected"))
        return
    if conn.dry_run:
        await workspace.attach_remote(MockFilesBackend.demo())
        workspace.notifier.info(t("app.dry_run"))
        return
    try:
        backend = await asyncio.to_thread(_connect, conn)
    except Exception as exc:
        log_exception_with_id("SSH", exc, logger_name="twinpane.ssh")
        workspace.notifier.error(t("app.connect_failed", error=str(exc)))
        return
    save_connection(conn)
    workspace.notifier.success(t("app.connected", host=conn.host))
    await workspace.attach_remote(backend)


def _remember_local_path(path: str) -> None:
    save_last_local_path(path)
    add_recent_folder(path)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    cfg = load_app_config()

    # Logging (file-backed, rotating). Must not crash the GUI.
    setup_logging(level=level_from_name(cfg.log_level, logging.INFO))
    install_excepthook()
    log_startup_snapshot()
    validate_language_files()
    set_language(args.lang or cfg.language or system_default_language())

    app = QApplication(sys.argv[:1])
    loop = qasync.QEventLoop(app)
    asyncio.set_event_loop(loop)

    workspace = Workspace(
        FileOperations(LocalFilesBackend()),
        cfg,
        on_local_path_changed=_remember_local_path,
    )
    workspace.loop = loop
    w = MainWindow(workspace)
    workspace.dispatcher.prompter = QtPrompter(w)
    app.aboutToQuit.connect(w.graceful_shutdown)
    w.show()

    closing = asyncio.Event()
    app.aboutToQuit.connect(closing.set)

    async def _run() -> None:
        await workspace.start(initial_local_path())
        await attach_remote(workspace, connection_from_args(args))
        await closing.wait()

    with loop:
        loop.run_until_complete(_run())
    return 0
