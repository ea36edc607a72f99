from __future__ import annotations

from typing import Callable, Optional

import paramiko

from twinpane.config.models import SFTPConfig
from twinpane.core.debug_support import timed
from twinpane.core.logging import get_logger


class SSHClientWrapper:
    """Owns one paramiko SSH connection and its SFTP session."""

    def __init__(self, info: Optional[SFTPConfig] = None, logger: Optional[Callable[[str], None]] = None):
        self.info: Optional[SFTPConfig] = info
        self.client: Optional[paramiko.SSHClient] = None
        self.sftp: Optional[paramiko.SFTPClient] = None
        self._log = logger
        self._filelog = get_logger("twinpane.ssh")

    @property
    def connected(self) -> bool:
        return self.sftp is not None

    def log(self, msg: str) -> None:
        self._filelog.info(msg)
        if self._log:
            self._log(msg)

    def connect(self, info: Optional[SFTPConfig] = None) -> None:
        info = info or self.info
        if info is None or not info.host:
            raise ValueError("SSH connection info not provided")
        self.info = info
        t0 = timed()
        self.log(f"SSH: connecting to {info.username}@{info.host}:{info.port} ...")
        client = paramiko.SSHClient()
        client.set_missing_host_key_policy(paramiko.AutoAddPolicy())

        kwargs = dict(
            hostname=info.host,
            port=info.port,
            username=info.username or None,
            timeout=15,
            allow_agent=True,
            look_for_keys=True,
        )
        if info.key_path:
            self.log(f"SSH: using key {info.key_path}")
            kwargs["key_filename"] = info.key_path
        else:
            kwargs["password"] = info.password or None
        client.connect(**kwargs)

        self.client = client
        self.sftp = client.open_sftp()
        self.log(f"SSH: connected, SFTP ready ({timed() - t0:.2f}s)")

    def close(self) -> None:
        self.log("SSH: closing")
        try:
            if self.sftp:
                self.sftp.close()
        finally:
            self.sftp = None
        try:
            if self.client:
                self.client.close()
        finally:
            self.client = None
        self.log("SSH: closed")
