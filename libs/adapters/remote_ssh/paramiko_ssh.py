from __future__ import annotations

import logging
import shlex
from collections.abc import Sequence
from typing import Final

import paramiko
from domain.errors import RemoteCommandError
from ports.remote import RemoteExecPort

LOG: Final = logging.getLogger("rmsnap.ssh")


class ParamikoRemote(RemoteExecPort):
    """SSH session to the device; one connection reused for every command."""

    def __init__(
        self,
        host: str,
        username: str = "root",
        port: int = 22,
        password: str | None = None,
        key_filename: str | None = None,
        connect_timeout: float = 10.0,
        command_timeout: float = 30.0,
        auto_add_host_keys: bool = True,
    ) -> None:
        self.host = host
        self._username = username
        self._port = int(port)
        self._password = password
        self._key_filename = key_filename
        self._connect_timeout = float(connect_timeout)
        self._command_timeout = float(command_timeout)
        self._auto_add = auto_add_host_keys
        self._client: paramiko.SSHClient | None = None

    def open(self) -> None:
        client = paramiko.SSHClient()
        client.load_system_host_keys()
        if self._auto_add:
            client.set_missing_host_key_policy(paramiko.AutoAddPolicy())
        try:
            client.connect(
                hostname=self.host,
                port=self._port,
                username=self._username,
                password=self._password,
                key_filename=self._key_filename,
                timeout=self._connect_timeout,
            )
        except (paramiko.SSHException, OSError) as e:
            client.close()
            raise RemoteCommandError(f"could not connect to {self.host}: {e}") from e
        self._client = client
        LOG.info("Connected to reMarkable at %s", self.host)

    def execute(self, command: str, args: Sequence[str] = ()) -> bytes:
        if self._client is None:
            self.open()
        assert self._client is not None
        line = shlex.join([command, *args])
        LOG.debug("ssh %s: %s", self.host, line)
        try:
            _, stdout, _ = self._client.exec_command(line, timeout=self._command_timeout)
            data = stdout.read()
            stdout.channel.recv_exit_status()
        except (paramiko.SSHException, OSError) as e:
            raise RemoteCommandError(f"remote command failed: {line}: {e}") from e
        return data

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
        self._client = None
