"""Paramiko-backed SSH session used by drivers for remote commands and uploads."""

import logging
import os
import posixpath
import socket
import time
from pathlib import Path
from typing import Any

import paramiko
from paramiko.agent import AgentRequestHandler

from .._logging import get_logger, mask_values
from ..errors import SSHFailed
from .login_command import LoginCommand

_CONNECT_ATTEMPTS = 3
_CONNECT_RETRY_SLEEP = 1
_WAIT_SOCKET_TIMEOUT = 5
_WAIT_RETRY_SLEEP = 2


class SSHConnection:
    def __init__(self, hostname: str, username: str | None = None, options: dict[str, Any] | None = None):
        options = dict(options or {})
        self.logger: logging.Logger = options.pop("logger", None) or get_logger("ssh.connection")
        self.hostname = hostname
        self.username = username
        self.options = options
        self._client: paramiko.SSHClient | None = None

    def __enter__(self) -> "SSHConnection":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.shutdown()

    def __str__(self) -> str:
        return f"{self.username}@{self.hostname}<{self.port}>"

    @property
    def port(self) -> int:
        return int(self.options.get("port") or 22)

    def exec(self, command: str) -> None:
        self.logger.debug(mask_values(f"[SSH] {self} ({command})", [self.options.get("password")]))
        try:
            exit_code = self._exec_with_exit(command)
        except OSError as exc:
            raise SSHFailed(f"SSH command failed: [{command}] ({exc})") from exc

        if exit_code != 0:
            raise SSHFailed(f"SSH exited ({exit_code}) for command: [{command}]")

    def upload(self, local: str | Path, remote: str) -> None:
        """Upload a single local file into the remote directory."""
        local_path = Path(local)
        remote_path = posixpath.join(remote, local_path.name)
        self.logger.debug("[SSH] %s uploading %s to %s", self, local_path, remote_path)
        try:
            with self._session().open_sftp() as sftp:
                sftp.put(str(local_path), remote_path)
        except OSError as exc:
            raise SSHFailed(f"SSH upload of {local_path} to {remote} failed ({exc})") from exc

    def wait(self) -> None:
        while not self._test_ssh():
            self.logger.info("Waiting for %s:%s...", self.hostname, self.port)

    def login_command(self) -> LoginCommand:
        args = ["-o", "UserKnownHostsFile=/dev/null"]
        args += ["-o", "StrictHostKeyChecking=no"]
        if self.options.get("keys"):
            args += ["-o", "IdentitiesOnly=yes"]
        log_level = "VERBOSE" if self.logger.isEnabledFor(logging.DEBUG) else "ERROR"
        args += ["-o", f"LogLevel={log_level}"]
        if "forward_agent" in self.options:
            args += ["-o", f"ForwardAgent={'yes' if self.options['forward_agent'] else 'no'}"]
        for ssh_key in self.options.get("keys") or []:
            args += ["-i", str(ssh_key)]
        args += ["-p", str(self.port)]
        args.append(f"{self.username}@{self.hostname}" if self.username else self.hostname)

        return LoginCommand(argv=["ssh", *args])

    def shutdown(self) -> None:
        if self._client is None:
            return

        self.logger.debug("[SSH] closing connection to %s", self)
        try:
            self._client.close()
        finally:
            self._client = None

    def _session(self) -> paramiko.SSHClient:
        if self._client is None:
            self._client = self._establish_connection()
        return self._client

    def _establish_connection(self) -> paramiko.SSHClient:
        attempts_left = _CONNECT_ATTEMPTS
        while True:
            client = self._build_client()
            try:
                self.logger.debug("[SSH] opening connection to %s", self)
                client.connect(**self._connect_kwargs())
                return client
            except (OSError, paramiko.SSHException) as exc:
                client.close()
                attempts_left -= 1
                if attempts_left <= 0:
                    self.logger.warning("[SSH] connection failed, terminating (%r)", exc)
                    raise SSHFailed("SSH session could not be established") from exc
                self.logger.info("[SSH] connection failed, retrying (%r)", exc)
                time.sleep(_CONNECT_RETRY_SLEEP)

    def _build_client(self) -> paramiko.SSHClient:
        client = paramiko.SSHClient()
        known_hosts = self.options.get("user_known_hosts_file")
        if self.options.get("paranoid", True):
            client.load_system_host_keys()
            if known_hosts and known_hosts != os.devnull and os.path.exists(known_hosts):
                client.load_host_keys(known_hosts)
            client.set_missing_host_key_policy(paramiko.RejectPolicy())
        else:
            client.set_missing_host_key_policy(paramiko.AutoAddPolicy())
        return client

    def _connect_kwargs(self) -> dict[str, Any]:
        connect_kwargs: dict[str, Any] = {
            "hostname": self.hostname,
            "port": self.port,
            "username": self.username,
        }

        if self.options.get("keys"):
            connect_kwargs["key_filename"] = [str(key) for key in self.options["keys"]]
        if self.options.get("keys_only"):
            connect_kwargs["look_for_keys"] = False
            connect_kwargs["allow_agent"] = False
        if self.options.get("password"):
            connect_kwargs["password"] = self.options["password"]
        if self.options.get("timeout"):
            connect_kwargs["timeout"] = self.options["timeout"]

        return connect_kwargs

    def _exec_with_exit(self, command: str) -> int:
        transport = self._session().get_transport()
        if transport is None:
            raise SSHFailed(f"SSH transport to {self} is not available")

        channel = transport.open_session()
        try:
            if self.options.get("forward_agent"):
                AgentRequestHandler(channel)
            channel.set_combine_stderr(True)
            channel.exec_command(command)

            for raw_line in channel.makefile("rb"):
                self.logger.info(raw_line.decode("utf-8", errors="replace").rstrip())

            return channel.recv_exit_status()
        finally:
            channel.close()

    def _test_ssh(self) -> bool:
        try:
            with socket.create_connection((self.hostname, self.port), timeout=_WAIT_SOCKET_TIMEOUT):
                return True
        except TimeoutError:
            return False
        except OSError:
            time.sleep(_WAIT_RETRY_SLEEP)
            return False
