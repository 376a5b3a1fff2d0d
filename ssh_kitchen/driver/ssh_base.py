"""Base class for drivers that reach their instances over SSH.

A subclass must implement:

* ``create(state)``
* ``destroy(state)``

Every other lifecycle action opens one SSH connection per call, runs the
provisioner or verifier commands over it and closes it again.
"""

import glob
import os
from typing import Any, Sequence

import paramiko

from ._config import load_plugin_config
from ._logging import get_logger, redact_config
from .archive import pack
from .base import BaseDriver
from .config import SSHBaseConfig
from .errors import ActionFailed, ClientError, SSHFailed
from .ssh.connection import SSHConnection
from .ssh.login_command import LoginCommand

_CONNECTION_ERRORS = (SSHFailed, paramiko.SSHException)


class SSHBase(BaseDriver):
    config_class: type[SSHBaseConfig] = SSHBaseConfig
    required_config: tuple[str, ...] = ()

    def __init__(
        self,
        config: dict | None = None,
        *,
        provisioner=None,
        verifier=None,
        instance_name: str = "default",
        file_path: str | None = None,
        env_prefix: str = "KITCHEN_DRIVER",
    ):
        merged_config = load_plugin_config(
            config,
            file_path=file_path,
            env_prefix=env_prefix,
            required=self.required_config,
        )
        self.config = self.config_class.model_validate(merged_config)
        self.provisioner = provisioner
        self.verifier = verifier
        self.instance_name = instance_name
        self.logger = get_logger(f"driver.{type(self).__name__.lower()}")
        self.logger.debug("Driver configured with config=%s", redact_config(self.config.model_dump()))

    def create(self, state: dict[str, Any]) -> None:
        raise ClientError(f"{type(self).__name__}#create must be implemented")

    def converge(self, state: dict[str, Any]) -> None:
        provisioner = self._require("provisioner", self.provisioner)

        try:
            provisioner.create_sandbox()
            sandbox_dirs = sorted(glob.glob(os.path.join(provisioner.sandbox_path, "*")))

            with SSHConnection(*self.build_ssh_args(state)) as conn:
                self.run_remote(provisioner.install_command, conn)
                self.run_remote(provisioner.init_command, conn)
                self.transfer_path(sandbox_dirs, provisioner.root_path, conn)
                self.run_remote(provisioner.prepare_command, conn)
                self.run_remote(provisioner.run_command, conn)
        except BaseException:
            self._cleanup_sandbox(provisioner, step_failed=True)
            raise
        self._cleanup_sandbox(provisioner, step_failed=False)

    def setup(self, state: dict[str, Any]) -> None:
        verifier = self._require("verifier", self.verifier)

        with SSHConnection(*self.build_ssh_args(state)) as conn:
            self.run_remote(verifier.setup_command, conn)

    def verify(self, state: dict[str, Any]) -> None:
        verifier = self._require("verifier", self.verifier)

        with SSHConnection(*self.build_ssh_args(state)) as conn:
            self.run_remote(verifier.sync_command, conn)
            self.run_remote(verifier.run_command, conn)

    def destroy(self, state: dict[str, Any]) -> None:
        raise ClientError(f"{type(self).__name__}#destroy must be implemented")

    def login_command(self, state: dict[str, Any]) -> LoginCommand:
        return SSHConnection(*self.build_ssh_args(state)).login_command()

    def remote_command(self, state: dict[str, Any], command: str | None) -> None:
        """Execute an arbitrary command on the instance; raises ActionFailed if it does not complete."""
        with SSHConnection(*self.build_ssh_args(state)) as conn:
            self.run_remote(command, conn)

    def build_ssh_args(self, state: dict[str, Any]) -> tuple[str | None, str | None, dict[str, Any]]:
        combined = {**self.config.model_dump(exclude_none=True), **state}

        opts: dict[str, Any] = {
            "user_known_hosts_file": "/dev/null",
            "paranoid": False,
        }
        if combined.get("ssh_key"):
            opts["keys_only"] = True
        if combined.get("password"):
            opts["password"] = combined["password"]
        if "forward_agent" in combined:
            opts["forward_agent"] = combined["forward_agent"]
        if combined.get("port"):
            opts["port"] = combined["port"]
        if combined.get("ssh_key"):
            opts["keys"] = _as_list(combined["ssh_key"])
        opts["logger"] = self.logger

        return combined.get("hostname"), combined.get("username"), opts

    def env_cmd(self, command: str) -> str:
        """Prefix command with http/https proxy variables when they are configured."""
        env = "env"
        if self.config.http_proxy:
            env += f" http_proxy={self.config.http_proxy}"
        if self.config.https_proxy:
            env += f" https_proxy={self.config.https_proxy}"

        return command if env == "env" else f"{env} {command}"

    def run_remote(self, command: str | None, connection: SSHConnection) -> None:
        if not command:
            return

        try:
            connection.exec(self.env_cmd(command))
        except _CONNECTION_ERRORS as exc:
            raise ActionFailed(str(exc)) from exc

    def transfer_path(self, local_paths: Sequence[str] | None, remote: str, connection: SSHConnection) -> None:
        """Pack local paths into one archive, upload it and unpack it in remote."""
        if not local_paths:
            return

        self.logger.info("Compress files before transferring")
        try:
            with pack(local_paths) as archive:
                connection.upload(archive, remote)
                filename = archive.name
                self.logger.info("Transferring files to %s", self.instance_name)
                self.run_remote(
                    f"cd {remote} && tar xvfz {filename} > /dev/null && rm {filename}",
                    connection,
                )
        except _CONNECTION_ERRORS as exc:
            raise ActionFailed(str(exc)) from exc
        self.logger.debug("Transfer complete")

    def wait_for_sshd(self, hostname: str, username: str | None = None, options: dict[str, Any] | None = None) -> None:
        """Block until a TCP socket is accepting connections where sshd should be listening."""
        SSHConnection(hostname, username, {"logger": self.logger, **(options or {})}).wait()

    def _require(self, role: str, collaborator):
        if collaborator is None:
            raise ClientError(f"{type(self).__name__} requires a {role} for instance {self.instance_name}")
        return collaborator

    def _cleanup_sandbox(self, provisioner, *, step_failed: bool) -> None:
        if not step_failed:
            provisioner.cleanup_sandbox()
            return

        try:
            provisioner.cleanup_sandbox()
        except Exception:
            self.logger.exception("Sandbox cleanup failed after an earlier converge failure")


def _as_list(value: Any) -> list[Any]:
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]
