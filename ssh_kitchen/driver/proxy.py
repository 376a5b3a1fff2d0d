from typing import Any

from .config import ProxyConfig
from .ssh_base import SSHBase


class ProxyDriver(SSHBase):
    """Driver for a host that already exists and is only reset between runs."""

    config_class = ProxyConfig
    required_config = ("host",)

    def create(self, state: dict[str, Any]) -> None:
        state["hostname"] = self.config.host
        if self.config.username and "username" not in state:
            state["username"] = self.config.username

        if self.config.wait_for_ssh:
            self.wait_for_sshd(state["hostname"], state.get("username"), {"port": self.config.port})
        self._reset_instance(state)

    def destroy(self, state: dict[str, Any]) -> None:
        if state.get("hostname") is None:
            return

        self._reset_instance(state)
        state.pop("hostname", None)

    def _reset_instance(self, state: dict[str, Any]) -> None:
        command = self.config.reset_command
        if not command:
            return

        self.logger.info("Resetting instance state with command: %s", command)
        self.remote_command(state, command)
