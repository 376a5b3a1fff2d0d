"""Provisioner contract: a local sandbox plus the remote commands that consume it."""

import os
import shutil
import tempfile

from ssh_kitchen.driver._config import load_plugin_config
from ssh_kitchen.driver._logging import get_logger
from ssh_kitchen.driver.errors import ClientError

from .config import ProvisionerConfig


class BaseProvisioner:
    config_class: type[ProvisionerConfig] = ProvisionerConfig

    def __init__(
        self,
        config: dict | None = None,
        *,
        instance_name: str = "default",
        file_path: str | None = None,
        env_prefix: str = "KITCHEN_PROVISIONER",
    ):
        merged_config = load_plugin_config(config, file_path=file_path, env_prefix=env_prefix)
        self.config = self.config_class.model_validate(merged_config)
        self.instance_name = instance_name
        self.logger = get_logger(f"provisioner.{type(self).__name__.lower()}")
        self._sandbox_path: str | None = None

    @property
    def sandbox_path(self) -> str:
        if self._sandbox_path is None:
            raise ClientError(
                "Sandbox directory has not yet been created. "
                "Please run create_sandbox before trying to access the path."
            )
        return self._sandbox_path

    @property
    def root_path(self) -> str:
        return self.config.root_path

    @property
    def install_command(self) -> str | None:
        return None

    @property
    def init_command(self) -> str | None:
        return None

    @property
    def prepare_command(self) -> str | None:
        return None

    @property
    def run_command(self) -> str | None:
        return None

    def create_sandbox(self) -> None:
        self._sandbox_path = tempfile.mkdtemp(prefix=f"{self.instance_name}-sandbox-")
        os.chmod(self._sandbox_path, 0o755)
        self.logger.info("Preparing files for transfer")
        self.logger.debug("Creating local sandbox in %s", self._sandbox_path)

    def cleanup_sandbox(self) -> None:
        if self._sandbox_path is None:
            return

        self.logger.debug("Cleaning up local sandbox in %s", self._sandbox_path)
        shutil.rmtree(self._sandbox_path)
        self._sandbox_path = None

    def sudo(self, command: str) -> str:
        return f"sudo -E {command}" if self.config.sudo else command
