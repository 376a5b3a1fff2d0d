"""Verifier contract: remote commands that prepare for and run a test suite."""

from ssh_kitchen.driver._config import load_plugin_config
from ssh_kitchen.driver._logging import get_logger

from .config import VerifierConfig


class BaseVerifier:
    config_class: type[VerifierConfig] = VerifierConfig

    def __init__(
        self,
        config: dict | None = None,
        *,
        instance_name: str = "default",
        file_path: str | None = None,
        env_prefix: str = "KITCHEN_VERIFIER",
    ):
        merged_config = load_plugin_config(config, file_path=file_path, env_prefix=env_prefix)
        self.config = self.config_class.model_validate(merged_config)
        self.instance_name = instance_name
        self.logger = get_logger(f"verifier.{type(self).__name__.lower()}")

    @property
    def setup_command(self) -> str | None:
        return None

    @property
    def sync_command(self) -> str | None:
        return None

    @property
    def run_command(self) -> str | None:
        return None

    def sudo(self, command: str | None) -> str | None:
        if not command:
            return None
        return f"sudo -E {command}" if self.config.sudo else command
