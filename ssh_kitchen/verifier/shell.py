from .base import BaseVerifier
from .config import ShellVerifierConfig


class ShellVerifier(BaseVerifier):
    """Runs configured shell commands on the instance; any of them may be omitted."""

    config_class = ShellVerifierConfig

    @property
    def setup_command(self) -> str | None:
        return self.sudo(self.config.setup_command)

    @property
    def sync_command(self) -> str | None:
        return self.sudo(self.config.sync_command)

    @property
    def run_command(self) -> str | None:
        return self.sudo(self.config.run_command)
