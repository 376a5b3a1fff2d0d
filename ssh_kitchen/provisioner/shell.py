import os
import posixpath
import shutil
from pathlib import Path

from ssh_kitchen.driver.errors import UserError

from .base import BaseProvisioner
from .config import ShellProvisionerConfig


class ShellProvisioner(BaseProvisioner):
    """Uploads a shell script (and optional data directory) and runs it on the instance."""

    config_class = ShellProvisionerConfig

    def __init__(self, config: dict | None = None, **kwargs):
        super().__init__(config, **kwargs)
        if not self.config.script and not self.config.command:
            raise UserError("Shell provisioner requires either a 'script' or a 'command'")

    @property
    def init_command(self) -> str:
        return f"{self.sudo('rm')} -rf {self.root_path} ; mkdir -p {self.root_path}"

    @property
    def run_command(self) -> str:
        if self.config.command:
            return self.sudo(self.config.command)
        return self.sudo(posixpath.join(self.root_path, Path(self.config.script).name))

    def create_sandbox(self) -> None:
        super().create_sandbox()
        if self.config.script:
            self._prepare_script()
        if self.config.data_path:
            self._prepare_data()

    def _prepare_script(self) -> None:
        script = Path(self.config.script).expanduser()
        if not script.is_file():
            raise UserError(f"Shell provisioner script not found: {script}")

        target = Path(self.sandbox_path) / script.name
        self.logger.info("Preparing script %s", script)
        shutil.copyfile(script, target)
        os.chmod(target, 0o755)

    def _prepare_data(self) -> None:
        data_path = Path(self.config.data_path).expanduser()
        if not data_path.is_dir():
            raise UserError(f"Shell provisioner data_path is not a directory: {data_path}")

        self.logger.info("Preparing data from %s", data_path)
        shutil.copytree(data_path, Path(self.sandbox_path) / "data")
