"""YAML-backed persistence for per-instance driver state."""

from pathlib import Path
from typing import Any

import yaml

from ssh_kitchen.driver._logging import get_logger
from ssh_kitchen.driver.errors import UserError

logger = get_logger("lifecycle.state_file")


class StateFile:
    def __init__(self, state_dir: str | Path, name: str):
        self.path = Path(state_dir) / f"{name}.yml"

    def read(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}

        try:
            data = yaml.safe_load(self.path.read_text(encoding="utf-8"))
        except yaml.YAMLError as exc:
            raise UserError(f"Error parsing {self.path} ({exc}). Please delete it and try again.") from exc

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise UserError(f"State file {self.path} must contain a key-value object.")
        return data

    def write(self, state: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(yaml.safe_dump(state, default_flow_style=False, sort_keys=True), encoding="utf-8")
        logger.debug("State written to %s", self.path)

    def destroy(self) -> None:
        if self.path.exists():
            self.path.unlink()
            logger.debug("State file %s removed", self.path)
