import time
from pathlib import Path
from typing import Any, Callable

from ssh_kitchen.driver._logging import get_logger
from ssh_kitchen.driver.base import BaseDriver
from ssh_kitchen.driver.errors import ActionFailed, InstanceFailure
from ssh_kitchen.driver.factory import create_driver, create_provisioner, create_verifier
from ssh_kitchen.driver.ssh.login_command import LoginCommand

from .state_file import StateFile

logger = get_logger("lifecycle.instance")

_TEST_SEQUENCE = ("destroy", "create", "converge", "setup", "verify", "destroy")


class Instance:
    """A named instance whose driver state is persisted between actions."""

    def __init__(self, name: str, driver: BaseDriver, state_file: StateFile):
        self.name = name
        self.driver = driver
        self.state_file = state_file

    def __str__(self) -> str:
        return f"<{self.name}>"

    def create(self) -> float:
        return self._action("create", self.driver.create)

    def converge(self) -> float:
        return self._action("converge", self.driver.converge)

    def setup(self) -> float:
        return self._action("setup", self.driver.setup)

    def verify(self) -> float:
        return self._action("verify", self.driver.verify)

    def destroy(self) -> float:
        elapsed = self._action("destroy", self.driver.destroy, record=False)
        self.state_file.destroy()
        return elapsed

    def test(self) -> float:
        """Destroy, create, converge, setup, verify and destroy the instance, in order."""
        return sum(getattr(self, action)() for action in _TEST_SEQUENCE)

    def remote_exec(self, command: str) -> float:
        return self._action("exec", lambda state: self.driver.remote_command(state, command), record=False)

    def login(self) -> LoginCommand:
        return self.driver.login_command(self.state_file.read())

    def _action(self, what: str, callback: Callable[[dict[str, Any]], None], *, record: bool = True) -> float:
        """
        Run one driver action against the persisted state:
        1. Read state
        2. Invoke the driver
        3. Record last_action on success
        4. Write state back, whatever the outcome
        """
        state = self.state_file.read()
        started = time.monotonic()
        logger.info("%s %s", what.capitalize(), self)

        try:
            callback(state)
            if record:
                state["last_action"] = what
        except ActionFailed as exc:
            logger.error("Could not complete %s on %s: %s", what, self.name, exc)
            raise InstanceFailure(f"could not complete {what} on {self.name}: {exc}") from exc
        finally:
            self.state_file.write(state)

        elapsed = time.monotonic() - started
        logger.info("Finished %s %s (%.2fs)", what, self, elapsed)
        return elapsed


def build_instance(project_config: dict[str, Any], instance_name: str, state_dir: str | Path) -> Instance:
    """Wire provisioner, verifier and driver from project config sections into an Instance."""
    provisioner = None
    verifier = None
    if project_config.get("provisioner"):
        provisioner = create_provisioner(project_config["provisioner"], instance_name=instance_name)
    if project_config.get("verifier"):
        verifier = create_verifier(project_config["verifier"], instance_name=instance_name)

    driver = create_driver(
        project_config.get("driver") or {},
        provisioner=provisioner,
        verifier=verifier,
        instance_name=instance_name,
    )
    return Instance(instance_name, driver, StateFile(state_dir, instance_name))
