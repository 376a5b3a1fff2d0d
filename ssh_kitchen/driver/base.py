"""Abstract driver contract for instance lifecycle actions."""

from abc import ABC, abstractmethod
from typing import Any

from .ssh.login_command import LoginCommand


class BaseDriver(ABC):
    @abstractmethod
    def create(self, state: dict[str, Any]) -> None:
        """Bring the instance into existence and record how to reach it in state."""
        pass

    @abstractmethod
    def converge(self, state: dict[str, Any]) -> None:
        """Transfer the provisioner sandbox and run the provisioning commands."""
        pass

    @abstractmethod
    def setup(self, state: dict[str, Any]) -> None:
        """Prepare the instance for verification."""
        pass

    @abstractmethod
    def verify(self, state: dict[str, Any]) -> None:
        """Run the verification suite on the instance."""
        pass

    @abstractmethod
    def destroy(self, state: dict[str, Any]) -> None:
        """Tear down the instance and clear its reachability facts from state."""
        pass

    @abstractmethod
    def login_command(self, state: dict[str, Any]) -> LoginCommand:
        """Return the command that opens an interactive session on the instance."""
        pass
