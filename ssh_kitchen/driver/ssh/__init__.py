from .connection import SSHConnection
from .login_command import LoginCommand

__all__ = ["SSHConnection", "LoginCommand"]
