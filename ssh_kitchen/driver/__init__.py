from .base import BaseDriver
from .errors import ActionFailed, ClientError, InstanceFailure, KitchenError, SSHFailed, TransientFailure, UserError
from .ssh_base import SSHBase
from .proxy import ProxyDriver
from .factory import create_driver, create_provisioner, create_verifier, load_project_config

__all__ = [
    "BaseDriver",
    "SSHBase",
    "ProxyDriver",
    "KitchenError",
    "UserError",
    "ClientError",
    "TransientFailure",
    "ActionFailed",
    "SSHFailed",
    "InstanceFailure",
    "create_driver",
    "create_provisioner",
    "create_verifier",
    "load_project_config",
]
