"""Exception hierarchy shared by drivers, provisioners, verifiers and instances."""


class KitchenError(Exception):
    """Base class for every error raised by ssh_kitchen."""


class UserError(KitchenError):
    """Invalid or incomplete configuration supplied by the user."""


class ClientError(KitchenError):
    """A plugin was used incorrectly or is missing a required implementation."""


class TransientFailure(KitchenError):
    """A failure the caller may recover from by retrying the whole action."""


class ActionFailed(TransientFailure):
    """A remote command or file transfer did not complete."""


class SSHFailed(TransientFailure):
    """Raised by the SSH connection layer."""


class InstanceFailure(TransientFailure):
    """An instance action failed; wraps the underlying ActionFailed."""


__all__ = [
    "KitchenError",
    "UserError",
    "ClientError",
    "TransientFailure",
    "ActionFailed",
    "SSHFailed",
    "InstanceFailure",
]
