from .base import BaseProvisioner
from .shell import ShellProvisioner

__all__ = ["BaseProvisioner", "ShellProvisioner"]
