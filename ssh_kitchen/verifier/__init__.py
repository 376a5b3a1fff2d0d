from .base import BaseVerifier
from .shell import ShellVerifier

__all__ = ["BaseVerifier", "ShellVerifier"]
