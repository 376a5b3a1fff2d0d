from .instance import Instance, build_instance
from .state_file import StateFile

__all__ = ["Instance", "StateFile", "build_instance"]
