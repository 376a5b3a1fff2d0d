"""Plugin factory resolving drivers, provisioners and verifiers by their configured name."""

import importlib
import inspect
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from ._config import read_config_file
from ._logging import get_logger, redact_config
from .base import BaseDriver
from .errors import UserError

logger = get_logger("driver.factory")

_PLUGIN_PACKAGES = {
    "driver": "ssh_kitchen.driver",
    "provisioner": "ssh_kitchen.provisioner",
    "verifier": "ssh_kitchen.verifier",
}


def load_project_config(config: dict[str, Any] | str | Path) -> dict[str, Any]:
    """Load a project config holding driver, provisioner and verifier sections."""
    data = config if isinstance(config, dict) else read_config_file(config)

    for section in ("driver", "provisioner", "verifier"):
        value = data.get(section)
        if value is not None and not isinstance(value, dict):
            raise UserError(f"Project config section '{section}' must be a key-value object.")

    return data


def create_driver(config: dict[str, Any], **kwargs) -> BaseDriver:
    """Instantiate the driver class inferred from the name field."""
    return _create_plugin("driver", config, _base_class("driver"), **kwargs)


def create_provisioner(config: dict[str, Any], **kwargs):
    return _create_plugin("provisioner", config, _base_class("provisioner"), **kwargs)


def create_verifier(config: dict[str, Any], **kwargs):
    return _create_plugin("verifier", config, _base_class("verifier"), **kwargs)


def _base_class(kind: str) -> type:
    if kind == "driver":
        return BaseDriver
    module = importlib.import_module(_PLUGIN_PACKAGES[kind])
    return getattr(module, f"Base{kind.capitalize()}")


def _create_plugin(kind: str, config: dict[str, Any], base_class: type, **kwargs):
    name = _normalize_name(kind, config.get("name"))
    payload = dict(config)
    payload.pop("name", None)

    plugin_class = _resolve_plugin_class(kind, name, base_class)
    logger.info("Creating %s name=%s class=%s config=%s", kind, name, plugin_class.__name__, redact_config(payload))

    try:
        return plugin_class(payload, **kwargs)
    except ValidationError as exc:
        raise UserError(f"Invalid configuration for {kind} '{name}': {exc}") from exc
    except TypeError as exc:
        raise UserError(f"Invalid parameters for {kind} '{name}' using '{plugin_class.__name__}': {exc}") from exc


def _normalize_name(kind: str, value: Any) -> str:
    """Validate and normalize plugin name to lowercase string."""
    if not isinstance(value, str) or not value.strip():
        raise UserError(f"Missing required 'name' field in {kind} configuration.")
    return value.strip().lower()


def _resolve_plugin_class(kind: str, name: str, base_class: type) -> type:
    package = _PLUGIN_PACKAGES[kind]
    module_name = f"{package}.{name}"
    try:
        module = importlib.import_module(module_name)
    except ModuleNotFoundError as exc:
        if exc.name != module_name:
            raise
        raise UserError(f"Unsupported {kind} '{name}'. Add a module '{module_name}' following existing patterns.") from exc

    plugin_class = _find_plugin_class(module, f"{name}{kind}", base_class)
    if plugin_class is None:
        raise UserError(f"Module '{module_name}' does not define a {base_class.__name__} subclass.")
    return plugin_class


def _find_plugin_class(module, preferred_class_name: str, base_class: type) -> type | None:
    """Return preferred or first valid plugin class from module."""
    fallback: type | None = None

    for _, member in inspect.getmembers(module, inspect.isclass):
        if not issubclass(member, base_class) or member is base_class:
            continue
        if member.__module__ != module.__name__:
            continue

        if member.__name__.lower() == preferred_class_name.lower():
            return member

        if fallback is None:
            fallback = member

    return fallback


__all__ = ["load_project_config", "create_driver", "create_provisioner", "create_verifier"]
