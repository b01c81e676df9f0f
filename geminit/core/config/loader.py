"""
Configuration loader — reads geminit.yml into config models.

The file is optional. It may be flat (workspace keys at top level) or
split into ``workspace:`` and ``runtime:`` sections.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from geminit.core.models.config import BootstrapConfig, RuntimeConfig

logger = logging.getLogger(__name__)

CONFIG_FILE = "geminit.yml"


class ConfigError(Exception):
    """Raised when geminit.yml is invalid or unreadable."""


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Search for geminit.yml starting from the given directory, walking up.

    Args:
        start_dir: Directory to start searching from (default: cwd).

    Returns:
        Path to geminit.yml, or None if not found.
    """
    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):  # safety limit
        candidate = current / CONFIG_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break
        current = parent

    return None


def _read_yaml(path: Path) -> dict[str, Any]:
    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    logger.debug("Loading config from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")
    return data


def _section(data: dict[str, Any], name: str, path: Path | None) -> dict[str, Any]:
    if name in data:
        section = data[name] or {}
        if not isinstance(section, dict):
            raise ConfigError(f"Section '{name}' in {path} must be a mapping")
        return dict(section)
    # Flat files only carry workspace keys
    if name == "workspace":
        return {k: v for k, v in data.items() if k != "runtime"}
    return {}


def load_config(
    path: Path | None = None,
    *,
    overrides: dict[str, Any] | None = None,
) -> BootstrapConfig:
    """Load the workspace bootstrap configuration.

    Args:
        path: Explicit path to geminit.yml. ``None`` means defaults only.
        overrides: Values that win over the file (CLI flags). ``None``
            values are ignored.

    Raises:
        ConfigError: If the file is missing or invalid.
    """
    data = _section(_read_yaml(path), "workspace", path) if path else {}
    data.update({k: v for k, v in (overrides or {}).items() if v is not None})

    try:
        config = BootstrapConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid workspace configuration: {e}") from e

    logger.debug("Workspace config: env=%s packages=%s", config.environment_name, config.packages)
    return config


def load_runtime_config(
    path: Path | None = None,
    *,
    overrides: dict[str, Any] | None = None,
) -> RuntimeConfig:
    """Load the runtime installer configuration (``runtime:`` section)."""
    data = _section(_read_yaml(path), "runtime", path) if path else {}
    data.update({k: v for k, v in (overrides or {}).items() if v is not None})

    try:
        return RuntimeConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid runtime configuration: {e}") from e
