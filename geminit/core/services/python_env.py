"""
Python environment operations — venv, pip installs, manifest.

Every pip call runs through the environment's own interpreter
(``<venv>/bin/python -m pip``), never the interpreter running geminit.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from pathlib import Path

import yaml

from geminit.core.errors import EnvironmentCreationError, PackageInstallError, ScaffoldError
from geminit.core.services.subprocess_runner import run_command

logger = logging.getLogger(__name__)


def interpreter_path(env_dir: Path, *, windows: bool | None = None) -> Path:
    """Path of the interpreter inside a virtual environment."""
    if windows is None:
        windows = os.name == "nt"
    if windows:
        return env_dir / "Scripts" / "python.exe"
    return env_dir / "bin" / "python"


def create_environment(env_dir: Path, *, timeout: int | None = None) -> bool:
    """Create a venv at ``env_dir`` unless the directory already exists.

    Returns:
        True if it was created now, False if it already existed.

    Raises:
        EnvironmentCreationError: If creation fails or leaves no interpreter.
    """
    created = False
    if env_dir.exists():
        logger.info("Environment exists, skipping: %s", env_dir)
    else:
        logger.info("Creating environment %s", env_dir)
        r = run_command([sys.executable, "-m", "venv", str(env_dir)], timeout=timeout)
        if not r["ok"]:
            raise EnvironmentCreationError(
                f"python -m venv failed: {r['error']}",
                step="environment",
                path=env_dir,
            )
        created = True

    python = interpreter_path(env_dir)
    if not python.exists():
        raise EnvironmentCreationError(
            f"Environment is broken, interpreter missing: {python}. "
            f"Delete {env_dir} and re-run.",
            step="environment",
            path=python,
        )
    return created


def _pip(python: Path, *args: str) -> list[str]:
    return [str(python), "-m", "pip", *args]


def upgrade_pip(python: Path, *, timeout: int | None = None) -> None:
    """Upgrade pip inside the environment."""
    r = run_command(_pip(python, "install", "--upgrade", "pip"), timeout=timeout)
    if not r["ok"]:
        raise PackageInstallError(
            f"pip upgrade failed: {r['error']}",
            step="pip-upgrade",
            path=python,
        )


def install_packages(
    python: Path,
    packages: list[str],
    *,
    timeout: int | None = None,
) -> list[str]:
    """Install packages one at a time; the first failure aborts.

    Returns:
        The packages installed, in order.

    Raises:
        PackageInstallError: Naming the package that failed.
    """
    installed: list[str] = []
    for package in packages:
        logger.info("Installing %s", package)
        r = run_command(_pip(python, "install", package), timeout=timeout)
        if not r["ok"]:
            done = f" (installed before failure: {', '.join(installed)})" if installed else ""
            raise PackageInstallError(
                f"Failed to install '{package}': {r['error']}{done}",
                step="packages",
                path=python,
            )
        installed.append(package)
    return installed


def list_installed(python: Path, *, timeout: int | None = None) -> dict[str, str]:
    """Installed packages as an ordered ``{name: version}`` mapping.

    Order follows ``pip list`` discovery order.
    """
    r = run_command(_pip(python, "list", "--format", "json"), timeout=timeout)
    if not r["ok"]:
        raise PackageInstallError(
            f"pip list failed: {r['error']}",
            step="manifest",
            path=python,
        )
    try:
        entries = json.loads(r["stdout"] or "[]")
    except json.JSONDecodeError as e:
        raise PackageInstallError(
            f"pip list returned invalid JSON: {e}",
            step="manifest",
            path=python,
        ) from e

    manifest: dict[str, str] = {}
    for entry in entries:
        name = entry.get("name")
        if name:
            manifest[name] = str(entry.get("version", ""))
    return manifest


def write_manifest(path: Path, packages: dict[str, str]) -> None:
    """Write the manifest as flat YAML, overwriting any previous one."""
    text = yaml.safe_dump(packages, sort_keys=False, default_flow_style=False, allow_unicode=True)
    try:
        path.write_text(text, encoding="utf-8")
    except OSError as e:
        raise ScaffoldError(f"Cannot write {path}: {e}", step="manifest", path=path) from e


def read_manifest(path: Path) -> dict[str, str]:
    """Load a manifest written by ``write_manifest``."""
    data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    return {str(k): str(v) for k, v in data.items()}
