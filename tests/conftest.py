"""
Shared test fixtures and configuration.

No test touches real Node.js, npm, pip, venv or the network: the
fixtures below replace ``run_command`` and the license fetch.
"""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import patch

import pytest

from geminit.core.services.python_env import interpreter_path

MIT_TEXT = (
    "MIT License\n\n"
    "Permission is hereby granted, free of charge, to any person obtaining a copy\n"
    "of this software...\n"
)


class FakePip:
    """Stands in for ``python -m venv`` and ``python -m pip``.

    Records every command. ``venv`` creates the interpreter file so the
    environment looks real; ``pip list`` reports what was installed.
    """

    def __init__(self) -> None:
        self.calls: list[list[str]] = []
        self.installed: dict[str, str] = {"pip": "24.0"}
        self.failing: set[str] = set()
        self.broken_venv = False

    def __call__(self, cmd: list[str], **kwargs) -> dict:
        self.calls.append(list(cmd))

        if cmd[1:3] == ["-m", "venv"]:
            env_dir = Path(cmd[3])
            env_dir.mkdir(parents=True)
            if not self.broken_venv:
                python = interpreter_path(env_dir)
                python.parent.mkdir(parents=True, exist_ok=True)
                python.write_text("")
            return {"ok": True, "stdout": "", "stderr": ""}

        args = cmd[3:]
        if args[:1] == ["install"]:
            package = args[-1]
            if package in self.failing:
                return {"ok": False, "returncode": 1, "error": f"No matching distribution found for {package}"}
            if package != "pip":
                self.installed[package] = "1.0.0"
            else:
                self.installed["pip"] = "25.1"
            return {"ok": True, "stdout": "", "stderr": ""}

        if args[:1] == ["list"]:
            payload = [{"name": k, "version": v} for k, v in self.installed.items()]
            return {"ok": True, "stdout": json.dumps(payload), "stderr": ""}

        return {"ok": False, "error": f"unexpected command {cmd}"}

    def commands(self, verb: str) -> list[list[str]]:
        return [c for c in self.calls if verb in c]


@pytest.fixture
def fake_pip():
    """Patch python_env.run_command with a FakePip."""
    fake = FakePip()
    with patch("geminit.core.services.python_env.run_command", side_effect=fake):
        yield fake


@pytest.fixture
def license_online():
    """License fetch returns MIT text."""
    with patch(
        "geminit.core.services.license_text.fetch_license_text",
        return_value=MIT_TEXT,
    ) as mock_fetch:
        yield mock_fetch


@pytest.fixture
def demo_dir(tmp_path: Path) -> Path:
    """An empty project directory named ``demo``."""
    target = tmp_path / "demo"
    target.mkdir()
    return target
