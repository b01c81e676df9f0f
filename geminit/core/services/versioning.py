"""
Version parsing, comparison and detection.

Versions compare as ``(major, minor, patch)`` integer tuples, never as
strings: ``"20.9.0" < "20.10.0"``.
"""

from __future__ import annotations

import re
import shutil

from geminit.core.services.subprocess_runner import run_command

ZERO_VERSION = "0.0.0"

_VERSION_RE = re.compile(r"v?(\d+(?:\.\d+){0,2})")

VERSION_COMMANDS: dict[str, tuple[list[str], str]] = {
    "node":   (["node", "--version"],   r"v?(\d+\.\d+\.\d+)"),
    "npm":    (["npm", "--version"],    r"(\d+\.\d+\.\d+)"),
    "gemini": (["gemini", "--version"], r"(\d+\.\d+\.\d+)"),
}


def parse_version(version: str) -> tuple[int, int, int]:
    """Parse ``"v20.10.1"`` / ``"20.10"`` / ``"20"`` into a 3-tuple.

    Missing components count as 0. Pre-release or build suffixes after
    the numeric part are ignored.

    Raises:
        ValueError: If no leading dotted number is present.
    """
    match = _VERSION_RE.match(version.strip())
    if not match:
        raise ValueError(f"Not a dotted numeric version: {version!r}")
    parts = [int(p) for p in match.group(1).split(".")]
    parts += [0] * (3 - len(parts))
    return parts[0], parts[1], parts[2]


def compare_versions(a: str, b: str) -> int:
    """Return -1, 0 or 1 as ``a`` is older, equal or newer than ``b``."""
    pa, pb = parse_version(a), parse_version(b)
    return (pa > pb) - (pa < pb)


def needs_upgrade(current: str, required: str) -> bool:
    """True when ``current`` is strictly older than ``required``."""
    return compare_versions(current, required) < 0


def get_tool_version(tool: str, *, timeout: int | None = None) -> str | None:
    """Get the installed version of a tool from ``VERSION_COMMANDS``.

    ``timeout`` is passed to the runner as is; ``None`` waits for exit.

    Returns:
        Version string (e.g. ``"20.11.1"``) or ``None`` if the tool is
        not installed or the version can't be determined.
    """
    entry = VERSION_COMMANDS.get(tool)
    if entry:
        cmd, pattern = entry
    else:
        cmd, pattern = [tool, "--version"], r"(\d+\.\d+\.\d+)"

    # Resolved path so npm.cmd / gemini.cmd work on Windows
    exe = shutil.which(cmd[0])
    if not exe:
        return None

    result = run_command([exe, *cmd[1:]], timeout=timeout)
    if not result["ok"]:
        return None
    output = result.get("stdout", "") + result.get("stderr", "")
    match = re.search(pattern, output)
    return match.group(1) if match else None


def detect_runtime_version(tool: str = "node", *, timeout: int | None = None) -> str:
    """Installed runtime version, or ``"0.0.0"`` when absent."""
    return get_tool_version(tool, timeout=timeout) or ZERO_VERSION
