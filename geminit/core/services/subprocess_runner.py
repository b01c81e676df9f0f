"""
Core subprocess runner.

The SINGLE PLACE where ``subprocess.run`` is called. Installer and
bootstrapper steps go through ``run_command`` and turn a failed result
into the matching typed error themselves.
"""

from __future__ import annotations

import logging
import subprocess
import time
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

# Output tails kept in results; pip and npm can be very chatty
_TAIL = 2000


def run_command(
    cmd: list[str],
    *,
    timeout: int | None = None,
    cwd: Path | str | None = None,
) -> dict[str, Any]:
    """Run a command to completion and capture its output.

    Args:
        cmd: Command list for ``subprocess.run()``.
        timeout: Seconds before giving up. ``None`` blocks until exit.
        cwd: Working directory for the command.

    Returns:
        ``{"ok": True, "stdout": "...", "stderr": "...", "elapsed_ms": N}``
        on success, ``{"ok": False, "error": "...", ...}`` on failure.
        ``missing`` is True when the executable was not found.
    """
    logger.debug("Executing: %s (cwd=%s)", " ".join(cmd), cwd)
    start = time.monotonic()
    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            timeout=timeout,
            cwd=str(cwd) if cwd is not None else None,
        )
    except FileNotFoundError:
        return {"ok": False, "missing": True, "error": f"Command not found: {cmd[0]}"}
    except subprocess.TimeoutExpired:
        return {"ok": False, "error": f"Command timed out ({timeout}s): {' '.join(cmd)}"}
    except OSError as e:
        logger.debug("Subprocess error for %s", cmd, exc_info=True)
        return {"ok": False, "error": f"Cannot run {cmd[0]}: {e}"}

    elapsed_ms = int((time.monotonic() - start) * 1000)
    stdout = result.stdout or ""
    stderr = result.stderr or ""

    if result.returncode == 0:
        return {
            "ok": True,
            "stdout": stdout,
            "stderr": stderr[-_TAIL:],
            "elapsed_ms": elapsed_ms,
        }

    return {
        "ok": False,
        "returncode": result.returncode,
        "error": stderr.strip()[-_TAIL:] or f"Command failed (exit {result.returncode})",
        "stdout": stdout[-_TAIL:],
        "elapsed_ms": elapsed_ms,
    }
