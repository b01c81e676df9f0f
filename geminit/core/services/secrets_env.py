"""
Secrets file (.env) handling and hidden credential capture.

The credential is read without echo into a ``bytearray`` owned by
``SecretPrompt``; the buffer is zeroed when the ``with`` block exits,
whether it exits normally, with an error, or on Ctrl-C.
"""

from __future__ import annotations

import getpass
import logging
from collections.abc import Callable
from pathlib import Path

from geminit.core.errors import ScaffoldError

logger = logging.getLogger(__name__)


class SecretPrompt:
    """Scoped hidden-input buffer.

    Usage::

        with SecretPrompt("API key: ") as secret:
            rewrite_secret(path, "KEY", secret.value())
    """

    def __init__(
        self,
        prompt: str,
        *,
        reader: Callable[[str], str] = getpass.getpass,
    ) -> None:
        self._prompt = prompt
        self._reader = reader
        self._buffer = bytearray()

    def __enter__(self) -> SecretPrompt:
        self._buffer = bytearray(self._reader(self._prompt).strip().encode("utf-8"))
        return self

    def __exit__(self, *exc: object) -> None:
        self.clear()

    def value(self) -> str:
        return self._buffer.decode("utf-8")

    def __bool__(self) -> bool:
        return len(self._buffer) > 0

    @property
    def cleared(self) -> bool:
        return not any(self._buffer)

    def clear(self) -> None:
        for i in range(len(self._buffer)):
            self._buffer[i] = 0


def ensure_file(path: Path) -> bool:
    """Create an empty file if absent. Returns True if created now."""
    if path.exists():
        return False
    try:
        path.touch()
    except OSError as e:
        raise ScaffoldError(f"Cannot create {path}: {e}", step="secrets", path=path) from e
    return True


def _line_key(line: str) -> str | None:
    stripped = line.strip()
    if not stripped or stripped.startswith("#") or "=" not in stripped:
        return None
    key = stripped.partition("=")[0].strip()
    if key.startswith("export "):
        key = key[len("export "):].strip()
    return key


def rewrite_secret(path: Path, key: str, value: str) -> None:
    """Replace every ``key=`` line with one ``key=value`` line at the end.

    All other lines, comments included, are kept in order.
    """
    try:
        existing = path.read_text(encoding="utf-8").splitlines() if path.exists() else []
        kept = [line for line in existing if _line_key(line) != key]
        kept.append(f"{key}={value}")
        path.write_text("\n".join(kept) + "\n", encoding="utf-8")
    except OSError as e:
        raise ScaffoldError(f"Cannot update {path}: {e}", step="secrets", path=path) from e


def write_placeholder(path: Path, line: str) -> bool:
    """Write the placeholder line only into an empty file.

    Returns:
        True if written, False if the file already had content.
    """
    try:
        if path.exists() and path.read_text(encoding="utf-8").strip():
            return False
        path.write_text(line + "\n", encoding="utf-8")
    except OSError as e:
        raise ScaffoldError(f"Cannot write {path}: {e}", step="secrets", path=path) from e
    return True


def capture_secret(
    path: Path,
    key: str,
    *,
    reader: Callable[[str], str] = getpass.getpass,
) -> bool:
    """Prompt (no echo) for ``key`` and store it in ``path``.

    Returns:
        True if the file was rewritten, False on an empty answer.
    """
    with SecretPrompt(f"Enter {key} (input hidden): ", reader=reader) as secret:
        if not secret:
            return False
        rewrite_secret(path, key, secret.value())
    logger.info("Stored %s in %s", key, path.name)
    return True
