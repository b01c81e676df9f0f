"""
Error taxonomy — every failure the installer and bootstrapper can raise.

Fatal errors halt the run and surface in the CLI as a red message plus
exit code 1. ``NetworkFetchError`` is the only recoverable one: callers
catch it, log a warning and fall back.
"""

from __future__ import annotations

from pathlib import Path


class GeminitError(Exception):
    """Base class for all run-halting failures.

    Args:
        message: Human-readable description.
        step: Name of the step that failed (e.g. ``"packages"``).
        path: File or directory involved, if any.
    """

    def __init__(
        self,
        message: str,
        *,
        step: str = "",
        path: Path | str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.step = step
        self.path = Path(path) if path is not None else None

    def __str__(self) -> str:
        prefix = f"[{self.step}] " if self.step else ""
        return f"{prefix}{self.message}"

    def to_dict(self) -> dict:
        return {
            "error": self.message,
            "type": self.__class__.__name__,
            "step": self.step,
            "path": str(self.path) if self.path else None,
        }


class PrivilegeError(GeminitError):
    """The installer needs administrator/root rights. Re-run elevated."""


class EnvironmentCreationError(GeminitError):
    """The virtual environment is missing its interpreter after creation."""


class PackageInstallError(GeminitError):
    """A package failed to install. The first failure aborts the step."""


class NetworkFetchError(GeminitError):
    """A network fetch failed. Recoverable: callers use a fallback."""


class VerificationError(GeminitError):
    """The installed tool cannot be invoked after installation."""


class RuntimeInstallError(GeminitError):
    """Installing or updating the Node.js runtime or npm failed."""


class ScaffoldError(GeminitError):
    """A file-system operation on the workspace failed."""
