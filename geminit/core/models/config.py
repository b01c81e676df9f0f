"""
Configuration models — what the installer and bootstrapper should do.

Loaded from geminit.yml (optional) and overridden by CLI flags. These
models replace script-level globals: every service receives one
explicitly.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from geminit.core.services.versioning import parse_version

DEFAULT_PACKAGES = ["pyyaml", "python-dotenv", "requests"]

LICENSE_URL = "https://raw.githubusercontent.com/spdx/license-list-data/main/text/MIT.txt"

# Official Node.js distribution artifacts, keyed by platform.system().
# {arch} is filled from NODE_ARCHITECTURES; the macOS .pkg is universal.
NODE_INSTALLER_URLS: dict[str, str] = {
    "Windows": "https://nodejs.org/dist/v{version}/node-v{version}-{arch}.msi",
    "Darwin": "https://nodejs.org/dist/v{version}/node-v{version}.pkg",
    "Linux": "https://nodejs.org/dist/v{version}/node-v{version}-linux-{arch}.tar.xz",
}

# platform.machine() (lower-cased) -> Node.js dist architecture name
NODE_ARCHITECTURES: dict[str, str] = {
    "x86_64": "x64",
    "amd64": "x64",
    "aarch64": "arm64",
    "arm64": "arm64",
    "armv7l": "armv7l",
}


class BootstrapConfig(BaseModel):
    """Options for one workspace bootstrap run."""

    environment_name: str = ".venv"
    default_packages: list[str] = Field(default_factory=lambda: list(DEFAULT_PACKAGES))
    extra_packages: list[str] = Field(default_factory=list)
    prompt_for_secret: bool = False

    secret_key: str = "GEMINI_API_KEY"
    secret_placeholder: str = "your_api_key_here"
    manifest_name: str = "requirements.yaml"

    license_url: str = LICENSE_URL
    license_id: str = "MIT"

    # Shown in the README usage snippet
    model: str = "gemini-2.5-pro"
    output_format: str = "text"

    # None = wait for subprocesses indefinitely
    command_timeout: int | None = None
    fetch_timeout: int = 15

    @field_validator("environment_name")
    @classmethod
    def _relative_env_name(cls, v: str) -> str:
        if not v or v.startswith(("/", "\\")) or ".." in v.replace("\\", "/").split("/"):
            raise ValueError(f"environment_name must be a relative directory name, got {v!r}")
        return v

    @property
    def packages(self) -> list[str]:
        """Defaults followed by extras, duplicates dropped, order kept."""
        seen: set[str] = set()
        result: list[str] = []
        for pkg in [*self.default_packages, *self.extra_packages]:
            key = pkg.strip().lower()
            if key and key not in seen:
                seen.add(key)
                result.append(pkg.strip())
        return result

    @property
    def placeholder_line(self) -> str:
        return f"{self.secret_key}={self.secret_placeholder}"


class RuntimeConfig(BaseModel):
    """Options for the machine-level runtime installer."""

    min_version: str = "20.18.0"
    global_package: str = "@google/gemini-cli"
    tool_command: str = "gemini"
    installer_urls: dict[str, str] = Field(default_factory=lambda: dict(NODE_INSTALLER_URLS))
    command_timeout: int | None = None
    download_timeout: int = 300

    @field_validator("min_version")
    @classmethod
    def _dotted_version(cls, v: str) -> str:
        parse_version(v)
        return v.lstrip("v")

    def installer_url(self, system: str, machine: str = "") -> str | None:
        """Installer URL for ``platform.system()`` / ``platform.machine()``.

        Returns None for an unknown platform, or when the template needs
        an architecture that Node.js does not publish for ``machine``.
        """
        template = self.installer_urls.get(system)
        if not template:
            return None
        arch = NODE_ARCHITECTURES.get(machine.strip().lower())
        if "{arch}" in template and arch is None:
            return None
        return template.format(version=self.min_version, arch=arch or "")
