"""
Runtime installer — Node.js, npm and the Gemini CLI, once per machine.

Steps run strictly in order, none are retried:

    privileges → detect → upgrade (package manager | installer download)
    → refresh PATH → update npm → install global tool → verify

Requires an elevated (root / Administrator) process. Any failure after
detection raises a typed error naming the step.
"""

from __future__ import annotations

import logging
import os
import platform
import shutil
import tempfile
import urllib.error
import urllib.request
from pathlib import Path

from geminit.core.errors import (
    NetworkFetchError,
    PrivilegeError,
    RuntimeInstallError,
    VerificationError,
)
from geminit.core.models.config import RuntimeConfig
from geminit.core.models.step import RuntimeReport, StepReceipt
from geminit.core.services.subprocess_runner import run_command
from geminit.core.services.versioning import (
    detect_runtime_version,
    get_tool_version,
    needs_upgrade,
)

logger = logging.getLogger(__name__)


# ── System package managers, in order of preference ────────────

_SYSTEM_PACKAGE_MANAGERS: list[tuple[str, list[str]]] = [
    ("winget", [
        "winget", "install", "--id", "OpenJS.NodeJS.LTS", "--exact", "--silent",
        "--accept-package-agreements", "--accept-source-agreements",
    ]),
    ("choco", ["choco", "install", "nodejs-lts", "--yes", "--no-progress"]),
    ("brew", ["brew", "install", "node"]),
]

# Managers that refuse to run as root; under sudo they run as SUDO_USER
_ROOTLESS_MANAGERS = {"brew"}

# Where fresh Node.js installs land, per platform.system()
_INSTALL_PREFIXES: dict[str, list[str]] = {
    "Windows": [r"C:\Program Files\nodejs"],
    "Darwin": ["/usr/local/bin", "/opt/homebrew/bin"],
    "Linux": ["/usr/local/bin"],
}


# ═══════════════════════════════════════════════════════════════════
#  Privileges
# ═══════════════════════════════════════════════════════════════════


def is_elevated() -> bool:
    """Whether the current process has administrator/root rights."""
    if os.name == "nt":
        import ctypes

        try:
            return bool(ctypes.windll.shell32.IsUserAnAdmin())
        except (AttributeError, OSError):
            return False
    return os.geteuid() == 0


def require_elevated() -> None:
    """Raise ``PrivilegeError`` unless the process is elevated."""
    if not is_elevated():
        who = "an Administrator shell" if os.name == "nt" else "root (sudo)"
        raise PrivilegeError(
            f"Installing the runtime needs elevated privileges. Re-run as {who}.",
            step="privileges",
        )


# ═══════════════════════════════════════════════════════════════════
#  Upgrade
# ═══════════════════════════════════════════════════════════════════


def _find_system_package_manager() -> tuple[str, list[str]] | None:
    for name, cmd in _SYSTEM_PACKAGE_MANAGERS:
        exe = shutil.which(name)
        if not exe:
            continue
        full = [exe, *cmd[1:]]
        if name in _ROOTLESS_MANAGERS and is_elevated():
            user = os.environ.get("SUDO_USER")
            if not user or user == "root":
                logger.info("Skipping %s: it refuses to run as root and SUDO_USER is not set", name)
                continue
            full = ["sudo", "-H", "-u", user, *full]
        return name, full
    return None


def _installer_command(system: str, artifact: Path) -> list[str]:
    """Unattended install command for a downloaded artifact."""
    if system == "Windows":
        return ["msiexec", "/i", str(artifact), "/qn", "/norestart"]
    if system == "Darwin":
        return ["installer", "-pkg", str(artifact), "-target", "/"]
    return ["tar", "-xJf", str(artifact), "-C", "/usr/local", "--strip-components=1"]


def download_file(url: str, dest: Path, *, timeout: int = 300) -> Path:
    """Stream ``url`` into ``dest``.

    Raises:
        NetworkFetchError: On any HTTP or connection failure.
    """
    logger.info("Downloading %s", url)
    req = urllib.request.Request(url, headers={"User-Agent": "geminit/0.1"})
    try:
        with urllib.request.urlopen(req, timeout=timeout) as resp, open(dest, "wb") as out:
            shutil.copyfileobj(resp, out)
    except (urllib.error.URLError, TimeoutError, OSError) as e:
        raise NetworkFetchError(f"Download failed: {url}: {e}", step="download", path=dest) from e
    return dest


def install_from_download(
    config: RuntimeConfig,
    system: str | None = None,
    machine: str | None = None,
) -> str:
    """Download the platform installer, run it, and always delete it.

    Returns:
        The URL that was installed from.
    """
    system = system or platform.system()
    machine = platform.machine() if machine is None else machine
    url = config.installer_url(system, machine)
    if not url:
        raise RuntimeInstallError(
            f"No Node.js installer known for platform '{system}' ({machine or 'unknown arch'})",
            step="upgrade",
        )

    fd, tmp_name = tempfile.mkstemp(prefix="geminit-node-", suffix=Path(url).name)
    os.close(fd)
    artifact = Path(tmp_name)
    try:
        try:
            download_file(url, artifact, timeout=config.download_timeout)
        except NetworkFetchError as e:
            raise RuntimeInstallError(e.message, step="upgrade", path=artifact) from e

        r = run_command(_installer_command(system, artifact), timeout=config.command_timeout)
        if not r["ok"]:
            raise RuntimeInstallError(
                f"Node.js installer failed: {r['error']}",
                step="upgrade",
                path=artifact,
            )
    finally:
        artifact.unlink(missing_ok=True)
        logger.debug("Removed installer artifact %s", artifact)

    return url


def upgrade_runtime(config: RuntimeConfig) -> StepReceipt:
    """Install Node.js >= min_version, preferring a system package manager."""
    pm = _find_system_package_manager()
    if pm:
        name, cmd = pm
        logger.info("Installing Node.js with %s", name)
        r = run_command(cmd, timeout=config.command_timeout)
        if not r["ok"]:
            raise RuntimeInstallError(f"{name} could not install Node.js: {r['error']}", step="upgrade")
        return StepReceipt.done("upgrade", f"Installed Node.js with {name}", metadata={"method": name})

    url = install_from_download(config)
    return StepReceipt.done("upgrade", f"Installed Node.js from {url}", metadata={"method": "download"})


# ═══════════════════════════════════════════════════════════════════
#  PATH refresh
# ═══════════════════════════════════════════════════════════════════


def _registry_path_entries() -> list[str]:
    """Machine + user PATH from the Windows registry."""
    import winreg

    entries: list[str] = []
    keys = [
        (winreg.HKEY_LOCAL_MACHINE, r"SYSTEM\CurrentControlSet\Control\Session Manager\Environment"),
        (winreg.HKEY_CURRENT_USER, r"Environment"),
    ]
    for hive, sub in keys:
        try:
            with winreg.OpenKey(hive, sub) as key:
                value, _ = winreg.QueryValueEx(key, "Path")
        except OSError:
            continue
        entries.extend(os.path.expandvars(p) for p in value.split(os.pathsep) if p)
    return entries


def _npm_global_bin(timeout: int | None = None) -> str | None:
    exe = shutil.which("npm")
    if not exe:
        return None
    r = run_command([exe, "prefix", "-g"], timeout=timeout)
    if not r["ok"]:
        return None
    prefix = r["stdout"].strip()
    if not prefix:
        return None
    return prefix if os.name == "nt" else str(Path(prefix) / "bin")


def refresh_search_path(system: str | None = None, *, timeout: int | None = None) -> list[str]:
    """Make freshly installed binaries callable from this process.

    Returns:
        The PATH entries that were added.
    """
    system = system or platform.system()
    current = [p for p in os.environ.get("PATH", "").split(os.pathsep) if p]

    candidates = list(_INSTALL_PREFIXES.get(system, []))
    if system == "Windows":
        candidates += _registry_path_entries()

    added = [p for p in dict.fromkeys(candidates) if p not in current]
    os.environ["PATH"] = os.pathsep.join([*added, *current])

    # npm only resolves once node is on PATH
    npm_bin = _npm_global_bin(timeout)
    if npm_bin and npm_bin not in os.environ["PATH"].split(os.pathsep):
        os.environ["PATH"] = os.pathsep.join([npm_bin, os.environ["PATH"]])
        added.append(npm_bin)

    if added:
        logger.info("Added to PATH: %s", ", ".join(added))
    return added


# ═══════════════════════════════════════════════════════════════════
#  npm steps + verification
# ═══════════════════════════════════════════════════════════════════


def _npm(step: str, args: list[str], timeout: int | None) -> None:
    exe = shutil.which("npm")
    if not exe:
        raise RuntimeInstallError("npm not found on PATH after installing Node.js", step=step)
    r = run_command([exe, *args], timeout=timeout)
    if not r["ok"]:
        raise RuntimeInstallError(f"npm {' '.join(args)} failed: {r['error']}", step=step)


def verify_tool(config: RuntimeConfig) -> str:
    """Return the installed tool's version or raise ``VerificationError``."""
    version = get_tool_version(config.tool_command, timeout=config.command_timeout)
    if version is None:
        raise VerificationError(
            f"'{config.tool_command} --version' did not run after installing "
            f"{config.global_package}. Ensure the global npm install location "
            "is on PATH (see 'npm prefix -g').",
            step="verify",
        )
    return version


# ═══════════════════════════════════════════════════════════════════
#  Orchestration
# ═══════════════════════════════════════════════════════════════════


def ensure_runtime(config: RuntimeConfig | None = None) -> RuntimeReport:
    """Run the full installer sequence.

    Raises:
        PrivilegeError: Before any other step if not elevated.
        RuntimeInstallError: If upgrading Node.js or running npm fails.
        VerificationError: If the installed CLI cannot be invoked.
    """
    config = config or RuntimeConfig()
    require_elevated()

    report = RuntimeReport(required_version=config.min_version)

    current = detect_runtime_version("node", timeout=config.command_timeout)
    report.detected_version = current
    report.add(StepReceipt.done("detect", f"Node.js {current} detected"))

    if needs_upgrade(current, config.min_version):
        logger.info("Node.js %s < %s, upgrading", current, config.min_version)
        report.add(upgrade_runtime(config))
        report.upgraded = True
    else:
        logger.info("Node.js %s >= %s, skipping upgrade", current, config.min_version)
        report.add(StepReceipt.skip("upgrade", f"Node.js {current} >= {config.min_version}"))

    added = refresh_search_path(timeout=config.command_timeout)
    report.add(StepReceipt.done("refresh-path", f"{len(added)} PATH entries added", metadata={"added": added}))

    _npm("npm-update", ["install", "-g", "npm@latest"], config.command_timeout)
    npm_version = get_tool_version("npm", timeout=config.command_timeout)
    report.add(StepReceipt.done(
        "npm-update", f"npm updated to {npm_version or 'latest'}", metadata={"version": npm_version},
    ))

    _npm("install-tool", ["install", "-g", config.global_package], config.command_timeout)
    report.add(StepReceipt.done("install-tool", f"Installed {config.global_package}"))

    report.tool_version = verify_tool(config)
    report.add(StepReceipt.done("verify", f"{config.tool_command} {report.tool_version}"))
    return report
