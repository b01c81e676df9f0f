"""
Workspace bootstrapper — idempotent project setup, one directory per run.

Steps, in order, each gated by an existence check:

    environment → pip-upgrade → packages → manifest → gitignore → secrets
    → notes → readme → license → folders → opinions-seed

Re-running on a finished directory only rewrites the manifest.
Network failures degrade to a fallback with a warning; everything else
raises a ``GeminitError`` subclass naming the step and path.
"""

from __future__ import annotations

import getpass
import logging
from collections.abc import Callable
from pathlib import Path

from geminit.core.errors import ScaffoldError
from geminit.core.models.config import BootstrapConfig
from geminit.core.models.step import BootstrapReport, StepReceipt
from geminit.core.services import python_env, scaffold, secrets_env
from geminit.core.services.license_text import choose_license, current_year

logger = logging.getLogger(__name__)


class WorkspaceBootstrapper:
    """Runs the bootstrap sequence against one target directory.

    Args:
        target_dir: Project directory; created if missing.
        config: Bootstrap options.
        secret_reader: Hidden-input function used in prompt mode.
        year: Copyright year override (defaults to today).
    """

    def __init__(
        self,
        target_dir: Path,
        config: BootstrapConfig | None = None,
        *,
        secret_reader: Callable[[str], str] = getpass.getpass,
        year: int | None = None,
    ) -> None:
        self.target = Path(target_dir).resolve()
        self.config = config or BootstrapConfig()
        self.secret_reader = secret_reader
        self.year = year or current_year()
        self.report = BootstrapReport(target_dir=str(self.target))

    @property
    def env_dir(self) -> Path:
        return self.target / self.config.environment_name

    @property
    def python(self) -> Path:
        return python_env.interpreter_path(self.env_dir)

    def run(self) -> BootstrapReport:
        if not self.target.exists():
            try:
                self.target.mkdir(parents=True)
            except OSError as e:
                raise ScaffoldError(f"Cannot create {self.target}: {e}", step="target", path=self.target) from e
        elif not self.target.is_dir():
            raise ScaffoldError(f"{self.target} is not a directory", step="target", path=self.target)

        logger.info("Bootstrapping %s", self.target)
        self._environment()
        self._pip_upgrade()
        self._packages()
        self._manifest()
        self._gitignore()
        self._secrets()
        self._notes()
        self._readme()
        self._license()
        self._folders()
        return self.report

    # ── Environment + packages ──────────────────────────────────

    def _environment(self) -> None:
        created = python_env.create_environment(self.env_dir, timeout=self.config.command_timeout)
        self.report.environment_python = str(self.python)
        if created:
            self.report.add(StepReceipt.done("environment", "Created virtual environment", path=str(self.env_dir)))
        else:
            self.report.add(StepReceipt.skip("environment", "Environment already exists", path=str(self.env_dir)))

    def _pip_upgrade(self) -> None:
        python_env.upgrade_pip(self.python, timeout=self.config.command_timeout)
        self.report.add(StepReceipt.done("pip-upgrade", "pip upgraded"))

    def _packages(self) -> None:
        installed = python_env.install_packages(
            self.python, self.config.packages, timeout=self.config.command_timeout,
        )
        self.report.add(StepReceipt.done(
            "packages",
            f"{len(installed)} package(s) installed",
            metadata={"packages": installed},
        ))

    def _manifest(self) -> None:
        path = self.target / self.config.manifest_name
        packages = python_env.list_installed(self.python, timeout=self.config.command_timeout)
        python_env.write_manifest(path, packages)
        self.report.add(StepReceipt.done(
            "manifest", f"{len(packages)} package(s) recorded", path=str(path),
        ))

    # ── Scaffold files ──────────────────────────────────────────

    def _write_once(self, step: str, filename: str, content: str) -> None:
        path = self.target / filename
        if scaffold.write_if_absent(path, content, step=step):
            self.report.add(StepReceipt.done(step, f"Created {filename}", path=str(path)))
        else:
            self.report.add(StepReceipt.skip(step, f"{filename} already exists", path=str(path)))

    def _gitignore(self) -> None:
        self._write_once("gitignore", ".gitignore", scaffold.GITIGNORE)

    def _secrets(self) -> None:
        path = self.target / ".env"
        created = secrets_env.ensure_file(path)
        key = self.config.secret_key

        if self.config.prompt_for_secret:
            stored = secrets_env.capture_secret(path, key, reader=self.secret_reader)
            if stored:
                self.report.add(StepReceipt.done("secrets", f"Stored {key}", path=str(path)))
            else:
                warning = f"No value entered for {key}; {path.name} left unchanged"
                logger.warning(warning)
                self.report.warn(warning)
                self.report.add(StepReceipt.skip("secrets", warning, path=str(path)))
            return

        if secrets_env.write_placeholder(path, self.config.placeholder_line):
            self.report.add(StepReceipt.done("secrets", f"Wrote {key} placeholder", path=str(path)))
        else:
            logger.info("%s has content, leaving it alone", path.name)
            reason = "Created empty file" if created else f"{path.name} already has content"
            self.report.add(StepReceipt.skip("secrets", reason, path=str(path)))

    def _notes(self) -> None:
        self._write_once("notes", scaffold.NOTES_FILE, scaffold.NOTES)

    def _readme(self) -> None:
        content = scaffold.render_readme(
            self.target.name,
            env_name=self.config.environment_name,
            model=self.config.model,
            output_format=self.config.output_format,
            secret_key=self.config.secret_key,
        )
        self._write_once("readme", "README.md", content)

    def _license(self) -> None:
        path = self.target / "LICENSE"
        if path.exists():
            logger.info("LICENSE exists, skipping")
            self.report.add(StepReceipt.skip("license", "LICENSE already exists", path=str(path)))
            return

        producer, warning = choose_license(
            self.config.license_url,
            self.config.license_id,
            timeout=self.config.fetch_timeout,
        )
        if warning:
            self.report.warn(warning)
        scaffold.write_if_absent(path, producer.render(self.year), step="license")
        self.report.add(StepReceipt.done(
            "license", f"Created LICENSE ({producer.kind})", path=str(path),
            metadata={"producer": producer.kind},
        ))

    # ── Folders ─────────────────────────────────────────────────

    def _folders(self) -> None:
        memory = self.target / scaffold.MEMORY_DIR
        opinions = self.target / scaffold.OPINIONS_DIR

        created = [d.name for d in (memory, opinions) if scaffold.ensure_dir(d)]
        if created:
            self.report.add(StepReceipt.done("folders", f"Created {', '.join(created)}"))
        else:
            self.report.add(StepReceipt.skip("folders", "memory/ and opinions/ already exist"))

        # Seed only on first creation; a user may already be editing these
        if opinions.name in created:
            seeded = scaffold.seed_opinions(opinions)
            self.report.add(StepReceipt.done(
                "opinions-seed", f"Seeded {len(seeded)} file(s)", path=str(opinions),
                metadata={"files": seeded},
            ))
        else:
            self.report.add(StepReceipt.skip("opinions-seed", "opinions/ existed before this run"))


def bootstrap(
    target_dir: Path,
    config: BootstrapConfig | None = None,
    **kwargs,
) -> BootstrapReport:
    """Bootstrap ``target_dir``. See ``WorkspaceBootstrapper``."""
    return WorkspaceBootstrapper(target_dir, config, **kwargs).run()
