"""
geminit — CLI entrypoint.

Usage:
    geminit --help
    sudo geminit install-runtime
    geminit init my-project
"""

from __future__ import annotations

import os
from pathlib import Path

import click

from geminit import __version__
from geminit.core.observability.logging_config import (
    LOG_FILE_ENV,
    LOG_FILE_LEVEL_ENV,
    resolve_level,
    setup_logging,
)


@click.group()
@click.version_option(version=__version__, prog_name="geminit")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False, dir_okay=False),
    default=None,
    help="Path to geminit.yml (default: auto-detect from the target directory).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """geminit — set up Gemini CLI workspaces."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["debug"] = debug
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    # ── Logging setup (once, at process start) ──────────────────
    setup_logging(
        level=resolve_level(debug=debug, verbose=verbose, quiet=quiet),
        log_file=os.environ.get(LOG_FILE_ENV),
        log_file_level=os.environ.get(LOG_FILE_LEVEL_ENV),
        quiet_third_party=not debug,
    )


# ── Register sub-commands from geminit/ui/cli/ ─────────────────

from geminit.ui.cli.runtime import install_runtime  # noqa: E402
from geminit.ui.cli.workspace import init  # noqa: E402

cli.add_command(install_runtime)
cli.add_command(init)


if __name__ == "__main__":
    cli()
