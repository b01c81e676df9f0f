"""
CLI command for the machine-level runtime install.

Thin wrapper over ``geminit.core.services.runtime_install``.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from geminit.ui.cli.output import print_error, print_receipts


@click.command("install-runtime")
@click.option("--min-version", default=None, help="Minimum Node.js version (default: 20.18.0).")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def install_runtime(ctx: click.Context, min_version: str | None, as_json: bool) -> None:
    """Install Node.js, update npm and install the Gemini CLI (needs root/Administrator)."""
    from geminit.core.config.loader import ConfigError, find_config_file, load_runtime_config
    from geminit.core.errors import GeminitError
    from geminit.core.services.runtime_install import ensure_runtime

    config_path: Path | None = ctx.obj.get("config_path") or find_config_file()

    try:
        config = load_runtime_config(config_path, overrides={"min_version": min_version})
        report = ensure_runtime(config)
    except (GeminitError, ConfigError) as e:
        print_error(e, as_json=as_json)
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(report.to_dict(), indent=2))
        return

    click.secho(
        f"\n⚙️  Runtime — Node.js {report.detected_version} (required ≥ {report.required_version})",
        fg="cyan",
        bold=True,
    )
    print_receipts(report, verbose=ctx.obj.get("verbose", False))
    click.secho(f"\n✅ gemini {report.tool_version} is ready", fg="green", bold=True)
    click.echo()
