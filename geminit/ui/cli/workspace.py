"""
CLI command for bootstrapping a project workspace.

Delegates entirely to ``geminit.core.services.workspace_bootstrap``.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from geminit.ui.cli.output import print_error, print_receipts


@click.command()
@click.argument("target", type=click.Path(file_okay=False, path_type=Path), default=".")
@click.option("--env-name", default=None, help="Virtual environment directory (default: .venv).")
@click.option("--package", "-p", "packages", multiple=True, help="Extra package to install (repeatable).")
@click.option(
    "--prompt-secret/--no-prompt-secret",
    default=None,
    help="Ask for GEMINI_API_KEY with hidden input (default: write a placeholder).",
)
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def init(
    ctx: click.Context,
    target: Path,
    env_name: str | None,
    packages: tuple[str, ...],
    prompt_secret: bool | None,
    as_json: bool,
) -> None:
    """Bootstrap TARGET (default: current directory) for the Gemini CLI.

    Safe to re-run: existing files are left alone, only
    requirements.yaml is regenerated.

    Examples:

        geminit init

        geminit init demo -p rich -p httpx

        geminit init demo --prompt-secret
    """
    from geminit.core.config.loader import ConfigError, find_config_file, load_config
    from geminit.core.errors import GeminitError
    from geminit.core.services.workspace_bootstrap import bootstrap

    config_path: Path | None = ctx.obj.get("config_path")
    if config_path is None and target.is_dir():
        config_path = find_config_file(target)

    overrides = {
        "environment_name": env_name,
        "extra_packages": list(packages) if packages else None,
        "prompt_for_secret": prompt_secret,
    }

    try:
        config = load_config(config_path, overrides=overrides)
        report = bootstrap(target, config)
    except (GeminitError, ConfigError) as e:
        print_error(e, as_json=as_json)
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(report.to_dict(), indent=2))
        return

    click.secho(f"\n🚀 Workspace — {report.target_dir}", fg="cyan", bold=True)
    print_receipts(report, verbose=ctx.obj.get("verbose", False))
    click.echo()
    click.secho(
        f"   Result: {report.created} done, {report.skipped} skipped",
        fg="yellow" if report.warnings else "green",
        bold=True,
    )
    click.echo()
