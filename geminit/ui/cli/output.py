"""Shared click output helpers for run reports."""

from __future__ import annotations

import json

import click

from geminit.core.models.step import RunReport


def print_receipts(report: RunReport, *, verbose: bool = False) -> None:
    for receipt in report.receipts:
        if receipt.ok:
            click.secho(f"   ✓ {receipt.step:<14}", fg="green", nl=False)
        else:
            click.secho(f"   ⊘ {receipt.step:<14}", fg="yellow", nl=False)
        click.echo(f" {receipt.message}")
        if verbose and receipt.path:
            click.echo(f"     │ {receipt.path}")

    if report.warnings:
        click.echo()
        click.secho("⚠️  Warnings:", fg="yellow")
        for warn in report.warnings:
            click.echo(f"   • {warn}")


def print_error(error: Exception, *, as_json: bool = False) -> None:
    if as_json:
        payload = error.to_dict() if hasattr(error, "to_dict") else {"error": str(error)}
        click.echo(json.dumps(payload, indent=2))
        return
    click.secho(f"❌ {error}", fg="red")
