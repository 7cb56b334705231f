# Copyright 2024-2026 The SSRF-Guard Authors
# SPDX-License-Identifier: Apache-2.0

"""
SSRF-Guard Command Line Interface.

Usage:
    ssrf-guard check URL...     Validate URLs against the outbound policy
    ssrf-guard policy           Show the effective policy

The base policy is read from SSRF_GUARD_* environment variables (and a
.env file, if present); command-line options override it.
"""

from __future__ import annotations

import json
from typing import Annotated

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ssrf_guard.core.models import Policy
from ssrf_guard.core.validator import validate

app = typer.Typer(
    name="ssrf-guard",
    help="Outbound request firewall against Server-Side Request Forgery",
    no_args_is_help=True,
)

console = Console()
error_console = Console(stderr=True)


# ============================================================================
# CHECK COMMAND
# ============================================================================


@app.command()
def check(
    urls: Annotated[list[str], typer.Argument(help="URLs to validate")],
    allow_domain: Annotated[
        list[str] | None,
        typer.Option("--allow-domain", "-d", help="Allowed host or *.suffix (repeatable)"),
    ] = None,
    allow_port: Annotated[
        list[int] | None,
        typer.Option("--allow-port", help="Allowed port (repeatable)"),
    ] = None,
    block_port: Annotated[
        list[int] | None,
        typer.Option("--block-port", help="Blocked port (repeatable)"),
    ] = None,
    scheme: Annotated[
        list[str] | None,
        typer.Option("--scheme", "-s", help="Allowed scheme (repeatable, replaces http/https)"),
    ] = None,
    min_port: Annotated[int | None, typer.Option("--min-port", help="Lowest allowed port")] = None,
    max_port: Annotated[int | None, typer.Option("--max-port", help="Highest allowed port")] = None,
    allow_well_known_services: Annotated[
        bool,
        typer.Option(
            "--allow-well-known-services",
            help="Do not block SSH, SMTP, database and similar service ports",
        ),
    ] = False,
    disabled: Annotated[
        bool, typer.Option("--disabled", help="Bypass validation entirely")
    ] = False,
    as_json: Annotated[bool, typer.Option("--json", help="Print one JSON object per URL")] = False,
):
    """
    Validate URLs against the outbound request policy.

    Exits with status 1 if any URL is rejected.

    Example:
        ssrf-guard check http://169.254.169.254/latest/meta-data
        ssrf-guard check https://api.example.com -d api.example.com -d "*.trusted.com"
    """
    overrides: dict[str, object] = {}
    if allow_domain:
        overrides["allowed_domains"] = set(allow_domain)
    if allow_port:
        overrides["allowed_ports"] = set(allow_port)
    if block_port:
        overrides["blocked_ports"] = set(block_port)
    if scheme:
        overrides["allowed_schemes"] = {s.lower() for s in scheme}
    if min_port is not None:
        overrides["min_port"] = min_port
    if max_port is not None:
        overrides["max_port"] = max_port
    if allow_well_known_services:
        overrides["block_well_known_services"] = False
    if disabled:
        overrides["enabled"] = False

    policy = _build_policy(overrides)
    results = [validate(url, policy) for url in urls]

    if as_json:
        for result in results:
            typer.echo(json.dumps(result.model_dump(mode="json")))
    else:
        table = Table(title="SSRF-Guard verdicts")
        table.add_column("URL", style="cyan")
        table.add_column("Verdict")
        table.add_column("Reason", style="dim")
        for result in results:
            verdict = "[green]✓ allowed[/green]" if result.allowed else "[red]✗ rejected[/red]"
            table.add_row(escape(result.url), verdict, escape(result.message or ""))
        console.print(table)

    if not all(results):
        raise typer.Exit(1)


# ============================================================================
# POLICY COMMAND
# ============================================================================


@app.command("policy")
def show_policy():
    """
    Show the effective policy built from SSRF_GUARD_* environment variables.

    Example:
        SSRF_GUARD_ALLOWED_PORTS=443,8443 ssrf-guard policy
    """
    policy = _build_policy({})

    table = Table(title="Effective policy")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")

    table.add_row("enabled", str(policy.enabled))
    table.add_row("allowed_schemes", _fmt(policy.allowed_schemes))
    table.add_row("allowed_domains", _fmt(policy.allowed_domains) or "[dim](any)[/dim]")
    table.add_row("allowed_ports", _fmt(policy.allowed_ports) or "[dim](any)[/dim]")
    table.add_row("blocked_ports", _fmt(policy.blocked_ports) or "[dim](none)[/dim]")
    table.add_row("block_well_known_services", str(policy.block_well_known_services))
    table.add_row(
        "standard_ports",
        ", ".join(f"{k}={v}" for k, v in sorted(policy.standard_ports.items())),
    )
    table.add_row("port_range", f"{policy.min_port}-{policy.max_port}")

    console.print(table)


# ============================================================================
# HELPER FUNCTIONS
# ============================================================================


def _build_policy(overrides: dict[str, object]) -> Policy:
    """Environment policy with command-line overrides applied."""
    try:
        base = Policy.from_env()
        if not overrides:
            return base
        return Policy.model_validate({**base.model_dump(), **overrides})
    except (ValidationError, ValueError) as e:
        error_console.print(f"[red]✗ Invalid policy: {e}[/red]")
        raise typer.Exit(2) from None


def _fmt(values) -> str:
    return ", ".join(str(v) for v in sorted(values))


# ============================================================================
# VERSION
# ============================================================================


def version_callback(value: bool):
    if value:
        from ssrf_guard import __version__

        console.print(f"ssrf-guard version {__version__}")
        raise typer.Exit()


def quiet_callback(value: bool):
    if value:
        from ssrf_guard.utils.logging import silence_logging

        silence_logging()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option("--version", callback=version_callback, is_eager=True, help="Show version"),
    ] = None,
    quiet: Annotated[
        bool | None,
        typer.Option("--quiet", "-q", callback=quiet_callback, is_eager=True, help="Suppress logs"),
    ] = None,
):
    """
    SSRF-Guard: Outbound request firewall against Server-Side Request Forgery.

    Check URLs against SSRF rules before your services request them.
    """
    from dotenv import load_dotenv

    load_dotenv()


if __name__ == "__main__":
    app()
