"""Doctor command for environment diagnostics."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import httpx
import typer
from rich.console import Console
from rich.table import Table

from superglue.adapters.http_client import build_client
from superglue.core.config import AppSettings
from superglue.core.errors import SuperglueError
from superglue.core.input_loader import load_credentials

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()


def _check_http(settings: AppSettings) -> tuple[bool, str]:
    try:
        with build_client(settings) as client:
            response = client.get(settings.registry_url)
        return response.status_code < 400, f"HTTP {response.status_code}"
    except httpx.HTTPError as exc:
        return False, str(exc) or exc.__class__.__name__


def _check_creds(path: Path) -> tuple[bool, str]:
    try:
        credentials = load_credentials(path)
    except SuperglueError as exc:
        return False, str(exc)
    return True, f"user {credentials.user}"


@app.command()
def run(
    creds: Optional[Path] = typer.Option(None, "--creds", help="Credentials file to check."),
    offline: bool = typer.Option(False, "--offline", help="Skip the registry connectivity check."),
) -> None:
    """Show the effective settings and check credentials and connectivity."""

    settings = AppSettings()

    table = Table(title="superglue doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    table.add_row("Registry URL", "OK", settings.registry_url)
    table.add_row("Lead time", "OK", f"{settings.lead_minutes} min ({settings.registry_timezone})")
    table.add_row("Reverse DS policy", "OK", settings.reverse_ds_policy.value)
    table.add_row(
        "Empty delegation",
        "OK",
        "leave unchanged" if settings.allow_empty_delegation else "rejected",
    )

    ok = True
    if creds is not None:
        ok_creds, detail_creds = _check_creds(creds)
        ok = ok and ok_creds
        table.add_row("Credentials", "OK" if ok_creds else "FAIL", detail_creds)
    else:
        table.add_row("Credentials", "SKIPPED", "no --creds given")

    if offline:
        table.add_row("Registry connectivity", "SKIPPED", "--offline")
    else:
        ok_http, detail_http = _check_http(settings)
        ok = ok and ok_http
        table.add_row("Registry connectivity", "OK" if ok_http else "FAIL", detail_http)

    _console.print(table)
    if not ok:
        raise typer.Exit(code=1)
