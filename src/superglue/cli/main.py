"""Command line entry points.

`delegation` reads NS/glue/DS records and `registrant` reads whois contact
fields; both push the difference to the registry for one domain. The
commands only wire inputs, settings and rendering together; the sequence
itself lives in `core.services.push_pipeline`.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Callable, Optional

import typer
from rich.console import Console

from superglue.adapters.janet_gateway import JanetRegistrarGateway
from superglue.cli.doctor import app as doctor_app
from superglue.cli.ui_components import print_decision_diff
from superglue.core.config import AppSettings
from superglue.core.domain.models import DelegationSet, ReconcileFlags, RegistrantRecord
from superglue.core.domain.names import is_domain_name
from superglue.core.errors import SuperglueError, UsageError
from superglue.core.input_loader import load_credentials, parse_registrant, read_text
from superglue.core.log import LogLevel, configure_logging
from superglue.core.services.push_pipeline import PipelineHooks, PushRequest, push
from superglue.core.services.zone_parser import parse

app = typer.Typer(
    no_args_is_help=True,
    help="Update a domain's delegation or registrant at the registry when it differs.",
)
app.add_typer(doctor_app, name="doctor")

_console = Console()
_err_console = Console(stderr=True)

DesiredLoader = Callable[[str, str, str, AppSettings], tuple[Optional[DelegationSet], RegistrantRecord]]


def build_gateway(settings: AppSettings) -> JanetRegistrarGateway:
    return JanetRegistrarGateway(settings)


def _check_domain(domain: str) -> str:
    domain = domain.strip().lower()
    if not is_domain_name(domain):
        raise UsageError(f"not a domain name: {domain}")
    return domain


def _read_input(path: Path | None) -> tuple[str, str]:
    if path is not None:
        return read_text(path), str(path)
    return sys.stdin.read(), "stdin"


def _load_delegation(text: str, source: str, domain: str, settings: AppSettings) -> tuple[Optional[DelegationSet], RegistrantRecord]:
    return parse(text, domain, source=source, settings=settings), {}


def _load_registrant(text: str, source: str, domain: str, settings: AppSettings) -> tuple[Optional[DelegationSet], RegistrantRecord]:
    return None, parse_registrant(text, source=source)


def _run_push(
    *,
    prefix: str,
    domain: str,
    creds: Path | None,
    input_path: Path | None,
    flags: ReconcileFlags,
    not_really: bool,
    log_level: LogLevel,
    load_desired: DesiredLoader,
) -> None:
    configure_logging(log_level)

    def notice(message: str) -> None:
        _console.print(f"{prefix}: {message}", markup=False, highlight=False, soft_wrap=True)

    try:
        domain = _check_domain(domain)
        if creds is None:
            raise UsageError("--creds=<file> is required")
        settings = AppSettings()
        text, source = _read_input(input_path)
        desired, registrant = load_desired(text, source, domain, settings)
        request = PushRequest(
            domain=domain,
            credentials=load_credentials(creds),
            desired=desired,
            registrant=registrant,
            flags=flags,
            not_really=not_really,
        )
        with build_gateway(settings) as gateway:
            push(
                settings=settings,
                gateway=gateway,
                request=request,
                hooks=PipelineHooks(notice=notice, diff=lambda decision: print_decision_diff(_console, decision)),
            )
    except SuperglueError as exc:
        _err_console.print(f"{prefix}: {exc}", style="red", markup=False, highlight=False, soft_wrap=True)
        raise typer.Exit(code=exc.exit_code) from exc


_DOMAIN = typer.Argument(..., help="The domain to update.")
_CREDS = typer.Option(None, "--creds", help="Path to credentials file.")
_INPUT = typer.Option(None, "--input", "-i", help="Read input from this file instead of stdin.")
_IGNORE_TICKETS = typer.Option(False, "--ignore-tickets", help="Update even if the domain has pending tickets.")
_IGNORE_MATCH = typer.Option(False, "--ignore-match", help="Update even if the registry already matches.")
_NOT_REALLY = typer.Option(False, "--not-really", help="Stop at the last moment.")
_LOG_LEVEL = typer.Option(LogLevel.INFO, "--log-level", case_sensitive=False, help="Set info or debug mode.")


@app.command()
def delegation(
    domain: str = _DOMAIN,
    creds: Optional[Path] = _CREDS,
    input_path: Optional[Path] = _INPUT,
    ignore_tickets: bool = _IGNORE_TICKETS,
    ignore_match: bool = _IGNORE_MATCH,
    not_really: bool = _NOT_REALLY,
    log_level: LogLevel = _LOG_LEVEL,
) -> None:
    """Push NS, glue and DS records (zone file syntax on stdin)."""

    _run_push(
        prefix="superglue-janet",
        domain=domain,
        creds=creds,
        input_path=input_path,
        flags=ReconcileFlags(ignore_tickets=ignore_tickets, ignore_match=ignore_match),
        not_really=not_really,
        log_level=log_level,
        load_desired=_load_delegation,
    )


@app.command()
def registrant(
    domain: str = _DOMAIN,
    creds: Optional[Path] = _CREDS,
    input_path: Optional[Path] = _INPUT,
    ignore_tickets: bool = _IGNORE_TICKETS,
    ignore_match: bool = _IGNORE_MATCH,
    not_really: bool = _NOT_REALLY,
    log_level: LogLevel = _LOG_LEVEL,
) -> None:
    """Push whois contact details (a JSON object on stdin)."""

    _run_push(
        prefix="whois-up-janet",
        domain=domain,
        creds=creds,
        input_path=input_path,
        flags=ReconcileFlags(ignore_tickets=ignore_tickets, ignore_match=ignore_match),
        not_really=not_really,
        log_level=log_level,
        load_desired=_load_registrant,
    )


def run() -> None:
    """Console script: every failure, usage errors included, exits with 1."""

    try:
        app()
    except SystemExit as exc:
        if exc.code in (None, 0):
            raise
        raise SystemExit(1) from exc
