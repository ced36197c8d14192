"""CLI UI components (Rich).

Why separate components:
- Keeps command logic apart from visual details.
- The audit diff is printed by `delegation` and `registrant` alike.
"""

from __future__ import annotations

from typing import Sequence

from rich.console import Console
from rich.table import Table

from superglue.core.domain.models import Decision, FieldCheck, NameServer


def build_name_server_table(title: str, domain: str, servers: Sequence[NameServer]) -> Table:
    table = Table(title=title, title_justify="left")
    table.add_column("Domain", style="cyan", no_wrap=True)
    table.add_column("Name server", style="white")
    table.add_column("Glue", style="magenta")
    for ns in servers:
        table.add_row(domain, ns.name, ns.address)
    return table


def build_registrant_table(checks: Sequence[FieldCheck]) -> Table:
    table = Table(title="Registrant fields", title_justify="left")
    table.add_column("Field", style="cyan", no_wrap=True)
    table.add_column("Current", style="white")
    table.add_column("New", style="green")
    table.add_column("Match", style="dim")
    for check in checks:
        table.add_row(check.key, check.current or "", check.desired, "yes" if check.matches else "no")
    return table


def print_decision_diff(console: Console, decision: Decision) -> None:
    """Old and new values of everything the plan manages, before submission."""

    domain = decision.desired.origin
    if decision.desired.name_servers:
        console.print(build_name_server_table("Old NS records", domain, decision.current.name_servers))
        console.print(build_name_server_table("New NS records", domain, decision.desired.name_servers))
    if decision.desired.ds_text:
        console.print("[bold]Old DS records[/bold]")
        console.print(decision.current.ds_text or "(none)", markup=False)
        console.print("[bold]New DS records[/bold]")
        console.print(decision.desired.ds_text, markup=False)
    if decision.registrant_checks:
        console.print(build_registrant_table(decision.registrant_checks))
