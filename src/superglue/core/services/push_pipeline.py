"""Push orchestration.

This module runs one domain through the whole sequence: login, ticket
checks, read of the current state, decision, slot choice and submission.
The CLI delegates everything here and only renders what the hooks report,
which keeps printing out of the core and makes the sequence testable with
an in-memory gateway.

Every gateway call is synchronous and nothing is retried. The submit call
is the last thing that happens, after all local validation and after the
dry-run stop.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Callable
from zoneinfo import ZoneInfo

from superglue.core.config import AppSettings
from superglue.core.domain.models import (
    Action,
    Credentials,
    Decision,
    DelegationSet,
    ReconcileFlags,
    RegistrantRecord,
    Slot,
)
from superglue.core.errors import TooManyTicketsError
from superglue.core.interfaces.registrar import RegistrarGateway
from superglue.core.log import get_logger
from superglue.core.services.reconcile import decide, stamp, tickets_block
from superglue.core.services.scheduler import pick_slot

logger = get_logger("pipeline")


class Outcome(str, Enum):
    BLOCKED = "blocked"
    UNCHANGED = "unchanged"
    DRY_RUN = "dry-run"
    SUBMITTED = "submitted"


@dataclass
class PushRequest:
    """What to push for one domain.

    `desired` is None for a registrant-only run; `registrant` is empty for a
    delegation-only run.
    """

    domain: str
    credentials: Credentials
    desired: DelegationSet | None = None
    registrant: RegistrantRecord = field(default_factory=dict)
    flags: ReconcileFlags = field(default_factory=ReconcileFlags)
    not_really: bool = False
    now: datetime | None = None


@dataclass
class PipelineHooks:
    """Optional callbacks for UI layers."""

    notice: Callable[[str], None] | None = None
    diff: Callable[[Decision], None] | None = None


@dataclass
class PipelineResult:
    outcome: Outcome
    decision: Decision | None = None
    slot: Slot | None = None
    receipt: str | None = None


def _now(settings: AppSettings) -> datetime:
    return datetime.now(ZoneInfo(settings.registry_timezone))


def push(
    *,
    settings: AppSettings,
    gateway: RegistrarGateway,
    request: PushRequest,
    hooks: PipelineHooks | None = None,
) -> PipelineResult:
    hooks = hooks or PipelineHooks()
    domain = request.domain

    def notice(message: str) -> None:
        logger.debug(message)
        if hooks.notice:
            hooks.notice(message)

    gateway.login(request.credentials)

    pending_total = gateway.count_pending_modifications()
    logger.info("Pending modifications: %d", pending_total)
    if pending_total >= settings.max_pending_modifications:
        raise TooManyTicketsError(f"Too many pending modifications ({pending_total})")

    pending = gateway.get_pending_ticket_count(domain)
    if pending:
        notice(f"Changes pending for {domain}")
        if tickets_block(pending, request.flags):
            return PipelineResult(outcome=Outcome.BLOCKED)
        notice("Ignoring tickets")

    desired = request.desired or DelegationSet(origin=domain)
    current = DelegationSet(origin=domain)
    if not desired.is_empty:
        current = gateway.get_current_delegation(domain)
        for ns in current.name_servers:
            logger.debug("%s %s", domain, ns)
        logger.debug(current.ds_text or "no DS records")
    current_registrant: RegistrantRecord = {}
    if request.registrant:
        current_registrant = gateway.get_current_registrant(domain)

    decision = decide(desired, request.registrant, current, current_registrant, pending, request.flags)
    for check in decision.registrant_checks:
        arrow = "==" if check.matches else "->"
        logger.info("checking %s %s %s %s", check.key, check.current, arrow, check.desired)

    if decision.action is Action.SKIP:
        logger.info("No need to modify %s (%s)", domain, decision.reason)
        return PipelineResult(outcome=Outcome.UNCHANGED, decision=decision)

    logger.info("Modifying %s (%s)", domain, decision.reason)
    if hooks.diff:
        hooks.diff(decision)

    slot = pick_slot(request.now or _now(settings), settings.lead_minutes, gateway.get_available_slots(domain))
    plan = stamp(decision.plan, slot)
    decision = decision.model_copy(update={"plan": plan})
    notice(f"Modification scheduled at {slot.time} {slot.date} {slot.day_label} for {domain}")

    if request.not_really:
        notice("Not really!")
        return PipelineResult(outcome=Outcome.DRY_RUN, decision=decision, slot=slot)

    receipt = gateway.submit_change(domain, plan)
    notice(receipt)
    return PipelineResult(outcome=Outcome.SUBMITTED, decision=decision, slot=slot, receipt=receipt)
