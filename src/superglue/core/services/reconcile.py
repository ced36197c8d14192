"""Reconciliation of the desired state against the registry's current state.

The engine only decides. Printing the old/new audit diff is left to the
caller, which gets everything it needs in the returned `Decision`.
"""

from __future__ import annotations

from typing import Mapping

from superglue.core.domain.models import (
    Action,
    Decision,
    DelegationSet,
    FieldCheck,
    MatchResult,
    ReconcileFlags,
    RegistrantRecord,
    Slot,
    SubmissionPlan,
)

# Desired registrant key -> key of the field displayed by the registry.
REGISTRANT_DISPLAY_FIELDS: dict[str, str] = {
    "Postcode": "PostCode",
}


def tickets_block(pending_ticket_count: int, flags: ReconcileFlags) -> bool:
    """Never stack a change on top of an unresolved one."""

    return pending_ticket_count > 0 and not flags.ignore_tickets


def ns_matches(desired: DelegationSet, current: DelegationSet) -> bool:
    if not desired.name_servers:
        return True
    return [ns.sort_key for ns in desired.name_servers] == [ns.sort_key for ns in current.name_servers]


def ds_matches(desired: DelegationSet, current: DelegationSet) -> bool:
    if not desired.ds_text:
        return True
    return desired.ds_text == current.ds_text


def check_registrant(desired: Mapping[str, str], current: Mapping[str, str]) -> list[FieldCheck]:
    """Compare only the keys present in `desired`."""

    checks: list[FieldCheck] = []
    for key, value in desired.items():
        shown = current.get(REGISTRANT_DISPLAY_FIELDS.get(key, key))
        checks.append(FieldCheck(key=key, current=shown, desired=value, matches=shown == value))
    return checks


def build_plan(desired: DelegationSet, desired_registrant: Mapping[str, str]) -> SubmissionPlan:
    return SubmissionPlan(
        primary=desired.primary,
        secondaries=desired.secondaries,
        ds_text=desired.ds_text,
        registrant_fields=dict(desired_registrant),
    )


def stamp(plan: SubmissionPlan, slot: Slot) -> SubmissionPlan:
    return plan.model_copy(update={"effective_slot": slot})


def decide(
    desired: DelegationSet,
    desired_registrant: RegistrantRecord,
    current: DelegationSet,
    current_registrant: RegistrantRecord,
    pending_ticket_count: int,
    flags: ReconcileFlags | None = None,
) -> Decision:
    """Skip or Modify, with the plan to submit when modifying."""

    flags = flags or ReconcileFlags()
    checks = check_registrant(desired_registrant, current_registrant)
    forced = flags.ignore_match
    report = MatchResult(
        ns_match=not forced and ns_matches(desired, current),
        ds_match=not forced and ds_matches(desired, current),
        registrant_match=not forced and all(check.matches for check in checks),
    )

    common = dict(report=report, desired=desired, current=current, registrant_checks=checks)
    if tickets_block(pending_ticket_count, flags):
        return Decision(action=Action.SKIP, reason=f"{pending_ticket_count} changes pending", **common)
    if desired.is_empty and not desired_registrant:
        return Decision(action=Action.SKIP, reason="nothing to modify", **common)
    if report.all_match:
        return Decision(action=Action.SKIP, reason="registry already matches", **common)
    return Decision(
        action=Action.MODIFY,
        reason="ignoring match" if forced else "registry differs",
        plan=build_plan(desired, desired_registrant),
        **common,
    )
