"""Registrar gateway contract.

Why Protocol:
- A structural contract (duck typing) without rigid inheritance.
- The pipeline depends on this abstraction, so the web-driving adapter can
  be swapped for an in-memory fake in tests.

Rules:
- Calls are synchronous and must be made in the order the pipeline makes
  them; implementations may keep session state between calls.
- Any failure raises `GatewayError` (or a subclass) and is fatal to the run.
"""

from __future__ import annotations

from typing import Protocol, Sequence, runtime_checkable

from superglue.core.domain.models import Credentials, DelegationSet, RegistrantRecord, SubmissionPlan


@runtime_checkable
class RegistrarGateway(Protocol):
    def login(self, credentials: Credentials) -> None:
        """Open a session; raises `LoginError` when rejected."""

        ...

    def count_pending_modifications(self) -> int:
        """Pending modification tickets across the whole account."""

        ...

    def get_pending_ticket_count(self, domain: str) -> int:
        ...

    def get_current_delegation(self, domain: str) -> DelegationSet:
        ...

    def get_current_registrant(self, domain: str) -> RegistrantRecord:
        ...

    def get_available_slots(self, domain: str) -> Sequence[str]:
        """`HH:MM` labels of the modification times on offer, ascending."""

        ...

    def submit_change(self, domain: str, plan: SubmissionPlan) -> str:
        """Submit `plan` and return the registry's confirmation text."""

        ...
