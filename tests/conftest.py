from __future__ import annotations

from dataclasses import dataclass, field

import pytest

from superglue.core.config import AppSettings
from superglue.core.domain.models import Credentials, DelegationSet, NameServer, RegistrantRecord, SubmissionPlan
from superglue.core.errors import LoginError

ORIGIN = "example.ac.uk"


@dataclass
class InMemoryGateway:
    """RegistrarGateway over plain attributes; records every call."""

    delegation: DelegationSet = field(
        default_factory=lambda: DelegationSet.build(
            ORIGIN,
            [
                NameServer(name="ns1.example.ac.uk", address="192.0.2.1"),
                NameServer(name="ns2.example.ac.uk", address="192.0.2.2"),
            ],
        )
    )
    registrant: RegistrantRecord = field(default_factory=lambda: {"Name": "Example Ltd", "PostCode": "CB2 1TN"})
    pending_total: int = 0
    pending: int = 0
    slots: list[str] = field(default_factory=lambda: ["00:00", "08:00", "14:00", "20:00"])
    password: str = "secret"
    calls: list[str] = field(default_factory=list)
    submitted: list[SubmissionPlan] = field(default_factory=list)
    closed: bool = False

    def __enter__(self) -> "InMemoryGateway":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.closed = True

    def login(self, credentials: Credentials) -> None:
        self.calls.append("login")
        if credentials.password.get_secret_value() != self.password:
            raise LoginError("Login failed")

    def count_pending_modifications(self) -> int:
        self.calls.append("count_pending_modifications")
        return self.pending_total

    def get_pending_ticket_count(self, domain: str) -> int:
        self.calls.append("get_pending_ticket_count")
        return self.pending

    def get_current_delegation(self, domain: str) -> DelegationSet:
        self.calls.append("get_current_delegation")
        return self.delegation

    def get_current_registrant(self, domain: str) -> RegistrantRecord:
        self.calls.append("get_current_registrant")
        return dict(self.registrant)

    def get_available_slots(self, domain: str) -> list[str]:
        self.calls.append("get_available_slots")
        return list(self.slots)

    def submit_change(self, domain: str, plan: SubmissionPlan) -> str:
        self.calls.append("submit_change")
        self.submitted.append(plan)
        return f"Modification ticket raised for {domain}"


@pytest.fixture
def gateway() -> InMemoryGateway:
    return InMemoryGateway()


@pytest.fixture
def settings() -> AppSettings:
    return AppSettings(_env_file=None)


@pytest.fixture
def credentials() -> Credentials:
    return Credentials.model_validate({"user": "hostmaster", "pass": "secret"})
