"""Domain models (Pydantic v2).

Why Pydantic in the domain:
- Strict validation and self-documenting fields (Field) without coupling the
  core to I/O libraries.
- The same models travel from the parser to the gateway, so every stage sees
  the same normalised shape.

Note:
- These models describe *what* a delegation is, not *how* it is fetched or
  submitted. Nothing here is persisted between runs.
"""

from __future__ import annotations

from enum import Enum
from typing import Iterable

from pydantic import BaseModel, Field, SecretStr, field_validator
from pydantic.config import ConfigDict

from superglue.core.domain.names import is_address, is_domain_name

RegistrantRecord = dict[str, str]


class NameServer(BaseModel):
    """One (name, glue address) pairing.

    An NS name with *k* glue addresses is materialised as *k* entries so that
    each primary/secondary slot of the registry form gets exactly one.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(
        ...,
        description="Fully-qualified, lowercase, trailing-dot-free server name.",
    )
    address: str = Field(
        default="",
        description="Glue address literal, or empty for out-of-bailiwick servers.",
    )

    @field_validator("name")
    @classmethod
    def _check_name(cls, value: str) -> str:
        if not is_domain_name(value):
            raise ValueError(f"bad domain name {value}")
        return value

    @field_validator("address")
    @classmethod
    def _check_address(cls, value: str) -> str:
        if value and not is_address(value):
            raise ValueError(f"bad address {value}")
        return value

    @property
    def sort_key(self) -> tuple[str, str]:
        return (self.name, self.address)

    def __str__(self) -> str:
        return f"ns {self.name} glue {self.address}"


class DelegationSet(BaseModel):
    """Canonical delegation of one zone: sorted name servers plus DS text.

    An empty `name_servers` list or an empty `ds_text` means "do not manage
    this part", not an error.
    """

    origin: str = Field(..., description="The delegated zone.")
    name_servers: list[NameServer] = Field(
        default_factory=list,
        description="Sorted ascending by (name, address).",
    )
    ds_text: str = Field(
        default="",
        description="One '<owner>. IN DS <rdata>' line per DS record, newline separated.",
    )

    @classmethod
    def build(cls, origin: str, servers: Iterable[NameServer], ds_text: str = "") -> "DelegationSet":
        """Create a set in canonical order, whatever order `servers` came in."""

        return cls(
            origin=origin,
            name_servers=sorted(servers, key=lambda ns: ns.sort_key),
            ds_text=ds_text,
        )

    @property
    def primary(self) -> NameServer | None:
        return self.name_servers[0] if self.name_servers else None

    @property
    def secondaries(self) -> list[NameServer]:
        return list(self.name_servers[1:])

    @property
    def is_empty(self) -> bool:
        return not self.name_servers and not self.ds_text


class RawDelegation(BaseModel):
    """Records accumulated by the parser, before validation and expansion."""

    origin: str
    ns_names: list[str] = Field(
        default_factory=list,
        description="Unique NS targets in first-seen order.",
    )
    glue: dict[str, list[str]] = Field(
        default_factory=dict,
        description="Owner name -> glue addresses in input order.",
    )
    ds_text: str = ""

    def add_ns(self, name: str) -> None:
        if name not in self.ns_names:
            self.ns_names.append(name)

    def add_glue(self, owner: str, address: str) -> None:
        self.glue.setdefault(owner, []).append(address)

    def add_ds(self, line: str) -> None:
        self.ds_text = f"{self.ds_text}\n{line}" if self.ds_text else line


class Credentials(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    user: str = Field(..., min_length=1)
    password: SecretStr = Field(..., alias="pass")


class ReconcileFlags(BaseModel):
    ignore_tickets: bool = Field(
        default=False,
        description="Update even if the domain has pending tickets.",
    )
    ignore_match: bool = Field(
        default=False,
        description="Update even if the registry already matches.",
    )


class MatchResult(BaseModel):
    ns_match: bool
    ds_match: bool
    registrant_match: bool

    @property
    def all_match(self) -> bool:
        return self.ns_match and self.ds_match and self.registrant_match


class FieldCheck(BaseModel):
    """Comparison of one registrant field, kept for the audit log."""

    key: str
    current: str | None
    desired: str
    matches: bool


class Slot(BaseModel):
    time: str = Field(..., pattern=r"^\d\d:\d\d$", description="HH:MM label offered by the registry.")
    date: str = Field(..., pattern=r"^\d\d/\d\d/\d{4}$", description="DD/MM/YYYY.")
    is_today: bool

    @property
    def day_label(self) -> str:
        return "today" if self.is_today else "tomorrow"


class SubmissionPlan(BaseModel):
    """Exact values handed to the gateway. Empty parts are left untouched."""

    primary: NameServer | None = None
    secondaries: list[NameServer] = Field(default_factory=list)
    ds_text: str = ""
    registrant_fields: RegistrantRecord = Field(default_factory=dict)
    effective_slot: Slot | None = None

    @property
    def name_servers(self) -> list[NameServer]:
        if self.primary is None:
            return []
        return [self.primary, *self.secondaries]


class Action(str, Enum):
    SKIP = "skip"
    MODIFY = "modify"


class Decision(BaseModel):
    action: Action
    reason: str
    report: MatchResult
    plan: SubmissionPlan | None = None
    desired: DelegationSet
    current: DelegationSet
    registrant_checks: list[FieldCheck] = Field(default_factory=list)
