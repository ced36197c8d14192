"""Expansion of a validated raw record set into a canonical `DelegationSet`."""

from __future__ import annotations

from superglue.core.domain.models import DelegationSet, NameServer, RawDelegation
from superglue.core.domain.names import in_bailiwick


def expand_name_servers(raw: RawDelegation) -> list[NameServer]:
    """One entry per distinct (name, glue address); out-of-bailiwick names get one bare entry."""

    servers: list[NameServer] = []
    for name in raw.ns_names:
        if in_bailiwick(name, raw.origin):
            servers.extend(NameServer(name=name, address=address) for address in dict.fromkeys(raw.glue.get(name, [])))
        else:
            servers.append(NameServer(name=name))
    return servers


def canonicalize(raw: RawDelegation) -> DelegationSet:
    """Sort by (name, address); an empty address sorts first for its name.

    Index 0 of the result is the primary server, the rest are secondaries.
    """

    return DelegationSet.build(raw.origin, expand_name_servers(raw), raw.ds_text)
