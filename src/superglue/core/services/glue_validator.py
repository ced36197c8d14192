"""Cross-checks between NS names and glue addresses.

Runs on the raw record set, after parsing and before canonicalisation.
"""

from __future__ import annotations

from superglue.core.domain.models import RawDelegation
from superglue.core.domain.names import in_bailiwick
from superglue.core.errors import DelegationValidationError


def validate_glue(raw: RawDelegation, *, source: str = "stdin", allow_empty: bool = True) -> None:
    """Raise `DelegationValidationError` on the first inconsistency.

    - every glue owner must be a declared NS name
    - every in-bailiwick NS name needs at least one glue address
    - out-of-bailiwick NS names must not have glue
    - with `allow_empty=False`, input without NS and DS records is rejected
    """

    if not allow_empty and not raw.ns_names and not raw.ds_text:
        raise DelegationValidationError(source, "no delegation records found")

    declared = set(raw.ns_names)
    for owner in raw.glue:
        if owner not in declared:
            raise DelegationValidationError(source, f"glue records for nonexistent NS {owner}")

    for name in raw.ns_names:
        addresses = raw.glue.get(name, [])
        if in_bailiwick(name, raw.origin):
            if not addresses:
                raise DelegationValidationError(source, f"glue records missing for NS {name}")
        elif addresses:
            raise DelegationValidationError(source, f"spurious glue records for NS {name}")
