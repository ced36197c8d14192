"""Delegation text parser.

Reads zone-file-like lines of the form `[owner] (IN|<ttl>)* TYPE RDATA` and
accumulates NS targets, glue addresses and DS text for one origin. No
`$ORIGIN`/`$TTL` directives, escapes or parenthesised continuations.

The owner of a line without an owner column (leading whitespace) is the
owner of the previous line. That state is an explicit `ParserState` value
threaded through `parse_line`, starting at the origin.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from superglue.core.config import AppSettings, ReverseDsPolicy
from superglue.core.domain.models import DelegationSet, RawDelegation
from superglue.core.domain.names import in_bailiwick, is_domain_name, is_ipv4, is_ipv6, is_reverse_zone
from superglue.core.errors import DelegationValidationError, InputSyntaxError
from superglue.core.log import get_logger
from superglue.core.services.canonicalizer import canonicalize
from superglue.core.services.glue_validator import validate_glue

logger = get_logger("parser")

_RE_LINE = re.compile(r"^(\S*)\s+(?:(?:IN|\d+)\s+)*([A-Za-z]+)\s+(.*?)\s*$", re.IGNORECASE)
_RE_COMMENT = re.compile(r";.*")

# digest type -> hex digest length
_DS_DIGEST_LENGTHS = {1: 40, 2: 64, 4: 96}


@dataclass(frozen=True)
class ParserState:
    owner: str


class _LineContext:
    """Source position of the line being parsed, for error messages."""

    def __init__(self, source: str, number: int, text: str) -> None:
        self.source = source
        self.number = number
        self.text = text

    def error(self, message: str) -> InputSyntaxError:
        return InputSyntaxError(self.source, self.number, message, self.text)


def parse_name(token: str, origin: str, ctx: _LineContext) -> str:
    """Resolve an owner or NS token against `origin`.

    `@` is the origin, a trailing dot marks an absolute name, anything else
    is relative to the origin.
    """

    token = token.lower()
    if token == "@":
        return origin
    if token.endswith("."):
        name = token[:-1]
    else:
        name = f"{token}.{origin}"
    if not is_domain_name(name):
        raise ctx.error(f"bad domain name {name}")
    return name


def check_ds_rdata(tokens: list[str], ctx: _LineContext) -> None:
    """Optional sanity check of `<key tag> <algorithm> <digest type> <digest>`."""

    if len(tokens) < 4:
        raise ctx.error("DS record needs key tag, algorithm, digest type and digest")
    tag, algorithm, digest_type = tokens[:3]
    digest = "".join(tokens[3:])
    if not tag.isdigit() or int(tag) > 65535:
        raise ctx.error(f"bad DS key tag {tag}")
    if not algorithm.isdigit() or int(algorithm) > 255:
        raise ctx.error(f"bad DS algorithm {algorithm}")
    if not digest_type.isdigit() or int(digest_type) not in _DS_DIGEST_LENGTHS:
        raise ctx.error(f"unsupported DS digest type {digest_type}")
    if not re.fullmatch(r"[0-9a-fA-F]+", digest) or len(digest) != _DS_DIGEST_LENGTHS[int(digest_type)]:
        raise ctx.error(f"bad DS digest length for digest type {digest_type}")


def parse_line(
    state: ParserState,
    ctx: _LineContext,
    raw: RawDelegation,
    *,
    strict_ds: bool = False,
) -> ParserState:
    """Parse one non-blank line into `raw` and return the updated state."""

    match = _RE_LINE.match(ctx.text)
    if not match:
        raise ctx.error(f"could not parse line {ctx.text}")
    owner_token, rtype, rdata = match.groups()
    rtype = rtype.upper()
    origin = raw.origin

    owner = state.owner
    if owner_token:
        owner = parse_name(owner_token, origin, ctx)
    state = ParserState(owner=owner)

    if rtype == "NS":
        if owner != origin:
            raise ctx.error(f"NS records must be owned by {origin}")
        target = parse_name(rdata, origin, ctx)
        raw.add_ns(target)
        logger.debug("parse %s NS %s", origin, target)
    elif rtype == "DS":
        if owner != origin:
            raise ctx.error(f"DS records must be owned by {origin}")
        tokens = rdata.split()
        if not tokens:
            raise ctx.error("empty DS record")
        if strict_ds:
            check_ds_rdata(tokens, ctx)
        ds = f"{owner}. IN DS {' '.join(tokens)}"
        raw.add_ds(ds)
        logger.debug("parse %s", ds)
    elif rtype == "DNSKEY":
        logger.debug("ignoring %s DNSKEY", owner)
    elif rtype in ("A", "AAAA"):
        if not in_bailiwick(owner, origin):
            raise ctx.error(f"glue {rtype} records must be subdomains of {origin}")
        address = rdata.lower()
        if rtype == "A" and not is_ipv4(address):
            raise ctx.error(f"bad IPv4 address: {rdata}")
        if rtype == "AAAA" and not is_ipv6(address):
            raise ctx.error(f"bad IPv6 address: {rdata}")
        raw.add_glue(owner, address)
        logger.debug("parse %s %s %s", owner, rtype, address)
    else:
        raise ctx.error(f"unsupported record type {rtype}")
    return state


def parse_records(text: str, origin: str, *, source: str = "stdin", strict_ds: bool = False) -> RawDelegation:
    """Accumulate the raw record set from delegation text."""

    raw = RawDelegation(origin=origin)
    state = ParserState(owner=origin)
    for number, line in enumerate(text.splitlines(), start=1):
        line = _RE_COMMENT.sub("", line)
        if not line.strip():
            continue
        state = parse_line(state, _LineContext(source, number, line), raw, strict_ds=strict_ds)
    return raw


def apply_reverse_ds_policy(raw: RawDelegation, policy: ReverseDsPolicy, *, source: str = "stdin") -> RawDelegation:
    """Handle DS text for reverse zones, which the registry cannot sign."""

    if not raw.ds_text or not is_reverse_zone(raw.origin) or policy is ReverseDsPolicy.KEEP:
        return raw
    if policy is ReverseDsPolicy.REJECT:
        raise DelegationValidationError(source, f"DS records are not supported for reverse zone {raw.origin}")
    logger.warning("discarding DS records for reverse zone %s", raw.origin)
    return raw.model_copy(update={"ds_text": ""})


def parse(
    text: str,
    origin: str,
    *,
    source: str = "stdin",
    settings: AppSettings | None = None,
) -> DelegationSet:
    """Parse, validate and canonicalise delegation text for `origin`."""

    settings = settings or AppSettings()
    raw = parse_records(text, origin, source=source, strict_ds=settings.strict_ds)
    raw = apply_reverse_ds_policy(raw, settings.reverse_ds_policy, source=source)
    validate_glue(raw, source=source, allow_empty=settings.allow_empty_delegation)
    delegation = canonicalize(raw)
    logger.debug("name server count %d", len(delegation.name_servers))
    for ns in delegation.name_servers:
        logger.debug("%s %s", origin, ns)
    return delegation
