"""Name and address grammars shared by the parser, validator and gateway."""

from __future__ import annotations

import ipaddress
import re

_LABEL = r"[a-z0-9](?:[a-z0-9-]*[a-z0-9])?"

RE_DNAME = re.compile(rf"^(?:{_LABEL}\.)+{_LABEL}$")
RE_IPV4 = re.compile(r"^(?:(?:25[0-5]|2[0-4]\d|1\d\d|[1-9]?\d)\.){3}(?:25[0-5]|2[0-4]\d|1\d\d|[1-9]?\d)$")
RE_IPV6_CHARS = re.compile(r"^[0-9a-f:.]*:[0-9a-f:.]*$")


def is_domain_name(value: str) -> bool:
    return bool(RE_DNAME.match(value))


def is_ipv4(value: str) -> bool:
    return bool(RE_IPV4.match(value))


def is_ipv6(value: str) -> bool:
    """Colon-grouped hex literal, lowercase, as the registry displays it."""

    if not RE_IPV6_CHARS.match(value):
        return False
    try:
        ipaddress.IPv6Address(value)
    except ValueError:
        return False
    return True


def is_address(value: str) -> bool:
    return is_ipv4(value) or is_ipv6(value)


def in_bailiwick(name: str, origin: str) -> bool:
    """True when `name` is `origin` or one of its subdomains."""

    return name == origin or name.endswith("." + origin)


def is_reverse_zone(origin: str) -> bool:
    return origin == "arpa" or origin.endswith(".arpa")
