from __future__ import annotations

import pytest

from superglue.core.config import AppSettings, ReverseDsPolicy
from superglue.core.domain.models import NameServer
from superglue.core.errors import DelegationValidationError, InputSyntaxError
from superglue.core.services.zone_parser import parse, parse_records

ORIGIN = "example.ac.uk"


def _settings(**overrides: object) -> AppSettings:
    return AppSettings(_env_file=None, **overrides)


def test_end_to_end_parse() -> None:
    text = "@ NS ns1\n@ NS ns2\nns1 A 192.0.2.1\nns2 A 192.0.2.2"
    delegation = parse(text, ORIGIN, settings=_settings())
    assert delegation.name_servers == [
        NameServer(name="ns1.example.ac.uk", address="192.0.2.1"),
        NameServer(name="ns2.example.ac.uk", address="192.0.2.2"),
    ]
    assert delegation.ds_text == ""


def test_owner_continuation_class_and_ttl() -> None:
    text = "\n".join(
        [
            "example.ac.uk. 3600 IN NS ns1",
            "               IN NS ns0.other.org.",
            "ns1 IN A 192.0.2.1",
            "    3600 AAAA 2001:DB8::1  ; second glue",
        ]
    )
    raw = parse_records(text, ORIGIN)
    assert raw.ns_names == ["ns1.example.ac.uk", "ns0.other.org"]
    assert raw.glue == {"ns1.example.ac.uk": ["192.0.2.1", "2001:db8::1"]}


def test_comments_and_blank_lines_are_skipped() -> None:
    text = "; header\n\n@ NS ns.other.org. ; trailing\n   \n"
    raw = parse_records(text, ORIGIN)
    assert raw.ns_names == ["ns.other.org"]


def test_duplicate_ns_lines_collapse() -> None:
    raw = parse_records("@ NS ns.other.org.\n@ NS ns.other.org.", ORIGIN)
    assert raw.ns_names == ["ns.other.org"]


def test_ds_text_is_tagged_with_owner_in_input_order() -> None:
    text = "@ DS 12345 8 2 ABCDEF\n@ DS 54321  13 2   0123"
    raw = parse_records(text, ORIGIN)
    assert raw.ds_text == (
        "example.ac.uk. IN DS 12345 8 2 ABCDEF\n"
        "example.ac.uk. IN DS 54321 13 2 0123"
    )


def test_dnskey_is_ignored() -> None:
    raw = parse_records("@ NS ns.other.org.\n@ DNSKEY 257 3 13 AAAA", ORIGIN)
    assert raw.ns_names == ["ns.other.org"]
    assert raw.ds_text == ""


@pytest.mark.parametrize(
    ("text", "message"),
    [
        ("@ MX 10 mail", "unsupported record type MX"),
        ("justonetoken", "could not parse line"),
        ("www NS ns1", "NS records must be owned by example.ac.uk"),
        ("www DS 1 8 2 AB", "DS records must be owned by example.ac.uk"),
        ("ns.other.org. A 192.0.2.1", "glue A records must be subdomains of example.ac.uk"),
        ("badexample.ac.uk. A 192.0.2.1", "glue A records must be subdomains"),
        ("ns1 A 192.0.2.256", "bad IPv4 address"),
        ("ns1 A 192.0.2", "bad IPv4 address"),
        ("ns1 AAAA 2001:db8::g", "bad IPv6 address"),
        ("@ NS -bad-", "bad domain name -bad-.example.ac.uk"),
        ("@ NS single.", "bad domain name single"),
    ],
)
def test_syntax_errors(text: str, message: str) -> None:
    with pytest.raises(InputSyntaxError) as info:
        parse_records(text, ORIGIN, source="zone.txt")
    assert message in str(info.value)
    assert info.value.source == "zone.txt"
    assert info.value.line == 1


def test_syntax_error_reports_line_number() -> None:
    with pytest.raises(InputSyntaxError) as info:
        parse_records("@ NS ns.other.org.\n\n@ TXT hello", ORIGIN)
    assert info.value.line == 3
    assert str(info.value).startswith("stdin:3:")


def test_owner_tokens_are_lowercased() -> None:
    raw = parse_records("@ NS NS1\nNS1 A 192.0.2.1", ORIGIN)
    assert raw.ns_names == ["ns1.example.ac.uk"]
    assert "ns1.example.ac.uk" in raw.glue


def test_strict_ds_checks_digest_length() -> None:
    good = "@ DS 12345 13 2 " + "ab" * 32
    assert parse_records(good, ORIGIN, strict_ds=True).ds_text
    with pytest.raises(InputSyntaxError, match="bad DS digest length"):
        parse_records("@ DS 12345 13 2 abcd", ORIGIN, strict_ds=True)
    with pytest.raises(InputSyntaxError, match="bad DS key tag"):
        parse_records("@ DS 70000 13 2 " + "ab" * 32, ORIGIN, strict_ds=True)


def test_reverse_zone_ds_is_discarded_by_default() -> None:
    origin = "2.0.192.in-addr.arpa"
    text = "@ NS ns.other.org.\n@ DS 1 8 2 ABCD"
    delegation = parse(text, origin, settings=_settings())
    assert delegation.ds_text == ""
    assert [ns.name for ns in delegation.name_servers] == ["ns.other.org"]


def test_reverse_zone_ds_policies() -> None:
    origin = "2.0.192.in-addr.arpa"
    text = "@ NS ns.other.org.\n@ DS 1 8 2 ABCD"
    with pytest.raises(DelegationValidationError, match="not supported for reverse zone"):
        parse(text, origin, settings=_settings(reverse_ds_policy=ReverseDsPolicy.REJECT))
    kept = parse(text, origin, settings=_settings(reverse_ds_policy=ReverseDsPolicy.KEEP))
    assert kept.ds_text == "2.0.192.in-addr.arpa. IN DS 1 8 2 ABCD"


def test_empty_input_leaves_delegation_unchanged_by_default() -> None:
    delegation = parse("; nothing here\n", ORIGIN, settings=_settings())
    assert delegation.is_empty


def test_empty_input_can_be_rejected() -> None:
    with pytest.raises(DelegationValidationError, match="no delegation records found"):
        parse("", ORIGIN, settings=_settings(allow_empty_delegation=False))


def test_parse_is_deterministic() -> None:
    text = "@ NS ns2\n@ NS ns1\nns2 A 10.0.0.2\nns1 A 10.0.0.2\nns1 A 10.0.0.1\n@ NS a.other.org."
    first = parse(text, ORIGIN, settings=_settings())
    second = parse(text, ORIGIN, settings=_settings())
    assert first == second
