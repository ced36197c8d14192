from __future__ import annotations

from pathlib import Path

import pytest

from superglue.core.errors import InputSyntaxError
from superglue.core.input_loader import load_credentials, parse_credentials, parse_registrant


def test_credentials_file(tmp_path: Path) -> None:
    path = tmp_path / "creds"
    path.write_text("# registry login\n\nuser hostmaster\npass s3cret with spaces\nextra ignored\n", encoding="utf-8")
    credentials = load_credentials(path)
    assert credentials.user == "hostmaster"
    assert credentials.password.get_secret_value() == "s3cret with spaces"
    assert "s3cret" not in repr(credentials)


def test_credentials_bad_line() -> None:
    with pytest.raises(InputSyntaxError) as info:
        parse_credentials("user hostmaster\nnovalue\n", source="creds")
    assert info.value.line == 2
    assert "could not parse line: novalue" in str(info.value)


def test_credentials_missing_pass() -> None:
    with pytest.raises(InputSyntaxError, match="missing required key 'pass'"):
        parse_credentials("user hostmaster\n", source="creds")


def test_credentials_missing_file(tmp_path: Path) -> None:
    with pytest.raises(InputSyntaxError, match="cannot read file"):
        load_credentials(tmp_path / "absent")


def test_registrant_keeps_key_order() -> None:
    record = parse_registrant('{"Name": "Example Ltd", "City": "Cambridge"}', source="stdin")
    assert list(record) == ["Name", "City"]


def test_registrant_invalid_json_has_line_number() -> None:
    with pytest.raises(InputSyntaxError) as info:
        parse_registrant('{\n  "Name": "Example Ltd",\n  oops\n}', source="whois.json")
    assert info.value.line == 3


@pytest.mark.parametrize("text", ['["a"]', '{"Name": 3}', '{"Name": {"x": "y"}}'])
def test_registrant_must_be_flat_strings(text: str) -> None:
    with pytest.raises(InputSyntaxError, match="flat object of strings"):
        parse_registrant(text, source="stdin")
