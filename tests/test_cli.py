from __future__ import annotations

import io
import sys
from pathlib import Path

import pytest
from typer.testing import CliRunner

from superglue.cli import main as cli_main
from superglue.cli.main import app, run

RUNNER = CliRunner()

MATCHING = "@ NS ns1\n@ NS ns2\nns1 A 192.0.2.1\nns2 A 192.0.2.2\n"
CHANGED = "@ NS ns1\n@ NS ns3\nns1 A 192.0.2.1\nns3 A 192.0.2.3\n"


@pytest.fixture
def creds(tmp_path: Path) -> Path:
    path = tmp_path / "janet"
    path.write_text("user hostmaster\npass secret\n", encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def fake_gateway(monkeypatch: pytest.MonkeyPatch, gateway):
    monkeypatch.setattr(cli_main, "build_gateway", lambda settings: gateway)
    return gateway


def test_delegation_already_matches(creds: Path, fake_gateway) -> None:
    result = RUNNER.invoke(app, ["delegation", "--creds", str(creds), "example.ac.uk"], input=MATCHING)
    assert result.exit_code == 0, result.output
    assert fake_gateway.submitted == []
    assert fake_gateway.closed


def test_delegation_not_really(creds: Path, fake_gateway) -> None:
    result = RUNNER.invoke(
        app,
        ["delegation", "--creds", str(creds), "--not-really", "--log-level", "debug", "Example.AC.UK"],
        input=CHANGED,
    )
    assert result.exit_code == 0, result.output
    assert "Old NS records" in result.output
    assert "superglue-janet: Not really!" in result.output
    assert "superglue-janet: Modification scheduled at" in result.output
    assert fake_gateway.submitted == []


def test_delegation_submits(creds: Path, fake_gateway) -> None:
    result = RUNNER.invoke(app, ["delegation", "--creds", str(creds), "example.ac.uk"], input=CHANGED)
    assert result.exit_code == 0, result.output
    assert "superglue-janet: Modification ticket raised for example.ac.uk" in result.output
    assert [ns.name for ns in fake_gateway.submitted[0].name_servers] == ["ns1.example.ac.uk", "ns3.example.ac.uk"]


def test_delegation_from_file(tmp_path: Path, creds: Path, fake_gateway) -> None:
    zone = tmp_path / "zone.txt"
    zone.write_text(CHANGED, encoding="utf-8")
    result = RUNNER.invoke(app, ["delegation", "--creds", str(creds), "-i", str(zone), "--not-really", "example.ac.uk"])
    assert result.exit_code == 0, result.output
    assert "get_available_slots" in fake_gateway.calls


def test_syntax_error_exits_before_login(creds: Path, fake_gateway) -> None:
    result = RUNNER.invoke(app, ["delegation", "--creds", str(creds), "example.ac.uk"], input="@ MX 10 mail\n")
    assert result.exit_code == 1
    assert "stdin:1: unsupported record type MX" in result.output
    assert fake_gateway.calls == []


def test_validation_error(creds: Path, fake_gateway) -> None:
    result = RUNNER.invoke(app, ["delegation", "--creds", str(creds), "example.ac.uk"], input="@ NS ns1\n")
    assert result.exit_code == 1
    assert "glue records missing for NS ns1.example.ac.uk" in result.output


def test_missing_creds_is_a_usage_error(fake_gateway) -> None:
    result = RUNNER.invoke(app, ["delegation", "example.ac.uk"], input=MATCHING)
    assert result.exit_code == 1
    assert "--creds=<file> is required" in result.output


def test_bad_domain_is_a_usage_error(creds: Path) -> None:
    result = RUNNER.invoke(app, ["delegation", "--creds", str(creds), "not_a_domain"], input=MATCHING)
    assert result.exit_code == 1
    assert "not a domain name" in result.output


def test_pending_tickets_exit_zero(creds: Path, fake_gateway) -> None:
    fake_gateway.pending = 1
    result = RUNNER.invoke(app, ["delegation", "--creds", str(creds), "example.ac.uk"], input=CHANGED)
    assert result.exit_code == 0
    assert "Changes pending for example.ac.uk" in result.output
    assert fake_gateway.submitted == []


def test_too_many_modifications_exit_one(creds: Path, fake_gateway) -> None:
    fake_gateway.pending_total = 10
    result = RUNNER.invoke(app, ["delegation", "--creds", str(creds), "example.ac.uk"], input=CHANGED)
    assert result.exit_code == 1
    assert "Too many pending modifications" in result.output


def test_registrant_update(creds: Path, fake_gateway) -> None:
    result = RUNNER.invoke(
        app,
        ["registrant", "--creds", str(creds), "example.ac.uk"],
        input='{"Name": "New Ltd"}',
    )
    assert result.exit_code == 0, result.output
    assert "whois-up-janet: Modification ticket raised for example.ac.uk" in result.output
    assert fake_gateway.submitted[0].registrant_fields == {"Name": "New Ltd"}


def test_registrant_bad_json(creds: Path) -> None:
    result = RUNNER.invoke(app, ["registrant", "--creds", str(creds), "example.ac.uk"], input="{nope")
    assert result.exit_code == 1
    assert "invalid JSON" in result.output


def test_doctor_offline(creds: Path) -> None:
    result = RUNNER.invoke(app, ["doctor", "run", "--offline", "--creds", str(creds)])
    assert result.exit_code == 0, result.output
    assert "user hostmaster" in result.output


def test_run_maps_click_usage_errors_to_exit_one(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    monkeypatch.setattr(sys, "argv", ["superglue", "delegation", "--no-such-flag", "example.ac.uk"])
    with pytest.raises(SystemExit) as info:
        run()
    assert info.value.code == 1
    captured = capsys.readouterr()
    assert "No such option" in captured.out + captured.err
    assert "Traceback" not in captured.out + captured.err


def test_run_maps_missing_argument_to_exit_one(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    monkeypatch.setattr(sys, "argv", ["superglue", "delegation"])
    with pytest.raises(SystemExit) as info:
        run()
    assert info.value.code == 1
    captured = capsys.readouterr()
    assert "Missing argument" in captured.out + captured.err


def test_run_exits_zero_on_success(monkeypatch: pytest.MonkeyPatch, creds: Path, fake_gateway) -> None:
    monkeypatch.setattr(sys, "argv", ["superglue", "delegation", "--creds", str(creds), "example.ac.uk"])
    monkeypatch.setattr(sys, "stdin", io.StringIO(MATCHING))
    with pytest.raises(SystemExit) as info:
        run()
    assert info.value.code in (None, 0)
