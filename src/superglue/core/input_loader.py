"""Loaders for the run's local inputs.

Lives in `core/` because it defines *what* the inputs look like (credentials
file, registrant JSON), independently of where the CLI reads them from.
"""

from __future__ import annotations

import json
import re
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from superglue.core.domain.models import Credentials, RegistrantRecord
from superglue.core.errors import InputSyntaxError
from superglue.core.log import get_logger

logger = get_logger("input")

_RE_CRED_SKIP = re.compile(r"^\s*#|^\s*$")
_RE_CRED_LINE = re.compile(r"^(\S+)\s+(.*)$")

_REGISTRANT = TypeAdapter(dict[str, str])


def read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise InputSyntaxError(str(path), None, f"cannot read file: {exc.strerror or exc}") from exc


def parse_credentials(text: str, *, source: str) -> Credentials:
    """`key value` lines; blank lines and `#` comments are ignored.

    `user` and `pass` are required, other keys are ignored.
    """

    values: dict[str, str] = {}
    for number, line in enumerate(text.splitlines(), start=1):
        if _RE_CRED_SKIP.match(line):
            continue
        match = _RE_CRED_LINE.match(line)
        if not match:
            raise InputSyntaxError(source, number, f"could not parse line: {line}", line)
        key, value = match.group(1), match.group(2).strip()
        values[key] = value
        if key == "pass":
            logger.debug("pass ********")
        else:
            logger.debug("%s %s", key, value)

    for required in ("user", "pass"):
        if not values.get(required):
            raise InputSyntaxError(source, None, f"missing required key '{required}'")
    return Credentials.model_validate(values)


def load_credentials(path: Path) -> Credentials:
    return parse_credentials(read_text(path), source=str(path))


def parse_registrant(text: str, *, source: str) -> RegistrantRecord:
    """A flat JSON object of string fields, key order preserved."""

    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise InputSyntaxError(source, exc.lineno, f"invalid JSON: {exc.msg}") from exc
    try:
        record = _REGISTRANT.validate_python(data, strict=True)
    except ValidationError as exc:
        raise InputSyntaxError(source, None, "registrant data must be a flat object of strings") from exc
    for key, value in record.items():
        logger.debug("%s: %s", key, value)
    return record
