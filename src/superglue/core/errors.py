"""Error taxonomy.

Every failure that ends a run derives from `SuperglueError`. The CLI catches
that base class once, prints the message and exits with `exit_code`.

- `UsageError`: bad CLI arguments, raised before any file or network access.
- `InputSyntaxError`: malformed zone, credentials or registrant text.
- `DelegationValidationError`: parseable but inconsistent delegation.
- `OperationalError`: anything that goes wrong while talking to the registry.
"""

from __future__ import annotations


class SuperglueError(Exception):
    """Base class for errors that terminate a run."""

    exit_code: int = 1


class UsageError(SuperglueError):
    pass


class InputSyntaxError(SuperglueError):
    """Malformed input text, tagged with its source and line number."""

    def __init__(self, source: str, line: int | None, message: str, text: str | None = None) -> None:
        self.source = source
        self.line = line
        self.text = text
        self.message = message
        where = source if line is None else f"{source}:{line}"
        super().__init__(f"{where}: {message}")


class DelegationValidationError(SuperglueError):
    """Glue and NS records that do not agree with each other."""

    def __init__(self, source: str, message: str) -> None:
        self.source = source
        self.message = message
        super().__init__(f"{source}: {message}")


class OperationalError(SuperglueError):
    """Failure after some registry interaction may already have happened."""


class GatewayError(OperationalError):
    pass


class LoginError(GatewayError):
    pass


class NavigationError(GatewayError):
    """Timeout, transport error or unexpected page while driving the registry."""


class TooManyTicketsError(OperationalError):
    pass


class NoSlotError(OperationalError):
    pass
