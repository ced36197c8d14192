"""Core configuration.

Why here:
- Centralises environment variables (pydantic-settings) without polluting the CLI.
- Lets the gateway and the pipeline read the same settings consistently.
"""

from __future__ import annotations

import os
import sys
from enum import Enum
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def get_user_config_dir() -> Path:
    """Per-user configuration directory (cross-platform, no dependencies)."""

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / "superglue"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "superglue"

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "superglue"
    return Path.home() / ".config" / "superglue"


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


class ReverseDsPolicy(str, Enum):
    """What to do with DS records supplied for a reverse (.arpa) zone."""

    DISCARD = "discard"
    REJECT = "reject"
    KEEP = "keep"


class AppSettings(BaseSettings):
    """Central application settings.

    Why pydantic-settings:
    - Typed and validated at the edge (env vars) without leaking into the engine.
    - A single configuration contract for the CLI, pipeline and gateway.
    """

    model_config = SettingsConfigDict(
        env_prefix="SUPERGLUE_",
        extra="ignore",
        case_sensitive=False,
        # Project first (dev), then the user's global config.
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    registry_url: str = Field(
        default="https://domainregistry.jisc.ac.uk/dns",
        min_length=8,
        description="Entry page of the registry web site (the login form).",
    )
    http_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Timeout per request (seconds). A timeout aborts the run.",
    )
    user_agent: str = Field(
        default="superglue/0.1",
        min_length=1,
        description="User-Agent sent to the registry.",
    )

    lead_minutes: int = Field(
        default=5,
        ge=0,
        le=24 * 60,
        description="Minimum time between now and the scheduled modification.",
    )
    registry_timezone: str = Field(
        default="Europe/London",
        min_length=1,
        description="Time zone the registry's modification slots are expressed in.",
    )
    max_pending_modifications: int = Field(
        default=10,
        ge=1,
        description="Abort when the account already has this many pending modifications.",
    )

    reverse_ds_policy: ReverseDsPolicy = Field(
        default=ReverseDsPolicy.DISCARD,
        description="The registry does not accept signed reverse delegations.",
    )
    allow_empty_delegation: bool = Field(
        default=True,
        description="Treat input without NS or DS records as 'leave delegation unchanged'.",
    )
    strict_ds: bool = Field(
        default=False,
        description="Check DS key tag, algorithm, digest type and digest length.",
    )
