"""Runner and backend configuration.

One place for the values the old scripts scattered as literals at the
top of every file: base URL, viewport, timeouts, test accounts and the
Supabase service credentials.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

from dotenv import dotenv_values

from agencyos_qa.testing.utils import (
    ValidationError,
    validate_in_range,
    validate_positive,
    validate_url,
)

# =============================================================================
# DEFAULTS
# =============================================================================

DEFAULT_BASE_URL = "http://localhost:3000"

# Upper bound for any single wait (seconds)
DEFAULT_TIMEOUT = 10.0
DEFAULT_POLL_INTERVAL = 0.25

# Load state the runner waits for after every navigation
DEFAULT_NAVIGATION_WAIT = "networkidle"

DEFAULT_ENV_FILE = ".env.local"

# Named viewports used by the responsive checks
VIEWPORTS = {
    "mobile": {"width": 320, "height": 568},
    "mobile-large": {"width": 375, "height": 667},
    "tablet": {"width": 768, "height": 1024},
    "desktop": {"width": 1024, "height": 768},
    "desktop-large": {"width": 1920, "height": 1080},
}

# =============================================================================
# TEST ACCOUNTS
# =============================================================================

ROLES = ("admin", "team", "client")

# Seeded demo addresses; passwords always come from the environment
DEFAULT_ACCOUNT_EMAILS = {
    "admin": "admin@demo.com",
    "team": "team@demo.com",
    "client": "sarah@acmecorp.com",
}

# Landing route each role is redirected to after login
ROLE_DASHBOARDS = {
    "admin": "/admin",
    "team": "/team",
    "client": "/client",
}

SHARED_PASSWORD_VAR = "QA_DEMO_PASSWORD"

# =============================================================================
# BACKEND
# =============================================================================

SUPABASE_URL_VAR = "NEXT_PUBLIC_SUPABASE_URL"
SUPABASE_SERVICE_KEY_VAR = "SUPABASE_SERVICE_ROLE_KEY"


class ConfigurationError(Exception):
    """Missing or invalid configuration; fatal before any network call."""


def parse_viewport(value: str) -> dict[str, int]:
    """Parse a preset name (``tablet``) or ``WIDTHxHEIGHT`` (``390x844``)."""
    if value in VIEWPORTS:
        return dict(VIEWPORTS[value])

    width, sep, height = value.lower().partition("x")
    if not sep or not width.isdigit() or not height.isdigit():
        raise ValidationError(
            f"Invalid viewport '{value}': use one of {sorted(VIEWPORTS)} or WIDTHxHEIGHT"
        )
    return {"width": int(width), "height": int(height)}


@dataclass
class RunnerConfig:
    """Browser session settings passed explicitly into the executor."""

    base_url: str = DEFAULT_BASE_URL
    headless: bool = True
    slow_mo_ms: int = 0

    # Either a viewport or a named Playwright device profile, never both
    viewport: Optional[dict[str, int]] = None
    device: Optional[str] = None

    default_timeout: float = DEFAULT_TIMEOUT
    poll_interval: float = DEFAULT_POLL_INTERVAL
    navigation_wait: str = DEFAULT_NAVIGATION_WAIT

    continue_on_error: bool = False
    output_dir: Optional[Path] = None

    def __post_init__(self):
        self.base_url = validate_url(self.base_url)
        validate_positive(self.default_timeout, "default_timeout")
        validate_positive(self.poll_interval, "poll_interval")
        validate_in_range(self.slow_mo_ms, "slow_mo_ms", min_value=0)

        if self.viewport is not None and self.device is not None:
            raise ValidationError("viewport and device are mutually exclusive")

        if self.viewport is not None:
            for key in ("width", "height"):
                validate_positive(self.viewport.get(key, 0), f"viewport.{key}")

        if self.output_dir is not None:
            self.output_dir = Path(self.output_dir)

    @property
    def timeout_ms(self) -> int:
        return int(self.default_timeout * 1000)

    def resolve_url(self, route: str) -> str:
        """Join a route onto the base URL; absolute URLs pass through."""
        if route.startswith(("http://", "https://")):
            return route
        return f"{self.base_url}/{route.lstrip('/')}"


# =============================================================================
# ACCOUNTS
# =============================================================================

@dataclass(frozen=True)
class Account:
    """A seeded login used by the UI scenarios."""

    role: str
    email: str
    password: str = field(repr=False)

    @property
    def dashboard(self) -> str:
        return ROLE_DASHBOARDS[self.role]


def load_accounts(env: Optional[Mapping[str, str]] = None) -> dict[str, Account]:
    """
    Build one Account per role from the environment.

    ``QA_<ROLE>_EMAIL`` overrides the demo address and
    ``QA_<ROLE>_PASSWORD`` (or the shared ``QA_DEMO_PASSWORD``) supplies
    the password.
    """
    env = os.environ if env is None else env
    accounts = {}

    for role in ROLES:
        prefix = f"QA_{role.upper()}"
        email = env.get(f"{prefix}_EMAIL") or DEFAULT_ACCOUNT_EMAILS[role]
        password = env.get(f"{prefix}_PASSWORD") or env.get(SHARED_PASSWORD_VAR)
        if not password:
            raise ConfigurationError(
                f"No password for the {role} account: set {prefix}_PASSWORD or {SHARED_PASSWORD_VAR}"
            )
        accounts[role] = Account(role=role, email=email, password=password)

    return accounts


# =============================================================================
# BACKEND SETTINGS
# =============================================================================

def mask_secret(secret: str) -> str:
    """Keep just enough of a key to tell two apart in logs."""
    if len(secret) <= 8:
        return "****"
    return f"{secret[:4]}...{secret[-4:]}"


@dataclass(frozen=True)
class BackendSettings:
    """Supabase project URL and service-role key."""

    url: str
    service_key: str = field(repr=False)
    demo_password: Optional[str] = field(default=None, repr=False)

    def __repr__(self) -> str:
        return f"BackendSettings(url={self.url!r}, service_key={mask_secret(self.service_key)!r})"


def load_environment(env_file: Optional[str] = DEFAULT_ENV_FILE) -> dict[str, str]:
    """
    Merge the env file with the process environment.

    Variables already exported in the process win over the file.
    """
    merged: dict[str, str] = {}
    if env_file and Path(env_file).exists():
        merged.update({k: v for k, v in dotenv_values(env_file).items() if v is not None})
    merged.update(os.environ)
    return merged


def load_backend_settings(
    env_file: Optional[str] = DEFAULT_ENV_FILE,
    env: Optional[Mapping[str, str]] = None,
) -> BackendSettings:
    """
    Read the Supabase credentials.

    Raises:
        ConfigurationError: If the URL or service key is missing
    """
    env = load_environment(env_file) if env is None else env

    missing = [name for name in (SUPABASE_URL_VAR, SUPABASE_SERVICE_KEY_VAR) if not env.get(name)]
    if missing:
        source = f" (looked in {env_file} and the environment)" if env_file else ""
        raise ConfigurationError(f"Missing {', '.join(missing)}{source}")

    try:
        url = validate_url(env[SUPABASE_URL_VAR], require_https=False)
    except ValidationError as e:
        raise ConfigurationError(str(e)) from e

    return BackendSettings(
        url=url,
        service_key=env[SUPABASE_SERVICE_KEY_VAR],
        demo_password=env.get(SHARED_PASSWORD_VAR),
    )
