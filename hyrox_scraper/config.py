"""
Scraper settings from the environment.
Loads .env and .env.local from the project root so ROSTER_URL / DATABASE_URL
are set when run from the CLI.
"""
import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from .errors import ConfigError

PROJECT_ROOT = Path(__file__).resolve().parent.parent
FIXTURES_DIR = PROJECT_ROOT / "fixtures"

USER_AGENT = "HyroxResultsScraper/1.0 (personal use; contact for removal)"
MAX_ATHLETES = 50
# Same ceiling as the --max-athletes / listing limit
MAX_ATHLETES_LIMIT = 100
REQUEST_TIMEOUT_SEC = 30
# Serial pacing between athlete detail pages; the only backpressure we apply.
RATE_LIMIT_SEC = 2.0
RETRY_COUNT = 3
RETRY_BASE_DELAY_SEC = 1.0


def load_env() -> None:
    load_dotenv(PROJECT_ROOT / ".env")
    load_dotenv(PROJECT_ROOT / ".env.local", override=True)


def log_level(verbose: bool = False) -> int:
    """DEBUG with --verbose, else LOG_LEVEL; unknown names fall back to WARNING."""
    if verbose:
        return logging.DEBUG
    name = os.environ.get("LOG_LEVEL", "WARNING").strip().upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.WARNING


def _env_int(name: str, default: int, minimum: int = 0, maximum: int | None = None) -> int:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from None
    if value < minimum:
        raise ConfigError(f"{name} must be >= {minimum}, got {value}")
    if maximum is not None and value > maximum:
        raise ConfigError(f"{name} must be <= {maximum}, got {value}")
    return value


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from None
    if value < 0:
        raise ConfigError(f"{name} must be >= 0, got {value}")
    return value


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class ScrapeConfig:
    roster_url: str | None = None
    max_athletes: int = MAX_ATHLETES
    request_timeout: float = REQUEST_TIMEOUT_SEC
    request_delay: float = RATE_LIMIT_SEC
    retry_count: int = RETRY_COUNT
    retry_base_delay: float = RETRY_BASE_DELAY_SEC
    fill_missing_slots: bool = False
    season_year: int | None = None
    location: str | None = None
    user_agent: str = USER_AGENT
    database_url: str | None = None

    @classmethod
    def from_env(cls, load_dotenv_files: bool = True) -> "ScrapeConfig":
        if load_dotenv_files:
            load_env()
        year = _env_int("SEASON_YEAR", 0)
        return cls(
            roster_url=os.environ.get("ROSTER_URL") or None,
            max_athletes=_env_int("MAX_ATHLETES", MAX_ATHLETES, minimum=1, maximum=MAX_ATHLETES_LIMIT),
            request_timeout=_env_float("REQUEST_TIMEOUT", REQUEST_TIMEOUT_SEC),
            request_delay=_env_float("REQUEST_DELAY", RATE_LIMIT_SEC),
            retry_count=_env_int("RETRY_COUNT", RETRY_COUNT, minimum=1),
            retry_base_delay=_env_float("RETRY_BASE_DELAY", RETRY_BASE_DELAY_SEC),
            fill_missing_slots=_env_bool("FILL_MISSING_SLOTS", False),
            season_year=year or None,
            location=os.environ.get("EVENT_LOCATION") or None,
            user_agent=os.environ.get("USER_AGENT") or USER_AGENT,
            database_url=os.environ.get("DATABASE_URL") or None,
        )
