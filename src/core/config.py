"""
Configuration constants and environment setup.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import find_dotenv, load_dotenv

from core.exceptions import ConfigurationError

# =============================================================================
# PATHS
# =============================================================================

# Relative to the working directory the job is started from
DB_PATH = Path("data") / "db" / "calendar-events.db"

# =============================================================================
# MS GRAPH
# =============================================================================

GRAPH_API_URL = "https://graph.microsoft.com/v1.0"
GRAPH_SCOPES = ["https://graph.microsoft.com/.default"]

# Fields requested from the calendar view ($select)
EVENT_SELECT_FIELDS = ["subject", "start", "end", "organizer", "location", "bodyPreview"]
DEFAULT_PAGE_SIZE = 50

# =============================================================================
# CALENDAR WINDOW
# =============================================================================

DEFAULT_MONTHS_BEFORE = 1
DEFAULT_MONTHS_AFTER = 1

# =============================================================================
# TIMEOUTS (seconds)
# =============================================================================

GRAPH_TIMEOUT_SECONDS = 30.0
DB_TIMEOUT_SECONDS = 30.0


@dataclass
class Settings:
    """Values read once at startup and handed to the sync pipeline."""

    client_id: str
    tenant_id: str
    username: str
    password: str = field(repr=False)
    calendar_email: str
    months_before: int = DEFAULT_MONTHS_BEFORE
    months_after: int = DEFAULT_MONTHS_AFTER
    db_path: Path = DB_PATH
    graph_timeout: float = GRAPH_TIMEOUT_SECONDS
    db_timeout: float = DB_TIMEOUT_SECONDS
    debug_login: bool = False
    debug_list_calendars: bool = False
    debug_display_calendar: bool = False
    log_level: str = "INFO"


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None or value == "":
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    value = os.environ.get(name, "").strip()
    if not value:
        return default
    try:
        number = int(value)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got '{value}'") from None
    if number < 0:
        raise ConfigurationError(f"{name} must be >= 0, got {number}")
    return number


def _env_float(name: str, default: float) -> float:
    value = os.environ.get(name, "").strip()
    if not value:
        return default
    try:
        number = float(value)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got '{value}'") from None
    if number <= 0:
        raise ConfigurationError(f"{name} must be > 0, got {number}")
    return number


def _env_log_level(name: str, default: str = "INFO") -> str:
    level = os.environ.get(name, "").strip().upper() or default
    if level not in logging.getLevelNamesMapping():
        raise ConfigurationError(f"{name} must be a logging level name, got '{level}'")
    return level


def get_settings() -> Settings:
    """
    Build settings from the environment.

    A .env file is looked up from the current working directory upwards;
    variables already set in the environment take precedence over it.
    Relative database paths resolve against the working directory.

    Raises:
        ConfigurationError: if a numeric value or log level is invalid
    """
    load_dotenv(find_dotenv(usecwd=True))

    db_path = os.environ.get("CALENDAR_DB_PATH", "").strip()
    return Settings(
        client_id=os.environ.get("MICROSOFT_GRAPH_APP_ID", ""),
        tenant_id=os.environ.get("MICROSOFT_GRAPH_TENANT_ID", ""),
        username=os.environ.get("MICROSOFT_GRAPH_USERNAME", ""),
        password=os.environ.get("MICROSOFT_GRAPH_PASSWORD", ""),
        calendar_email=os.environ.get("SHARED_CALENDAR_EMAIL", "").strip(),
        months_before=_env_int("CALENDAR_MONTHS_BEFORE", DEFAULT_MONTHS_BEFORE),
        months_after=_env_int("CALENDAR_MONTHS_AFTER", DEFAULT_MONTHS_AFTER),
        db_path=Path.cwd() / (Path(db_path) if db_path else DB_PATH),
        graph_timeout=_env_float("GRAPH_TIMEOUT_SECONDS", GRAPH_TIMEOUT_SECONDS),
        db_timeout=_env_float("DB_TIMEOUT_SECONDS", DB_TIMEOUT_SECONDS),
        debug_login=_env_bool("DEBUG_LOGIN"),
        debug_list_calendars=_env_bool("DEBUG_LIST_CALENDARS"),
        debug_display_calendar=_env_bool("DEBUG_DISPLAY_CALENDAR"),
        log_level=_env_log_level("LOG_LEVEL"),
    )
