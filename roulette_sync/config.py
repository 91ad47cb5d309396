"""Runtime configuration: API credentials and event constants."""

import os
from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any

import structlog
import yaml

from .exceptions import ConfigurationError
from .rate_limit import DEFAULT_MIN_INTERVAL
from .utils.date_and_time import format_iso_millis, parse_iso_datetime

logger = structlog.get_logger(__name__)

USERNAME_ENV = "RA_USERNAME"
API_KEY_ENV = "RA_API_KEY"

DEFAULT_OUTPUT = "roulette2026.json"


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


@dataclass(frozen=True)
class Credentials:
    """The two static values the remote API expects as query parameters."""

    username: str
    api_key: str

    @property
    def masked_key(self) -> str:
        return "****" + self.api_key[-4:]

    def __repr__(self) -> str:
        return f"Credentials(username={self.username!r}, api_key={self.masked_key!r})"


def load_credentials(env: Mapping[str, str] | None = None) -> Credentials:
    """Reads the API credentials from the environment.

    Args:
        env: Mapping to read from (defaults to os.environ).

    Returns:
        The credentials.

    Raises:
        ConfigurationError: If either variable is missing or empty.
    """
    env = os.environ if env is None else env
    username = (env.get(USERNAME_ENV) or "").strip()
    api_key = (env.get(API_KEY_ENV) or "").strip()

    missing = [
        name for name, value in ((USERNAME_ENV, username), (API_KEY_ENV, api_key))
        if not value
    ]
    if missing:
        raise ConfigurationError(
            f"{' and '.join(missing)} required",
            parameter=missing[0],
            suggestion=(
                f"Export {USERNAME_ENV} (your RetroAchievements username) and "
                f"{API_KEY_ENV} (from https://retroachievements.org/settings). "
                "In CI, add them as repository secrets."
            ),
        )
    return Credentials(username=username, api_key=api_key)


@dataclass
class EventConfig:
    """Constants describing the tracked event and where its data lives."""

    event_name: str = "RA Roulette 2026"
    event_id: int = 200
    badge_threshold: int = 52
    max_points: int = 156
    start_date: str = "2026-02-07T00:00:00.000000Z"
    end_date: str = "2027-02-06T23:59:59.000000Z"
    week_days: int = 7
    total_weeks: int | None = 52
    event_game_id: int = 37967
    event_url: str = "https://retroachievements.org/event/200-ra-roulette-2026"
    forum_url: str = "https://retroachievements.org/forums/topic/34261"
    api_base_url: str = "https://retroachievements.org/API"
    api_min_interval: float = DEFAULT_MIN_INTERVAL
    sources: list[str] = field(
        default_factory=lambda: ["event_page", "forum", "event_game"]
    )

    @property
    def event_start(self) -> datetime:
        return parse_iso_datetime(self.start_date)

    @property
    def week_duration(self) -> timedelta:
        return timedelta(days=self.week_days)


def load_event_config(path: str | Path | None = None) -> EventConfig:
    """Builds the event configuration, optionally overridden by a YAML file.

    Args:
        path: Optional YAML file whose top-level keys override the defaults.

    Returns:
        The event configuration.

    Raises:
        ConfigurationError: If the file is missing, unreadable, or has
            unknown keys or invalid values.
    """
    config = EventConfig()
    if path is None:
        return config

    config_path = Path(path)
    if not config_path.exists():
        raise ConfigurationError(
            f"Config file not found: {config_path}", parameter="config"
        )

    try:
        with open(config_path, encoding="utf-8") as f:
            data: Any = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(
            f"Could not read config file {config_path}: {e}", parameter="config"
        ) from e

    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Config file {config_path} must contain a mapping", parameter="config"
        )

    known = {f.name for f in fields(EventConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigurationError(
            f"Unknown config keys: {', '.join(unknown)}",
            parameter=unknown[0],
            suggestion=f"Valid keys are: {', '.join(sorted(known))}",
        )

    for key, value in data.items():
        # YAML turns unquoted timestamps into datetime objects.
        if isinstance(value, datetime):
            value = format_iso_millis(value)
        setattr(config, key, value)

    try:
        config.event_start
    except (AttributeError, TypeError, ValueError) as e:
        raise ConfigurationError(
            f"Invalid start_date: {config.start_date!r}", parameter="start_date"
        ) from e
    if not _is_int(config.week_days) or config.week_days < 1:
        raise ConfigurationError(
            f"week_days must be a positive integer, got {config.week_days!r}",
            parameter="week_days",
        )
    if config.total_weeks is not None and (
        not _is_int(config.total_weeks) or config.total_weeks < 1
    ):
        raise ConfigurationError(
            f"total_weeks must be a positive integer, got {config.total_weeks!r}",
            parameter="total_weeks",
        )
    if (
        isinstance(config.api_min_interval, bool)
        or not isinstance(config.api_min_interval, int | float)
        or config.api_min_interval < DEFAULT_MIN_INTERVAL
    ):
        raise ConfigurationError(
            f"api_min_interval must be a number of seconds of at least "
            f"{DEFAULT_MIN_INTERVAL}, got {config.api_min_interval!r}",
            parameter="api_min_interval",
        )

    logger.info("config_loaded", path=str(config_path), keys=sorted(data))
    return config
