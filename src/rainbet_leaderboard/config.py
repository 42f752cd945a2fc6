"""rainbet_leaderboard configuration helpers.

Settings come from an optional ``leaderboard.yaml`` at the repo root, with
environment variables (and a ``.env`` file) taking precedence. The resolved
``LeaderboardSettings`` is passed explicitly into the period and prize code.
"""

from __future__ import annotations

import datetime
import json
import logging
import math
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping
from zoneinfo import ZoneInfo

import yaml
from dotenv import load_dotenv

from rainbet_leaderboard.classes.period import (
    DEFAULT_CUSTOM_LENGTH_DAYS,
    DEFAULT_DISPLAY_TIMEZONE,
    PeriodMode,
)
from rainbet_leaderboard.classes.prizes import PrizeCurrency, PrizeTable, parse_prize_table
from rainbet_leaderboard.classes.rainbet import DEFAULT_API_BASE
from rainbet_leaderboard.paths import config_file

logger = logging.getLogger(__name__)

THEMES = ("manatee", "mobbin")
DEFAULT_THEME = "manatee"
DEFAULT_PERIOD_MODE = PeriodMode.MONTHLY.value
# every day the calendar has
MAX_PERIOD_LENGTH_DAYS = (datetime.date.max - datetime.date.min).days + 1

# env var -> settings field
ENV_FIELDS = {
    "RAINBET_API_BASE": "api_base",
    "RAINBET_API_KEY": "api_key",
    "RAINBET_TIMEOUT_SEC": "request_timeout",
    "PERIOD_MODE": "period_mode",
    "PERIOD_START": "period_start",
    "PERIOD_LENGTH_DAYS": "period_length_days",
    "PRIZES": "prizes",
    "PRIZE_CURRENCY": "prize_currency",
    "PRIZE_CURRENCY_SYMBOL": "prize_currency_symbol",
    "DISPLAY_TIMEZONE": "display_timezone",
    "LEADERBOARD_THEME": "theme",
    "RAINBET_REFERRAL_URL": "referral_url",
    "KICK_URL": "kick_url",
    "DISCORD_INVITE_URL": "discord_invite_url",
    "INSTAGRAM_URL": "instagram_url",
}


@dataclass(frozen=True)
class LeaderboardSettings:
    api_base: str = DEFAULT_API_BASE
    api_key: str = ""
    request_timeout: float | None = None
    period_mode: str = DEFAULT_PERIOD_MODE
    period_start: datetime.date | None = None
    period_length_days: int = DEFAULT_CUSTOM_LENGTH_DAYS
    prizes_raw: str = ""
    prize_currency: str = "USD"
    prize_currency_symbol: str | None = None
    display_timezone: str = DEFAULT_DISPLAY_TIMEZONE
    theme: str = DEFAULT_THEME
    referral_url: str = "#"
    kick_url: str = "#"
    discord_invite_url: str = "#"
    instagram_url: str = "#"

    @property
    def mode(self) -> PeriodMode:
        return PeriodMode.parse(self.period_mode)

    @property
    def prize_table(self) -> PrizeTable:
        return parse_prize_table(self.prizes_raw)

    @property
    def currency(self) -> PrizeCurrency:
        return PrizeCurrency.from_config(self.prize_currency, self.prize_currency_symbol)


def _text(value: Any, default: str = "") -> str:
    if value is None:
        return default
    text = str(value).strip()
    return text or default


def _prizes_text(value: Any) -> str:
    # a YAML list is handed to the prize parser in its JSON form
    if isinstance(value, (list, tuple)):
        return json.dumps(list(value))
    return _text(value)


def _parse_length(value: Any) -> int:
    if value in (None, ""):
        return DEFAULT_CUSTOM_LENGTH_DAYS
    try:
        number = float(str(value).strip())
    except ValueError:
        logger.warning("invalid PERIOD_LENGTH_DAYS %r; using %d", value, DEFAULT_CUSTOM_LENGTH_DAYS)
        return DEFAULT_CUSTOM_LENGTH_DAYS
    if not math.isfinite(number):
        logger.warning("invalid PERIOD_LENGTH_DAYS %r; using %d", value, DEFAULT_CUSTOM_LENGTH_DAYS)
        return DEFAULT_CUSTOM_LENGTH_DAYS
    if number > MAX_PERIOD_LENGTH_DAYS:
        logger.warning("PERIOD_LENGTH_DAYS %r is too long; using %d", value, MAX_PERIOD_LENGTH_DAYS)
        return MAX_PERIOD_LENGTH_DAYS
    return max(1, int(number))


def _parse_start(value: Any) -> datetime.date | None:
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    text = _text(value)
    if not text:
        return None
    try:
        return datetime.datetime.strptime(text, "%Y-%m-%d").date()
    except ValueError:
        logger.warning("invalid PERIOD_START %r; the custom period will start today", value)
        return None


def _parse_timeout(value: Any) -> float | None:
    if value in (None, ""):
        return None
    try:
        timeout = float(value)
    except (TypeError, ValueError):
        logger.warning("invalid RAINBET_TIMEOUT_SEC %r; using the requests default", value)
        return None
    return timeout if math.isfinite(timeout) and timeout > 0 else None


def _parse_theme(value: Any) -> str:
    theme = _text(value, DEFAULT_THEME).lower()
    if theme not in THEMES:
        logger.warning("unknown theme %r; using %s", value, DEFAULT_THEME)
        return DEFAULT_THEME
    return theme


def _parse_timezone(value: Any) -> str:
    name = _text(value, DEFAULT_DISPLAY_TIMEZONE)
    try:
        ZoneInfo(name)
    except (ValueError, KeyError, OSError):
        logger.warning("unknown display timezone %r; using %s", value, DEFAULT_DISPLAY_TIMEZONE)
        return DEFAULT_DISPLAY_TIMEZONE
    return name


def load_config_file(path: Path | None = None) -> dict[str, Any]:
    config_path = path or config_file("leaderboard.yaml", "LEADERBOARD_CONFIG_FILE")
    if not config_path.is_file():
        return {}
    with open(config_path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        logger.warning("ignoring %s: expected a mapping, got %s", config_path, type(data).__name__)
        return {}
    return data


def resolve_settings(
    config_data: Mapping[str, Any] | None = None,
    environ: Mapping[str, str] | None = None,
) -> LeaderboardSettings:
    """Merge file values with environment overrides into a validated settings object."""
    merged: dict[str, Any] = {key: value for key, value in (config_data or {}).items()}
    for env_name, field_name in ENV_FIELDS.items():
        value = (environ or {}).get(env_name)
        if value is not None and value != "":
            merged[field_name] = value

    return LeaderboardSettings(
        api_base=_text(merged.get("api_base"), DEFAULT_API_BASE),
        api_key=_text(merged.get("api_key")),
        request_timeout=_parse_timeout(merged.get("request_timeout")),
        period_mode=_text(merged.get("period_mode"), DEFAULT_PERIOD_MODE).lower(),
        period_start=_parse_start(merged.get("period_start")),
        period_length_days=_parse_length(merged.get("period_length_days")),
        prizes_raw=_prizes_text(merged.get("prizes")),
        prize_currency=_text(merged.get("prize_currency"), "USD").upper(),
        prize_currency_symbol=_text(merged.get("prize_currency_symbol")) or None,
        display_timezone=_parse_timezone(merged.get("display_timezone")),
        theme=_parse_theme(merged.get("theme")),
        referral_url=_text(merged.get("referral_url"), "#"),
        kick_url=_text(merged.get("kick_url"), "#"),
        discord_invite_url=_text(merged.get("discord_invite_url"), "#"),
        instagram_url=_text(merged.get("instagram_url"), "#"),
    )


def load_settings() -> LeaderboardSettings:
    load_dotenv()
    return resolve_settings(load_config_file(), os.environ)
