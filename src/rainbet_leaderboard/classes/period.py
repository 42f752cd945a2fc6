"""Leaderboard period boundaries.

API ranges are computed on UTC calendar days and sent as inclusive
``YYYY-MM-DD`` dates. ``display_week`` is a separate calculation on the
calendar date of a named timezone and is only used for header text; the two
can disagree around midnight and are not interchangeable.
"""

from __future__ import annotations

import datetime
import logging
from dataclasses import dataclass
from enum import Enum
from zoneinfo import ZoneInfo

logger = logging.getLogger(__name__)

DEFAULT_CUSTOM_LENGTH_DAYS = 7
DEFAULT_DISPLAY_TIMEZONE = "America/New_York"
END_OF_DAY = datetime.time(23, 59, 59, 999000)


class PeriodMode(str, Enum):
    WEEKLY_SATURDAY_NIGHT = "weeklysaturdaynight"
    WEEKLY_SUNDAY_NIGHT = "weeklysundaynight"
    MONTHLY = "monthly"
    CUSTOM = "custom"

    @classmethod
    def parse(cls, value: "str | PeriodMode | None") -> "PeriodMode":
        """Resolve a configured mode name; unknown names mean the Sunday-start week."""
        if isinstance(value, PeriodMode):
            return value
        text = (value or "").strip().lower()
        try:
            return cls(text)
        except ValueError:
            logger.warning("unknown period mode %r; using %s", value, cls.WEEKLY_SATURDAY_NIGHT.value)
            return cls.WEEKLY_SATURDAY_NIGHT

    @property
    def is_weekly(self) -> bool:
        return self in (PeriodMode.WEEKLY_SATURDAY_NIGHT, PeriodMode.WEEKLY_SUNDAY_NIGHT)


@dataclass(frozen=True)
class Period:
    start_date: datetime.date
    end_date: datetime.date
    mode: PeriodMode = PeriodMode.WEEKLY_SATURDAY_NIGHT

    def __post_init__(self) -> None:
        if self.end_date < self.start_date:
            raise ValueError(f"period ends before it starts: {self.start_date} > {self.end_date}")

    @property
    def length_days(self) -> int:
        return (self.end_date - self.start_date).days + 1

    @property
    def start_at(self) -> str:
        return self.start_date.isoformat()

    @property
    def end_at(self) -> str:
        return self.end_date.isoformat()

    @property
    def start_utc(self) -> datetime.datetime:
        return datetime.datetime.combine(self.start_date, datetime.time.min, tzinfo=datetime.timezone.utc)

    @property
    def end_utc(self) -> datetime.datetime:
        """Last instant of the period, 23:59:59.999 UTC on the end date."""
        return datetime.datetime.combine(self.end_date, END_OF_DAY, tzinfo=datetime.timezone.utc)

    @property
    def label(self) -> str:
        return f"{self.start_at} → {self.end_at}"

    def contains(self, moment: datetime.datetime) -> bool:
        return self.start_utc <= _as_utc(moment) <= self.end_utc


def _as_utc(moment: datetime.datetime | None) -> datetime.datetime:
    if moment is None:
        return datetime.datetime.now(datetime.timezone.utc)
    if moment.tzinfo is None:
        return moment.replace(tzinfo=datetime.timezone.utc)
    return moment.astimezone(datetime.timezone.utc)


def utc_today(now: datetime.datetime | None = None) -> datetime.date:
    return _as_utc(now).date()


def _sunday_offset(day: datetime.date) -> int:
    """Day of week counted from Sunday = 0."""
    return (day.weekday() + 1) % 7


def weekly_saturday_night_period(now: datetime.datetime | None = None) -> Period:
    """Sunday through Saturday, ending Saturday night UTC."""
    today = utc_today(now)
    sunday = today - datetime.timedelta(days=_sunday_offset(today))
    return Period(sunday, sunday + datetime.timedelta(days=6), PeriodMode.WEEKLY_SATURDAY_NIGHT)


def weekly_sunday_night_period(now: datetime.datetime | None = None) -> Period:
    """Monday through Sunday, ending Sunday night UTC."""
    today = utc_today(now)
    monday = today - datetime.timedelta(days=today.weekday())
    return Period(monday, monday + datetime.timedelta(days=6), PeriodMode.WEEKLY_SUNDAY_NIGHT)


def monthly_period(now: datetime.datetime | None = None) -> Period:
    today = utc_today(now)
    first = today.replace(day=1)
    next_first = (first + datetime.timedelta(days=32)).replace(day=1)
    return Period(first, next_first - datetime.timedelta(days=1), PeriodMode.MONTHLY)


def custom_period(
    now: datetime.datetime | None = None,
    start: datetime.date | None = None,
    length_days: int | None = DEFAULT_CUSTOM_LENGTH_DAYS,
) -> Period:
    """Fixed window of ``length_days`` from ``start`` (today when unset).

    The window does not roll forward once ``now`` has passed its end.
    """
    first = start or utc_today(now)
    length = max(1, int(DEFAULT_CUSTOM_LENGTH_DAYS if length_days is None else length_days))
    room = (datetime.date.max - first).days + 1
    if length > room:
        logger.warning(
            "custom period of %d days from %s runs past the calendar; ending it on %s",
            length,
            first,
            datetime.date.max,
        )
        length = room
    return Period(first, first + datetime.timedelta(days=length - 1), PeriodMode.CUSTOM)


def compute_period(
    mode: "str | PeriodMode | None",
    now: datetime.datetime | None = None,
    custom_start: datetime.date | None = None,
    custom_length_days: int | None = DEFAULT_CUSTOM_LENGTH_DAYS,
) -> Period:
    resolved = PeriodMode.parse(mode)
    if resolved is PeriodMode.MONTHLY:
        return monthly_period(now)
    if resolved is PeriodMode.WEEKLY_SUNDAY_NIGHT:
        return weekly_sunday_night_period(now)
    if resolved is PeriodMode.CUSTOM:
        return custom_period(now, custom_start, custom_length_days)
    return weekly_saturday_night_period(now)


def previous_period(period: Period) -> Period:
    """The period of equal length ending the day before ``period`` starts.

    Near the start of the calendar the window is cut short at ``date.min``, and a
    period that already starts there is its own predecessor.
    """
    if period.start_date == datetime.date.min:
        return period
    end = period.start_date - datetime.timedelta(days=1)
    start = end - datetime.timedelta(days=min(period.length_days - 1, (end - datetime.date.min).days))
    return Period(start, end, period.mode)


def last_week_period(now: datetime.datetime | None = None) -> Period:
    """The completed Sunday-Saturday UTC week before the current one."""
    return previous_period(weekly_saturday_night_period(now))


def display_week(
    now: datetime.datetime | None = None,
    tz_name: str = DEFAULT_DISPLAY_TIMEZONE,
    weeks_back: int = 0,
) -> tuple[str, str]:
    """Sunday-Saturday week as seen on the calendar in ``tz_name``, for header text."""
    local_today = _as_utc(now).astimezone(ZoneInfo(tz_name)).date()
    sunday = local_today - datetime.timedelta(days=_sunday_offset(local_today) + 7 * weeks_back)
    saturday = sunday + datetime.timedelta(days=6)
    return sunday.isoformat(), saturday.isoformat()


def human_period_label(mode: "str | PeriodMode | None") -> str:
    resolved = PeriodMode.parse(mode)
    if resolved is PeriodMode.MONTHLY:
        return "Month"
    if resolved.is_weekly:
        return "Week"
    return "Period"


def last_winner_label(mode: "str | PeriodMode | None") -> str:
    word = human_period_label(mode)
    if word == "Period":
        return "Last Winner:"
    return f"Last {word} Winner:"
