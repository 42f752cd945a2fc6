import datetime
import json
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any

from rainbet_leaderboard.classes.affiliate import ParticipantRecord, RankedEntry
from rainbet_leaderboard.classes.amounts import format_money
from rainbet_leaderboard.classes.period import (
    Period,
    PeriodMode,
    compute_period,
    display_week,
    human_period_label,
    last_week_period,
    last_winner_label,
    previous_period,
)
from rainbet_leaderboard.classes.prizes import PrizeCurrency, PrizeTable, total_prize_pool
from rainbet_leaderboard.classes.rainbet import RainbetApiError, RainbetClient
from rainbet_leaderboard.classes.ranking import mask_identity, rank_records, top_entry
from rainbet_leaderboard.config import LeaderboardSettings

logger = logging.getLogger(__name__)

VIEW_CURRENT = "current"
VIEW_LAST_WEEK = "last-week"
VIEWS = (VIEW_CURRENT, VIEW_LAST_WEEK)

SNAPSHOT_VERSION = 1
EMPTY_DISPLAY = "—"
DEFAULT_ERROR = "Failed to load"


def _utc_now(now: datetime.datetime | None) -> datetime.datetime:
    if now is None:
        return datetime.datetime.now(datetime.timezone.utc)
    if now.tzinfo is None:
        return now.replace(tzinfo=datetime.timezone.utc)
    return now.astimezone(datetime.timezone.utc)


def to_utc_iso(value: datetime.datetime) -> str:
    return value.astimezone(datetime.timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")


def format_updated_at(now: datetime.datetime) -> str:
    return f"{now:%Y-%m-%d %H:%M:%S} UTC"


def resolve_periods(
    settings: LeaderboardSettings,
    view: str,
    now: datetime.datetime,
) -> tuple[Period, Period | None]:
    """Period to rank, and the one before it used for the last-winner line."""
    if view == VIEW_LAST_WEEK:
        return last_week_period(now), None
    period = compute_period(
        settings.mode,
        now,
        custom_start=settings.period_start,
        custom_length_days=settings.period_length_days,
    )
    return period, previous_period(period)


def fetch_period_rows(
    client: RainbetClient,
    period: Period,
    previous: Period | None,
) -> tuple[list[ParticipantRecord], list[ParticipantRecord], str | None]:
    """Fetch both periods at once; on any API failure return no rows and the message."""
    with ThreadPoolExecutor(max_workers=2) as pool:
        current_future = pool.submit(client.fetch_affiliates, period)
        previous_future = pool.submit(client.fetch_affiliates, previous) if previous else None
        try:
            rows = current_future.result()
            prev_rows = previous_future.result() if previous_future else []
        except RainbetApiError as err:
            logger.error("affiliate fetch failed for %s: %s", period.label, err)
            return [], [], str(err) or DEFAULT_ERROR
    return rows, prev_rows, None


def _entry_row(entry: RankedEntry, currency: PrizeCurrency) -> dict[str, Any]:
    return {
        "rank": entry.rank,
        "name": mask_identity(entry.identity),
        "wagered": entry.wagered_amount,
        "wagered_display": format_money(entry.wagered_amount),
        "prize": entry.prize,
        "prize_display": currency.format_prize(entry.prize) if entry.prize is not None else EMPTY_DISPLAY,
    }


def _last_winner(mode: PeriodMode, prev_rows: list[ParticipantRecord], view: str) -> dict[str, Any] | None:
    if view != VIEW_CURRENT or human_period_label(mode) == "Period":
        return None
    winner = top_entry(prev_rows)
    if winner is None:
        return None
    return {
        "name": mask_identity(winner.identity),
        "wagered": winner.wagered_amount,
        "wagered_display": format_money(winner.wagered_amount),
    }


def _display_period(settings: LeaderboardSettings, view: str, period: Period, now: datetime.datetime) -> dict[str, str]:
    if view == VIEW_LAST_WEEK:
        start, end = display_week(now, settings.display_timezone, weeks_back=1)
        return {"start": start, "end": end, "timezone": settings.display_timezone, "caption": "Sunday → Saturday"}
    return {
        "start": period.start_at,
        "end": period.end_at,
        "timezone": "UTC",
        "caption": human_period_label(period.mode),
    }


def build_leaderboard_snapshot(
    settings: LeaderboardSettings,
    *,
    view: str = VIEW_CURRENT,
    now: datetime.datetime | None = None,
    client: RainbetClient | None = None,
    prizes: PrizeTable | None = None,
) -> dict[str, Any]:
    """Assemble everything a leaderboard page shows into one JSON-ready dict."""
    if view not in VIEWS:
        raise ValueError(f"Unsupported view: {view}")
    now_utc = _utc_now(now)
    client = client or RainbetClient(
        settings.api_key,
        base_url=settings.api_base,
        timeout_sec=settings.request_timeout,
    )
    prize_table = settings.prize_table if prizes is None else prizes
    currency = settings.currency

    period, previous = resolve_periods(settings, view, now_utc)
    rows, prev_rows, error = fetch_period_rows(client, period, previous)

    summary = rank_records(rows, prize_table)
    pool_total = total_prize_pool(prize_table)
    remaining = max(0, int((period.end_utc - now_utc).total_seconds()))
    logger.debug(
        "ranked %d participants for %s (total wagered %.2f)",
        summary.participant_count,
        period.label,
        summary.total_wagered,
    )

    return {
        "snapshot_version": SNAPSHOT_VERSION,
        "view": view,
        "theme": settings.theme,
        "period": {
            "mode": period.mode.value,
            "label_word": human_period_label(period.mode),
            "start_at": period.start_at,
            "end_at": period.end_at,
            "label": period.label,
            "length_days": period.length_days,
        },
        "previous_period": (
            {"start_at": previous.start_at, "end_at": previous.end_at} if previous is not None else None
        ),
        "display_period": _display_period(settings, view, period, now_utc),
        "updated_at": format_updated_at(now_utc),
        "countdown": {"ends_at": to_utc_iso(period.end_utc), "seconds_remaining": remaining},
        "stats": {
            "participants": summary.participant_count,
            "total_wagered": summary.total_wagered,
            "total_wagered_display": format_money(summary.total_wagered),
            "total_prize_pool": pool_total,
            "total_prize_pool_display": currency.format_prize(pool_total) if pool_total else EMPTY_DISPLAY,
            "currency": currency.code,
        },
        "podium": [_entry_row(entry, currency) for entry in summary.podium],
        "table": [_entry_row(entry, currency) for entry in summary.table],
        "last_winner_label": last_winner_label(period.mode),
        "last_winner": _last_winner(period.mode, prev_rows, view),
        "links": {
            "referral": settings.referral_url,
            "kick": settings.kick_url,
            "discord": settings.discord_invite_url,
            "instagram": settings.instagram_url,
        },
        "error": error,
    }


def to_stable_json(snapshot: dict[str, Any]) -> str:
    return json.dumps(snapshot, indent=2, sort_keys=True, ensure_ascii=False) + "\n"
