import datetime
import json

import pytest
import requests

from rainbet_leaderboard.classes.affiliate import ParticipantRecord
from rainbet_leaderboard.classes.rainbet import RainbetApiError, RainbetClient
from rainbet_leaderboard.config import resolve_settings
from rainbet_leaderboard.services import leaderboard_snapshot as snapshot_service

NOW = datetime.datetime(2024, 3, 14, 12, 0, tzinfo=datetime.timezone.utc)


class _FakeClient:
    def __init__(self, rows_by_start=None, error: Exception | None = None):
        self.rows_by_start = rows_by_start or {}
        self.error = error
        self.periods = []

    def fetch_affiliates(self, period):
        self.periods.append((period.start_at, period.end_at))
        if self.error is not None:
            raise self.error
        return self.rows_by_start.get(period.start_at, [])


def _rows(*pairs):
    return [ParticipantRecord(username=name, wagered_amount=amount) for name, amount in pairs]


def test_current_weekly_snapshot():
    settings = resolve_settings({}, {"PERIOD_MODE": "weeklysaturdaynight", "PRIZES": "400,200,125", "PRIZE_CURRENCY": "CAD"})
    client = _FakeClient(
        {
            "2024-03-10": _rows(("alphabet", "10"), ("bravo99", "30.5"), ("char", "30.5")),
            "2024-03-03": _rows(("lastweekwinner", "900"), ("second", "100")),
        }
    )

    snapshot = snapshot_service.build_leaderboard_snapshot(settings, now=NOW, client=client)

    assert sorted(client.periods) == [("2024-03-03", "2024-03-09"), ("2024-03-10", "2024-03-16")]
    assert snapshot["period"]["start_at"] == "2024-03-10"
    assert snapshot["period"]["end_at"] == "2024-03-16"
    assert snapshot["period"]["label_word"] == "Week"
    assert snapshot["previous_period"] == {"start_at": "2024-03-03", "end_at": "2024-03-09"}
    assert snapshot["stats"]["participants"] == 3
    assert snapshot["stats"]["total_wagered"] == 71
    assert snapshot["stats"]["total_wagered_display"] == "$71.00"
    assert snapshot["stats"]["total_prize_pool_display"] == "C$725"
    assert [row["name"] for row in snapshot["podium"]] == ["br****9", "char", "al*****t"]
    assert [row["prize_display"] for row in snapshot["table"]] == ["C$400", "C$200", "C$125"]
    assert snapshot["last_winner_label"] == "Last Week Winner:"
    assert snapshot["last_winner"] == {"name": "la***********r", "wagered": 900.0, "wagered_display": "$900.00"}
    assert snapshot["countdown"] == {"ends_at": "2024-03-16T23:59:59Z", "seconds_remaining": 172800 + 43199}
    assert snapshot["updated_at"] == "2024-03-14 12:00:00 UTC"
    assert snapshot["error"] is None


def test_rows_without_prize_show_dash():
    settings = resolve_settings({}, {"PRIZES": "50"})
    client = _FakeClient({"2024-03-01": _rows(("one", "2"), ("two", "1"))})

    snapshot = snapshot_service.build_leaderboard_snapshot(settings, now=NOW, client=client)

    assert snapshot["period"]["mode"] == "monthly"
    assert [row["prize"] for row in snapshot["table"]] == [50, None]
    assert snapshot["table"][1]["prize_display"] == "—"


def test_no_prizes_pool_display_is_dash():
    snapshot = snapshot_service.build_leaderboard_snapshot(resolve_settings({}, {}), now=NOW, client=_FakeClient())
    assert snapshot["stats"]["total_prize_pool"] == 0
    assert snapshot["stats"]["total_prize_pool_display"] == "—"
    assert snapshot["podium"] == []
    assert snapshot["table"] == []
    assert snapshot["last_winner"] is None


def test_custom_period_has_no_last_winner():
    settings = resolve_settings({}, {"PERIOD_MODE": "custom", "PERIOD_START": "2024-03-01", "PERIOD_LENGTH_DAYS": "10"})
    client = _FakeClient({"2024-02-20": _rows(("previous", "5"))})

    snapshot = snapshot_service.build_leaderboard_snapshot(settings, now=NOW, client=client)

    assert snapshot["period"]["end_at"] == "2024-03-10"
    assert snapshot["previous_period"] == {"start_at": "2024-02-20", "end_at": "2024-02-29"}
    assert snapshot["last_winner_label"] == "Last Winner:"
    assert snapshot["last_winner"] is None
    assert snapshot["countdown"]["seconds_remaining"] == 0


def test_fetch_failure_degrades_to_empty_board():
    settings = resolve_settings({}, {"PRIZES": "100,50"})
    client = _FakeClient(error=RainbetApiError("Rainbet API 500: {}"))

    snapshot = snapshot_service.build_leaderboard_snapshot(settings, now=NOW, client=client)

    assert snapshot["error"] == "Rainbet API 500: {}"
    assert snapshot["stats"]["participants"] == 0
    assert snapshot["table"] == []
    assert snapshot["stats"]["total_prize_pool_display"] == "$150"


def test_last_week_view_uses_previous_sunday_week_and_local_display():
    settings = resolve_settings({}, {"PERIOD_MODE": "monthly"})
    client = _FakeClient({"2024-03-10": _rows(("winner", "10"))})
    sunday_night_utc = datetime.datetime(2024, 3, 17, 2, 0, tzinfo=datetime.timezone.utc)

    snapshot = snapshot_service.build_leaderboard_snapshot(settings, view="last-week", now=sunday_night_utc, client=client)

    assert snapshot["period"]["start_at"] == "2024-03-10"
    assert snapshot["period"]["end_at"] == "2024-03-16"
    assert snapshot["previous_period"] is None
    assert snapshot["display_period"] == {
        "start": "2024-03-03",
        "end": "2024-03-09",
        "timezone": "America/New_York",
        "caption": "Sunday → Saturday",
    }
    assert snapshot["last_winner"] is None
    assert snapshot["table"][0]["name"] == "wi***r"
    assert client.periods == [("2024-03-10", "2024-03-16")]


def test_prize_override_argument():
    snapshot = snapshot_service.build_leaderboard_snapshot(
        resolve_settings({}, {"PRIZES": "999"}),
        now=NOW,
        client=_FakeClient({"2024-03-01": _rows(("solo", "1"))}),
        prizes={1: 100, 2: 60, 3: 40, 4: 30, 5: 20},
    )
    assert snapshot["stats"]["total_prize_pool"] == 250
    assert snapshot["table"][0]["prize"] == 100


def test_unknown_view_rejected():
    with pytest.raises(ValueError):
        snapshot_service.build_leaderboard_snapshot(resolve_settings({}, {}), view="yesterday", client=_FakeClient())


def test_default_client_built_from_settings(monkeypatch):
    created = {}

    class RecordingClient(_FakeClient):
        def __init__(self, api_key, *, base_url, timeout_sec):
            super().__init__()
            created.update(api_key=api_key, base_url=base_url, timeout_sec=timeout_sec)

    monkeypatch.setattr(snapshot_service, "RainbetClient", RecordingClient)
    settings = resolve_settings({}, {"RAINBET_API_KEY": "k", "RAINBET_API_BASE": "https://x.test", "RAINBET_TIMEOUT_SEC": "3"})

    snapshot_service.build_leaderboard_snapshot(settings, now=NOW)

    assert created == {"api_key": "k", "base_url": "https://x.test", "timeout_sec": 3.0}


def test_to_stable_json_sorted_and_unicode():
    text = snapshot_service.to_stable_json({"b": "→", "a": 1})
    assert text == '{\n  "a": 1,\n  "b": "→"\n}\n'
    assert json.loads(text) == {"a": 1, "b": "→"}


def test_huge_custom_length_builds_a_snapshot():
    settings = resolve_settings({}, {"PERIOD_MODE": "custom", "PERIOD_LENGTH_DAYS": "1e10"})
    client = _FakeClient({"2024-03-14": _rows(("alphabet", "10"))})

    snapshot = snapshot_service.build_leaderboard_snapshot(settings, now=NOW, client=client)

    assert snapshot["error"] is None
    assert snapshot["period"]["start_at"] == "2024-03-14"
    assert snapshot["period"]["end_at"] == "9999-12-31"
    assert snapshot["previous_period"]["start_at"] == "0001-01-01"
    assert snapshot["stats"]["participants"] == 1


def test_transport_error_keeps_api_key_out_of_snapshot(caplog):
    class _RefusingSession:
        def get(self, url, **kwargs):
            raise requests.ConnectionError(f"Max retries exceeded with url: {url}?key={kwargs['params']['key']}")

    settings = resolve_settings({}, {"RAINBET_API_KEY": "top-secret"})
    client = RainbetClient(settings.api_key, session=_RefusingSession())

    with caplog.at_level("DEBUG"):
        snapshot = snapshot_service.build_leaderboard_snapshot(settings, now=NOW, client=client)

    assert snapshot["error"] == "Rainbet API request failed: ConnectionError"
    assert "top-secret" not in snapshot_service.to_stable_json(snapshot)
    assert "top-secret" not in caplog.text
