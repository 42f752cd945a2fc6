# classes/rainbet.py
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Optional

import requests

from .affiliate import ParticipantRecord
from .period import Period

DEFAULT_API_BASE = "https://services.rainbet.com/v1"
AFFILIATES_PATH = "/external/affiliates"


class RainbetApiError(RuntimeError):
    """The affiliate API answered with a non-200 status or could not be reached."""


@dataclass
class AffiliatesResponse:
    affiliates: list[ParticipantRecord] = field(default_factory=list)
    cache_updated_at: str | None = None

    @classmethod
    def from_payload(cls, payload: Any) -> "AffiliatesResponse":
        if not isinstance(payload, dict):
            return cls()
        rows = payload.get("affiliates")
        if not isinstance(rows, list):
            rows = []
        return cls(
            affiliates=[ParticipantRecord.from_api(row) for row in rows if isinstance(row, dict)],
            cache_updated_at=payload.get("cache_updated_at"),
        )


class RainbetClient:
    """
    Thin HTTP client for the Rainbet affiliate endpoint. Owns a requests.Session
    unless one is provided.
    """

    def __init__(
        self,
        api_key: str = "",
        *,
        base_url: str = DEFAULT_API_BASE,
        timeout_sec: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.api_key = api_key
        self.base_url = (base_url or DEFAULT_API_BASE).rstrip("/")
        self.timeout_sec = timeout_sec
        self.session = session or requests.Session()
        self.logger = logging.getLogger(self.__class__.__name__)

    @property
    def affiliates_url(self) -> str:
        return f"{self.base_url}{AFFILIATES_PATH}"

    def fetch_response(self, start_at: str, end_at: str) -> AffiliatesResponse:
        """
        GET the affiliates listing for an inclusive YYYY-MM-DD range.
        """
        params = {"start_at": start_at, "end_at": end_at, "key": self.api_key}
        self.logger.debug(
            "Rainbet API request url=%s start_at=%s end_at=%s key=%s",
            self.affiliates_url,
            start_at,
            end_at,
            "***" if self.api_key else "",
        )
        try:
            r = self.session.get(
                self.affiliates_url,
                params=params,
                headers={"Accept": "application/json"},
                timeout=self.timeout_sec,
            )
        except requests.RequestException as err:
            # requests puts the full URL, key included, into its messages
            raise RainbetApiError(f"Rainbet API request failed: {type(err).__name__}") from err

        if r.status_code != 200:
            raise RainbetApiError(f"Rainbet API {r.status_code}: {_body_text(r)}")
        try:
            payload = r.json()
        except ValueError as err:
            raise RainbetApiError(f"Rainbet API returned invalid JSON: {err}") from err
        return AffiliatesResponse.from_payload(payload)

    def fetch_affiliates(self, period: Period) -> list[ParticipantRecord]:
        response = self.fetch_response(period.start_at, period.end_at)
        self.logger.info(
            "fetched %d affiliates for %s (cache_updated_at=%s)",
            len(response.affiliates),
            period.label,
            response.cache_updated_at,
        )
        return response.affiliates


def _body_text(response: Any) -> str:
    try:
        return json.dumps(response.json())
    except ValueError:
        return getattr(response, "text", "") or ""
