"""Prize schedule parsing and prize display.

The schedule comes from a single configuration string in one of three shapes:

* CSV: ``"400,200,125"``
* JSON numbers: ``[400, 200, 125]``
* JSON objects: ``[{"rank": 1, "amount": 400}, ...]``

Positional shapes give rank 1 to the first value. Parsing never raises; entries
that cannot be read are dropped.
"""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Iterable

logger = logging.getLogger(__name__)

PrizeTable = dict[int, float]

CURRENCY_SYMBOLS = {"USD": "$", "CAD": "C$", "EUR": "€", "GBP": "£"}
DEFAULT_CURRENCY = "USD"

_MISSING = object()


@dataclass(frozen=True)
class PrizeRow:
    rank: float
    amount: float


def _reject_constant(name: str) -> float:
    raise ValueError(f"non-standard JSON constant {name}")


def _to_number(value: Any = _MISSING) -> float:
    """Convert a JSON value to a float the way JavaScript's ``Number()`` would."""
    if value is _MISSING:
        return math.nan
    if value is None:
        return 0.0
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        try:
            return float(value)
        except OverflowError:
            return math.nan
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0.0
        if "_" in text:
            return math.nan
        try:
            return float(text)
        except ValueError:
            return math.nan
    return math.nan


def _is_integral(value: float) -> bool:
    return math.isfinite(value) and float(value).is_integer()


def _positional_rows(values: Iterable[float]) -> list[PrizeRow]:
    return [PrizeRow(rank=index + 1, amount=value) for index, value in enumerate(values)]


def _rows_from_json_array(parsed: list[Any]) -> list[PrizeRow]:
    if not parsed:
        return []
    first = parsed[0]
    if isinstance(first, (int, float)) and not isinstance(first, bool):
        # ranks come from position before filtering, so a bad value leaves a gap
        rows = _positional_rows(_to_number(item) for item in parsed)
        return [row for row in rows if math.isfinite(row.amount)]
    if first is None or isinstance(first, (dict, list)):
        rows = []
        for item in parsed:
            if isinstance(item, dict):
                row = PrizeRow(
                    rank=_to_number(item.get("rank", _MISSING)),
                    amount=_to_number(item.get("amount", _MISSING)),
                )
            else:
                row = PrizeRow(rank=math.nan, amount=math.nan)
            if math.isfinite(row.rank) and row.rank >= 1 and math.isfinite(row.amount):
                rows.append(row)
        return sorted(rows, key=lambda row: row.rank)
    logger.debug("prize list starts with unsupported %s; ignoring", type(first).__name__)
    return []


def _rows_from_csv(text: str) -> list[PrizeRow]:
    amounts = [_to_number(token) for token in text.split(",")]
    # unlike the JSON path, dropped tokens shift every later prize up one rank
    return _positional_rows(amount for amount in amounts if math.isfinite(amount))


def parse_prize_rows(raw: str | None) -> list[PrizeRow]:
    """Parse a prize schedule string into rows, in rank order for the object form."""
    if not raw:
        return []
    trimmed = raw.strip()
    if not trimmed:
        return []
    try:
        parsed = json.loads(trimmed, parse_constant=_reject_constant)
    except ValueError:
        logger.debug("prize schedule is not JSON; reading it as CSV")
    else:
        if isinstance(parsed, list):
            return _rows_from_json_array(parsed)
    return _rows_from_csv(trimmed)


def rows_to_map(rows: Iterable[PrizeRow]) -> PrizeTable:
    """Build a rank -> amount table; a repeated rank keeps its last amount."""
    table: PrizeTable = {}
    for row in rows:
        if _is_integral(row.rank) and row.rank >= 1 and math.isfinite(row.amount):
            table[int(row.rank)] = row.amount
    return table


def parse_prize_table(raw: str | None) -> PrizeTable:
    return rows_to_map(parse_prize_rows(raw))


def total_prize_pool(table: PrizeTable) -> float:
    return sum(table.values(), 0.0)


@dataclass(frozen=True)
class PrizeCurrency:
    """Currency used to display prizes; wagered totals always stay in USD."""

    code: str = DEFAULT_CURRENCY
    symbol_override: str | None = None

    @classmethod
    def from_config(cls, code: str | None, symbol: str | None = None) -> "PrizeCurrency":
        return cls(code=(code or DEFAULT_CURRENCY).strip().upper() or DEFAULT_CURRENCY, symbol_override=symbol or None)

    @property
    def symbol(self) -> str:
        if self.symbol_override:
            return self.symbol_override
        return CURRENCY_SYMBOLS.get(self.code, f"{self.code} ")

    def format_prize(self, amount: float) -> str:
        """Format a prize as a whole amount with grouped thousands, e.g. ``C$1,250``."""
        whole = Decimal(str(amount)).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
        return f"{self.symbol}{int(whole):,}"
