"""Lenient parsing and display of wagered amounts reported by the affiliate API."""

from __future__ import annotations

import math
import re
from typing import Any

# leading float prefix, same grammar JavaScript's parseFloat accepts
_FLOAT_PREFIX_RE = re.compile(r"\s*([+-]?(?:Infinity|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?))")


def parse_amount(text: Any = None) -> float:
    """Parse the leading numeric prefix of ``text``; anything unusable is 0."""
    if text is None or text == "":
        text = "0"
    match = _FLOAT_PREFIX_RE.match(str(text))
    if not match:
        return 0.0
    try:
        value = float(match.group(1).replace("Infinity", "inf"))
    except ValueError:
        return 0.0
    return value if math.isfinite(value) else 0.0


def format_money(amount: float) -> str:
    """Format a wagered total as USD, e.g. ``$1,234.50``."""
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,.2f}"
