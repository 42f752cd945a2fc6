import argparse
import datetime
import sys
from typing import Sequence

from rainbet_leaderboard.classes.period import PeriodMode
from rainbet_leaderboard.commands.export_leaderboard import run_export_leaderboard
from rainbet_leaderboard.services.leaderboard_snapshot import VIEW_CURRENT, VIEWS


def valid_instant(value: str) -> datetime.datetime:
    """Parse YYYY-MM-DD or an ISO timestamp; naive values are read as UTC."""
    try:
        parsed = datetime.datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError as exc:
        msg = "Not a valid date or timestamp: '{0}'.".format(value)
        raise argparse.ArgumentTypeError(msg) from exc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=datetime.timezone.utc)
    return parsed


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="export-leaderboard")
    parser.add_argument("--view", choices=VIEWS, default=VIEW_CURRENT, help="Which leaderboard to export")
    parser.add_argument(
        "--mode",
        choices=[mode.value for mode in PeriodMode],
        help="Override PERIOD_MODE for this run",
    )
    parser.add_argument("--now", type=valid_instant, help="Compute periods as of this UTC date/time")
    parser.add_argument("--out", help="Output JSON path (default: stdout)")
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Exit non-zero when the affiliate API could not be loaded",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    argv_list = list(argv) if argv is not None else sys.argv[1:]
    parser = build_parser()
    args = parser.parse_args(argv_list)
    return int(run_export_leaderboard(args) or 0)


if __name__ == "__main__":
    raise SystemExit(main())
