import logging
import pathlib
import sys
from dataclasses import replace
from typing import Any

from rainbet_leaderboard.config import load_settings
from rainbet_leaderboard.logging import configure_logging
from rainbet_leaderboard.services.leaderboard_snapshot import build_leaderboard_snapshot, to_stable_json

logger = logging.getLogger(__name__)


def run_export_leaderboard(args: Any) -> int:
    configure_logging()
    settings = load_settings()
    if getattr(args, "mode", None):
        settings = replace(settings, period_mode=args.mode.strip().lower())

    snapshot = build_leaderboard_snapshot(settings, view=args.view, now=getattr(args, "now", None))
    json_text = to_stable_json(snapshot)

    if getattr(args, "out", None):
        out_path = pathlib.Path(args.out)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_text(json_text, encoding="utf-8")
        logger.info("output path=%s", out_path)
    else:
        sys.stdout.write(json_text)

    logger.info("period=%s participants=%d", snapshot["period"]["label"], snapshot["stats"]["participants"])
    if snapshot["error"]:
        logger.error("leaderboard exported with error: %s", snapshot["error"])
        if getattr(args, "strict", False):
            return 1
    return 0

