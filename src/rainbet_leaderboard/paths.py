"""Locate repo-root files (leaderboard.yaml, logging.ini) with env overrides."""

from __future__ import annotations

import os
from pathlib import Path

ROOT_MARKERS = ("pyproject.toml", ".git")


def find_repo_root(start: Path | None = None) -> Path:
    current = (start or Path(__file__).resolve()).resolve()
    if current.is_file():
        current = current.parent

    for candidate in [current, *current.parents]:
        if any((candidate / marker).exists() for marker in ROOT_MARKERS):
            return candidate
    raise RuntimeError(f"No {' or '.join(ROOT_MARKERS)} found above {current}")


def repo_file(*parts: str) -> Path:
    return find_repo_root().joinpath(*parts)


def config_file(name: str, env_var: str) -> Path:
    """Return the path named by ``env_var`` if set, else ``name`` under the repo root."""
    override = (os.getenv(env_var) or "").strip()
    if override:
        return Path(override).expanduser()
    return repo_file(name)
