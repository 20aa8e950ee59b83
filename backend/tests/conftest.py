"""
backend/tests/conftest.py

Purpose:
    Shared pytest bootstrap for import paths, plus a small on-disk logo tree
    and settings overrides used by logo, normalizer and router tests.
"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

_THIS_FILE = Path(__file__).resolve()
_BACKEND_DIR = _THIS_FILE.parents[1]
_REPO_ROOT = _THIS_FILE.parents[2]

for candidate in (str(_BACKEND_DIR), str(_REPO_ROOT)):
    if candidate not in sys.path:
        sys.path.insert(0, candidate)

import matchboard.database as _db
from matchboard.config import settings

LOGO_TREE = {
    "Premier League": [
        "Arsenal FC.png",
        "Chelsea FC.png",
        "Liverpool FC.png",
        "Manchester City.png",
        "Manchester United.png",
        "Tottenham Hotspur.png",
    ],
    "La Liga": [
        "Real Madrid.png",
        "Barcelona.PNG",
        "arsenal.txt",
    ],
}


@pytest.fixture
def logo_root(tmp_path, monkeypatch) -> Path:
    root = tmp_path / "logo"
    for league, files in LOGO_TREE.items():
        league_dir = root / league
        league_dir.mkdir(parents=True)
        for name in files:
            (league_dir / name).write_bytes(b"\x89PNG")
    monkeypatch.setattr(settings, "LOGO_ROOT", str(root))
    monkeypatch.setattr(settings, "LOGO_URL_PREFIX", "logo")
    monkeypatch.setattr(settings, "LOGO_MAX_DISTANCE", 3)
    return root


@pytest.fixture
def no_mirror(monkeypatch):
    monkeypatch.setattr(_db, "db", None, raising=False)


@pytest.fixture
def matches_file(tmp_path) -> Path:
    return tmp_path / "matches.json"
