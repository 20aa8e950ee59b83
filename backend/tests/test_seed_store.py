"""
backend/tests/test_seed_store.py

Purpose:
    Document shaping and the dry-run path of tools/seed_store.py.
"""

from __future__ import annotations

import json

import pytest

from tools import seed_store


def test_build_seed_document_shapes_matches() -> None:
    document = seed_store.build_seed_document({
        "last_updated": "2025-03-01T00:00:00.000Z",
        "matches": [
            {
                "id": "m-1",
                "date": "2025-03-10",
                "competition": "Premier League",
                "home_team": {"name": "Arsenal", "score": "2"},
                "away_team": {"name": "Chelsea", "logo_url": "logo/x.png", "score": None},
                "stadium": "ignored",
            },
            "garbage",
        ],
    })

    assert document["last_updated"] == "2025-03-01T00:00:00.000Z"
    assert document["matches"] == [{
        "id": "m-1",
        "date": "2025-03-10",
        "competition": "Premier League",
        "home_team": {"name": "Arsenal", "logo_url": "", "score": 2},
        "away_team": {"name": "Chelsea", "logo_url": "logo/x.png", "score": None},
    }]


def test_build_seed_document_fills_ids_and_timestamp() -> None:
    document = seed_store.build_seed_document({"matches": [{"date": "2025-03-10"}]})

    assert document["last_updated"].endswith("Z")
    match = document["matches"][0]
    assert match["id"]
    assert match["home_team"] == {"name": "", "logo_url": "", "score": None}


def test_build_seed_document_tolerates_garbage() -> None:
    assert seed_store.build_seed_document(None)["matches"] == []
    assert seed_store.build_seed_document({"matches": "nope"})["matches"] == []


@pytest.mark.asyncio
async def test_dry_run_does_not_connect(tmp_path, monkeypatch) -> None:
    path = tmp_path / "matches.json"
    path.write_text(json.dumps({"matches": [{"id": "a"}]}), encoding="utf-8")

    async def _no_connect():
        raise AssertionError("dry run must not connect")

    monkeypatch.setattr(seed_store._db, "connect_db", _no_connect)

    assert await seed_store.run(str(path), dry_run=True) == 0
