"""
backend/tests/test_match_store.py

Purpose:
    JSON file persistence, on-disk change detection and the optional MongoDB
    mirror of the match list.

Dependencies:
    - matchboard.services.match_store
    - matchboard.database
"""

from __future__ import annotations

import json
import os
from datetime import datetime

import pytest

import matchboard.database as _db
from matchboard.services.match_store import MatchStore, StoreWriteError, ensure_match_structure


class _FakeDocumentsCollection:
    def __init__(self, doc: dict | None = None, fail_reads: bool = False):
        self.doc = dict(doc) if doc else None
        self.fail_reads = fail_reads
        self.replace_calls = 0

    async def find_one(self, query):
        if self.fail_reads:
            raise RuntimeError("mongo down")
        if self.doc and self.doc.get("_id") == query.get("_id"):
            return dict(self.doc)
        return None

    async def replace_one(self, query, doc, upsert=False):
        self.replace_calls += 1
        self.doc = dict(doc)


def _write(path, payload) -> None:
    path.write_text(json.dumps(payload), encoding="utf-8")


def _raw() -> dict:
    return {
        "last_updated": "2025-03-01T00:00:00.000Z",
        "matches": [
            {
                "date": "2025-03-10",
                "competition": "unknown",
                "home_team": {"name": "Arsenal", "score": 1},
                "away_team": {"name": "Wolves", "score": 0},
            },
            "not a match",
        ],
    }


def test_ensure_match_structure_repairs_garbage() -> None:
    assert ensure_match_structure(None) == {"last_updated": None, "matches": []}
    assert ensure_match_structure({"matches": "nope"}) == {"last_updated": None, "matches": []}


@pytest.mark.asyncio
async def test_load_from_file_normalizes(matches_file, logo_root, no_mirror) -> None:
    _write(matches_file, _raw())
    store = MatchStore(str(matches_file), read_only=False)

    await store.load()

    assert len(store.matches) == 1
    match = store.matches[0]
    assert match["id"]
    assert match["competition"] == "Premier League"
    assert match["home_team"]["logo_url"] == "logo/Premier League/Arsenal FC.png"
    assert match["home_team"]["score"] == 1
    assert store.last_updated == "2025-03-01T00:00:00.000Z"


@pytest.mark.asyncio
async def test_load_missing_file_starts_empty(matches_file, no_mirror) -> None:
    store = MatchStore(str(matches_file), read_only=False)
    await store.load()
    assert store.data == {"last_updated": None, "matches": []}


@pytest.mark.asyncio
async def test_load_invalid_json_starts_empty(matches_file, no_mirror) -> None:
    matches_file.write_text("{not json", encoding="utf-8")
    store = MatchStore(str(matches_file), read_only=False)
    await store.load()
    assert store.matches == []


@pytest.mark.asyncio
async def test_save_stamps_last_updated(matches_file, no_mirror) -> None:
    store = MatchStore(str(matches_file), read_only=False)
    await store.save()
    on_disk = json.loads(matches_file.read_text(encoding="utf-8"))
    assert on_disk["matches"] == []
    assert on_disk["last_updated"].endswith("Z")


@pytest.mark.asyncio
async def test_read_only_store_skips_file_write(matches_file, no_mirror) -> None:
    store = MatchStore(str(matches_file), read_only=True)
    await store.save()
    assert not matches_file.exists()
    assert store.last_updated


@pytest.mark.asyncio
async def test_unwritable_file_raises_store_write_error(tmp_path, no_mirror) -> None:
    store = MatchStore(str(tmp_path / "missing-dir" / "matches.json"), read_only=False)
    with pytest.raises(StoreWriteError):
        await store.save()


@pytest.mark.asyncio
async def test_refresh_if_changed_reloads_edited_file(matches_file, logo_root, no_mirror) -> None:
    _write(matches_file, {"matches": []})
    store = MatchStore(str(matches_file), read_only=False)
    await store.load()
    assert await store.refresh_if_changed() is False

    _write(matches_file, _raw())
    stat = os.stat(matches_file)
    os.utime(matches_file, (stat.st_atime, stat.st_mtime + 10))

    assert await store.refresh_if_changed() is True
    assert len(store.matches) == 1


@pytest.mark.asyncio
async def test_normalize_all_saves_only_on_change(matches_file, logo_root, no_mirror) -> None:
    store = MatchStore(str(matches_file), read_only=False)
    store.data["matches"] = [_raw()["matches"][0]]

    assert await store.normalize_all() is True
    assert matches_file.exists()

    matches_file.unlink()
    assert await store.normalize_all() is False
    assert not matches_file.exists()


@pytest.mark.asyncio
async def test_mirror_is_preferred_for_load(matches_file, logo_root, monkeypatch) -> None:
    _write(matches_file, {"matches": []})
    fake = _FakeDocumentsCollection({"_id": _db.MATCHES_DOCUMENT_ID, **_raw()})
    monkeypatch.setattr(_db, "db", {_db.DOCUMENTS_COLLECTION: fake}, raising=False)
    store = MatchStore(str(matches_file), read_only=False)

    await store.load()

    assert len(store.matches) == 1
    assert "_id" not in store.data


@pytest.mark.asyncio
async def test_mirror_failure_falls_back_to_file(matches_file, logo_root, monkeypatch) -> None:
    _write(matches_file, _raw())
    fake = _FakeDocumentsCollection(fail_reads=True)
    monkeypatch.setattr(_db, "db", {_db.DOCUMENTS_COLLECTION: fake}, raising=False)
    store = MatchStore(str(matches_file), read_only=False)

    await store.load()

    assert len(store.matches) == 1


@pytest.mark.asyncio
async def test_save_writes_mirror_and_file(matches_file, monkeypatch) -> None:
    fake = _FakeDocumentsCollection()
    monkeypatch.setattr(_db, "db", {_db.DOCUMENTS_COLLECTION: fake}, raising=False)
    store = MatchStore(str(matches_file), read_only=False)

    await store.save()

    assert fake.replace_calls == 1
    assert fake.doc["_id"] == _db.MATCHES_DOCUMENT_ID
    assert matches_file.exists()
    assert await store.refresh_if_changed() is False


@pytest.mark.asyncio
async def test_unserializable_data_keeps_previous_file(matches_file, no_mirror) -> None:
    store = MatchStore(str(matches_file), read_only=False)
    store.data["matches"] = [{"id": "a", "date": "2025-03-10"}]
    await store.save()
    before = matches_file.read_text(encoding="utf-8")

    store.data["matches"].append({"id": "b", "date": datetime(2025, 3, 11, 20, 0)})
    with pytest.raises(StoreWriteError):
        await store.save()

    assert matches_file.read_text(encoding="utf-8") == before
    assert [m["id"] for m in json.loads(before)["matches"]] == ["a"]
    assert [p.name for p in matches_file.parent.iterdir()] == [matches_file.name]


@pytest.mark.asyncio
async def test_bootstrap_survives_unserializable_mirror_doc(matches_file, logo_root, monkeypatch) -> None:
    raw = _raw()
    raw["matches"][0]["date"] = datetime(2025, 3, 10, 15, 0)
    fake = _FakeDocumentsCollection({"_id": _db.MATCHES_DOCUMENT_ID, **raw})
    monkeypatch.setattr(_db, "db", {_db.DOCUMENTS_COLLECTION: fake}, raising=False)
    store = MatchStore(str(matches_file), read_only=False)

    await store.bootstrap()

    assert len(store.matches) == 1
    assert not matches_file.exists()
