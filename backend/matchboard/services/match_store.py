"""
backend/matchboard/services/match_store.py

Purpose:
    Process-wide owner of the match list. The in-memory copy is authoritative
    while the process runs; the MongoDB document (when configured) and the
    JSON file are durable mirrors written after every mutation.

Dependencies:
    - matchboard.database
    - matchboard.services.match_normalizer
    - matchboard.config
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from typing import Any

import matchboard.database as _db
from matchboard.config import settings
from matchboard.services.match_normalizer import normalize_matches
from matchboard.utils import utcnow_iso

logger = logging.getLogger("matchboard.store")


class StoreWriteError(RuntimeError):
    """Raised when the JSON mirror cannot be written."""


def empty_match_data() -> dict[str, Any]:
    return {"last_updated": None, "matches": []}


def ensure_match_structure(data: Any) -> dict[str, Any]:
    if not isinstance(data, dict):
        return empty_match_data()
    matches = data.get("matches")
    return {
        "last_updated": data.get("last_updated") or None,
        "matches": [m for m in matches if isinstance(m, dict)] if isinstance(matches, list) else [],
    }


class MatchStore:
    def __init__(
        self,
        matches_file: str | None = None,
        *,
        read_only: bool | None = None,
    ):
        self.matches_file = matches_file or settings.MATCHES_FILE
        self.read_only = settings.READ_ONLY_FS if read_only is None else read_only
        self.data: dict[str, Any] = empty_match_data()
        self._loaded_mtime = 0.0

    @property
    def matches(self) -> list[dict[str, Any]]:
        return self.data["matches"]

    @property
    def last_updated(self) -> str | None:
        return self.data["last_updated"]

    @staticmethod
    def _mirror():
        return _db.get_documents_collection()

    def _read_mtime(self) -> float:
        return os.stat(self.matches_file).st_mtime

    def _load_file(self) -> None:
        try:
            self._loaded_mtime = self._read_mtime()
            with open(self.matches_file, encoding="utf-8") as fh:
                data = ensure_match_structure(json.load(fh))
            logger.info("Loaded %d matches from %s", len(data["matches"]), self.matches_file)
        except (OSError, ValueError) as exc:
            logger.error("Could not load %s, starting empty: %s", self.matches_file, exc)
            data = empty_match_data()
        data["matches"], _ = normalize_matches(data["matches"])
        self.data = data

    async def load(self) -> None:
        """Load from the MongoDB mirror when available, else from the JSON file."""
        collection = self._mirror()
        if collection is not None:
            try:
                doc = await collection.find_one({"_id": _db.MATCHES_DOCUMENT_ID})
            except Exception:
                logger.warning("MongoDB load failed, falling back to file", exc_info=True)
                doc = None
            if doc:
                data = ensure_match_structure(doc)
                data["matches"], _ = normalize_matches(data["matches"])
                self.data = data
                logger.info("Loaded %d matches from MongoDB", len(data["matches"]))
                return
            logger.info("No match document in MongoDB yet, loading file")
        self._load_file()

    def _write_file(self) -> None:
        if self.read_only:
            logger.info("Read-only filesystem, skipping write of %s", self.matches_file)
            return
        try:
            payload = json.dumps(self.data, indent=2, ensure_ascii=False)
        except (TypeError, ValueError) as exc:
            raise StoreWriteError(f"Match data is not JSON serializable: {exc}") from exc

        # Write next to the target and swap, so a failed write never truncates it.
        directory = os.path.dirname(os.path.abspath(self.matches_file))
        tmp_path = None
        try:
            fd, tmp_path = tempfile.mkstemp(prefix=".matches-", suffix=".tmp", dir=directory)
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(payload)
            os.chmod(tmp_path, 0o644)
            os.replace(tmp_path, self.matches_file)
            tmp_path = None
            self._loaded_mtime = self._read_mtime()
        except OSError as exc:
            raise StoreWriteError(f"Could not write {self.matches_file}: {exc}") from exc
        finally:
            if tmp_path is not None and os.path.exists(tmp_path):
                os.unlink(tmp_path)
        logger.info("Saved %d matches to %s", len(self.matches), self.matches_file)

    async def save(self) -> None:
        self.data["last_updated"] = utcnow_iso()
        collection = self._mirror()
        if collection is not None:
            try:
                await collection.replace_one(
                    {"_id": _db.MATCHES_DOCUMENT_ID},
                    {"_id": _db.MATCHES_DOCUMENT_ID, **self.data},
                    upsert=True,
                )
                logger.info("Saved %d matches to MongoDB", len(self.matches))
            except Exception:
                logger.error("MongoDB save failed, writing file only", exc_info=True)
        self._write_file()

    async def refresh_if_changed(self) -> bool:
        """Reload the JSON file when it was edited on disk. File-only mode."""
        if self._mirror() is not None:
            return False
        try:
            mtime = self._read_mtime()
        except OSError as exc:
            logger.debug("Cannot stat %s: %s", self.matches_file, exc)
            return False
        if mtime <= self._loaded_mtime:
            return False
        logger.info("%s changed on disk, reloading", self.matches_file)
        self._load_file()
        return True

    async def normalize_all(self) -> bool:
        """Normalize every match and persist when anything changed."""
        self.data["matches"], changed = normalize_matches(self.matches)
        if changed:
            try:
                await self.save()
                logger.info("Auto-normalized match data saved")
            except StoreWriteError:
                logger.error("Saving auto-normalized match data failed", exc_info=True)
        return changed

    async def bootstrap(self) -> None:
        await self.load()
        await self.normalize_all()
        try:
            await self.save()
        except StoreWriteError:
            logger.error("Initial sync failed", exc_info=True)

    def find_index(self, match_id: str) -> int:
        for idx, match in enumerate(self.matches):
            if match.get("id") == match_id:
                return idx
        return -1


match_store = MatchStore()
