"""Overwrite the MongoDB match document with the contents of matches.json.

Usage:
    python -m tools.seed_store
    python -m tools.seed_store --file path/to/matches.json
    python -m tools.seed_store --dry-run
"""

import argparse
import asyncio
import json
import sys
from typing import Any

sys.path.insert(0, "backend")

import matchboard.database as _db
from matchboard.config import settings
from matchboard.services.match_normalizer import parse_score
from matchboard.utils import generate_match_id, utcnow_iso


def seed_team(team: Any) -> dict:
    team = team if isinstance(team, dict) else {}
    return {
        "name": team.get("name") or "",
        "logo_url": team.get("logo_url") or "",
        "score": parse_score(team.get("score")),
    }


def seed_match(match: dict) -> dict:
    return {
        "id": str(match.get("id") or generate_match_id()),
        "date": match.get("date") or "",
        "competition": match.get("competition") or "",
        "home_team": seed_team(match.get("home_team")),
        "away_team": seed_team(match.get("away_team")),
    }


def build_seed_document(raw: Any) -> dict:
    raw = raw if isinstance(raw, dict) else {}
    matches = raw.get("matches") if isinstance(raw.get("matches"), list) else []
    return {
        "last_updated": raw.get("last_updated") or utcnow_iso(),
        "matches": [seed_match(m) for m in matches if isinstance(m, dict)],
    }


async def run(path: str, dry_run: bool) -> int:
    with open(path, encoding="utf-8") as fh:
        document = build_seed_document(json.load(fh))

    print(f"Prepared {len(document['matches'])} matches from {path}")
    if dry_run:
        print("[DRY RUN] MongoDB not touched.")
        return 0

    if not await _db.connect_db():
        print("MONGO_URI is not set; nothing to seed.", file=sys.stderr)
        return 1
    try:
        collection = _db.get_documents_collection()
        await collection.replace_one(
            {"_id": _db.MATCHES_DOCUMENT_ID},
            {"_id": _db.MATCHES_DOCUMENT_ID, **document},
            upsert=True,
        )
    finally:
        await _db.close_db()
    print(f"MongoDB document overwritten with {len(document['matches'])} matches.")
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(description="Seed the MongoDB match document from a JSON file.")
    parser.add_argument("--file", default=settings.MATCHES_FILE, help="Path to matches.json")
    parser.add_argument("--dry-run", action="store_true", help="Parse and report only")
    args = parser.parse_args()
    try:
        return asyncio.run(run(args.file, args.dry_run))
    except (OSError, ValueError) as exc:
        print(f"Seeding failed: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
