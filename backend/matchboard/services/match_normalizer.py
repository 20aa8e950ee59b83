"""
backend/matchboard/services/match_normalizer.py

Purpose:
    Bring match records into canonical shape: stable id, canonical
    competition and resolved team logos. Runs on every read and write so
    records that arrive from the agent endpoint or hand-edited data files
    converge without a separate migration.

Dependencies:
    - matchboard.services.team_alias_normalizer
    - matchboard.services.logo_service
    - matchboard.utils
"""

from __future__ import annotations

import logging
import math
from typing import Any, Iterable

from matchboard.services import logo_service
from matchboard.services.team_alias_normalizer import alias_team_name, canonicalize_competition
from matchboard.utils import generate_match_id

logger = logging.getLogger("matchboard.normalizer")

TEAM_SIDES = ("home_team", "away_team")
REQUIRED_PAYLOAD_FIELDS = ("date", "competition", "home_team_name", "away_team_name")


class MatchPayloadError(ValueError):
    """Raised when a create payload lacks required fields."""


def parse_score(value: Any) -> int | None:
    """Coerce a form/JSON score into an int; blanks and garbage become None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    text = str(value).strip()
    if not text:
        return None
    try:
        number = float(text)
    except ValueError:
        return None
    if not math.isfinite(number):
        return None
    return int(number)


def _fill_team_logo(team: dict[str, Any], competition: str) -> dict[str, Any]:
    if team.get("logo_url"):
        return team
    resolved = logo_service.find_logo_path(alias_team_name(team.get("name")), competition)
    return {**team, "logo_url": resolved or ""}


def normalize_match(match: dict[str, Any] | None) -> dict[str, Any]:
    """Return a normalized copy of ``match``.

    Only ``id`` (when missing), ``competition`` and empty ``logo_url`` fields
    are touched. Dates, scores and explicit logos are left as they are, which
    makes the transform idempotent.
    """
    result: dict[str, Any] = dict(match or {})
    if not result.get("id"):
        result["id"] = generate_match_id()
    result["competition"] = canonicalize_competition(result.get("competition"))

    for side in TEAM_SIDES:
        team = result.get(side)
        if isinstance(team, dict) and team:
            result[side] = _fill_team_logo(team, result["competition"])
    return result


def normalize_matches(matches: Iterable[dict[str, Any]]) -> tuple[list[dict[str, Any]], bool]:
    """Normalize every match; the flag reports whether any record changed."""
    normalized: list[dict[str, Any]] = []
    changed = False
    for match in matches:
        result = normalize_match(match)
        if result != match:
            changed = True
        normalized.append(result)
    return normalized, changed


def build_team(
    name: str | None,
    score: Any,
    competition: str,
    logo_url: str | None = None,
) -> dict[str, Any]:
    """Build a team record. An explicit ``logo_url`` always wins over lookup."""
    logo = logo_url or logo_service.find_logo_path(alias_team_name(name), competition) or ""
    return {"name": name, "logo_url": logo, "score": parse_score(score)}


def match_from_payload(payload: dict[str, Any] | None) -> dict[str, Any]:
    """Build a normalized match from a flat create payload (form, JSON or agent)."""
    if not payload:
        raise MatchPayloadError("Empty payload")

    missing = [field for field in REQUIRED_PAYLOAD_FIELDS if not payload.get(field)]
    if missing:
        raise MatchPayloadError(
            "Required fields: " + ", ".join(REQUIRED_PAYLOAD_FIELDS)
            + " (missing: " + ", ".join(missing) + ")"
        )

    competition = canonicalize_competition(payload["competition"])
    match = {
        "id": str(payload.get("id") or generate_match_id()),
        "date": str(payload["date"]).strip(),
        "competition": competition,
        "home_team": build_team(
            payload["home_team_name"],
            payload.get("home_score"),
            competition,
            payload.get("home_team_logo_url"),
        ),
        "away_team": build_team(
            payload["away_team_name"],
            payload.get("away_score"),
            competition,
            payload.get("away_team_logo_url"),
        ),
    }
    logger.debug("Built match %s from payload", match["id"])
    return match
