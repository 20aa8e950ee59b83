"""
backend/matchboard/services/match_service.py

Purpose:
    Match read/write operations over the in-memory store: league filtering,
    past/today/next window bucketing and create/update/delete with
    renormalization and persistence after each mutation.

Dependencies:
    - matchboard.services.match_store
    - matchboard.services.match_normalizer
    - matchboard.services.team_alias_normalizer
"""

from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Any, Iterable

from matchboard.services.match_normalizer import (
    build_team,
    match_from_payload,
    normalize_match,
)
from matchboard.services.match_store import MatchStore
from matchboard.services.team_alias_normalizer import canonicalize_competition, sanitize_key
from matchboard.utils import parse_match_date

logger = logging.getLogger("matchboard.matches")


class MatchNotFoundError(LookupError):
    """Raised when no stored match carries the requested id."""


def match_sort_key(match: dict[str, Any]) -> tuple[bool, date]:
    """Ascending by date; undated records sort last."""
    parsed = parse_match_date(match.get("date"))
    return (parsed is None, parsed or date.max)


def filter_matches_by_league(
    matches: Iterable[dict[str, Any]],
    league: str | None,
) -> list[dict[str, Any]]:
    """Keep matches whose canonical competition overlaps the requested league."""
    matches = list(matches)
    if not league:
        return matches
    target = sanitize_key(canonicalize_competition(league))
    result = []
    for match in matches:
        comp = sanitize_key(canonicalize_competition(match.get("competition")))
        if target in comp or comp in target:
            result.append(match)
    return result


def _stored_team(match: dict[str, Any], side: str) -> dict[str, Any]:
    team = match.get(side)
    return team if isinstance(team, dict) else {}


def _team_name(match: dict[str, Any], side: str) -> str:
    return str(_stored_team(match, side).get("name") or "")


def classify_matches(
    matches: Iterable[dict[str, Any]],
    today: date,
    window_days: int = 7,
) -> dict[str, list[dict[str, Any]]]:
    """Bucket matches into today, the last ``window_days`` and the next ``window_days``.

    Records with unparseable dates or dates outside both windows are dropped.
    """
    past_start = today - timedelta(days=window_days)
    next_end = today + timedelta(days=window_days)

    today_matches: list[tuple[date, dict]] = []
    last_matches: list[tuple[date, dict]] = []
    next_matches: list[tuple[date, dict]] = []

    for match in matches:
        match_date = parse_match_date(match.get("date"))
        if match_date is None:
            continue
        if match_date == today:
            today_matches.append((match_date, match))
        elif past_start <= match_date < today:
            last_matches.append((match_date, match))
        elif today < match_date <= next_end:
            next_matches.append((match_date, match))

    today_matches.sort(
        key=lambda item: (
            str(item[1].get("date") or ""),
            str(item[1].get("competition") or ""),
            _team_name(item[1], "home_team"),
        )
    )
    last_matches.sort(key=lambda item: item[0], reverse=True)
    next_matches.sort(key=lambda item: item[0])

    return {
        "today_matches": [m for _, m in today_matches],
        "last_matches": [m for _, m in last_matches],
        "next_matches": [m for _, m in next_matches],
    }


def _sort_store(store: MatchStore) -> None:
    store.matches.sort(key=match_sort_key)


def get_match(store: MatchStore, match_id: str) -> dict[str, Any]:
    idx = store.find_index(match_id)
    if idx == -1:
        raise MatchNotFoundError(match_id)
    return store.matches[idx]


async def create_match(store: MatchStore, payload: dict[str, Any]) -> dict[str, Any]:
    """Validate, build and persist a new match. Raises MatchPayloadError."""
    match = match_from_payload(payload)
    store.matches.append(match)
    _sort_store(store)
    await store.save()
    logger.info(
        "Created match %s: %s vs %s (%s)",
        match["id"], match["home_team"]["name"], match["away_team"]["name"], match["date"],
    )
    return match


def _pick(payload: dict[str, Any], key: str, fallback: Any) -> Any:
    value = payload.get(key)
    return value if value else fallback


def _merge_team(
    payload: dict[str, Any],
    side: str,
    current: dict[str, Any],
    competition: str,
) -> dict[str, Any]:
    prefix = side.split("_")[0]
    name = _pick(payload, f"{side}_name", current.get("name"))
    score = payload.get(f"{prefix}_score")
    if score is None:
        score = current.get("score")
    # A renamed team gets a fresh lookup unless a logo was given explicitly.
    logo = payload.get(f"{side}_logo_url")
    if not logo and name == current.get("name"):
        logo = current.get("logo_url")
    return build_team(name, score, competition, logo)


async def update_match(
    store: MatchStore,
    match_id: str,
    payload: dict[str, Any],
) -> dict[str, Any]:
    """Merge a flat update payload over the stored match and persist it."""
    idx = store.find_index(match_id)
    if idx == -1:
        raise MatchNotFoundError(match_id)

    current = store.matches[idx]
    home = _stored_team(current, "home_team")
    away = _stored_team(current, "away_team")
    competition = canonicalize_competition(_pick(payload, "competition", current.get("competition")))

    merged = {
        **current,
        "date": _pick(payload, "date", current.get("date")),
        "competition": competition,
        "home_team": _merge_team(payload, "home_team", home, competition),
        "away_team": _merge_team(payload, "away_team", away, competition),
    }

    updated = normalize_match(merged)
    store.matches[idx] = updated
    _sort_store(store)
    await store.save()
    logger.info("Updated match %s", match_id)
    return updated


async def delete_match(store: MatchStore, match_id: str) -> dict[str, Any]:
    idx = store.find_index(match_id)
    if idx == -1:
        raise MatchNotFoundError(match_id)
    deleted = store.matches.pop(idx)
    await store.save()
    logger.info("Deleted match %s", match_id)
    return deleted
