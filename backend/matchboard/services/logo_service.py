"""
backend/matchboard/services/logo_service.py

Purpose:
    Resolve a team name to a logo file inside the per-league logo tree.
    Exact sanitized filename hits win immediately; otherwise the closest
    filename within the configured edit distance is accepted.

Dependencies:
    - matchboard.config (LOGO_ROOT, LOGO_URL_PREFIX, LOGO_MAX_DISTANCE)
    - matchboard.services.team_alias_normalizer
    - matchboard.utils.team_matching
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import PurePosixPath

from matchboard.config import settings
from matchboard.services.team_alias_normalizer import alias_team_name, sanitize_key
from matchboard.utils.team_matching import edit_distance

logger = logging.getLogger("matchboard.logos")

IMAGE_EXTENSIONS = frozenset({".png", ".jpg", ".jpeg", ".gif", ".svg", ".webp"})


@dataclass(frozen=True)
class LogoResolution:
    """Outcome of a logo lookup. ``path`` is empty when nothing matched."""

    path: str = ""
    distance: int | None = None

    @property
    def resolved(self) -> bool:
        return bool(self.path)

    @classmethod
    def missing(cls) -> "LogoResolution":
        return cls()


def _list_leagues(logo_root: str) -> list[str]:
    with os.scandir(logo_root) as entries:
        return sorted(entry.name for entry in entries if entry.is_dir())


def _list_images(league_dir: str) -> list[str]:
    with os.scandir(league_dir) as entries:
        return sorted(
            entry.name
            for entry in entries
            if entry.is_file() and os.path.splitext(entry.name)[1].lower() in IMAGE_EXTENSIONS
        )


def _candidate_leagues(leagues: list[str], competition: str | None) -> list[str]:
    comp_key = sanitize_key(competition)
    if not comp_key:
        return leagues
    narrowed = [league for league in leagues if comp_key in sanitize_key(league)]
    return narrowed or leagues


def _logo_url(league: str, filename: str) -> str:
    prefix = settings.LOGO_URL_PREFIX.strip("/")
    parts = [p for p in (prefix, league, filename) if p]
    return str(PurePosixPath(*parts))


def resolve_logo(
    team_name: str | None,
    competition: str | None,
    *,
    logo_root: str | None = None,
    max_distance: int | None = None,
) -> LogoResolution:
    """Find the logo file that best matches ``team_name``.

    League folders whose sanitized name contains the sanitized competition
    are searched first; when none qualify every league is searched. The tree
    is rescanned on every call and never written to. Listing errors are
    logged and reported as an unresolved lookup.
    """
    root = logo_root or settings.LOGO_ROOT
    threshold = settings.LOGO_MAX_DISTANCE if max_distance is None else max_distance
    target = sanitize_key(alias_team_name(team_name))
    if not target:
        return LogoResolution.missing()

    best_path = ""
    best_distance: int | None = None
    try:
        leagues = _candidate_leagues(_list_leagues(root), competition)
        for league in leagues:
            for filename in _list_images(os.path.join(root, league)):
                key = sanitize_key(os.path.splitext(filename)[0])
                if key == target:
                    return LogoResolution(path=_logo_url(league, filename), distance=0)
                distance = edit_distance(key, target)
                # Strict comparison keeps the first candidate on ties.
                if best_distance is None or distance < best_distance:
                    best_path = _logo_url(league, filename)
                    best_distance = distance
    except OSError as exc:
        logger.warning("Logo scan failed under %s for %r: %s", root, team_name, exc)
        return LogoResolution.missing()

    if best_distance is not None and best_distance <= threshold:
        return LogoResolution(path=best_path, distance=best_distance)
    logger.debug("No logo within distance %d for %r", threshold, team_name)
    return LogoResolution.missing()


def find_logo_path(team_name: str | None, competition: str | None) -> str:
    return resolve_logo(team_name, competition).path
