"""
backend/matchboard/services/team_alias_normalizer.py

Purpose:
    Normalize team and competition strings coming from the form, the agent
    endpoint or hand-edited data files into canonical display names.

Dependencies:
    - re
    - types.MappingProxyType
"""

from __future__ import annotations

import re
from types import MappingProxyType

_NON_ALNUM_RE = re.compile(r"[^a-z0-9]")

DEFAULT_COMPETITION = "Premier League"

# Sanitized keys that stand for "no league given".
_PLACEHOLDER_TOKENS = ("unknown", "namaliga")

TEAM_ALIASES: MappingProxyType[str, str] = MappingProxyType({
    "arsenal": "Arsenal FC",
    "arsenalfc": "Arsenal FC",
    "chelsea": "Chelsea FC",
    "chelseafc": "Chelsea FC",
    "liverpool": "Liverpool FC",
    "liverpoolfc": "Liverpool FC",
    "mancity": "Manchester City",
    "manchestercity": "Manchester City",
    "manc": "Manchester City",
    "manutd": "Manchester United",
    "manunited": "Manchester United",
    "manchesterunited": "Manchester United",
    "spurs": "Tottenham Hotspur",
    "tottenham": "Tottenham Hotspur",
    "tottenhamhotspur": "Tottenham Hotspur",
    "brighton": "Brighton & Hove Albion",
    "brightonhovealbion": "Brighton & Hove Albion",
    "nottinghamforest": "Nottingham Forest",
    "nottsforest": "Nottingham Forest",
    "nforest": "Nottingham Forest",
    "westham": "West Ham United",
    "westhamunited": "West Ham United",
    "wolves": "Wolverhampton Wanderers",
    "wolverhampton": "Wolverhampton Wanderers",
})


def sanitize_key(raw: str | None) -> str:
    """Reduce text to a lowercase ``[a-z0-9]`` comparison key.

    Accented and non-Latin characters are dropped, not transliterated, so
    "Málaga" becomes "mlaga". Keys are only ever compared with other keys
    produced by this function.
    """
    return _NON_ALNUM_RE.sub("", str(raw or "").lower())


def alias_team_name(name: str | None) -> str | None:
    """Return the canonical display name for a known alias, else ``name``."""
    return TEAM_ALIASES.get(sanitize_key(name), name)


def canonicalize_competition(raw: object) -> str:
    """Map Premier League synonyms and missing-league placeholders to the default.

    Unrecognized competitions are returned verbatim; this fills defaults, it
    does not validate.
    """
    if not isinstance(raw, str) or not raw.strip():
        return DEFAULT_COMPETITION

    key = sanitize_key(raw)
    if "premierleague" in key or key == "epl":
        return DEFAULT_COMPETITION
    if any(token in key for token in _PLACEHOLDER_TOKENS):
        return DEFAULT_COMPETITION
    return raw
