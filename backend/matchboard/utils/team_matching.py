"""
backend/matchboard/utils/team_matching.py

Purpose:
    Shared fuzzy team-name matching helpers used by the logo resolver. The
    heuristics are intentionally simple and deterministic so repeated lookups
    over the same logo tree always pick the same file.

Notes:
    - Exact sanitized-name hits always take precedence over fuzzy ones.
    - Fuzzy matching is a fallback only; callers apply their own distance
      threshold and must tolerate "no match".
"""

from __future__ import annotations


def edit_distance(a: str, b: str) -> int:
    """Levenshtein distance with unit cost for insert, delete and substitute."""
    if a == b:
        return 0
    if not a:
        return len(b)
    if not b:
        return len(a)

    previous = list(range(len(b) + 1))
    for i, ch_a in enumerate(a, start=1):
        current = [i] + [0] * len(b)
        for j, ch_b in enumerate(b, start=1):
            cost = 0 if ch_a == ch_b else 1
            current[j] = min(
                previous[j] + 1,
                current[j - 1] + 1,
                previous[j - 1] + cost,
            )
        previous = current
    return previous[-1]

