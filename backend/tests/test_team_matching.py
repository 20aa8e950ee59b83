"""
backend/tests/test_team_matching.py

Purpose:
    Edit distance used for fuzzy logo filename matching.
"""

from __future__ import annotations

import pytest

from matchboard.utils.team_matching import edit_distance


@pytest.mark.parametrize(
    "a, b, expected",
    [
        ("", "", 0),
        ("", "abc", 3),
        ("kitten", "sitting", 3),
        ("mancity", "manchestercity", 7),
        ("realmadird", "realmadrid", 2),
        ("barcelonaa", "barcelona", 1),
        ("arsenal", "arsenalfc", 2),
    ],
)
def test_edit_distance_known_values(a, b, expected) -> None:
    assert edit_distance(a, b) == expected


@pytest.mark.parametrize("a, b", [("chelsea", "chelseafc"), ("spurs", "tottenham"), ("", "x")])
def test_edit_distance_is_symmetric(a, b) -> None:
    assert edit_distance(a, b) == edit_distance(b, a)


@pytest.mark.parametrize("value", ["", "liverpoolfc", "wolves"])
def test_edit_distance_to_self_is_zero(value) -> None:
    assert edit_distance(value, value) == 0
