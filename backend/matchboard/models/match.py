"""
backend/matchboard/models/match.py

Purpose:
    API payload and response models for matches. Stored records stay plain
    dicts; these models only shape what crosses the HTTP boundary.

Dependencies:
    - pydantic
    - matchboard.services.match_normalizer
"""

from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict

from matchboard.services.match_normalizer import parse_score


class TeamResponse(BaseModel):
    """One side of a match as returned to the client."""
    name: Optional[str] = None
    logo_url: str = ""
    score: Optional[int] = None


class MatchResponse(BaseModel):
    """Match data returned to the client."""
    id: str
    date: str
    competition: str
    home_team: TeamResponse
    away_team: TeamResponse


def _team_to_response(team: Any) -> TeamResponse:
    team = team if isinstance(team, dict) else {}
    name = team.get("name")
    return TeamResponse(
        name=None if name is None else str(name),
        logo_url=str(team.get("logo_url") or ""),
        score=parse_score(team.get("score")),
    )


def match_to_response(match: dict) -> MatchResponse:
    """Convert a stored match dict to an API response."""
    return MatchResponse(
        id=str(match.get("id") or ""),
        date=str(match.get("date") or ""),
        competition=str(match.get("competition") or ""),
        home_team=_team_to_response(match.get("home_team")),
        away_team=_team_to_response(match.get("away_team")),
    )


class MatchWindowResponse(BaseModel):
    last_updated: Optional[str] = None
    today_matches: list[MatchResponse]
    last_matches: list[MatchResponse]
    next_matches: list[MatchResponse]


class MatchListResponse(BaseModel):
    last_updated: Optional[str] = None
    matches: list[MatchResponse]


ScoreInput = Optional[Union[int, float, str]]


class MatchPayload(BaseModel):
    """Flat create/update body, as sent by the form, the admin table and the agent.

    Every field is optional here; required-field checks happen in the match
    normalizer so form and JSON clients get the same error message.
    """
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    id: Optional[str] = None
    date: Optional[str] = None
    competition: Optional[str] = None
    home_team_name: Optional[str] = None
    away_team_name: Optional[str] = None
    home_score: ScoreInput = None
    away_score: ScoreInput = None
    home_team_logo_url: Optional[str] = None
    away_team_logo_url: Optional[str] = None


class AgentRequest(BaseModel):
    prompt: Optional[str] = None
