"""
backend/tests/test_agent_router.py

Purpose:
    POST /agent error contract and the happy path through the shared create
    flow, with the Gemini provider replaced by a stub.

Dependencies:
    - pytest
    - matchboard.routers.agent
"""

from __future__ import annotations

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from matchboard.providers.gemini import AgentConfigError, AgentParseError, AgentUpstreamError
from matchboard.routers import agent as agent_router
from matchboard.routers import matches as matches_router
from matchboard.services.match_store import MatchStore


class _StubAgent:
    def __init__(self, result=None, error: Exception | None = None):
        self.result = result
        self.error = error
        self.prompts: list[str] = []

    async def extract_match(self, prompt: str) -> dict:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture
def store(matches_file, logo_root, no_mirror) -> MatchStore:
    return MatchStore(str(matches_file), read_only=False)


def _client(store: MatchStore, agent: _StubAgent) -> TestClient:
    app = FastAPI()
    app.include_router(agent_router.router)
    app.dependency_overrides[agent_router.get_agent] = lambda: agent
    app.dependency_overrides[matches_router.get_store] = lambda: store
    return TestClient(app)


def test_empty_prompt_is_400(store) -> None:
    agent = _StubAgent(result={})
    client = _client(store, agent)

    for body in ({}, {"prompt": ""}, {"prompt": "   "}):
        response = client.post("/agent", json=body)
        assert response.status_code == 400
        assert response.json() == {"error": "Prompt is required"}
    assert agent.prompts == []


def test_agent_saves_extracted_match(store) -> None:
    agent = _StubAgent(result={
        "date": "2025-03-15",
        "competition": "EPL",
        "home_team_name": "Arsenal",
        "away_team_name": "Chelsea",
        "home_score": 2,
        "away_score": 0,
    })
    client = _client(store, agent)

    response = client.post("/agent", json={"prompt": "  Arsenal 2-0 Chelsea yesterday "})

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    saved = body["saved_match"]
    assert saved["competition"] == "Premier League"
    assert saved["home_team"] == {"name": "Arsenal", "logo_url": "logo/Premier League/Arsenal FC.png", "score": 2}
    assert agent.prompts == ["Arsenal 2-0 Chelsea yesterday"]
    assert [m["id"] for m in store.matches] == [saved["id"]]


def test_incomplete_extraction_is_400(store) -> None:
    client = _client(store, _StubAgent(result={"date": "2025-03-15", "home_team_name": "Arsenal"}))

    response = client.post("/agent", json={"prompt": "Arsenal on Saturday"})

    assert response.status_code == 400
    assert "Required fields" in response.json()["error"]
    assert store.matches == []


def test_unparseable_answer_returns_raw_text(store) -> None:
    error = AgentParseError("Model response is not valid JSON", raw="sure! here you go")
    client = _client(store, _StubAgent(error=error))

    response = client.post("/agent", json={"prompt": "add a match"})

    assert response.status_code == 500
    assert response.json() == {"error": "AI response could not be parsed", "raw": "sure! here you go"}


def test_upstream_failure_is_500_with_detail(store) -> None:
    client = _client(store, _StubAgent(error=AgentUpstreamError("Gemini HTTP 503: overloaded")))

    response = client.post("/agent", json={"prompt": "add a match"})

    assert response.status_code == 500
    body = response.json()
    assert body["error"] == "Failed to process AI prompt"
    assert "503" in body["detail"]


def test_missing_api_key_is_500(store) -> None:
    client = _client(store, _StubAgent(error=AgentConfigError("GOOGLE_API_KEY is not set")))

    response = client.post("/agent", json={"prompt": "add a match"})

    assert response.status_code == 500
    assert response.json() == {"error": "GOOGLE_API_KEY is not set"}
