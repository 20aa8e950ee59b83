"""
backend/matchboard/providers/gemini.py

Purpose:
    Gemini generateContent adapter that turns a natural-language instruction
    ("add Arsenal vs Chelsea next Saturday") into a flat match payload.

Dependencies:
    - matchboard.providers.http_client
    - matchboard.config
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any

import httpx

from matchboard.config import settings
from matchboard.providers.http_client import ResilientClient

logger = logging.getLogger("matchboard.gemini")

SYSTEM_PROMPT = """
Convert the natural-language instruction into JSON WITH THE REQUIRED FIELDS:
date, competition, home_team_name and away_team_name.

Only include home_score and away_score WHEN the score is mentioned in the
input. If no score is mentioned (only a fixture is being added), DO NOT
include the score fields.

Example JSON for a fixture:
{
  "date": "YYYY-MM-DD",
  "competition": "League name",
  "home_team_name": "Home club",
  "away_team_name": "Away club"
}
Example JSON for a result:
{
  "date": "YYYY-MM-DD",
  "competition": "League name",
  "home_team_name": "Home club",
  "away_team_name": "Away club",
  "home_score": number,
  "away_score": number
}

Answer with valid JSON ONLY, no other text. The input may be in Indonesian.
""".strip()

_FENCE_RE = re.compile(r"```(?:json)?", re.IGNORECASE)


class AgentError(Exception):
    """Base class for generative-text failures."""


class AgentConfigError(AgentError):
    """The provider is not configured (missing API key)."""


class AgentUpstreamError(AgentError):
    """The API answered with an error or without usable content."""


class AgentParseError(AgentError):
    """The model answered, but not with a JSON object."""

    def __init__(self, message: str, raw: str):
        super().__init__(message)
        self.raw = raw


def normalize_model_name(name: str) -> str:
    return re.sub(r"^models/", "", name.strip(), flags=re.IGNORECASE)


def strip_code_fences(text: str) -> str:
    return _FENCE_RE.sub("", text).strip()


def parse_model_json(text: str) -> dict[str, Any]:
    cleaned = strip_code_fences(text)
    try:
        parsed = json.loads(cleaned)
    except ValueError as exc:
        raise AgentParseError("Model response is not valid JSON", raw=text) from exc
    if not isinstance(parsed, dict):
        raise AgentParseError("Model response is not a JSON object", raw=text)
    return parsed


def _response_text(body: dict[str, Any]) -> str:
    candidates = body.get("candidates") or []
    if not candidates:
        raise AgentUpstreamError("Gemini returned no candidates")
    parts = ((candidates[0] or {}).get("content") or {}).get("parts") or []
    text = "".join(str(part.get("text") or "") for part in parts if isinstance(part, dict))
    if not text.strip():
        raise AgentUpstreamError("Gemini returned an empty answer")
    return text.strip()


class GeminiProvider:
    """Thin client for the Gemini REST API."""

    def __init__(self, client: ResilientClient | None = None):
        self._client = client or ResilientClient(
            "gemini",
            timeout=settings.GEMINI_TIMEOUT_SECONDS,
            max_retries=settings.GEMINI_MAX_RETRIES,
        )

    def _endpoint(self) -> str:
        base = settings.GEMINI_BASE_URL.rstrip("/")
        version = (settings.GEMINI_API_VERSION or "v1").strip()
        model = normalize_model_name(settings.GEMINI_MODEL or "gemini-2.5-flash")
        return f"{base}/{version}/models/{model}:generateContent"

    async def generate_text(self, prompt: str) -> str:
        if not settings.GOOGLE_API_KEY:
            raise AgentConfigError("GOOGLE_API_KEY is not set")

        url = self._endpoint()
        logger.info("Gemini request to %s", url)
        try:
            resp = await self._client.post(
                url,
                params={"key": settings.GOOGLE_API_KEY},
                json={
                    "contents": [
                        {"role": "user", "parts": [{"text": SYSTEM_PROMPT}, {"text": prompt}]},
                    ],
                },
            )
        except httpx.HTTPError as exc:
            raise AgentUpstreamError(f"Gemini request failed: {exc}") from exc
        if resp.status_code >= 400:
            raise AgentUpstreamError(f"Gemini HTTP {resp.status_code}: {resp.text[:300]}")
        try:
            body = resp.json()
        except ValueError as exc:
            raise AgentUpstreamError("Gemini returned a non-JSON body") from exc
        return _response_text(body)

    async def extract_match(self, prompt: str) -> dict[str, Any]:
        """Ask the model for a flat match payload. Validation is left to the caller."""
        return parse_model_json(await self.generate_text(prompt))

    async def aclose(self) -> None:
        await self._client.aclose()


gemini_provider = GeminiProvider()
