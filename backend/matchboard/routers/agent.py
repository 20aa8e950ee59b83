"""
backend/matchboard/routers/agent.py

Purpose:
    Natural-language "add match" shortcut: the prompt goes to Gemini, the
    JSON it returns goes through the same create path as the form.

Dependencies:
    - matchboard.providers.gemini
    - matchboard.services.match_service
"""

import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from matchboard.models.match import AgentRequest, match_to_response
from matchboard.providers import gemini as _gemini
from matchboard.providers.gemini import (
    AgentConfigError,
    AgentError,
    AgentParseError,
    GeminiProvider,
)
from matchboard.routers.matches import get_store
from matchboard.services.match_normalizer import MatchPayloadError
from matchboard.services.match_service import create_match
from matchboard.services.match_store import MatchStore, StoreWriteError

logger = logging.getLogger("matchboard.routers.agent")

router = APIRouter(tags=["agent"])


def get_agent() -> GeminiProvider:
    return _gemini.gemini_provider


def _error(message: str, code: int, **extra) -> JSONResponse:
    return JSONResponse({"error": message, **extra}, status_code=code)


@router.post("/agent")
async def agent_add_match(
    body: AgentRequest,
    agent: GeminiProvider = Depends(get_agent),
    store: MatchStore = Depends(get_store),
):
    prompt = (body.prompt or "").strip()
    if not prompt:
        return _error("Prompt is required", status.HTTP_400_BAD_REQUEST)

    try:
        payload = await agent.extract_match(prompt)
    except AgentConfigError as exc:
        return _error(str(exc), status.HTTP_500_INTERNAL_SERVER_ERROR)
    except AgentParseError as exc:
        logger.warning("Unparseable agent answer: %.200s", exc.raw)
        return _error("AI response could not be parsed", status.HTTP_500_INTERNAL_SERVER_ERROR, raw=exc.raw)
    except AgentError as exc:
        logger.error("Gemini call failed: %s", exc)
        return _error("Failed to process AI prompt", status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))

    try:
        match = await create_match(store, payload)
    except MatchPayloadError as exc:
        return _error(str(exc), status.HTTP_400_BAD_REQUEST)
    except StoreWriteError as exc:
        logger.exception("Saving agent match failed")
        return _error("Failed to process AI prompt", status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))

    return {"status": "ok", "saved_match": match_to_response(match)}
