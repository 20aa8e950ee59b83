"""
backend/matchboard/routers/matches.py

Purpose:
    Match CRUD API. Every read refreshes the store from disk when the JSON
    file was edited and renormalizes the list before answering.

Dependencies:
    - matchboard.services.match_service
    - matchboard.services.match_store
    - matchboard.models.match
"""

import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import JSONResponse, PlainTextResponse, RedirectResponse

from matchboard.config import settings
from matchboard.models.match import (
    MatchListResponse,
    MatchPayload,
    MatchResponse,
    MatchWindowResponse,
    match_to_response,
)
from matchboard.services import match_store as _store
from matchboard.services.match_normalizer import MatchPayloadError
from matchboard.services.match_service import (
    MatchNotFoundError,
    classify_matches,
    create_match,
    delete_match,
    filter_matches_by_league,
    get_match,
    update_match,
)
from matchboard.services.match_store import MatchStore, StoreWriteError
from matchboard.utils import local_today

logger = logging.getLogger("matchboard.routers.matches")

router = APIRouter(prefix="/api/matches", tags=["matches"])

CREATE_SUCCESS_REDIRECT = "/add-match.html?success=1"


def get_store() -> MatchStore:
    return _store.match_store


async def fresh_store(store: MatchStore = Depends(get_store)) -> MatchStore:
    await store.refresh_if_changed()
    await store.normalize_all()
    return store


def _not_found() -> JSONResponse:
    return JSONResponse({"error": "Match not found"}, status_code=status.HTTP_404_NOT_FOUND)


def _wants_json(request: Request) -> bool:
    accept = request.headers.get("accept", "").lower()
    content_type = request.headers.get("content-type", "").lower()
    return "application/json" in accept or content_type.startswith("application/json")


async def _read_payload(request: Request) -> dict[str, Any]:
    content_type = request.headers.get("content-type", "").lower()
    if content_type.startswith("application/json"):
        body = await request.json()
        return body if isinstance(body, dict) else {}
    form = await request.form()
    return {key: value for key, value in form.items() if isinstance(value, str)}


@router.get("", response_model=MatchWindowResponse | MatchListResponse)
async def list_matches(
    league: Optional[str] = Query(None, description="League/competition filter"),
    all_matches: Optional[str] = Query(None, alias="all", description="1 = flat list, no date window"),
    store: MatchStore = Depends(fresh_store),
):
    """Matches bucketed into last/today/next windows, or the full list with ``all=1``."""
    matches = filter_matches_by_league(store.matches, league)
    if all_matches and all_matches.lower() in ("1", "true", "yes"):
        return MatchListResponse(
            last_updated=store.last_updated,
            matches=[match_to_response(m) for m in matches],
        )

    buckets = classify_matches(matches, local_today(), settings.MATCH_WINDOW_DAYS)
    return MatchWindowResponse(
        last_updated=store.last_updated,
        **{key: [match_to_response(m) for m in rows] for key, rows in buckets.items()},
    )


@router.post("")
async def create_match_endpoint(request: Request, store: MatchStore = Depends(get_store)):
    """Create a match from a JSON body or an HTML form post."""
    wants_json = _wants_json(request)
    try:
        payload = await _read_payload(request)
    except ValueError:
        return PlainTextResponse("Invalid request body", status_code=status.HTTP_400_BAD_REQUEST)

    try:
        match = await create_match(store, payload)
    except MatchPayloadError as exc:
        if wants_json:
            return JSONResponse({"error": str(exc)}, status_code=status.HTTP_400_BAD_REQUEST)
        return PlainTextResponse(str(exc), status_code=status.HTTP_400_BAD_REQUEST)
    except StoreWriteError:
        logger.exception("Saving new match failed")
        return PlainTextResponse("Failed to save match data.", status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)

    if wants_json:
        return {"status": "ok", "match": match_to_response(match)}
    return RedirectResponse(CREATE_SUCCESS_REDIRECT, status_code=status.HTTP_303_SEE_OTHER)


@router.get("/{match_id}", response_model=MatchResponse)
async def read_match(match_id: str, store: MatchStore = Depends(fresh_store)):
    try:
        return match_to_response(get_match(store, match_id))
    except MatchNotFoundError:
        return _not_found()


@router.put("/{match_id}", response_model=MatchResponse)
async def update_match_endpoint(
    match_id: str,
    request: Request,
    store: MatchStore = Depends(fresh_store),
):
    """Merge a JSON or form body over the stored match."""
    try:
        body = MatchPayload.model_validate(await _read_payload(request))
    except ValueError as exc:
        return JSONResponse({"error": f"Invalid request body: {exc}"}, status_code=status.HTTP_400_BAD_REQUEST)

    try:
        match = await update_match(store, match_id, body.model_dump(exclude_none=True))
    except MatchNotFoundError:
        return _not_found()
    except StoreWriteError:
        logger.exception("Saving match %s failed", match_id)
        return PlainTextResponse("Failed to save match data.", status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)
    return match_to_response(match)


@router.delete("/{match_id}")
async def delete_match_endpoint(match_id: str, store: MatchStore = Depends(fresh_store)):
    try:
        deleted = await delete_match(store, match_id)
    except MatchNotFoundError:
        return _not_found()
    except StoreWriteError:
        logger.exception("Deleting match %s failed", match_id)
        return PlainTextResponse("Failed to save match data.", status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)
    return {"status": "deleted", "match": match_to_response(deleted)}
