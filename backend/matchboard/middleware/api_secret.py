"""
backend/matchboard/middleware/api_secret.py

Purpose:
    Shared-secret gate for /api. Scripts pass the secret in a header or the
    query string; the site's own pages reach the API through same-origin
    fetches; anyone opening /api URLs directly in a browser gets a blank page.

Dependencies:
    - starlette
    - matchboard.config
"""

import logging
import os
import secrets

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import FileResponse, HTMLResponse, Response

from matchboard.config import settings

logger = logging.getLogger("matchboard.api_secret")

BLOCKED_PAGE = "kosong.html"
_SECRET_HEADERS = ("x-secret", "x-api-secret")


def provided_secret(request: Request) -> str:
    for header in _SECRET_HEADERS:
        value = request.headers.get(header)
        if value:
            return value
    return request.query_params.get("secret", "")


def is_navigation(request: Request) -> bool:
    mode = request.headers.get("sec-fetch-mode", "").lower()
    accept = request.headers.get("accept", "").lower()
    return mode == "navigate" or "text/html" in accept


def is_same_site_fetch(request: Request) -> bool:
    mode = request.headers.get("sec-fetch-mode", "").lower()
    site = request.headers.get("sec-fetch-site", "").lower()
    return mode == "cors" and site in ("same-origin", "same-site")


def _blocked_response() -> Response:
    page = os.path.join(settings.PUBLIC_DIR, BLOCKED_PAGE)
    if os.path.isfile(page):
        return FileResponse(page, status_code=403, media_type="text/html")
    return HTMLResponse("<!doctype html><title>Not available</title>", status_code=403)


class ApiSecretMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, prefix: str = "/api"):
        super().__init__(app)
        self.prefix = prefix

    async def dispatch(self, request: Request, call_next) -> Response:
        path = request.url.path
        if path != self.prefix and not path.startswith(self.prefix + "/"):
            return await call_next(request)

        secret = settings.API_SECRET
        if not secret:
            return await call_next(request)
        if secrets.compare_digest(provided_secret(request).encode(), secret.encode()):
            return await call_next(request)
        if not is_navigation(request) and is_same_site_fetch(request):
            return await call_next(request)

        logger.info("Blocked %s %s without a valid secret", request.method, path)
        return _blocked_response()
