"""
CSRF guard for the roster form.

Every page render hands out a token in a cookie and a hidden field; every
route that changes the collection or the editor state depends on
`require_csrf`, which checks that both match and that the request came from
this host.
"""
from __future__ import annotations

import secrets
from urllib import parse as urlparse

from fastapi import Form, HTTPException, Request, Response

from roster.core.config import get_settings

CSRF_COOKIE_NAME = "csrf_token"
CSRF_HEADER_NAME = "x-csrf-token"


def page_token(request: Request) -> str:
    token = request.cookies.get(CSRF_COOKIE_NAME) or ""
    return token if len(token) >= 16 else secrets.token_urlsafe(32)


def remember_token(response: Response, token: str) -> None:
    response.set_cookie(
        CSRF_COOKIE_NAME,
        token,
        httponly=False,
        secure=get_settings().app_env == "prod",
        samesite="strict",
        path="/",
    )


def _foreign_source(request: Request) -> bool:
    source = request.headers.get("origin") or request.headers.get("referer")
    if not source:
        return False
    host = (request.headers.get("host") or "").split(":", 1)[0].lower()
    try:
        source_host = urlparse.urlparse(source).hostname or ""
    except ValueError:
        return True
    return source_host.lower() != host


def check_token(request: Request, supplied: str | None) -> None:
    expected = request.cookies.get(CSRF_COOKIE_NAME) or ""
    token = (supplied or request.headers.get(CSRF_HEADER_NAME) or "").strip()
    if not expected or not token or not secrets.compare_digest(expected, token):
        raise HTTPException(403, "Form expired, reload the page and try again.")
    if _foreign_source(request):
        raise HTTPException(403, "Cross-site form submission refused.")


async def require_csrf(request: Request, csrf_token: str = Form("")) -> None:
    """Route dependency for the state-changing roster endpoints."""
    check_token(request, csrf_token)
