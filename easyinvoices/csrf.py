"""
CSRF protection for the backend API

Double-submit pattern: the admin page posts the token it was issued as the
``csrfToken`` form field, and it must match the ``csrf_cookie`` cookie.
Set CSRF_ENABLED=false in environment to disable (local testing only).
"""

import logging
import secrets

from fastapi import Form, Request, Response

from . import config
from .errors import CsrfError

logger = logging.getLogger(__name__)

CSRF_COOKIE_NAME = "csrf_cookie"
CSRF_FIELD_NAME = "csrfToken"


def generate_csrf_token() -> str:
    """Generate a cryptographically secure CSRF token"""
    return secrets.token_urlsafe(32)


async def verify_csrf_token(request: Request, csrfToken: str = Form("")) -> None:  # noqa: N803
    """FastAPI dependency validating the posted token against the cookie"""
    if not config.CSRF_ENABLED:
        return

    csrf_cookie = request.cookies.get(CSRF_COOKIE_NAME)

    if not csrf_cookie:
        logger.warning(f"🚫 CSRF: Missing cookie for {request.method} {request.url.path}")
        raise CsrfError("CSRF token missing. Please refresh the page and try again.")

    if not csrfToken:
        logger.warning(f"🚫 CSRF: Missing token field for {request.method} {request.url.path}")
        raise CsrfError("CSRF token missing. Please refresh the page and try again.")

    # Constant-time comparison to prevent timing attacks
    if not secrets.compare_digest(csrf_cookie, csrfToken):
        logger.warning(f"🚫 CSRF: Token mismatch for {request.method} {request.url.path}")
        raise CsrfError("CSRF token invalid. Please refresh the page and try again.")


async def csrf_token_handler(request: Request, response: Response):
    """
    Return the current CSRF token, issuing a cookie when none exists yet.
    The admin page calls this once on load.
    """
    existing_token = request.cookies.get(CSRF_COOKIE_NAME)
    if existing_token:
        return {"csrf_token": existing_token}

    new_token = generate_csrf_token()
    response.set_cookie(
        key=CSRF_COOKIE_NAME,
        value=new_token,
        httponly=True,
        secure=request.url.scheme == "https",
        samesite="strict",
        max_age=86400,
        path="/",
    )
    return {"csrf_token": new_token}
