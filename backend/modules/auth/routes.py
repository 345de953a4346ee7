"""
Authentication endpoints.

Google OAuth login (authorization-code flow with PKCE), logout, and the
page users land on when their email domain is not authorized.
"""

import logging
import secrets
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import RedirectResponse
from pydantic import BaseModel

from api.dependencies import get_app_settings, get_auth_service
from api.middleware.auth import (
    clear_session_cookie,
    get_current_session,
    restricted_url,
    set_session_cookie,
)
from shared.config import Settings

from .exceptions import OAuthStateMismatchError, RevokedAccessError
from .interfaces import IAuthService
from .models import Session

logger = logging.getLogger(__name__)

OAUTH_STATE_COOKIE = "google_oauth_state"
CODE_VERIFIER_COOKIE = "google_code_verifier"

router = APIRouter()


class RestrictedResponse(BaseModel):
    """Shown when a user's email domain is not allowed in."""

    detail: str
    email: Optional[str] = None


def _clear_oauth_cookies(response: RedirectResponse) -> None:
    response.delete_cookie(OAUTH_STATE_COOKIE, path="/")
    response.delete_cookie(CODE_VERIFIER_COOKIE, path="/")


@router.get("/auth/google")
async def login_with_google(
    settings: Settings = Depends(get_app_settings),
    service: IAuthService = Depends(get_auth_service),
) -> RedirectResponse:
    """
    Start the Google login flow.

    The state and PKCE verifier are kept in short-lived httponly cookies
    and checked again on the callback.
    """
    auth_request = service.identity.create_authorization_request()
    response = RedirectResponse(auth_request.url, status_code=302)
    for key, value in (
        (OAUTH_STATE_COOKIE, auth_request.state),
        (CODE_VERIFIER_COOKIE, auth_request.code_verifier),
    ):
        response.set_cookie(
            key=key,
            value=value,
            max_age=settings.oauth_state_ttl_seconds,
            path="/",
            httponly=True,
            secure=not settings.is_development,
            samesite="lax",
        )
    return response


@router.get("/auth/google/callback")
async def google_callback(
    request: Request,
    code: Optional[str] = Query(default=None),
    state: Optional[str] = Query(default=None),
    settings: Settings = Depends(get_app_settings),
    service: IAuthService = Depends(get_auth_service),
) -> RedirectResponse:
    """
    Complete the Google login flow and open a session.
    """
    stored_state = request.cookies.get(OAUTH_STATE_COOKIE)
    code_verifier = request.cookies.get(CODE_VERIFIER_COOKIE)

    if not code or not state or not stored_state or not code_verifier:
        raise OAuthStateMismatchError()
    if not secrets.compare_digest(state, stored_state):
        raise OAuthStateMismatchError()

    try:
        resolved = await service.login(code, code_verifier)
    except RevokedAccessError as e:
        response = RedirectResponse(restricted_url(e.email), status_code=302)
        _clear_oauth_cookies(response)
        return response

    logger.info(f"User {resolved.user.id} logged in")
    response = RedirectResponse("/", status_code=302)
    set_session_cookie(response, resolved.session, settings)
    _clear_oauth_cookies(response)
    return response


@router.post("/auth/logout")
async def logout(
    session: Optional[Session] = Depends(get_current_session),
    settings: Settings = Depends(get_app_settings),
    service: IAuthService = Depends(get_auth_service),
) -> RedirectResponse:
    """
    End the current session.

    Anonymous logouts still clear the cookie and redirect.
    """
    if session is not None:
        await service.invalidate_session(session.id)

    response = RedirectResponse("/", status_code=302)
    clear_session_cookie(response, settings)
    return response


@router.get("/restricted", response_model=RestrictedResponse)
async def restricted(email: Optional[str] = Query(default=None)) -> RestrictedResponse:
    return RestrictedResponse(
        detail="Access is restricted to authorized email domains",
        email=email,
    )
