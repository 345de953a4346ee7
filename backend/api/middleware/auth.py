"""
Session authentication middleware.

The authorization gate runs on every request: it resolves the session
cookie to a user, rotates the cookie when the session was renewed, and
re-checks the user's email domain against the allow-list so that
removing a domain takes effect on the very next request.
"""

import logging
from typing import Optional
from urllib.parse import quote

from fastapi import Depends, Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import RedirectResponse, Response

from modules.auth.exceptions import MissingSessionError
from modules.auth.models import Session
from shared.config import Settings
from shared.models import AuthenticatedUser

logger = logging.getLogger(__name__)

RESTRICTED_PATH = "/restricted"


def restricted_url(email: str) -> str:
    return f"{RESTRICTED_PATH}?email={quote(email)}"


def is_gate_exempt(path: str) -> bool:
    """Paths that must stay reachable after access is revoked."""
    return path.startswith("/auth/") or path == RESTRICTED_PATH


def set_session_cookie(response: Response, session: Session, settings: Settings) -> None:
    response.set_cookie(
        key=settings.session_cookie_name,
        value=session.id,
        expires=session.expires_at,
        path="/",
        httponly=True,
        secure=not settings.is_development,
        samesite="lax",
    )


def clear_session_cookie(response: Response, settings: Settings) -> None:
    response.delete_cookie(
        key=settings.session_cookie_name,
        path="/",
        httponly=True,
        secure=not settings.is_development,
        samesite="lax",
    )


def _sets_session_cookie(response: Response, settings: Settings) -> bool:
    prefix = f"{settings.session_cookie_name}="
    return any(
        value.startswith(prefix)
        for value in response.headers.getlist("set-cookie")
    )


class SessionAuthMiddleware(BaseHTTPMiddleware):
    """
    Authorization gate.

    Attaches `request.state.user` and `request.state.session` (both None
    when unauthenticated). Protected routes reject anonymous requests
    themselves through `get_current_user`.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        container = request.app.state.container
        settings: Settings = container.settings
        auth = container.auth

        request.state.user = None
        request.state.session = None

        session_id = request.cookies.get(settings.session_cookie_name)
        if not session_id:
            return await call_next(request)

        resolved = await auth.validate_session(session_id)
        if resolved is None:
            response = await call_next(request)
            if not _sets_session_cookie(response, settings):
                clear_session_cookie(response, settings)
            return response

        user = resolved.user
        if not auth.is_email_authorized(user.email):
            await auth.invalidate_session(resolved.session.id)
            logger.info(f"Revoked session for {user.email}: domain no longer authorized")
            if is_gate_exempt(request.url.path):
                response = await call_next(request)
            else:
                response = RedirectResponse(restricted_url(user.email), status_code=302)
            if not _sets_session_cookie(response, settings):
                clear_session_cookie(response, settings)
            return response

        request.state.user = user.to_authenticated_user()
        request.state.session = resolved.session

        response = await call_next(request)
        # Handlers that issue their own cookie (login, logout) take precedence
        if resolved.session.fresh and not _sets_session_cookie(response, settings):
            set_session_cookie(response, resolved.session, settings)
        return response


async def get_optional_user(request: Request) -> Optional[AuthenticatedUser]:
    """
    Dependency that returns the gate's user, or None.

    Use this for endpoints that work with or without authentication.
    """
    return getattr(request.state, "user", None)


async def get_current_user(
    user: Optional[AuthenticatedUser] = Depends(get_optional_user),
) -> AuthenticatedUser:
    """
    Dependency that requires authentication.

    Usage:
        @router.get("/protected")
        async def protected_route(user: AuthenticatedUser = Depends(get_current_user)):
            return {"user_id": user.id}
    """
    if user is None:
        raise MissingSessionError()
    return user


async def get_current_session(request: Request) -> Optional[Session]:
    return getattr(request.state, "session", None)
