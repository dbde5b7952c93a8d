"""Authentication dependency helpers."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

from fastapi import Depends, HTTPException, Request, status
from starlette.responses import Response

from ...models.auth import Session
from ...services.session import (
    CookieMutation,
    RequestCookieJar,
    SessionResolver,
    apply_cookie_mutations,
)
from ...services.supabase import SupabaseClient, get_supabase_client

logger = logging.getLogger(__name__)

_UNRESOLVED = object()
PENDING_MUTATIONS_ATTR = "pending_cookie_mutations"


def _unauthorized(message: str, error: str = "unauthorized") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail={"error": error, "message": message},
    )


@dataclass
class AuthContext:
    """Context extracted from the session cookie."""

    user_id: str
    access_token: str
    session: Session


def get_session_resolver(
    client: SupabaseClient = Depends(get_supabase_client),
) -> SessionResolver:
    return SessionResolver(client)


def pending_cookie_mutations(request: Request) -> List[CookieMutation]:
    return list(getattr(request.state, PENDING_MUTATIONS_ATTR, []))


def apply_pending_cookie_mutations(request: Request, response: Response) -> Response:
    """
    Write cookie mutations queued during the request onto ``response``.

    Cookies the route already set on the response win over queued writes.
    """
    mutations = pending_cookie_mutations(request)
    if not mutations:
        return response
    already_set = {
        value.decode("latin-1").split("=", 1)[0]
        for key, value in response.raw_headers
        if key.lower() == b"set-cookie"
    }
    return apply_cookie_mutations(
        response, [m for m in mutations if m.name not in already_set]
    )


async def get_optional_session(
    request: Request,
    resolver: SessionResolver = Depends(get_session_resolver),
) -> Optional[Session]:
    """
    Resolve the session for API routes.

    Reuses the gate's lookup when it already ran for this request. Cookie
    writes from a token refresh are queued on ``request.state``; the session
    middleware applies them to whatever response the route returns.
    """
    cached = getattr(request.state, "session", _UNRESOLVED)
    if cached is not _UNRESOLVED:
        return cached

    try:
        session, mutations = await resolver.get_current_session(
            RequestCookieJar(request.cookies)
        )
    except Exception:
        logger.exception("Session lookup failed; treating request as signed out")
        session, mutations = None, []

    setattr(
        request.state, PENDING_MUTATIONS_ATTR, pending_cookie_mutations(request) + mutations
    )
    request.state.session = session
    return session


def get_auth_context(
    session: Optional[Session] = Depends(get_optional_session),
) -> AuthContext:
    """
    Require a signed-in user.

    Raises HTTPException if there is no usable session.
    """
    if session is None:
        raise _unauthorized("Sign in required")
    if not session.user_id:
        raise _unauthorized("Session is missing a user", error="invalid_session")
    return AuthContext(user_id=session.user_id, access_token=session.access_token, session=session)


__all__ = [
    "AuthContext",
    "apply_pending_cookie_mutations",
    "get_auth_context",
    "get_optional_session",
    "get_session_resolver",
    "pending_cookie_mutations",
]
