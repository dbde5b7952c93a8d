"""Per-request routing gate for page routes.

Signed-in visitors hitting ``/`` or ``/signin`` go to ``/dashboard``; signed-out
visitors hitting anything under ``/dashboard`` go to ``/signin``. Everything
else passes through untouched. Only ``/``, ``/signin`` and ``/dashboard/**``
reach the gate at all. For every other path the middleware only writes the
cookie updates that API dependencies queued while resolving the session.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import List, Optional, Tuple

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import RedirectResponse, Response
from starlette.types import ASGIApp

from ...models.auth import Session
from ...services.session import (
    CookieMutation,
    RequestCookieJar,
    SessionResolver,
    apply_cookie_mutations,
)
from ...services.supabase import get_supabase_client
from .auth_middleware import apply_pending_cookie_mutations

logger = logging.getLogger(__name__)

DASHBOARD_PATH = "/dashboard"
SIGNIN_PATH = "/signin"
SIGNED_OUT_ONLY_PATHS = frozenset({"/", SIGNIN_PATH})


class GateDecision(str, Enum):
    PASS = "pass"
    REDIRECT_DASHBOARD = "redirect_dashboard"
    REDIRECT_SIGNIN = "redirect_signin"


REDIRECT_TARGETS = {
    GateDecision.REDIRECT_DASHBOARD: DASHBOARD_PATH,
    GateDecision.REDIRECT_SIGNIN: SIGNIN_PATH,
}


def matches_gate(path: str) -> bool:
    """Route filter: ``/``, ``/signin``, ``/dashboard`` and anything below it."""
    return (
        path in SIGNED_OUT_ONLY_PATHS
        or path == DASHBOARD_PATH
        or path.startswith(DASHBOARD_PATH + "/")
    )


def decide_route(path: str, has_session: bool) -> GateDecision:
    """First matching rule wins."""
    if has_session and path in SIGNED_OUT_ONLY_PATHS:
        return GateDecision.REDIRECT_DASHBOARD
    if not has_session and path.startswith(DASHBOARD_PATH):
        return GateDecision.REDIRECT_SIGNIN
    return GateDecision.PASS


class SessionGateMiddleware(BaseHTTPMiddleware):
    """Redirect or pass through gated page requests based on session presence."""

    def __init__(self, app: ASGIApp, resolver: Optional[SessionResolver] = None) -> None:
        super().__init__(app)
        self._resolver = resolver

    @property
    def resolver(self) -> SessionResolver:
        if self._resolver is None:
            self._resolver = SessionResolver(get_supabase_client())
        return self._resolver

    async def _lookup(self, request: Request) -> Tuple[Optional[Session], List[CookieMutation]]:
        jar = RequestCookieJar(request.cookies)
        try:
            return await self.resolver.get_current_session(jar)
        except Exception:
            logger.exception(
                "Session lookup failed; treating request as signed out",
                extra={"path": request.url.path},
            )
            return None, []

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        path = request.url.path
        if not matches_gate(path):
            response = await call_next(request)
            return apply_pending_cookie_mutations(request, response)

        session, mutations = await self._lookup(request)
        request.state.session = session
        decision = decide_route(path, session is not None)

        if decision is GateDecision.PASS:
            response = await call_next(request)
        else:
            target = REDIRECT_TARGETS[decision]
            logger.info(
                "Session gate redirect",
                extra={"path": path, "target": target, "signed_in": session is not None},
            )
            response = RedirectResponse(
                url=str(request.url.replace(path=target, query="", fragment="")),
                status_code=307,
            )

        # Refreshed tokens must reach the browser whichever way the request went.
        return apply_cookie_mutations(response, mutations)


__all__ = [
    "GateDecision",
    "SessionGateMiddleware",
    "decide_route",
    "matches_gate",
]
