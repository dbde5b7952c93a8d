"""FastAPI middleware for sessions, routing and error handling."""

from .auth_middleware import (
    AuthContext,
    apply_pending_cookie_mutations,
    get_auth_context,
    get_optional_session,
    get_session_resolver,
    pending_cookie_mutations,
)
from .error_handlers import (
    backend_exception_handler,
    backend_unavailable_handler,
    build_envelope,
    error_response,
    http_exception_handler,
    internal_exception_handler,
    register_error_handlers,
    validation_exception_handler,
)
from .session_gate import GateDecision, SessionGateMiddleware, decide_route, matches_gate

__all__ = [
    "AuthContext",
    "get_auth_context",
    "get_optional_session",
    "get_session_resolver",
    "apply_pending_cookie_mutations",
    "pending_cookie_mutations",
    "GateDecision",
    "SessionGateMiddleware",
    "decide_route",
    "matches_gate",
    "register_error_handlers",
    "validation_exception_handler",
    "http_exception_handler",
    "backend_exception_handler",
    "backend_unavailable_handler",
    "build_envelope",
    "error_response",
    "internal_exception_handler",
]
