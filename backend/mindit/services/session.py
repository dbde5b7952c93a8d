"""Session lookup from request cookies.

The auth backend keeps its session in a cookie named ``sb-<project-ref>-auth-token``.
The value is the JSON session (optionally ``base64-`` prefixed, URL-safe base64)
and is split into ``<name>.0``, ``<name>.1``, ... chunks when it grows past the
browser's per-cookie limit.

Looking a session up may refresh an expired access token, which rewrites the
cookie. Those writes are not applied to any response here; they are returned as
``CookieMutation`` values and the caller applies them with
``apply_cookie_mutations``.
"""

from __future__ import annotations

import base64
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Protocol, Tuple

import httpx
from pydantic import ValidationError
from starlette.responses import Response

from ..models.auth import Session
from .supabase import SupabaseClient, SupabaseConfigError, SupabaseError

logger = logging.getLogger(__name__)

BASE64_PREFIX = "base64-"
MAX_CHUNK_SIZE = 3180
MAX_CHUNKS = 16
EXPIRY_MARGIN_SECONDS = 10
REMEMBER_ME_COOKIE = "supabase-remember-me"
REMEMBER_ME_MAX_AGE = 30 * 24 * 60 * 60
DEFAULT_MAX_AGE = 400 * 24 * 60 * 60
DEFAULT_COOKIE_OPTIONS: Dict[str, Any] = {"path": "/", "samesite": "lax"}

_RESPONSE_COOKIE_KEYS = {"max_age", "expires", "path", "domain", "secure", "httponly", "samesite"}


class SessionLookupError(Exception):
    """The auth backend could not be reached to validate or refresh a session."""


@dataclass(frozen=True)
class CookieMutation:
    """A cookie write that should be applied to the outgoing response."""

    name: str
    value: str
    options: Dict[str, Any] = field(default_factory=dict)

    @property
    def removed(self) -> bool:
        return self.value == "" and self.options.get("max_age") == 0


class CookieJar(Protocol):
    def get(self, name: str) -> Optional[str]: ...

    def set(self, name: str, value: str, options: Optional[Dict[str, Any]] = None) -> None: ...

    def remove(self, name: str, options: Optional[Dict[str, Any]] = None) -> None: ...


class RequestCookieJar:
    """Cookie view over an incoming request; writes update the view only."""

    def __init__(self, cookies: Mapping[str, str]) -> None:
        self._cookies = dict(cookies)

    def get(self, name: str) -> Optional[str]:
        return self._cookies.get(name)

    def set(self, name: str, value: str, options: Optional[Dict[str, Any]] = None) -> None:
        self._cookies[name] = value

    def remove(self, name: str, options: Optional[Dict[str, Any]] = None) -> None:
        self._cookies.pop(name, None)


class CookieRecorder:
    """Wrap a jar and record every write as a ``CookieMutation``."""

    def __init__(self, jar: CookieJar) -> None:
        self.jar = jar
        self.mutations: List[CookieMutation] = []

    def get(self, name: str) -> Optional[str]:
        return self.jar.get(name)

    def set(self, name: str, value: str, options: Optional[Dict[str, Any]] = None) -> None:
        self.jar.set(name, value, options)
        self.mutations.append(CookieMutation(name, value, dict(options or {})))

    def remove(self, name: str, options: Optional[Dict[str, Any]] = None) -> None:
        self.jar.remove(name, options)
        self.mutations.append(CookieMutation(name, "", {**(options or {}), "max_age": 0}))


def _b64decode(value: str) -> bytes:
    padded = value + "=" * (-len(value) % 4)
    return base64.urlsafe_b64decode(padded)


def encode_session_cookie(session: Session) -> str:
    raw = json.dumps(session.model_dump(mode="json"), separators=(",", ":"))
    encoded = base64.urlsafe_b64encode(raw.encode("utf-8")).decode("ascii").rstrip("=")
    return BASE64_PREFIX + encoded


def decode_session_cookie(value: str) -> Session:
    """Parse a cookie value into a ``Session``; raises ``ValueError`` when malformed."""
    try:
        if value.startswith(BASE64_PREFIX):
            value = _b64decode(value[len(BASE64_PREFIX):]).decode("utf-8")
        data = json.loads(value)
    except (ValueError, UnicodeDecodeError) as exc:
        raise ValueError(f"Malformed session cookie: {exc}") from exc

    # Older clients stored [access_token, refresh_token, ...] arrays.
    if isinstance(data, list) and data:
        data = {"access_token": data[0], "refresh_token": data[1] if len(data) > 1 else None}
    if not isinstance(data, dict):
        raise ValueError("Malformed session cookie: expected an object")
    try:
        return Session.model_validate(data)
    except ValidationError as exc:
        raise ValueError(f"Malformed session cookie: {exc}") from exc


def read_session_cookie(jar: CookieJar, name: str) -> Optional[str]:
    """Return the cookie value, reassembling chunks when needed."""
    value = jar.get(name)
    if value:
        return value
    chunks: List[str] = []
    for index in range(MAX_CHUNKS):
        chunk = jar.get(f"{name}.{index}")
        if chunk is None:
            break
        chunks.append(chunk)
    return "".join(chunks) or None


def clear_session_cookie(jar: CookieJar, name: str) -> None:
    if jar.get(name) is not None:
        jar.remove(name, dict(DEFAULT_COOKIE_OPTIONS))
    for index in range(MAX_CHUNKS):
        chunk_name = f"{name}.{index}"
        if jar.get(chunk_name) is None:
            break
        jar.remove(chunk_name, dict(DEFAULT_COOKIE_OPTIONS))


def write_session_cookie(
    jar: CookieJar, name: str, session: Session, *, max_age: int = DEFAULT_MAX_AGE
) -> None:
    value = encode_session_cookie(session)
    options = {**DEFAULT_COOKIE_OPTIONS, "max_age": max_age}
    if len(value) <= MAX_CHUNK_SIZE:
        chunks = [value]
        jar.set(name, value, dict(options))
    else:
        chunks = [value[i:i + MAX_CHUNK_SIZE] for i in range(0, len(value), MAX_CHUNK_SIZE)]
        if jar.get(name) is not None:
            jar.remove(name, dict(DEFAULT_COOKIE_OPTIONS))
        for index, chunk in enumerate(chunks):
            jar.set(f"{name}.{index}", chunk, dict(options))

    # Drop stale chunks left over from a longer previous value.
    first_stale = 0 if len(chunks) == 1 else len(chunks)
    for index in range(first_stale, MAX_CHUNKS):
        chunk_name = f"{name}.{index}"
        if jar.get(chunk_name) is None:
            break
        jar.remove(chunk_name, dict(DEFAULT_COOKIE_OPTIONS))


def session_max_age(jar: CookieJar) -> int:
    return REMEMBER_ME_MAX_AGE if jar.get(REMEMBER_ME_COOKIE) else DEFAULT_MAX_AGE


def apply_cookie_mutations(response: Response, mutations: List[CookieMutation]) -> Response:
    """Write recorded cookie mutations onto ``response``."""
    for mutation in mutations:
        options = {k: v for k, v in mutation.options.items() if k in _RESPONSE_COOKIE_KEYS}
        response.set_cookie(mutation.name, mutation.value, **options)
    return response


class SessionResolver:
    """Resolve the current session from a cookie jar via the auth backend."""

    def __init__(self, client: SupabaseClient, *, cookie_name: Optional[str] = None) -> None:
        self.client = client
        self.cookie_name = cookie_name or client.config.auth_cookie_name

    async def get_current_session(
        self, jar: CookieJar
    ) -> Tuple[Optional[Session], List[CookieMutation]]:
        """
        Return the session (or None) and the cookie writes the lookup produced.

        Raises SessionLookupError when a refresh is needed but the backend is
        unreachable or unconfigured.
        """
        recorder = CookieRecorder(jar)
        raw = read_session_cookie(recorder, self.cookie_name)
        if raw is None:
            return None, []

        try:
            session = decode_session_cookie(raw)
        except ValueError as exc:
            logger.warning("Discarding unreadable session cookie: %s", exc)
            clear_session_cookie(recorder, self.cookie_name)
            return None, recorder.mutations

        if not session.expires_within(EXPIRY_MARGIN_SECONDS):
            return session, recorder.mutations

        if not session.refresh_token:
            clear_session_cookie(recorder, self.cookie_name)
            return None, recorder.mutations

        try:
            refreshed = await self.client.refresh_session(session.refresh_token)
        except SupabaseError as exc:
            if exc.status_code >= 500:
                raise SessionLookupError(f"Session refresh failed: {exc.message}") from exc
            logger.info(
                "Session refresh rejected",
                extra={"status": exc.status_code, "reason": exc.message},
            )
            clear_session_cookie(recorder, self.cookie_name)
            return None, recorder.mutations
        except (SupabaseConfigError, httpx.HTTPError) as exc:
            raise SessionLookupError(f"Session refresh failed: {exc}") from exc

        if not refreshed.user:
            refreshed = refreshed.model_copy(update={"user": session.user})
        write_session_cookie(
            recorder, self.cookie_name, refreshed, max_age=session_max_age(jar)
        )
        logger.debug("Session refreshed", extra={"user_id": refreshed.user_id})
        return refreshed, recorder.mutations


__all__ = [
    "CookieJar",
    "CookieMutation",
    "CookieRecorder",
    "RequestCookieJar",
    "SessionLookupError",
    "SessionResolver",
    "apply_cookie_mutations",
    "clear_session_cookie",
    "decode_session_cookie",
    "encode_session_cookie",
    "read_session_cookie",
    "write_session_cookie",
    "REMEMBER_ME_COOKIE",
    "REMEMBER_ME_MAX_AGE",
]
