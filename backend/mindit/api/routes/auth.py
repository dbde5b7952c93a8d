"""Email/password authentication routes backed by the auth service."""

from __future__ import annotations

import logging

import httpx
from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import JSONResponse, RedirectResponse

from ...models.auth import SessionUser
from ...services.config import AppConfig, get_config
from ...services.session import (
    REMEMBER_ME_COOKIE,
    REMEMBER_ME_MAX_AGE,
    CookieRecorder,
    RequestCookieJar,
    apply_cookie_mutations,
    clear_session_cookie,
    session_max_age,
    write_session_cookie,
)
from ...services.supabase import (
    SupabaseClient,
    SupabaseConfigError,
    SupabaseError,
    get_supabase_client,
)
from ..middleware import AuthContext, get_auth_context, get_optional_session
from ..middleware.auth_middleware import PENDING_MUTATIONS_ATTR

logger = logging.getLogger(__name__)

router = APIRouter()

SIGNUP_EMAIL_COOKIE = "signUpEmail"


@router.post("/auth/signin")
async def sign_in(
    request: Request,
    email: str = Form(...),
    password: str = Form(...),
    remember: bool = Form(False),
    client: SupabaseClient = Depends(get_supabase_client),
):
    """Sign in with email and password and store the session cookie."""
    try:
        session = await client.sign_in_with_password(email, password)
    except SupabaseError as exc:
        logger.info("Sign-in rejected", extra={"status": exc.status_code, "reason": exc.message})
        return JSONResponse({"error": exc.message}, status_code=400)

    jar = CookieRecorder(RequestCookieJar(request.cookies))
    if remember:
        jar.set(REMEMBER_ME_COOKIE, "true", {"path": "/", "max_age": REMEMBER_ME_MAX_AGE})
    elif jar.get(REMEMBER_ME_COOKIE) is not None:
        jar.remove(REMEMBER_ME_COOKIE, {"path": "/"})

    write_session_cookie(
        jar, client.config.auth_cookie_name, session, max_age=session_max_age(jar)
    )
    logger.info("User signed in", extra={"user_id": session.user_id, "remember": remember})
    return apply_cookie_mutations(JSONResponse({"success": True}), jar.mutations)


@router.post("/auth/signup")
async def sign_up(
    email: str = Form(...),
    password: str = Form(...),
    client: SupabaseClient = Depends(get_supabase_client),
    config: AppConfig = Depends(get_config),
):
    """Register a new account; the backend sends the confirmation email."""
    try:
        await client.sign_up(
            email, password, redirect_to=f"{config.site_url.rstrip('/')}/auth/callback"
        )
    except SupabaseError as exc:
        logger.info("Sign-up rejected", extra={"status": exc.status_code, "reason": exc.message})
        return JSONResponse({"error": exc.message}, status_code=400)

    response = JSONResponse({"success": True})
    # Read back by the verify-email page.
    response.set_cookie(SIGNUP_EMAIL_COOKIE, email, path="/", samesite="lax")
    return response


@router.post("/auth/signout")
async def sign_out(
    request: Request,
    session=Depends(get_optional_session),
    client: SupabaseClient = Depends(get_supabase_client),
):
    """Revoke the session (best effort), clear cookies and go home."""
    if session is not None:
        try:
            await client.sign_out(session.access_token)
        except (SupabaseError, SupabaseConfigError, httpx.HTTPError) as exc:
            logger.warning("Remote sign-out failed: %s", exc, extra={"user_id": session.user_id})

    # A refresh during lookup must not resurrect the session being ended.
    setattr(request.state, PENDING_MUTATIONS_ATTR, [])

    jar = CookieRecorder(RequestCookieJar(request.cookies))
    clear_session_cookie(jar, client.config.auth_cookie_name)
    if jar.get(REMEMBER_ME_COOKIE) is not None:
        jar.remove(REMEMBER_ME_COOKIE, {"path": "/"})
    return apply_cookie_mutations(RedirectResponse(url="/", status_code=303), jar.mutations)


@router.get("/api/me", response_model=SessionUser)
async def get_current_user(auth: AuthContext = Depends(get_auth_context)):
    """Return profile metadata for the signed-in user."""
    user = auth.session.user
    return SessionUser(
        user_id=auth.user_id,
        email=user.get("email"),
        metadata=user.get("user_metadata") or {},
    )


__all__ = ["router", "SIGNUP_EMAIL_COOKIE"]
