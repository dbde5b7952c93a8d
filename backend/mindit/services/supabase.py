"""Thin async client for the managed auth/database/storage backend (Supabase REST)."""

from __future__ import annotations

import logging
import threading
from typing import Any, Dict, List, Mapping, Optional

import httpx

from ..models.auth import Session
from .config import AppConfig, get_config

logger = logging.getLogger(__name__)


class SupabaseConfigError(Exception):
    """Raised when the backend URL or API key is not configured."""


class SupabaseError(Exception):
    """Non-success response from the backend."""

    def __init__(
        self,
        status_code: int,
        message: str,
        payload: Optional[Any] = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.payload = payload


def _error_message(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return response.text[:200] or f"HTTP {response.status_code}"
    if isinstance(data, dict):
        for key in ("error_description", "msg", "message", "error"):
            value = data.get(key)
            if isinstance(value, str) and value:
                return value
    return f"HTTP {response.status_code}"


def _eq_filters(filters: Mapping[str, Any] | None) -> Dict[str, str]:
    params: Dict[str, str] = {}
    for column, value in (filters or {}).items():
        params[column] = "is.null" if value is None else f"eq.{value}"
    return params


class SupabaseClient:
    """Explicitly constructed backend client; one ``httpx.AsyncClient`` per call."""

    def __init__(
        self,
        config: AppConfig | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config or get_config()
        self.transport = transport

    @property
    def configured(self) -> bool:
        return bool(self.config.supabase_url and self.config.supabase_anon_key)

    def _require_base(self) -> str:
        if not self.configured:
            raise SupabaseConfigError("Supabase URL and anon key must be configured")
        return self.config.supabase_url  # type: ignore[return-value]

    def _headers(self, access_token: Optional[str] = None, *, service: bool = False) -> Dict[str, str]:
        api_key = self.config.supabase_anon_key
        if service and self.config.supabase_service_role_key:
            api_key = self.config.supabase_service_role_key
        bearer = access_token or api_key
        return {"apikey": api_key or "", "Authorization": f"Bearer {bearer}"}

    async def _request(
        self,
        method: str,
        path: str,
        *,
        access_token: Optional[str] = None,
        service: bool = False,
        json: Any = None,
        params: Optional[Mapping[str, str]] = None,
        content: Optional[bytes] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> httpx.Response:
        base_url = self._require_base()
        request_headers = self._headers(access_token, service=service)
        if headers:
            request_headers.update(headers)

        async with httpx.AsyncClient(
            base_url=base_url,
            timeout=self.config.http_timeout_seconds,
            transport=self.transport,
        ) as client:
            response = await client.request(
                method,
                path,
                headers=request_headers,
                json=json,
                params=params,
                content=content,
            )

        if response.status_code >= 400:
            message = _error_message(response)
            logger.warning(
                "Supabase request failed",
                extra={"method": method, "path": path, "status": response.status_code},
            )
            try:
                payload = response.json()
            except ValueError:
                payload = response.text
            raise SupabaseError(response.status_code, message, payload)
        return response

    # Auth

    async def sign_in_with_password(self, email: str, password: str) -> Session:
        response = await self._request(
            "POST",
            "/auth/v1/token",
            params={"grant_type": "password"},
            json={"email": email, "password": password},
        )
        return Session.from_token_response(response.json())

    async def sign_up(self, email: str, password: str, *, redirect_to: Optional[str] = None) -> Dict[str, Any]:
        params = {"redirect_to": redirect_to} if redirect_to else None
        response = await self._request(
            "POST",
            "/auth/v1/signup",
            params=params,
            json={"email": email, "password": password},
        )
        return response.json()

    async def refresh_session(self, refresh_token: str) -> Session:
        response = await self._request(
            "POST",
            "/auth/v1/token",
            params={"grant_type": "refresh_token"},
            json={"refresh_token": refresh_token},
        )
        return Session.from_token_response(response.json())

    async def sign_out(self, access_token: str) -> None:
        await self._request("POST", "/auth/v1/logout", access_token=access_token)

    # Rows

    async def select(
        self,
        table: str,
        *,
        access_token: str,
        filters: Mapping[str, Any] | None = None,
        order: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        params = {"select": "*", **_eq_filters(filters)}
        if order:
            params["order"] = order
        response = await self._request(
            "GET", f"/rest/v1/{table}", access_token=access_token, params=params
        )
        return response.json()

    async def insert(self, table: str, row: Dict[str, Any], *, access_token: str) -> Dict[str, Any]:
        response = await self._request(
            "POST",
            f"/rest/v1/{table}",
            access_token=access_token,
            json=row,
            headers={"Prefer": "return=representation"},
        )
        rows = response.json()
        return rows[0] if isinstance(rows, list) and rows else rows

    async def update(
        self,
        table: str,
        values: Dict[str, Any],
        *,
        access_token: str,
        filters: Mapping[str, Any],
    ) -> List[Dict[str, Any]]:
        response = await self._request(
            "PATCH",
            f"/rest/v1/{table}",
            access_token=access_token,
            params=_eq_filters(filters),
            json=values,
            headers={"Prefer": "return=representation"},
        )
        return response.json()

    async def delete(
        self, table: str, *, access_token: str, filters: Mapping[str, Any]
    ) -> List[Dict[str, Any]]:
        response = await self._request(
            "DELETE",
            f"/rest/v1/{table}",
            access_token=access_token,
            params=_eq_filters(filters),
            headers={"Prefer": "return=representation"},
        )
        return response.json()

    async def rpc(self, function: str, params: Dict[str, Any], *, access_token: Optional[str] = None) -> Any:
        response = await self._request(
            "POST",
            f"/rest/v1/rpc/{function}",
            access_token=access_token,
            service=access_token is None,
            json=params,
        )
        return response.json() if response.content else None

    # Storage

    async def list_buckets(self, *, access_token: Optional[str] = None) -> List[Dict[str, Any]]:
        response = await self._request(
            "GET", "/storage/v1/bucket", access_token=access_token, service=access_token is None
        )
        return response.json()

    async def create_bucket(
        self,
        name: str,
        *,
        public: bool = False,
        file_size_limit: Optional[int] = None,
        access_token: Optional[str] = None,
    ) -> Dict[str, Any]:
        body: Dict[str, Any] = {"id": name, "name": name, "public": public}
        if file_size_limit is not None:
            body["file_size_limit"] = file_size_limit
        response = await self._request(
            "POST",
            "/storage/v1/bucket",
            access_token=access_token,
            service=access_token is None,
            json=body,
        )
        return response.json()

    async def upload_object(
        self,
        bucket: str,
        path: str,
        data: bytes,
        *,
        content_type: str,
        upsert: bool = False,
        access_token: Optional[str] = None,
    ) -> str:
        """Upload ``data`` and return its path inside the bucket."""
        await self._request(
            "POST",
            f"/storage/v1/object/{bucket}/{path}",
            access_token=access_token,
            service=access_token is None,
            content=data,
            headers={"Content-Type": content_type, "x-upsert": "true" if upsert else "false"},
        )
        return path

    def public_url(self, bucket: str, path: str) -> str:
        return f"{self._require_base()}/storage/v1/object/public/{bucket}/{path}"


_client: SupabaseClient | None = None
_client_lock = threading.Lock()


def get_supabase_client() -> SupabaseClient:
    """Return the shared client, constructing it once."""
    global _client
    if _client is None:
        with _client_lock:
            if _client is None:
                _client = SupabaseClient(get_config())
    return _client


def reset_supabase_client() -> None:
    """Drop the shared client so the next call rebuilds it from fresh config."""
    global _client
    with _client_lock:
        _client = None


__all__ = [
    "SupabaseClient",
    "SupabaseConfigError",
    "SupabaseError",
    "get_supabase_client",
    "reset_supabase_client",
]
