"""Authentication models."""

from __future__ import annotations

import time
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class Session(BaseModel):
    """Session material issued by the auth backend and stored in a cookie."""

    access_token: str = Field(..., min_length=1)
    refresh_token: Optional[str] = None
    token_type: str = Field("bearer")
    expires_at: Optional[int] = Field(None, description="Unix timestamp of access token expiry")
    user: Dict[str, Any] = Field(default_factory=dict, description="Opaque user record")

    @property
    def user_id(self) -> Optional[str]:
        return self.user.get("id")

    @property
    def email(self) -> Optional[str]:
        return self.user.get("email")

    def expires_within(self, seconds: int) -> bool:
        """True when the access token has less than ``seconds`` of life left."""
        if self.expires_at is None:
            return False
        return self.expires_at - int(time.time()) < seconds

    @classmethod
    def from_token_response(cls, data: Dict[str, Any]) -> "Session":
        """Build a session from an auth ``/token`` response body."""
        expires_at = data.get("expires_at")
        if expires_at is None and data.get("expires_in") is not None:
            expires_at = int(time.time()) + int(data["expires_in"])
        return cls(
            access_token=data["access_token"],
            refresh_token=data.get("refresh_token"),
            token_type=data.get("token_type") or "bearer",
            expires_at=expires_at,
            user=data.get("user") or {},
        )


class SessionUser(BaseModel):
    """Public view of the signed-in user."""

    user_id: str
    email: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)


__all__ = ["Session", "SessionUser"]
