import time

import pytest

from backend.mindit.models.auth import Session
from backend.mindit.services import config as config_module
from backend.mindit.services.config import AppConfig
from backend.mindit.services.supabase import reset_supabase_client


@pytest.fixture(autouse=True)
def restore_config_cache():
    """
    Ensure configuration and the shared backend client are rebuilt between tests.
    """
    config_module.get_config.cache_clear()
    reset_supabase_client()
    yield
    config_module.get_config.cache_clear()
    reset_supabase_client()


@pytest.fixture
def backend_config() -> AppConfig:
    return AppConfig(
        supabase_url="https://abcd1234.supabase.co",
        supabase_anon_key="anon-key",
        exa_api_key="exa-test-key",
    )


@pytest.fixture
def make_session():
    """Factory for sessions that expire ``expires_in`` seconds from now."""

    def _make(expires_in: int = 3600, user_id: str = "user-1", **overrides) -> Session:
        data = {
            "access_token": f"access-{user_id}",
            "refresh_token": f"refresh-{user_id}",
            "expires_at": int(time.time()) + expires_in,
            "user": {"id": user_id, "email": f"{user_id}@example.com"},
        }
        data.update(overrides)
        return Session(**data)

    return _make
