import pytest

from backend.mindit.services import config as config_module
from backend.mindit.services.config import AppConfig, DEFAULT_EXA_API_URL


def test_get_config_reads_supabase_settings(monkeypatch) -> None:
    monkeypatch.setenv("SUPABASE_URL", "https://abcd1234.supabase.co/")
    monkeypatch.setenv("SUPABASE_ANON_KEY", "anon-key")

    cfg = config_module.reload_config()

    assert cfg.supabase_url == "https://abcd1234.supabase.co"
    assert cfg.supabase_project_ref == "abcd1234"
    assert cfg.auth_cookie_name == "sb-abcd1234-auth-token"


def test_get_config_falls_back_to_public_variable_names(monkeypatch) -> None:
    monkeypatch.delenv("SUPABASE_URL", raising=False)
    monkeypatch.delenv("SUPABASE_ANON_KEY", raising=False)
    monkeypatch.setenv("NEXT_PUBLIC_SUPABASE_URL", "https://xyz.supabase.co")
    monkeypatch.setenv("NEXT_PUBLIC_SUPABASE_ANON_KEY", "public-anon")

    cfg = config_module.reload_config()

    assert cfg.supabase_url == "https://xyz.supabase.co"
    assert cfg.supabase_anon_key == "public-anon"


@pytest.mark.parametrize("value", ["", "   ", "your_exa_api_key_here"])
def test_placeholder_exa_key_counts_as_missing(monkeypatch, value: str) -> None:
    monkeypatch.setenv("EXA_API_KEY", value)

    cfg = config_module.reload_config()

    assert cfg.exa_api_key is None
    assert cfg.exa_api_url == DEFAULT_EXA_API_URL


def test_environment_controls_development_flag(monkeypatch) -> None:
    monkeypatch.setenv("ENVIRONMENT", "development")
    assert config_module.reload_config().is_development

    monkeypatch.setenv("ENVIRONMENT", "production")
    assert not config_module.reload_config().is_development


def test_rejects_non_http_supabase_url() -> None:
    with pytest.raises(ValueError):
        AppConfig(supabase_url="ftp://example.com")


def test_cors_origins_from_env(monkeypatch) -> None:
    monkeypatch.setenv("CORS_ORIGINS", "https://a.example, https://b.example")

    cfg = config_module.reload_config()

    assert cfg.cors_origins == ("https://a.example", "https://b.example")
