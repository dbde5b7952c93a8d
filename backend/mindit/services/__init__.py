"""Service layer for business logic and external integrations."""

from .config import AppConfig, get_config, reload_config
from .exa import BadRequest, ConfigurationError, ExaService, SearchError, UpstreamFailure
from .notes import NotesService, NotFoundError
from .session import (
    CookieMutation,
    RequestCookieJar,
    SessionLookupError,
    SessionResolver,
    apply_cookie_mutations,
)
from .storage import StorageError, StorageService
from .summarizer import SummarizerService, SummaryError
from .supabase import (
    SupabaseClient,
    SupabaseConfigError,
    SupabaseError,
    get_supabase_client,
    reset_supabase_client,
)

__all__ = [
    "AppConfig",
    "get_config",
    "reload_config",
    "ExaService",
    "SearchError",
    "BadRequest",
    "ConfigurationError",
    "UpstreamFailure",
    "NotesService",
    "NotFoundError",
    "CookieMutation",
    "RequestCookieJar",
    "SessionLookupError",
    "SessionResolver",
    "apply_cookie_mutations",
    "StorageError",
    "StorageService",
    "SummarizerService",
    "SummaryError",
    "SupabaseClient",
    "SupabaseConfigError",
    "SupabaseError",
    "get_supabase_client",
    "reset_supabase_client",
]
