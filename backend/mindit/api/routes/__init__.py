"""HTTP API route handlers."""

from . import auth, documents, exa, notes, spaces, storage, summarize, system

__all__ = ["auth", "documents", "exa", "notes", "spaces", "storage", "summarize", "system"]
