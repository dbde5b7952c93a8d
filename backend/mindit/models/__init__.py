"""Pydantic models for data validation and serialization."""

from .auth import Session, SessionUser
from .note import (
    AVAILABLE_ICONS,
    Note,
    NoteCreate,
    NoteUpdate,
    Space,
    SpaceCreate,
    SpaceUpdate,
)
from .search import ExaCheckResponse, ExaSearchResponse, ExaSearchResult

__all__ = [
    "Session",
    "SessionUser",
    "AVAILABLE_ICONS",
    "Note",
    "NoteCreate",
    "NoteUpdate",
    "Space",
    "SpaceCreate",
    "SpaceUpdate",
    "ExaSearchResult",
    "ExaSearchResponse",
    "ExaCheckResponse",
]
