"""Note and space models mirroring the backend tables."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

AVAILABLE_ICONS: tuple[str, ...] = (
    "book",
    "bookmark",
    "briefcase",
    "code",
    "file-text",
    "folder",
    "heart",
    "home",
    "inbox",
    "lightbulb",
    "list",
    "music",
    "newspaper",
    "notebook",
    "pencil",
    "rocket",
    "school",
    "settings",
    "shapes",
    "star",
    "sticker",
    "target",
    "terminal",
    "trophy",
)


def _check_icon(value: Optional[str]) -> Optional[str]:
    if value is not None and value not in AVAILABLE_ICONS:
        raise ValueError(f"Unknown icon '{value}'")
    return value


class Space(BaseModel):
    """A named, colored group of notes."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "1b7c7d0e-3f7a-4a43-9a52-3c8f0f8a2d11",
                "created_at": "2025-01-15T10:30:00Z",
                "user_id": "9f0f3a52-5d0a-4e0f-b6a5-0f5c3f8e7d21",
                "name": "Research",
                "color": "#6366f1",
                "icon": "lightbulb",
            }
        }
    )

    id: str
    created_at: datetime
    user_id: str
    name: str
    color: str
    icon: str


class SpaceCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    color: str = Field(..., min_length=1, max_length=32)
    icon: str = Field("folder")

    @field_validator("icon")
    @classmethod
    def validate_icon(cls, value: Optional[str]) -> Optional[str]:
        return _check_icon(value)


class SpaceUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    color: Optional[str] = Field(None, min_length=1, max_length=32)
    icon: Optional[str] = None

    @field_validator("icon")
    @classmethod
    def validate_icon(cls, value: Optional[str]) -> Optional[str]:
        return _check_icon(value)


class Note(BaseModel):
    """A note row."""

    id: str
    created_at: datetime
    user_id: str
    space_id: Optional[str] = None
    title: str
    content: str


class NoteCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=500)
    content: str = Field("", max_length=1_048_576)
    space_id: Optional[str] = None


class NoteUpdate(BaseModel):
    """Partial update; only fields that were sent are written."""

    title: Optional[str] = Field(None, min_length=1, max_length=500)
    content: Optional[str] = Field(None, max_length=1_048_576)
    space_id: Optional[str] = None


__all__ = [
    "AVAILABLE_ICONS",
    "Note",
    "NoteCreate",
    "NoteUpdate",
    "Space",
    "SpaceCreate",
    "SpaceUpdate",
]
