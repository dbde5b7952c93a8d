"""Note and space storage on top of the backend's row API."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from ..models.note import Note, NoteCreate, NoteUpdate, Space, SpaceCreate, SpaceUpdate
from .supabase import SupabaseClient

logger = logging.getLogger(__name__)

NOTES_TABLE = "notes"
SPACES_TABLE = "spaces"


class NotFoundError(Exception):
    """Row does not exist or is not owned by the user."""


class NotesService:
    """CRUD for a single user's notes and spaces.

    Every query is scoped by ``user_id`` and sent with the user's access token,
    so row-level security on the backend applies as well.
    """

    def __init__(self, client: SupabaseClient, *, user_id: str, access_token: str) -> None:
        self.client = client
        self.user_id = user_id
        self.access_token = access_token

    def _owned(self, **filters: Any) -> Dict[str, Any]:
        return {"user_id": self.user_id, **filters}

    # Spaces

    async def list_spaces(self) -> List[Space]:
        rows = await self.client.select(
            SPACES_TABLE,
            access_token=self.access_token,
            filters=self._owned(),
            order="created_at.asc",
        )
        return [Space.model_validate(row) for row in rows]

    async def create_space(self, payload: SpaceCreate) -> Space:
        row = await self.client.insert(
            SPACES_TABLE,
            {**payload.model_dump(), "user_id": self.user_id},
            access_token=self.access_token,
        )
        logger.info("Created space", extra={"user_id": self.user_id, "space_id": row.get("id")})
        return Space.model_validate(row)

    async def update_space(self, space_id: str, payload: SpaceUpdate) -> Space:
        values = payload.model_dump(exclude_unset=True)
        if not values:
            return await self._get_space(space_id)
        rows = await self.client.update(
            SPACES_TABLE,
            values,
            access_token=self.access_token,
            filters=self._owned(id=space_id),
        )
        if not rows:
            raise NotFoundError(f"Space '{space_id}' not found")
        return Space.model_validate(rows[0])

    async def delete_space(self, space_id: str) -> None:
        rows = await self.client.delete(
            SPACES_TABLE, access_token=self.access_token, filters=self._owned(id=space_id)
        )
        if not rows:
            raise NotFoundError(f"Space '{space_id}' not found")
        logger.info("Deleted space", extra={"user_id": self.user_id, "space_id": space_id})

    async def _get_space(self, space_id: str) -> Space:
        rows = await self.client.select(
            SPACES_TABLE, access_token=self.access_token, filters=self._owned(id=space_id)
        )
        if not rows:
            raise NotFoundError(f"Space '{space_id}' not found")
        return Space.model_validate(rows[0])

    # Notes

    async def list_notes(self, space_id: Optional[str] = None) -> List[Note]:
        filters = self._owned(space_id=space_id) if space_id else self._owned()
        rows = await self.client.select(
            NOTES_TABLE,
            access_token=self.access_token,
            filters=filters,
            order="created_at.desc",
        )
        return [Note.model_validate(row) for row in rows]

    async def get_note(self, note_id: str) -> Note:
        rows = await self.client.select(
            NOTES_TABLE, access_token=self.access_token, filters=self._owned(id=note_id)
        )
        if not rows:
            raise NotFoundError(f"Note '{note_id}' not found")
        return Note.model_validate(rows[0])

    async def create_note(self, payload: NoteCreate) -> Note:
        if payload.space_id:
            await self._get_space(payload.space_id)
        row = await self.client.insert(
            NOTES_TABLE,
            {**payload.model_dump(), "user_id": self.user_id},
            access_token=self.access_token,
        )
        logger.info("Created note", extra={"user_id": self.user_id, "note_id": row.get("id")})
        return Note.model_validate(row)

    async def update_note(self, note_id: str, payload: NoteUpdate) -> Note:
        values = payload.model_dump(exclude_unset=True)
        if not values:
            return await self.get_note(note_id)
        if values.get("space_id"):
            await self._get_space(values["space_id"])
        rows = await self.client.update(
            NOTES_TABLE,
            values,
            access_token=self.access_token,
            filters=self._owned(id=note_id),
        )
        if not rows:
            raise NotFoundError(f"Note '{note_id}' not found")
        return Note.model_validate(rows[0])

    async def delete_note(self, note_id: str) -> None:
        rows = await self.client.delete(
            NOTES_TABLE, access_token=self.access_token, filters=self._owned(id=note_id)
        )
        if not rows:
            raise NotFoundError(f"Note '{note_id}' not found")
        logger.info("Deleted note", extra={"user_id": self.user_id, "note_id": note_id})


__all__ = ["NotesService", "NotFoundError", "NOTES_TABLE", "SPACES_TABLE"]
