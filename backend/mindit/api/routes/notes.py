"""HTTP API routes for note operations."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from ...models.note import Note, NoteCreate, NoteUpdate
from ...services.notes import NotesService, NotFoundError
from ...services.supabase import SupabaseClient, get_supabase_client
from ..middleware import AuthContext, get_auth_context

router = APIRouter()


def get_notes_service(
    auth: AuthContext = Depends(get_auth_context),
    client: SupabaseClient = Depends(get_supabase_client),
) -> NotesService:
    return NotesService(client, user_id=auth.user_id, access_token=auth.access_token)


def _not_found(exc: NotFoundError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail={"error": "not_found", "message": str(exc)},
    )


@router.get("/api/notes", response_model=list[Note])
async def list_notes(
    space_id: Optional[str] = Query(None, description="Only notes in this space"),
    service: NotesService = Depends(get_notes_service),
):
    """List the user's notes, newest first."""
    return await service.list_notes(space_id=space_id)


@router.post("/api/notes", response_model=Note, status_code=201)
async def create_note(create: NoteCreate, service: NotesService = Depends(get_notes_service)):
    """Create a new note."""
    try:
        return await service.create_note(create)
    except NotFoundError as exc:
        raise _not_found(exc) from exc


@router.get("/api/notes/{note_id}", response_model=Note)
async def get_note(note_id: str, service: NotesService = Depends(get_notes_service)):
    """Get a specific note by id."""
    try:
        return await service.get_note(note_id)
    except NotFoundError as exc:
        raise _not_found(exc) from exc


@router.patch("/api/notes/{note_id}", response_model=Note)
async def update_note(
    note_id: str, update: NoteUpdate, service: NotesService = Depends(get_notes_service)
):
    """Update title, content or space of a note."""
    try:
        return await service.update_note(note_id, update)
    except NotFoundError as exc:
        raise _not_found(exc) from exc


@router.delete("/api/notes/{note_id}", status_code=204)
async def delete_note(note_id: str, service: NotesService = Depends(get_notes_service)):
    """Delete a note."""
    try:
        await service.delete_note(note_id)
    except NotFoundError as exc:
        raise _not_found(exc) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


__all__ = ["router", "get_notes_service"]
