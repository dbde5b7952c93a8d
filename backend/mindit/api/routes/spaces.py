"""HTTP API routes for spaces."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response, status

from ...models.note import Space, SpaceCreate, SpaceUpdate
from ...services.notes import NotesService, NotFoundError
from .notes import get_notes_service

router = APIRouter()


@router.get("/api/spaces", response_model=list[Space])
async def list_spaces(service: NotesService = Depends(get_notes_service)):
    return await service.list_spaces()


@router.post("/api/spaces", response_model=Space, status_code=201)
async def create_space(create: SpaceCreate, service: NotesService = Depends(get_notes_service)):
    return await service.create_space(create)


@router.patch("/api/spaces/{space_id}", response_model=Space)
async def update_space(
    space_id: str, update: SpaceUpdate, service: NotesService = Depends(get_notes_service)
):
    try:
        return await service.update_space(space_id, update)
    except NotFoundError as exc:
        raise HTTPException(
            status_code=404, detail={"error": "space_not_found", "message": str(exc)}
        ) from exc


@router.delete("/api/spaces/{space_id}", status_code=204)
async def delete_space(space_id: str, service: NotesService = Depends(get_notes_service)):
    try:
        await service.delete_space(space_id)
    except NotFoundError as exc:
        raise HTTPException(
            status_code=404, detail={"error": "space_not_found", "message": str(exc)}
        ) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


__all__ = ["router"]
