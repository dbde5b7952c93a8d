"""HTTP API routes for image storage setup."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from ...models.auth import Session
from ...services.storage import StorageError, StorageService
from ...services.supabase import SupabaseClient, get_supabase_client
from ..middleware import get_optional_session

logger = logging.getLogger(__name__)

router = APIRouter()


def get_storage_service(
    session: Optional[Session] = Depends(get_optional_session),
    client: SupabaseClient = Depends(get_supabase_client),
) -> StorageService:
    return StorageService(client, access_token=session.access_token if session else None)


@router.get("/api/storage")
async def ensure_storage(service: StorageService = Depends(get_storage_service)):
    """Make sure the public images bucket exists."""
    try:
        return JSONResponse(await service.ensure_images_bucket())
    except StorageError as exc:
        return JSONResponse({"error": exc.message}, status_code=exc.status_code)
    except Exception as exc:
        logger.exception("Error in storage API: %s", exc)
        return JSONResponse({"error": "Internal Server Error"}, status_code=500)


@router.post("/api/storage/test")
async def upload_test_image(
    request: Request, service: StorageService = Depends(get_storage_service)
):
    """Upload a base64 data-URL image and return its public URL."""
    try:
        body = await request.json()
        image = body.get("imageBase64") if isinstance(body, dict) else None
        if not image:
            return JSONResponse({"error": "No image provided"}, status_code=400)

        url = await service.upload_test_image(image)
        return JSONResponse(
            {"success": True, "message": "Image uploaded successfully", "url": url}
        )
    except StorageError as exc:
        return JSONResponse({"error": exc.message}, status_code=exc.status_code)
    except Exception as exc:
        logger.exception("Error in storage test endpoint: %s", exc)
        return JSONResponse({"error": "Internal server error"}, status_code=500)


__all__ = ["router", "get_storage_service"]
