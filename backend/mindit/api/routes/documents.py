"""HTTP API routes for turning uploaded files and URLs into note content."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from fastapi.responses import JSONResponse

from ...services.summarizer import SummarizerService, get_summarizer_service

logger = logging.getLogger(__name__)

router = APIRouter()

MAX_EXTRACTED_CHARS = 2000


def _media_type(upload: UploadFile) -> str:
    return (upload.content_type or "").split(";")[0].strip().lower()


@router.post("/api/extract-document")
async def extract_document(
    file: Optional[UploadFile] = File(None),
    generate_ai_summary: str = Form("false", alias="generateAISummary"),
    summarizer: SummarizerService = Depends(get_summarizer_service),
):
    """Extract a title and text from an uploaded document.

    Only plain text is read for now; other formats come back with empty content.
    """
    if file is None:
        return JSONResponse({"error": "No file provided"}, status_code=400)

    try:
        payload = {"title": file.filename, "content": ""}
        if _media_type(file) == "text/plain":
            raw = await file.read()
            payload["content"] = raw.decode("utf-8", errors="replace")[:MAX_EXTRACTED_CHARS]

        if generate_ai_summary == "true" and payload["content"]:
            payload["summary"] = await summarizer.summarize(payload["content"])

        logger.info(
            "Extracted document",
            extra={"upload_name": file.filename, "media_type": _media_type(file)},
        )
        return JSONResponse(payload)
    except Exception as exc:
        logger.exception("Error in extract-document: %s", exc)
        return JSONResponse({"error": "Failed to process document"}, status_code=500)


@router.post("/api/fetch-content")
async def fetch_content(request: Request):
    """Placeholder page fetch: echoes the URL as the title with empty content."""
    try:
        body = await request.json()
        url = body.get("url") if isinstance(body, dict) else None
        if not url:
            return JSONResponse({"error": "No URL provided"}, status_code=400)
        return JSONResponse({"title": url, "content": ""})
    except Exception as exc:
        logger.exception("Error fetching content: %s", exc)
        return JSONResponse({"error": "Failed to fetch content"}, status_code=500)


__all__ = ["router", "MAX_EXTRACTED_CHARS"]
