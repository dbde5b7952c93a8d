"""HTTP API route for AI note summaries."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from ...services.summarizer import SummarizerService, get_summarizer_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/api/summarize")
async def summarize(
    request: Request,
    service: SummarizerService = Depends(get_summarizer_service),
):
    """Summarize ``content``; the summary is empty when no model is configured."""
    try:
        body = await request.json()
        content = body.get("content") if isinstance(body, dict) else None
        if not content:
            return JSONResponse({"error": "No content provided"}, status_code=400)

        summary = await service.summarize(str(content))
        return JSONResponse({"summary": summary})
    except Exception as exc:
        logger.exception("Error generating summary: %s", exc)
        return JSONResponse({"error": "Failed to generate summary"}, status_code=500)


__all__ = ["router"]
