"""HTTP API routes for Exa web search."""

from __future__ import annotations

import logging
import traceback
from typing import Any, Dict

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from ...models.search import ExaCheckResponse, ExaSearchResponse
from ...services.config import AppConfig, get_config
from ...services.exa import (
    DEFAULT_NUM_RESULTS,
    ExaService,
    SearchError,
    get_exa_service,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _internal_error_payload(exc: Exception, config: AppConfig) -> Dict[str, Any]:
    details: Dict[str, Any] = {"name": type(exc).__name__}
    if config.is_development:
        details["stack"] = "".join(
            traceback.format_exception(type(exc), exc, exc.__traceback__)
        )
    return {"error": str(exc) or "Failed to perform Exa search", "details": details}


@router.post("/api/exa-search")
async def exa_search(
    request: Request,
    service: ExaService = Depends(get_exa_service),
):
    """Search the web through Exa and return normalized results."""
    try:
        service.require_api_key()

        body = await request.json()
        if not isinstance(body, dict):
            body = {}

        results = await service.search(
            body.get("query"), body.get("numResults", DEFAULT_NUM_RESULTS)
        )
        return JSONResponse(ExaSearchResponse(results=results).to_payload())
    except SearchError as exc:
        return JSONResponse(exc.to_payload(), status_code=exc.status_code)
    except Exception as exc:
        logger.exception("Error in Exa search: %s", exc)
        return JSONResponse(
            _internal_error_payload(exc, service.config),
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )


@router.get("/api/exa-check", response_model=ExaCheckResponse)
async def exa_check(config: AppConfig = Depends(get_config)):
    """Report whether an Exa API key is configured."""
    configured = bool(config.exa_api_key)
    message = (
        "Exa API key is configured"
        if configured
        else "Exa API key is not configured. Please set EXA_API_KEY in the server environment."
    )
    return ExaCheckResponse(configured=configured, message=message)


__all__ = ["router"]
