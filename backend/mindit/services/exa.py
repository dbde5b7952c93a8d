"""Exa web search proxy: validate, call out once, normalize the results."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional

import httpx
from fastapi import status

from ..models.search import ExaSearchResult
from .config import AppConfig, get_config

logger = logging.getLogger(__name__)

DEFAULT_NUM_RESULTS = 5
MIN_NUM_RESULTS = 1
MAX_NUM_RESULTS = 100
SNIPPET_LENGTH = 200
SNIPPET_SUFFIX = "..."
SNIPPET_PLACEHOLDER = "No preview available"


class SearchError(Exception):
    """Base class for search failures; carries the HTTP status and response body."""

    default_status = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        error: str,
        *,
        status_code: Optional[int] = None,
        details: Any = None,
    ) -> None:
        super().__init__(error)
        self.error = error
        self.status_code = status_code or self.default_status
        self.details = details

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"error": self.error}
        if self.details is not None:
            payload["details"] = self.details
        return payload


class BadRequest(SearchError):
    default_status = status.HTTP_400_BAD_REQUEST


class ConfigurationError(SearchError):
    default_status = status.HTTP_500_INTERNAL_SERVER_ERROR


class UpstreamFailure(SearchError):
    """Exa answered with a non-success status; that status is passed through."""


def make_snippet(text: Any) -> str:
    if not text:
        return SNIPPET_PLACEHOLDER
    return str(text)[:SNIPPET_LENGTH] + SNIPPET_SUFFIX


def _as_text(value: Any) -> Optional[str]:
    """Scalars become strings; anything else is dropped."""
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, (bool, int, float)):
        return str(value)
    return None


def normalize_result(item: Any) -> ExaSearchResult:
    if not isinstance(item, dict):
        item = {}
    return ExaSearchResult(
        title=_as_text(item.get("title")),
        link=_as_text(item.get("url")),
        snippet=make_snippet(item.get("text")),
        published_date=_as_text(item.get("publishedDate")),
        source=_as_text(item.get("source")),
    )


def normalize_results(data: Any) -> List[ExaSearchResult]:
    """Map every upstream result to one record, in order; no collection means no results."""
    results = data.get("results") if isinstance(data, dict) else None
    if results is None:
        return []
    if not isinstance(results, list):
        logger.warning("Exa returned a non-list results field: %s", type(results).__name__)
        return []
    return [normalize_result(item) for item in results]


def validate_query(query: Any) -> str:
    if not isinstance(query, str) or not query.strip():
        raise BadRequest("No search query provided")
    return query


def clamp_num_results(value: Any) -> int:
    """Coerce ``numResults`` into the range Exa accepts."""
    if value is None:
        return DEFAULT_NUM_RESULTS
    if isinstance(value, bool):
        raise BadRequest("numResults must be an integer")
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if not isinstance(value, int):
        raise BadRequest("numResults must be an integer")

    clamped = max(MIN_NUM_RESULTS, min(MAX_NUM_RESULTS, value))
    if clamped != value:
        logger.info("Clamped numResults", extra={"requested": value, "used": clamped})
    return clamped


class ExaService:
    """Issue one Exa search per call; nothing is cached."""

    def __init__(
        self,
        config: AppConfig | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config or get_config()
        self.transport = transport

    @property
    def configured(self) -> bool:
        return bool(self.config.exa_api_key)

    def require_api_key(self) -> str:
        if not self.config.exa_api_key:
            raise ConfigurationError("Exa API key not configured")
        return self.config.exa_api_key

    async def _call_exa(self, api_key: str, query: str, num_results: int) -> httpx.Response:
        headers = {
            "Content-Type": "application/json",
            "x-api-key": api_key,
        }
        payload = {
            "query": query,
            "numResults": num_results,
            "useAutoprompt": True,
            "type": "keyword",
        }
        async with httpx.AsyncClient(
            timeout=self.config.http_timeout_seconds, transport=self.transport
        ) as client:
            return await client.post(self.config.exa_api_url, headers=headers, json=payload)

    async def search(self, query: Any, num_results: Any = DEFAULT_NUM_RESULTS) -> List[ExaSearchResult]:
        """
        Search Exa and return normalized results.

        Raises ConfigurationError without an API key (checked before anything
        else), BadRequest for an empty query or a non-integer count, and
        UpstreamFailure when Exa answers with a non-success status.
        """
        api_key = self.require_api_key()
        query = validate_query(query)
        count = clamp_num_results(num_results)

        response = await self._call_exa(api_key, query, count)

        if not response.is_success:
            error_text = response.text
            logger.error("Exa API error: %s", error_text, extra={"status": response.status_code})
            try:
                error_json = json.loads(error_text)
                logger.error("Exa API error details: %s", error_json)
            except ValueError:
                logger.error("Exa API error (raw): %s", error_text)
            raise UpstreamFailure(
                "Failed to fetch search results",
                status_code=response.status_code,
                details=error_text,
            )

        results = normalize_results(response.json())
        logger.info("Exa search completed", extra={"requested": count, "returned": len(results)})
        return results


def get_exa_service() -> ExaService:
    return ExaService(get_config())


__all__ = [
    "BadRequest",
    "ConfigurationError",
    "ExaService",
    "SearchError",
    "UpstreamFailure",
    "clamp_num_results",
    "get_exa_service",
    "make_snippet",
    "normalize_result",
    "normalize_results",
    "validate_query",
]
