"""Search request/response models."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ExaSearchResult(BaseModel):
    """One normalized result from the external search API."""

    model_config = ConfigDict(populate_by_name=True)

    title: Optional[str] = None
    link: Optional[str] = Field(None, description="Result URL")
    snippet: str = Field(..., description="First 200 characters of the page text plus '...'")
    published_date: Optional[str] = Field(None, alias="publishedDate")
    source: Optional[str] = None


class ExaSearchResponse(BaseModel):
    results: List[ExaSearchResult] = Field(default_factory=list)

    def to_payload(self) -> Dict[str, Any]:
        return {
            "results": [
                result.model_dump(by_alias=True, exclude_none=True) for result in self.results
            ]
        }


class ExaCheckResponse(BaseModel):
    configured: bool
    message: str


__all__ = ["ExaSearchResult", "ExaSearchResponse", "ExaCheckResponse"]
