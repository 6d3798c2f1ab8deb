"""Pydantic schemas for the backend HTTP surface."""

from __future__ import annotations

from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field


class AnalyzeRequest(BaseModel):
    """Base64 photo, optionally wrapped in a ``data:`` URL.

    ``image`` is optional at the schema level so a missing field is reported
    as a 400 by the route instead of a 422.
    """

    image: Optional[str] = None


class SearchRequest(BaseModel):
    """Free-text query and/or barcode; at least one must be non-empty."""

    query: Optional[str] = None
    barcode: Optional[str] = None


class SearchResponse(BaseModel):
    products: List[dict] = Field(default_factory=list)


class HealthResponse(BaseModel):
    status: Literal["ok", "error"]
    timestamp: str
    services: Dict[str, bool]


__all__ = ["AnalyzeRequest", "HealthResponse", "SearchRequest", "SearchResponse"]
