"""
Response DTOs for the document endpoints.

The documents themselves are returned verbatim (a JSON object with ``_id``),
so only the create and list envelopes are modelled here.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class DocumentCreatedResponse(BaseModel):
    """Response body for POST /{route} and POST /api/{token}/{route} (201)."""

    model_config = ConfigDict(populate_by_name=True)

    id: str


class DocumentListResponse(BaseModel):
    """One page of documents plus the total match count."""

    model_config = ConfigDict(populate_by_name=True)

    data: list[dict[str, Any]]
    total_count: int = Field(alias="totalCount")
