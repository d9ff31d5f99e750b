"""
Pydantic models for mock backend responses.
"""

from __future__ import annotations

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict


class HealthResponse(BaseModel):
    ok: bool = True
    resources: list[str] = Field(default_factory=list, description="Collections served under /api")


class CountResponse(BaseModel):
    """Single collection count."""

    model_config = ConfigDict(json_schema_extra={"examples": [{"count": 12}]})

    count: int = Field(ge=0)


class CombinedCountResponse(BaseModel):
    """Dashboard counters served from `/api/books/count`."""

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {
                    "writerCount": 4,
                    "translatorCount": 2,
                    "bookCount": 10,
                    "articleCount": 35,
                    "feedbackCount": 7,
                    "adminCount": 0,
                }
            ]
        }
    )

    writerCount: int = 0
    translatorCount: int = 0
    bookCount: int = 0
    articleCount: int = 0
    feedbackCount: int = 0
    adminCount: int = 0


class DeleteResponse(BaseModel):
    message: str = "Deleted successfully"
    id: int


class ErrorResponse(BaseModel):
    """Error envelope; the panel reads `message` first."""

    message: str
    error: str = Field(description="Machine-readable error code")
