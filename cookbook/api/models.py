"""
Pydantic models for API request/response schemas.
"""

from pydantic import BaseModel, Field


# === Request Models ===

class AskRequest(BaseModel):
    """Request body for the ask endpoint."""
    question: str = Field(..., max_length=2000, description="User's question")


# === Response Models ===

class SourceInfo(BaseModel):
    """A document used as context for an answer."""
    source_file: str
    similarity: float


class AskResponse(BaseModel):
    """Response body for the ask endpoint."""
    question: str
    answer: str
    sources: list[SourceInfo] = Field(default_factory=list)


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    parent_chunks: int = 0
    child_chunks: int = 0


class SyncedSource(BaseModel):
    """A synced source file."""
    source_file: str
    hash: str


class SourcesResponse(BaseModel):
    """List of synced source files."""
    sources: list[SyncedSource]
    total_count: int


class ErrorResponse(BaseModel):
    """Error response."""
    detail: str
