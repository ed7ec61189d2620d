"""
Shared schema primitives used across the API.
"""
from typing import Any, Optional
from pydantic import BaseModel


class ErrorDetail(BaseModel):
    """A single field-level validation error."""
    field: str
    message: str
    type: str


class ErrorResponse(BaseModel):
    """Standard error envelope returned for all 4xx/5xx responses."""
    code: str
    message: str
    details: Optional[dict[str, Any]] = None


# Shared `responses=` entry for endpoints that validate domain input.
UNPROCESSABLE = {
    422: {
        "model": ErrorResponse,
        "description": "Request body or domain input failed validation.",
    },
}
