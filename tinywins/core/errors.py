"""
Custom exception hierarchy for the TinyWins engine.

Rule: every HTTP error has a machine-readable `code` string so clients
can branch on it without parsing English messages.

Derived-value computations (progress, coverage, streaks) never raise on
odd snapshots; these errors guard entity construction and request input.
"""
from __future__ import annotations

import logging
from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette import status

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Exception classes
# ---------------------------------------------------------------------------

class TinyWinsException(Exception):
    """Base class for all application-level errors."""
    http_status: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "INTERNAL_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict:
        payload: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class InvalidRewardError(TinyWinsException, ValueError):
    http_status = status.HTTP_422_UNPROCESSABLE_ENTITY
    code = "INVALID_REWARD"

    def __init__(self, target_points: int):
        super().__init__(
            message=f"Reward target must be a positive number of stars. Received {target_points}.",
            details={"target_points": target_points},
        )


class InvalidThresholdsError(TinyWinsException, ValueError):
    http_status = status.HTTP_422_UNPROCESSABLE_ENTITY
    code = "INVALID_THRESHOLDS"

    def __init__(self, thresholds: list[int]):
        super().__init__(
            message="Milestone thresholds must be positive integers.",
            details={"thresholds": thresholds},
        )


class UnknownTimezoneError(TinyWinsException, ValueError):
    http_status = status.HTTP_422_UNPROCESSABLE_ENTITY
    code = "UNKNOWN_TIMEZONE"

    def __init__(self, name: str):
        super().__init__(
            message=f"Unknown timezone {name!r}.",
            details={"timezone": name},
        )


# ---------------------------------------------------------------------------
# FastAPI exception handlers
# ---------------------------------------------------------------------------

async def tinywins_exception_handler(request: Request, exc: TinyWinsException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.http_status,
        content=exc.to_dict(),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Return structured 422 with machine-readable field errors."""
    field_errors = []
    for error in exc.errors():
        field_errors.append({
            "field": ".".join(str(loc) for loc in error["loc"] if loc != "body"),
            "message": error["msg"],
            "type": error["type"],
        })
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "code": "VALIDATION_ERROR",
            "message": "Request validation failed.",
            "details": {"errors": field_errors},
        },
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "code": "INTERNAL_ERROR",
            "message": "An unexpected error occurred.",
        },
    )
