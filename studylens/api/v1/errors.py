from __future__ import annotations

from typing import Any

import structlog
from fastapi import Request
from fastapi.responses import JSONResponse

from studylens.core.observability.correlation import get_correlation_id
from studylens.domain.exceptions import (
    AIQuotaExceededError,
    AIRateLimitError,
    AIServiceError,
    NoAnalyzedMaterialsError,
    NoMaterialsError,
    NotFoundError,
    SignedUrlError,
    StudyLensError,
)

logger = structlog.get_logger(__name__)


def _error_example(code: str, message: str, details: Any) -> dict[str, Any]:
    return {
        "error": {
            "code": code,
            "message": message,
            "details": details,
            "request_id": "f6a4c304-1ce0-4cf5-9d8f-5d4deca4f51f",
        }
    }


ERROR_RESPONSES: dict[int, dict[str, Any]] = {
    401: {
        "description": "Unauthorized",
        "content": {"application/json": {"example": _error_example("UNAUTHORIZED", "Unauthorized", None)}},
    },
    402: {
        "description": "AI credits depleted",
        "content": {
            "application/json": {
                "example": _error_example(
                    "AI_CREDITS_DEPLETED",
                    "AI credits depleted. Please add credits to continue.",
                    {"retryable": True},
                )
            }
        },
    },
    404: {
        "description": "Not Found",
        "content": {
            "application/json": {
                "example": _error_example(
                    "COLLECTION_NOT_FOUND",
                    "Collection not found",
                    {"collection_id": "9a130ffb-b397-475b-a267-a1cc048b6d08"},
                )
            }
        },
    },
    409: {
        "description": "Collection not ready",
        "content": {
            "application/json": {
                "example": _error_example("NO_ANALYZED_MATERIALS", "No analyzed materials found", None)
            }
        },
    },
    422: {
        "description": "Unprocessable Entity",
        "content": {
            "application/json": {
                "example": _error_example(
                    "FRONTEND_CONTRACT_BREACH",
                    "Request validation failed",
                    [{"loc": ["query", "view"], "msg": "Input should be 'topics' or 'pages'"}],
                )
            }
        },
    },
    429: {
        "description": "Too Many Requests",
        "content": {
            "application/json": {
                "example": _error_example(
                    "AI_RATE_LIMITED",
                    "Rate limit exceeded. Please try again later.",
                    {"retryable": True},
                )
            }
        },
    },
    500: {
        "description": "Internal Server Error",
        "content": {"application/json": {"example": _error_example("INTERNAL_ERROR", "Internal server error", None)}},
    },
    502: {
        "description": "AI provider failure",
        "content": {
            "application/json": {
                "example": _error_example(
                    "AI_MALFORMED_RESPONSE", "AI response did not match the expected schema", {"retryable": False}
                )
            }
        },
    },
}


class ApiError(Exception):
    def __init__(self, status_code: int, code: str, message: str, details: Any = None):
        super().__init__(message)
        self.status_code = int(status_code)
        self.code = code
        self.message = message
        self.details = details


def _status_for(exc: StudyLensError) -> int:
    if isinstance(exc, NotFoundError):
        return 404
    if isinstance(exc, (NoMaterialsError, NoAnalyzedMaterialsError)):
        return 409
    if isinstance(exc, AIRateLimitError):
        return 429
    if isinstance(exc, AIQuotaExceededError):
        return 402
    if isinstance(exc, (AIServiceError, SignedUrlError)):
        return 502
    return 500


def to_api_error(exc: StudyLensError) -> ApiError:
    details = exc.details
    if isinstance(exc, AIServiceError):
        base = details if isinstance(details, dict) else ({"reason": details} if details else {})
        details = {**base, "retryable": exc.retryable}
    return ApiError(status_code=_status_for(exc), code=exc.code, message=exc.message, details=details)


def error_response(status_code: int, code: str, message: str, details: Any = None) -> JSONResponse:
    """Every error leaves the API in this envelope, tagged with the request's correlation id."""
    envelope = {"code": code, "message": message, "details": details, "request_id": get_correlation_id()}
    return JSONResponse(status_code=status_code, content={"error": envelope})


async def api_error_exception_handler(_: Request, exc: ApiError) -> JSONResponse:
    return error_response(exc.status_code, exc.code, exc.message, exc.details)


async def domain_error_exception_handler(request: Request, exc: StudyLensError) -> JSONResponse:
    api_error = to_api_error(exc)
    log = logger.error if api_error.status_code >= 500 else logger.warning
    log("domain_error", endpoint=str(request.url), code=exc.code, status_code=api_error.status_code, error=exc.message)
    return await api_error_exception_handler(request, api_error)
