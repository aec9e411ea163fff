"""Custom exceptions and error handling"""
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from fastapi import Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
import structlog

from ..core.rate_limit import RateLimitDecision
from ..prompts.chat import rate_limit_message


logger = structlog.get_logger(__name__)


class APIError(Exception):
    """Base API error with error envelope"""

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 400,
        details: Optional[Dict[str, Any]] = None
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


class RateLimitExceeded(APIError):
    """A caller used up its chat allowance for the current window.

    This is routine traffic, not a server fault.
    """

    def __init__(self, decision: RateLimitDecision, limit: int):
        super().__init__(
            code="RATE_LIMIT",
            message=rate_limit_message(decision.reset_at, limit),
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            details={"limit": limit},
        )
        self.decision = decision
        self.limit = limit


def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", "unknown")


def create_error_response(
    code: str,
    message: str,
    request_id: str,
    details: Optional[Dict[str, Any]] = None,
    status_code: int = 400,
    extra: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    """Create standardized error response"""
    content: Dict[str, Any] = {
        "error": {
            "code": code,
            "message": message,
            "request_id": request_id,
            "details": details or {}
        }
    }
    if extra:
        content.update(extra)
    return JSONResponse(status_code=status_code, content=content, headers=headers)


async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Handle exhausted chat allowances with a friendly 429"""
    request_id = _request_id(request)
    decision = exc.decision

    logger.info(
        "rate_limited",
        path=request.url.path,
        reset_at=decision.reset_at_ms,
        request_id=request_id
    )

    retry_after = max(0, int(decision.reset_at - datetime.now(tz=timezone.utc).timestamp()))
    return create_error_response(
        code=exc.code,
        message=exc.message,
        request_id=request_id,
        details=exc.details,
        status_code=exc.status_code,
        extra={
            "message": exc.message,
            "resetAt": decision.reset_at_ms,
            "remaining": 0,
        },
        headers={"Retry-After": str(retry_after)},
    )


async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    """Handle APIError exceptions"""
    request_id = _request_id(request)

    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        "api_error",
        code=exc.code,
        message=exc.message,
        status_code=exc.status_code,
        request_id=request_id,
        path=request.url.path
    )

    return create_error_response(
        code=exc.code,
        message=exc.message,
        request_id=request_id,
        details=exc.details,
        status_code=exc.status_code
    )


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handle Pydantic validation errors"""
    request_id = _request_id(request)
    errors = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
        for err in exc.errors()
    ]

    logger.warning(
        "validation_error",
        errors=errors,
        request_id=request_id,
        path=request.url.path
    )

    return create_error_response(
        code="VALIDATION_ERROR",
        message="Request validation failed",
        request_id=request_id,
        details={"errors": errors},
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Handle HTTP exceptions"""
    request_id = _request_id(request)

    logger.warning(
        "http_exception",
        status_code=exc.status_code,
        detail=exc.detail,
        request_id=request_id,
        path=request.url.path
    )

    return create_error_response(
        code="HTTP_ERROR",
        message=str(exc.detail),
        request_id=request_id,
        status_code=exc.status_code,
        headers=getattr(exc, "headers", None),
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions"""
    request_id = _request_id(request)

    logger.error(
        "unhandled_exception",
        exc_info=exc,
        request_id=request_id,
        path=request.url.path
    )

    return create_error_response(
        code="INTERNAL_ERROR",
        message="An internal error occurred",
        request_id=request_id,
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR
    )
